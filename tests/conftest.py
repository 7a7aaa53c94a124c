"""Shared fixtures for aptpublish tests."""

from pathlib import Path

import pytest

from aptpublish.db import PackageCollection, create_db_engine
from aptpublish.errors import SigningError
from aptpublish.models import Package, PackageList
from aptpublish.repository import PackagePool, PublicRepository


def make_package(name: str, version: str, architecture: str = "amd64", **extra: str) -> Package:
    """Build a package without files; extra keyword arguments become control fields."""
    control = {"Package": name, "Version": version, "Architecture": architecture}
    control.update({key.replace("_", "-"): value for key, value in extra.items()})
    return Package.from_control(control)


class FakeSigner:
    """Records calls and writes recognizable signature files."""

    def __init__(self):
        self.calls: list[tuple[str, Path, Path]] = []

    def detached_sign(self, source: Path, destination: Path) -> None:
        self.calls.append(("detached", source, destination))
        destination.write_text("SIGNATURE\n")

    def clear_sign(self, source: Path, destination: Path) -> None:
        self.calls.append(("clear", source, destination))
        destination.write_text("SIGNED\n" + source.read_text())


class FailingSigner:
    def detached_sign(self, source: Path, destination: Path) -> None:
        raise SigningError("gpg returned 2: no secret key")

    def clear_sign(self, source: Path, destination: Path) -> None:
        raise SigningError("gpg returned 2: no secret key")


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def pool(tmp_path: Path) -> PackagePool:
    return PackagePool(tmp_path / "pool")


@pytest.fixture
def public(tmp_path: Path, pool: PackagePool) -> PublicRepository:
    return PublicRepository(tmp_path / "public", pool)


@pytest.fixture
def collection(tmp_path: Path) -> PackageCollection:
    return PackageCollection(create_db_engine(f"sqlite:///{tmp_path / 'aptpublish.db'}"))


@pytest.fixture
def add_deb(tmp_path: Path, pool: PackagePool, collection: PackageCollection):
    """Create a package file, import it into the pool and store the package."""
    incoming = tmp_path / "incoming"
    incoming.mkdir()

    def _add_deb(name: str, version: str, architecture: str = "amd64", **extra: str) -> Package:
        deb = incoming / f"{name}_{version}_{architecture}.deb"
        deb.write_bytes(f"!<arch>\n{name} {version} {architecture}\n".encode())
        file = pool.import_file(deb)
        control = {
            "Package": name,
            "Version": version,
            "Architecture": architecture,
            "Maintainer": "Debian QA Group <packages@qa.debian.org>",
        }
        control.update({key.replace("_", "-"): value for key, value in extra.items()})
        control.update(
            {
                "Filename": f"incoming/{deb.name}",
                "Size": str(file.size),
                "MD5sum": file.md5,
                "SHA1": file.sha1,
                "SHA256": file.sha256,
                "Description": f"{name} test package\n Long description of {name}.",
            }
        )
        pkg = Package.from_control(control)
        collection.update(pkg)
        return pkg

    return _add_deb


@pytest.fixture
def packages() -> PackageList:
    return PackageList.from_packages(
        [
            make_package("foo", "1.0"),
            make_package("foo", "1.5"),
            make_package("foo", "2.0"),
            make_package("foo", "1.5", "i386"),
            make_package("bar", "1.0", "all", Priority="optional"),
            make_package("baz", "3.0", Section="libs", Priority="important"),
            make_package("libfoo1", "1:0.9", Source="foo (1.5)", Section="libs"),
            make_package("qux", "1.10", "arm64"),
            make_package("qux", "1.9", "arm64"),
        ]
    )
