"""Package pool and published repository trees on disk."""

import logging
import os
import shutil
from pathlib import Path
from typing import TextIO

from aptpublish.constants import POOL_DIR, PUBLIC_DIR
from aptpublish.errors import ChecksumError, FileSystemError
from aptpublish.models import ChecksumInfo, PackageFile
from aptpublish.utils import checksums_for_path, compress_file

logger = logging.getLogger(__name__)


def _link_or_copy(source: Path, destination: Path) -> None:
    try:
        os.link(source, destination)
    except OSError:
        # cross-device or no hard link support
        shutil.copyfile(source, destination)


def public_pool_dir(component: str, source: str) -> str:
    """Directory for a source package in a published pool, e.g. ``pool/main/libf/libfoo``."""
    letter = source[:4] if source.startswith("lib") else source[:1]
    return f"pool/{component}/{letter}/{source}"


class PackagePool:
    """Internal storage of package files, addressed by MD5 of their contents."""

    def __init__(self, root: Path | None = None):
        """Initialize the pool.

        Args:
            root: Directory holding pool files. Defaults to the pool in the data directory
        """
        if root is None:
            root = POOL_DIR
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, file: PackageFile) -> Path:
        return self.root / file.pool_path

    def import_file(self, source: Path) -> PackageFile:
        """Place a package file into the pool.

        Args:
            source: Path to the file to import

        Returns:
            The pool entry for the file
        """
        try:
            info = checksums_for_path(source)
        except OSError as e:
            raise ChecksumError(f"unable to compute checksums of {source}: {e}") from e

        file = PackageFile(
            filename=source.name,
            size=info.size,
            md5=info.md5,
            sha1=info.sha1,
            sha256=info.sha256,
        )
        target = self.path(file)
        if target.exists():
            logger.debug(f"{source.name} already in pool at {target}")
            return file

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            _link_or_copy(source, target)
        except OSError as e:
            raise FileSystemError("import", target, str(e)) from e
        logger.debug(f"Imported {source} into pool at {target}")
        return file

    def verify(self, file: PackageFile) -> bool:
        """Check that the pool holds ``file`` with the expected size.

        Contents are not hashed; the pool path already encodes the MD5.
        """
        target = self.path(file)
        return target.is_file() and target.stat().st_size == file.size


class PublicRepository:
    """Filesystem operations on the root that published repositories are written to.

    All paths taken by methods are relative to the root.
    """

    def __init__(self, root: Path | None = None, pool: PackagePool | None = None):
        if root is None:
            root = PUBLIC_DIR
        self.root = root
        self.pool = pool if pool is not None else PackagePool()
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, relative_path: str | Path) -> Path:
        return self.root / relative_path

    def mkdir(self, relative_path: str | Path) -> Path:
        """Create a directory (and parents); existing directories are fine."""
        path = self.path(relative_path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError("mkdir", path, str(e)) from e
        return path

    def create_file(self, relative_path: str | Path) -> TextIO:
        """Open a file for writing text, truncating it if it exists."""
        path = self.path(relative_path)
        try:
            return path.open("w", encoding="utf-8", newline="\n")
        except OSError as e:
            raise FileSystemError("create", path, str(e)) from e

    def compress_file(self, relative_path: str | Path) -> None:
        path = self.path(relative_path)
        try:
            compress_file(path)
        except OSError as e:
            raise FileSystemError("compress", path, str(e)) from e

    def checksums_for_file(self, relative_path: str | Path) -> ChecksumInfo:
        path = self.path(relative_path)
        try:
            return checksums_for_path(path)
        except OSError as e:
            raise ChecksumError(f"unable to compute checksums of {path}: {e}") from e

    def link_from_pool(self, file: PackageFile, prefix: str, component: str, source: str) -> str:
        """Make a pool file available in the published pool of ``prefix``.

        Returns:
            Path of the published file relative to ``prefix``, as used in Filename fields
        """
        relative_path = f"{public_pool_dir(component, source)}/{file.filename}"
        source_path = self.pool.path(file)
        target = self.path(Path(prefix) / relative_path)

        try:
            if not self.pool.verify(file):
                raise FileSystemError("link", source_path, "file is missing from pool or has the wrong size")
            target.parent.mkdir(parents=True, exist_ok=True)
            if target.exists():
                if target.samefile(source_path) or checksums_for_path(target).md5 == file.md5:
                    return relative_path
                raise FileSystemError("link", target, "file already exists and is different")
            _link_or_copy(source_path, target)
        except OSError as e:
            raise FileSystemError("link", target, str(e)) from e

        logger.debug(f"Linked {source_path} to {target}")
        return relative_path
