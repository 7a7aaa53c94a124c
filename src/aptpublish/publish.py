"""Publishing snapshots as signed Debian repositories."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from debian import deb822

from aptpublish.constants import RELEASE_DESCRIPTION
from aptpublish.errors import (
    AptPublishError,
    EmptyRepositoryError,
    MissingArchitecturesError,
    PublishError,
)
from aptpublish.models import ChecksumInfo, PackageList, Snapshot, Stanza
from aptpublish.models.packages import PackageResolver
from aptpublish.repository import PublicRepository
from aptpublish.signer import Signer
from aptpublish.utils import release_date, try_parse_date

logger = logging.getLogger(__name__)

# (Release field, ChecksumInfo attribute)
CHECKSUM_FIELDS = (
    ("MD5Sum", "md5"),
    ("SHA1", "sha1"),
    ("SHA256", "sha256"),
)
PACKAGES_VARIANTS = ("", ".gz", ".bz2")


@contextmanager
def _stage(stage: str, message: str) -> Iterator[None]:
    try:
        yield
    except PublishError:
        raise
    except (AptPublishError, OSError) as e:
        raise PublishError(f"{message}: {e}", stage=stage) from e


class PublishedRepo:
    """A snapshot published as a repository at ``<prefix>/dists/<distribution>``.

    Prefix, distribution and component together must be unique among
    published repositories; callers are expected to enforce that.
    """

    def __init__(
        self,
        prefix: str,
        distribution: str,
        component: str,
        architectures: list[str] | None,
        snapshot: Snapshot,
    ):
        """
        Args:
            prefix: Path of the repository below the public root, "." for the root itself
            distribution: Distribution name (e.g., "bookworm")
            component: Component name (e.g., "main")
            architectures: Architectures to publish. None infers them from the snapshot on first publish
            snapshot: Snapshot to publish
        """
        self.prefix = prefix or "."
        self.distribution = distribution
        self.component = component
        self.architectures = list(architectures) if architectures is not None else None
        self.snapshot_uuid = snapshot.uuid
        self._snapshot = snapshot

    def __str__(self) -> str:
        archs = ", ".join(self.architectures or [])
        return f"{self.prefix}/{self.distribution} ({self.component}) [{archs}] publishes {self._snapshot.name}"

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def base_path(self) -> Path:
        return Path(self.prefix) / "dists" / self.distribution

    def packages_path(self, arch: str) -> str:
        """Path of the Packages index for ``arch``, relative to ``base_path``."""
        return f"{self.component}/binary-{arch}/Packages"

    def last_published(self, public: PublicRepository) -> datetime | None:
        """Return the Date of the currently published Release file, if any."""
        release_path = public.path(self.base_path / "Release")
        if not release_path.is_file():
            return None
        try:
            release = deb822.Release(release_path.read_text(encoding="utf-8"))
        except UnicodeDecodeError as e:
            logger.warning(f"Ignoring unreadable {release_path}: {e}")
            return None
        return try_parse_date(release.get("Date"))

    def publish(self, public: PublicRepository, collection: PackageResolver, signer: Signer | None) -> None:
        """Write package indices and a signed Release file for the snapshot.

        Steps run in order and stop at the first failure. Nothing is rolled
        back; publishing again converges to the same tree.

        Args:
            public: Public repository root to write to; its pool provides package files
            collection: Resolves the snapshot's package references
            signer: Signs the Release file. None skips signing

        Raises:
            PublishError: naming the failed stage in ``stage``
        """
        logger.info(f"Publishing {self.snapshot.name} to {self.base_path}")

        with _stage("prepare", "unable to create repository directories"):
            public.mkdir(Path(self.prefix) / "pool")
            public.mkdir(self.base_path)

        with _stage("load", "unable to load packages"):
            packages = PackageList.from_ref_list(self.snapshot.ref_list(), collection)

        if len(packages) == 0:
            raise EmptyRepositoryError()

        if self.architectures is None:
            self.architectures = packages.architectures()
            logger.info(f"Inferred architectures: {' '.join(self.architectures)}")

        if not self.architectures:
            raise MissingArchitecturesError()

        with _stage("prepare", "unable to read previous Release file"):
            previous = self.last_published(public)
        if previous:
            logger.info(f"Replacing {self.base_path} published at {previous:%Y-%m-%d %H:%M:%S}")

        generated_files: dict[str, ChecksumInfo] = {}
        for arch in self.architectures:
            generated_files.update(self._publish_architecture(public, packages, arch))

        release_path = self.base_path / "Release"
        with _stage("release", "unable to create Release file"):
            with public.create_file(release_path) as release_file:
                self.release_stanza(generated_files).write_to(release_file)

        if signer is None:
            logger.warning(f"Signing skipped, {release_path} is unsigned")
            return

        with _stage("sign", "unable to sign Release file"):
            signer.detached_sign(public.path(release_path), public.path(self.base_path / "Release.gpg"))
            signer.clear_sign(public.path(release_path), public.path(self.base_path / "InRelease"))

        logger.info(f"Published {self.snapshot.name} to {self.base_path}")

    def _publish_architecture(
        self, public: PublicRepository, packages: PackageList, arch: str
    ) -> dict[str, ChecksumInfo]:
        relative_path = self.packages_path(arch)
        packages_path = self.base_path / relative_path

        with _stage("prepare", f"unable to create directory for {arch}"):
            public.mkdir(packages_path.parent)

        count = 0
        with _stage("packages", f"unable to process packages for {arch}"):
            with public.create_file(packages_path) as packages_file:
                for pkg in packages:
                    if not pkg.matches_architecture(arch):
                        continue
                    stanza = pkg.stanza()
                    published = [
                        public.link_from_pool(file, self.prefix, self.component, pkg.source_name)
                        for file in pkg.files
                    ]
                    # the first file is the one named by the control paragraph
                    if published:
                        stanza["Filename"] = published[0]
                    stanza.write_to(packages_file)
                    count += 1
        logger.debug(f"Wrote {count} packages to {packages_path}")

        with _stage("compress", f"unable to compress {packages_path}"):
            public.compress_file(packages_path)

        result = {}
        with _stage("checksum", "unable to collect checksums"):
            for suffix in PACKAGES_VARIANTS:
                result[relative_path + suffix] = public.checksums_for_file(f"{packages_path}{suffix}")
        return result

    def release_stanza(self, generated_files: dict[str, ChecksumInfo]) -> Stanza:
        """Build the Release paragraph listing ``generated_files`` in their given order."""
        release = Stanza()
        release["Origin"] = f"{self.prefix} {self.distribution}"
        release["Label"] = f"{self.prefix} {self.distribution}"
        release["Codename"] = self.distribution
        release["Date"] = release_date()
        release["Components"] = self.component
        release["Architectures"] = " ".join(self.architectures or [])
        release["Description"] = RELEASE_DESCRIPTION
        for field, attr in CHECKSUM_FIELDS:
            release[field] = "".join(
                f"\n {getattr(info, attr)} {info.size:8d} {path}" for path, info in generated_files.items()
            )
        return release
