"""Reading Packages indices."""

import bz2
import gzip
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from debian import deb822

from aptpublish.models import Package, PackageList

if TYPE_CHECKING:
    from aptpublish.db import PackageCollection

logger = logging.getLogger(__name__)


def iter_packages_entries(local_path: Path) -> Iterator[dict]:
    """Stream package entries from a Packages, Packages.gz or Packages.bz2 file."""

    def _open_text_stream():
        if local_path.suffix == ".gz":
            return gzip.open(local_path, "rt", encoding="utf-8")
        if local_path.suffix == ".bz2":
            return bz2.open(local_path, "rt", encoding="utf-8")
        return local_path.open("rt", encoding="utf-8")

    with _open_text_stream() as handle:
        for paragraph in deb822.Packages.iter_paragraphs(handle, use_apt_pkg=False):
            yield dict(paragraph)


def load_packages_file(local_path: Path) -> PackageList:
    """Parse a Packages index into a package list.

    Raises:
        ValueError: if an entry lacks Package, Version or Architecture
    """
    return PackageList.from_packages(Package.from_control(entry) for entry in iter_packages_entries(local_path))


def import_packages_file(local_path: Path, collection: "PackageCollection") -> int:
    """Store every package of a Packages index in ``collection``.

    Returns:
        Number of packages imported
    """
    count = collection.update_all(Package.from_control(entry) for entry in iter_packages_entries(local_path))
    logger.info(f"Imported {count} packages from {local_path}")
    return count
