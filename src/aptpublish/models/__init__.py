"""Expose data models."""

from .checksum import ChecksumInfo
from .package import Dependency, Package, PackageFile, Relation, package_key
from .packages import PackageList
from .snapshot import Snapshot
from .stanza import Stanza

__all__ = [
    "ChecksumInfo",
    "Dependency",
    "Package",
    "PackageFile",
    "PackageList",
    "Relation",
    "Snapshot",
    "Stanza",
    "package_key",
]
