"""Packages, package files and Debian dependencies."""

import os
from collections.abc import Mapping
from enum import Enum
from fnmatch import fnmatchcase

from debian.deb822 import PkgRelation
from debian.debian_support import version_compare
from pydantic import BaseModel, ConfigDict, Field, computed_field

from aptpublish.errors import QueryInternalError, QueryNotImplementedError
from aptpublish.models.stanza import Stanza


def package_key(architecture: str, name: str, version: str) -> str:
    """Build the key identifying a package in lists, collections and snapshots."""
    return f"{architecture} {name} {version}"


class Relation(str, Enum):
    """Relation between a package version (or field value) and an operand."""

    DONT_CARE = ""
    EQUAL = "="
    GREATER = ">>"
    GREATER_OR_EQUAL = ">="
    LESS = "<<"
    LESS_OR_EQUAL = "<="
    PATTERN_MATCH = "%"
    REGEXP = "~"


_RELOPS = {
    "=": Relation.EQUAL,
    ">>": Relation.GREATER,
    ">": Relation.GREATER,
    ">=": Relation.GREATER_OR_EQUAL,
    "<<": Relation.LESS,
    "<": Relation.LESS,
    "<=": Relation.LESS_OR_EQUAL,
}


class Dependency(BaseModel):
    """A version-constrained reference to a package."""

    model_config = ConfigDict(frozen=True)

    name: str
    relation: Relation = Relation.DONT_CARE
    version: str = ""
    architecture: str | None = None

    @classmethod
    def parse(cls, text: str) -> "Dependency":
        """Parse a single Debian relation such as ``libc6 (>= 2.36) [amd64]``.

        Raises:
            ValueError: if ``text`` is empty or holds more than one relation
        """
        groups = PkgRelation.parse_relations(text)
        if len(groups) != 1 or len(groups[0]) != 1:
            raise ValueError(f"expected exactly one relation, got {text!r}")
        rel = groups[0][0]
        if not rel.get("name"):
            raise ValueError(f"unable to parse dependency {text!r}")

        relation, version = Relation.DONT_CARE, ""
        if rel.get("version"):
            relop, version = rel["version"]
            try:
                relation = _RELOPS[relop]
            except KeyError:
                raise ValueError(f"unknown relation {relop!r} in {text!r}") from None

        architecture = None
        arches = [a for a in rel.get("arch") or [] if a.enabled]
        if len(arches) > 1:
            raise ValueError(f"only one architecture is supported, got {text!r}")
        if arches:
            architecture = arches[0].arch

        return cls(name=rel["name"], relation=relation, version=version, architecture=architecture)

    def __str__(self) -> str:
        result = self.name
        if self.relation != Relation.DONT_CARE:
            result += f" ({self.relation.value} {self.version})"
        if self.architecture:
            result += f" [{self.architecture}]"
        return result


class PackageFile(BaseModel):
    """A file belonging to a package, stored in the package pool."""

    model_config = ConfigDict(frozen=True)

    filename: str
    size: int
    md5: str
    sha1: str = ""
    sha256: str = ""

    @computed_field
    @property
    def pool_path(self) -> str:
        """Location inside the pool, addressed by content."""
        return f"{self.md5[0:2]}/{self.md5[2:4]}/{self.filename}"


class Package(BaseModel):
    """A binary package: identity plus its full control paragraph."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    architecture: str
    fields: dict[str, str] = Field(default_factory=dict, repr=False)
    files: tuple[PackageFile, ...] = ()

    @classmethod
    def from_control(cls, entry: Mapping[str, str]) -> "Package":
        """Build a package from a parsed control paragraph (e.g. a Packages entry).

        Raises:
            ValueError: if Package, Version or Architecture is missing
        """
        name = entry.get("Package")
        version = entry.get("Version")
        architecture = entry.get("Architecture")
        if not name or not version or not architecture:
            raise ValueError(f"control paragraph lacks Package/Version/Architecture: {dict(entry)!r}")

        files: tuple[PackageFile, ...] = ()
        if filename := entry.get("Filename"):
            files = (
                PackageFile(
                    filename=os.path.basename(filename),
                    size=int(entry.get("Size", 0)),
                    md5=entry.get("MD5sum", ""),
                    sha1=entry.get("SHA1", ""),
                    sha256=entry.get("SHA256", ""),
                ),
            )

        return cls(name=name, version=version, architecture=architecture, fields=dict(entry), files=files)

    @property
    def key(self) -> str:
        return package_key(self.architecture, self.name, self.version)

    @property
    def source_name(self) -> str:
        source = self.fields.get("Source")
        return source.split()[0] if source else self.name

    @property
    def source_version(self) -> str:
        # "Source: foo (1.2-3)" names a source version differing from the binary one
        source = self.fields.get("Source", "")
        if "(" in source:
            return source.split("(", 1)[1].rstrip(")").strip()
        return self.version

    def get_field(self, name: str) -> str:
        """Return a control field value; ``$``-prefixed names are computed."""
        match name:
            case "$Source":
                return self.source_name
            case "$SourceVersion":
                return self.source_version
            case "$Architecture":
                return self.architecture
            case "$Version":
                return self.version
            case "Name":
                return self.name
        return self.fields.get(name, "")

    def matches_architecture(self, arch: str) -> bool:
        if self.architecture == "all" and arch != "source":
            return True
        return self.architecture == arch

    def matches_dependency(self, dep: Dependency) -> bool:
        """Check whether this package satisfies ``dep`` using Debian version ordering."""
        if dep.architecture and not self.matches_architecture(dep.architecture):
            return False
        if dep.name != self.name:
            return False

        match dep.relation:
            case Relation.DONT_CARE:
                return True
            case Relation.EQUAL:
                return version_compare(self.version, dep.version) == 0
            case Relation.GREATER:
                return version_compare(self.version, dep.version) > 0
            case Relation.GREATER_OR_EQUAL:
                return version_compare(self.version, dep.version) >= 0
            case Relation.LESS:
                return version_compare(self.version, dep.version) < 0
            case Relation.LESS_OR_EQUAL:
                return version_compare(self.version, dep.version) <= 0
            case Relation.PATTERN_MATCH:
                return fnmatchcase(self.version, dep.version)
            case Relation.REGEXP:
                raise QueryNotImplementedError("regexp matching not implemented yet")
        raise QueryInternalError(f"unknown relation {dep.relation!r}")

    def stanza(self) -> Stanza:
        """A fresh copy of the control paragraph, in its original field order."""
        return Stanza(self.fields)
