"""Predicates over packages and their execution against package lists.

Every node answers three questions: does a package match (``matches``), can
the node be answered by a targeted index lookup instead of a full scan
(``fast``), and what does it select from a list (``query``). ``fast`` is a
property of the tree alone, never of the list contents. Whatever path
``query`` takes, it returns the same packages as a scan with ``matches``
would, in a newly allocated list.
"""

from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Protocol, runtime_checkable

from aptpublish.errors import QueryInternalError, QueryNotImplementedError
from aptpublish.models.package import Dependency, Package, Relation, package_key
from aptpublish.models.packages import PackageList


@runtime_checkable
class PackageQuery(Protocol):
    def matches(self, pkg: Package) -> bool: ...

    def fast(self) -> bool: ...

    def query(self, packages: PackageList) -> PackageList: ...


@dataclass(frozen=True)
class OrQuery:
    """``left | right``"""

    left: PackageQuery
    right: PackageQuery

    def matches(self, pkg: Package) -> bool:
        return self.left.matches(pkg) or self.right.matches(pkg)

    def fast(self) -> bool:
        return self.left.fast() and self.right.fast()

    def query(self, packages: PackageList) -> PackageList:
        if not self.fast():
            return packages.scan(self)
        result = self.left.query(packages)
        result.append(self.right.query(packages))
        return result


@dataclass(frozen=True)
class AndQuery:
    """``left, right``"""

    left: PackageQuery
    right: PackageQuery

    def matches(self, pkg: Package) -> bool:
        return self.left.matches(pkg) and self.right.matches(pkg)

    def fast(self) -> bool:
        return self.left.fast() or self.right.fast()

    def query(self, packages: PackageList) -> PackageList:
        if not self.fast():
            return packages.scan(self)
        if self.left.fast():
            return self.left.query(packages).scan(self.right)
        return self.right.query(packages).scan(self.left)


@dataclass(frozen=True)
class NotQuery:
    """``!query``"""

    negated: PackageQuery

    def matches(self, pkg: Package) -> bool:
        return not self.negated.matches(pkg)

    def fast(self) -> bool:
        return False

    def query(self, packages: PackageList) -> PackageList:
        return packages.scan(self)


@dataclass(frozen=True)
class FieldQuery:
    """Compare a control field against a value.

    ``$Version`` compares with Debian version ordering and ``$Architecture``
    with equality honors ``all``; every other field is compared as a plain
    string.
    """

    field: str
    relation: Relation
    value: str = ""

    def matches(self, pkg: Package) -> bool:
        if self.field == "$Version":
            # relation may be anything here; matches_dependency rejects unknown ones
            dep = Dependency.model_construct(name=pkg.name, relation=self.relation, version=self.value)
            return pkg.matches_dependency(dep)
        if self.field == "$Architecture" and self.relation == Relation.EQUAL:
            return pkg.matches_architecture(self.value)

        field = pkg.get_field(self.field)

        match self.relation:
            case Relation.DONT_CARE:
                return field != ""
            case Relation.EQUAL:
                return field == self.value
            case Relation.GREATER:
                return field > self.value
            case Relation.GREATER_OR_EQUAL:
                return field >= self.value
            case Relation.LESS:
                return field < self.value
            case Relation.LESS_OR_EQUAL:
                return field <= self.value
            case Relation.PATTERN_MATCH:
                return fnmatchcase(field, self.value)
            case Relation.REGEXP:
                raise QueryNotImplementedError("regexp matching not implemented yet")
        raise QueryInternalError(f"unknown relation {self.relation!r}")

    def fast(self) -> bool:
        return False

    def query(self, packages: PackageList) -> PackageList:
        return packages.scan(self)


@dataclass(frozen=True)
class DependencyQuery:
    """Packages satisfying a Debian dependency."""

    dependency: Dependency

    def matches(self, pkg: Package) -> bool:
        return pkg.matches_dependency(self.dependency)

    def fast(self) -> bool:
        return True

    def query(self, packages: PackageList) -> PackageList:
        return PackageList.from_packages(packages.search(self.dependency, all_matches=True))


@dataclass(frozen=True)
class PkgQuery:
    """One exact package."""

    name: str
    version: str
    architecture: str

    def matches(self, pkg: Package) -> bool:
        return pkg.name == self.name and pkg.version == self.version and pkg.architecture == self.architecture

    def fast(self) -> bool:
        return True

    def query(self, packages: PackageList) -> PackageList:
        result = PackageList()
        pkg = packages.get(package_key(self.architecture, self.name, self.version))
        if pkg is not None:
            result.add(pkg)
        return result
