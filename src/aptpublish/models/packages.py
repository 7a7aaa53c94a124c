"""Indexed, mutable list of packages."""

import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Protocol

from aptpublish.errors import PackageConflictError
from aptpublish.models.package import Dependency, Package
from aptpublish.utils import sort_architectures

if TYPE_CHECKING:
    from aptpublish.query import PackageQuery

logger = logging.getLogger(__name__)


class PackageResolver(Protocol):
    def resolve(self, ref: str) -> Package: ...


class PackageList:
    """Packages keyed by ``"<architecture> <name> <version>"``.

    A secondary index by package name backs dependency search, so that a
    dependency lookup only compares versions of same-named packages.
    """

    def __init__(self):
        self._packages: dict[str, Package] = {}
        self._by_name: dict[str, list[Package]] = {}

    @classmethod
    def from_packages(cls, packages: Iterable[Package]) -> "PackageList":
        result = cls()
        for pkg in packages:
            result.add(pkg)
        return result

    @classmethod
    def from_ref_list(cls, refs: Iterable[str], resolver: PackageResolver) -> "PackageList":
        """Materialize a list from package references.

        Raises:
            PackageNotFoundError: if a reference can't be resolved
        """
        result = cls()
        for ref in refs:
            result.add(resolver.resolve(ref))
        logger.debug(f"Loaded {len(result)} packages from reference list")
        return result

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(list(self._packages.values()))

    def __contains__(self, key: object) -> bool:
        return key in self._packages

    def __repr__(self) -> str:
        return f"PackageList({len(self)} packages)"

    def keys(self) -> list[str]:
        return list(self._packages)

    def get(self, key: str) -> Package | None:
        return self._packages.get(key)

    def add(self, pkg: Package) -> None:
        """Add a package; re-adding the same package is a no-op.

        Raises:
            PackageConflictError: if a different package has the same key
        """
        existing = self._packages.get(pkg.key)
        if existing is not None:
            if existing != pkg:
                raise PackageConflictError(f"conflict in package {pkg.key}")
            return
        self._packages[pkg.key] = pkg
        self._by_name.setdefault(pkg.name, []).append(pkg)

    def remove(self, key: str) -> None:
        pkg = self._packages.pop(key, None)
        if pkg is None:
            return
        same_name = self._by_name[pkg.name]
        same_name.remove(pkg)
        if not same_name:
            del self._by_name[pkg.name]

    def append(self, other: "PackageList") -> None:
        for pkg in other:
            self.add(pkg)

    def architectures(self) -> list[str]:
        """Architectures present in the list; ``all`` is implied by any of them."""
        return sort_architectures(pkg.architecture for pkg in self._packages.values() if pkg.architecture != "all")

    def search(self, dep: Dependency, all_matches: bool = False) -> list[Package]:
        """Find packages satisfying ``dep`` with Debian version ordering.

        Args:
            dep: The dependency to satisfy
            all_matches: Return every match rather than just the first one
        """
        result = []
        for pkg in self._by_name.get(dep.name, []):
            if pkg.matches_dependency(dep):
                result.append(pkg)
                if not all_matches:
                    break
        return result

    def scan(self, query: "PackageQuery") -> "PackageList":
        """Evaluate ``query`` against every package, returning the matches as a new list."""
        result = PackageList()
        for pkg in self._packages.values():
            if query.matches(pkg):
                result.add(pkg)
        return result

    def filter(self, query: "PackageQuery") -> "PackageList":
        return query.query(self)
