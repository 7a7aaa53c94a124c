"""Tests for aptpublish.models.packages and aptpublish.models.snapshot."""

import pytest
from pydantic import ValidationError

from aptpublish.errors import PackageConflictError, PackageNotFoundError
from aptpublish.models import Dependency, PackageList, Relation, Snapshot
from aptpublish.query import FieldQuery
from conftest import make_package


class _Resolver:
    def __init__(self, packages):
        self.packages = {pkg.key: pkg for pkg in packages}

    def resolve(self, ref):
        try:
            return self.packages[ref]
        except KeyError:
            raise PackageNotFoundError(ref) from None


class TestPackageList:
    def test_add_and_lookup(self):
        packages = PackageList()
        pkg = make_package("foo", "1.0")
        packages.add(pkg)
        assert len(packages) == 1
        assert "amd64 foo 1.0" in packages
        assert packages.get("amd64 foo 1.0") is pkg
        assert packages.get("amd64 foo 2.0") is None

    def test_add_same_package_twice(self):
        packages = PackageList()
        packages.add(make_package("foo", "1.0"))
        packages.add(make_package("foo", "1.0"))
        assert len(packages) == 1

    def test_add_conflicting_package(self):
        packages = PackageList()
        packages.add(make_package("foo", "1.0"))
        with pytest.raises(PackageConflictError):
            packages.add(make_package("foo", "1.0", Section="devel"))

    def test_iteration_keeps_insertion_order(self):
        packages = PackageList.from_packages([make_package("b", "1"), make_package("a", "1"), make_package("c", "1")])
        assert [pkg.name for pkg in packages] == ["b", "a", "c"]

    def test_remove(self):
        packages = PackageList.from_packages([make_package("foo", "1.0"), make_package("foo", "2.0")])
        packages.remove("amd64 foo 1.0")
        packages.remove("amd64 foo 9.9")
        assert packages.keys() == ["amd64 foo 2.0"]
        assert [pkg.version for pkg in packages.search(Dependency(name="foo"), all_matches=True)] == ["2.0"]

    def test_append(self):
        left = PackageList.from_packages([make_package("foo", "1.0"), make_package("bar", "1.0")])
        right = PackageList.from_packages([make_package("bar", "1.0"), make_package("baz", "1.0")])
        left.append(right)
        assert left.keys() == ["amd64 foo 1.0", "amd64 bar 1.0", "amd64 baz 1.0"]
        assert len(right) == 2

    def test_architectures(self, packages):
        assert packages.architectures() == ["i386", "amd64", "arm64"]

    def test_architectures_unknown_sorted_last(self):
        packages = PackageList.from_packages(
            [make_package("a", "1", "zzz"), make_package("b", "1", "amd64"), make_package("c", "1", "alpha")]
        )
        assert packages.architectures() == ["amd64", "alpha", "zzz"]

    def test_architectures_only_all(self):
        assert PackageList.from_packages([make_package("a", "1", "all")]).architectures() == []

    def test_search(self, packages):
        dep = Dependency(name="foo", relation=Relation.GREATER_OR_EQUAL, version="1.5")
        assert len(packages.search(dep)) == 1
        assert {pkg.key for pkg in packages.search(dep, all_matches=True)} == {
            "amd64 foo 1.5",
            "amd64 foo 2.0",
            "i386 foo 1.5",
        }
        assert packages.search(Dependency(name="missing"), all_matches=True) == []

    def test_scan_and_filter(self, packages):
        query = FieldQuery("Section", Relation.EQUAL, "libs")
        scanned = packages.scan(query)
        assert set(scanned.keys()) == {"amd64 baz 3.0", "amd64 libfoo1 1:0.9"}
        assert packages.filter(query).keys() == scanned.keys()

    def test_from_ref_list(self, packages):
        resolver = _Resolver(packages)
        loaded = PackageList.from_ref_list(["amd64 foo 1.0", "all bar 1.0"], resolver)
        assert loaded.keys() == ["amd64 foo 1.0", "all bar 1.0"]

    def test_from_ref_list_missing(self, packages):
        with pytest.raises(PackageNotFoundError):
            PackageList.from_ref_list(["amd64 foo 1.0", "amd64 nope 1.0"], _Resolver(packages))


class TestSnapshot:
    def test_from_package_list(self, packages):
        snapshot = Snapshot.from_package_list("test", packages, description="all of it")
        assert snapshot.name == "test"
        assert snapshot.description == "all of it"
        assert snapshot.ref_list() == tuple(sorted(packages.keys()))
        assert len(snapshot) == len(packages)

    def test_identity(self):
        first = Snapshot(name="a")
        second = Snapshot(name="a")
        assert first.uuid != second.uuid
        assert first.created_at.tzinfo is not None

    def test_immutable(self):
        snapshot = Snapshot(name="a", refs=("amd64 foo 1.0",))
        with pytest.raises(ValidationError):
            snapshot.refs = ()
