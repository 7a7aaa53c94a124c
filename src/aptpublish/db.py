"""Package storage backed by SQLModel."""

import logging
from collections.abc import Iterable, Iterator

from sqlalchemy.engine import Engine
from sqlmodel import JSON, Field, Session, SQLModel, create_engine, func, select

from .constants import DATA_DIR, DB_URL
from .errors import PackageNotFoundError
from .models import Package, PackageFile

logger = logging.getLogger(__name__)


class PackageRecord(SQLModel, table=True):
    """Stored form of a package; ``control`` keeps the paragraph in field order."""

    key: str = Field(primary_key=True)
    name: str = Field(index=True)
    version: str
    architecture: str = Field(index=True)
    control: dict = Field(default_factory=dict, sa_type=JSON, repr=False)
    files: list = Field(default_factory=list, sa_type=JSON, repr=False)

    @classmethod
    def from_package(cls, pkg: Package) -> "PackageRecord":
        return cls(
            key=pkg.key,
            name=pkg.name,
            version=pkg.version,
            architecture=pkg.architecture,
            control=dict(pkg.fields),
            files=[f.model_dump(exclude={"pool_path"}) for f in pkg.files],
        )

    def to_package(self) -> Package:
        return Package(
            name=self.name,
            version=self.version,
            architecture=self.architecture,
            fields=self.control,
            files=tuple(PackageFile(**f) for f in self.files),
        )


def create_db_engine(url: str | None = None) -> Engine:
    """Create an engine and make sure the tables exist.

    Args:
        url: Database URL. Defaults to the sqlite database in the data directory
    """
    if url is None:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        url = DB_URL
    engine = create_engine(url)
    SQLModel.metadata.create_all(engine)
    return engine


class PackageCollection:
    """All known packages, addressed by package key."""

    def __init__(self, engine: Engine | None = None):
        self.engine = engine if engine is not None else create_db_engine()

    def update(self, pkg: Package) -> None:
        """Insert a package, replacing any stored package with the same key."""
        with Session(self.engine) as session:
            session.merge(PackageRecord.from_package(pkg))
            session.commit()

    def update_all(self, packages: Iterable[Package]) -> int:
        count = 0
        with Session(self.engine) as session:
            for pkg in packages:
                session.merge(PackageRecord.from_package(pkg))
                count += 1
            session.commit()
        logger.debug(f"Stored {count} packages")
        return count

    def by_key(self, key: str) -> Package:
        """Load a package.

        Raises:
            PackageNotFoundError: if no package has this key
        """
        with Session(self.engine) as session:
            record = session.get(PackageRecord, key)
            if record is None:
                raise PackageNotFoundError(key)
            return record.to_package()

    def resolve(self, ref: str) -> Package:
        return self.by_key(ref)

    def __len__(self) -> int:
        with Session(self.engine) as session:
            count = session.scalar(select(func.count()).select_from(PackageRecord))
            return count if count is not None else 0

    def __iter__(self) -> Iterator[Package]:
        with Session(self.engine) as session:
            records = session.exec(select(PackageRecord).order_by(PackageRecord.key)).all()
            return iter([record.to_package() for record in records])
