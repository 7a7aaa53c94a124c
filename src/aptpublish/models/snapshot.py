from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from aptpublish.models.packages import PackageList


class Snapshot(BaseModel):
    """Immutable named set of exact package versions."""

    model_config = ConfigDict(frozen=True)

    uuid: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    description: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    refs: tuple[str, ...] = ()

    @classmethod
    def from_package_list(cls, name: str, packages: PackageList, description: str = "") -> "Snapshot":
        return cls(name=name, description=description, refs=tuple(sorted(packages.keys())))

    def ref_list(self) -> tuple[str, ...]:
        return self.refs

    def __len__(self) -> int:
        return len(self.refs)
