import logging

from rich.logging import RichHandler

from .errors import AptPublishError, PublishError
from .models import Dependency, Package, PackageList, Relation, Snapshot, Stanza
from .publish import PublishedRepo

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(rich_tracebacks=True),
    ],
)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

__all__ = [
    "AptPublishError",
    "Dependency",
    "Package",
    "PackageList",
    "PublishError",
    "PublishedRepo",
    "Relation",
    "Snapshot",
    "Stanza",
]
