import bz2
import datetime
import gzip
import hashlib
import logging
import shutil
from email.utils import format_datetime
from pathlib import Path

from dateutil.parser import parse as parse_date

from aptpublish.constants import N_ORDERED_ARCHITECTURES, ORDERED_ARCHITECTURES
from aptpublish.models.checksum import ChecksumInfo

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def try_parse_date(date_str: str | None) -> datetime.datetime | None:
    """Try to parse a date string into a timestamp.

    Args:
        date_str: The date string to parse (e.g., the Date field of a Release file)

    Returns:
        The parsed timestamp, or None if parsing failed or date_str is None
    """

    try:
        return parse_date(date_str) if date_str else None
    except Exception as e:
        logger.debug(f"Failed to parse date '{date_str}': {e}")
        return None


def release_date(now: datetime.datetime | None = None) -> str:
    """Format a timestamp for the Date field of a Release file (RFC 1123, UTC)."""
    if now is None:
        now = datetime.datetime.now(datetime.UTC)
    return format_datetime(now.astimezone(datetime.UTC), usegmt=True)


def checksums_for_path(path: Path) -> ChecksumInfo:
    """Compute size and MD5/SHA1/SHA256 digests of a file.

    Raises:
        OSError: if the file can't be read
    """
    md5 = hashlib.md5()
    sha1 = hashlib.sha1()
    sha256 = hashlib.sha256()
    size = 0
    with path.open("rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            size += len(chunk)
            md5.update(chunk)
            sha1.update(chunk)
            sha256.update(chunk)
    return ChecksumInfo(size=size, md5=md5.hexdigest(), sha1=sha1.hexdigest(), sha256=sha256.hexdigest())


def compress_file(path: Path) -> tuple[Path, Path]:
    """Write gzip and bzip2 compressed copies next to ``path``.

    The gzip header carries no filename or mtime so output is reproducible.

    Returns:
        Paths of the .gz and .bz2 files
    """
    gz_path = path.with_name(path.name + ".gz")
    bz2_path = path.with_name(path.name + ".bz2")

    with path.open("rb") as src, gz_path.open("wb") as raw:
        with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as dst:
            shutil.copyfileobj(src, dst, CHUNK_SIZE)

    with path.open("rb") as src, bz2.open(bz2_path, "wb") as dst:
        shutil.copyfileobj(src, dst, CHUNK_SIZE)

    return gz_path, bz2_path


def sort_architectures(architectures) -> list[str]:
    """Sort architectures in a preferred order, unknown ones alphabetically at the end."""
    unique = set(architectures)
    not_in_ordered = sorted([a for a in unique if a not in ORDERED_ARCHITECTURES])

    def sort_fn(a):
        if a in ORDERED_ARCHITECTURES:
            return ORDERED_ARCHITECTURES.index(a)
        return N_ORDERED_ARCHITECTURES + not_in_ordered.index(a)

    return sorted(unique, key=sort_fn)
