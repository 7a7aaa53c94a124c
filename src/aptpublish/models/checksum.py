from pydantic import BaseModel, ConfigDict


class ChecksumInfo(BaseModel):
    """Size and digests of one generated file."""

    model_config = ConfigDict(frozen=True)

    size: int
    md5: str
    sha1: str
    sha256: str
