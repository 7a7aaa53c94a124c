from os import getenv
from pathlib import Path

DATA_DIR = Path(getenv("APTPUBLISH_DATA_DIR", "data")).resolve()

# set database url
if DATA_DIR.is_relative_to(Path.cwd()):
    DB_URL = f"sqlite:///{DATA_DIR.relative_to(Path.cwd()) / 'aptpublish.db'}"
else:
    DB_URL = f"sqlite:///{DATA_DIR / 'aptpublish.db'}"

# internal content-addressed package storage, and the root published trees live under
POOL_DIR = DATA_DIR / "pool"
PUBLIC_DIR = DATA_DIR / "public"

GPG_BINARY = getenv("APTPUBLISH_GPG", "gpg")
GPG_KEY = getenv("APTPUBLISH_GPG_KEY")
GPG_KEYRING = getenv("APTPUBLISH_GPG_KEYRING")

RELEASE_DESCRIPTION = "Generated by aptpublish"

# fmt: off
ORDERED_ARCHITECTURES = [
    "i386", "amd64", "amd64v3",
    "armel", "armhf", "arm64", "aarch64",
    "riscv32", "riscv64",
    "mipsel", "mips64el",
    "la64", "loongarch64",
    "powerpc", "ppc32", "ppc64el",
    "s390", "s390x",
]
N_ORDERED_ARCHITECTURES = len(ORDERED_ARCHITECTURES)
# fmt: on
