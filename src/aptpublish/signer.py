"""Signing of Release files."""

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from aptpublish.constants import GPG_BINARY, GPG_KEY, GPG_KEYRING
from aptpublish.errors import SigningError

logger = logging.getLogger(__name__)


class Signer(Protocol):
    def detached_sign(self, source: Path, destination: Path) -> None: ...

    def clear_sign(self, source: Path, destination: Path) -> None: ...


class GpgSigner:
    """Sign with the gpg command line tool."""

    def __init__(self, key: str | None = GPG_KEY, keyring: str | None = GPG_KEYRING, binary: str = GPG_BINARY):
        """
        Args:
            key: Key ID to sign with. Defaults to gpg's default key
            keyring: Additional keyring to read the key from
            binary: gpg executable
        """
        self.key = key
        self.keyring = keyring
        self.binary = binary

    def _base_args(self) -> list[str]:
        args = [self.binary, "--batch", "--yes"]
        if self.keyring:
            args += ["--no-default-keyring", "--keyring", self.keyring]
        if self.key:
            args += ["--local-user", self.key]
        return args

    def _run(self, args: list[str]) -> None:
        logger.debug(f"Running {' '.join(args)}")
        try:
            result = subprocess.run(args, capture_output=True, text=True, check=False)
        except OSError as e:
            raise SigningError(f"unable to run {self.binary}: {e}") from e
        if result.returncode != 0:
            raise SigningError(f"{self.binary} returned {result.returncode}: {result.stderr.strip()}")

    def detached_sign(self, source: Path, destination: Path) -> None:
        logger.info(f"Signing {source} -> {destination}")
        self._run(self._base_args() + ["--armor", "--output", str(destination), "--detach-sign", str(source)])

    def clear_sign(self, source: Path, destination: Path) -> None:
        logger.info(f"Clearsigning {source} -> {destination}")
        self._run(self._base_args() + ["--output", str(destination), "--clearsign", str(source)])
