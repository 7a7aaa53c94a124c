"""Exceptions raised by aptpublish."""


class AptPublishError(Exception):
    """Base class for all aptpublish errors."""


class FileSystemError(AptPublishError):
    """A filesystem operation on a repository tree failed."""

    def __init__(self, operation: str, path, reason: str):
        super().__init__(f"{operation} {path}: {reason}")
        self.operation = operation
        self.path = path


class ChecksumError(AptPublishError):
    """Checksums could not be computed for a file."""


class SigningError(AptPublishError):
    """The signer failed to sign a file."""


class PackageNotFoundError(AptPublishError, KeyError):
    """A package reference could not be resolved."""

    def __init__(self, ref: str):
        super().__init__(ref)
        self.ref = ref

    def __str__(self) -> str:
        return f"package {self.ref!r} not found"


class PackageConflictError(AptPublishError):
    """A different package is already stored under the same key."""


class QueryError(AptPublishError):
    """Base class for errors raised while evaluating a query."""


class QueryNotImplementedError(QueryError, NotImplementedError):
    """The query uses a relation that is not supported."""


class QueryInternalError(QueryError, RuntimeError):
    """The query tree is malformed, e.g. carries an unknown relation."""


class PublishError(AptPublishError):
    """Publishing failed; ``stage`` names the pipeline step that failed."""

    def __init__(self, message: str, stage: str):
        super().__init__(message)
        self.stage = stage


class EmptyRepositoryError(PublishError):
    def __init__(self, message: str = "repository is empty, can't publish"):
        super().__init__(message, stage="load")


class MissingArchitecturesError(PublishError):
    def __init__(
        self, message: str = "unable to figure out list of architectures, please supply explicit list"
    ):
        super().__init__(message, stage="architectures")
