from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration-error"
    VALIDATION = "validation-error"
    CONFLICT = "conflict"
    NOT_FOUND = "not-found"
    POOL_EXHAUSTED = "pool-exhausted"
    IO = "io-error"
    EXTERNAL_TOOL = "external-tool-error"


class RegistryException(Exception):
    """Base exception for every error the client registry reports to its caller."""

    kind: ErrorKind


class ConfigurationException(RegistryException):
    """Custom exception for missing or malformed server parameters."""

    kind = ErrorKind.CONFIGURATION


class ValidationException(RegistryException):
    """Custom exception for malformed client names or addresses."""

    kind = ErrorKind.VALIDATION


class ConflictException(RegistryException):
    """Custom exception for conflicts, such as duplicate clients or addresses."""

    kind = ErrorKind.CONFLICT


class NotFoundException(RegistryException):
    """Custom exception for clients that do not exist."""

    kind = ErrorKind.NOT_FOUND


class PoolExhaustedException(RegistryException):
    """Custom exception for when no address is left in the subnet."""

    kind = ErrorKind.POOL_EXHAUSTED


class StorageException(RegistryException):
    """Custom exception for read/write failures on the config file or the clients directory."""

    kind = ErrorKind.IO


class ExternalToolException(RegistryException):
    """Custom exception for wg / wg-quick commands that failed or produced no usable output."""

    kind = ErrorKind.EXTERNAL_TOOL
