class GreenHubError(Exception):
    """Base exception for all greenhub errors"""
    pass

class ConfigError(GreenHubError):
    """Invalid or inconsistent global.json / dataset definition"""
    pass

class DatasetSchemaError(GreenHubError):
    """
    Raw records don't match what the DatasetSchema expects
    non-mapping entries, missing ids, etc
    """
    pass

class AuthError(GreenHubError):
    """Base class for authentication failures"""
    pass

class InvalidCredentialsError(AuthError):
    """
    Identifier/secret pair not found in the principal directory.

    The message is the same whether the identifier or the secret was wrong.
    """
    MESSAGE = "Invalid username or password"

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)

class StorageError(GreenHubError):
    """Base class for persistence failures"""
    pass

class CorruptPayloadError(StorageError):
    """Stored payload could not be decoded into the expected shape"""
    pass

class ExportError(GreenHubError):
    """Base class for export failures"""
    pass

class UnsupportedFormatError(ExportError):
    """Export format outside the supported set"""

    def __init__(self, fmt: object) -> None:
        self.format = fmt
        super().__init__(f"Unsupported export format: {fmt!r}")

class OperationCancelledError(GreenHubError):
    """An in-flight async operation was cancelled before its result was applied"""
    pass
