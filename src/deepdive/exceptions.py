class DeepDiveError(Exception):
    """Base exception for the deepdive project."""


class LevelStoreError(DeepDiveError):
    """Raised when a saved level cannot be written or read."""


class LevelDecodeError(LevelStoreError):
    """Raised when a saved level payload is malformed or uses an unsupported schema."""
