"""Error taxonomy shared by the ingestion and query services."""


class ChatlogError(Exception):
    """Base class for request-scoped failures."""


class ValidationError(ChatlogError):
    """Required input is missing or empty. Reported to the caller as a 4xx."""


class StorageError(ChatlogError):
    """The database could not be read or the write could not be committed."""
