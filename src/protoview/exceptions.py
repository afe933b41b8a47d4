"""ProtoView exceptions."""


class ProtoViewError(Exception):
    """Base exception for ProtoView."""


class ParseError(ProtoViewError):
    """Raised when a source file is missing or unreadable."""


class MalformedRecordError(ProtoViewError):
    """Raised when a single entry fails grammar or decoding."""


class UnresolvableIdentityError(ProtoViewError):
    """Raised when too few accessions can be extracted from a token."""


class ConfigurationError(ProtoViewError):
    """Raised when required configuration (e.g. the store URL) is missing."""


class StoreUnavailableError(ProtoViewError):
    """Raised when the persistent store cannot be reached."""


class LookupServiceError(ProtoViewError):
    """Raised when an external metadata lookup fails."""
