"""Error taxonomy for the shortener.

Every failure the core can produce is a subclass of ``ShortenerError`` with a
``kind`` tag for logs. The HTTP layer maps them back onto the public wording.
"""

from typing import Optional


class ShortenerError(Exception):
    kind = "shortener_error"


class LookupFailure(ShortenerError):
    """The name resolution call itself failed or timed out."""

    kind = "lookup_failure"

    def __init__(self, hostname: str, reason: str):
        super().__init__(f"lookup of {hostname!r} failed: {reason}")
        self.hostname = hostname
        self.reason = reason


class InvalidURL(ShortenerError):
    """The hostname of a submitted URL does not resolve."""

    kind = "invalid_url"
    public_message = "invalid URL"

    def __init__(self, hostname: str, cause: Optional[LookupFailure] = None):
        super().__init__(f"hostname {hostname!r} did not resolve")
        self.hostname = hostname
        self.cause = cause


class NotFound(ShortenerError):
    kind = "not_found"
    public_message = "no matching URL"

    def __init__(self, short_code: str):
        super().__init__(f"no record for short code {short_code!r}")
        self.short_code = short_code


class StoreFailure(ShortenerError):
    """Wraps any error raised by the backing store."""

    kind = "store_failure"
    public_message = "internal server error"

    def __init__(self, operation: str, original: Exception):
        super().__init__(f"{operation} failed: {original}")
        self.operation = operation
        self.original = original
