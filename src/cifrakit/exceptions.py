class CifraKitError(Exception):
    """Base exception for cifrakit."""


class FetchError(CifraKitError):
    """Raised when an HTTP request fails."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} fetching {url}")


class ParseError(CifraKitError):
    """Raised when a page has no chord-sheet content block at all.

    This is the only hard failure of the parser; callers should fall back to
    manual content entry.
    """

    def __init__(self, reason: str, url: str | None = None):
        self.url = url
        self.reason = reason
        if url:
            super().__init__(f"Parse error for {url}: {reason}")
        else:
            super().__init__(f"Parse error: {reason}")


class UnsupportedSiteError(CifraKitError):
    """Raised when no adapter matches the given URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No adapter found for URL: {url}")
