from abc import ABC, abstractmethod

from ..models import ParsedChordSheet


class SiteAdapter(ABC):
    """Abstract base class for all chord-site adapters."""

    @classmethod
    @abstractmethod
    def can_handle(cls, url: str) -> bool:
        """Return True if this adapter can handle the given URL."""

    @abstractmethod
    def fetch(self, url: str) -> str:
        """Fetch the page at url and return raw HTML.

        Raises FetchError on HTTP-level failures.
        """

    @abstractmethod
    def extract(self, html: str, url: str) -> ParsedChordSheet:
        """Parse HTML and return a ParsedChordSheet.

        Tablature and fingering diagrams must already be removed from both
        ``raw_content`` and the sections.

        Raises ParseError if the chord-sheet content block cannot be found.
        """

    def scrape(self, url: str) -> ParsedChordSheet:
        """Convenience method: fetch + extract."""
        html = self.fetch(url)
        return self.extract(html, url)
