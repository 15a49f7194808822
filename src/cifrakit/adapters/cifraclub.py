"""Adapter for cifraclub.com.br chord pages.

URL pattern: cifraclub.com.br/<artist-slug>/<song-slug>/

Page structure (relevant parts):
    <head>
        <title>Song - Artist - Cifra Club</title>
        <meta property="og:title" content="Song - Artist">
        <meta property="og:image" content="https://.../artist.jpg">
        <meta name="description" content="... (Artist) no Cifra Club ...">
    </head>
    <div id="side-menu"> <img src="artist photo"> </div>
    <h1 class="t1">Song</h1>
    <span>Tom: <a id="cifra_tom">G</a></span>
    <pre>
        <b>G</b>        <b>D</b>                  ← chords, bold
        Santo, santo é o Senhor
        <span class="tablatura">e|--3--2--|</span> ← inline fingering, dropped
    </pre>

The whole chord sheet lives in the single ``<pre>``.  Its absence is the only
hard failure (:class:`~cifrakit.exceptions.ParseError`); every metadata field
is best-effort and comes back as ``None`` when no strategy matches.
"""

import re
from typing import Callable
from urllib.parse import unquote, urlparse

import httpx
from bs4 import BeautifulSoup

from ..exceptions import FetchError, ParseError
from ..logging import get_logger
from ..models import ChordSheetMetadata, ParsedChordSheet
from ..transposer import convert_minor_to_relative_major, normalize_pitch_class
from .base import SiteAdapter
from .utils import filter_tablature, parse_structure

log = get_logger(__name__)

_FETCH_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8",
}

_ENTITIES = {"&amp;": "&", "&nbsp;": " ", "&quot;": '"', "&lt;": "<", "&gt;": ">"}
_ENTITY_RE = re.compile(r"&(?:amp|nbsp|quot|lt|gt);")

_TRAILING_BRAND_RE = re.compile(
    r"\s*(?:-|–|—)\s*(?:cifra\s*club|letras(?:\.mus)?\.br).*$", re.IGNORECASE
)
_TITLE_SEPARATOR_RE = re.compile(r"\s+(?:-|–|—|•|·|\|)\s+|\s*:\s+")
_QUOTES_RE = re.compile(r"[\"'«»]")

_BREADCRUMB_RE = re.compile(r"Mais acessadas de\s+([^<]+)", re.IGNORECASE)
_DESCRIPTION_ARTIST_RE = re.compile(r"\(([^)]+)\)\s+no\s+Cifra\s+Club", re.IGNORECASE)
_PHOTO_URL_RE = re.compile(
    r"^https://.*(?:akam|cdn|artist-images|fotos).+\.(?:jpg|jpeg|png|webp)$", re.IGNORECASE
)

_KEY_TOKEN_RE = re.compile(r"^[A-Ga-g][#b]?m?$")
_TOM_RE = re.compile(r"Tom:\s*<[^>]+>\s*([A-G][#b]?m?)\s*</[^>]+>", re.IGNORECASE)
# "#" is not a word character, so \b would cut "C# " down to "C".
_CONTENT_KEY_RE = re.compile(r"(?<![\w#])([A-G][#b]?m?)(?![\w#])")
_KEY_SCAN_LINES = 20

_LOWERCASE_WORDS = {"da", "de", "do", "das", "dos", "e", "di"}


class CifraClubAdapter(SiteAdapter):
    """Adapter for cifraclub.com.br chord pages."""

    @classmethod
    def can_handle(cls, url: str) -> bool:
        try:
            hostname = urlparse(url).hostname or ""
        except ValueError:
            return False
        return "cifraclub.com" in hostname

    def fetch(self, url: str) -> str:
        """GET the page with browser-like headers."""
        try:
            resp = httpx.get(url, headers=_FETCH_HEADERS, follow_redirects=True, timeout=15)
        except httpx.RequestError as exc:
            raise FetchError(url, 0) from exc
        if resp.status_code != 200:
            raise FetchError(url, resp.status_code)
        return resp.text

    def extract(self, html: str, url: str) -> ParsedChordSheet:
        try:
            content = extract_content(html)
        except ParseError as exc:
            raise ParseError(exc.reason, url) from exc
        sheet = parse_structure(content)
        return ParsedChordSheet(
            metadata=extract_metadata(html, url),
            sections=sheet.sections,
            raw_content=content,
        )


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


def extract_content(html: str) -> str:
    """Return the plain chord-sheet text of a Cifra Club page.

    Chord markup is unwrapped in place, inline ``tablatura`` spans and whole
    tab/fingering sections are removed, runs of blank lines are collapsed.

    Raises :class:`~cifrakit.exceptions.ParseError` if the page has no ``<pre>``.
    """
    soup = BeautifulSoup(html, "html.parser")
    pre = soup.find("pre")
    if pre is None:
        log.warning("content_block_missing")
        raise ParseError("content block not found")

    for span in pre.find_all("span", class_="tablatura"):
        span.decompose()

    # get_text() keeps chord text where the <b>/<a> tags were and decodes
    # entities; &nbsp; comes back as U+00A0.
    text = pre.get_text().replace("\xa0", " ")

    kept = filter_tablature(text.split("\n"))
    content = "\n".join(kept)
    return re.sub(r"\n{3,}", "\n\n", content).strip()


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def extract_metadata(html: str, source_url: str | None = None) -> ChordSheetMetadata:
    """Return best-effort metadata for a Cifra Club page.  Never raises."""
    soup = BeautifulSoup(html, "html.parser")
    return ChordSheetMetadata(
        title=parse_song_title(soup, source_url),
        performer_or_version=parse_version(soup, source_url),
        artist_photo_url=parse_artist_photo(soup),
        original_key=parse_key(soup),
    )


def _first_match(field: str, strategies: list[Callable[[], str | None]]) -> str | None:
    """Return the first sanitized, non-empty strategy result."""
    for strategy in strategies:
        result = sanitize_text(strategy())
        if result:
            return result
    log.debug("metadata_field_missing", field=field)
    return None


def parse_song_title(soup: BeautifulSoup, source_url: str | None = None) -> str | None:
    def from_meta(value: str | None) -> str | None:
        parts = split_title(value)
        return parts[0] if parts else None

    return _first_match(
        "title",
        [
            lambda: from_meta(_meta_content(soup, property="og:title")),
            lambda: from_meta(_title_text(soup)),
            lambda: _h1_text(soup),
            lambda: song_from_url(source_url),
        ],
    )


def parse_version(soup: BeautifulSoup, source_url: str | None = None) -> str | None:
    """Return the performer / version label shown next to the song title."""

    def from_meta(value: str | None) -> str | None:
        parts = split_title(value)
        return parts[-1] if len(parts) >= 2 else None

    return _first_match(
        "performer_or_version",
        [
            lambda: from_meta(_meta_content(soup, property="og:title")),
            lambda: from_meta(_title_text(soup)),
            lambda: _breadcrumb_artist(soup),
            lambda: _artist_link_text(soup),
            lambda: _data_artist(soup),
            lambda: _description_artist(soup),
            lambda: artist_from_url(source_url),
        ],
    )


def parse_artist_photo(soup: BeautifulSoup) -> str | None:
    side_menu = soup.find(id="side-menu")
    if side_menu:
        img = side_menu.find("img", src=True)
        if img and img["src"]:
            return img["src"]

    for img in soup.find_all("img", src=True):
        if _PHOTO_URL_RE.match(img["src"]):
            return img["src"]

    og_image = _meta_content(soup, property="og:image")
    if og_image:
        return og_image

    log.debug("metadata_field_missing", field="artist_photo_url")
    return None


def parse_key(soup: BeautifulSoup) -> str | None:
    """Return the page's key as a canonical major pitch class (``Em`` → ``G``)."""
    key = _find_key(soup)
    if key is None:
        log.debug("metadata_field_missing", field="original_key")
        return None
    return normalize_pitch_class(convert_minor_to_relative_major(key))


def _key_token(text: str) -> str | None:
    """Return *text* as a key token ("em" → "Em"), or None if it is not one."""
    text = text.strip()
    if not _KEY_TOKEN_RE.match(text):
        return None
    return text[0].upper() + text[1:]


def _find_key(soup: BeautifulSoup) -> str | None:
    for tagged in soup.find_all(attrs={"data-key": True}):
        key = _key_token(tagged["data-key"])
        if key:
            return key

    m = _TOM_RE.search(str(soup))
    if m:
        return _key_token(m.group(1))

    candidates = soup.find_all(id=re.compile("cifra_tom")) + soup.find_all(
        class_=re.compile("key")
    )
    for element in candidates:
        key = _key_token(element.get_text(strip=True))
        if key:
            return key

    pre = soup.find("pre")
    if pre is not None:
        for line in pre.get_text().split("\n")[:_KEY_SCAN_LINES]:
            m = _CONTENT_KEY_RE.search(line)
            if m:
                return m.group(1)
    return None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def decode_entities(value: str) -> str:
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group()], value)


def sanitize_text(value: str | None) -> str | None:
    """Decode entities, collapse whitespace, drop quotes; None if nothing is left."""
    if not value:
        return None
    cleaned = decode_entities(value)
    cleaned = re.sub(r"\s+", " ", cleaned)
    cleaned = _QUOTES_RE.sub("", cleaned).strip()
    return cleaned or None


def split_title(value: str | None) -> list[str]:
    """Split a page title into parts: "Song - Artist - Cifra Club" → ["Song", "Artist"]."""
    if not value:
        return []
    value = _TRAILING_BRAND_RE.sub("", value.strip())
    return [part.strip() for part in _TITLE_SEPARATOR_RE.split(value) if part.strip()]


def format_slug(slug: str) -> str:
    """Title-case a URL slug, keeping Portuguese connectors lower-case.

    "aline-barros" → "Aline Barros", "rio-de-janeiro" → "Rio de Janeiro".
    """
    words = re.sub(r"[-_]+", " ", slug).split()
    formatted = []
    for i, word in enumerate(words):
        lower = word.lower()
        if i > 0 and lower in _LOWERCASE_WORDS:
            formatted.append(lower)
        else:
            formatted.append(lower[:1].upper() + lower[1:])
    return " ".join(formatted)


def _path_segments(url: str | None) -> list[str]:
    if not url:
        return []
    try:
        path = urlparse(url).path
    except ValueError:
        log.debug("source_url_unparseable", url=url)
        return []
    return [unquote(s) for s in path.split("/") if s]


def artist_from_url(url: str | None) -> str | None:
    """Derive the performer from the URL's first path segment."""
    segments = _path_segments(url)
    if not segments:
        return None
    slug = re.sub(r"\.html$", "", segments[0], flags=re.IGNORECASE)
    if not slug or "." in slug:
        return None
    return format_slug(slug)


def song_from_url(url: str | None) -> str | None:
    """Derive the song title from the URL's second path segment."""
    segments = _path_segments(url)
    if len(segments) < 2:
        return None
    slug = re.sub(r"\.html$", "", segments[1], flags=re.IGNORECASE).rstrip("-")
    return format_slug(slug) or None


def _meta_content(soup: BeautifulSoup, **attrs) -> str | None:
    tag = soup.find("meta", attrs=attrs)
    return tag.get("content") if tag else None


def _title_text(soup: BeautifulSoup) -> str | None:
    return soup.title.get_text() if soup.title else None


def _h1_text(soup: BeautifulSoup) -> str | None:
    h1 = soup.find("h1")
    return h1.get_text(" ", strip=True) if h1 else None


def _breadcrumb_artist(soup: BeautifulSoup) -> str | None:
    m = _BREADCRUMB_RE.search(soup.get_text("\n"))
    return m.group(1).splitlines()[0] if m else None


def _artist_link_text(soup: BeautifulSoup) -> str | None:
    for link in soup.find_all("a", href=re.compile(r"/artista/")):
        text = link.get_text(" ", strip=True)
        if text:
            return text
    return None


def _data_artist(soup: BeautifulSoup) -> str | None:
    tagged = soup.find(attrs={"data-artist": True})
    return tagged["data-artist"] if tagged else None


def _description_artist(soup: BeautifulSoup) -> str | None:
    description = _meta_content(soup, name="description")
    if not description:
        return None
    m = _DESCRIPTION_ARTIST_RE.search(description)
    return m.group(1) if m else None
