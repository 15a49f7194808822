from dataclasses import dataclass, field
from enum import Enum


class SectionKind(Enum):
    INTRO = "intro"
    VERSE = "verse"
    CHORUS = "chorus"
    BRIDGE = "bridge"
    OUTRO = "outro"
    SOLO = "solo"
    TAB = "tab"  # classification only; tab sections are dropped, never stored
    OTHER = "other"


@dataclass(frozen=True)
class ChordSheetMetadata:
    """Best-effort metadata scraped from a chord-sheet page.

    ``None`` means the field was not found.  A found value is never empty.
    """

    title: str | None = None
    performer_or_version: str | None = None  # e.g. "Acoustic Version", "Fernandinho"
    artist_photo_url: str | None = None
    original_key: str | None = None  # always a major pitch class, e.g. "G"


@dataclass(frozen=True)
class ChordSheetSection:
    """A labelled section of a chord sheet (verse, chorus, ...).

    Example: kind=SectionKind.CHORUS, label="[Refrão]", lines=("G  D", "Santo, santo")
    Implicit sections (content before any heading) have an empty label.
    """

    kind: SectionKind
    label: str
    lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedChordSheet:
    """Result of one parse: metadata, ordered sections and the full plain text."""

    metadata: ChordSheetMetadata = field(default_factory=ChordSheetMetadata)
    sections: tuple[ChordSheetSection, ...] = ()
    raw_content: str = ""
