"""Shared text-scanning utilities for plain chord-sheet content.

Implements the line pipeline used after HTML has been reduced to text:

  1. classify_line()     — BLANK / HEADING / INLINE_HEADING / TAB_HEADING / TAB / TEXT
  2. heading_kind()      — SectionKind for a heading line
  3. filter_tablature()  — state machine that drops tab sections and tab lines
  4. parse_structure()   — full pipeline: plain text → ParsedChordSheet

Tablature comes in two shapes on chord sites:

  tab sections  — a heading such as ``[Dedilhado]`` or ``[Tab - Intro]``
                  followed by string diagrams, up to the next normal heading
  tab lines     — a single diagram line anywhere: ``e|--0--1--|``
"""

import re
import unicodedata
from enum import Enum, auto
from typing import Iterable, Iterator

from ..logging import get_logger
from ..models import ChordSheetSection, ParsedChordSheet, SectionKind

log = get_logger(__name__)

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

# Any bracketed heading on its own line: [Intro], [Refrão], [Tab - Solo]
HEADING_RE = re.compile(r"^\[([^\]]+)\]$")

# A heading followed by content on the same line: [Intro] G  D  Em  C
INLINE_HEADING_RE = re.compile(r"^(\[[^\]]+\])\s+\S")

# Headings that open a tablature / fingering section.  Matched against the
# lower-cased, stripped line.
TAB_HEADING_RES = (
    re.compile(r"^\[.*dedilhado"),
    re.compile(r"^\[.*tablatura"),
    re.compile(r"^\[.*\btab\b"),
    re.compile(r"^\[.*riff"),
    re.compile(r"^\[.*solo\s+\(tab"),
    re.compile(r"^dedilhado\b"),
    re.compile(r"^tab\b"),
)

# ASCII guitar tab line.  Two formats appear in the wild:
#   Standard:  e|---0---1---  (string name + pipe + fret chars)
#   Compact:   E---------2--, E-5-7-5---  (string name + dashes, no leading pipe)
TAB_LINE_RE = re.compile(r"^[EADGBe](?:\|[-\d|]|-[-\d])")

# A long run of fret characters with no string name: |---3---|---2---|
FRET_RUN_RE = re.compile(r"^[|\-\d\s]{10,}")

# Pagination marker inside tab blocks: "Parte 1 de 3"
PAGINATION_RE = re.compile(r"Parte\s+\d+\s+de\s+\d+")

# Heading keyword → section kind, checked in order against the
# accent-stripped, lower-cased heading text.
_KIND_KEYWORDS: list[tuple[re.Pattern, SectionKind]] = [
    (re.compile(r"\bintro"), SectionKind.INTRO),
    (re.compile(r"\b(?:refrao|chorus|coro)\b"), SectionKind.CHORUS),
    (re.compile(r"\b(?:ponte|bridge)\b"), SectionKind.BRIDGE),
    (re.compile(r"\b(?:final|outro)\b"), SectionKind.OUTRO),
    (re.compile(r"\bsolo\b"), SectionKind.SOLO),
    (
        re.compile(r"\b(?:(?:primeira|segunda|terceira)\s+parte|parte\s+\d+|verso|verse)\b"),
        SectionKind.VERSE,
    ),
]


# ---------------------------------------------------------------------------
# LineType
# ---------------------------------------------------------------------------


class LineType(Enum):
    BLANK = auto()  # empty or whitespace only
    HEADING = auto()  # section heading: [Intro], [Refrão]
    INLINE_HEADING = auto()  # heading with content after it: [Intro] G  D  Em
    TAB_HEADING = auto()  # heading that opens a tab section: [Dedilhado]
    TAB = auto()  # tablature line: e|--0--1--, Parte 1 de 2
    TEXT = auto()  # chords, lyrics, everything else


_HEADINGS = (LineType.HEADING, LineType.INLINE_HEADING)


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------


def is_tab_heading(line: str) -> bool:
    """Return True if *line* opens a tablature or fingering section."""
    lowered = line.strip().lower()
    return any(rx.search(lowered) for rx in TAB_HEADING_RES)


def is_tab_line(line: str) -> bool:
    """Return True if *line* is shaped like tablature or tab pagination."""
    stripped = line.strip()
    return bool(
        TAB_LINE_RE.match(stripped)
        or FRET_RUN_RE.match(stripped)
        or PAGINATION_RE.search(stripped)
    )


def classify_line(line: str) -> LineType:
    """Classify a single line of plain chord-sheet text."""
    stripped = line.strip()
    if not stripped:
        return LineType.BLANK
    if is_tab_heading(stripped):
        return LineType.TAB_HEADING
    if HEADING_RE.match(stripped):
        return LineType.HEADING
    if INLINE_HEADING_RE.match(stripped):
        return LineType.INLINE_HEADING
    if is_tab_line(stripped):
        return LineType.TAB
    return LineType.TEXT


def heading_label(line: str) -> str:
    """Return the bracketed label of a heading line.

    ``"[Refrão]"`` → ``"[Refrão]"``, ``"[Intro] G  D"`` → ``"[Intro]"``.
    """
    stripped = line.strip()
    m = INLINE_HEADING_RE.match(stripped)
    return m.group(1) if m else stripped


def _fold(text: str) -> str:
    """Lower-case and strip accents: "Refrão" → "refrao"."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def heading_kind(line: str) -> SectionKind | None:
    """Return the :class:`SectionKind` for a heading line, or None for non-headings.

    ``[Segunda Parte]`` → VERSE, ``[Refrão]`` → CHORUS, ``[Dedilhado]`` → TAB,
    any other bracketed text → OTHER.
    """
    lt = classify_line(line)
    if lt == LineType.TAB_HEADING:
        return SectionKind.TAB
    if lt not in _HEADINGS:
        return None

    text = _fold(heading_label(line)[1:-1])
    for rx, kind in _KIND_KEYWORDS:
        if rx.search(text):
            return kind
    return SectionKind.OTHER


# ---------------------------------------------------------------------------
# Tab filter state machine
# ---------------------------------------------------------------------------


class _ScanState(Enum):
    CONTENT = auto()  # normal lines are kept
    IN_TAB = auto()  # inside a tab section; everything is dropped


def filter_tablature(lines: Iterable[str]) -> Iterator[str]:
    """Yield the lines of a chord sheet with all tablature removed.

    Transitions::

        CONTENT --tab heading-->            IN_TAB   (heading dropped)
        IN_TAB  --tab heading-->            IN_TAB   (heading dropped)
        IN_TAB  --non-tab [heading]-->      CONTENT  (heading kept)
        IN_TAB  --anything else-->          IN_TAB   (line dropped)
        CONTENT --tab line-->               CONTENT  (line dropped)
        CONTENT --anything else-->          CONTENT  (line kept)
    """
    state = _ScanState.CONTENT

    for line in lines:
        lt = classify_line(line)

        if lt == LineType.TAB_HEADING:
            if state == _ScanState.CONTENT:
                log.debug("tab_section_start", heading=line.strip())
            state = _ScanState.IN_TAB
            continue

        if state == _ScanState.IN_TAB:
            if lt in _HEADINGS:
                log.debug("tab_section_end", heading=heading_label(line))
                state = _ScanState.CONTENT
                yield line
            continue

        if lt == LineType.TAB:
            continue

        yield line


# ---------------------------------------------------------------------------
# Full parser
# ---------------------------------------------------------------------------


def _close(
    sections: list[ChordSheetSection], current: tuple[SectionKind, str] | None, lines: list[str]
) -> None:
    """Append the current section unless it is empty once trailing blanks are trimmed."""
    while lines and not lines[-1].strip():
        lines.pop()
    if current is None or not lines:
        return
    kind, label = current
    sections.append(ChordSheetSection(kind=kind, label=label, lines=tuple(lines)))


def parse_structure(content: str) -> ParsedChordSheet:
    """Split plain chord-sheet text into labelled sections.

    Algorithm
    ---------
    1. Drop tablature with :func:`filter_tablature`.
    2. Each bracketed heading closes the current section and opens a new one
       whose kind comes from :func:`heading_kind`.  An inline heading
       (``[Intro] G  D``) also becomes the first line of its section.
    3. Lines before the first heading form an implicit OTHER section with an
       empty label; leading blank lines are ignored.
    4. Trailing blank lines are trimmed and empty sections are dropped.

    The returned sheet carries empty metadata; use
    :func:`~cifrakit.adapters.cifraclub.extract_metadata` to fill it.
    """
    sections: list[ChordSheetSection] = []
    current: tuple[SectionKind, str] | None = None
    buffer: list[str] = []

    for line in filter_tablature(content.splitlines()):
        kind = heading_kind(line)

        if kind is not None:
            _close(sections, current, buffer)
            current = (kind, heading_label(line))
            buffer = [line] if classify_line(line) == LineType.INLINE_HEADING else []
            continue

        if not buffer and not line.strip():
            continue

        if current is None:
            current = (SectionKind.OTHER, "")
        buffer.append(line)

    _close(sections, current, buffer)

    return ParsedChordSheet(sections=tuple(sections), raw_content=content)
