"""Chord transposition over plain chord-sheet text.

Every chord symbol in a block of text is shifted by the semitone interval
between two keys; lyrics, punctuation and whitespace are left untouched.
All arithmetic runs on the 12 canonical sharp spellings in
:data:`AVAILABLE_KEYS`, so output chords are always spelled with sharps::

    >>> transpose_content("My Song\\nC D\\nG Am", "C", "D")
    'My Song\\nD E\\nA Bm'

The first non-blank line is treated as the song title and is never
transposed.  Unknown keys degrade to an identity transform instead of raising.
"""

import re

from .logging import get_logger

log = get_logger(__name__)

AVAILABLE_KEYS: tuple[str, ...] = (
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
)

_NATURALS = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
_ACCIDENTALS = {"": 0, "#": 1, "##": 2, "b": -1, "bb": -2}

# Every spelling of every note (Db, E#, Cbb, F##, ...) -> canonical sharp token.
_SPELLINGS: dict[str, str] = {
    letter + accidental: AVAILABLE_KEYS[(index + shift) % 12]
    for letter, index in _NATURALS.items()
    for accidental, shift in _ACCIDENTALS.items()
}

_RELATIVE_MAJOR: dict[str, str] = {
    "Am": "C",
    "A#m": "C#",
    "Bm": "D",
    "Cm": "D#",
    "C#m": "E",
    "Dm": "F",
    "D#m": "F#",
    "Em": "G",
    "Fm": "G#",
    "F#m": "A",
    "Gm": "A#",
    "G#m": "B",
}

# Leading base note of a chord: letter plus optional single/double accidental.
_BASE_NOTE_RE = re.compile(r"^([A-G](?:##|bb|#|b)?)(.*)$", re.DOTALL)

# A chord symbol inside a line of text:
#   base note:   C, C#, Db, F##
#   quality:     maj | min | dim | aug | sus | add | m | º   (longest first)
#   extensions:  digits, then an optional parenthetical, e.g. 7(9), (add9)
#   bass:        /G, /F#
# Whole-word only: no word character (or '#', '/') may touch either end.
CHORD_TOKEN_RE = re.compile(
    r"(?<![\w#/])"
    r"[A-G](?:##|bb|#|b)?"
    r"(?:maj|min|dim|aug|sus|add|m|º)?"
    r"\d*"
    r"(?:\([^)\n]+\))?"
    r"(?:/[A-G](?:##|bb|#|b)?)?"
    r"(?![\w#])"
)

_MINOR_KEY_RE = re.compile(r"^([A-Ga-g](?:##|bb|#|b)?)m(?![a-z])", re.IGNORECASE)


def normalize_pitch_class(token: str) -> str:
    """Return the canonical sharp spelling of *token*.

    ``Db`` -> ``C#``, ``E#`` -> ``F``, ``Cbb`` -> ``A#``.  Tokens that are not
    a note spelling are returned unchanged.
    """
    return _SPELLINGS.get(token, token)


def _index(key: str) -> int | None:
    normalized = normalize_pitch_class(key.strip())
    if normalized in AVAILABLE_KEYS:
        return AVAILABLE_KEYS.index(normalized)
    return None


def semitone_distance(from_key: str, to_key: str) -> int:
    """Return the upward interval in semitones (0-11) from *from_key* to *to_key*.

    Returns 0 when either key is not a recognised pitch class.
    """
    from_index = _index(from_key)
    to_index = _index(to_key)
    if from_index is None or to_index is None:
        log.debug("unknown_key", from_key=from_key, to_key=to_key)
        return 0
    return (to_index - from_index + 12) % 12


def _transpose_note(token: str, semitones: int) -> str:
    m = _BASE_NOTE_RE.match(token)
    if not m:
        return token
    base, suffix = m.groups()
    index = _index(base)
    if index is None:
        return token
    return AVAILABLE_KEYS[((index + semitones) % 12 + 12) % 12] + suffix


def transpose_chord_token(token: str, semitones: int) -> str:
    """Transpose a single chord symbol, keeping its suffix verbatim.

    Slash chords have both halves transposed independently::

        >>> transpose_chord_token("C/G", 2)
        'D/A'
        >>> transpose_chord_token("Bbm7(b5)", 1)
        'Bm7(b5)'
    """
    if "/" in token:
        chord, bass = token.split("/", 1)
        return f"{_transpose_note(chord, semitones)}/{_transpose_note(bass, semitones)}"
    return _transpose_note(token, semitones)


def transpose_line(line: str, semitones: int) -> str:
    """Transpose every chord symbol found in *line*.

    This is a heuristic: capitalised words shaped like chords (Portuguese
    ``Em``, ``A``) are transposed too.
    """
    return CHORD_TOKEN_RE.sub(lambda m: transpose_chord_token(m.group(), semitones), line)


def transpose_content(content: str, from_key: str, to_key: str) -> str:
    """Transpose a whole chord sheet from *from_key* to *to_key*.

    The first non-blank line (the title) is returned verbatim.  Returns
    *content* unchanged when the keys are equal or unrecognised.
    """
    semitones = semitone_distance(from_key, to_key)
    if semitones == 0:
        return content

    result: list[str] = []
    title_seen = False
    for line in content.split("\n"):
        if not title_seen and line.strip():
            title_seen = True
            result.append(line)
            continue
        result.append(transpose_line(line, semitones))
    return "\n".join(result)


def convert_minor_to_relative_major(key: str) -> str:
    """Return the relative major of a minor key (``Em`` -> ``G``).

    Keys without an ``m`` are returned unchanged (stripped), as are minor
    tokens that cannot be resolved.
    """
    normalized = key.strip()
    if "m" not in normalized.lower():
        return normalized

    m = _MINOR_KEY_RE.match(normalized)
    if not m:
        return normalized

    base = m.group(1)
    base = normalize_pitch_class(base[0].upper() + base[1:])
    return _RELATIVE_MAJOR.get(f"{base}m", normalized)
