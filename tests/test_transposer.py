import pytest

from cifrakit.transposer import (
    AVAILABLE_KEYS,
    convert_minor_to_relative_major,
    normalize_pitch_class,
    semitone_distance,
    transpose_chord_token,
    transpose_content,
    transpose_line,
)

# ---------------------------------------------------------------------------
# AVAILABLE_KEYS
# ---------------------------------------------------------------------------


def test_available_keys_are_the_twelve_sharp_pitch_classes():
    assert AVAILABLE_KEYS == (
        "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
    )


# ---------------------------------------------------------------------------
# normalize_pitch_class
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "token, expected",
    [
        ("Db", "C#"),
        ("Eb", "D#"),
        ("Gb", "F#"),
        ("Ab", "G#"),
        ("Bb", "A#"),
        ("E#", "F"),
        ("B#", "C"),
        ("Fb", "E"),
        ("Cb", "B"),
        ("C##", "D"),
        ("Cbb", "A#"),
        ("F##", "G"),
        ("Abb", "G"),
    ],
)
def test_normalize_enharmonic_spellings(token, expected):
    assert normalize_pitch_class(token) == expected


def test_normalize_canonical_passes_through():
    for key in AVAILABLE_KEYS:
        assert normalize_pitch_class(key) == key


def test_normalize_unknown_returned_unchanged():
    assert normalize_pitch_class("H") == "H"
    assert normalize_pitch_class("Am") == "Am"
    assert normalize_pitch_class("") == ""


# ---------------------------------------------------------------------------
# semitone_distance
# ---------------------------------------------------------------------------


def test_distance_upward():
    assert semitone_distance("C", "D") == 2
    assert semitone_distance("G", "C") == 5


def test_distance_wraps_around():
    assert semitone_distance("D", "C") == 10
    assert semitone_distance("B", "C") == 1


def test_distance_accepts_flats():
    assert semitone_distance("Bb", "C") == 2
    assert semitone_distance("C", "Eb") == 3


def test_distance_same_key_is_zero():
    assert semitone_distance("F#", "Gb") == 0


def test_distance_unknown_key_is_zero():
    assert semitone_distance("C", "X") == 0
    assert semitone_distance("Am", "C") == 0


# ---------------------------------------------------------------------------
# transpose_chord_token
# ---------------------------------------------------------------------------


def test_token_basic_shift():
    assert transpose_chord_token("C", 2) == "D"
    assert transpose_chord_token("A#", 1) == "B"
    assert transpose_chord_token("B", 1) == "C"


def test_token_keeps_suffix():
    assert transpose_chord_token("Dsus4", 2) == "Esus4"
    assert transpose_chord_token("Ebmaj7", 1) == "Emaj7"
    assert transpose_chord_token("Bbm7(b5)", 1) == "Bm7(b5)"


def test_token_twelve_cycle_closure():
    assert transpose_chord_token("C#m7", 12) == "C#m7"
    assert transpose_chord_token("C#m7", 24) == "C#m7"


def test_token_negative_shift():
    assert transpose_chord_token("C", -1) == "B"
    assert transpose_chord_token("A", -14) == "G"


def test_token_slash_chord():
    assert transpose_chord_token("C/G", 2) == "D/A"
    assert transpose_chord_token("G7/B", 5) == "C7/E"


def test_token_double_accidental_base():
    assert transpose_chord_token("C##m", 0) == "Dm"


def test_token_not_a_chord_unchanged():
    assert transpose_chord_token("N.C.", 3) == "N.C."


# ---------------------------------------------------------------------------
# transpose_line
# ---------------------------------------------------------------------------


def test_line_preserves_spacing():
    assert transpose_line("C   G   Am   F", 2) == "D   A   Bm   G"


def test_line_sharps():
    assert transpose_line("A#  C#m  F#7", 1) == "B  Dm  G7"


def test_line_extensions_and_slash_bass():
    assert transpose_line("Cmaj7 C7(9) Cadd9 D/F#", 2) == "Dmaj7 D7(9) Dadd9 E/G#"


def test_line_leaves_lyrics_alone():
    assert transpose_line("  Quando a manhã chegar, Deus é Bom", 2) == (
        "  Quando a manhã chegar, Deus é Bom"
    )


def test_line_diminished_ordinal_sign():
    assert transpose_line("Cº  G", 2) == "Dº  A"
    assert transpose_line("Bº7 C", 1) == "Cº7 C#"


def test_line_accented_words_are_not_chords():
    assert transpose_line("Dá-me Tua paz", 2) == "Dá-me Tua paz"


def test_line_word_shaped_like_chord_is_transposed():
    # Known heuristic limitation: Portuguese "Em" ("in") looks like E minor.
    assert transpose_line("Em cada manhã", 2) == "F#m cada manhã"


# ---------------------------------------------------------------------------
# transpose_content
# ---------------------------------------------------------------------------


def test_content_title_preserved():
    assert transpose_content("My Song\nC D\nG Am", "C", "D") == "My Song\nD E\nA Bm"


def test_content_title_is_first_non_blank_line():
    content = "\n\nC Major Blues\nC  F\n"
    assert transpose_content(content, "C", "D") == "\n\nC Major Blues\nD  G\n"


def test_content_identity_on_equal_keys():
    content = "Santo\nG  D  Em  C\n  Santo, santo"
    assert transpose_content(content, "G", "G") is content


def test_content_identity_on_unknown_key():
    content = "Santo\nG  D  Em  C"
    assert transpose_content(content, "G", "H") == content


def test_content_round_trip():
    content = "Title\nC  G/B  Am7  F\nD#m  A#sus4 C#7(9)\n  lyrics here"
    up = transpose_content(content, "C", "E")
    assert up == "Title\nE  B/D#  C#m7  A\nGm  Dsus4 F7(9)\n  lyrics here"
    assert transpose_content(up, "E", "C") == content


# ---------------------------------------------------------------------------
# convert_minor_to_relative_major
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "key, expected",
    [
        ("Am", "C"),
        ("Em", "G"),
        ("Bm", "D"),
        ("Bbm", "C#"),
        ("A#m", "C#"),
        ("Dbm", "E"),
        ("F#m", "A"),
        ("G#m", "B"),
        ("ebm", "F#"),
    ],
)
def test_relative_major(key, expected):
    assert convert_minor_to_relative_major(key) == expected


def test_relative_major_leaves_major_keys():
    assert convert_minor_to_relative_major("C") == "C"
    assert convert_minor_to_relative_major(" Bb ") == "Bb"


def test_relative_major_with_extension():
    assert convert_minor_to_relative_major("F#m7") == "A"


def test_relative_major_ignores_maj():
    assert convert_minor_to_relative_major("Emaj7") == "Emaj7"


def test_relative_major_unknown_minor_unchanged():
    assert convert_minor_to_relative_major("Xm") == "Xm"
