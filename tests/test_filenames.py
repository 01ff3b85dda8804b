import pytest

from utils.filenames import sanitize_filename


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Mono Red Burn", "Mono Red Burn"),
        ("a/b\\c", "a_b_c"),
        ('What? "Elves"', "What_ _Elves"),
        ("...hidden", "hidden"),
        ("deck..dek", "deck_dek"),
        ("CON", "_CON"),
        ("lpt1.dek", "_lpt1.dek"),
        ("  ", "deck"),
        ("___", "deck"),
    ],
)
def test_sanitize_filename(name, expected):
    assert sanitize_filename(name) == expected


def test_sanitize_filename_fallback():
    assert sanitize_filename("<>", fallback="saved_deck") == "saved_deck"
