"""Tests for slug and folder name helpers."""

from tripbatch.core.utils import folder_number, slugify, title_from_folder


def test_slugify_basic():
    """Test basic slugification."""
    assert slugify("Giro delle Dolomiti") == "giro-delle-dolomiti"
    assert slugify("Hello World") == "hello-world"


def test_slugify_unicode():
    """Accents are dropped and dashes normalized."""
    assert slugify("Città d'arte") == "citta-darte"
    assert slugify("Ortisei – Cortina") == "ortisei-cortina"
    assert slugify("Test—Example") == "test-example"


def test_slugify_punctuation():
    assert slugify("Hello, World!") == "hello-world"
    assert slugify("Test (with parentheses)") == "test-with-parentheses"


def test_slugify_separators():
    """Runs of spaces, dashes and underscores collapse to one dash."""
    assert slugify("Multiple   spaces   here") == "multiple-spaces-here"
    assert slugify("Test - - Example") == "test-example"
    assert slugify("snake_case_title") == "snake-case-title"
    assert slugify(" Leading and trailing ") == "leading-and-trailing"


def test_folder_number():
    assert folder_number("01-bolzano") == 1
    assert folder_number("10-x") == 10
    assert folder_number("7-") == 7
    assert folder_number("bolzano") is None
    assert folder_number("01bolzano") is None
    assert folder_number("media") is None


def test_title_from_folder():
    assert title_from_folder("01-bolzano-ortisei") == "Bolzano Ortisei"
    assert title_from_folder("03-foo_bar") == "Foo Bar"
    assert title_from_folder("02-val di-FASSA") == "Val Di FASSA"
    assert title_from_folder("05-") == ""
