"""Utility functions for tripbatch."""

import re
import unicodedata

_NUMBERED = re.compile(r"^(\d+)-(.*)$")


def slugify(text: str) -> str:
    """
    Convert text to a URL-safe slug.
    
    - Lowercase
    - Unicode normalize (NFKD), drop combining marks
    - Remove punctuation except spaces and hyphens
    - Convert whitespace to single `-`
    - Collapse multiple `-` to single, strip leading/trailing `-`
    
    Examples:
        >>> slugify("Giro delle Dolomiti")
        'giro-delle-dolomiti'
        >>> slugify("Ortisei – Cortina d'Ampezzo")
        'ortisei-cortina-dampezzo'
    """
    text = text.lower()
    
    # En dash, em dash and minus sign
    text = text.replace('–', '-').replace('—', '-').replace('−', '-')
    
    text = unicodedata.normalize('NFKD', text)
    text = ''.join(c for c in text if not unicodedata.combining(c))
    
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    text = re.sub(r'-+', '-', text)
    
    return text.strip('-')


def folder_number(name: str) -> int | None:
    """Leading number of a `NN-name` folder, or None if it is not numbered."""
    m = _NUMBERED.match(name)
    return int(m.group(1)) if m else None


def title_from_folder(name: str) -> str:
    """
    Derive a human-readable title from a numbered folder name.
    
    The `NN-` prefix is dropped, dashes and underscores become spaces and
    each word is capitalised; the rest of the word is left untouched.
    
    Examples:
        >>> title_from_folder("01-bolzano-ortisei")
        'Bolzano Ortisei'
        >>> title_from_folder("03-foo_bar")
        'Foo Bar'
    """
    m = _NUMBERED.match(name)
    rest = m.group(2) if m else name
    words = re.split(r"[-_\s]+", rest)
    return " ".join(w[:1].upper() + w[1:] for w in words if w)
