"""
Naming helpers - turn wire names and URL segments into Python identifiers

Supports:
- Word splitting on separators and camelCase/digit boundaries
- PascalCase type names and snake_case member names
- Keyword-safe identifiers
- Pluralize/singularize of the trailing word of a compound name

Every normalizer is idempotent: applying it to its own output is a no-op.
"""

import keyword
import re
from typing import List
from urllib.parse import urlparse

# Acronym run before a capitalized word, capitalized word, upper run, digits
WORD_PATTERN = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")

VERSION_SEGMENT = re.compile(r"^v\d+$", re.IGNORECASE)

# Singular words ending in s; any other -us/-is word is read as a plural (skus, kpis)
SINGULAR_S_WORDS = {
    "alias",
    "atlas",
    "bias",
    "bonus",
    "bus",
    "campus",
    "canvas",
    "census",
    "corpus",
    "focus",
    "gas",
    "genus",
    "iris",
    "lens",
    "nexus",
    "plus",
    "radius",
    "status",
    "syllabus",
    "tennis",
    "virus",
}

UNCOUNTABLE_WORDS = {
    "data",
    "deer",
    "equipment",
    "feedback",
    "fish",
    "information",
    "metadata",
    "money",
    "news",
    "rice",
    "series",
    "sheep",
    "species",
}

IRREGULAR_PLURALS = {
    "child": "children",
    "cookie": "cookies",
    "foot": "feet",
    "goose": "geese",
    "index": "indices",
    "man": "men",
    "matrix": "matrices",
    "mouse": "mice",
    "movie": "movies",
    "ox": "oxen",
    "person": "people",
    "tooth": "teeth",
    "woman": "women",
}
IRREGULAR_SINGULARS = {plural: singular for singular, plural in IRREGULAR_PLURALS.items()}

O_ES_WORDS = {"buffalo", "echo", "hero", "potato", "tomato", "veto"}
SIS_STEMS = ("analy", "ba", "diagno", "parenthe", "progno", "synop", "the")


def split_words(value: str) -> List[str]:
    """Split a name into words on separators and case/digit boundaries."""
    if not value:
        return []
    return WORD_PATTERN.findall(value)


def to_pascal_case(value: str) -> str:
    """
    Build a type name: every word gets an upper-case first letter

    Examples:
        user_name  -> UserName
        first-name -> FirstName
        userId     -> UserId
    """
    return "".join(word[0].upper() + word[1:] for word in split_words(value))


def to_snake_case(value: str) -> str:
    """Build a member/parameter name: lower-case words joined by underscores."""
    return "_".join(word.lower() for word in split_words(value))


def safe_identifier(name: str, fallback: str = "value") -> str:
    """Make a name usable as a Python identifier (keywords get a trailing underscore)."""
    if not name:
        return fallback
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def safe_type_name(value: str, fallback: str = "Item") -> str:
    """PascalCase type name that is a valid, non-keyword Python identifier."""
    name = to_pascal_case(value)
    if not name:
        return fallback
    if name[0].isdigit():
        name = f"{fallback}{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def pluralize(value: str) -> str:
    """Pluralize the trailing word of a compound name (UserAddress -> UserAddresses)."""
    return _transform_last_word(value, _pluralize_word)


def singularize(value: str) -> str:
    """Singularize the trailing word of a compound name (order_items -> order_item)."""
    return _transform_last_word(value, _singularize_word)


def path_segments(path: str) -> List[str]:
    """Literal segments of a URL path; placeholders and the query string are dropped."""
    return [
        p for p in path.split("?")[0].strip("/").split("/")
        if p and not p.startswith("{") and not p.startswith(":")
    ]


def resource_segment(path: str) -> str:
    """
    Segment naming the resource a path serves, or "" when there is none

    A trailing version segment (/api/v2) defers to the segment before it.
    """
    parts = path_segments(path)
    if parts and VERSION_SEGMENT.match(parts[-1]):
        parts = parts[:-1]
    return parts[-1] if parts else ""


def extract_api_name(url: str, default: str = "MyApi") -> str:
    """Derive an API name from a base URL host (https://api.github.com -> Github)."""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return default

    host = host.replace("api.", "").replace("www.", "")
    first = host.split(".")[0] if host else ""
    name = to_pascal_case(first)
    return name if name and not name[0].isdigit() else default


def _transform_last_word(value: str, transform) -> str:
    if not value:
        return value

    matches = list(WORD_PATTERN.finditer(value))
    if not matches:
        return value

    last = matches[-1]
    word = last.group(0)
    if word.isdigit():
        return value

    return value[: last.start()] + _match_case(word, transform(word.lower())) + value[last.end():]


def _match_case(original: str, result: str) -> str:
    if len(original) > 1 and original.isupper():
        return result.upper()
    if original[0].isupper():
        return result[0].upper() + result[1:]
    return result


def _pluralize_word(word: str) -> str:
    if word in UNCOUNTABLE_WORDS or word in IRREGULAR_SINGULARS:
        return word
    if word in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[word]

    # Already plural: singular form pluralizes back to the same word
    singular = _singularize_word(word)
    if singular != word and _pluralize_singular(singular) == word:
        return word

    return _pluralize_singular(word)


def _pluralize_singular(word: str) -> str:
    if word in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[word]
    if word in UNCOUNTABLE_WORDS:
        return word
    if word.endswith("sis") and word[:-3] in SIS_STEMS:
        return word[:-3] + "ses"
    if len(word) > 1 and word.endswith("y") and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    if word.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if word in O_ES_WORDS:
        return word + "es"
    if word.endswith("lf"):
        return word[:-1] + "ves"
    if word.endswith(("knife", "wife", "life")):
        return word[:-2] + "ves"
    return word + "s"


def _singularize_word(word: str) -> str:
    if word in UNCOUNTABLE_WORDS or word in IRREGULAR_PLURALS or word in SINGULAR_S_WORDS:
        return word
    if word in IRREGULAR_SINGULARS:
        return IRREGULAR_SINGULARS[word]
    if word.endswith("ses") and word[:-3] in SIS_STEMS:
        return word[:-3] + "sis"
    if len(word) > 3 and word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("lves"):
        return word[:-3] + "f"
    if word.endswith(("knives", "wives", "lives")):
        return word[:-3] + "fe"
    if word.endswith("oes") and word[:-2] in O_ES_WORDS:
        return word[:-2]
    if word.endswith(("sses", "shes", "ches", "xes", "zzes", "uses")):
        return word[:-2]
    if word.endswith(("ss", "sis")):
        return word
    if len(word) > 1 and word.endswith("s"):
        return word[:-1]
    return word
