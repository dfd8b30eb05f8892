"""Helpers shared by the code templates (imports, literals, docstrings)."""

import json
import re
from typing import Iterable, List

NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Names a generated annotation may use, by the module that provides them
IMPORTABLE_NAMES = {
    "typing": ["Any", "Dict", "List", "Optional"],
    "datetime": ["date", "datetime"],
    "decimal": ["Decimal"],
    "uuid": ["UUID"],
    "pydantic": ["AnyUrl"],
}

STDLIB_MODULES = ("datetime", "decimal", "typing", "uuid")


def referenced_names(annotations: Iterable[str]) -> set:
    """Every identifier appearing in a set of annotations."""
    names = set()
    for annotation in annotations:
        names.update(NAME_PATTERN.findall(annotation))
    return names


def import_lines(annotations: Iterable[str], extra: Iterable[str] = ()) -> List[str]:
    """
    Import statements needed by a set of annotations

    Returns the stdlib block, then third-party; `extra` names are added as
    if they had been referenced (e.g. "Protocol" for a contract).
    """
    names = referenced_names(annotations) | set(extra)
    stdlib, third_party = [], []

    for module in sorted(IMPORTABLE_NAMES):
        wanted = [n for n in IMPORTABLE_NAMES[module] if n in names]
        if module == "typing":
            wanted = sorted(set(wanted) | ({"Protocol"} & names))
        if not wanted:
            continue

        line = f"from {module} import {', '.join(wanted)}"
        if module in STDLIB_MODULES:
            stdlib.append(line)
        else:
            third_party.append(line)

    return stdlib + third_party


def string_literal(value: str) -> str:
    """Double-quoted Python string literal."""
    return json.dumps(value)


def docstring(text: str, indent: str = "    ") -> str:
    """One-line docstring, escaped so any text is safe inside triple quotes."""
    text = " ".join((text or "").split())
    text = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'{indent}"""{text}"""'
