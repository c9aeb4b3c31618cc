"""
Toolhub Backend — Raw Tag Normalization
=========================================

What:  Turns the `tags` field of a tool request into a clean list of tag names.
Why:   The field has been stored in three shapes over the life of the directory:
         - a JSON list                       ["AI", "Writing"]
         - a PostgreSQL array literal        '{AI,"Writing Tools"}'
         - a comma-joined string             'AI, Writing'
       All readers go through this module instead of sniffing types locally.
How:   `classify_raw_tags` detects the shape, `parse_raw_tags` splits it and
       normalizes every entry with `normalize_tag_name`.

Normalization rules (the same ones TagResolver stores names with):
    1. Strip surrounding whitespace (and quotes, for array-literal entries)
    2. Collapse internal whitespace runs to one space
    3. Lowercase
    4. Drop empty entries and repeated names, keeping first-seen order
"""

import enum
import re
from typing import Any, Iterable, List

from toolhub.exceptions import ValidationError

_WHITESPACE_RUN = re.compile(r"\s+")


class RawTagsForm(str, enum.Enum):
    EMPTY = "empty"
    LIST = "list"
    ARRAY_LITERAL = "array_literal"
    DELIMITED = "delimited"


def normalize_tag_name(name: str) -> str:
    """Canonical form of a tag name: trimmed, single-spaced, lowercase."""
    return _WHITESPACE_RUN.sub(" ", name.strip()).lower()


def classify_raw_tags(raw: Any) -> RawTagsForm:
    """
    Detect which of the stored shapes `raw` is.

    Raises:
        ValidationError: `raw` is neither None, a string, nor a list/tuple
    """
    if raw is None:
        return RawTagsForm.EMPTY
    if isinstance(raw, (list, tuple)):
        return RawTagsForm.LIST
    if isinstance(raw, str):
        stripped = raw.strip()
        if not stripped:
            return RawTagsForm.EMPTY
        if stripped.startswith("{") and stripped.endswith("}"):
            return RawTagsForm.ARRAY_LITERAL
        return RawTagsForm.DELIMITED
    raise ValidationError(
        message="Request tags must be a list or a string",
        field="tags",
        context={"type": type(raw).__name__},
    )


def _split_array_literal(literal: str) -> List[str]:
    inner = literal.strip()[1:-1]
    return [item.strip().strip('"') for item in inner.split(",")]


def _unique_normalized(names: Iterable[Any]) -> List[str]:
    seen = set()
    result = []
    for name in names:
        if name is None:
            continue
        normalized = normalize_tag_name(str(name))
        if normalized and normalized not in seen:
            seen.add(normalized)
            result.append(normalized)
    return result


def parse_raw_tags(raw: Any) -> List[str]:
    """
    Normalize a raw request `tags` value into unique tag names.

    Examples:
        parse_raw_tags(["AI", " ai ", "Writing  Tools"]) == ["ai", "writing tools"]
        parse_raw_tags("{tag1,tag2}")                    == ["tag1", "tag2"]
        parse_raw_tags("tag1, tag2")                     == ["tag1", "tag2"]
        parse_raw_tags(None)                             == []
    """
    form = classify_raw_tags(raw)

    if form is RawTagsForm.EMPTY:
        return []
    if form is RawTagsForm.LIST:
        return _unique_normalized(raw)
    if form is RawTagsForm.ARRAY_LITERAL:
        return _unique_normalized(_split_array_literal(raw))
    return _unique_normalized(raw.split(","))
