"""Slug normalization, wiki-link grammar and YAML frontmatter parsing.

Pure functions shared by the build (loader, resolver) and by the render-time
transformer.  Nothing here touches the filesystem.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import yaml


# ---------------------------------------------------------------------------
# Utility
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9-]")
_HYPHENS_RE = re.compile(r"-{2,}")


def slugify(value: Any) -> str:
    """Convert a path segment to a slug.

    Lowercases, turns whitespace runs into a hyphen, *replaces* every character
    outside ``[a-z0-9-]`` with a hyphen, collapses hyphen runs and trims
    hyphens from both ends.

    Example:
        slugify("My File (2)")  # -> "my-file-2"
        slugify("C++ notes")    # -> "c-notes"
    """
    text = "" if value is None else str(value)
    text = _WHITESPACE_RE.sub("-", text.lower())
    text = _DISALLOWED_RE.sub("-", text)
    text = _HYPHENS_RE.sub("-", text)
    return text.strip("-")


def sanitize_slug(value: Any) -> str:
    """Normalize free text for slug comparison.

    Same steps as :func:`slugify` except that disallowed characters are
    *stripped* instead of replaced, so ``"Rock'n'Roll"`` becomes
    ``"rocknroll"`` rather than ``"rock-n-roll"``.
    """
    text = "" if value is None else str(value)
    text = _WHITESPACE_RE.sub("-", text.lower())
    text = _DISALLOWED_RE.sub("", text)
    text = _HYPHENS_RE.sub("-", text)
    return text.strip("-")


def slugify_heading(value: Any) -> str:
    """Turn heading text into a URL fragment."""
    return sanitize_slug(value)


# ---------------------------------------------------------------------------
# Wiki-link grammar
# ---------------------------------------------------------------------------

WIKILINK_RE = re.compile(r"\[\[([^\[\]]+)\]\]")


@dataclass(frozen=True)
class WikiLink:
    """One parsed ``[[title#header|alias]]`` mention."""

    title: str
    header: str | None = None
    alias: str | None = None
    raw: str = ""

    @property
    def display_text(self) -> str:
        """Alias if given, else header, else the title."""
        return self.alias or self.header or self.title


def parse_wikilink_body(body: str, raw: str = "") -> WikiLink:
    """Parse the text between ``[[`` and ``]]``.

    - ``"Title"``              -> title only
    - ``"Title|Alias"``        -> title + alias
    - ``"Title#Header"``       -> title + header
    - ``"Title#Header|Alias"`` -> all three

    The alias is split off at the first ``|``, the header at the first ``#``.
    The title may come back empty; callers treat such mentions as plain text.
    """
    target, sep, alias_part = str(body or "").partition("|")
    title_part, _, header_part = target.partition("#")
    alias = alias_part.strip() if sep else ""
    header = header_part.strip()
    return WikiLink(
        title=title_part.strip(),
        header=header or None,
        alias=alias or None,
        raw=raw or f"[[{body}]]",
    )


def extract_wikilinks(text: Any) -> list[WikiLink]:
    """Extract every ``[[wikilink]]`` in *text* that has a non-empty title."""
    if not text or not isinstance(text, str):
        return []
    links: list[WikiLink] = []
    for match in WIKILINK_RE.finditer(text):
        link = parse_wikilink_body(match.group(1), raw=match.group(0))
        if link.title:
            links.append(link)
    return links


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------

_FENCE_RE = re.compile(r"^---[ \t]*\r?$", re.MULTILINE)


class FrontmatterError(ValueError):
    """Raised when a document's frontmatter block cannot be parsed."""


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split YAML frontmatter from body text.

    Returns ``(meta_dict, body_string)``.  If there is no frontmatter the
    meta dict is empty and the full text is returned as body.  Raises
    :class:`FrontmatterError` for invalid YAML or a block that is not a
    mapping.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    first_newline = text.find("\n")
    if first_newline == -1 or text[:first_newline].rstrip() != "---":
        return {}, text

    # Closing fence is a line of exactly three dashes
    closing = _FENCE_RE.search(text, first_newline + 1)
    if closing is None:
        return {}, text

    yaml_block = text[first_newline + 1 : closing.start()]
    body = text[closing.end() :]
    if body.startswith("\n"):
        body = body[1:]

    try:
        meta = yaml.safe_load(yaml_block)
    except yaml.YAMLError as exc:
        raise FrontmatterError(str(exc)) from exc
    if meta is None:
        return {}, body
    if not isinstance(meta, dict):
        raise FrontmatterError(
            f"expected a mapping, got {type(meta).__name__}"
        )
    return meta, body


def field_strings(value: Any) -> list[str]:
    """Normalize a frontmatter field that may hold wiki-links.

    A string becomes a one-item list, a list keeps its string items, and
    anything else is ignored.
    """
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


def string_list(value: Any) -> list[str]:
    """Read ``tags``/``aliases`` style fields.

    Accepts a list of strings or a comma-separated string.  Items are trimmed,
    empty items dropped and duplicates removed (first occurrence wins).
    Numbers, mappings and other shapes yield an empty list.
    """
    if isinstance(value, list):
        items = [v for v in value if isinstance(v, str)]
    elif isinstance(value, str):
        items = value.split(",")
    else:
        return []

    out: list[str] = []
    for item in items:
        item = item.strip()
        if item and item not in out:
            out.append(item)
    return out
