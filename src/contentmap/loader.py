"""Markdown corpus loader.

Walks the content root, parses every markdown file into a
:class:`~contentmap.models.ContentNode` and collects its raw wiki-link
mentions.  Per-file problems are recorded on the
:class:`~contentmap.health.ContentHealth` accumulator and the file is
skipped; only a failure to enumerate the root itself propagates.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

from .config import BuildConfig
from .core import (
    FrontmatterError,
    extract_wikilinks,
    field_strings,
    parse_frontmatter,
    slugify,
    string_list,
)
from .health import ContentHealth
from .models import FRONTMATTER_ORIGINS, ORIGIN_BODY, ContentNode, RawLink

log = logging.getLogger(__name__)

_SEGMENT_SPLIT_RE = re.compile(r"[\\/]")


def find_markdown_files(root: str | Path, extensions: tuple[str, ...] = (".md", ".mdx")) -> list[Path]:
    """Recursively find markdown files under *root*.

    A missing root (or a directory that vanishes mid-walk) yields nothing;
    any other OS error propagates.  Symlinks are not followed.  The result
    is sorted by relative path so registration order is reproducible.
    """
    root = Path(root)
    suffixes = tuple(e.lower() for e in extensions)
    found: list[Path] = []

    def walk(directory: Path) -> None:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except FileNotFoundError:
            return
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                walk(Path(entry.path))
            elif entry.is_file(follow_symlinks=False) and entry.name.lower().endswith(suffixes):
                found.append(Path(entry.path))

    walk(root)
    return sorted(found, key=lambda p: p.relative_to(root).parts)


def _strip_extension(path: str, extensions: tuple[str, ...]) -> str:
    lowered = path.lower()
    for ext in extensions:
        if lowered.endswith(ext):
            return path[: -len(ext)]
    return path


def _string_field(meta: dict[str, Any], key: str) -> str:
    value = meta.get(key)
    return value.strip() if isinstance(value, str) else ""


def collect_raw_links(body: str, meta: dict[str, Any]) -> list[RawLink]:
    """Collect mentions from the body, then ``resources``, ``source``, ``chains``."""
    raw_links = [RawLink(link.title, ORIGIN_BODY) for link in extract_wikilinks(body)]
    for origin in FRONTMATTER_ORIGINS:
        for text in field_strings(meta.get(origin)):
            raw_links.extend(RawLink(link.title, origin) for link in extract_wikilinks(text))
    return raw_links


def load_content_nodes(
    root: str | Path,
    health: ContentHealth,
    config: BuildConfig | None = None,
) -> dict[str, ContentNode]:
    """Load every markdown document under *root*, keyed by node id.

    Insertion order of the returned dict is registration order.  When two
    files claim the same id the first one wins and the second is recorded
    as a collision.
    """
    config = config or BuildConfig(content_root=Path(root))
    root = Path(root)
    nodes_by_id: dict[str, ContentNode] = {}

    for abs_path in find_markdown_files(root, config.extensions):
        rel = abs_path.relative_to(root)
        rel_path = rel.as_posix()
        node = _load_node(abs_path, rel, health, config)
        if node is None:
            continue

        existing = nodes_by_id.get(node.id)
        if existing is not None:
            log.warning("id collision on %r: keeping %s, dropping %s", node.id, existing.file_path, rel_path)
            health.add_id_collision(node.id, existing.file_path, rel_path)
            continue

        nodes_by_id[node.id] = node

    log.debug("loaded %d node(s) from %s", len(nodes_by_id), root)
    return nodes_by_id


def _load_node(
    abs_path: Path,
    rel: Path,
    health: ContentHealth,
    config: BuildConfig,
) -> ContentNode | None:
    rel_path = rel.as_posix()
    parts = rel.parts

    # Expect at least "<collection>/<file>.md"
    if len(parts) < 2:
        _bad_file(health, rel_path, "No collection segment (expected <content-root>/<collection>/file.md)")
        return None

    collection = parts[0]
    without_ext = _strip_extension("/".join(parts[1:]), config.extensions)
    slug_segments = [s for s in (slugify(seg) for seg in _SEGMENT_SPLIT_RE.split(without_ext)) if s]
    slug = "/".join(slug_segments)

    try:
        text = abs_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _bad_file(health, rel_path, f"File read error: {exc}")
        return None

    try:
        meta, body = parse_frontmatter(text)
    except FrontmatterError as exc:
        _bad_file(health, rel_path, f"Frontmatter parse error: {exc}")
        return None

    # Identity: declared identifier or collection/slug fallback
    identifier = _string_field(meta, config.identifier_field) or None
    node_id = identifier or f"{collection}/{slug}"
    declared_title = _string_field(meta, "title")
    if identifier is None:
        health.add_missing_identifier(rel_path, collection, slug, declared_title)

    title = declared_title or (slug_segments[-1] if slug_segments else without_ext)

    return ContentNode(
        id=node_id,
        identifier=identifier,
        slug=slug,
        collection=collection,
        title=title,
        file_path=rel_path,
        description=_string_field(meta, "description"),
        tags=string_list(meta.get("tags")),
        aliases=string_list(meta.get("aliases")),
        raw_links=collect_raw_links(body, meta),
    )


def _bad_file(health: ContentHealth, rel_path: str, error: str) -> None:
    log.warning("skipping %s: %s", rel_path, error)
    health.add_bad_file(rel_path, error)
