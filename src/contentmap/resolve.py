"""Wiki-link resolution.

A :class:`ResolutionIndex` maps titles and slugs to the ids of the nodes that
claim them.  Keys map to *sets* of ids so that a title shared by several
nodes is detected as ambiguous instead of silently resolving to one of them.

Aliases are never indexed: they exist for the authoring tool's rename
tracking and must not satisfy a link target.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from .core import sanitize_slug

if TYPE_CHECKING:
    from .health import ContentHealth
    from .models import ContentNode
    from .serialize import ContentMap

RESOLVED = "resolved"
AMBIGUOUS = "ambiguous"
UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Resolution:
    status: str
    node_id: str | None = None
    candidates: tuple[str, ...] = ()
    message: str | None = None

    @property
    def resolved(self) -> bool:
        return self.status == RESOLVED


class ResolutionIndex:
    """Title and slug lookup tables over a fixed set of nodes.

    Candidate ids keep insertion order, which is node registration order.
    """

    def __init__(self) -> None:
        self.by_title: dict[str, dict[str, None]] = {}
        self.by_slug: dict[str, dict[str, None]] = {}
        self.entries: dict[str, Mapping[str, Any]] = {}

    @staticmethod
    def _add(table: dict[str, dict[str, None]], key: str, node_id: str) -> None:
        if not key:
            return
        table.setdefault(key, {})[node_id] = None

    def add(self, node_id: str, title: str, slug: str, entry: Mapping[str, Any] | None = None) -> None:
        title = title or ""
        self._add(self.by_title, title, node_id)
        self._add(self.by_title, title.lower(), node_id)
        self._add(self.by_slug, sanitize_slug(title), node_id)
        self._add(self.by_slug, sanitize_slug(slug), node_id)
        if entry is not None:
            self.entries.setdefault(node_id, entry)

    @classmethod
    def from_nodes(cls, nodes: Iterable[ContentNode]) -> "ResolutionIndex":
        index = cls()
        for node in nodes:
            index.add(node.id, node.title, node.slug, {
                "id": node.id,
                "identifier": node.identifier,
                "title": node.title,
                "slug": node.slug,
                "collection": node.collection,
            })
        return index

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "ResolutionIndex":
        """Rebuild the index from serialized node records."""
        index = cls()
        for record in records:
            if not record or not record.get("id"):
                continue
            index.add(record["id"], str(record.get("title") or ""), str(record.get("slug") or ""), record)
        return index

    @classmethod
    def from_content_map(cls, content_map: ContentMap) -> "ResolutionIndex":
        return cls.from_records(content_map.nodes)

    def entry(self, node_id: str) -> Mapping[str, Any] | None:
        """Return the record a resolved id points at."""
        return self.entries.get(node_id)

    def __len__(self) -> int:
        return len(self.entries)


class LinkResolver:
    """Resolve raw link titles against a :class:`ResolutionIndex`.

    Strategy, stopping at the first definite outcome:

    1. exact title, then lowercased title
    2. ``sanitize_slug(title)`` against title and path slugs

    More than one candidate at a step is ambiguous and resolves to nothing.
    When a :class:`ContentHealth` is attached, failure messages are recorded
    on it once per distinct message.
    """

    def __init__(self, index: ResolutionIndex, health: ContentHealth | None = None) -> None:
        self.index = index
        self.health = health

    def lookup(self, raw_title: str) -> Resolution:
        """Resolve *raw_title* without recording anything."""
        exact = self.index.by_title.get(raw_title) or self.index.by_title.get(raw_title.lower())
        if exact:
            ids = tuple(exact)
            if len(ids) == 1:
                return Resolution(RESOLVED, ids[0], ids)
            return Resolution(
                AMBIGUOUS,
                candidates=ids,
                message=f'Ambiguous link "{raw_title}" → {", ".join(ids)}',
            )

        slug = sanitize_slug(raw_title)
        matches = self.index.by_slug.get(slug)
        if matches:
            ids = tuple(matches)
            if len(ids) == 1:
                return Resolution(RESOLVED, ids[0], ids)
            return Resolution(
                AMBIGUOUS,
                candidates=ids,
                message=f'Ambiguous slug "{raw_title}" (→ {slug}) → {", ".join(ids)}',
            )

        return Resolution(UNRESOLVED, message=f'Unresolved wiki-link "{raw_title}"')

    def resolve(self, raw_title: str) -> str | None:
        """Return the target node id, or None when ambiguous or absent."""
        result = self.lookup(raw_title)
        if not result.resolved and self.health is not None and result.message:
            self.health.add_unresolved(result.message)
        return result.node_id
