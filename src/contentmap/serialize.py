"""JSON artifacts: writing the node list and health report, reading them back.

The node list is the contract with the render layer, which only ever sees
these records (never :class:`~contentmap.models.ContentNode` objects).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from .health import ContentHealth
from .models import ContentNode

log = logging.getLogger(__name__)

DIRECTION_OUTBOUND = "outbound"
DIRECTION_INBOUND = "inbound"
DIRECTION_CHAIN = "chain"


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

def node_record(node: ContentNode) -> dict[str, Any]:
    """Public shape of a node; drops raw mentions and the file path."""
    return {
        "id": node.id,
        "identifier": node.identifier,
        "slug": node.slug,
        "collection": node.collection,
        "title": node.title,
        "description": node.description,
        "tags": list(node.tags),
        "aliases": list(node.aliases),
        "outboundLinks": [ref.to_dict() for ref in node.outbound_links],
        "inboundLinks": [ref.to_dict() for ref in node.inbound_links],
        "chainedLinks": [ref.to_dict() for ref in node.chained_links],
    }


def health_record(health: ContentHealth) -> dict[str, Any]:
    return {
        "badFiles": health.bad_files,
        "unresolvedMentions": health.unresolved_mentions,
        "idCollisions": health.id_collisions,
        "missingIdentifiers": health.missing_identifiers,
        "aliasConflicts": health.alias_conflicts,
        "orphans": {
            "strict": health.orphans.strict,
            "noInbound": health.orphans.no_inbound,
            "noOutbound": health.orphans.no_outbound,
        },
    }


def dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_json(out_dir: str | Path, files: Iterable[tuple[str, Any]]) -> list[Path]:
    """Write ``(filename, data)`` pairs into *out_dir*, creating it if needed."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, data in files:
        out_path = out_dir / name
        out_path.write_text(dumps(data), encoding="utf-8")
        log.info("wrote %s", out_path)
        written.append(out_path)
    return written


# ---------------------------------------------------------------------------
# Reading the node list back
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContentLink:
    """A link edge seen from one node, as shown by link components."""

    id: str
    identifier: str | None
    slug: str
    collection: str
    title: str
    direction: str
    kind: str


class ContentMap:
    """Read-only view over a serialized node list.

    Usage::

        cmap = ContentMap.load("src/data/content-map.json")
        node = cmap.get_node_by_slug("atlas")
        for link in cmap.flatten_node_links(node):
            print(link.direction, link.title)
    """

    def __init__(self, records: Iterable[dict[str, Any]]) -> None:
        self.nodes: list[dict[str, Any]] = [r for r in records if isinstance(r, dict)]

    @classmethod
    def load(cls, path: str | Path) -> "ContentMap":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"{path}: expected a JSON list of nodes")
        return cls(data)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes)

    def get_node_by_slug(self, slug: str) -> dict[str, Any] | None:
        return next((n for n in self.nodes if n.get("slug") == slug), None)

    def get_node_by_identifier(self, identifier: str) -> dict[str, Any] | None:
        return next((n for n in self.nodes if n.get("identifier") == identifier), None)

    def get_node_by_path(self, path: str) -> dict[str, Any] | None:
        """Look a node up by ``collection/slug``."""
        collection, _, slug = path.partition("/")
        if not slug:
            return None
        return next(
            (n for n in self.nodes if n.get("collection") == collection and n.get("slug") == slug),
            None,
        )

    def nodes_with_slug(self, slug: str) -> list[dict[str, Any]]:
        return [n for n in self.nodes if n.get("slug") == slug]

    def get_node_by_id(self, node_id: str) -> dict[str, Any] | None:
        return next((n for n in self.nodes if n.get("id") == node_id), None)

    @staticmethod
    def flatten_node_links(node: dict[str, Any]) -> list[ContentLink]:
        """Outbound, then inbound, then chained links of *node*."""

        def to_link(edge: dict[str, Any], direction: str) -> ContentLink:
            return ContentLink(
                id=edge["id"],
                identifier=edge.get("identifier"),
                slug=edge.get("slug", ""),
                collection=edge.get("collection", ""),
                title=edge.get("title", ""),
                direction=direction,
                kind=edge.get("kind", ""),
            )

        return (
            [to_link(e, DIRECTION_OUTBOUND) for e in node.get("outboundLinks", [])]
            + [to_link(e, DIRECTION_INBOUND) for e in node.get("inboundLinks", [])]
            + [to_link(e, DIRECTION_CHAIN) for e in node.get("chainedLinks", [])]
        )
