"""Data model for content nodes and the links between them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Link origins, in the order they are scanned.
ORIGIN_BODY = "body"
ORIGIN_RESOURCES = "resources"
ORIGIN_SOURCE = "source"
ORIGIN_CHAINS = "chains"

FRONTMATTER_ORIGINS = (ORIGIN_RESOURCES, ORIGIN_SOURCE, ORIGIN_CHAINS)


@dataclass(frozen=True)
class RawLink:
    """A mention collected at load time, before resolution."""

    target_title: str
    origin: str


@dataclass(frozen=True)
class Edge:
    from_id: str
    to_id: str
    origin: str


@dataclass(frozen=True)
class LinkRef:
    """Lightweight pointer to another node, as stored in link lists."""

    id: str
    identifier: str | None
    title: str
    slug: str
    collection: str
    kind: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "identifier": self.identifier,
            "title": self.title,
            "slug": self.slug,
            "collection": self.collection,
            "kind": self.kind,
        }


@dataclass
class ContentNode:
    """One markdown document and its metadata.

    ``raw_links`` is filled by the loader; the three link lists stay empty
    until the graph build populates them.
    """

    id: str
    identifier: str | None
    slug: str
    collection: str
    title: str
    file_path: str
    description: str = ""
    tags: list[str] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)
    raw_links: list[RawLink] = field(default_factory=list)
    outbound_links: list[LinkRef] = field(default_factory=list)
    inbound_links: list[LinkRef] = field(default_factory=list)
    chained_links: list[LinkRef] = field(default_factory=list)

    def ref(self, kind: str) -> LinkRef:
        """Return a :class:`LinkRef` pointing at this node."""
        return LinkRef(
            id=self.id,
            identifier=self.identifier,
            title=self.title,
            slug=self.slug,
            collection=self.collection,
            kind=kind,
        )

    def summary(self) -> dict[str, Any]:
        """Identity fields used in health report entries."""
        return {
            "id": self.id,
            "identifier": self.identifier,
            "title": self.title,
            "collection": self.collection,
            "slug": self.slug,
            "filePath": self.file_path,
        }
