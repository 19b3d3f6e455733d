"""Graph construction over loaded content nodes.

Resolves every raw mention into an edge, fills each node's outbound, inbound
and chained link lists, and records alias conflicts and orphan nodes on the
health accumulator.
"""

from __future__ import annotations

import logging
from typing import Any

from .health import ContentHealth, Orphans
from .models import ORIGIN_CHAINS, ContentNode, Edge
from .resolve import LinkResolver, ResolutionIndex

log = logging.getLogger(__name__)


def resolve_edges(nodes_by_id: dict[str, ContentNode], resolver: LinkResolver) -> list[Edge]:
    """Resolve raw mentions in registration order, dropping self-links."""
    edges: list[Edge] = []
    for from_id, node in nodes_by_id.items():
        for raw in node.raw_links:
            to_id = resolver.resolve(raw.target_title)
            if to_id is None or to_id == from_id:
                continue
            edges.append(Edge(from_id, to_id, raw.origin))
    return edges


def apply_edges(nodes_by_id: dict[str, ContentNode], edges: list[Edge]) -> None:
    """Reset and repopulate every node's link lists from *edges*."""
    for node in nodes_by_id.values():
        node.outbound_links = []
        node.inbound_links = []
        node.chained_links = []

    for edge in edges:
        from_node = nodes_by_id.get(edge.from_id)
        to_node = nodes_by_id.get(edge.to_id)
        if from_node is None or to_node is None:
            continue

        to_ref = to_node.ref(edge.origin)
        from_node.outbound_links.append(to_ref)
        to_node.inbound_links.append(from_node.ref(edge.origin))
        if edge.origin == ORIGIN_CHAINS:
            from_node.chained_links.append(to_ref)


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

def analyze_aliases(nodes_by_id: dict[str, ContentNode]) -> list[dict[str, Any]]:
    """Find aliases shared by several nodes or shadowing another node's title.

    Comparison is case-insensitive.  A title is owned by the first node that
    claims it; an alias equal to its own node's title is not a conflict.
    """
    alias_map: dict[str, list[dict[str, Any]]] = {}
    title_map: dict[str, dict[str, Any]] = {}

    for node_id, node in nodes_by_id.items():
        title_lower = (node.title or "").lower()
        if title_lower and title_lower not in title_map:
            title_map[title_lower] = {"id": node_id, "title": node.title, "filePath": node.file_path}

        for alias in node.aliases:
            owners = alias_map.setdefault(alias.lower(), [])
            # One entry per node, even for aliases differing only in case
            if any(owner["id"] == node_id for owner in owners):
                continue
            owners.append({
                "id": node_id,
                "title": node.title,
                "alias": alias,
                "filePath": node.file_path,
            })

    conflicts: list[dict[str, Any]] = []

    for alias_lower, owners in alias_map.items():
        if len(owners) > 1:
            conflicts.append({"type": "duplicate-alias", "alias": alias_lower, "nodes": owners})

    for alias_lower, owners in alias_map.items():
        title_owner = title_map.get(alias_lower)
        if title_owner is None:
            continue
        for owner in owners:
            if owner["id"] != title_owner["id"]:
                conflicts.append({
                    "type": "alias-vs-title",
                    "alias": alias_lower,
                    "aliasNode": owner,
                    "titleNode": title_owner,
                })

    return conflicts


def detect_orphans(nodes_by_id: dict[str, ContentNode]) -> Orphans:
    """Classify nodes by missing inbound and/or outbound links.

    ``strict`` holds nodes with neither; it overlaps both one-sided lists.
    """
    orphans = Orphans()
    for node in nodes_by_id.values():
        has_inbound = bool(node.inbound_links)
        has_outbound = bool(node.outbound_links)
        if not has_inbound:
            orphans.no_inbound.append(node.summary())
        if not has_outbound:
            orphans.no_outbound.append(node.summary())
        if not has_inbound and not has_outbound:
            orphans.strict.append(node.summary())
    return orphans


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------

def build_graph(nodes_by_id: dict[str, ContentNode], health: ContentHealth) -> list[ContentNode]:
    """Populate link lists and diagnostics; return nodes sorted for output.

    Output order is by collection, then slug, so generated artifacts diff
    cleanly between builds.
    """
    index = ResolutionIndex.from_nodes(nodes_by_id.values())
    resolver = LinkResolver(index, health)

    edges = resolve_edges(nodes_by_id, resolver)
    apply_edges(nodes_by_id, edges)

    health.alias_conflicts = analyze_aliases(nodes_by_id)
    health.orphans = detect_orphans(nodes_by_id)

    log.info(
        "linked %d node(s) with %d edge(s), %d unresolved mention(s)",
        len(nodes_by_id),
        len(edges),
        len(health.unresolved_mentions),
    )
    return sorted(nodes_by_id.values(), key=lambda n: (n.collection, n.slug))
