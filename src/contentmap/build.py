"""One-shot build: load the corpus, link it, write both artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .config import BuildConfig
from .graph import build_graph
from .health import ContentHealth
from .loader import load_content_nodes
from .models import ContentNode
from .serialize import health_record, node_record, write_json

log = logging.getLogger(__name__)


@dataclass
class BuildResult:
    nodes: list[ContentNode]
    health: ContentHealth
    written: list[Path] = field(default_factory=list)

    def records(self) -> list[dict]:
        return [node_record(n) for n in self.nodes]


def run_build(config: BuildConfig, *, write: bool = True) -> BuildResult:
    """Recompute the content graph from scratch.

    Per-file problems end up in the health report.  An unreadable content
    root raises ``OSError``; in strict mode a report with blocking problems
    raises :class:`~contentmap.health.HealthError` after the artifacts are
    written.
    """
    log.info("generating content map from %s", config.content_root)
    health = ContentHealth()
    nodes_by_id = load_content_nodes(config.content_root, health, config)
    nodes = build_graph(nodes_by_id, health)
    result = BuildResult(nodes=nodes, health=health)

    if write:
        result.written = write_json(config.out_dir, [
            (config.map_filename, result.records()),
            (config.health_filename, health_record(health)),
        ])

    if config.strict:
        health.check()
    return result
