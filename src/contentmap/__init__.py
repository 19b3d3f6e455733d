"""
contentmap - wiki-link content graph and health report for markdown sites.

Usage:
    from contentmap import BuildConfig, run_build

    result = run_build(BuildConfig(content_root="src/content", out_dir="src/data"))
    result.health.unresolved_mentions  # -> ['Unresolved wiki-link "Nowhere"']

    from contentmap import ContentMap, WikiLinkTransformer

    transformer = WikiLinkTransformer.from_content_map(ContentMap.load("src/data/content-map.json"))
    transformer.rewrite_markdown("See [[Atlas#Origins|the start]].")
"""

from .core import (
    FrontmatterError,
    WikiLink,
    extract_wikilinks,
    parse_frontmatter,
    parse_wikilink_body,
    sanitize_slug,
    slugify,
    slugify_heading,
)
from .config import BuildConfig
from .models import ContentNode, Edge, LinkRef, RawLink
from .health import ContentHealth, HealthError, Problem
from .loader import find_markdown_files, load_content_nodes
from .resolve import LinkResolver, Resolution, ResolutionIndex
from .graph import analyze_aliases, build_graph, detect_orphans
from .serialize import ContentLink, ContentMap, health_record, node_record, write_json
from .build import BuildResult, run_build
from .remark import WikiLinkTransformer, build_url, render_html

__version__ = "0.1.0"
__all__ = [
    "FrontmatterError",
    "WikiLink",
    "extract_wikilinks",
    "parse_frontmatter",
    "parse_wikilink_body",
    "sanitize_slug",
    "slugify",
    "slugify_heading",
    "BuildConfig",
    "ContentNode",
    "Edge",
    "LinkRef",
    "RawLink",
    "ContentHealth",
    "HealthError",
    "Problem",
    "find_markdown_files",
    "load_content_nodes",
    "LinkResolver",
    "Resolution",
    "ResolutionIndex",
    "analyze_aliases",
    "build_graph",
    "detect_orphans",
    "ContentLink",
    "ContentMap",
    "health_record",
    "node_record",
    "write_json",
    "BuildResult",
    "run_build",
    "WikiLinkTransformer",
    "build_url",
    "render_html",
]
