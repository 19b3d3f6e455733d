"""Command-line entry point.

Each subcommand is a ``_cmd_*`` function taking the parsed arguments and
returning the text to print; lookups that fail raise :class:`LookupFailed`
and exit with status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from .build import run_build
from .config import BuildConfig
from .health import HealthError
from .remark import WikiLinkTransformer
from .resolve import LinkResolver, ResolutionIndex
from .serialize import ContentMap

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FATAL = 2


class LookupFailed(KeyError):
    """A title or node named on the command line could not be found."""


def _load_map(args: argparse.Namespace) -> ContentMap:
    path = Path(args.map) if args.map else BuildConfig.from_env().map_path
    return ContentMap.load(path)


def _cmd_build(args: argparse.Namespace) -> str:
    config = BuildConfig.from_env(
        content_root=args.content_root,
        out_dir=args.out_dir,
        identifier_field=args.identifier_field,
        strict=True if args.strict else None,
    )
    result = run_build(config)
    counts = result.health.counts()
    summary = ", ".join(f"{key}={value}" for key, value in counts.items())
    return f"{len(result.nodes)} node(s) -> {config.map_path} ({summary})"


def _cmd_resolve(args: argparse.Namespace) -> str:
    cmap = _load_map(args)
    index = ResolutionIndex.from_content_map(cmap)
    result = LinkResolver(index).lookup(args.title)
    if not result.resolved:
        raise LookupFailed(result.message)
    return result.node_id


def _find_node(cmap: ContentMap, key: str) -> dict[str, Any]:
    """Find a node by ``collection/slug``, bare slug or identifier."""
    node = cmap.get_node_by_path(key)
    if node is not None:
        return node
    matches = cmap.nodes_with_slug(key)
    if len(matches) > 1:
        paths = ", ".join(f"{n.get('collection')}/{key}" for n in matches)
        raise LookupFailed(f"Slug {key} is used by several nodes: {paths}")
    node = matches[0] if matches else cmap.get_node_by_identifier(key)
    if node is None:
        raise LookupFailed(f"No node with path, slug or identifier: {key}")
    return node


def _cmd_links(args: argparse.Namespace) -> str:
    cmap = _load_map(args)
    node = _find_node(cmap, args.slug)
    out_lines = []
    for link in cmap.flatten_node_links(node):
        out_lines.append(f"{link.direction}\t{link.kind}\t{link.collection}/{link.slug}\t{link.title}")
    return "\n".join(out_lines)


def _cmd_render(args: argparse.Namespace) -> str:
    transformer = WikiLinkTransformer.from_content_map(_load_map(args))
    text = Path(args.file).read_text(encoding="utf-8")
    return transformer.rewrite_markdown(text)


COMMANDS: dict[str, Any] = {
    "build": _cmd_build,
    "resolve": _cmd_resolve,
    "links": _cmd_links,
    "render": _cmd_render,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contentmap",
        description="Build the wiki-link content graph and health report for a markdown site.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_build = sub.add_parser("build", help="Generate content-map.json and content-health.json")
    p_build.add_argument("--content-root", help="Directory holding <collection>/<file>.md")
    p_build.add_argument("--out-dir", help="Directory the JSON artifacts are written to")
    p_build.add_argument("--identifier-field", help="Frontmatter key holding the stable identifier")
    p_build.add_argument("--strict", action="store_true", help="Exit 1 on bad files, unresolved links or id collisions")

    p_resolve = sub.add_parser("resolve", help="Resolve a wiki-link title against a content map")
    p_resolve.add_argument("title")
    p_resolve.add_argument("--map", help="Path to content-map.json")

    p_links = sub.add_parser("links", help="List a node's outbound, inbound and chained links")
    p_links.add_argument("slug", help="Node collection/slug, slug or identifier")
    p_links.add_argument("--map", help="Path to content-map.json")

    p_render = sub.add_parser("render", help="Rewrite the wiki-links of a markdown file as HTML anchors")
    p_render.add_argument("file")
    p_render.add_argument("--map", help="Path to content-map.json")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(name)s] %(levelname)s %(message)s",
    )

    try:
        output = COMMANDS[args.command](args)
    except LookupFailed as exc:
        print(exc.args[0] if exc.args else str(exc), file=sys.stderr)
        return EXIT_FAILED
    except HealthError as exc:
        print(exc, file=sys.stderr)
        return EXIT_FAILED
    except (OSError, ValueError) as exc:
        print(f"contentmap: error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    if output:
        print(output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
