"""Render-time wiki-link rewriting.

Turns ``[[Title#Header|Alias]]`` mentions into navigable links, or into inert
"missing" links when the title does not resolve to exactly one node.  Works
on mdast-style trees (``{"type": "text", "value": ...}`` dicts), on single
text values, or directly on a markdown string.

Usage::

    from contentmap.remark import WikiLinkTransformer
    from contentmap.serialize import ContentMap

    transformer = WikiLinkTransformer.from_content_map(ContentMap.load(path))
    html = transformer.rewrite_markdown("See [[Atlas#Origins|the start]].")

Link markup contract (renderers style on these, never re-resolve):

- resolved: class ``wikilink`` plus ``data-wiki-title``, ``data-wiki-header``
  (when a header was given), ``data-wiki-collection``, ``data-wiki-slug``
- missing: classes ``wikilink wikilink--missing``, an advisory ``title``,
  ``aria-disabled="true"`` and ``data-wiki-missing="true"``; ``href="#"``
"""

from __future__ import annotations

import html
import logging
import re
from typing import Any, Callable

from .config import warn_on_unresolved_default
from .core import WIKILINK_RE, WikiLink, parse_wikilink_body, slugify_heading
from .health import ContentHealth
from .resolve import LinkResolver, ResolutionIndex

log = logging.getLogger(__name__)

MISSING_LINK_TOOLTIP = "this link is either private or yet to be connected"

_FENCED_CODE_RE = re.compile(r"^(?P<fence>`{3,}|~{3,})[^\n]*\n.*?^(?P=fence)[ \t]*$", re.MULTILINE | re.DOTALL)
_INLINE_CODE_RE = re.compile(r"(?<!`)(`{1,2})(?!`)((?:(?!\1)[^\n])+)\1(?!`)")


def build_url(entry: dict[str, Any], header: str | None = None) -> str:
    """``/{collection}/{slug}/`` plus ``#fragment`` when the header has one."""
    base = f"/{entry['collection']}/{entry['slug']}/"
    if not header:
        return base
    fragment = slugify_heading(header)
    return f"{base}#{fragment}" if fragment else base


def _text(value: str) -> dict[str, Any]:
    return {"type": "text", "value": value}


def _code_ranges(markdown: str) -> list[tuple[int, int]]:
    ranges = [(m.start(), m.end()) for m in _FENCED_CODE_RE.finditer(markdown)]
    ranges.extend((m.start(), m.end()) for m in _INLINE_CODE_RE.finditer(markdown))
    return ranges


def _inside_code(pos: int, ranges: list[tuple[int, int]]) -> bool:
    return any(start <= pos < end for start, end in ranges)


class WikiLinkTransformer:
    """Rewrite wiki-link mentions using a read-only :class:`ResolutionIndex`.

    Resolution follows the build's rules, but only a single candidate
    produces a link: ambiguous titles render as missing.  The distinct
    ambiguous/unresolved messages of the most recent document are kept in
    :attr:`diagnostics`; each call to :meth:`transform_text`,
    :meth:`transform_tree` or :meth:`rewrite_markdown` starts a new document.
    """

    def __init__(
        self,
        index: ResolutionIndex,
        *,
        warn_on_unresolved: bool | None = None,
        on_warning: Callable[[str], Any] | None = None,
    ) -> None:
        self.index = index
        self._start_document()
        if warn_on_unresolved is None:
            warn_on_unresolved = warn_on_unresolved_default()
        self.warn_on_unresolved = warn_on_unresolved
        self.on_warning = on_warning or log.warning

    @classmethod
    def from_content_map(cls, content_map, **kwargs: Any) -> "WikiLinkTransformer":
        return cls(ResolutionIndex.from_content_map(content_map), **kwargs)

    def _start_document(self) -> None:
        self._health = ContentHealth()
        self._resolver = LinkResolver(self.index, self._health)

    @property
    def diagnostics(self) -> list[str]:
        """Ambiguous and unresolved messages of the current document, each recorded once."""
        return list(self._health.unresolved_mentions)

    # ------------------------------------------------------------------
    # Single mention
    # ------------------------------------------------------------------

    def link_node(self, link: WikiLink) -> dict[str, Any]:
        """Build the link node for a parsed mention with a non-empty title."""
        node_id = self._resolver.resolve(link.title)
        entry = self.index.entry(node_id) if node_id is not None else None

        if entry is None:
            if self.warn_on_unresolved:
                self.on_warning(f"Unresolved wiki-link: {link.raw}")
            return {
                "type": "link",
                "url": "#",
                "data": {
                    "hProperties": {
                        "className": ["wikilink", "wikilink--missing"],
                        "title": MISSING_LINK_TOOLTIP,
                        "aria-disabled": "true",
                        "data-wiki-missing": "true",
                    },
                },
                "children": [_text(link.display_text)],
            }

        props: dict[str, Any] = {"className": ["wikilink"], "data-wiki-title": link.title}
        if link.header:
            props["data-wiki-header"] = link.header
        props["data-wiki-collection"] = entry["collection"]
        props["data-wiki-slug"] = entry["slug"]
        return {
            "type": "link",
            "url": build_url(entry, link.header),
            "data": {"hProperties": props},
            "children": [_text(link.display_text)],
        }

    def _convert(self, match: re.Match[str]) -> dict[str, Any]:
        link = parse_wikilink_body(match.group(1), raw=match.group(0))
        if not link.title:
            return _text(match.group(0))
        return self.link_node(link)

    # ------------------------------------------------------------------
    # Text values and trees
    # ------------------------------------------------------------------

    def _split(self, value: str) -> list[dict[str, Any]] | None:
        """Transformed nodes for *value*, or None when it has no mentions."""
        new_nodes: list[dict[str, Any]] = []
        last = 0
        for match in WIKILINK_RE.finditer(value):
            if match.start() > last:
                new_nodes.append(_text(value[last:match.start()]))
            new_nodes.append(self._convert(match))
            last = match.end()

        if not new_nodes:
            return None
        if last < len(value):
            new_nodes.append(_text(value[last:]))
        return new_nodes

    def transform_text(self, value: str) -> list[dict[str, Any]]:
        """Split a text value into text and link nodes, in original order."""
        self._start_document()
        return self._split(value) or [_text(value)]

    def transform_tree(self, tree: dict[str, Any]) -> dict[str, Any]:
        """Rewrite every text node under *tree* in place and return it.

        Inserted nodes are skipped, so generated output is never rescanned.
        """
        self._start_document()
        self._walk(tree)
        return tree

    def _walk(self, tree: dict[str, Any]) -> None:
        children = tree.get("children")
        if not isinstance(children, list):
            return

        i = 0
        while i < len(children):
            child = children[i]
            if child.get("type") == "text" and isinstance(child.get("value"), str):
                new_nodes = self._split(child["value"])
                if new_nodes is not None:
                    children[i : i + 1] = new_nodes
                    i += len(new_nodes)
                    continue
            else:
                self._walk(child)
            i += 1

    # ------------------------------------------------------------------
    # HTML output
    # ------------------------------------------------------------------

    def rewrite_markdown(self, markdown: str) -> str:
        """Replace mentions in raw markdown with inline HTML anchors.

        Mentions inside fenced code blocks and inline code spans are left
        alone; all other text is passed through unchanged.
        """
        self._start_document()
        ranges = _code_ranges(markdown)
        out: list[str] = []
        last = 0
        for match in WIKILINK_RE.finditer(markdown):
            if _inside_code(match.start(), ranges):
                continue
            out.append(markdown[last:match.start()])
            node = self._convert(match)
            out.append(match.group(0) if node["type"] == "text" else render_html([node]))
            last = match.end()
        out.append(markdown[last:])
        return "".join(out)


def _render_attrs(node: dict[str, Any]) -> str:
    props = dict(node.get("data", {}).get("hProperties", {}))
    attrs = [("href", node.get("url", "#"))]
    class_names = props.pop("className", None)
    if class_names:
        attrs.append(("class", " ".join(class_names)))
    attrs.extend(props.items())
    return "".join(f' {name}="{html.escape(str(value), quote=True)}"' for name, value in attrs)


def render_html(nodes: list[dict[str, Any]]) -> str:
    """Serialize transformed nodes to HTML."""
    parts: list[str] = []
    for node in nodes:
        if node.get("type") == "link":
            inner = render_html(node.get("children", []))
            parts.append(f"<a{_render_attrs(node)}>{inner}</a>")
        elif node.get("type") == "text":
            parts.append(html.escape(node.get("value", ""), quote=False))
    return "".join(parts)
