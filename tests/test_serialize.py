"""Tests for the JSON artifacts and the ContentMap reader."""

import json

import pytest

from contentmap.graph import build_graph
from contentmap.loader import load_content_nodes
from contentmap.resolve import LinkResolver, ResolutionIndex
from contentmap.serialize import (
    ContentMap,
    health_record,
    node_record,
    write_json,
)


@pytest.fixture
def built(corpus, health):
    nodes_by_id = load_content_nodes(corpus, health)
    ordered = build_graph(nodes_by_id, health)
    return nodes_by_id, ordered


@pytest.fixture
def cmap(built):
    _, ordered = built
    return ContentMap([node_record(n) for n in ordered])


class TestNodeRecord:
    def test_keys(self, built):
        record = node_record(built[0]["atl01"])
        assert list(record) == [
            "id",
            "identifier",
            "slug",
            "collection",
            "title",
            "description",
            "tags",
            "aliases",
            "outboundLinks",
            "inboundLinks",
            "chainedLinks",
        ]

    def test_link_entries(self, built):
        record = node_record(built[0]["projects/lantern"])
        assert record["identifier"] is None
        assert record["chainedLinks"] == [{
            "id": "atl01",
            "identifier": "atl01",
            "title": "Atlas",
            "slug": "atlas",
            "collection": "essays",
            "kind": "chains",
        }]


class TestHealthRecord:
    def test_keys(self, built, health):
        record = health_record(health)
        assert list(record) == [
            "badFiles",
            "unresolvedMentions",
            "idCollisions",
            "missingIdentifiers",
            "aliasConflicts",
            "orphans",
        ]
        assert list(record["orphans"]) == ["strict", "noInbound", "noOutbound"]


class TestWriteJson:
    def test_creates_directory(self, tmp_path):
        out = tmp_path / "data" / "nested"
        paths = write_json(out, [("a.json", [1, 2]), ("b.json", {"k": "v"})])
        assert paths == [out / "a.json", out / "b.json"]
        assert json.loads((out / "b.json").read_text()) == {"k": "v"}

    def test_unicode_not_escaped(self, tmp_path):
        write_json(tmp_path, [("m.json", [{"title": "Café →"}])])
        text = (tmp_path / "m.json").read_text(encoding="utf-8")
        assert "Café →" in text
        assert text.endswith("\n")


class TestContentMap:
    def test_lookups(self, cmap):
        assert len(cmap) == 4
        assert cmap.get_node_by_slug("compass")["id"] == "essays/compass"
        assert cmap.get_node_by_identifier("atl01")["title"] == "Atlas"
        assert cmap.get_node_by_id("projects/lantern")["slug"] == "lantern"
        assert cmap.get_node_by_slug("missing") is None

    def test_flatten_order(self, cmap):
        lantern = cmap.get_node_by_slug("lantern")
        links = cmap.flatten_node_links(lantern)
        assert [(l.direction, l.id, l.kind) for l in links] == [
            ("outbound", "essays/compass", "resources"),
            ("outbound", "atl01", "chains"),
            ("chain", "atl01", "chains"),
        ]

    def test_flatten_inbound(self, cmap):
        atlas = cmap.get_node_by_identifier("atl01")
        directions = [l.direction for l in cmap.flatten_node_links(atlas)]
        assert directions == ["outbound", "inbound", "inbound"]

    def test_load_round_trip(self, tmp_path, cmap):
        write_json(tmp_path, [("content-map.json", cmap.nodes)])
        loaded = ContentMap.load(tmp_path / "content-map.json")
        assert loaded.nodes == cmap.nodes

    def test_load_rejects_non_list(self, tmp_path):
        path = tmp_path / "content-map.json"
        path.write_text('{"nodes": []}')
        with pytest.raises(ValueError):
            ContentMap.load(path)

    def test_serialized_index_resolves_like_build(self, built, cmap):
        nodes_by_id, _ = built
        live = LinkResolver(ResolutionIndex.from_nodes(nodes_by_id.values()))
        loaded = LinkResolver(ResolutionIndex.from_content_map(cmap))
        titles = {raw.target_title for n in nodes_by_id.values() for raw in n.raw_links}
        titles |= {"atlas", "COMPASS", "no such page"}
        for title in titles:
            assert loaded.lookup(title).node_id == live.lookup(title).node_id
