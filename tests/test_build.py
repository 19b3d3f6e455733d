"""Tests for configuration, the one-shot build and strict mode."""

import json
from pathlib import Path

import pytest

from contentmap.build import run_build
from contentmap.config import BuildConfig, warn_on_unresolved_default
from contentmap.health import ContentHealth, HealthError


@pytest.fixture
def out_dir(tmp_path):
    return tmp_path / "data"


class TestBuildConfig:
    def test_defaults(self):
        config = BuildConfig()
        assert config.content_root == Path("src/content")
        assert config.map_path == Path("src/data/content-map.json")
        assert config.health_path == Path("src/data/content-health.json")
        assert config.identifier_field == "identifier"

    def test_string_paths_and_extensions(self):
        config = BuildConfig(content_root="docs", extensions=("MD", ".Markdown"))
        assert config.content_root == Path("docs")
        assert config.extensions == (".md", ".markdown")

    def test_empty_identifier_field_rejected(self):
        with pytest.raises(ValueError):
            BuildConfig(identifier_field="")

    def test_from_env(self):
        env = {
            "CONTENTMAP_CONTENT_ROOT": "site/content",
            "CONTENTMAP_OUT_DIR": "site/data",
            "CONTENTMAP_IDENTIFIER_FIELD": "cuid",
            "CONTENTMAP_STRICT": "yes",
        }
        config = BuildConfig.from_env(env)
        assert config.content_root == Path("site/content")
        assert config.out_dir == Path("site/data")
        assert config.identifier_field == "cuid"
        assert config.strict is True

    def test_overrides_beat_env(self):
        env = {"CONTENTMAP_OUT_DIR": "site/data"}
        config = BuildConfig.from_env(env, out_dir="elsewhere", content_root=None)
        assert config.out_dir == Path("elsewhere")
        assert config.content_root == Path("src/content")

    def test_with_overrides(self):
        config = BuildConfig().with_overrides(strict=True, out_dir=None)
        assert config.strict is True
        assert config.out_dir == Path("src/data")


class TestWarnDefault:
    def test_development(self):
        assert warn_on_unresolved_default({}) is True

    def test_node_env_production(self):
        assert warn_on_unresolved_default({"NODE_ENV": "production"}) is False

    def test_own_variable_takes_precedence(self):
        env = {"CONTENTMAP_ENV": "staging", "NODE_ENV": "production"}
        assert warn_on_unresolved_default(env) is True


class TestRunBuild:
    def test_writes_artifacts(self, corpus, out_dir):
        result = run_build(BuildConfig(content_root=corpus, out_dir=out_dir))
        assert result.written == [out_dir / "content-map.json", out_dir / "content-health.json"]

        records = json.loads((out_dir / "content-map.json").read_text(encoding="utf-8"))
        assert [r["id"] for r in records] == ["atl01", "essays/compass", "notes/solitary", "projects/lantern"]

        report = json.loads((out_dir / "content-health.json").read_text(encoding="utf-8"))
        assert report["unresolvedMentions"] == ['Unresolved wiki-link "Nonexistent Title"']
        assert report["badFiles"] == []
        assert [o["id"] for o in report["orphans"]["strict"]] == ["notes/solitary"]

    def test_repeated_unresolved_reported_once(self, content_root, write_doc, out_dir):
        for name in ("one", "two", "three"):
            write_doc(f"notes/{name}.md", f"---\ntitle: {name}\n---\nSee [[Nonexistent Title]].")
        result = run_build(BuildConfig(content_root=content_root, out_dir=out_dir))
        assert result.health.unresolved_mentions == ['Unresolved wiki-link "Nonexistent Title"']

    def test_without_write(self, corpus, out_dir):
        result = run_build(BuildConfig(content_root=corpus, out_dir=out_dir), write=False)
        assert result.written == []
        assert not out_dir.exists()
        assert len(result.records()) == 4

    def test_missing_root_is_empty(self, tmp_path, out_dir):
        result = run_build(BuildConfig(content_root=tmp_path / "nope", out_dir=out_dir))
        assert result.nodes == []
        assert json.loads((out_dir / "content-map.json").read_text()) == []

    def test_unreadable_root_raises(self, tmp_path, out_dir):
        root = tmp_path / "content.md"
        root.write_text("not a directory")
        with pytest.raises(OSError):
            run_build(BuildConfig(content_root=root, out_dir=out_dir))

    def test_is_idempotent(self, corpus, out_dir):
        config = BuildConfig(content_root=corpus, out_dir=out_dir)
        run_build(config)
        first = config.map_path.read_text(encoding="utf-8")
        run_build(config)
        assert config.map_path.read_text(encoding="utf-8") == first


class TestStrictMode:
    def test_raises_after_writing(self, corpus, out_dir):
        config = BuildConfig(content_root=corpus, out_dir=out_dir, strict=True)
        with pytest.raises(HealthError) as excinfo:
            run_build(config)
        assert config.health_path.exists()
        assert [p.category for p in excinfo.value.problems] == ["unresolved"]

    def test_clean_corpus_passes(self, content_root, write_doc, out_dir):
        write_doc("notes/a.md", "---\nidentifier: a\ntitle: A\n---\n[[B]]")
        write_doc("notes/b.md", "---\nidentifier: b\ntitle: B\n---\n[[A]]")
        result = run_build(BuildConfig(content_root=content_root, out_dir=out_dir, strict=True))
        assert result.health.problems() == []

    def test_advisory_categories_do_not_block(self, content_root, write_doc, out_dir):
        # No identifiers, an orphan and an alias clash, but nothing blocking
        write_doc("notes/a.md", "---\ntitle: A\naliases: [B]\n---\n")
        write_doc("notes/b.md", "---\ntitle: B\n---\n")
        result = run_build(BuildConfig(content_root=content_root, out_dir=out_dir, strict=True))
        assert len(result.health.missing_identifiers) == 2
        assert len(result.health.alias_conflicts) == 1


class TestHealthProblems:
    def test_categories_and_message(self):
        health = ContentHealth()
        health.add_bad_file("stray.md", "No collection segment")
        health.add_unresolved('Unresolved wiki-link "X"')
        health.add_id_collision("dup", "essays/a.md", "notes/b.md")
        with pytest.raises(HealthError) as excinfo:
            health.check()
        problems = excinfo.value.problems
        assert [p.category for p in problems] == ["bad-file", "unresolved", "id-collision"]
        assert str(problems[2]) == "notes/b.md: [id-collision] id 'dup' already used by essays/a.md"
        assert str(excinfo.value).startswith("3 content problem(s):")

    def test_counts(self):
        health = ContentHealth()
        assert health.add_unresolved("m") is True
        assert health.add_unresolved("m") is False
        assert health.counts()["unresolvedMentions"] == 1
