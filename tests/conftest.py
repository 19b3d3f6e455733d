"""Shared fixtures for content graph tests."""

import pytest

from contentmap.health import ContentHealth


@pytest.fixture
def health():
    """Fresh diagnostics accumulator."""
    return ContentHealth()


@pytest.fixture
def content_root(tmp_path):
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def write_doc(content_root):
    """Write a document relative to the content root and return its path."""

    def _write(rel_path, text=""):
        path = content_root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def corpus(content_root, write_doc):
    """Small site: two essays, a project and an isolated note.

    Registration order (sorted paths): atlas, compass, solitary, lantern.
    """
    write_doc(
        "essays/atlas.md",
        "---\nidentifier: atl01\ntitle: Atlas\ndescription: A map of everything\ntags: [maps, meta]\n---\n"
        "Atlas points at [[Compass]] and [[Nonexistent Title]].\n",
    )
    write_doc(
        "essays/compass.md",
        "---\ntitle: Compass\naliases: Bearing, Needle\n---\n"
        "Back to [[Atlas#Origins|the start]].\n",
    )
    write_doc(
        "projects/lantern.md",
        "---\ntitle: Lantern\nchains: \"[[Atlas]]\"\nresources:\n  - \"[[Compass]]\"\n  - 42\n---\n"
        "Still looking for [[Nonexistent Title]].\n",
    )
    write_doc(
        "notes/solitary.md",
        "---\ntitle: Solitary\n---\nOnly talks about [[Solitary]].\n",
    )
    return content_root
