"""Tests for the note index, resolution and vault loading."""

import json
import logging
import tempfile
from pathlib import Path

import pytest

from symark.adapters.fs_storage import FsStorage, copy_assets
from symark.adapters.resolver_index import NoteIndex
from symark.adapters.sy_parser import SyParser
from symark.core.model import Blockquote, Note, Paragraph, Text, TextMark
from symark.core.vault import Vault, find_index_note


def ref(target):
    return TextMark(mark_type="block-ref", text="r", ref_id=target)


@pytest.fixture
def index():
    inner = Paragraph(id="inner", children=[Text(data="deep")])
    return NoteIndex(
        [
            Note(id="a", title="Alpha", tags="x, y", children=[Blockquote(id="q", children=[inner])]),
            Note(id="b", title="Beta", tags="y, index", children=[Paragraph(children=[ref("inner")])]),
            Note(id="c", children=[Paragraph(children=[ref("a"), ref("c"), ref("gone")])]),
        ]
    )


def test_resolve_note_first(index):
    """Test that a note id resolves to the whole note."""
    res = index.resolve("a")
    assert res.kind == "note"
    assert res.url == "a.html"
    assert res.content is index["a"].children


def test_resolve_nested_block(index):
    """Test that nested blocks resolve with an anchor URL."""
    res = index.resolve("inner")
    assert res.kind == "block"
    assert res.note.id == "a"
    assert res.url == "a.html#inner"
    assert [b.id for b in res.content] == ["inner"]


def test_resolve_unknown(index):
    """Test that unknown and empty ids resolve to None."""
    assert index.resolve("nope") is None
    assert index.resolve("") is None
    assert index.owner_of("nope") is None


def test_backlinks(index):
    """Test incoming references, excluding self references."""
    assert [n.id for n in index.backlinks("a")] == ["b", "c"]
    assert index.backlinks("c") == []


def test_tags(index):
    """Test tag lookups; the index tag is reserved."""
    assert index.all_tags() == ["x", "y"]
    assert [n.id for n in index.tagged("y")] == ["a", "b"]
    assert [n.id for n in index.titled_notes()] == ["a", "b"]


def test_find_index_note(index, caplog):
    """Test home note selection."""
    assert find_index_note(index) == "b"
    assert find_index_note(NoteIndex([Note(id="z")])) is None

    both = NoteIndex([Note(id="1", tags="index"), Note(id="2", tags="index")])
    with caplog.at_level(logging.WARNING):
        assert find_index_note(both) == "2"
    assert "Multiple notes" in caplog.text


def test_vault_skips_unreadable_documents(caplog):
    """Test that one bad file does not stop loading."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir) / "input"
        (root / "box").mkdir(parents=True)
        (root / "box" / "good.sy").write_text(
            json.dumps({"ID": "good", "Properties": {"title": "Good"}, "Children": []}),
            encoding="utf-8",
        )
        (root / "bad.sy").write_text("{oops", encoding="utf-8")
        (root / "notes.txt").write_text("ignored", encoding="utf-8")

        vault = Vault(FsStorage(root), SyParser())
        with caplog.at_level(logging.ERROR):
            index = vault.load()

        assert list(index) == ["good"]
        assert len(vault.failed) == 1
        assert "bad.sy" in vault.failed[0]
        assert "Error parsing file" in caplog.text


def test_missing_input_directory():
    """Test that a missing input directory is an error."""
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(FileNotFoundError):
            FsStorage(Path(tmpdir) / "nope").list_documents()


def test_copy_assets_merges_directories():
    """Test that every assets directory is merged into one."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir) / "input"
        (root / "assets").mkdir(parents=True)
        (root / "assets" / "a.png").write_bytes(b"a")
        (root / "box" / "assets").mkdir(parents=True)
        (root / "box" / "assets" / "b.png").write_bytes(b"b")

        dest = Path(tmpdir) / "out" / "assets"
        copied = copy_assets(FsStorage(root), dest)

        assert copied == 2
        assert (dest / "a.png").read_bytes() == b"a"
        assert (dest / "b.png").read_bytes() == b"b"
