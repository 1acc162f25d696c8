"""Tests for the symark command line."""

import json
import tempfile
from pathlib import Path

import pytest

from symark import __version__
from symark.cli import format_elapsed, main


def write_doc(root, doc):
    (root / f"{doc['ID']}.sy").write_text(json.dumps(doc), encoding="utf-8")


def text_mark(**kw):
    return {"Type": "NodeTextMark", **kw}


@pytest.fixture
def input_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir) / "input"
        root.mkdir()
        write_doc(root, {
            "ID": "20240101120000-aaaaaaa",
            "Properties": {"title": "Alpha", "tags": "python"},
            "Children": [
                {
                    "Type": "NodeHeading",
                    "HeadingLevel": 2,
                    "Children": [{"Type": "NodeText", "Data": "Start"}],
                },
                {
                    "ID": "20240101120001-ppppppp",
                    "Type": "NodeParagraph",
                    "Children": [{"Type": "NodeText", "Data": "Alpha body"}],
                },
            ],
        })
        write_doc(root, {
            "ID": "20240102120000-bbbbbbb",
            "Properties": {"title": "Beta"},
            "Children": [
                {
                    "Type": "NodeParagraph",
                    "Children": [
                        text_mark(
                            TextMarkType="block-ref",
                            TextMarkTextContent="alpha",
                            TextMarkBlockRefID="20240101120001-ppppppp",
                        ),
                        text_mark(
                            TextMarkType="block-ref",
                            TextMarkTextContent="gone",
                            TextMarkBlockRefID="20991231000000-missing",
                        ),
                    ],
                }
            ],
        })
        yield root


def run(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    captured = capsys.readouterr()
    return exc.value.code, captured.out, captured.err


def test_version_flag(capsys):
    """Test that --version prints the version."""
    code, out, _ = run(["--version"], capsys)
    assert code == 0
    assert out.strip() == f"symark {__version__}"


def test_version_module():
    """Test that version is accessible from module."""
    assert isinstance(__version__, str)
    # Should be in SemVer format
    assert len(__version__.split(".")) == 3


def test_format_elapsed():
    """Test the build timing summary."""
    assert format_elapsed(0.0421) == "42 ms"
    assert format_elapsed(2.5) == "2.50 s"


def test_build(input_dir, capsys):
    """Test a full build from the command line."""
    out_dir = input_dir.parent / "site"
    code, out, _ = run(["--input", str(input_dir), "build", "--output", str(out_dir)], capsys)
    assert code == 0
    assert "✓ Built 5 pages in" in out
    assert (out_dir / "index.html").exists()
    assert (out_dir / "20240101120000-aaaaaaa.html").exists()
    assert (out_dir / "tag_python.html").exists()


def test_build_missing_input(capsys):
    """Test that a missing input directory is reported."""
    with tempfile.TemporaryDirectory() as tmpdir:
        code, _, err = run(["--input", str(Path(tmpdir) / "nope"), "build"], capsys)
    assert code == 1
    assert err.startswith("Error: Input directory not found")


def test_render_and_toc(input_dir, capsys):
    """Test printing one note's HTML and table of contents."""
    code, out, _ = run(["--input", str(input_dir), "render", "20240101120000-aaaaaaa"], capsys)
    assert code == 0
    assert out.startswith('<h2 id="heading-0">Start</h2>\n')

    code, out, _ = run(["--input", str(input_dir), "toc", "20240101120000-aaaaaaa"], capsys)
    assert code == 0
    assert out == '<li class="toc-item"><a class="toc-link" href="#heading-0">Start</a></li>\n'


def test_render_unknown_note(input_dir, capsys):
    """Test that an unknown note id fails."""
    code, _, err = run(["--input", str(input_dir), "render", "nope"], capsys)
    assert code == 1
    assert "Note nope not found" in err


def test_graph_json_and_dot(input_dir, capsys):
    """Test graph output in both formats."""
    code, out, _ = run(["--input", str(input_dir), "graph"], capsys)
    assert code == 0
    data = json.loads(out)
    assert data["edges"] == [
        {"source": "20240102120000-bbbbbbb", "target": "20240101120000-aaaaaaa"}
    ]

    code, out, _ = run(["--input", str(input_dir), "graph", "--dot"], capsys)
    assert '"20240102120000-bbbbbbb" -- "20240101120000-aaaaaaa";' in out


def test_ls(input_dir, capsys):
    """Test listing notes, with and without a tag filter."""
    code, out, _ = run(["--input", str(input_dir), "ls"], capsys)
    assert code == 0
    assert out.splitlines() == [
        "20240101120000-aaaaaaa\tAlpha",
        "20240102120000-bbbbbbb\tBeta",
    ]

    code, out, _ = run(["--input", str(input_dir), "--json", "ls", "--tag", "python"], capsys)
    assert json.loads(out) == [
        {"id": "20240101120000-aaaaaaa", "title": "Alpha", "tags": ["python"]}
    ]


def test_lint(input_dir, capsys):
    """Test that dead references fail lint."""
    code, out, _ = run(["--input", str(input_dir), "lint"], capsys)
    assert code == 1
    assert "20240102120000-bbbbbbb: [error] Unknown block reference 20991231000000-missing" in out
