import fitz  # PyMuPDF

from pdflyer.cli import run
from pdflyer.config import EditorConfig
from tests.conftest import make_pdf


def write_pdf(path, pages):
    path.write_bytes(make_pdf([(612, 792)] * pages))
    return str(path)


def test_merge(tmp_path):
    a = write_pdf(tmp_path / "a.pdf", 1)
    b = write_pdf(tmp_path / "b.pdf", 2)
    out = tmp_path / "merged.pdf"

    assert run(["merge", a, b, "-o", str(out)], EditorConfig()) == 0

    with fitz.open(str(out)) as doc:
        assert doc.page_count == 3


def test_merge_single_file_fails(tmp_path, capsys):
    a = write_pdf(tmp_path / "a.pdf", 1)

    assert run(["merge", a, "-o", str(tmp_path / "m.pdf")], EditorConfig()) == 1
    assert "at least two" in capsys.readouterr().err


def test_merge_missing_file(tmp_path):
    a = write_pdf(tmp_path / "a.pdf", 1)

    assert run(["merge", a, str(tmp_path / "gone.pdf")], EditorConfig()) == 1


def test_split_every_page(tmp_path):
    source = write_pdf(tmp_path / "doc.pdf", 3)
    out_dir = tmp_path / "pages"

    assert run(["split", source, "-o", str(out_dir)], EditorConfig()) == 0

    assert sorted(p.name for p in out_dir.iterdir()) == [
        "doc_page_1.pdf", "doc_page_2.pdf", "doc_page_3.pdf",
    ]


def test_split_ranges_to_zip(tmp_path):
    source = write_pdf(tmp_path / "doc.pdf", 3)
    out_dir = tmp_path / "out"

    assert run(["split", source, "--ranges", "1-2, 3", "--zip", "-o", str(out_dir)],
               EditorConfig()) == 0

    assert [p.name for p in out_dir.iterdir()] == ["doc_split.zip"]


def test_split_bad_range(tmp_path, capsys):
    source = write_pdf(tmp_path / "doc.pdf", 3)

    assert run(["split", source, "--ranges", "5-9", "-o", str(tmp_path)], EditorConfig()) == 1
    assert "Invalid page ranges" in capsys.readouterr().err
