"""
Tests for document loader and artifact manager.
"""

import base64
from io import BytesIO

import pytest
from docx import Document

from prd_mockups.errors import ExtractionError, ValidationError
from prd_mockups.io.document_loader import (
    EMPTY_REQUEST_MESSAGE,
    WORD_MIME_TYPE,
    ArtifactManager,
    DocumentLoader,
)
from prd_mockups.models import Design, DocumentKind, UploadedDocument


def make_docx(paragraphs, table=None) -> bytes:
    doc = Document()
    for text in paragraphs:
        doc.add_paragraph(text)
    if table:
        t = doc.add_table(rows=len(table), cols=len(table[0]))
        for r, row in enumerate(table):
            for c, value in enumerate(row):
                t.cell(r, c).text = value
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def sample_files(tmp_path):
    """Create sample requirement files for testing."""
    paths = {
        "docx": tmp_path / "prd.docx",
        "pdf": tmp_path / "prd.pdf",
        "png": tmp_path / "sketch.png",
        "txt": tmp_path / "notes.txt",
    }
    paths["docx"].write_bytes(make_docx(["User management", "List all users"]))
    paths["pdf"].write_bytes(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<<>>\nendobj\n%%EOF")
    paths["png"].write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x00" * 32)
    paths["txt"].write_text("plain notes", encoding="utf-8")
    return paths


@pytest.mark.parametrize("filename,content_type,kind", [
    ("prd.docx", None, DocumentKind.WORD),
    ("prd.PDF", None, DocumentKind.PDF),
    ("shot.jpeg", None, DocumentKind.IMAGE),
    ("shot.webp", "application/octet-stream", DocumentKind.IMAGE),
    ("upload", "application/pdf", DocumentKind.PDF),
    ("upload.bin", WORD_MIME_TYPE, DocumentKind.WORD),
    ("upload", "image/gif; charset=binary", DocumentKind.IMAGE),
    ("notes.txt", "text/plain", None),
    ("archive.doc", "application/msword", None),
])
def test_classify(filename, content_type, kind):
    loader = DocumentLoader()
    document = UploadedDocument(filename=filename, content=b"x", content_type=content_type)
    assert loader.classify(document) == kind


def test_validate_rejects_empty_request():
    loader = DocumentLoader()

    with pytest.raises(ValidationError) as exc_info:
        loader.validate_upload(None, "   ")

    assert exc_info.value.message == EMPTY_REQUEST_MESSAGE
    assert exc_info.value.status_code == 400


def test_validate_accepts_text_only():
    assert DocumentLoader().validate_upload(None, "dark SaaS dashboard") is None


def test_validate_rejects_unsupported_type():
    document = UploadedDocument(filename="notes.txt", content=b"x", content_type="text/plain")
    with pytest.raises(ValidationError):
        DocumentLoader().validate_upload(document, "")


def test_validate_rejects_empty_file():
    document = UploadedDocument(filename="prd.pdf", content=b"")
    with pytest.raises(ValidationError, match="empty"):
        DocumentLoader().validate_upload(document, "")


def test_image_mime_type():
    loader = DocumentLoader()

    def mime(content_type):
        document = UploadedDocument(filename="a.jpg", content=b"x", content_type=content_type)
        return loader.image_mime_type(document)

    assert mime("image/webp") == "image/webp"
    assert mime("image/jpg") == "image/jpeg"
    assert mime(None) == "image/png"
    assert mime("application/octet-stream") == "image/png"


def test_extract_text_paragraphs_and_tables():
    data = make_docx(
        ["Order management", "Filter by status"],
        table=[["Field", "Type"], ["id", "int"]]
    )

    text = DocumentLoader().extract_text(data)

    assert text.splitlines() == [
        "Order management",
        "Filter by status",
        "Field\tType",
        "id\tint",
    ]


def test_extract_text_invalid_bytes():
    with pytest.raises(ExtractionError):
        DocumentLoader().extract_text(b"definitely not a zip archive")


def test_extract_text_limit():
    data = make_docx(["x" * 50])

    with pytest.raises(ValidationError, match="too long"):
        DocumentLoader(max_document_chars=10).extract_text(data)

    # 0 disables the limit
    assert DocumentLoader(max_document_chars=0).extract_text(data) == "x" * 50


def test_to_base64_is_lossless():
    payload = b"\x00\xffPDF bytes\n"
    encoded = DocumentLoader().to_base64(payload)
    assert base64.b64decode(encoded) == payload


def test_load_document(sample_files):
    loader = DocumentLoader()

    document = loader.load_document(sample_files["pdf"])

    assert document.filename == "prd.pdf"
    assert document.content_type == "application/pdf"
    assert document.content == sample_files["pdf"].read_bytes()
    assert loader.classify(document) == DocumentKind.PDF


def test_load_word_and_image_documents(sample_files):
    loader = DocumentLoader()

    word = loader.load_document(sample_files["docx"])
    image = loader.load_document(sample_files["png"])

    assert loader.validate_upload(word, "") == DocumentKind.WORD
    assert loader.extract_text(word.content) == "User management\nList all users"
    assert loader.validate_upload(image, "") == DocumentKind.IMAGE
    assert loader.image_mime_type(image) == "image/png"


def test_load_document_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        DocumentLoader().load_document(tmp_path / "missing.docx")


def test_load_document_rejected_at_boundary(sample_files):
    loader = DocumentLoader()
    document = loader.load_document(sample_files["txt"])
    with pytest.raises(ValidationError):
        loader.validate_upload(document, "some context")


def test_artifact_manager_saves_designs(tmp_path):
    manager = ArtifactManager(tmp_path / "outputs")
    designs = [
        Design(id="1", title="Proposal A", html="<html>a</html>"),
        Design(id="2", title="Proposal A", html="<html>b</html>"),
    ]

    paths = manager.save_designs("run-1", designs)

    assert [p.name for p in paths] == ["Proposal A.html", "Proposal A-2.html"]
    assert paths[0].read_text(encoding="utf-8") == "<html>a</html>"
    assert paths[1].read_text(encoding="utf-8") == "<html>b</html>"
    assert (tmp_path / "outputs" / "run-1" / "logs").is_dir()


def test_artifact_manager_keeps_every_duplicate_design(tmp_path):
    manager = ArtifactManager(tmp_path)
    designs = [Design(id="1", title="Same", html=html) for html in "abc"]

    paths = manager.save_designs("run", designs)

    assert [p.name for p in paths] == ["Same.html", "Same-1.html", "Same-1-2.html"]
    assert [p.read_text(encoding="utf-8") for p in paths] == ["a", "b", "c"]


def test_artifact_manager_overwrites_previous_run_files(tmp_path):
    manager = ArtifactManager(tmp_path)
    manager.save_designs("run", [Design(id="1", title="A", html="old")])

    (path,) = manager.save_designs("run", [Design(id="1", title="A", html="new")])

    assert path.name == "A.html"
    assert path.read_text(encoding="utf-8") == "new"
    assert sorted(p.name for p in path.parent.glob("*.html")) == ["A.html"]


def test_artifact_manager_raw_response(tmp_path):
    manager = ArtifactManager(tmp_path)

    raw_path = manager.save_raw_response("run-2", "raw text")

    assert raw_path.name == "raw_response.txt"
    assert manager.load_raw_response(raw_path) == "raw text"
    with pytest.raises(FileNotFoundError):
        manager.load_raw_response(tmp_path / "nope.txt")
