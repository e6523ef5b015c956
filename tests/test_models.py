"""
Tests for data models.
"""

import base64

import pytest
from pydantic import TypeAdapter

from prd_mockups.models import (
    ContentBlock,
    Design,
    DocumentBlock,
    GenerationRequest,
    GenerationResponse,
    ImageBlock,
    TextBlock,
    UploadedDocument,
)


def test_uploaded_document_extension():
    """Extension is lower-cased and has no dot."""
    document = UploadedDocument(filename="Product Spec.DOCX", content=b"x")
    assert document.extension == "docx"
    assert document.size == 1


def test_uploaded_document_without_extension():
    document = UploadedDocument(filename="README", content=b"x")
    assert document.extension == ""


def test_document_block_round_trip():
    """Base64 payload decodes back to the original bytes."""
    payload = bytes(range(256)) * 4
    block = DocumentBlock(data=base64.b64encode(payload).decode("utf-8"))
    assert block.type == "document"
    assert block.mime_type == "application/pdf"
    assert block.raw_bytes() == payload


def test_content_block_discriminator():
    """Content blocks are resolved by their type tag."""
    adapter = TypeAdapter(ContentBlock)
    assert isinstance(adapter.validate_python({"type": "text", "text": "hi"}), TextBlock)
    assert isinstance(
        adapter.validate_python({"type": "image", "mime_type": "image/gif", "data": ""}),
        ImageBlock
    )


def test_generation_request_binary_blocks():
    request = GenerationRequest(
        instruction_text="go",
        content_blocks=[ImageBlock(data="aGk="), TextBlock(text="go")]
    )
    assert [b.type for b in request.binary_blocks()] == ["image"]


@pytest.mark.parametrize("title,expected", [
    ("Proposal A - Classic Table", "Proposal A - Classic Table.html"),
    ("a/b\\c:d", "a_b_c_d.html"),
    ("   ", "design-7.html"),
])
def test_design_filename(title, expected):
    design = Design(id="7", title=title, html="<html></html>")
    assert design.filename() == expected


def test_generation_response_helpers():
    design = Design(id="1", title="A", html="x")

    ok = GenerationResponse.ok([design], model_name="m")
    assert ok.success
    assert ok.status_code == 200
    assert ok.designs == [design]

    failed = GenerationResponse.fail("boom", status_code=400)
    assert not failed.success
    assert failed.error == "boom"
    assert failed.designs == []
