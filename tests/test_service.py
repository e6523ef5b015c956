"""
Tests for the request boundary.
"""

from io import BytesIO

import pytest
from docx import Document
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from prd_mockups.models import Design, UploadedDocument
from prd_mockups.pipeline.generation import GeneratorSettings, MockupGenerator
from prd_mockups.service import RequestService


class RecordingFactory:
    """Builds generators backed by a fake model and remembers the requests."""

    def __init__(self, reply):
        self.reply = reply
        self.calls = 0
        self.requests = []

    def __call__(self, settings):
        self.calls += 1
        factory = self

        class RecordingGenerator(MockupGenerator):
            def generate(self, request, run_id=None):
                factory.requests.append(request)
                return super().generate(request, run_id=run_id)

        return RecordingGenerator(llm=FakeListChatModel(responses=[self.reply]))


@pytest.fixture
def settings():
    return GeneratorSettings(max_document_chars=1000)


def test_empty_request_is_rejected_before_generation(settings):
    factory = RecordingFactory("unused")
    service = RequestService(settings=settings, generator_factory=factory)

    response = service.handle(None, "")

    assert not response.success
    assert response.status_code == 400
    assert response.error == "Please upload a document or provide a description."
    assert factory.calls == 0


def test_unsupported_file_is_rejected_before_generation(settings):
    factory = RecordingFactory("unused")
    service = RequestService(settings=settings, generator_factory=factory)
    document = UploadedDocument(filename="spec.txt", content=b"x", content_type="text/plain")

    response = service.handle(document, "some context")

    assert not response.success
    assert response.status_code == 400
    assert factory.calls == 0


def test_context_only_request(settings):
    reply = '<DESIGN id="1" title="A">x</DESIGN><DESIGN id="2" title="B">y</DESIGN>'
    factory = RecordingFactory(reply)
    service = RequestService(settings=settings, generator_factory=factory)

    response = service.handle(None, "dark SaaS dashboard", run_id="r1")

    assert response.success
    assert response.status_code == 200
    assert response.designs == [
        Design(id="1", title="A", html="x"),
        Design(id="2", title="B", html="y"),
    ]
    assert response.run_id == "r1"
    assert response.raw_text == reply

    (request,) = factory.requests
    assert len(request.content_blocks) == 1
    assert "dark SaaS dashboard" in request.instruction_text


def test_untagged_reply_still_succeeds(settings):
    service = RequestService(settings=settings, generator_factory=RecordingFactory("no tags here"))

    response = service.handle(None, "anything")

    assert response.success
    assert response.designs == [Design(id="1", title="Result", html="no tags here")]


def test_broken_word_document_fails(settings):
    service = RequestService(settings=settings, generator_factory=RecordingFactory("unused"))
    document = UploadedDocument(filename="prd.docx", content=b"garbage")

    response = service.handle(document, "")

    assert not response.success
    assert response.status_code == 422
    assert "Word document" in response.error


def test_oversized_word_document_fails(settings):
    doc = Document()
    doc.add_paragraph("y" * 2000)
    buffer = BytesIO()
    doc.save(buffer)
    document = UploadedDocument(filename="prd.docx", content=buffer.getvalue())
    factory = RecordingFactory("unused")
    service = RequestService(settings=settings, generator_factory=factory)

    response = service.handle(document, "")

    assert not response.success
    assert response.status_code == 400
    assert factory.requests == []


def test_missing_credentials_become_failure(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    service = RequestService(settings=GeneratorSettings(provider="anthropic"))

    response = service.handle(None, "dashboard")

    assert not response.success
    assert response.status_code == 500
    assert "ANTHROPIC_API_KEY" in response.error


def test_service_errors_become_failure(settings):
    class Boom:
        def invoke(self, messages, **kwargs):
            raise TimeoutError("request timed out")

    service = RequestService(
        settings=settings,
        generator_factory=lambda s: MockupGenerator(llm=Boom())
    )

    response = service.handle(None, "dashboard")

    assert not response.success
    assert response.status_code == 502
    assert response.error == "request timed out"


def test_unexpected_errors_become_failure(settings):
    def broken_factory(s):
        raise KeyError("surprise")

    service = RequestService(settings=settings, generator_factory=broken_factory)

    response = service.handle(None, "dashboard")

    assert not response.success
    assert response.status_code == 500
