"""
Utilities for loading, validating and decoding requirement documents,
and for writing generated mockups to disk.
"""

import base64
import logging
import mimetypes
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from docx import Document
from docx.table import Table

from prd_mockups.errors import ExtractionError, ValidationError
from prd_mockups.models import Design, DocumentKind, UploadedDocument

logger = logging.getLogger(__name__)


WORD_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

EXTENSION_KINDS: Dict[str, DocumentKind] = {
    "docx": DocumentKind.WORD,
    "pdf": DocumentKind.PDF,
    "png": DocumentKind.IMAGE,
    "jpg": DocumentKind.IMAGE,
    "jpeg": DocumentKind.IMAGE,
    "webp": DocumentKind.IMAGE,
    "gif": DocumentKind.IMAGE,
}

CONTENT_TYPE_KINDS: Dict[str, DocumentKind] = {
    WORD_MIME_TYPE: DocumentKind.WORD,
    "application/pdf": DocumentKind.PDF,
    "image/png": DocumentKind.IMAGE,
    "image/jpeg": DocumentKind.IMAGE,
    "image/jpg": DocumentKind.IMAGE,
    "image/webp": DocumentKind.IMAGE,
    "image/gif": DocumentKind.IMAGE,
}

IMAGE_MIME_TYPES = {
    "image/png": "image/png",
    "image/jpeg": "image/jpeg",
    "image/jpg": "image/jpeg",
    "image/webp": "image/webp",
    "image/gif": "image/gif",
}
DEFAULT_IMAGE_MIME_TYPE = "image/png"

ALLOWED_EXTENSIONS = sorted(EXTENSION_KINDS)

UNSUPPORTED_FILE_MESSAGE = "Only Word (.docx), PDF and image files are supported."
EMPTY_REQUEST_MESSAGE = "Please upload a document or provide a description."


def _normalize_content_type(content_type: Optional[str]) -> str:
    if not content_type:
        return ""
    return content_type.split(";")[0].strip().lower()


class DocumentLoader:
    """Classifies, validates and decodes uploaded requirement documents."""

    def __init__(self, max_document_chars: Optional[int] = None):
        """
        Initialize document loader.

        Args:
            max_document_chars: Upper bound on text extracted from Word
                documents. ``None`` or ``0`` disables the bound.
        """
        self.max_document_chars = max_document_chars or None

    def classify(self, document: UploadedDocument) -> Optional[DocumentKind]:
        """
        Determine the document kind.

        The filename extension decides; the declared content type is used
        only when the extension is not recognised.

        Returns:
            DocumentKind, or None when neither matches the allow-set.
        """
        kind = EXTENSION_KINDS.get(document.extension)
        if kind is None:
            kind = CONTENT_TYPE_KINDS.get(_normalize_content_type(document.content_type))
        return kind

    def validate_upload(
        self,
        document: Optional[UploadedDocument],
        context: str = ""
    ) -> Optional[DocumentKind]:
        """
        Boundary validation, performed before any prompt is assembled.

        Args:
            document: Optional uploaded file.
            context: Optional free-text description.

        Returns:
            Kind of the document, or None when no document was given.

        Raises:
            ValidationError: unsupported type, empty file, or nothing to work with.
        """
        if document is None:
            if not (context or "").strip():
                raise ValidationError(EMPTY_REQUEST_MESSAGE)
            return None

        kind = self.classify(document)
        if kind is None:
            raise ValidationError(UNSUPPORTED_FILE_MESSAGE)
        if not document.content:
            raise ValidationError(f"Uploaded file is empty: {document.filename}")
        return kind

    def image_mime_type(self, document: UploadedDocument) -> str:
        """Mime type for an image upload, falling back to PNG."""
        return IMAGE_MIME_TYPES.get(
            _normalize_content_type(document.content_type),
            DEFAULT_IMAGE_MIME_TYPE
        )

    def to_base64(self, data: bytes) -> str:
        """
        Convert raw bytes to a base64 string.

        Args:
            data: Raw file bytes.

        Returns:
            Base64-encoded string.
        """
        return base64.b64encode(data).decode("utf-8")

    def extract_text(self, data: bytes) -> str:
        """
        Extract plain text from a .docx file.

        Paragraphs and table rows are returned in document order, one per
        line; table cells are tab separated.

        Raises:
            ExtractionError: bytes are not a readable Word document.
            ValidationError: text exceeds ``max_document_chars``.
        """
        try:
            doc = Document(BytesIO(data))
        except Exception as e:
            logger.warning("Word text extraction failed: %s", e)
            raise ExtractionError(f"Could not read Word document: {e}") from e

        lines: List[str] = []
        for block in doc.iter_inner_content():
            if isinstance(block, Table):
                for row in block.rows:
                    lines.append("\t".join(cell.text for cell in row.cells))
            else:
                lines.append(block.text)

        text = "\n".join(lines).strip()
        if self.max_document_chars and len(text) > self.max_document_chars:
            raise ValidationError(
                f"Document text is too long ({len(text):,} characters, "
                f"limit {self.max_document_chars:,})."
            )
        return text

    def load_document(
        self,
        path: Union[str, Path],
        content_type: Optional[str] = None
    ) -> UploadedDocument:
        """
        Load a requirement document from disk.

        Args:
            path: Path to the file.
            content_type: Declared content type (guessed from the name if omitted).

        Returns:
            UploadedDocument object.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Document not found: {path}")

        if content_type is None:
            content_type, _ = mimetypes.guess_type(path.name)

        return UploadedDocument(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type
        )


class ArtifactManager:
    """Manages writing generated mockups to disk."""

    def __init__(self, output_dir: Union[str, Path] = "outputs"):
        """
        Initialize artifact manager.

        Args:
            output_dir: Root directory for generated mockups.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def create_run_directory(self, run_id: str) -> Path:
        """
        Create output directory for a run.

        Args:
            run_id: Run identifier.

        Returns:
            Path to run directory.
        """
        run_dir = self.output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        (run_dir / "logs").mkdir(exist_ok=True)
        return run_dir

    def save_design(
        self,
        run_id: str,
        design: Design,
        taken: Optional[Set[str]] = None
    ) -> Path:
        """
        Save one design as a standalone HTML file.

        Files left in the run directory by an earlier save are overwritten.
        Names in ``taken`` (already written by the current batch) are skipped:
        the design id is appended, then a counter, until the name is free.

        Args:
            run_id: Run identifier.
            design: Design to write.
            taken: Lower-cased file names already used in this batch; the
                chosen name is added to it.

        Returns:
            Path of the written file.
        """
        run_dir = self.create_run_directory(run_id)
        filename = design.filename()

        if taken is not None:
            stem = filename[:-len(".html")]
            counter = 2
            if filename.lower() in taken:
                filename = f"{stem}-{design.id}.html"
            while filename.lower() in taken:
                filename = f"{stem}-{design.id}-{counter}.html"
                counter += 1
            taken.add(filename.lower())

        html_path = run_dir / filename
        html_path.write_text(design.html, encoding="utf-8")
        return html_path

    def save_designs(self, run_id: str, designs: List[Design]) -> List[Path]:
        """Save designs in order, one file each; returns the written paths."""
        taken: Set[str] = set()
        return [self.save_design(run_id, design, taken) for design in designs]

    def save_raw_response(self, run_id: str, raw_text: str) -> Path:
        """Save the unparsed model response next to the designs."""
        raw_path = self.create_run_directory(run_id) / "raw_response.txt"
        raw_path.write_text(raw_text, encoding="utf-8")
        return raw_path

    def load_raw_response(self, path: Union[str, Path]) -> str:
        """
        Load a previously saved model response.

        Args:
            path: Path to the raw response file.

        Returns:
            Response text.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Raw response not found: {path}")
        return path.read_text(encoding="utf-8")
