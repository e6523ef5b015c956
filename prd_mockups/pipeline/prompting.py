"""
Prompt assembly for PRD-to-mockup generation.
"""

from typing import List, Optional

from prd_mockups.errors import ValidationError
from prd_mockups.io.document_loader import DocumentLoader
from prd_mockups.models import (
    ContentBlock,
    DocumentBlock,
    DocumentKind,
    GenerationRequest,
    ImageBlock,
    TextBlock,
    UploadedDocument,
)


DESIGN_COUNT = 3


PREAMBLE = (
    "You are a senior SaaS product interaction designer. Based on the product "
    f"requirements below, produce {DESIGN_COUNT} complete HTML interaction design "
    "proposals, each in a clearly different visual style.\n\n"
)


DOCUMENT_SECTION = """## PRD document content
```
{document_text}
```

"""


CONTEXT_SECTION = """## Additional notes
{context}

"""


DEMO_REQUEST = (
    f"Please produce {DESIGN_COUNT} design proposals for a sample SaaS admin "
    "dashboard page as a demonstration.\n\n"
)


OUTPUT_FORMAT = """## Design requirements
- Every proposal is a standalone, complete single-file HTML document (from <!DOCTYPE html> to </html>)
- All CSS goes inside a <style> tag and all JavaScript inside a <script> tag
- Fill the interface with complete, realistic sample data
- Include basic interactions (modals, drawers, status toggles and so on, simulated with JavaScript)
- Dark sidebar (#1a1d27 or #141721) with a white or dark main content area
- Purple/indigo primary palette (#6366f1, #8b5cf6)
- The 3 proposals must differ clearly in style:
  - Proposal A: classic white table layout, close to a conventional back-office system
  - Proposal B: card grid layout with a richer visual hierarchy
  - Proposal C: dark professional edition with a dark theme

## Strict output format
Output exactly the following tags and nothing else:

<DESIGN id="1" title="Proposal A - Classic Table">
<!DOCTYPE html>
<html>
...complete HTML...
</html>
</DESIGN>
<DESIGN id="2" title="Proposal B - Card Grid">
<!DOCTYPE html>
<html>
...complete HTML...
</html>
</DESIGN>
<DESIGN id="3" title="Proposal C - Dark Professional">
<!DOCTYPE html>
<html>
...complete HTML...
</html>
</DESIGN>"""


class PromptAssembler:
    """Builds a GenerationRequest from an uploaded document and free text."""

    def __init__(self, loader: Optional[DocumentLoader] = None):
        """
        Initialize the assembler.

        Args:
            loader: Document loader used for classification, base64 encoding
                and Word text extraction (creates one if not provided).
        """
        self.loader = loader or DocumentLoader()

    def build_instruction(
        self,
        document_text: str = "",
        context: str = "",
        has_attachment: bool = False
    ) -> str:
        """
        Build the instruction text.

        Args:
            document_text: Text extracted from a Word document.
            context: Supplementary free text from the user.
            has_attachment: Whether a PDF or image is attached as a block.

        Returns:
            Instruction prompt ending with the output-format contract.
        """
        context = context or ""
        has_context = bool(context.strip())

        prompt = PREAMBLE
        if document_text:
            prompt += DOCUMENT_SECTION.format(document_text=document_text)
        if has_context:
            prompt += CONTEXT_SECTION.format(context=context)
        if not document_text and not has_attachment and not has_context:
            prompt += DEMO_REQUEST
        prompt += OUTPUT_FORMAT
        return prompt

    def assemble(
        self,
        document: Optional[UploadedDocument],
        context: str = "",
        kind: Optional[DocumentKind] = None
    ) -> GenerationRequest:
        """
        Assemble a generation request.

        Word documents are converted to text and embedded in the instruction;
        PDFs and images are attached as base64 blocks ahead of the instruction.

        Args:
            document: Optional uploaded document.
            context: Supplementary free text.
            kind: Pre-computed document kind (classified here if omitted).

        Returns:
            GenerationRequest whose last content block is the instruction text.

        Raises:
            ValidationError: document kind is not supported.
            ExtractionError: Word text extraction failed.
        """
        blocks: List[ContentBlock] = []
        document_text = ""

        if document is not None:
            kind = kind or self.loader.classify(document)
            if kind == DocumentKind.WORD:
                document_text = self.loader.extract_text(document.content)
            elif kind == DocumentKind.PDF:
                blocks.append(DocumentBlock(
                    mime_type="application/pdf",
                    data=self.loader.to_base64(document.content)
                ))
            elif kind == DocumentKind.IMAGE:
                blocks.append(ImageBlock(
                    mime_type=self.loader.image_mime_type(document),
                    data=self.loader.to_base64(document.content)
                ))
            else:
                raise ValidationError(f"Unsupported document: {document.filename}")

        instruction = self.build_instruction(
            document_text=document_text,
            context=context,
            has_attachment=bool(blocks)
        )
        blocks.append(TextBlock(text=instruction))

        return GenerationRequest(instruction_text=instruction, content_blocks=blocks)
