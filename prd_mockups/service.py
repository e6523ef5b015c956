"""
Request boundary for mockup generation.

Validates the user's input, assembles the prompt, calls the generator and
extracts designs. Every failure is returned as a GenerationResponse with
``success=False``; nothing raised below this point escapes to the caller.
"""

import logging
from typing import Callable, Optional

from prd_mockups.errors import MockupError
from prd_mockups.io.document_loader import DocumentLoader
from prd_mockups.models import GenerationResponse, UploadedDocument
from prd_mockups.pipeline.generation import GeneratorSettings, MockupGenerator
from prd_mockups.pipeline.prompting import PromptAssembler

logger = logging.getLogger(__name__)


class RequestService:
    """Handles one generate request end to end."""

    def __init__(
        self,
        settings: Optional[GeneratorSettings] = None,
        generator_factory: Optional[Callable[[GeneratorSettings], MockupGenerator]] = None
    ):
        """
        Initialize the service.

        Args:
            settings: Generation settings (read from environment if omitted).
            generator_factory: Builds the generator for a request. The default
                builds a provider-backed MockupGenerator, which raises
                ConfigurationError when credentials are missing.
        """
        self.settings = settings or GeneratorSettings.from_env()
        self.generator_factory = generator_factory or MockupGenerator.from_settings
        self.loader = DocumentLoader(max_document_chars=self.settings.max_document_chars)
        self.assembler = PromptAssembler(self.loader)

    def handle(
        self,
        document: Optional[UploadedDocument],
        context: str = "",
        run_id: Optional[str] = None
    ) -> GenerationResponse:
        """
        Run one request.

        Args:
            document: Optional uploaded requirements document.
            context: Optional free-text description.
            run_id: Optional identifier for logs.

        Returns:
            GenerationResponse; on success ``designs`` is never empty.
        """
        try:
            kind = self.loader.validate_upload(document, context)
            generator = self.generator_factory(self.settings)
            request = self.assembler.assemble(document, context, kind=kind)
            generated = generator.generate(request, run_id=run_id)
        except MockupError as e:
            logger.warning("Generation request failed (%s): %s", type(e).__name__, e.message)
            return GenerationResponse.fail(e.message, status_code=e.status_code, run_id=run_id)
        except Exception as e:
            logger.exception("Unexpected error while generating mockups")
            return GenerationResponse.fail(str(e) or "Generation failed", status_code=500, run_id=run_id)

        return GenerationResponse.ok(
            generated.designs,
            run_id=generated.run_id,
            model_name=generated.model_name,
            prompt_tokens=generated.prompt_tokens,
            completion_tokens=generated.completion_tokens,
            raw_text=generated.raw_text,
            generation_timestamp=generated.generation_timestamp,
            generation_metadata=generated.generation_metadata
        )
