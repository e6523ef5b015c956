"""
LangChain-based generation of HTML mockups from a GenerationRequest.
"""

import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel

from prd_mockups.errors import ConfigurationError, ServiceError
from prd_mockups.models import (
    DocumentBlock,
    GeneratedMockups,
    GenerationRequest,
    ImageBlock,
    TextBlock,
)
from prd_mockups.pipeline.parsing import DesignExtractor
from prd_mockups.utils.llm_logger import LoggedLLM, get_logger


DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-5",
    "openai": "gpt-4o",
}

API_KEY_VARIABLES = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


class GeneratorSettings(BaseModel):
    """Generation settings, read from the environment unless overridden."""
    provider: str = "anthropic"
    model_name: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 16000
    timeout_seconds: float = 60.0
    max_document_chars: int = 200_000

    @classmethod
    def from_env(cls, **overrides) -> "GeneratorSettings":
        """
        Build settings from MOCKUP_* environment variables.

        Keyword arguments that are not None take precedence.
        """
        load_dotenv()
        values: Dict[str, Any] = {
            "provider": os.getenv("MOCKUP_PROVIDER", "anthropic"),
            "model_name": os.getenv("MOCKUP_MODEL") or None,
            "temperature": os.getenv("MOCKUP_TEMPERATURE", "0.7"),
            "max_tokens": os.getenv("MOCKUP_MAX_TOKENS", "16000"),
            "timeout_seconds": os.getenv("MOCKUP_TIMEOUT_SECONDS", "60"),
            "max_document_chars": os.getenv("MOCKUP_MAX_DOCUMENT_CHARS", "200000"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def to_anthropic_content(request: GenerationRequest) -> List[Dict[str, Any]]:
    """Translate content blocks into Anthropic message content."""
    content = []
    for block in request.content_blocks:
        if isinstance(block, ImageBlock):
            content.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": block.mime_type,
                    "data": block.data
                }
            })
        elif isinstance(block, DocumentBlock):
            content.append({
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": block.mime_type,
                    "data": block.data
                }
            })
        elif isinstance(block, TextBlock):
            content.append({"type": "text", "text": block.text})
        else:
            raise TypeError(f"Unknown content block: {type(block).__name__}")
    return content


def to_openai_content(request: GenerationRequest) -> List[Dict[str, Any]]:
    """Translate content blocks into OpenAI chat message content."""
    content = []
    for block in request.content_blocks:
        if isinstance(block, ImageBlock):
            content.append({
                "type": "image_url",
                "image_url": {"url": f"data:{block.mime_type};base64,{block.data}"}
            })
        elif isinstance(block, DocumentBlock):
            content.append({
                "type": "file",
                "file": {
                    "filename": "requirements.pdf",
                    "file_data": f"data:{block.mime_type};base64,{block.data}"
                }
            })
        elif isinstance(block, TextBlock):
            content.append({"type": "text", "text": block.text})
        else:
            raise TypeError(f"Unknown content block: {type(block).__name__}")
    return content


def response_text(response: Any) -> str:
    """Concatenate the text parts of a chat model response."""
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, str):
        return content
    parts = []
    for item in content or []:
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, dict) and item.get("type") == "text":
            parts.append(item.get("text", ""))
    return "".join(parts)


class MockupGenerator:
    """Sends a GenerationRequest to an LLM and extracts the designs."""

    def __init__(
        self,
        provider: str = "anthropic",
        model_name: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 16000,
        timeout_seconds: float = 60.0,
        api_key: Optional[str] = None,
        llm: Optional[Any] = None
    ):
        """
        Initialize the generator.

        Args:
            provider: LLM provider (anthropic or openai).
            model_name: Model name (optional, uses defaults).
            temperature: Generation temperature.
            max_tokens: Maximum tokens to generate.
            timeout_seconds: Upper bound for one generation call.
            api_key: API key (optional, uses environment variable).
            llm: Pre-built chat model; skips provider setup.

        Raises:
            ConfigurationError: unsupported provider or missing API key.
        """
        self.provider = provider.lower()
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
        self.extractor = DesignExtractor()

        if self.provider not in DEFAULT_MODELS:
            raise ConfigurationError(f"Unsupported provider: {provider}")
        self.model_name = model_name or DEFAULT_MODELS[self.provider]

        if llm is not None:
            self.llm = llm
            return

        api_key = api_key or os.getenv(API_KEY_VARIABLES[self.provider])
        if not api_key:
            raise ConfigurationError(
                f"{API_KEY_VARIABLES[self.provider]} environment variable is not set"
            )

        # One attempt per request; the timeout is the only bound.
        if self.provider == "anthropic":
            self.llm = ChatAnthropic(
                model=self.model_name,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout_seconds,
                max_retries=0,
                api_key=api_key
            )
        else:
            self.llm = ChatOpenAI(
                model=self.model_name,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout_seconds,
                max_retries=0,
                api_key=api_key
            )

    @classmethod
    def from_settings(cls, settings: GeneratorSettings, **kwargs) -> "MockupGenerator":
        return cls(
            provider=settings.provider,
            model_name=settings.model_name,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            timeout_seconds=settings.timeout_seconds,
            **kwargs
        )

    def _create_messages(self, request: GenerationRequest) -> List:
        """
        Create prompt messages for the LLM.

        Args:
            request: Assembled generation request.

        Returns:
            List with a single HumanMessage.
        """
        if self.provider == "openai":
            content = to_openai_content(request)
        else:
            content = to_anthropic_content(request)
        return [HumanMessage(content=content)]

    def generate(
        self,
        request: GenerationRequest,
        run_id: Optional[str] = None
    ) -> GeneratedMockups:
        """
        Generate HTML mockups for an assembled request.

        Args:
            request: Assembled generation request.
            run_id: Identifier used to group logs and artifacts.

        Returns:
            GeneratedMockups with at least one design.

        Raises:
            ServiceError: the generation call failed.
        """
        run_id = run_id or f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        messages = self._create_messages(request)

        llm = LoggedLLM(
            self.llm,
            component="generator",
            provider=self.provider,
            model=self.model_name,
            run_id=run_id,
            metadata={"content_blocks": [b.type for b in request.content_blocks]},
        )

        try:
            response = llm.invoke(messages)
        except Exception as e:
            raise ServiceError(str(e) or type(e).__name__) from e

        raw_text = response_text(response)
        designs = self.extractor.extract(raw_text)
        usage = get_logger().extract_usage(response)

        return GeneratedMockups(
            run_id=run_id,
            designs=designs,
            raw_text=raw_text,
            model_name=self.model_name,
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            generation_timestamp=datetime.now(),
            generation_metadata={
                "provider": self.provider,
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
                "design_count": len(designs)
            }
        )
