"""
LLM Debug Logger for tracking mockup generation calls.

Supports configurable log levels (NONE, INFO, DEBUG, TRACE) and dual output:
- Console: Human-readable formatted output
- File: JSON Lines format for parsing and analysis

Base64 payloads (attached PDFs and images) are never written out in full;
they are replaced with a short summary of their type and size.
"""

import json
import os
import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


class LogLevel(Enum):
    """Logging levels for LLM debug output."""

    NONE = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


class LLMLogger:
    """Centralized logger for LLM API calls with configurable levels."""

    _instance: Optional["LLMLogger"] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger with configuration from environment."""
        if self._initialized:
            return

        load_dotenv()
        self.configure(
            level=os.getenv("LLM_DEBUG_LEVEL", "NONE"),
            log_to_file=os.getenv("LLM_LOG_TO_FILE", "true").lower() == "true",
            log_dir=os.getenv("LLM_LOG_DIR", "outputs"),
        )
        self._initialized = True

    def configure(
        self,
        level: Optional[str] = None,
        log_to_file: Optional[bool] = None,
        log_dir: Optional[str] = None,
    ):
        """Override configuration (used by the CLI and tests)."""
        if level is not None:
            try:
                self.level = LogLevel[level.upper()]
            except KeyError:
                self.level = LogLevel.NONE
        if log_to_file is not None:
            self.log_to_file = log_to_file
        if log_dir is not None:
            self.log_dir = Path(log_dir)

    def _should_log(self, min_level: LogLevel) -> bool:
        """Check if we should log at the given level."""
        return self.level.value >= min_level.value

    def _format_timestamp(self) -> str:
        """Get ISO8601 formatted timestamp."""
        return datetime.now().isoformat()

    def _truncate_content(self, content: str, max_len: int = 200) -> str:
        """Truncate content for preview."""
        if len(content) <= max_len:
            return content
        return content[:max_len] + "... [truncated]"

    def _summarize_block(self, block: Any) -> Any:
        """Replace base64 payloads in a provider content block with a summary."""
        if not isinstance(block, dict):
            return block

        block_type = block.get("type", "")
        if block_type in ("image", "document"):
            source = block.get("source", {})
            data = source.get("data", "")
            return {
                "type": "text",
                "text": f"[{block_type.upper()}_DATA: {source.get('media_type', 'unknown')}, "
                        f"base64 encoded, {len(data):,} bytes]",
            }
        if block_type == "image_url":
            url = block.get("image_url", {})
            url_value = url.get("url", "") if isinstance(url, dict) else str(url)
            return {"type": "text", "text": f"[IMAGE_DATA: {len(url_value):,} chars data URL]"}
        if block_type == "file":
            file_data = block.get("file", {}).get("file_data", "")
            return {"type": "text", "text": f"[FILE_DATA: {len(file_data):,} chars data URL]"}
        return block

    def _serialize_message(self, msg: Any) -> Dict[str, Any]:
        """Serialize a message object to dict with binary payloads summarised."""
        content = msg.content if hasattr(msg, "content") else str(msg)
        if isinstance(content, list):
            content = [self._summarize_block(block) for block in content]
        return {"type": type(msg).__name__, "content": content}

    def _content_to_text(self, content: Any) -> str:
        if isinstance(content, str):
            return content
        return json.dumps(content, indent=2, ensure_ascii=False)

    def _format_console_info(
        self,
        component: str,
        provider: str,
        model: str,
        latency_ms: float,
        token_count: Optional[int] = None,
    ) -> str:
        """Format basic info line for console."""
        parts = [
            f"[{component}]",
            f"{provider}/{model}",
            f"{latency_ms:.1f}ms",
        ]
        if token_count is not None:
            parts.append(f"{token_count} tokens")
        return " | ".join(parts)

    def _format_console_debug(
        self,
        request_messages: List[Any],
        response_content: Optional[str] = None,
    ) -> str:
        """Format debug info for console."""
        lines = [f"  Messages: {len(request_messages)}"]
        for i, msg in enumerate(request_messages):
            serialized = self._serialize_message(msg)
            preview = self._truncate_content(self._content_to_text(serialized["content"]), 150)
            lines.append(f"    {i+1}. [{serialized['type']}] {preview}")

        if response_content:
            lines.append(f"  Response: {self._truncate_content(response_content, 200)}")

        return "\n".join(lines)

    def _format_console_trace(
        self,
        request_messages: List[Any],
        response_content: str,
        token_usage: Optional[Dict] = None,
    ) -> str:
        """Format full trace info for console."""
        lines = ["  REQUEST MESSAGES:"]
        for i, msg in enumerate(request_messages):
            serialized = self._serialize_message(msg)
            lines.append(f"    [{i+1}] {serialized['type']}:")
            for line in self._content_to_text(serialized["content"]).split("\n"):
                lines.append(f"      {line}")

        lines.append("\n  RESPONSE:")
        if len(response_content) > 1000:
            lines.append(f"    {response_content[:1000]}...")
            lines.append(f"    ... [{len(response_content) - 1000} more chars]")
        else:
            for line in response_content.split("\n"):
                lines.append(f"    {line}")

        if token_usage:
            lines.append("\n  TOKEN USAGE:")
            for key, value in token_usage.items():
                lines.append(f"    {key}: {value}")

        return "\n".join(lines)

    def _write_to_file(self, run_id: Optional[str], log_entry: Dict[str, Any]):
        """Write log entry to JSON Lines file."""
        if not self.log_to_file or not run_id:
            return

        log_file = self.log_dir / run_id / "logs" / "llm_calls.jsonl"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")

    def extract_usage(self, response: Any) -> Dict[str, Optional[int]]:
        """Token usage from a LangChain AIMessage, if the provider reported it."""
        usage = getattr(response, "usage_metadata", None)
        if usage:
            return {
                "prompt_tokens": usage.get("input_tokens"),
                "completion_tokens": usage.get("output_tokens"),
                "total_tokens": usage.get("total_tokens"),
            }
        metadata = getattr(response, "response_metadata", None) or {}
        usage = metadata.get("usage") or metadata.get("token_usage") or {}
        return {
            "prompt_tokens": usage.get("prompt_tokens", usage.get("input_tokens")),
            "completion_tokens": usage.get("completion_tokens", usage.get("output_tokens")),
            "total_tokens": usage.get("total_tokens"),
        }

    def log_invocation(
        self,
        component: str,
        provider: str,
        model: str,
        run_id: Optional[str] = None,
    ) -> str:
        """
        Log the start of an LLM invocation.

        Returns:
            Invocation ID (UUID string) for tracking this call, or an empty
            string when logging is disabled.
        """
        if not self._should_log(LogLevel.INFO):
            return ""

        invocation_id = str(uuid.uuid4())
        console_msg = f"[{self._format_timestamp()}] LLM Call: [{component}] {provider}/{model}"
        if run_id:
            console_msg += f" | run_id: {run_id}"
        print(console_msg)
        return invocation_id

    def log_request(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        messages: List[Any],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        run_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log LLM request details."""
        if not self._should_log(LogLevel.DEBUG):
            return

        print(self._format_console_debug(messages))

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "request",
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "run_id": run_id,
            "request": {
                "messages": (
                    [self._serialize_message(msg) for msg in messages]
                    if self.level == LogLevel.TRACE
                    else []
                ),
                "message_count": len(messages),
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
            "metadata": metadata or {},
        }
        self._write_to_file(run_id, log_entry)

    def log_response(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        request_messages: List[Any],
        response: Any,
        start_time: float,
        end_time: float,
        run_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log LLM response with timing and usage."""
        if not self._should_log(LogLevel.INFO):
            return

        latency_ms = (end_time - start_time) * 1000
        content = response.content if hasattr(response, "content") else response
        response_text = self._content_to_text(content)
        token_usage = self.extract_usage(response)

        print(
            f"[{self._format_timestamp()}] LLM Response: "
            + self._format_console_info(
                component, provider, model, latency_ms, token_usage.get("total_tokens")
            )
        )
        if self.level == LogLevel.DEBUG:
            print(self._format_console_debug(request_messages, response_text))
        elif self.level == LogLevel.TRACE:
            print(self._format_console_trace(request_messages, response_text, token_usage))

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "response",
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "run_id": run_id,
            "response": {
                "content": response_text if self.level == LogLevel.TRACE else None,
                "content_preview": (
                    self._truncate_content(response_text, 200)
                    if self._should_log(LogLevel.DEBUG)
                    else None
                ),
                "content_length": len(response_text),
            },
            "timing": {
                "latency_ms": latency_ms,
                "start_time": datetime.fromtimestamp(start_time).isoformat(),
                "end_time": datetime.fromtimestamp(end_time).isoformat(),
            },
            "usage": token_usage,
            "metadata": metadata or {},
        }
        self._write_to_file(run_id, log_entry)

    def log_error(self, component: str, error: Exception, run_id: Optional[str] = None):
        """Log a failed invocation."""
        if not self._should_log(LogLevel.INFO):
            return

        print(
            f"[{self._format_timestamp()}] LLM Error: [{component}] "
            f"{type(error).__name__}: {error}"
        )
        self._write_to_file(run_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "error",
            "component": component,
            "run_id": run_id,
            "error": {"type": type(error).__name__, "message": str(error)},
        })


def get_logger() -> LLMLogger:
    """Get the singleton logger instance."""
    return LLMLogger()


class LoggedLLM:
    """
    Wrapper around LangChain chat models to add debug logging.

    Intercepts invoke() calls and logs requests, responses, timing, and metadata.
    """

    def __init__(
        self,
        llm_instance: Any,
        component: str,
        provider: str,
        model: str,
        run_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize LoggedLLM wrapper.

        Args:
            llm_instance: The actual chat model (ChatAnthropic or ChatOpenAI)
            component: Component name (e.g., "generator")
            provider: Provider name ("anthropic" or "openai")
            model: Model name
            run_id: Optional run ID used to group log files
            metadata: Optional additional metadata to include in logs
        """
        self.llm = llm_instance
        self.component = component
        self.provider = provider
        self.model = model
        self.run_id = run_id
        self.metadata = metadata or {}
        self.logger = get_logger()

    def __getattr__(self, name: str):
        """Delegate all other attributes to wrapped LLM instance."""
        return getattr(self.llm, name)

    def invoke(self, messages: List[Any], **kwargs) -> Any:
        """
        Invoke LLM with logging.

        Args:
            messages: List of message objects
            **kwargs: Additional arguments passed to LLM

        Returns:
            LLM response
        """
        invocation_id = self.logger.log_invocation(
            component=self.component,
            provider=self.provider,
            model=self.model,
            run_id=self.run_id,
        )

        if not invocation_id:
            # Logging disabled, just call directly
            return self.llm.invoke(messages, **kwargs)

        self.logger.log_request(
            invocation_id=invocation_id,
            component=self.component,
            provider=self.provider,
            model=self.model,
            messages=messages,
            temperature=getattr(self.llm, "temperature", None),
            max_tokens=getattr(self.llm, "max_tokens", None),
            run_id=self.run_id,
            metadata=self.metadata,
        )

        start_time = time.time()
        try:
            response = self.llm.invoke(messages, **kwargs)
        except Exception as e:
            self.logger.log_error(self.component, e, run_id=self.run_id)
            raise
        end_time = time.time()

        self.logger.log_response(
            invocation_id=invocation_id,
            component=self.component,
            provider=self.provider,
            model=self.model,
            request_messages=messages,
            response=response,
            start_time=start_time,
            end_time=end_time,
            run_id=self.run_id,
            metadata=self.metadata,
        )

        return response
