"""OpenAI-backed text generation with optional web-search grounding.

:class:`GenerationClient` wraps a single call to the Responses API and
normalises the reply into a :class:`~naskah.services.document.GenerationResult`.
When grounding is requested the ``web_search`` tool is enabled and every
``url_citation`` annotation attached to the answer becomes a web source.

Failures are classified at this boundary so callers never have to inspect
provider wording:

* :class:`TransientGenerationError` when the upstream service reports that it
  is overloaded (the only condition the retry policy retries).
* :class:`GenerationError` for every other transport or service failure.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
import openai

from .document import GenerationResult, Source

LOGGER = logging.getLogger(__name__)

OVERLOADED_MARKER = "overloaded"
OVERLOADED_STATUS_CODES = frozenset({529})


class GenerationError(RuntimeError):
    """Raised when the remote model cannot produce a usable response."""

    def __init__(self, message: str, *, label: Optional[str] = None, transient: bool = False) -> None:
        super().__init__(message)
        self.label = label
        self.transient = transient


class TransientGenerationError(GenerationError):
    """Raised when the remote service is temporarily overloaded."""

    def __init__(self, message: str, *, label: Optional[str] = None) -> None:
        super().__init__(message, label=label, transient=True)


class GenerationClient:
    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.model = (model or "").strip()
        self.api_key = (api_key or "").strip()
        if not self.model:
            raise ValueError("A model name is required.")
        if not self.api_key:
            raise ValueError("An API key is required.")
        # Retries belong to with_retry, which only retries overloads.
        self._client = openai.OpenAI(
            api_key=self.api_key,
            base_url=base_url or None,
            max_retries=0,
            http_client=http_client,
        )

    def generate(
        self,
        prompt: str,
        *,
        use_grounding: bool = False,
        model: Optional[str] = None,
    ) -> GenerationResult:
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValueError("prompt must be a non-empty string.")

        payload = {
            "model": (model or self.model),
            "input": prompt,
        }
        if use_grounding:
            payload["tools"] = [{"type": "web_search"}]

        try:
            resp = self._client.responses.create(**payload)
        except openai.OpenAIError as exc:
            raise classify_api_error(exc) from exc

        text = (getattr(resp, "output_text", None) or self._deep_collect_text(resp)).strip()
        if not text:
            snippet = self._shorten_debug(str(resp))
            raise GenerationError(f"Model returned no text content. Raw response (truncated): {snippet}")

        sources = self._extract_sources(resp) if use_grounding else []
        return GenerationResult(text=text, sources=sources)

    # ---------------- extractors ----------------
    def _extract_sources(self, resp: Any) -> List[Source]:
        sources: List[Source] = []
        for item in _field(resp, "output") or []:
            if _field(item, "type") != "message":
                continue
            for part in _field(item, "content") or []:
                for annotation in _field(part, "annotations") or []:
                    if _field(annotation, "type") != "url_citation":
                        continue
                    uri = _field(annotation, "url")
                    if not uri:
                        continue
                    title = _field(annotation, "title") or uri
                    sources.append(Source(uri=str(uri), title=str(title)))
        return sources

    def _deep_collect_text(self, resp: Any) -> str:
        chunks: List[str] = []
        for item in _field(resp, "output") or []:
            if _field(item, "type") != "message":
                continue
            for part in _field(item, "content") or []:
                if _field(part, "type") == "output_text":
                    value = _field(part, "text")
                    if isinstance(value, str) and value.strip():
                        chunks.append(value.strip())
        return "\n".join(chunks)

    @staticmethod
    def _shorten_debug(s: str, limit: int = 1200) -> str:
        s = s.replace("\n", " ")
        return (s[:limit] + "…") if len(s) > limit else s


def classify_api_error(exc: Exception) -> GenerationError:
    """Map an SDK exception onto the transient/permanent error split."""

    message = _api_error_message(exc)
    status_code = getattr(exc, "status_code", None)
    if OVERLOADED_MARKER in message.lower() or status_code in OVERLOADED_STATUS_CODES:
        LOGGER.info("Generation service reported overload (status=%s)", status_code)
        return TransientGenerationError(message)
    return GenerationError(message)


def _api_error_message(exc: Exception) -> str:
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        nested = body.get("error") if isinstance(body.get("error"), dict) else body
        detail = nested.get("message")
        if isinstance(detail, str) and detail.strip():
            return detail.strip()
    message = getattr(exc, "message", None) or str(exc)
    return str(message).strip() or exc.__class__.__name__


def _field(node: Any, name: str) -> Any:
    if isinstance(node, dict):
        return node.get(name)
    return getattr(node, name, None)
