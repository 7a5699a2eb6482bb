"""GenerationAdapter -- one language model call per transcript.

Sends the fixed tweet-suggestion instruction plus the transcript text to the
LLMService and returns the model's raw text unchanged. Parsing is left to
ResponseParser so the two can be tested apart.
"""

from __future__ import annotations

import structlog

from src.tweetdesk.services.llm import LLMService
from src.tweetdesk.tweets.errors import GenerationFailed
from src.tweetdesk.tweets.generation.prompts import build_generation_messages

logger = structlog.get_logger(__name__)


class GenerationAdapter:
    """Wraps the LLM completion call behind ``generate(text) -> raw_text``.

    Args:
        llm_service: LLMService (or any object with a compatible async
            ``completion`` method).
        max_tokens: Response token ceiling.
        model: Router model group name.
    """

    def __init__(
        self,
        llm_service: LLMService,
        max_tokens: int = 2000,
        model: str = "reasoning",
    ) -> None:
        self._llm_service = llm_service
        self._max_tokens = max_tokens
        self._model = model

    async def generate(self, transcript_text: str) -> str:
        """Ask the model for tweet suggestions and return its raw text.

        Raises:
            GenerationFailed: If the call errors, times out, or returns no
                content.
        """
        messages = build_generation_messages(transcript_text)

        try:
            result = await self._llm_service.completion(
                messages=messages,
                model=self._model,
                max_tokens=self._max_tokens,
            )
        except Exception as exc:
            logger.warning(
                "generation.llm_call_failed",
                model=self._model,
                error=str(exc),
            )
            raise GenerationFailed(f"Language model call failed: {exc}") from exc

        content = result.get("content") if result else None
        if not content or not content.strip():
            logger.warning("generation.empty_response", model=self._model)
            raise GenerationFailed("Language model returned no content")

        logger.info(
            "generation.llm_call_completed",
            model=result.get("model", self._model),
            response_chars=len(content),
            usage=result.get("usage", {}),
        )
        return content
