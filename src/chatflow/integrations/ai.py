"""AI completion collaborator used by AICall blocks.

Follows the DSPy pattern: a signature describes the task, ``dspy.Predict``
runs it, and ``acall`` is the async runtime invocation. Missing configuration
or a failed call yields a user-facing apology instead of an exception.
"""

import logging
import os
from typing import Any, Protocol

import dspy

from chatflow.config.settings import AISettings
from chatflow.core.errors import CompletionError

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Turns a prompt into reply text (DIP)."""

    async def generate(self, prompt: str) -> str:
        """Return reply text; apology text instead of raising."""
        ...


class CompletionSignature(dspy.Signature):
    """You are a helpful assistant for a chatbot."""

    prompt: str = dspy.InputField(desc="Prompt written by the flow author, variables resolved")
    response: str = dspy.OutputField(desc="Reply to show in the conversation")


def build_lm(settings: AISettings, api_key: str) -> dspy.LM:
    """Create the language model from settings.

    Model names use the ``provider/model`` form understood by ``dspy.LM``.
    """
    kwargs: dict[str, Any] = {"api_key": api_key, "temperature": settings.temperature}
    if settings.max_tokens is not None:
        kwargs["max_tokens"] = settings.max_tokens
    return dspy.LM(f"{settings.provider}/{settings.model}", **kwargs)


class DSPyCompletion:
    """CompletionClient backed by a DSPy predictor.

    The language model is built lazily on first use so constructing a runner
    never touches the network or requires credentials.

    Usage:
        completion = DSPyCompletion(AISettings(provider="openai", model="gpt-4o-mini"))
        reply = await completion.generate("Say hi to Ana")
    """

    def __init__(self, settings: AISettings | None = None, lm: dspy.LM | None = None) -> None:
        self.settings = settings or AISettings()
        self._lm = lm
        signature = CompletionSignature.with_instructions(self.settings.system_instruction)
        self.predictor = dspy.Predict(signature)

    def _resolve_lm(self) -> dspy.LM | None:
        if self._lm is None:
            api_key = os.getenv(self.settings.api_key_env)
            if not api_key:
                return None
            self._lm = build_lm(self.settings, api_key)
        return self._lm

    async def generate(self, prompt: str) -> str:
        logger.info(f"Calling AI completion with prompt: {prompt!r}")

        lm = self._resolve_lm()
        if lm is None:
            logger.error(f"{self.settings.api_key_env} environment variable not set.")
            return self.settings.missing_key_message

        try:
            return await self._complete(lm, prompt)
        except CompletionError as e:
            logger.warning(f"AI completion unusable: {e}")
        except Exception:
            logger.exception("Error calling AI completion")
        return self.settings.error_message

    async def _complete(self, lm: dspy.LM, prompt: str) -> str:
        with dspy.context(lm=lm):
            result = await self.predictor.acall(prompt=prompt)

        response = str(getattr(result, "response", "") or "").strip()
        if not response:
            raise CompletionError("completion returned an empty response")
        return response
