"""Single-call GPT vision gateway used by every menu pipeline stage."""

import logging
import time
from typing import Any, Dict, List, Optional

import openai

from dishlingo.config import GPT_MODEL
from dishlingo.openai_client import get_openai_client

logger = logging.getLogger(__name__)


class InferenceError(Exception):
    """Transport or service failure while talking to the inference backend."""


class InferenceGateway:
    """
    Interface consumed by the pipeline:

        complete(prompt, image=None) -> raw text | raises InferenceError

    The returned text is untrusted. It can carry markdown fences, broken
    JSON or something unrelated to the requested schema.
    """

    async def complete(
        self,
        prompt: str,
        image: Optional[str] = None,
        *,
        max_tokens: int = 1000,
        temperature: float = 0.0,
    ) -> str:
        raise NotImplementedError


def _get_vision_model_name() -> str:
    model = (GPT_MODEL or "gpt-4o").strip()
    return model or "gpt-4o"


def _build_messages(prompt: str, image: Optional[str]) -> List[Dict[str, Any]]:
    if image is None:
        return [{"role": "user", "content": prompt}]
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image}},
            ],
        }
    ]


class OpenAIGateway(InferenceGateway):
    """Gateway backed by the OpenAI chat completions API."""

    def __init__(self, client=None, model: Optional[str] = None):
        self.client = client if client is not None else get_openai_client()
        self.model = model or _get_vision_model_name()

    async def complete(
        self,
        prompt: str,
        image: Optional[str] = None,
        *,
        max_tokens: int = 1000,
        temperature: float = 0.0,
    ) -> str:
        logger.info(
            "Sending request to model=%s (image=%s, image_kb=%.1f, max_tokens=%s)",
            self.model,
            image is not None,
            len(image or "") / 1024,
            max_tokens,
        )
        start = time.time()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=_build_messages(prompt, image),
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.OpenAIError as e:
            logger.error("OpenAI request failed: %s", e)
            raise InferenceError(f"OpenAI processing failed: {e}") from e

        if not response.choices:
            return ""
        text = (response.choices[0].message.content or "").strip()
        logger.info(
            "GPT response received in %sms, length: %s",
            round((time.time() - start) * 1000, 2),
            len(text),
        )
        logger.debug("GPT raw response: %s", text)
        return text
