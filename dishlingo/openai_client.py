import logging
from functools import lru_cache

from openai import AsyncOpenAI

from dishlingo.config import OPENAI_API_KEY, OPENAI_MAX_RETRIES, OPENAI_TIMEOUT_S

logger = logging.getLogger(__name__)


@lru_cache
def get_openai_client() -> AsyncOpenAI:
    if not OPENAI_API_KEY:
        raise RuntimeError("OPENAI_API_KEY is not set")
    logger.info(
        "Initializing OpenAI client (timeout=%ss, max_retries=%s)",
        OPENAI_TIMEOUT_S,
        OPENAI_MAX_RETRIES,
    )
    return AsyncOpenAI(
        api_key=OPENAI_API_KEY,
        timeout=OPENAI_TIMEOUT_S,
        max_retries=OPENAI_MAX_RETRIES,
    )
