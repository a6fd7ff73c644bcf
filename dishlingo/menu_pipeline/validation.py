import logging
import time
from typing import Sequence

from dishlingo.gpt_vision import InferenceError, InferenceGateway
from dishlingo.prompts import VALIDATION_PROMPT

from .dish_schema import OnFailure

logger = logging.getLogger(__name__)

ON_FAILURE = OnFailure.ASSUME_TRUE


def is_affirmative(answer: str) -> bool:
    return (answer or "").strip().strip(".!\"' ").lower() == "yes"


class MenuImageValidator:
    """
    Decides whether a batch plausibly contains at least one restaurant menu.

    Images are classified one at a time in order and the first "yes" wins.
    A failed classifier call does not reject the batch: it is treated as a
    menu (OnFailure.ASSUME_TRUE) so that transient outages never block a
    real menu.
    """

    def __init__(self, gateway: InferenceGateway):
        self.gateway = gateway

    async def validate(self, images: Sequence[str]) -> bool:
        start = time.time()
        for index, image in enumerate(images, start=1):
            try:
                answer = await self.gateway.complete(
                    VALIDATION_PROMPT, image, max_tokens=10, temperature=0
                )
            except InferenceError as e:
                logger.warning(
                    "[VALIDATE] Classifier failed on image %s/%s, policy=%s: %s",
                    index,
                    len(images),
                    ON_FAILURE.value,
                    e,
                )
                return True

            logger.info("[VALIDATE] Image %s/%s answer=%r", index, len(images), answer)
            if is_affirmative(answer):
                logger.info(
                    "[VALIDATE] Menu found on image %s in %sms",
                    index,
                    round((time.time() - start) * 1000, 2),
                )
                return True

        logger.info("[VALIDATE] No menu among %s images", len(images))
        return False
