import logging
import time
from typing import List, Optional, Sequence

from dishlingo.config import MAX_IMAGES, MIN_IMAGES
from dishlingo.errors import BatchSizeError, NoDishesExtractedError, NotMenuImagesError
from dishlingo.gpt_vision import InferenceGateway

from .dish_schema import DishRecord, ExtractedPage, PageResult, PipelineReport, SkippedImage
from .enrichment import DishEnricher
from .extraction import DishExtractor
from .validation import MenuImageValidator

logger = logging.getLogger(__name__)


def _ms(since: float) -> float:
    return round((time.time() - since) * 1000, 2)


class MenuAnalysisPipeline:
    """
    Menu photos -> dish records.

    Batch size check
      ↓
    Validating   (first "yes" wins, classifier errors count as "yes")
      ↓
    Extracting   (one image at a time, in order, page = 1-based position)
      ↓
    Done         (skip_enrichment)  |  Enriching -> Done

    Only BatchSizeError, NotMenuImagesError and NoDishesExtractedError
    leave this class; every other stage failure is absorbed by its policy.
    The gateway is injected so tests can swap it for a fake.
    """

    def __init__(
        self,
        gateway: InferenceGateway,
        min_images: int = MIN_IMAGES,
        max_images: int = MAX_IMAGES,
    ):
        self.gateway = gateway
        self.min_images = min_images
        self.max_images = max_images
        self.validator = MenuImageValidator(gateway)
        self.extractor = DishExtractor(gateway)
        self.enricher = DishEnricher(gateway)

    def check_batch_size(self, images: Optional[Sequence[str]]) -> None:
        count = len(images or [])
        if count < self.min_images or count > self.max_images:
            raise BatchSizeError(count, self.min_images, self.max_images)

    async def extract_all(self, images: Sequence[str]) -> List[PageResult]:
        # Sequential on purpose: page tags and output order follow input order.
        results: List[PageResult] = []
        for page, image in enumerate(images, start=1):
            logger.info("[PIPELINE] Analyzing image %s/%s...", page, len(images))
            results.append(await self.extractor.extract_page(image, page))
        return results

    async def run(self, images: Sequence[str], skip_enrichment: bool = False) -> PipelineReport:
        total_start = time.time()
        self.check_batch_size(images)
        report = PipelineReport()
        logger.info("[PIPELINE] Processing %s menu images...", len(images))

        # STEP 1 — VALIDATION
        step_start = time.time()
        is_menu = await self.validator.validate(images)
        report.timings_ms["validate_ms"] = _ms(step_start)
        if not is_menu:
            logger.info("[PIPELINE] Images do not appear to be restaurant menus")
            raise NotMenuImagesError()

        # STEP 2 — EXTRACTION
        step_start = time.time()
        for result in await self.extract_all(images):
            if isinstance(result, ExtractedPage):
                report.dishes.extend(result.dishes)
            elif isinstance(result, SkippedImage):
                report.skipped.append(result)
        report.timings_ms["extract_ms"] = _ms(step_start)

        if not report.dishes:
            raise NoDishesExtractedError(skipped_pages=[s.page for s in report.skipped])

        # STEP 3 — ENRICHMENT
        if skip_enrichment:
            logger.info("[PIPELINE] Skipping enrichment by client request; returning base dishes only")
        else:
            step_start = time.time()
            report.dishes = await self.enricher.enrich(report.dishes)
            report.enriched = True
            report.timings_ms["enrich_ms"] = _ms(step_start)

        report.timings_ms["total_ms"] = _ms(total_start)
        logger.info("[PIPELINE] timings_ms=%s", report.timings_ms)
        logger.info(
            "[PIPELINE] Successfully extracted %s total dishes (%s images skipped)",
            len(report.dishes),
            len(report.skipped),
        )
        return report

    async def analyze(self, images: Sequence[str], skip_enrichment: bool = False) -> List[DishRecord]:
        report = await self.run(images, skip_enrichment=skip_enrichment)
        return report.dishes
