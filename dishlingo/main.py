"""Main FastAPI application."""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dishlingo.config import ALLOW_ALL_ORIGINS, CORS_ORIGINS, LOG_LEVEL
from dishlingo.errors import MenuAnalysisError
from dishlingo.gpt_vision import InferenceError, InferenceGateway, OpenAIGateway
from dishlingo.image_preprocess import preprocess_images
from dishlingo.menu_pipeline.dish_schema import (
    AllergensRequest,
    AllergensResponse,
    AnalyzeMenuRequest,
    AnalyzeMenuResponse,
    PronunciationsRequest,
    PronunciationsResponse,
)
from dishlingo.menu_pipeline.enrichment import DishEnricher
from dishlingo.menu_pipeline.pipeline import MenuAnalysisPipeline
from dishlingo.prompts import SELF_TEST_PROMPT
from dishlingo.utils import Unparsable, parse_json

# -----------------------------------
# Инициализация приложения
# -----------------------------------

logging.basicConfig(
    level=LOG_LEVEL,
    stream=sys.stdout,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The client is process-wide and read-only; a missing key must stop the boot.
    gateway = get_gateway()
    logger.info("Inference gateway ready: %s", type(gateway).__name__)
    yield


app = FastAPI(title="Dishlingo menu analyzer", lifespan=lifespan)

# -----------------------------------
# CORS
# -----------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=not ALLOW_ALL_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MenuAnalysisError)
async def menu_analysis_error_handler(request: Request, exc: MenuAnalysisError):
    logger.info("[PIPELINE] %s on %s: %s", exc.error_code.value, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# -----------------------------------
# Dependencies
# -----------------------------------


@lru_cache
def get_gateway() -> InferenceGateway:
    return OpenAIGateway()


def get_pipeline(gateway: InferenceGateway = Depends(get_gateway)) -> MenuAnalysisPipeline:
    return MenuAnalysisPipeline(gateway)


def get_enricher(gateway: InferenceGateway = Depends(get_gateway)) -> DishEnricher:
    return DishEnricher(gateway)


# -----------------------------------
# Тех. эндпоинты
# -----------------------------------


@app.get("/api/health")
def health():
    return {"status": "ok", "message": "MenuAI Backend Server is running"}


@app.get("/api/test-openai")
async def test_openai(gateway: InferenceGateway = Depends(get_gateway)):
    """Round-trip a tiny JSON prompt to check the model integration."""
    logger.info("Testing OpenAI integration...")
    try:
        text = await gateway.complete(SELF_TEST_PROMPT, max_tokens=100, temperature=0.1)
    except InferenceError as e:
        logger.error("OpenAI test error: %s", e)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "OpenAI integration failed", "details": str(e)},
        )

    result = parse_json(text, dict)
    if isinstance(result, Unparsable):
        return {
            "success": False,
            "error": "OpenAI responded but with invalid JSON",
            "raw_response": text,
            "parse_error": result.reason,
        }
    return {
        "success": True,
        "openai_response": result.value,
        "raw_response": text,
        "message": "OpenAI integration is working correctly!",
    }


# -----------------------------------
# /api/analyze-menu
# -----------------------------------


@app.post("/api/analyze-menu", response_model=AnalyzeMenuResponse)
async def analyze_menu(
    body: AnalyzeMenuRequest,
    pipeline: MenuAnalysisPipeline = Depends(get_pipeline),
):
    try:
        pipeline.check_batch_size(body.images)
        images = await asyncio.to_thread(preprocess_images, body.images)
        dishes = await pipeline.analyze(images, skip_enrichment=body.skip_enrichment)
        return AnalyzeMenuResponse(dishes=dishes)
    except MenuAnalysisError:
        raise
    except Exception as e:
        logger.exception("Error in /api/analyze-menu")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error while processing menu images.",
                "details": str(e),
            },
        )


# -----------------------------------
# Progressive enrichment endpoints
# -----------------------------------


@app.post("/api/pronunciations", response_model=PronunciationsResponse)
async def pronunciations(
    body: PronunciationsRequest,
    enricher: DishEnricher = Depends(get_enricher),
):
    names = [name for name in body.names if name]
    return PronunciationsResponse(pronunciations=await enricher.pronunciations(names))


@app.post("/api/allergens", response_model=AllergensResponse)
async def allergens(
    body: AllergensRequest,
    enricher: DishEnricher = Depends(get_enricher),
):
    items = [(item.name, item.description) for item in body.items]
    return AllergensResponse(allergens=await enricher.allergens(items))
