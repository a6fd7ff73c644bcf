import os


def _parse_cors_origins(raw: str) -> list[str]:
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
CORS_ORIGINS = _parse_cors_origins(os.getenv("CORS_ORIGINS", "*"))
ALLOW_ALL_ORIGINS = CORS_ORIGINS == ["*"]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# -----------------------------------
# GPT / models configuration
# -----------------------------------

# GPT_MODEL: vision model used for every menu call (validation, extraction, enrichment)
GPT_MODEL = os.getenv("GPT_MODEL", "gpt-4o")

# OPENAI_TIMEOUT_S / OPENAI_MAX_RETRIES: handled by the SDK client itself
OPENAI_TIMEOUT_S = float(os.getenv("OPENAI_TIMEOUT_S", "60"))
OPENAI_MAX_RETRIES = int(os.getenv("OPENAI_MAX_RETRIES", "2"))

# -----------------------------------
# Batch / preprocessing configuration
# -----------------------------------

MIN_IMAGES = 1
MAX_IMAGES = int(os.getenv("MAX_IMAGES", "5"))

# USE_BACKEND_RESIZE: downscale data-URI images before sending them to the model
USE_BACKEND_RESIZE = os.getenv("USE_BACKEND_RESIZE", "true").lower() == "true"

# BACKEND_MAX_SIDE_PX: longer side after resize. Menus need readable text,
# so this is much larger than for plate photos.
BACKEND_MAX_SIDE_PX = int(os.getenv("BACKEND_MAX_SIDE_PX", "1600"))
