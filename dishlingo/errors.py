"""User-visible errors raised by the menu analysis pipeline."""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    BATCH_SIZE = "BATCH_SIZE"
    NOT_MENU_IMAGES = "NOT_MENU_IMAGES"
    NO_DISHES_EXTRACTED = "NO_DISHES_EXTRACTED"


class MenuAnalysisError(Exception):
    """Base for terminal pipeline outcomes that are reported to the caller."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error_code.value, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class BatchSizeError(MenuAnalysisError):
    def __init__(self, count: int, min_images: int, max_images: int):
        if count < min_images:
            message = "No images provided. Please upload at least one menu image."
        else:
            message = f"Too many images. Maximum {max_images} images allowed."
        super().__init__(
            message=message,
            error_code=ErrorCode.BATCH_SIZE,
            status_code=400,
            details={"received": count, "min": min_images, "max": max_images},
        )


class NotMenuImagesError(MenuAnalysisError):
    def __init__(self):
        super().__init__(
            message=(
                "The uploaded images do not appear to be restaurant menus. "
                "Please upload images of restaurant menus."
            ),
            error_code=ErrorCode.NOT_MENU_IMAGES,
            status_code=400,
        )


class NoDishesExtractedError(MenuAnalysisError):
    def __init__(self, skipped_pages: Optional[list] = None):
        super().__init__(
            message=(
                "No dishes could be extracted from the provided images. "
                "Please ensure the images contain readable menu text."
            ),
            error_code=ErrorCode.NO_DISHES_EXTRACTED,
            status_code=422,
            details={"skipped_pages": skipped_pages} if skipped_pages else None,
        )
