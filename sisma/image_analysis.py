# sisma/image_analysis.py
"""
Hazard detection on inspection photos.

Detection is simulated: MockImageAnalyzer returns a fixed "no_helmet"
detection for any readable image. annotate_image draws detections onto the
photo for display.
"""
from __future__ import annotations
import io
import logging
import time
from typing import List, Protocol

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from sisma.errors import ImageAnalysisError
from sisma.models import Detection, ImageAnalysisResult

logger = logging.getLogger(__name__)

ACCEPTED_FORMATS = {"PNG", "JPEG"}
BOX_COLOR = "#34D399"
BOX_WIDTH = 4

MOCK_SUGGESTED_ACTION = "Stop the activity, notify the supervisor and record a safety occurrence."


class ImageAnalyzer(Protocol):
    def analyze(self, image_bytes: bytes) -> ImageAnalysisResult:
        ...


def load_image(image_bytes: bytes) -> Image.Image:
    """Decode PNG/JPEG bytes, raising ImageAnalysisError for anything else"""
    if not image_bytes:
        raise ImageAnalysisError("Please select an image.")
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ImageAnalysisError(f"Could not read image: {e}") from e

    if fmt not in ACCEPTED_FORMATS:
        raise ImageAnalysisError(f"Unsupported image format {fmt}; upload PNG or JPEG.")

    # verify() leaves the image unusable, so decode again
    image = Image.open(io.BytesIO(image_bytes))
    image.load()
    return image


class MockImageAnalyzer:
    """Stands in for an object-detection service"""

    def __init__(self, delay: float = 0.0):
        self.delay = delay

    def analyze(self, image_bytes: bytes) -> ImageAnalysisResult:
        image = load_image(image_bytes)
        logger.info("Simulating image analysis for %dx%d %s image", image.width, image.height, image.format)

        if self.delay > 0:
            time.sleep(self.delay)

        return ImageAnalysisResult(
            detections=[
                Detection(label="no_helmet", bbox=(150, 80, 250, 180), score=0.82),
            ],
            flagged=True,
            suggested_action=MOCK_SUGGESTED_ACTION,
        )


def annotate_image(image_bytes: bytes, detections: List[Detection]) -> bytes:
    """Draw each detection box with a "<class> (<score>)" label, return PNG bytes"""
    image = load_image(image_bytes).convert("RGB")
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    for det in detections:
        x1, y1, x2, y2 = det.bbox
        draw.rectangle([x1, y1, x2, y2], outline=BOX_COLOR, width=BOX_WIDTH)
        # label above the box unless it would leave the image
        text_y = y1 - 20 if y1 > 20 else y1 + 5
        draw.text((x1, text_y), f"{det.label} ({det.score:.2f})", fill=BOX_COLOR, font=font)

    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()
