"""Input structures handed over by the external OCR provider.

The engine consumes only the recognized text; block-level layout and
confidences are carried through so callers can keep them with the result.
"""

from dataclasses import dataclass, field


@dataclass
class BoundingBox:
    """Axis-aligned bounding box for a detected element."""

    x: int
    y: int
    width: int
    height: int


@dataclass
class OcrBlock:
    """A block of recognized text with optional position and confidence."""

    text: str
    bbox: BoundingBox | None = None
    confidence: float | None = None
    line_number: int | None = None


@dataclass
class OcrResult:
    """Complete OCR output for one document or page."""

    text: str
    blocks: list[OcrBlock] = field(default_factory=list)
    confidence: float | None = None
