from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .errors import InvalidConfiguration


@dataclass(frozen=True)
class Detection:
    """
    A decoded box in pixel space.

    `x`/`y` are the top-left corner. `score` is the winning class score and
    `class_id` its index; `label` is the class name when labels are known.
    """

    x: float
    y: float
    width: float
    height: float
    score: float
    class_id: Optional[int] = None
    label: Optional[str] = None

    @property
    def area(self) -> float:
        if self.width <= 0 or self.height <= 0:
            return 0.0
        return self.width * self.height

    def as_xywh(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.x + self.width, self.y + self.height

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "confidence": self.score,
            "class_id": self.class_id,
            "label": self.label,
        }


@dataclass(frozen=True)
class AnchorPrior:
    """Anchor box template, in grid cell units."""

    width: float
    height: float


@dataclass(frozen=True)
class GridDescriptor:
    """
    Shape of a grid detector output plus the pixel size of the image it covers.

    Cell sizes use real division unless `integer_cell_size` is set, which
    truncates like legacy integer arithmetic.
    """

    grid_width: int
    grid_height: int
    anchor_count: int
    class_count: int
    image_width: int
    image_height: int
    integer_cell_size: bool = False

    def __post_init__(self) -> None:
        for name in ("grid_width", "grid_height", "anchor_count", "image_width", "image_height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidConfiguration(f"{name} must be a positive integer (got {value!r})")
        if isinstance(self.class_count, bool) or not isinstance(self.class_count, int) or self.class_count < 1:
            raise InvalidConfiguration(f"class_count must be >= 1 (got {self.class_count!r})")

    @property
    def bb_length(self) -> int:
        return 5 + self.class_count

    @property
    def channel_stride(self) -> int:
        return self.grid_width * self.grid_height

    @property
    def expected_length(self) -> int:
        return self.channel_stride * self.anchor_count * self.bb_length

    @property
    def cell_width(self) -> float:
        if self.integer_cell_size:
            return float(self.image_width // self.grid_width)
        return self.image_width / self.grid_width

    @property
    def cell_height(self) -> float:
        if self.integer_cell_size:
            return float(self.image_height // self.grid_height)
        return self.image_height / self.grid_height
