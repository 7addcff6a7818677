import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .config import get_section
from .errors import InvalidConfiguration

# Canvas-space geometry. Tuples keep generated geometry immutable once it
# leaves the generator.
Point = Tuple[float, float]
Segment = Tuple[Point, Point]
Polyline = List[Point]


@dataclass(frozen=True)
class CanvasDimensions:
    """
    The drawing surface for one generation pass.

    Attributes:
        width (float): Canvas width in canvas units (pixels for previews).
        height (float): Canvas height.
        vertical_margin (float): Space reserved above and below the drawable area.
        horizontal_margin (float): Space reserved left and right of the drawable area.
    """
    width: float
    height: float
    vertical_margin: float
    horizontal_margin: float

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
                raise InvalidConfiguration(f"Canvas {name} must be a positive finite number, got {value!r}.")

        for name in ("vertical_margin", "horizontal_margin"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InvalidConfiguration(f"Canvas {name} must be a non-negative finite number, got {value!r}.")

    @classmethod
    def from_size(cls, width: float, height: float, config: Optional[Dict[str, Any]] = None) -> "CanvasDimensions":
        """
        Derives the margins from the canvas size using the 'canvas' config section
        (defaults: height/11 vertically, width/8.5 horizontally).
        """
        canvas_cfg = get_section(config, "canvas")
        return cls(
            width=width,
            height=height,
            vertical_margin=height * canvas_cfg["vertical_margin_ratio"],
            horizontal_margin=width * canvas_cfg["horizontal_margin_ratio"],
        )

    @property
    def margins(self) -> Tuple[float, float]:
        """(vertical, horizontal), the order the post-processor expects."""
        return (self.vertical_margin, self.horizontal_margin)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height
