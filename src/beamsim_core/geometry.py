# src/beamsim_core/geometry.py
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from . import vector_math
from .vector_math import Vector2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AxisAlignedRegion:
    """
    An immutable axis-aligned rectangle in simulation space (metres).

    The same type describes the overall simulation area and the sub-regions it is
    partitioned into for scheduled evaluation. Derived corners are computed on
    demand from `min_corner` and `size`.
    """
    min_corner: Vector2
    size: Vector2

    def __post_init__(self):
        if len(self.min_corner) != 2 or len(self.size) != 2:
            raise ValueError(f"AxisAlignedRegion is 2-D only, got min_corner={self.min_corner}, size={self.size}.")
        if self.size[0] <= 0 or self.size[1] <= 0:
            raise ValueError(f"AxisAlignedRegion size must be positive in both axes, got {self.size}.")
        # Normalise any sequence input to float tuples so regions compare and hash by value.
        object.__setattr__(self, 'min_corner', (float(self.min_corner[0]), float(self.min_corner[1])))
        object.__setattr__(self, 'size', (float(self.size[0]), float(self.size[1])))

    @property
    def width(self) -> float:
        return self.size[0]

    @property
    def height(self) -> float:
        return self.size[1]

    def max_corner(self) -> Vector2:
        return vector_math.add(self.min_corner, self.size)

    def top_left(self) -> Vector2:
        return (self.min_corner[0], self.min_corner[1] + self.size[1])

    def bottom_right(self) -> Vector2:
        return (self.min_corner[0] + self.size[0], self.min_corner[1])

    def contains(self, point: Sequence[float]) -> bool:
        """Inclusive containment test on all four edges."""
        max_x, max_y = self.max_corner()
        return (self.min_corner[0] <= point[0] <= max_x
                and self.min_corner[1] <= point[1] <= max_y)

    def split_horizontal(self, num_strips: int) -> List["AxisAlignedRegion"]:
        """
        Partitions the region into `num_strips` full-width horizontal strips,
        ordered bottom to top.

        Every strip but the last has height `height / num_strips`. The last strip's
        top edge is pinned to this region's exact top so it absorbs floating-point
        rounding, and the strips always tile the region exactly.
        """
        if num_strips < 1:
            raise ValueError(f"Number of strips must be at least 1, got {num_strips}.")
        min_x, min_y = self.min_corner
        max_y = self.max_corner()[1]
        strip_height = self.height / num_strips
        strips = []
        for index in range(num_strips):
            strip_min_y = min_y + index * strip_height
            if index == num_strips - 1:
                height = max_y - strip_min_y
            else:
                height = strip_height
            strips.append(AxisAlignedRegion((min_x, strip_min_y), (self.width, height)))
        return strips

    def __str__(self):
        return f"AxisAlignedRegion{{min_corner={self.min_corner}, size={self.size}}}"


def model_to_normalized_coordinate(point: Sequence[float], sim_area: AxisAlignedRegion) -> Tuple[float, float]:
    """
    Maps a simulation-space point to coordinates relative to `sim_area`, where the
    minimum corner is (0, 0) and the maximum corner is (1, 1).

    Points outside the area map outside the unit square; no clamping is applied.
    """
    return (
        (point[0] - sim_area.min_corner[0]) / sim_area.size[0],
        (point[1] - sim_area.min_corner[1]) / sim_area.size[1],
    )
