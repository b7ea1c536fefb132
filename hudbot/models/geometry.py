"""Screen geometry primitives: points, rectangles and point clouds."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator


class Point:
    """A point in screen coordinates."""

    __slots__ = ("x", "y")

    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def __repr__(self) -> str:
        return f"Point({self.x}, {self.y})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def distance_to(self, other: Point) -> int:
        """Integer Euclidean distance (truncated square root)."""
        dx = self.x - other.x
        dy = self.y - other.y
        return math.isqrt(dx * dx + dy * dy)


class Bounds:
    """An axis-aligned rectangle.

    Containment is half-open: a point is inside when
    ``x <= px < x + w`` and ``y <= py < y + h``.
    """

    __slots__ = ("x", "y", "w", "h")

    def __init__(self, x: int, y: int, w: int, h: int) -> None:
        self.x = x
        self.y = y
        self.w = w
        self.h = h

    def __repr__(self) -> str:
        return f"Bounds(x={self.x}, y={self.y}, w={self.w}, h={self.h})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return (self.x, self.y, self.w, self.h) == (other.x, other.y, other.w, other.h)

    def __hash__(self) -> int:
        return hash((self.x, self.y, self.w, self.h))

    @property
    def size(self) -> int:
        """Area of the rectangle."""
        return self.w * self.h

    @property
    def right(self) -> int:
        """Last column covered by the rectangle."""
        return self.x + self.w - 1

    @property
    def bottom(self) -> int:
        """Last row covered by the rectangle."""
        return self.y + self.h - 1

    @property
    def center(self) -> Point:
        return Point(self.x + self.w // 2, self.y + self.h // 2)

    @property
    def lowest_center_point(self) -> Point:
        """Horizontal center on the row just below the rectangle."""
        return Point(self.x + self.w // 2, self.y + self.h)

    def contains_point(self, point: Point) -> bool:
        return self.x <= point.x < self.x + self.w and self.y <= point.y < self.y + self.h

    def as_box(self) -> tuple[int, int, int, int]:
        """Get bounds as (left, top, right_exclusive, bottom_exclusive) for PIL crops."""
        return (self.x, self.y, self.x + self.w, self.y + self.h)


# Axis selectors used by PointCloud.cluster_by_distance
def x_axis(point: Point) -> int:
    return point.x


def y_axis(point: Point) -> int:
    return point.y


class PointCloud:
    """Unordered collection of points, the input to clustering."""

    __slots__ = ("points",)

    def __init__(self, points: Iterable[Point] | None = None) -> None:
        self.points: list[Point] = list(points) if points is not None else []

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __repr__(self) -> str:
        return f"PointCloud({len(self.points)} points)"

    def cluster_by_distance(
        self,
        max_distance: int,
        axis: Callable[[Point], int],
    ) -> list[PointCloud]:
        """Split the cloud into single-link clusters along one axis.

        Points are transitively merged while the gap between consecutive
        axis values stays within ``max_distance``. Sorting first makes the
        result independent of input order.

        Args:
            max_distance: Largest gap allowed inside a cluster.
            axis: Selector returning the coordinate to cluster on.

        Returns:
            Clusters ordered by ascending axis value.
        """
        if not self.points:
            return []

        ordered = sorted(self.points, key=lambda p: (axis(p), p.x, p.y))
        clusters: list[PointCloud] = []
        current = [ordered[0]]

        for point in ordered[1:]:
            if axis(point) - axis(current[-1]) <= max_distance:
                current.append(point)
            else:
                clusters.append(PointCloud(current))
                current = [point]

        clusters.append(PointCloud(current))
        return clusters

    def to_bounds(self) -> Bounds:
        """Minimal inclusive bounding rectangle of the cloud."""
        if not self.points:
            return Bounds(0, 0, 0, 0)

        min_x = min(p.x for p in self.points)
        min_y = min(p.y for p in self.points)
        max_x = max(p.x for p in self.points)
        max_y = max(p.y for p in self.points)
        return Bounds(min_x, min_y, max_x - min_x + 1, max_y - min_y + 1)
