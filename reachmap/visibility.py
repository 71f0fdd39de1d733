"""Wall-aware visibility queries for the frontier search.

Two questions are asked of a visibility backend:

1. ``segment_blocked(a, b)`` - does any movement-blocking wall cross the segment?
2. ``point_unsafe(p)`` - is the point too close to a wall to stop there?

Any object with those two methods is a valid oracle (structural typing). The
bundled ``WallVisibilityOracle`` answers them from a list of wall segments
bucketed into a coarse spatial hash, so each query only looks at walls near the
segment instead of scanning the whole scene.

``SearchVisibility`` is the per-search wrapper the engine talks to. It memoizes
``point_unsafe`` by cell index (the most expensive query, asked once per
candidate edge) and turns backend failures into ``VisibilityOracleError``.
A new wrapper is created for every search because walls may change between
calls.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Protocol, Set, Tuple

from .config import Config
from .errors import VisibilityOracleError
from .grid import CellIndex, Point

_EPS = 1e-9


class VisibilityOracle(Protocol):
    """Anything that can answer the two visibility questions."""

    def segment_blocked(self, start: Point, end: Point) -> bool:
        ...

    def point_unsafe(self, point: Point) -> bool:
        ...


class DoorState(str, Enum):
    """Door state of a wall segment (NONE for plain walls)."""

    NONE = "none"
    CLOSED = "closed"
    OPEN = "open"
    LOCKED = "locked"


@dataclass(frozen=True)
class Wall:
    """A straight wall segment in world units."""

    x1: float
    y1: float
    x2: float
    y2: float
    door: DoorState = DoorState.NONE
    # Walls that only block sight or sound (windows, curtains) do not block movement
    blocks_movement: bool = True

    @property
    def is_obstruction(self) -> bool:
        return self.blocks_movement and self.door is not DoorState.OPEN

    @property
    def start(self) -> Point:
        return Point(self.x1, self.y1)

    @property
    def end(self) -> Point:
        return Point(self.x2, self.y2)


def _orientation(a: Point, b: Point, c: Point) -> float:
    return (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)


def _on_segment(a: Point, b: Point, p: Point) -> bool:
    """Whether collinear point ``p`` lies within the bounding box of ``a``-``b``."""
    return (
        min(a.x, b.x) - _EPS <= p.x <= max(a.x, b.x) + _EPS
        and min(a.y, b.y) - _EPS <= p.y <= max(a.y, b.y) + _EPS
    )


def segments_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> bool:
    """Return True if segment p1-p2 touches or crosses segment q1-q2."""

    d1 = _orientation(q1, q2, p1)
    d2 = _orientation(q1, q2, p2)
    d3 = _orientation(p1, p2, q1)
    d4 = _orientation(p1, p2, q2)

    if ((d1 > _EPS and d2 < -_EPS) or (d1 < -_EPS and d2 > _EPS)) and (
        (d3 > _EPS and d4 < -_EPS) or (d3 < -_EPS and d4 > _EPS)
    ):
        return True

    # Touching and collinear cases count as blocked
    if abs(d1) <= _EPS and _on_segment(q1, q2, p1):
        return True
    if abs(d2) <= _EPS and _on_segment(q1, q2, p2):
        return True
    if abs(d3) <= _EPS and _on_segment(p1, p2, q1):
        return True
    if abs(d4) <= _EPS and _on_segment(p1, p2, q2):
        return True
    return False


def point_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Shortest distance from ``p`` to segment ``a``-``b``."""
    dx, dy = b.x - a.x, b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq <= _EPS:
        return math.hypot(p.x - a.x, p.y - a.y)
    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p.x - (a.x + t * dx), p.y - (a.y + t * dy))


class WallVisibilityOracle:
    """Visibility oracle backed by a static snapshot of wall segments.

    Walls are bucketed by ``bucket_size`` world units. A query touches only the
    buckets overlapping its bounding box (grown by ``tolerance`` for point
    checks), which keeps the cost proportional to the local wall density.
    """

    def __init__(
        self,
        walls: Iterable[Wall],
        *,
        tolerance: float | None = None,
        bucket_size: float | None = None,
    ) -> None:
        self.tolerance = Config.UNSAFE_TOLERANCE if tolerance is None else tolerance
        self.bucket_size = bucket_size or Config.WALL_BUCKET_SIZE
        # Only obstructions are indexed; open doors and see-through walls never block
        self.walls: List[Wall] = [wall for wall in walls if wall.is_obstruction]
        self._buckets: Dict[Tuple[int, int], List[int]] = {}
        for wall_id, wall in enumerate(self.walls):
            for bucket in self._buckets_for_box(
                min(wall.x1, wall.x2), min(wall.y1, wall.y2), max(wall.x1, wall.x2), max(wall.y1, wall.y2)
            ):
                self._buckets.setdefault(bucket, []).append(wall_id)

    def _buckets_for_box(self, min_x: float, min_y: float, max_x: float, max_y: float) -> Iterable[Tuple[int, int]]:
        size = self.bucket_size
        for bx in range(math.floor(min_x / size), math.floor(max_x / size) + 1):
            for by in range(math.floor(min_y / size), math.floor(max_y / size) + 1):
                yield bx, by

    def _nearby_walls(self, min_x: float, min_y: float, max_x: float, max_y: float) -> List[Wall]:
        seen: Set[int] = set()
        nearby: List[Wall] = []
        for bucket in self._buckets_for_box(min_x, min_y, max_x, max_y):
            for wall_id in self._buckets.get(bucket, ()):
                if wall_id not in seen:
                    seen.add(wall_id)
                    nearby.append(self.walls[wall_id])
        return nearby

    def segment_blocked(self, start: Point, end: Point) -> bool:
        if not self.walls:
            return False
        candidates = self._nearby_walls(
            min(start.x, end.x), min(start.y, end.y), max(start.x, end.x), max(start.y, end.y)
        )
        return any(segments_intersect(start, end, wall.start, wall.end) for wall in candidates)

    def point_unsafe(self, point: Point) -> bool:
        if not self.walls or self.tolerance <= 0:
            return False
        tol = self.tolerance
        candidates = self._nearby_walls(point.x - tol, point.y - tol, point.x + tol, point.y + tol)
        return any(point_segment_distance(point, wall.start, wall.end) < tol for wall in candidates)


class SearchVisibility:
    """Per-search view of an oracle: memoized, validated, failure-propagating.

    Owned by exactly one search invocation. Never share or reuse it across
    calls, since the wall snapshot behind the oracle may change.
    """

    def __init__(self, oracle: VisibilityOracle) -> None:
        self._oracle = oracle
        self._unsafe_memo: Dict[CellIndex, bool] = {}
        self.segment_queries = 0

    def _checked(self, operation: str, arguments: tuple, answer: Any) -> bool:
        if not isinstance(answer, bool):
            raise VisibilityOracleError(
                operation=operation,
                arguments=arguments,
                reason=f"expected bool, got {type(answer).__name__}",
                result=answer,
            )
        return answer

    def segment_blocked(self, start: Point, end: Point) -> bool:
        self.segment_queries += 1
        try:
            answer = self._oracle.segment_blocked(start, end)
        except VisibilityOracleError:
            raise
        except Exception as exc:
            raise VisibilityOracleError(
                operation="segment_blocked", arguments=(start, end), reason=str(exc) or type(exc).__name__
            ) from exc
        return self._checked("segment_blocked", (start, end), answer)

    def cell_unsafe(self, index: CellIndex, center: Point) -> bool:
        """``point_unsafe`` for a cell centre, answered at most once per cell."""
        cached = self._unsafe_memo.get(index)
        if cached is not None:
            return cached
        try:
            answer = self._oracle.point_unsafe(center)
        except VisibilityOracleError:
            raise
        except Exception as exc:
            raise VisibilityOracleError(
                operation="point_unsafe", arguments=(center,), reason=str(exc) or type(exc).__name__
            ) from exc
        answer = self._checked("point_unsafe", (center,), answer)
        self._unsafe_memo[index] = answer
        return answer

    @property
    def unsafe_queries(self) -> int:
        """Number of distinct cells whose safety was asked of the oracle."""
        return len(self._unsafe_memo)
