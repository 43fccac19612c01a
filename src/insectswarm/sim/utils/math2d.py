from __future__ import annotations

import math

from pygame.math import Vector2


def add(a: Vector2, b: Vector2) -> Vector2:
    return Vector2(a.x + b.x, a.y + b.y)


def subtract(a: Vector2, b: Vector2) -> Vector2:
    return Vector2(a.x - b.x, a.y - b.y)


def scale(vector: Vector2, factor: float) -> Vector2:
    return Vector2(vector.x * factor, vector.y * factor)


def magnitude(vector: Vector2) -> float:
    return math.hypot(vector.x, vector.y)


def distance(a: Vector2, b: Vector2) -> float:
    dx = a.x - b.x
    dy = a.y - b.y
    return math.hypot(dx, dy)


def safe_normalize(vector: Vector2) -> Vector2:
    return _safe_normalize_xy(vector.x, vector.y)


def set_magnitude(vector: Vector2, length: float) -> Vector2:
    """Rescale ``vector`` to ``length``; the zero vector stays zero."""
    return Vector2(*_set_magnitude_xy(vector.x, vector.y, length))


def limit(vector: Vector2, max_length: float) -> Vector2:
    """Clamp the magnitude of ``vector`` to ``max_length``; shorter vectors are returned unchanged."""
    return Vector2(*_clamp_length_xy_f(vector.x, vector.y, max_length))


def _direction_xy(x: float, y: float) -> tuple[float, float] | None:
    # Rescale by the larger component first so huge or infinite inputs keep their direction.
    if math.isinf(x) or math.isinf(y):
        x = math.copysign(1.0, x) if math.isinf(x) else 0.0
        y = math.copysign(1.0, y) if math.isinf(y) else 0.0
    largest = max(abs(x), abs(y))
    if not largest > 0.0:
        return None
    x /= largest
    y /= largest
    mag = math.hypot(x, y)
    return x / mag, y / mag


def _safe_normalize_xy(x: float, y: float) -> Vector2:
    direction = _direction_xy(x, y)
    if direction is None:
        return Vector2()
    return Vector2(*direction)


def _set_magnitude_xy(x: float, y: float, length: float) -> tuple[float, float]:
    direction = _direction_xy(x, y)
    if direction is None:
        return 0.0, 0.0
    return direction[0] * length, direction[1] * length


def _clamp_length_xy_f(x: float, y: float, max_length: float) -> tuple[float, float]:
    if max_length <= 0.0:
        return 0.0, 0.0
    if math.hypot(x, y) <= max_length:
        return x, y
    direction = _direction_xy(x, y)
    if direction is None:
        return 0.0, 0.0
    return direction[0] * max_length, direction[1] * max_length
