"""Conversion between pixel-space drag geometry and page-relative percentages.

Positions are stored as percentages of the rendered page box so that a field
keeps its place when the page is re-rendered at a different width.
"""

from __future__ import annotations

from dataclasses import dataclass

from signprep.state.errors import LayoutNotReady


@dataclass(frozen=True, slots=True)
class PointPx:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class SurfaceBox:
    left: float
    top: float
    width: float
    height: float

    @property
    def is_ready(self) -> bool:
        return self.width > 0 and self.height > 0


def clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def _require_ready(box: SurfaceBox) -> None:
    if not box.is_ready:
        raise LayoutNotReady(f"Surface has no size yet: {box.width}x{box.height}")


def place_new(pointer_offset: PointPx, surface_box: SurfaceBox) -> tuple[float, float]:
    """Anchor a newly dropped field exactly at the pointer position."""
    _require_ready(surface_box)
    left = (pointer_offset.x - surface_box.left) / surface_box.width * 100.0
    top = (pointer_offset.y - surface_box.top) / surface_box.height * 100.0
    return clamp_percent(left), clamp_percent(top)


def move_existing(
    current_left: float,
    current_top: float,
    delta: PointPx,
    surface_box: SurfaceBox,
) -> tuple[float, float]:
    """Shift a field by the pointer travel since drag start.

    The absolute drop point is not used: a field grabbed away from its anchor
    moves by the distance the pointer moved instead of jumping to it.
    """
    _require_ready(surface_box)
    left = current_left + delta.x / surface_box.width * 100.0
    top = current_top + delta.y / surface_box.height * 100.0
    return clamp_percent(left), clamp_percent(top)


def to_pixels(left: float, top: float, surface_box: SurfaceBox) -> PointPx:
    _require_ready(surface_box)
    return PointPx(
        x=surface_box.left + left / 100.0 * surface_box.width,
        y=surface_box.top + top / 100.0 * surface_box.height,
    )
