"""CoordinateMapper: equirectangular projection onto the canvas.

Longitude ∈ [-180, 180] maps linearly onto x ∈ [0, width].
Latitude  ∈ [-90, 90]   maps linearly onto y ∈ [height, 0]; screen rows grow
downward, so the latitude axis is inverted.

The mapping is total: out-of-range input yields off-canvas coordinates.
"""

from __future__ import annotations


class CoordinateMapper:
    """Stateless projection from geographic to screen coordinates."""

    __slots__ = ("width", "height", "_x_ratio", "_y_ratio")

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self._x_ratio = (width / 2) / 180.0
        self._y_ratio = -(height / 2) / 90.0

    def map(self, longitude: float, latitude: float) -> tuple[float, float]:
        x = longitude * self._x_ratio + self.width / 2
        y = latitude * self._y_ratio + self.height / 2
        return x, y
