"""
Transform - Translate and scale pair applied on top of the base time scale.
"""

import math
from dataclasses import dataclass

from ..utils.error_handler import InvalidTransform


@dataclass(frozen=True)
class Transform:
    """
    Horizontal pan/zoom transform.

    A pixel position x of the base scale is displayed at
    translate_x + scale_k * x.

    Attributes:
        translate_x (float): Horizontal offset in pixels
        scale_k (float): Zoom factor, strictly positive
    """

    translate_x: float = 0.0
    scale_k: float = 1.0

    def __post_init__(self):
        if not math.isfinite(self.translate_x):
            raise InvalidTransform(f"Transform translation must be finite, got {self.translate_x!r}")
        if not (math.isfinite(self.scale_k) and self.scale_k > 0):
            raise InvalidTransform(f"Transform scale must be a positive finite number, got {self.scale_k!r}")

    @classmethod
    def identity(cls) -> 'Transform':
        return cls(0.0, 1.0)

    def apply(self, x: float) -> float:
        """Map a base-scale pixel to a screen pixel."""
        return self.translate_x + self.scale_k * x

    def invert(self, x: float) -> float:
        """Map a screen pixel back to a base-scale pixel."""
        return (x - self.translate_x) / self.scale_k

    def translate(self, dx: float) -> 'Transform':
        """Get a transform panned by dx screen pixels."""
        return Transform(self.translate_x + dx, self.scale_k)

    def with_scale(self, scale_k: float) -> 'Transform':
        """Get a transform with the same translation and a new scale."""
        return Transform(self.translate_x, scale_k)

    def scale_about(self, factor: float, x: float) -> 'Transform':
        """
        Get a transform zoomed by factor, keeping screen pixel x fixed.

        Args:
            factor (float): Multiplier applied to scale_k
            x (float): Screen pixel that stays anchored
        """
        return Transform(x - (x - self.translate_x) * factor, self.scale_k * factor)

    def __repr__(self):
        return f"Transform(translate_x={self.translate_x:.4f}, scale_k={self.scale_k:.6g})"
