"""Display color from velocity magnitude. Cosmetic only, never read by the physics."""

import colorsys
from enum import Enum
from typing import Tuple

import numpy as np

import nbody as P


class ColorMode(str, Enum):
    HSV = 'hsv'
    RAINBOW = 'rainbow'
    LINEAR = 'linear'


def _clamp(c: float) -> int:
    return int(min(255, max(0, c)))


def velocity_color(vx: float, vy: float, mode=P.COLOR_MODE) -> Tuple[int, int, int]:
    speed = float(np.hypot(vx, vy))
    mode = ColorMode(mode)
    if mode is ColorMode.HSV:
        # Hue in degrees, wrapping every 360 units of speed
        r, g, b = colorsys.hsv_to_rgb((speed % 360.0) / 360.0, 1.0, 1.0)
        return _clamp(round(255 * r)), _clamp(round(255 * g)), _clamp(round(255 * b))
    if mode is ColorMode.RAINBOW:
        phase = 0.016 * speed
        return (_clamp(255 * np.sin(phase)),
                _clamp(255 * np.sin(phase - 2.0944)),
                _clamp(255 * np.sin(phase + 2.0944)))
    return _clamp(speed * 10), 0, _clamp(255 - speed * 10)
