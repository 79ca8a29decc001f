# stickbridge/game/stick.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Tuple
from .config import STICK_MAX_LEN, STICK_FLAT


@dataclass
class Stick:
    """
    Bridge element anchored at (x, ground_y):
    - angle = 0 means standing straight up
    - angle = pi/2 means lying flat towards +x
    """
    x: float
    ground_y: float
    length: float = 0.0
    angle: float = 0.0
    max_length: float = STICK_MAX_LEN

    def reset(self, x: float, ground_y: float):
        self.x = x
        self.ground_y = ground_y
        self.length = 0.0
        self.angle = 0.0

    def grow(self, amount: float):
        """Lengthen by `amount`, clamped to max_length."""
        self.length = min(self.max_length, self.length + amount)

    def rotate(self, amount: float) -> bool:
        """Rotate towards flat. Returns True once the stick lies flat."""
        self.angle = min(STICK_FLAT, self.angle + amount)
        return self.angle >= STICK_FLAT

    @property
    def is_flat(self) -> bool:
        return self.angle >= STICK_FLAT

    def tip(self) -> Tuple[float, float]:
        """World position of the free end (y grows downwards)."""
        return (self.x + self.length * math.sin(self.angle),
                self.ground_y - self.length * math.cos(self.angle))
