# stickbridge/game/player.py
from __future__ import annotations
import pygame
from dataclasses import dataclass
from .config import PLAYER_RADIUS, FALL_G


@dataclass
class Player:
    """
    Stick walker. x is the feet center, y the feet line (grows downwards).
    Only falls vertically: there is no horizontal motion while falling.
    """
    x: float
    y: float
    walk_speed: float = 3.0
    fall_velocity: float = 0.0

    @property
    def rect(self) -> pygame.Rect:
        # body box above the feet, used for drawing
        return pygame.Rect(int(self.x) - 9, int(self.y) - 32, 18, 24)

    @property
    def head_center(self):
        return (int(self.x), int(self.y) - 42)

    @property
    def head_radius(self) -> int:
        return int(PLAYER_RADIUS * 0.65)

    def reset(self, x: float, ground_y: float):
        self.x = x
        self.y = ground_y
        self.fall_velocity = 0.0

    def step_towards(self, target_x: float, speed_px_s: float, dt: float) -> bool:
        """Move right by speed*dt if short of target. Returns True if it moved."""
        if self.x < target_x:
            self.x += speed_px_s * dt
            return True
        return False

    def update_fall(self, dt: float):
        """Constant-acceleration fall (semi-implicit Euler)."""
        self.fall_velocity += FALL_G * dt
        self.y += self.fall_velocity * dt
