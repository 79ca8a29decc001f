# stickbridge/game/level.py
from __future__ import annotations
import random
from dataclasses import dataclass
from typing import List, Optional
import pygame
from .config import (
    WIDTH, PLATFORM_HEIGHT, START_PLATFORM_X, START_PLATFORM_W,
    INITIAL_PLATFORMS, EXTEND_BATCH, EXTEND_TRIGGER, PRUNE_BEHIND,
    LevelConfig,
)


@dataclass
class Platform:
    x: float
    width: float
    height: float = PLATFORM_HEIGHT

    @property
    def right(self) -> float:
        return self.x + self.width

    def contains_x(self, x: float) -> bool:
        """Inclusive at both edges."""
        return self.x <= x <= self.x + self.width

    def rect(self, camera_x: float, ground_y: float) -> pygame.Rect:
        """Screen-space rect, top at ground_y - height."""
        return pygame.Rect(int(self.x - camera_x), int(ground_y - self.height),
                           int(round(self.width)), int(self.height))


class LevelGen:
    """
    Endless ribbon of platforms for one level.

    Platforms are addressed by a monotonic index: index 0 is the start
    platform. Old platforms far behind the camera are compacted away, and
    `base_index` keeps the index -> list position mapping stable.
    """
    def __init__(self, cfg: LevelConfig, seed: Optional[int] = None):
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self.rng = random.Random(seed)
        self.cfg = cfg
        self.platforms: List[Platform] = []
        self.base_index = 0
        self._init_start()

    def _init_start(self):
        self.platforms.append(Platform(START_PLATFORM_X, START_PLATFORM_W))
        self._generate(INITIAL_PLATFORMS)

    def _rand_w(self, lo: float, hi: float) -> float:
        return lo + self.rng.random() * (hi - lo)

    def _generate(self, count: int):
        last = self.platforms[-1]
        x = last.x + last.width
        for _ in range(count):
            gap = self._rand_w(self.cfg.gap_min, self.cfg.gap_max)
            w = self._rand_w(self.cfg.width_min, self.cfg.width_max)
            x += gap
            self.platforms.append(Platform(x, w))
            x += w

    # ---- index helpers ----

    @property
    def end_index(self) -> int:
        """One past the last generated platform index."""
        return self.base_index + len(self.platforms)

    @property
    def last(self) -> Platform:
        return self.platforms[-1]

    def platform(self, index: int) -> Platform:
        pos = index - self.base_index
        if pos < 0 or pos >= len(self.platforms):
            raise IndexError(
                f"platform {index} outside window [{self.base_index}, {self.end_index})")
        return self.platforms[pos]

    # ---- upkeep ----

    def extend_if_needed(self, camera_x: float) -> bool:
        """Append a batch when the tail comes within EXTEND_TRIGGER screens. Returns True if extended."""
        if self.last.x - camera_x < WIDTH * EXTEND_TRIGGER:
            self._generate(EXTEND_BATCH)
            return True
        return False

    def prune(self, camera_x: float, keep_from: int) -> int:
        """
        Drop platforms whose index is below `keep_from` and whose right edge is
        more than PRUNE_BEHIND screens behind the camera. Returns how many were dropped.
        """
        limit = camera_x - WIDTH * PRUNE_BEHIND
        dropped = 0
        while (self.base_index < keep_from and len(self.platforms) > 1
               and self.platforms[0].right < limit):
            self.platforms.pop(0)
            self.base_index += 1
            dropped += 1
        return dropped

    def draw(self, surf: pygame.Surface, camera_x: float, ground_y: float,
             color, top_color):
        for platform in self.platforms:
            r = platform.rect(camera_x, ground_y)
            if r.right < 0 or r.left > surf.get_width():
                continue
            pygame.draw.rect(surf, color, r)
            pygame.draw.rect(surf, top_color, (r.left, r.top, r.width, 12))
