from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Tuple

# --- Display ---
WIDTH = 960
HEIGHT = 540
FPS = 60
GROUND_Y = HEIGHT - 64          # y of the platform tops (player feet)
DT_MAX = 0.03                   # clamp per-frame dt (slow down on hitches, no catch-up)

# --- Stick ---
STICK_MAX_LEN = 430.0
STICK_GROW_PX_PER_S = 220.0
STICK_DROP_RAD_PER_S = 5.4
STICK_FLAT = math.pi / 2

# --- Player ---
PLAYER_RADIUS = 14
PLAYER_EDGE_INSET = 15          # player stands this far from the platform's right edge
WALK_PX_PER_UNIT = 100.0        # walk speed is in "hundreds of px per second"
FOOTSTEP_S = 0.18
FALL_G = 520.0                  # px/s^2
FALL_OUT_MARGIN = 80            # game over once y > HEIGHT + margin

# --- Camera ---
CAMERA_LEAD = 0.35              # player sits at 35% of the viewport width
CAMERA_RATE = 4.0               # smoothing rate (1/s), factor clamped to 1

# --- Level generation ---
PLATFORM_HEIGHT = 180
START_PLATFORM_X = 80
START_PLATFORM_W = 130
INITIAL_PLATFORMS = 8           # generated after the start platform
EXTEND_BATCH = 4
EXTEND_TRIGGER = 1.6            # extend when last platform is closer than 1.6 * WIDTH
PRUNE_BEHIND = 1.0              # drop platforms this many viewports behind the camera
SEED_DEFAULT = 12345


@dataclass(frozen=True)
class LevelConfig:
    """Bounds for procedural generation plus the walk speed of one level."""

    gap_min: float
    gap_max: float
    width_min: float
    width_max: float
    speed: float


LEVELS: Tuple[LevelConfig, ...] = (
    LevelConfig(gap_min=100, gap_max=170, width_min=95, width_max=140, speed=2.7),
    LevelConfig(gap_min=130, gap_max=210, width_min=85, width_max=125, speed=3.1),
    LevelConfig(gap_min=150, gap_max=230, width_min=75, width_max=115, speed=3.35),
    LevelConfig(gap_min=175, gap_max=260, width_min=62, width_max=102, speed=3.7),
    LevelConfig(gap_min=195, gap_max=290, width_min=52, width_max=92, speed=4.1),
)


def level_config(level_index: int) -> LevelConfig:
    """Levels past the table reuse the hardest one."""
    if level_index < 0:
        raise ValueError(f"level index must be >= 0, got {level_index}")
    return LEVELS[min(level_index, len(LEVELS) - 1)]


# --- Audio cues ---
MUSIC_NOTES = (261.63, 329.63, 392.0, 523.25, 392.0, 329.63)
MUSIC_STEP_S = 0.32

# --- Colors (RGB) ---
COLOR_SKY = (135, 196, 235)
COLOR_CLOUD = (230, 242, 250)
COLOR_GROUND = (80, 179, 111)
COLOR_PLAT = (30, 55, 79)
COLOR_PLAT_TOP = (46, 90, 133)
COLOR_STICK = (16, 21, 29)
COLOR_BODY = (27, 31, 41)
COLOR_HEAD = (255, 232, 204)
COLOR_FG = (245, 245, 255)
COLOR_PANEL = (20, 32, 48)
COLOR_ACCENT = (255, 196, 90)
