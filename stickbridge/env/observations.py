# stickbridge/env/observations.py
from __future__ import annotations
from typing import List
import numpy as np

from stickbridge.game.config import WIDTH, STICK_MAX_LEN
from stickbridge.game.sim import StickSim, Phase

OBS_SIZE = 8


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)


def build_observation(sim: StickSim) -> np.ndarray:
    """
    Returns a fixed (8,) float32 vector:
      [ stick_len_norm, gap_norm, next_w_norm, gap_after_norm,
        growing, dropping, walking, falling ]
    - lengths are divided by STICK_MAX_LEN (stick) or WIDTH (layout), clipped to [0,1]
    - gap       : from the current platform's right edge to the next platform
    - gap_after : from the next platform's right edge to the one after it
    - phase flags are 0.0/1.0 (all zero while idle)
    """
    i = sim.current_platform_index
    cur = sim.level.platform(i)
    nxt = sim.level.platform(i + 1)
    after = sim.level.platform(i + 2)

    feats: List[float] = [
        _clamp01(sim.stick.length / STICK_MAX_LEN),
        _clamp01((nxt.x - cur.right) / WIDTH),
        _clamp01(nxt.width / WIDTH),
        _clamp01((after.x - nxt.right) / WIDTH),
    ]
    for phase in (Phase.GROWING, Phase.DROPPING, Phase.WALKING, Phase.FALLING):
        feats.append(1.0 if sim.phase is phase else 0.0)

    return np.asarray(feats, dtype=np.float32)


def target_stick_length(obs: np.ndarray) -> float:
    """Stick length (px) that lands on the middle of the next platform."""
    return float(obs[1] + obs[2] * 0.5) * WIDTH
