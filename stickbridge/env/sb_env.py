# stickbridge/env/sb_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from stickbridge.game.config import (
    WIDTH, HEIGHT, GROUND_Y, LEVELS, COLOR_PLAT, COLOR_PLAT_TOP,
)
from stickbridge.game.sim import StickSim, GameState, Phase
from stickbridge.game.game import draw_background, draw_stick, draw_player
from stickbridge.env.observations import build_observation, OBS_SIZE


class StickBridgeEnv(gym.Env):
    """
    Stick Bridge Gymnasium environment (vector observations).
    - Simulation at 60 Hz (internal).
    - Agent acts every `frame_skip` frames (default 4) -> 15 decisions/sec.
    - Actions: 0 = let go (drops a growing stick), 1 = hold (starts/keeps growing).
    - Reward: +1 per successful crossing, -1 when the player falls out.
    - Observation: shape (8,), float32 (see observations.build_observation).
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 4,
                 time_limit_seconds: Optional[float] = 60.0,
                 level: int = 0):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        assert 0 <= level < len(LEVELS), f"level must be in [0, {len(LEVELS)})"
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.level = level

        self.sim_fps = 60
        self.dt = 1.0 / self.sim_fps

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(self.sim_fps * time_limit_seconds / self.frame_skip)

        self.action_space = gym.spaces.Discrete(2)
        self.observation_space = gym.spaces.Box(
            low=np.zeros(OBS_SIZE, dtype=np.float32),
            high=np.ones(OBS_SIZE, dtype=np.float32),
            dtype=np.float32,
        )

        # --- Runtime state ---
        self.sim: Optional[StickSim] = None
        self.timestep: int = 0
        self.current_seed: Optional[int] = None

        # Rendering
        self.screen = None
        self.clock = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)

        # A given seed fixes the layout; otherwise the level generator randomizes.
        level_seed = int(seed) if seed is not None else None
        level = self.level
        if options and "level" in options:
            level = int(options["level"])

        self.sim = StickSim(seed=level_seed)
        self.sim.start_game(level)
        self.sim.drain_events()
        self.timestep = 0
        self.current_seed = self.sim.level.seed

        return self._get_obs(), self._info()

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.sim is not None, "call reset() first"
        sim = self.sim

        if action == 1 and sim.phase is Phase.IDLE:
            sim.begin_grow()
        elif action == 0 and sim.phase is Phase.GROWING:
            sim.release_grow()

        score_before = sim.score
        for _ in range(self.frame_skip):
            sim.update(self.dt)
            if sim.state is GameState.GAMEOVER:
                break
        sim.drain_events()

        terminated = sim.state is GameState.GAMEOVER
        reward = -1.0 if terminated else float(sim.score - score_before)

        self.timestep += 1
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), reward, terminated, truncated, self._info()

    # -------------------- Helpers --------------------

    def _get_obs(self) -> np.ndarray:
        assert self.sim is not None
        return build_observation(self.sim)

    def _info(self) -> Dict[str, Any]:
        return {
            "seed": self.current_seed,
            "score": self.sim.score,
            "platform_index": self.sim.current_platform_index,
            "phase": self.sim.phase.value,
            "timestep": self.timestep,
        }

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None:
            return

        if self.screen is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
                pygame.display.set_caption("Stick Bridge - Gym Env")
            else:
                self.screen = pygame.Surface((WIDTH, HEIGHT))
            self.clock = pygame.time.Clock()

        if self.render_mode == "human":
            # keep the OS from flagging the window as hung
            pygame.event.pump()

        sim = self.sim
        draw_background(self.screen, sim.camera_x)
        sim.level.draw(self.screen, sim.camera_x, GROUND_Y, COLOR_PLAT, COLOR_PLAT_TOP)
        draw_stick(self.screen, sim.stick, sim.camera_x)
        draw_player(self.screen, sim.player, sim.camera_x)

        if self.render_mode == "human":
            pygame.display.flip()
            self.clock.tick(self.metadata.get("render_fps", 60))
            return None

        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
