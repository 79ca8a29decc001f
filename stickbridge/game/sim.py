# stickbridge/game/sim.py
"""
Headless simulation core: no window, no audio, no wall clock.

    sim = StickSim(seed=123)
    sim.start_game(0)
    sim.begin_grow()
    sim.update(1 / 60)          # caller injects dt
    for ev in sim.drain_events():
        ...                     # audio / HUD collaborators react here

The sim only runs its physics while `state` is PLAYING. Inside a level the
sub-state is a single `Phase`; transitions go through `_set_phase`, which
rejects combinations the game never allows (e.g. growing while falling).
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from .config import (
    WIDTH, HEIGHT, GROUND_Y, DT_MAX,
    STICK_GROW_PX_PER_S, STICK_DROP_RAD_PER_S,
    PLAYER_EDGE_INSET, WALK_PX_PER_UNIT, FOOTSTEP_S, FALL_OUT_MARGIN,
    CAMERA_LEAD, CAMERA_RATE,
    LevelConfig, level_config,
)
from .level import LevelGen, Platform
from .player import Player
from .stick import Stick


class GameState(Enum):
    MENU = "menu"
    PLAYING = "playing"
    GAMEOVER = "gameover"


class Phase(Enum):
    IDLE = "idle"
    GROWING = "growing"
    DROPPING = "dropping"
    WALKING = "walking"
    FALLING = "falling"


_TRANSITIONS: Dict[Phase, FrozenSet[Phase]] = {
    Phase.IDLE: frozenset({Phase.GROWING}),
    Phase.GROWING: frozenset({Phase.DROPPING}),
    Phase.DROPPING: frozenset({Phase.WALKING}),
    Phase.WALKING: frozenset({Phase.IDLE, Phase.FALLING}),
    Phase.FALLING: frozenset(),
}


class Cue(Enum):
    GROW = "grow"
    DROP = "drop"
    WALK = "walk"
    FALL = "fall"
    LEVEL = "level"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class Event:
    kind: Cue
    score: Optional[int] = None


@dataclass(frozen=True)
class Snapshot:
    """Read-only view for renderers."""
    state: GameState
    phase: Phase
    level: int
    score: int
    camera_x: float
    platforms: Tuple[Platform, ...]
    stick: Tuple[float, float, float]     # (x, angle, length)
    player: Tuple[float, float]           # (x, y)


def clamp_dt(dt: float) -> float:
    """Frame hitches slow the game down instead of being replayed."""
    if dt != dt or dt < 0.0:  # NaN or clock going backwards
        return 0.0
    return min(DT_MAX, dt)


def evaluate_landing(current: Platform, nxt: Platform, stick_length: float) -> Tuple[float, bool]:
    """Returns (reach_x, success). Both platform edges count as a landing."""
    reach_x = current.x + current.width + stick_length
    return reach_x, nxt.x <= reach_x <= nxt.x + nxt.width


class StickSim:
    def __init__(self, seed: Optional[int] = None,
                 width: int = WIDTH, height: int = HEIGHT, ground_y: float = GROUND_Y):
        # seed=None -> fresh random layout on every level start
        self.seed = seed
        self.width = width
        self.height = height
        self.ground_y = ground_y

        self.state = GameState.MENU
        self.phase = Phase.IDLE
        self.selected_level = 0
        self.current_level = 0
        self.score = 0
        self.final_score: Optional[int] = None

        self.level: Optional[LevelGen] = None
        self.cfg: Optional[LevelConfig] = None
        self.current_platform_index = 0
        self.player = Player(0.0, ground_y)
        self.stick = Stick(0.0, ground_y)
        self.camera_x = 0.0
        self.camera_target_x = 0.0

        self.walk_target_x = 0.0
        self.failure_triggered = False
        self.walk_tick = 0.0
        self.events: List[Event] = []

        self.setup_level(0)

    # -------------------- Level / mode control --------------------

    def setup_level(self, level_index: int, seed: Optional[int] = None):
        """(Re)initialize all simulation state for `level_index`."""
        self.cfg = level_config(level_index)
        self.current_level = level_index
        self.score = 0
        self.final_score = None
        self.camera_x = 0.0
        self.camera_target_x = 0.0
        self.current_platform_index = 0
        self._reset_flags()
        self.events = []

        self.level = LevelGen(self.cfg, seed if seed is not None else self.seed)
        start = self.level.platform(0)
        self.player.reset(start.x + start.width - PLAYER_EDGE_INSET, self.ground_y)
        self.player.walk_speed = self.cfg.speed
        self.stick.reset(self.player.x, self.ground_y)

    def _reset_flags(self):
        self.phase = Phase.IDLE
        self.failure_triggered = False
        self.walk_target_x = 0.0
        self.walk_tick = 0.0

    def select_level(self, level_index: int):
        level_config(level_index)  # validates
        self.selected_level = level_index

    def start_game(self, level_index: Optional[int] = None):
        if level_index is None:
            level_index = self.selected_level
        self.state = GameState.PLAYING
        self.setup_level(level_index)

    def restart(self):
        self.start_game(self.current_level)

    def to_menu(self):
        self.state = GameState.MENU

    def _end_game(self):
        self.state = GameState.GAMEOVER
        self.final_score = self.score
        self._emit(Cue.GAME_OVER, self.score)

    # -------------------- Input --------------------

    def begin_grow(self):
        if self.state is not GameState.PLAYING:
            return
        if self.phase is not Phase.IDLE:
            return
        self._set_phase(Phase.GROWING)

    def release_grow(self):
        if self.state is not GameState.PLAYING:
            return
        if self.phase is not Phase.GROWING:
            return
        self._set_phase(Phase.DROPPING)
        self._emit(Cue.DROP)

    # -------------------- Simulation --------------------

    def update(self, dt: float):
        if self.state is not GameState.PLAYING:
            return
        dt = clamp_dt(dt)

        # Phases are checked in order so one tick can chain drop -> walk.
        if self.phase is Phase.GROWING:
            self.stick.grow(STICK_GROW_PX_PER_S * dt)
            self._emit(Cue.GROW)

        if self.phase is Phase.DROPPING:
            if self.stick.rotate(STICK_DROP_RAD_PER_S * dt):
                self._evaluate_landing()

        if self.phase is Phase.WALKING:
            self._update_walk(dt)

        if self.phase is Phase.FALLING:
            self.player.update_fall(dt)
            if self.player.y > self.height + FALL_OUT_MARGIN:
                self._end_game()

        self._follow_camera(dt)

    def _evaluate_landing(self):
        current = self.level.platform(self.current_platform_index)
        nxt = self.level.platform(self.current_platform_index + 1)
        self.walk_target_x, success = evaluate_landing(current, nxt, self.stick.length)
        self.failure_triggered = not success
        self._set_phase(Phase.WALKING)

    def _update_walk(self, dt: float):
        speed = self.player.walk_speed * WALK_PX_PER_UNIT
        if self.player.step_towards(self.walk_target_x, speed, dt):
            self.walk_tick += dt
            if self.walk_tick >= FOOTSTEP_S:
                self.walk_tick = 0.0
                self._emit(Cue.WALK)
            return

        if self.failure_triggered:
            self._set_phase(Phase.FALLING)
            self._emit(Cue.FALL)
            return

        self.score += 1
        self._emit(Cue.LEVEL, self.score)
        self.current_platform_index += 1
        nxt = self.level.platform(self.current_platform_index)
        self.player.x = nxt.x + nxt.width - PLAYER_EDGE_INSET
        self.stick.reset(self.player.x, self.ground_y)
        self.level.extend_if_needed(self.camera_x)
        self.level.prune(self.camera_x, keep_from=self.current_platform_index)
        self._set_phase(Phase.IDLE)

    def _follow_camera(self, dt: float):
        self.camera_target_x = max(0.0, self.player.x - self.width * CAMERA_LEAD)
        self.camera_x += (self.camera_target_x - self.camera_x) * min(1.0, dt * CAMERA_RATE)

    def _set_phase(self, phase: Phase):
        assert phase in _TRANSITIONS[self.phase], f"illegal phase change {self.phase} -> {phase}"
        self.phase = phase

    # -------------------- Output --------------------

    def _emit(self, kind: Cue, score: Optional[int] = None):
        self.events.append(Event(kind, score))

    def drain_events(self) -> List[Event]:
        out, self.events = self.events, []
        return out

    @property
    def platforms(self) -> Tuple[Platform, ...]:
        return tuple(self.level.platforms)

    @property
    def current_platform(self) -> Platform:
        return self.level.platform(self.current_platform_index)

    @property
    def next_platform(self) -> Platform:
        return self.level.platform(self.current_platform_index + 1)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            state=self.state,
            phase=self.phase,
            level=self.current_level,
            score=self.score,
            camera_x=self.camera_x,
            platforms=self.platforms,
            stick=(self.stick.x, self.stick.angle, self.stick.length),
            player=(self.player.x, self.player.y),
        )
