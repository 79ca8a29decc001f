# stickbridge/tests/test_sim.py
"""
Simulation core checks: landing rule, scoring, fall, camera, phases, events.

Usage (from repo root):
  python -m stickbridge.tests.test_sim
  python -m stickbridge.tests.test_sim --crossings 500
"""
from __future__ import annotations
import argparse
import math
import sys

import pytest

from stickbridge.game.config import GROUND_Y, WIDTH, STICK_MAX_LEN
from stickbridge.game.level import Platform
from stickbridge.game.sim import (
    StickSim, GameState, Phase, Cue, clamp_dt, evaluate_landing,
)

LONG_RUN_CROSSINGS = 200


def fixed_sim(next_x: float = 340.0, next_w: float = 100.0) -> StickSim:
    """Level 1 with the first gap forced to next_x - 210."""
    sim = StickSim(seed=7)
    sim.start_game(0)
    sim.level.platforms[1] = Platform(next_x, next_w)
    return sim


def drop_with_length(sim: StickSim, length: float, dt: float = 0.01):
    sim.begin_grow()
    sim.release_grow()
    sim.stick.length = length
    for _ in range(1000):
        sim.update(dt)
        if sim.phase is not Phase.DROPPING:
            return
    raise AssertionError("stick never finished dropping")


def run_until(sim: StickSim, cond, dt: float = 0.01, limit: int = 10_000) -> int:
    for n in range(1, limit + 1):
        sim.update(dt)
        if cond(sim):
            return n
    raise AssertionError("condition not reached")


# -------------------- Landing --------------------

@pytest.mark.parametrize("length, success", [
    (130.0, True),     # tip exactly on the left edge
    (230.0, True),     # tip exactly on the right edge
    (180.0, True),
    (129.0, False),
    (231.0, False),
    (0.0, False),
])
def test_landing_rule_boundaries(length, success):
    current = Platform(80.0, 130.0)
    nxt = Platform(340.0, 100.0)
    reach, ok = evaluate_landing(current, nxt, length)
    assert reach == 210.0 + length
    assert ok is success


def test_landing_sets_walk_target_either_way():
    for length, failed in ((150.0, False), (40.0, True)):
        sim = fixed_sim()
        drop_with_length(sim, length)
        assert sim.phase is Phase.WALKING
        assert sim.walk_target_x == 210.0 + length
        assert sim.failure_triggered is failed


# -------------------- Scoring --------------------

def test_end_to_end_single_crossing():
    sim = fixed_sim()
    dt = 0.01
    sim.begin_grow()
    assert sim.phase is Phase.GROWING
    prev = 0.0
    while sim.stick.length < 130.0:
        sim.update(dt)
        assert sim.stick.length > prev
        prev = sim.stick.length
    sim.release_grow()
    assert sim.phase is Phase.DROPPING
    length = sim.stick.length
    assert 130.0 <= length <= 132.5

    run_until(sim, lambda s: s.phase is not Phase.DROPPING, dt)
    assert math.isclose(sim.stick.angle, math.pi / 2)
    assert sim.phase is Phase.WALKING
    assert sim.walk_target_x == 210.0 + length
    assert not sim.failure_triggered

    run_until(sim, lambda s: s.score == 1, dt)
    assert sim.current_platform_index == 1
    assert sim.phase is Phase.IDLE
    assert sim.player.x == 340.0 + 100.0 - 15
    assert (sim.stick.x, sim.stick.length, sim.stick.angle) == (sim.player.x, 0.0, 0.0)

    kinds = [e.kind for e in sim.drain_events()]
    assert kinds.count(Cue.DROP) == 1
    assert kinds.count(Cue.LEVEL) == 1
    assert kinds.count(Cue.GROW) >= 59
    assert Cue.WALK in kinds
    assert Cue.FALL not in kinds
    assert sim.drain_events() == []


def test_failure_never_scores_and_ends_game():
    sim = fixed_sim()
    drop_with_length(sim, 60.0)
    run_until(sim, lambda s: s.phase is Phase.FALLING)
    assert sim.score == 0
    run_until(sim, lambda s: s.state is GameState.GAMEOVER)
    assert sim.score == 0 and sim.final_score == 0
    events = sim.drain_events()
    kinds = [e.kind for e in events]
    assert kinds.count(Cue.FALL) == 1
    assert events[-1].kind is Cue.GAME_OVER and events[-1].score == 0


def test_overshoot_falls_too():
    sim = fixed_sim()
    drop_with_length(sim, 231.0)
    assert sim.failure_triggered
    run_until(sim, lambda s: s.state is GameState.GAMEOVER)
    assert sim.score == 0


def test_score_resets_on_setup_level():
    sim = fixed_sim()
    drop_with_length(sim, 180.0)
    run_until(sim, lambda s: s.score == 1)
    sim.setup_level(1)
    assert sim.score == 0
    assert sim.current_level == 1
    assert sim.current_platform_index == 0
    assert sim.phase is Phase.IDLE
    assert sim.camera_x == 0.0
    assert sim.player.walk_speed == 3.1


# -------------------- Footsteps --------------------

def test_footstep_cadence_and_carry_over():
    # dt = 1/64 keeps positions and the accumulator exact in binary:
    # 4.21875 px per moving tick, a footstep every 12 moving ticks (0.1875 s)
    dt = 1 / 64
    sim = fixed_sim(next_x=300.0, next_w=100.0)

    # target 320: 30 moving ticks from x=195 -> 2 footsteps, 6 ticks left over
    drop_with_length(sim, 110.0, dt)
    run_until(sim, lambda s: s.score == 1, dt)
    kinds = [e.kind for e in sim.drain_events()]
    assert kinds.count(Cue.WALK) == 2
    assert sim.walk_tick == 6 * dt
    assert sim.player.x == 385.0

    # next walk: 6 moving ticks to reach 408 -> carried 6 + 6 = 12 -> 1 footstep
    drop_with_length(sim, 8.0, dt)
    run_until(sim, lambda s: s.phase is Phase.FALLING, dt)
    kinds = [e.kind for e in sim.drain_events()]
    assert kinds.count(Cue.WALK) == 1
    assert sim.walk_tick == 0.0


def test_footsteps_reset_on_setup_level():
    dt = 1 / 64
    sim = fixed_sim(next_x=300.0, next_w=100.0)
    drop_with_length(sim, 110.0, dt)
    run_until(sim, lambda s: s.score == 1, dt)
    assert sim.walk_tick > 0.0
    sim.setup_level(0)
    assert sim.walk_tick == 0.0


# -------------------- Fall --------------------

def test_fall_terminates_in_expected_steps():
    dt = 0.02
    sim = fixed_sim()
    drop_with_length(sim, 60.0, dt)
    run_until(sim, lambda s: s.phase is Phase.FALLING, dt)
    # the tick that starts the fall already integrates one step
    assert math.isclose(sim.player.y, GROUND_Y + 520.0 * dt * dt)
    x_at_fall = sim.player.x
    steps = run_until(sim, lambda s: s.state is GameState.GAMEOVER, dt)
    assert steps == 36
    assert sim.player.x == x_at_fall


# -------------------- Input / phases --------------------

def test_inputs_ignored_outside_playing():
    sim = StickSim(seed=1)
    assert sim.state is GameState.MENU
    sim.begin_grow()
    assert sim.phase is Phase.IDLE
    sim.update(0.02)
    assert sim.stick.length == 0.0


def test_release_without_grow_is_noop():
    sim = fixed_sim()
    sim.release_grow()
    assert sim.phase is Phase.IDLE
    assert sim.drain_events() == []


def test_no_regrow_mid_drop_or_walk():
    sim = fixed_sim()
    sim.begin_grow()
    sim.update(0.01)
    sim.release_grow()
    sim.begin_grow()
    assert sim.phase is Phase.DROPPING
    length = sim.stick.length
    run_until(sim, lambda s: s.phase is Phase.WALKING)
    sim.begin_grow()
    sim.update(0.01)
    assert sim.phase is Phase.WALKING
    assert sim.stick.length == length


def test_illegal_phase_change_rejected():
    sim = fixed_sim()
    with pytest.raises(AssertionError):
        sim._set_phase(Phase.WALKING)


def test_growth_clamped_in_sim():
    sim = fixed_sim()
    sim.begin_grow()
    for _ in range(200):
        sim.update(0.03)
        assert sim.stick.length <= STICK_MAX_LEN
    assert sim.stick.length == STICK_MAX_LEN


# -------------------- Timing / camera --------------------

def test_dt_clamp():
    assert clamp_dt(0.5) == 0.03
    assert clamp_dt(0.01) == 0.01
    assert clamp_dt(-1.0) == 0.0
    assert clamp_dt(float("nan")) == 0.0
    sim = fixed_sim()
    sim.begin_grow()
    sim.update(1.0)
    assert math.isclose(sim.stick.length, 220.0 * 0.03)


def test_camera_follow_smooths_without_overshoot():
    sim = fixed_sim()
    sim.player.x = 1336.0
    sim.update(0.01)
    assert math.isclose(sim.camera_target_x, 1336.0 - 0.35 * WIDTH)
    assert math.isclose(sim.camera_x, sim.camera_target_x * 0.04)
    prev = sim.camera_x
    for _ in range(300):
        sim.update(5.0)
        assert prev <= sim.camera_x <= sim.camera_target_x
        prev = sim.camera_x
    assert math.isclose(sim.camera_x, sim.camera_target_x, rel_tol=1e-6)


def test_camera_target_never_negative():
    sim = fixed_sim()
    sim.update(0.01)
    assert sim.camera_target_x == 0.0 and sim.camera_x == 0.0


# -------------------- Mode transitions --------------------

def test_mode_transitions():
    sim = StickSim(seed=2)
    sim.select_level(3)
    sim.start_game()
    assert sim.state is GameState.PLAYING and sim.current_level == 3
    sim.to_menu()
    assert sim.state is GameState.MENU
    sim.start_game(1)
    sim.level.platforms[1] = Platform(340.0, 100.0)
    drop_with_length(sim, 10.0)
    run_until(sim, lambda s: s.state is GameState.GAMEOVER)
    frozen = sim.snapshot()
    sim.update(0.02)
    assert sim.snapshot() == frozen
    sim.restart()
    assert sim.state is GameState.PLAYING and sim.current_level == 1
    assert sim.score == 0 and sim.final_score is None
    # FALL / GAME_OVER from the finished run are not carried into the new one
    assert sim.drain_events() == []
    with pytest.raises(ValueError):
        sim.select_level(-2)


def test_fixed_seed_restart_repeats_layout():
    sim = StickSim(seed=11)
    sim.start_game(2)
    first = [(p.x, p.width) for p in sim.platforms]
    sim.restart()
    assert [(p.x, p.width) for p in sim.platforms] == first


def test_snapshot_fields():
    sim = fixed_sim()
    snap = sim.snapshot()
    assert snap.state is GameState.PLAYING
    assert snap.player == (195.0, GROUND_Y)
    assert snap.stick == (195.0, 0.0, 0.0)
    assert snap.platforms[1] == Platform(340.0, 100.0)


# -------------------- Long run --------------------

def test_platforms_stay_ahead_over_long_run(crossings: int = LONG_RUN_CROSSINGS):
    sim = StickSim(seed=2024)
    sim.start_game(4)
    for n in range(1, crossings + 1):
        cur, nxt = sim.current_platform, sim.next_platform
        drop_with_length(sim, nxt.x - cur.right + nxt.width / 2, dt=0.03)
        run_until(sim, lambda s: s.score == n, dt=0.03)
        assert sim.level.end_index > sim.current_platform_index + 2
        assert len(sim.level.platforms) < 40
    assert sim.score == crossings
    assert sim.level.base_index > 0
    assert sim.current_platform_index == crossings


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--crossings", type=int, default=LONG_RUN_CROSSINGS,
                    help="Crossings for the long-run platform check")
    args = ap.parse_args()

    try:
        for length, success in ((130.0, True), (230.0, True), (129.0, False), (231.0, False)):
            test_landing_rule_boundaries(length, success)
        print("✓ landing boundaries")
        for name, fn in sorted(globals().items()):
            if not name.startswith("test_") or name in (
                    "test_landing_rule_boundaries", "test_platforms_stay_ahead_over_long_run"):
                continue
            fn()
            print(f"✓ {name}")
        test_platforms_stay_ahead_over_long_run(args.crossings)
        print(f"✓ long run ({args.crossings} crossings)")
    except AssertionError as e:
        print(f"✗ Test failed: {e}", file=sys.stderr)
        sys.exit(1)
    print("🎉 All sim tests passed")


if __name__ == "__main__":
    main()
