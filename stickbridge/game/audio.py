# stickbridge/game/audio.py
"""
Audio cue scheduling. Nothing here synthesizes sound: sim events and the
background music loop are turned into `Tone` descriptions with a start
delay, and whoever owns a sound device plays them.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .config import MUSIC_NOTES, MUSIC_STEP_S
from .sim import Cue, Event


@dataclass(frozen=True)
class Tone:
    freq: float       # Hz
    duration: float   # s
    wave: str         # "sine" | "square" | "sawtooth" | "triangle"
    volume: float


# (delay_s, tone) per cue; LEVEL is a short rising arpeggio
SFX_TONES: Dict[Cue, Tuple[Tuple[float, Tone], ...]] = {
    Cue.GROW: ((0.0, Tone(220.0, 0.08, "sawtooth", 0.10)),),
    Cue.DROP: ((0.0, Tone(180.0, 0.20, "square", 0.12)),),
    Cue.WALK: ((0.0, Tone(400.0, 0.08, "triangle", 0.06)),),
    Cue.FALL: ((0.0, Tone(120.0, 0.50, "sine", 0.16)),),
    Cue.LEVEL: (
        (0.00, Tone(523.25, 0.12, "triangle", 0.10)),
        (0.09, Tone(659.25, 0.12, "triangle", 0.10)),
        (0.18, Tone(783.99, 0.16, "triangle", 0.10)),
    ),
}


def tones_for(events: Iterable[Event]) -> List[Tuple[float, Tone]]:
    """Flatten drained sim events into scheduled tones. Unknown cues are silent."""
    out: List[Tuple[float, Tone]] = []
    for ev in events:
        out.extend(SFX_TONES.get(ev.kind, ()))
    return out


class MusicLoop:
    """
    Repeating note sequencer, independent of the physics tick.
    start()/stop() follow mode transitions; tick(dt) returns the notes due.
    """
    def __init__(self, notes: Tuple[float, ...] = MUSIC_NOTES, step_s: float = MUSIC_STEP_S):
        assert step_s > 0, "step_s must be > 0"
        self.notes = notes
        self.step_s = step_s
        self.enabled = True
        self.running = False
        self.index = 0
        self._timer = 0.0

    def start(self):
        # plays a note right away, like a fresh setTimeout chain
        if not self.enabled or self.running:
            return
        self.running = True
        self._timer = 0.0

    def stop(self):
        self.running = False
        self._timer = 0.0

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        if self.enabled:
            self.start()
        else:
            self.stop()
        return self.enabled

    def tick(self, dt: float) -> List[Tone]:
        if not (self.enabled and self.running):
            return []
        self._timer -= dt
        if self._timer > 0.0:
            return []
        # at most one note per tick; a stall is not replayed
        freq = self.notes[self.index % len(self.notes)]
        self.index += 1
        self._timer = self.step_s
        return [Tone(freq, 0.26, "triangle", 0.05)]


class AudioCues:
    """Collects tones from sim events and music; `sink` receives each one as it comes due."""
    def __init__(self, sink=None, music: Optional[MusicLoop] = None):
        self.sink = sink
        self.music = music if music is not None else MusicLoop()
        self._pending: List[Tuple[float, Tone]] = []
        self.played: List[Tone] = []

    def consume(self, events: Iterable[Event]):
        self._pending.extend(tones_for(events))

    def tick(self, dt: float) -> List[Tone]:
        due = self.music.tick(dt)
        still: List[Tuple[float, Tone]] = []
        for delay, tone in self._pending:
            delay -= dt
            if delay <= 0.0:
                due.append(tone)
            else:
                still.append((delay, tone))
        self._pending = still
        for tone in due:
            if self.sink is not None:
                self.sink(tone)
        self.played.extend(due)
        del self.played[:-64]  # recent history only
        return due
