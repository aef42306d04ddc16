"""
External collaborators the simulation talks to: sound, high-score storage, HUD.
All calls are fire-and-forget; a failing collaborator never reaches the game.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

SOUND_CUES = (
    "shoot",
    "shoot_rapid",
    "shoot_spread",
    "shoot_bounce",
    "shoot_super",
    "enemy_shoot",
    "explosion",
    "powerup",
    "damage",
    "shield_hit",
)


def safe_call(fn: Optional[Callable], *args, default: Any = None) -> Any:
    """Call a collaborator, discarding anything it raises"""
    if fn is None:
        return default
    try:
        return fn(*args)
    except Exception:
        return default


class SoundSink(Protocol):
    def play(self, cue: str) -> None: ...


class HighScoreStore(Protocol):
    def get_high_score(self) -> int: ...

    def set_high_score(self, value: int) -> None: ...


class HudSink(Protocol):
    def update_hud(self, snapshot: "HudSnapshot") -> None: ...


class SoundBoard:
    """Named cue front-end over an optional SoundSink"""

    def __init__(self, sink: Optional[SoundSink] = None):
        self.sink = sink
        self.muted = False

    def play(self, cue: str):
        if self.muted or self.sink is None:
            return
        safe_call(self.sink.play, cue)


class RecordingSoundSink:
    """Keeps every cue it hears; handy headless sink"""

    def __init__(self):
        self.cues: List[str] = []

    def play(self, cue: str):
        self.cues.append(cue)


class MemoryHighScoreStore:
    def __init__(self, value: int = 0):
        self.value = value

    def get_high_score(self) -> int:
        return self.value

    def set_high_score(self, value: int):
        self.value = value


class JsonHighScoreStore:
    """High score kept in a small json file"""

    def __init__(self, path: str):
        self.path = path

    def get_high_score(self) -> int:
        if not os.path.exists(self.path):
            return 0
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            return int(data.get("high_score", 0))
        except (OSError, ValueError, AttributeError, TypeError):
            return 0

    def set_high_score(self, value: int):
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump({"high_score": int(value)}, f)


@dataclass
class HudSnapshot:
    """What the UI needs to show for one frame"""
    score: int
    high_score: int
    level: int
    lives: int
    hp_percent: float
    shield_active: bool
    shield_hp: float
    weapon_label: str
    ammo_text: str
    arsenal: List[Tuple[str, str, str, bool]] = field(default_factory=list)  # key, name, ammo, selected
    super_seconds: int = 0
    triple_seconds: int = 0
    paused: bool = False
    game_over: bool = False
    transition_ms: float = 0.0

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)
