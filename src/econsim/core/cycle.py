"""
Economic cycle: a rotating sequence of named phases, each applying a
multiplier to wealth and production at the end of the turn.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from econsim.core.config import SimulationConfig


@dataclass(frozen=True)
class CyclePhase:
    name: str
    multiplier: float
    duration: int


class EconomicCycle:
    """Tracks the current phase and advances it once per turn."""

    def __init__(self, config: SimulationConfig):
        cc = config.cycle_config
        self.enabled: bool = bool(cc.get("enabled", True))
        self.phases: list[CyclePhase] = [
            CyclePhase(p["name"], float(p["multiplier"]), int(p["duration"]))
            for p in cc.get("phases", [])
        ]
        names = [p.name for p in self.phases]
        start = cc.get("start_phase")
        self._index = names.index(start) if start in names else 0
        self.turns_in_phase = 0

    @property
    def phase(self) -> CyclePhase | None:
        if not self.enabled or not self.phases:
            return None
        return self.phases[self._index]

    @property
    def multiplier(self) -> float:
        phase = self.phase
        return phase.multiplier if phase is not None else 1.0

    @property
    def phase_name(self) -> str:
        phase = self.phase
        return phase.name if phase is not None else "none"

    def advance(self) -> bool:
        """Count one turn in the current phase; return True on a phase change."""
        phase = self.phase
        if phase is None:
            return False
        self.turns_in_phase += 1
        if self.turns_in_phase >= phase.duration:
            self._index = (self._index + 1) % len(self.phases)
            self.turns_in_phase = 0
            return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase_name,
            "multiplier": self.multiplier,
            "turns_in_phase": self.turns_in_phase,
        }
