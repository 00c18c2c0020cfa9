"""
In-memory session manager for simulation runs.

Each session wraps a SimulationEngine + MetricsCollector built from a
config and a scenario, supporting step-by-step execution and background
runs. Sessions live only as long as the process.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any

from econsim.core.config import SimulationConfig
from econsim.core.engine import SimulationEngine
from econsim.core.events import TurnResult
from econsim.core.scenario import Scenario
from econsim.experiment.presets import get_scenario
from econsim.metrics.collector import MetricsCollector

logger = logging.getLogger(__name__)


@dataclass
class SimulationSession:
    """A running or completed simulation session."""

    id: str
    name: str
    config: SimulationConfig
    scenario: Scenario
    engine: SimulationEngine
    collector: MetricsCollector
    status: str = "created"  # created | running | completed | failed
    max_turns: int = 0
    last_result: TurnResult | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def current_turn(self) -> int:
        return self.engine.turn


class SessionManager:
    """Manages multiple simulation sessions."""

    def __init__(self) -> None:
        self.sessions: dict[str, SimulationSession] = {}
        # Session IDs currently running in background threads
        self._running: set[str] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_session(
        self,
        config: SimulationConfig | None = None,
        scenario: Scenario | str | None = None,
        name: str | None = None,
    ) -> SimulationSession:
        """Create a new simulation session.

        ``scenario`` may be a Scenario or the name of a scenario preset;
        the baseline scenario is used when omitted. Raises
        ConfigurationError for invalid config or scenario data.
        """
        if config is None:
            config = SimulationConfig()
        if scenario is None:
            scenario = get_scenario("baseline")
        elif isinstance(scenario, str):
            scenario = get_scenario(scenario)

        engine = SimulationEngine(config, copy.deepcopy(scenario))
        session = SimulationSession(
            id=uuid.uuid4().hex[:8],
            name=name or config.experiment_name,
            config=config,
            scenario=scenario,
            engine=engine,
            collector=MetricsCollector(),
            max_turns=config.turns_to_run,
        )
        self.sessions[session.id] = session
        logger.info("Created session %s (%s)", session.id, session.name)
        return session

    def get_session(self, session_id: str) -> SimulationSession:
        """Get a session by ID. Raises KeyError if not found."""
        if session_id not in self.sessions:
            raise KeyError(f"Session '{session_id}' not found")
        return self.sessions[session_id]

    def list_sessions(self) -> list[dict[str, Any]]:
        return [
            {
                "id": s.id,
                "name": s.name,
                "status": s.status,
                "current_turn": s.current_turn,
                "max_turns": s.max_turns,
                "region_count": len(s.engine.ctx.regions),
            }
            for s in self.sessions.values()
        ]

    def delete_session(self, session_id: str) -> None:
        self.get_session(session_id)
        del self.sessions[session_id]
        self._running.discard(session_id)

    def is_running(self, session_id: str) -> bool:
        return session_id in self._running

    def step(self, session_id: str, n: int = 1) -> SimulationSession:
        """Advance a session by up to N turns."""
        session = self.get_session(session_id)

        if session_id in self._running:
            return session  # Background run in progress, don't interfere

        with session.lock:
            self._advance(session, n)
        return session

    def _advance(self, session: SimulationSession, n: int) -> None:
        if session.status in ("completed", "failed"):
            return
        session.status = "running"
        for _ in range(n):
            if session.current_turn >= session.max_turns:
                break
            result = session.engine.advance_turn()
            session.last_result = result
            if not result.success:
                logger.warning(
                    "Session %s turn %d failed: %s",
                    session.id, result.turn + 1, result.reason,
                )
                session.status = "failed"
                return
            session.collector.collect(session.engine, errors=len(result.errors))
        session.status = (
            "completed" if session.current_turn >= session.max_turns else "created"
        )

    def run_full(self, session_id: str) -> SimulationSession:
        """Run a session to completion."""
        session = self.get_session(session_id)
        remaining = session.max_turns - session.current_turn
        if remaining > 0:
            self.step(session_id, remaining)
        return session

    def run_full_async(self, session_id: str) -> SimulationSession:
        """Start running a session in a background thread."""
        session = self.get_session(session_id)
        if session_id in self._running:
            return session  # Already running, no-op
        if session.status in ("completed", "failed"):
            return session

        session.status = "running"
        self._running.add(session_id)

        def _worker():
            try:
                with session.lock:
                    self._advance(session, session.max_turns - session.current_turn)
            except Exception:
                logger.exception("Background run failed for %s", session_id)
                session.status = "failed"
            finally:
                self._running.discard(session_id)

        t = threading.Thread(target=_worker, daemon=True)
        t.start()
        return session

    def reset_session(self, session_id: str) -> SimulationSession:
        """Rebuild a session's engine from its original config and scenario."""
        session = self.get_session(session_id)
        with session.lock:
            session.engine = SimulationEngine(session.config, copy.deepcopy(session.scenario))
            session.collector = MetricsCollector()
            session.status = "created"
            session.last_result = None
        return session
