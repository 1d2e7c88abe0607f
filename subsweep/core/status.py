"""Stage lifecycle registry shared by the pipeline stages.

Every active stage (the generator, each worker, the sink) owns one slot in a
:class:`StatusRegistry`.  A stage writes its own slot through the
:class:`StageHandle` it was given at construction and reads any slot through
the registry.  Downstream stages decide when to stop by reading upstream
slots, so no end-of-stream marker ever travels through the channels.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Dict, Optional

GENERATOR = "generator"
WORKER = "worker"
SINK = "sink"


class EngineState(str, Enum):
    """Lifecycle state of a single pipeline stage."""

    INIT = "init"
    RUNNING = "running"
    STOPPED = "stopped"


def stage_id(kind: str, index: Optional[int] = None) -> str:
    """Return the registry key for a stage of *kind* (e.g. ``worker-3``)."""
    return kind if index is None else f"{kind}-{index}"


class StageHandle:
    """Write capability for exactly one registry slot."""

    def __init__(self, registry: "StatusRegistry", ident: str) -> None:
        self._registry = registry
        self.ident = ident

    def mark_running(self) -> None:
        self._registry._set(self.ident, EngineState.RUNNING)

    def mark_stopped(self) -> None:
        self._registry._set(self.ident, EngineState.STOPPED)

    @property
    def state(self) -> EngineState:
        return self._registry.state(self.ident)

    def __repr__(self) -> str:
        return f"<StageHandle {self.ident} {self.state.value}>"


class StatusRegistry:
    """Mapping of stage id to :class:`EngineState` behind a single lock.

    The lock is a plain :class:`threading.Lock` and is only held for one read
    or one write, never across an ``await``.

    Example::

        registry = StatusRegistry()
        gen = registry.register(GENERATOR)
        gen.mark_running()
        ...
        gen.mark_stopped()
        assert registry.is_stopped(GENERATOR)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: Dict[str, EngineState] = {}

    def register(self, kind: str, index: Optional[int] = None) -> StageHandle:
        """Create the slot for a new stage in ``INIT`` state.

        Raises:
            ValueError: If the stage id is already registered.
        """
        ident = stage_id(kind, index)
        with self._lock:
            if ident in self._states:
                raise ValueError(f"Stage {ident!r} is already registered")
            self._states[ident] = EngineState.INIT
        return StageHandle(self, ident)

    def _set(self, ident: str, state: EngineState) -> None:
        with self._lock:
            if ident not in self._states:
                raise KeyError(ident)
            self._states[ident] = state

    def state(self, ident: str) -> EngineState:
        with self._lock:
            return self._states[ident]

    def is_stopped(self, ident: str) -> bool:
        return self.state(ident) is EngineState.STOPPED

    def all_stopped(self, kind: str) -> bool:
        """Return ``True`` when every registered stage of *kind* is stopped.

        Stages still in ``INIT`` count as not stopped, so a consumer never
        outruns producers that have not started yet.
        """
        prefix = f"{kind}-"
        with self._lock:
            return all(
                state is EngineState.STOPPED
                for ident, state in self._states.items()
                if ident == kind or ident.startswith(prefix)
            )

    def snapshot(self) -> Dict[str, EngineState]:
        """Return a copy of every slot."""
        with self._lock:
            return dict(self._states)
