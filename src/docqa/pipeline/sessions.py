"""Session registry — one :class:`PipelineController` per session id."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable

from docqa.config import Settings, settings
from docqa.pipeline.controller import PipelineController, PipelineDependencies, PipelineState

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"


class SessionRegistry:
    """Maps session ids to controllers, evicting the least recently used.

    Parameters
    ----------
    dependencies_factory:
        Builds the collaborators shared by every session.  Called at most
        once, on the first build in any session.
    max_sessions:
        Upper bound on live controllers.
    """

    def __init__(
        self,
        dependencies_factory: Callable[[], PipelineDependencies],
        *,
        max_sessions: int = 100,
    ) -> None:
        self._factory = dependencies_factory
        self._dependencies: PipelineDependencies | None = None
        self._sessions: OrderedDict[str, PipelineController] = OrderedDict()
        self._lock = threading.Lock()
        self.max_sessions = max_sessions

    @classmethod
    def from_settings(cls, config: Settings = settings) -> SessionRegistry:
        return cls(lambda: PipelineDependencies.from_settings(config), max_sessions=config.max_sessions)

    def dependencies(self) -> PipelineDependencies:
        """Return the shared collaborators, creating them on first use."""
        with self._lock:
            if self._dependencies is None:
                self._dependencies = self._factory()
            return self._dependencies

    def get(self, session_id: str | None = None) -> PipelineController:
        """Return the controller for *session_id*, creating it if needed.

        Only the upload path should call this; read-only requests use
        :meth:`peek` so they can never push a session out.
        """
        key = session_id or DEFAULT_SESSION
        with self._lock:
            controller = self._sessions.get(key)
            if controller is None:
                controller = PipelineController(self.dependencies)
                self._sessions[key] = controller
                logger.info("Created session %s", key)
                self._evict(keep=key)
            else:
                self._sessions.move_to_end(key)
            return controller

    def peek(self, session_id: str | None = None) -> PipelineController | None:
        """Return the controller for *session_id*, or ``None`` if it does not exist."""
        key = session_id or DEFAULT_SESSION
        with self._lock:
            controller = self._sessions.get(key)
            if controller is not None:
                self._sessions.move_to_end(key)
            return controller

    def _evict(self, *, keep: str) -> None:
        # Empty sessions go first, oldest first; a ready one only when all are ready.
        while len(self._sessions) > self.max_sessions:
            candidates = [k for k in self._sessions if k != keep]
            victim = next(
                (k for k in candidates if self._sessions[k].state is PipelineState.EMPTY),
                candidates[0],
            )
            del self._sessions[victim]
            logger.info("Evicted session %s", victim)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
