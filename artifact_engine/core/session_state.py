"""
Session state machine for conversations with the troubleshooting assistant.

  NO_SESSION → CREATING → SESSION_ACTIVE
                   ↓             ↓
              SESSIONS_DISABLED ←┘

A session keeps conversation history upstream. Any failure while creating or
using one disables sessions for the rest of the conversation; from then on the
caller always uses the stateless query path. SESSIONS_DISABLED is terminal.
This machine has no influence on how responses are classified.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from artifact_engine.core.errors import ArtifactEngineError
from artifact_engine.core.logging import get_logger

logger = get_logger(__name__)


class SessionState(str, Enum):
    NO_SESSION = "no_session"
    CREATING = "creating"
    SESSION_ACTIVE = "session_active"
    SESSIONS_DISABLED = "sessions_disabled"


ALLOWED_TRANSITIONS = MappingProxyType(
    {
        SessionState.NO_SESSION: frozenset({SessionState.CREATING}),
        SessionState.CREATING: frozenset(
            {SessionState.SESSION_ACTIVE, SessionState.SESSIONS_DISABLED}
        ),
        SessionState.SESSION_ACTIVE: frozenset({SessionState.SESSIONS_DISABLED}),
        SessionState.SESSIONS_DISABLED: frozenset(),
    }
)


class SessionTransitionError(ArtifactEngineError):
    """Raised when a session state transition is invalid."""


@dataclass
class SessionStateMachine:
    """Tracks the session lifecycle of one conversation."""

    state: SessionState = SessionState.NO_SESSION
    session_id: str | None = None
    history: list[SessionState] = field(default_factory=list)

    def _transition(self, target: SessionState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise SessionTransitionError(
                f"Cannot move from {self.state.value} to {target.value}"
            )
        self.history.append(self.state)
        self.state = target

    @property
    def should_create_session(self) -> bool:
        return self.state is SessionState.NO_SESSION

    @property
    def uses_session(self) -> bool:
        return self.state is SessionState.SESSION_ACTIVE

    def begin_creation(self) -> None:
        self._transition(SessionState.CREATING)

    def session_created(self, session_id: str) -> None:
        self._transition(SessionState.SESSION_ACTIVE)
        self.session_id = session_id
        logger.info(f"Session created: {session_id}")

    def disable(self, reason: str) -> None:
        """Fall back to stateless queries for the rest of the conversation."""
        self._transition(SessionState.SESSIONS_DISABLED)
        self.session_id = None
        logger.warning(f"Sessions disabled, using stateless mode: {reason}")
