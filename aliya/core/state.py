from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FlowState(str, Enum):
    IDLE = "idle"
    AWAITING_TERMS_RESPONSE = "awaiting_terms_response"
    ONBOARDING = "onboarding"
    AWAITING_ASSESSMENT_CHOICE = "awaiting_assessment_choice"
    DIAGNOSING = "diagnosing"
    ASSESSING = "assessing"
    FITNESS = "fitness"
    MEAL = "meal"
    CYCLE_UPDATE_CHOICE = "cycle_update_choice"
    CYCLE_TRACKING = "cycle_tracking"
    MEDICATION_CHOICE = "medication_choice"
    MEDICATION_SELECT_UPDATE = "medication_select_update"
    MEDICATION_SETUP = "medication_setup"


@dataclass
class Session:
    user_id: str
    flow_state: FlowState = FlowState.IDLE
    step_index: int = 0
    answers: dict[str, Any] = field(default_factory=dict)

    @property
    def is_idle(self) -> bool:
        return self.flow_state is FlowState.IDLE

    def enter(self, state: FlowState, *, answers: dict[str, Any] | None = None, step_index: int = 0) -> None:
        self.flow_state = state
        self.answers = dict(answers or {})
        self.step_index = step_index

    def reset(self) -> None:
        self.enter(FlowState.IDLE)


class SessionStore:
    """
    In-memory conversation state, one Session per user id, kept for the process lifetime.

    `locked(user_id)` serializes message handling per user: while a handler holds it, no
    other handler can read-modify-write the same Session. Different users never share a lock.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, user_id: str) -> Session:
        session = self._sessions.get(user_id)
        if session is None:
            session = Session(user_id=user_id)
            self._sessions[user_id] = session
        return session

    def put(self, session: Session) -> None:
        self._sessions[session.user_id] = session

    def reset(self, user_id: str) -> Session:
        session = self.get(user_id)
        session.reset()
        return session

    def __len__(self) -> int:
        return len(self._sessions)

    @asynccontextmanager
    async def locked(self, user_id: str) -> AsyncIterator[Session]:
        # setdefault runs without an await in between, so two handlers on the same loop
        # always end up with the same Lock object.
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        async with lock:
            session = self.get(user_id)
            yield session
            self.put(session)
