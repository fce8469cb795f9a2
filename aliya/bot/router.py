from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable

from aliya.bot.engine import DialogueEngine, medication_snapshot, render_medication_list
from aliya.bot.text import HELP_TEXT, INTRODUCTION_TEXT
from aliya.core.i18n import t
from aliya.core.state import FlowState, Session, SessionStore
from aliya.db.models import User
from aliya.services.advisor import HealthAdvisor
from aliya.services.records import HealthRecords

logger = logging.getLogger("aliya-bot")

# `/cmd`, `/cmd@SomeBot`, `/cmd rest of text`
_RE_COMMAND = re.compile(r"^/(?P<cmd>[A-Za-z_]+)(?:@[A-Za-z0-9_]+)?(?:\s+(?P<rest>.*))?$", re.DOTALL)


class EligibilityError(Exception):
    def __init__(self, reply: str) -> None:
        super().__init__(reply)
        self.reply = reply


def parse_command(text: str) -> tuple[str, str] | None:
    """Return (command, rest) for a slash command, lower-cased command name; None for plain text."""
    m = _RE_COMMAND.match((text or "").strip())
    if not m:
        return None
    return m.group("cmd").lower(), (m.group("rest") or "").strip()


class CommandRouter:
    """
    Entry point for every inbound text message.

    Each message is handled while holding the sender's session lock. Known slash commands are
    dispatched here; everything else, including unknown commands, goes to the dialogue engine.
    """

    def __init__(
        self,
        *,
        sessions: SessionStore,
        engine: DialogueEngine,
        records: HealthRecords,
        advisor: HealthAdvisor,
    ) -> None:
        self._sessions = sessions
        self._engine = engine
        self._records = records
        self._advisor = advisor
        self._commands: dict[str, Callable[[Session, str], Awaitable[str]]] = {
            "help": self._help,
            "cancel": self._cancel,
            "start": self._start,
            "diagnose": self._launcher(FlowState.DIAGNOSING),
            "assessment": self._launcher(FlowState.ASSESSING),
            "fitness": self._launcher(FlowState.FITNESS),
            "meal": self._launcher(FlowState.MEAL),
            "cycle": self._cycle,
            "medication": self._medication,
            "ask": self._ask,
        }

    async def route(self, user_id: str, text: str) -> str:
        async with self._sessions.locked(user_id) as session:
            logger.info("Message received user=%s state=%s", user_id, session.flow_state.value)
            parsed = parse_command(text)
            handler = self._commands.get(parsed[0]) if parsed else None
            # Only /ask takes an argument; "/cancel please" is ordinary input.
            if parsed is None or handler is None or (parsed[1] and parsed[0] != "ask"):
                return await self._engine.handle(session, text)
            try:
                return await handler(session, parsed[1])
            except EligibilityError as e:
                logger.info("Command refused command=%s user=%s", parsed[0], user_id)
                return e.reply

    async def _require_profile(self, user_id: str) -> User:
        profile = await asyncio.to_thread(self._records.get_profile, user_id)
        if profile is None:
            raise EligibilityError(t("common.onboarding_required"))
        return profile

    # -----------------------
    # Commands
    # -----------------------

    async def _help(self, session: Session, rest: str) -> str:
        return HELP_TEXT

    async def _cancel(self, session: Session, rest: str) -> str:
        if session.is_idle:
            return t("common.nothing_to_cancel")
        logger.info("Flow cancelled state=%s user=%s", session.flow_state.value, session.user_id)
        session.reset()
        return t("common.cancelled")

    async def _start(self, session: Session, rest: str) -> str:
        if await asyncio.to_thread(self._records.user_exists, session.user_id):
            session.reset()
            return t("start.already_onboarded")
        session.enter(FlowState.AWAITING_TERMS_RESPONSE)
        return INTRODUCTION_TEXT

    def _launcher(self, state: FlowState) -> Callable[[Session, str], Awaitable[str]]:
        async def launch(session: Session, rest: str) -> str:
            await self._require_profile(session.user_id)
            return self._engine.launch(session, state)

        return launch

    async def _cycle(self, session: Session, rest: str) -> str:
        profile = await self._require_profile(session.user_id)
        cycle_type = (profile.menstrual_cycle_type or "none").lower()
        if (profile.sex or "").lower() != "female" or cycle_type == "none":
            raise EligibilityError(t("cycle.ineligible"))

        existing = await asyncio.to_thread(self._records.get_menstrual_cycle, session.user_id)
        if existing is None:
            return self._engine.launch(session, FlowState.CYCLE_TRACKING)
        session.enter(FlowState.CYCLE_UPDATE_CHOICE)
        return t(
            "cycle.existing",
            last_period=existing.last_period_date.isoformat(),
            cycle_length=existing.average_cycle_length,
            predicted=existing.predicted_next_period.isoformat(),
        )

    async def _medication(self, session: Session, rest: str) -> str:
        await self._require_profile(session.user_id)
        rows = await asyncio.to_thread(self._records.list_medication_reminders, session.user_id)
        if not rows:
            return self._engine.launch(session, FlowState.MEDICATION_SETUP)
        snapshot = medication_snapshot(rows)
        session.enter(FlowState.MEDICATION_CHOICE, answers={"reminders": snapshot})
        return render_medication_list(snapshot)

    async def _ask(self, session: Session, rest: str) -> str:
        await self._require_profile(session.user_id)
        if not rest:
            return t("ask.usage")
        answer = await asyncio.to_thread(self._advisor.answer_question, rest)
        if not answer:
            return t("ask.failed")
        return t("ask.result", question=rest, answer=answer)
