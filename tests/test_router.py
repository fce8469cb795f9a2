from __future__ import annotations

import pytest

from aliya.bot.text import HELP_TEXT
from aliya.core.flows import DIAGNOSIS, FITNESS
from aliya.core.i18n import t
from aliya.core.state import FlowState
from aliya.bot.router import parse_command


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("/help", ("help", "")),
        ("/HELP@AliyaHealthBot", ("help", "")),
        ("  /ask  What is a balanced diet? ", ("ask", "What is a balanced diet?")),
        ("/ask@AliyaHealthBot why sleep?", ("ask", "why sleep?")),
        ("help", None),
        ("29", None),
    ],
)
def test_parse_command(text, expected):
    assert parse_command(text) == expected


async def test_help_does_not_touch_state(router, sessions):
    await router.route("100", "/start")
    assert await router.route("100", "/help") == HELP_TEXT
    assert sessions.get("100").flow_state is FlowState.AWAITING_TERMS_RESPONSE


async def test_cancel(router, sessions):
    assert await router.route("100", "/cancel") == t("common.nothing_to_cancel")
    await router.route("100", "/start")
    await router.route("100", "accept")
    await router.route("100", "Jane")
    assert await router.route("100", "/Cancel") == t("common.cancelled")
    session = sessions.get("100")
    assert session.is_idle
    assert session.answers == {}


async def test_start_when_already_onboarded(onboard, router, sessions):
    await onboard()
    assert await router.route("100", "/start") == t("start.already_onboarded")
    assert sessions.get("100").is_idle


async def test_flow_commands_require_onboarding(router, sessions):
    for command in ("/diagnose", "/assessment", "/fitness", "/meal", "/cycle", "/medication", "/ask hi"):
        assert await router.route("100", command) == t("common.onboarding_required")
    assert sessions.get("100").is_idle


async def test_eligibility_refusal_keeps_current_state(router, sessions):
    await router.route("100", "/start")
    await router.route("100", "/diagnose")
    assert sessions.get("100").flow_state is FlowState.AWAITING_TERMS_RESPONSE


async def test_flow_commands_launch_for_onboarded_users(onboard, router, sessions):
    await onboard()
    assert await router.route("100", "/Diagnose") == DIAGNOSIS.steps[0].prompt
    assert sessions.get("100").flow_state is FlowState.DIAGNOSING
    # A new command abandons the flow in progress.
    assert await router.route("100", "/fitness") == FITNESS.steps[0].prompt
    session = sessions.get("100")
    assert session.flow_state is FlowState.FITNESS
    assert session.step_index == 0


async def test_cycle_is_refused_for_male_users(onboard, router, sessions):
    await onboard(sex="male")
    assert await router.route("100", "/cycle") == t("cycle.ineligible")
    assert sessions.get("100").flow_state is FlowState.AWAITING_ASSESSMENT_CHOICE


async def test_cycle_is_refused_without_a_cycle(onboard, router):
    await onboard(cycle_type="none")
    assert await router.route("100", "/cycle") == t("cycle.ineligible")


async def test_ask(onboard, router, sessions, advisor):
    await onboard()
    await router.route("100", "never")
    assert await router.route("100", "/ask") == t("ask.usage")

    reply = await router.route("100", "/ask What is a balanced diet?")
    assert reply == t("ask.result", question="What is a balanced diet?", answer="Answer: plenty of vegetables")
    assert advisor.calls[-1] == ("answer_question", {"question": "What is a balanced diet?"})
    assert sessions.get("100").is_idle


async def test_ask_does_not_change_flow_in_progress(onboard, router, sessions, advisor):
    await onboard()
    await router.route("100", "/diagnose")
    await router.route("100", "fever")
    advisor.fail = True
    assert await router.route("100", "/ask is fever bad?") == t("ask.failed")
    session = sessions.get("100")
    assert session.flow_state is FlowState.DIAGNOSING
    assert session.step_index == 1


async def test_unknown_command_goes_to_engine(router):
    assert await router.route("100", "/dance") == t("common.unknown_input")


async def test_users_are_isolated(onboard, router, sessions):
    await onboard("1")
    await router.route("2", "/start")
    assert sessions.get("1").flow_state is FlowState.AWAITING_ASSESSMENT_CHOICE
    assert sessions.get("2").flow_state is FlowState.AWAITING_TERMS_RESPONSE


async def test_trailing_text_turns_a_command_into_input(onboard, router, sessions):
    await onboard()
    await router.route("100", "never")
    assert await router.route("100", "/diagnose fever") == t("common.unknown_input")
    assert sessions.get("100").is_idle

    await router.route("100", "/diagnose")
    assert await router.route("100", "/cancel please") == DIAGNOSIS.steps[1].prompt
    session = sessions.get("100")
    assert session.flow_state is FlowState.DIAGNOSING
    assert session.answers["symptoms"] == "/cancel please"
