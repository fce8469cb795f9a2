from __future__ import annotations

import asyncio

from aliya.core.state import FlowState, SessionStore


def test_get_creates_idle_session_lazily():
    store = SessionStore()
    assert len(store) == 0
    session = store.get("1")
    assert session.is_idle
    assert session.step_index == 0
    assert session.answers == {}
    assert store.get("1") is session
    assert len(store) == 1


def test_reset_clears_answers():
    store = SessionStore()
    session = store.get("1")
    session.enter(FlowState.DIAGNOSING, answers={"symptoms": "fever"}, step_index=1)
    store.reset("1")
    assert session.flow_state is FlowState.IDLE
    assert session.answers == {}
    assert session.step_index == 0


async def test_locked_serializes_one_user():
    store = SessionStore()
    order: list[str] = []

    async def worker(tag: str) -> None:
        async with store.locked("1") as session:
            order.append(f"{tag}-in")
            session.answers[tag] = tag
            await asyncio.sleep(0.01)
            order.append(f"{tag}-out")

    await asyncio.gather(worker("a"), worker("b"))
    assert order in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])
    assert store.get("1").answers == {"a": "a", "b": "b"}


async def test_different_users_do_not_contend():
    store = SessionStore()
    entered = asyncio.Event()

    async def holder() -> None:
        async with store.locked("1"):
            entered.set()
            await asyncio.sleep(0.05)

    async def other() -> bool:
        await entered.wait()
        async with store.locked("2"):
            return True

    task = asyncio.create_task(holder())
    assert await asyncio.wait_for(other(), timeout=0.04)
    await task
