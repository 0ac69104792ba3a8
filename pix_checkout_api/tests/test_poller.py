import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest

from pix_checkout_api.app.checkout.poller import StatusPoller
from pix_checkout_api.app.checkout.session_store import SessionTransactionStore
from pix_checkout_api.app.checkout.state_machine import PaymentStateMachine
from pix_checkout_api.app.core.exceptions import NetworkError
from pix_checkout_api.app.models.transaction import PaymentStatus, StatusSnapshot, Transaction

from conftest import NOW


class ScriptedSource:
    """Devolve os resultados na ordem; o último se repete."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    async def check_status(self, transaction_id: str) -> StatusSnapshot:
        self.calls.append(transaction_id)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return StatusSnapshot(transaction_id=transaction_id, status=PaymentStatus(result))


class BlockingSource:
    """Só responde depois de ``release`` ser sinalizado."""

    def __init__(self, status: str):
        self.status = status
        self.release = asyncio.Event()
        self.calls = 0

    async def check_status(self, transaction_id: str) -> StatusSnapshot:
        self.calls += 1
        await self.release.wait()
        return StatusSnapshot(transaction_id=transaction_id, status=PaymentStatus(self.status))


@pytest.fixture
def store():
    store = SessionTransactionStore()
    store.save(
        Transaction(
            transaction_id="tx_1",
            value=Decimal("150.00"),
            pix_code="00020101021226880014br.gov.bcb.pix",
            expiration_date=NOW + timedelta(hours=24),
        )
    )
    return store


@pytest.fixture
def machine(store):
    machine = PaymentStateMachine(store=store)
    machine.adopt(store.load())
    return machine


@pytest.mark.asyncio
async def test_poll_reaches_paid_and_clears_store(machine, store, clock):
    source = ScriptedSource("WAITING_PAYMENT", "PAID")
    poller = StatusPoller(machine, source, clock=clock)

    await poller.poll_once()
    assert machine.state is PaymentStatus.WAITING_PAYMENT

    await poller.poll_once()
    assert machine.state is PaymentStatus.PAID
    assert store.load() is None
    assert source.calls == ["tx_1", "tx_1"]


@pytest.mark.asyncio
async def test_failed_checks_are_swallowed_and_retried(machine, clock):
    source = ScriptedSource(NetworkError(), NetworkError(), "PAID")
    poller = StatusPoller(machine, source, clock=clock)

    assert await poller.poll_once() is True
    assert await poller.poll_once() is True
    assert machine.state is PaymentStatus.WAITING_PAYMENT
    assert len(poller.errors) == 2

    await poller.poll_once()
    assert machine.state is PaymentStatus.PAID


@pytest.mark.asyncio
async def test_clock_tick_expires_without_gateway(machine, store, clock):
    source = ScriptedSource("WAITING_PAYMENT")
    poller = StatusPoller(machine, source, clock=clock)

    poller.tick()
    assert poller.time_left == timedelta(hours=24)

    clock.advance(hours=24)
    poller.tick()

    assert machine.state is PaymentStatus.EXPIRED
    assert poller.time_left == timedelta(0)
    assert await poller.poll_once() is False
    assert source.calls == []
    assert store.load() is not None


@pytest.mark.asyncio
async def test_poll_skipped_while_previous_check_in_flight(machine, clock):
    source = BlockingSource("WAITING_PAYMENT")
    poller = StatusPoller(machine, source, clock=clock)

    first = asyncio.create_task(poller.poll_once())
    await asyncio.sleep(0)

    assert await poller.poll_once() is False
    assert source.calls == 1

    source.release.set()
    assert await first is True


@pytest.mark.asyncio
async def test_late_result_after_expiration_is_discarded(machine, store, clock):
    source = BlockingSource("PAID")
    poller = StatusPoller(machine, source, clock=clock)

    pending = asyncio.create_task(poller.poll_once())
    await asyncio.sleep(0)

    poller.tick(NOW + timedelta(hours=25))
    assert machine.state is PaymentStatus.EXPIRED

    source.release.set()
    await pending

    assert machine.state is PaymentStatus.EXPIRED
    assert store.load() is not None


@pytest.mark.asyncio
async def test_running_poller_stops_at_terminal_state(machine, clock):
    source = ScriptedSource("WAITING_PAYMENT", "WAITING_PAYMENT", "PAID")
    ticks = []
    poller = StatusPoller(machine, source, poll_interval=0.01, tick_interval=0.01, clock=clock, on_tick=ticks.append)

    async with poller:
        assert poller.running
        state = await poller.wait_until_terminal(timeout=2)

    assert state is PaymentStatus.PAID
    assert ticks[0] == timedelta(hours=24)
    assert len(source.calls) == 3
    assert not poller.running


@pytest.mark.asyncio
async def test_leaving_context_cancels_timers(machine, clock):
    source = ScriptedSource("WAITING_PAYMENT")
    poller = StatusPoller(machine, source, poll_interval=0.01, tick_interval=0.01, clock=clock)

    async with poller:
        await asyncio.sleep(0.05)

    calls = len(source.calls)
    await asyncio.sleep(0.05)

    assert not poller.running
    assert len(source.calls) == calls
    assert machine.state is PaymentStatus.WAITING_PAYMENT


@pytest.mark.asyncio
async def test_check_now_applies_result_while_running(machine, clock):
    source = ScriptedSource("PAID")
    poller = StatusPoller(machine, source, poll_interval=60, tick_interval=60, clock=clock)

    async with poller:
        assert await poller.check_now() is PaymentStatus.PAID
        assert await poller.wait_until_terminal(timeout=1) is PaymentStatus.PAID


@pytest.mark.asyncio
async def test_start_refuses_terminal_machine(store, clock):
    machine = PaymentStateMachine(store=store)
    machine.adopt_snapshot(StatusSnapshot(transaction_id="tx_1", status=PaymentStatus.ERROR))
    poller = StatusPoller(machine, ScriptedSource("PAID"), clock=clock)

    assert await poller.start() is False
    assert not poller.running
    assert await poller.wait_until_terminal(timeout=1) is PaymentStatus.ERROR


@pytest.mark.asyncio
async def test_stop_releases_pending_manual_check(machine, clock):
    source = ScriptedSource("WAITING_PAYMENT")
    poller = StatusPoller(machine, source, poll_interval=60, tick_interval=60, clock=clock)
    await poller.start()

    manual = asyncio.create_task(poller.check_now())
    await asyncio.sleep(0)
    await poller.stop()

    assert await asyncio.wait_for(manual, 1) is PaymentStatus.WAITING_PAYMENT
    assert not poller.running


@pytest.mark.asyncio
async def test_manual_check_finishing_after_stop_is_applied_directly(machine, clock):
    source = BlockingSource("PAID")
    poller = StatusPoller(machine, source, poll_interval=60, tick_interval=60, clock=clock)
    await poller.start()

    manual = asyncio.create_task(poller.check_now())
    await asyncio.sleep(0)
    await poller.stop()
    source.release.set()

    assert await asyncio.wait_for(manual, 1) is PaymentStatus.PAID


@pytest.mark.asyncio
async def test_failing_listener_does_not_kill_consumer(machine, clock):
    def broken_listener(previous, current):
        raise RuntimeError("listener quebrado")

    machine.add_listener(broken_listener)
    source = ScriptedSource("PAID")
    poller = StatusPoller(machine, source, poll_interval=0.01, tick_interval=60, clock=clock)

    async with poller:
        assert await poller.wait_until_terminal(timeout=2) is PaymentStatus.PAID
        assert not poller.running

    assert any(isinstance(e, RuntimeError) for e in poller.errors)
