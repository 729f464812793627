"""测试：ValidationRequestCoordinator（最后请求生效 + 最短展示时长）"""

import pytest

from src.application.services.validation_request_coordinator import (
    DEFAULT_MIN_DISPLAY_DURATION_MS,
    ValidationRequestCoordinator,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleeper:
    """记录等待时长，并推进假时钟"""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        self.clock.advance(seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper(clock: FakeClock) -> FakeSleeper:
    return FakeSleeper(clock)


@pytest.fixture
def coordinator(clock, sleeper) -> ValidationRequestCoordinator:
    return ValidationRequestCoordinator(clock=clock, sleeper=sleeper)


class TestPoll:
    def test_result_is_held_for_min_display_duration(self, coordinator, clock):
        ticket = coordinator.issue(lambda: "verdict")

        assert coordinator.poll(ticket) is None

        clock.advance(DEFAULT_MIN_DISPLAY_DURATION_MS / 1000)
        assert coordinator.poll(ticket) == "verdict"

    def test_superseded_ticket_never_delivers(self, coordinator, clock):
        """测试：快速连续两次请求，只有后一次的结果生效"""
        first = coordinator.issue(lambda: "first")
        second = coordinator.issue(lambda: "second")
        clock.advance(1.0)

        assert coordinator.is_latest(first) is False
        assert coordinator.poll(first) is None
        assert coordinator.poll(second) == "second"

    def test_keys_are_independent(self, coordinator, clock):
        connection = coordinator.issue(lambda: "edge", key="connection")
        graph = coordinator.issue(lambda: "graph", key="graph")
        clock.advance(1.0)

        assert coordinator.poll(connection) == "edge"
        assert coordinator.poll(graph) == "graph"

    def test_result_is_delivered_exactly_at_deadline(self, coordinator, clock):
        """测试：时钟恰好走到 issued_at + 最短展示时长时即可交付"""
        ticket = coordinator.issue(lambda: "verdict")

        clock.advance(0.8)

        assert clock() == ticket.deliver_at
        assert coordinator.remaining_seconds(ticket) == 0.0
        assert coordinator.poll(ticket) == "verdict"

    def test_remaining_seconds(self, coordinator, clock):
        ticket = coordinator.issue(lambda: None)
        clock.advance(0.3)

        assert coordinator.remaining_seconds(ticket) == pytest.approx(0.5)

        clock.advance(5)
        assert coordinator.remaining_seconds(ticket) == 0.0

    def test_discard(self, coordinator, clock):
        ticket = coordinator.issue(lambda: "x")
        coordinator.discard("default")
        clock.advance(1.0)

        assert coordinator.poll(ticket) is None

    def test_zero_duration_delivers_immediately(self, clock):
        coordinator = ValidationRequestCoordinator(min_display_duration_ms=0, clock=clock)

        ticket = coordinator.issue(lambda: 42)

        assert coordinator.poll(ticket) == 42

    def test_negative_duration_should_raise_error(self):
        with pytest.raises(ValueError, match="min_display_duration_ms"):
            ValidationRequestCoordinator(min_display_duration_ms=-1)


class TestWaitFor:
    @pytest.mark.asyncio
    async def test_waits_remaining_display_time(self, coordinator, clock, sleeper):
        ticket = coordinator.issue(lambda: "verdict")
        clock.advance(0.2)

        result = await coordinator.wait_for(ticket)

        assert result == "verdict"
        assert sleeper.calls == [pytest.approx(0.6)]

    @pytest.mark.asyncio
    async def test_no_sleep_when_duration_already_elapsed(self, coordinator, clock, sleeper):
        ticket = coordinator.issue(lambda: "verdict")
        clock.advance(2.0)

        assert await coordinator.wait_for(ticket) == "verdict"
        assert sleeper.calls == []

    @pytest.mark.asyncio
    async def test_superseded_ticket_returns_none(self, coordinator, sleeper):
        first = coordinator.issue(lambda: "first")
        coordinator.issue(lambda: "second")

        assert await coordinator.wait_for(first) is None
        assert sleeper.calls == []

    @pytest.mark.asyncio
    async def test_ticket_superseded_while_waiting(self, clock):
        coordinator: ValidationRequestCoordinator

        async def sleeper(seconds: float) -> None:
            clock.advance(seconds)
            coordinator.issue(lambda: "newer")

        coordinator = ValidationRequestCoordinator(clock=clock, sleeper=sleeper)
        ticket = coordinator.issue(lambda: "older")

        assert await coordinator.wait_for(ticket) is None
