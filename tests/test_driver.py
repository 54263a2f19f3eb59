"""Tests for TickDriver using a fake clock, scripted keys and a recording renderer."""

import os
import signal
from pathlib import Path

import pytest

from work_timer.driver import KeyEvent, TickDriver
from work_timer.engine import SessionSnapshot, TimerEngine
from work_timer.history import HistoryRecord, HistoryStore

START_UNIX = 1_718_000_000


class FakeClock:
    def __init__(self) -> None:
        self.t = 0.0

    def now(self) -> float:
        return self.t

    def elapsed_since(self, start: float) -> float:
        return self.t - start

    def unix_time(self) -> int:
        return START_UNIX + int(self.t)

    def advance(self, seconds: float) -> None:
        self.t += seconds


class ScriptedKeys:
    """Returns scripted events; a None entry waits out the full period."""

    def __init__(self, clock: FakeClock, events: list, key_delay: float = 0.5) -> None:
        self.clock = clock
        self.events = list(events)
        self.key_delay = key_delay
        self.waits: list[float] = []

    def poll_event(self, max_wait: float):
        self.waits.append(max_wait)
        event = self.events.pop(0) if self.events else KeyEvent.QUIT
        if isinstance(event, BaseException):
            raise event
        if event is None:
            self.clock.advance(max_wait)
        else:
            self.clock.advance(min(self.key_delay, max_wait))
        return event


class RecordingRenderer:
    def __init__(self, clock: FakeClock | None = None, draw_cost: float = 0.0) -> None:
        self.clock = clock
        self.draw_cost = draw_cost
        self.frames: list[tuple[int, int, bool]] = []

    def draw(self, work_seconds: int, pause_seconds: int, paused: bool) -> None:
        self.frames.append((work_seconds, pause_seconds, paused))
        if self.clock is not None:
            self.clock.advance(self.draw_cost)


class BrokenRenderer:
    def draw(self, work_seconds: int, pause_seconds: int, paused: bool) -> None:
        raise RuntimeError("terminal gone")


def make_driver(events: list, store: HistoryStore | None = None, renderer=None):
    clock = FakeClock()
    keys = ScriptedKeys(clock, events)
    renderer = renderer or RecordingRenderer()
    engine = TimerEngine()
    driver = TickDriver(engine, clock, renderer, keys, store=store, period=1.0)
    return driver, clock, keys, renderer


def test_quit_immediately_saves_empty_session(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history")
    driver, _, _, renderer = make_driver([KeyEvent.QUIT], store=store)

    outcome = driver.run()

    assert outcome.saved
    assert outcome.snapshot == SessionSnapshot(0, 0, START_UNIX)
    assert renderer.frames[0] == (0, 0, False)
    assert store.read_all().records == [HistoryRecord(0, 0, START_UNIX)]


def test_work_and_pause_are_tracked(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history")
    events = [None, None, KeyEvent.PAUSE, None, KeyEvent.QUIT]
    driver, _, _, _ = make_driver(events, store=store)

    outcome = driver.run()

    assert outcome.snapshot == SessionSnapshot(work_seconds=2, pause_seconds=2, end_unix_time=START_UNIX + 4)
    assert store.read_all().records == [HistoryRecord(2, 2, START_UNIX + 4)]


def test_every_frame_sums_to_elapsed() -> None:
    events = [None, KeyEvent.PAUSE, None, None, KeyEvent.PAUSE, None, KeyEvent.OTHER, None, KeyEvent.QUIT]
    clock = FakeClock()
    keys = ScriptedKeys(clock, events)
    elapsed_at_draw = []

    class CheckingRenderer:
        def draw(self, work_seconds, pause_seconds, paused):
            elapsed_at_draw.append((work_seconds + pause_seconds, int(clock.t)))

    TickDriver(TimerEngine(), clock, CheckingRenderer(), keys, period=1.0).run()

    assert elapsed_at_draw
    for total, elapsed in elapsed_at_draw:
        assert total == elapsed


def test_paused_flag_is_drawn() -> None:
    driver, _, _, renderer = make_driver([KeyEvent.PAUSE, KeyEvent.QUIT])
    driver.run()
    assert renderer.frames[0][2] is False
    assert renderer.frames[1][2] is True


def test_wait_covers_remaining_period() -> None:
    clock = FakeClock()
    keys = ScriptedKeys(clock, [None, None, KeyEvent.QUIT])
    renderer = RecordingRenderer(clock, draw_cost=0.25)

    TickDriver(TimerEngine(), clock, renderer, keys, period=1.0).run()

    assert keys.waits == [0.75, 0.75, 0.75]


def test_slow_draw_never_waits_negative() -> None:
    clock = FakeClock()
    keys = ScriptedKeys(clock, [None, KeyEvent.QUIT])
    renderer = RecordingRenderer(clock, draw_cost=2.5)

    TickDriver(TimerEngine(), clock, renderer, keys, period=1.0).run()

    assert all(wait == 0.0 for wait in keys.waits)


def test_other_keys_are_ignored() -> None:
    driver, _, _, _ = make_driver([KeyEvent.OTHER, KeyEvent.OTHER, KeyEvent.QUIT])
    outcome = driver.run()
    assert outcome.snapshot.pause_seconds == 0


def test_final_frame_shows_finalized_totals() -> None:
    driver, _, _, renderer = make_driver([None, None, KeyEvent.QUIT])
    outcome = driver.run()
    assert renderer.frames[-1] == (outcome.snapshot.work_seconds, outcome.snapshot.pause_seconds, False)


def test_keyboard_interrupt_still_saves(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history")
    driver, _, _, _ = make_driver([None, None, KeyboardInterrupt()], store=store)

    outcome = driver.run()

    assert outcome.saved
    assert store.read_all().records[0].work_seconds == 2


def test_render_failure_does_not_stop_timer(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history")
    driver, _, _, _ = make_driver([None, KeyEvent.QUIT], store=store, renderer=BrokenRenderer())

    outcome = driver.run()

    assert outcome.saved
    assert outcome.snapshot.work_seconds == 1


def test_persistence_failure_is_returned_not_raised(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    store = HistoryStore(tmp_path)  # a directory cannot be appended to
    driver, _, _, _ = make_driver([None, KeyEvent.QUIT], store=store)

    with caplog.at_level("ERROR", logger="work_timer.driver"):
        outcome = driver.run()

    assert not outcome.saved
    assert outcome.error is not None
    assert outcome.snapshot.work_seconds == 1
    assert "Failed to save session" in caplog.text


def test_without_store_session_is_not_saved() -> None:
    driver, _, _, _ = make_driver([None, KeyEvent.QUIT])
    outcome = driver.run()
    assert not outcome.saved
    assert outcome.error is None
    assert outcome.snapshot.work_seconds == 1


def test_engine_is_finished_after_run() -> None:
    driver, _, _, _ = make_driver([KeyEvent.QUIT])
    driver.run()
    assert driver.engine.is_finished


class InterruptOnFinalDraw:
    """Raises or signals Ctrl+C on the draw made after the session ended."""

    def __init__(self, send_signal: bool = False) -> None:
        self.engine: TimerEngine | None = None
        self.send_signal = send_signal

    def draw(self, work_seconds: int, pause_seconds: int, paused: bool) -> None:
        if self.engine is None or not self.engine.is_finished:
            return
        if self.send_signal:
            os.kill(os.getpid(), signal.SIGINT)
        else:
            raise KeyboardInterrupt


def test_interrupt_during_final_draw_still_saves(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history")
    renderer = InterruptOnFinalDraw()
    driver, _, _, _ = make_driver([None, KeyEvent.QUIT], store=store, renderer=renderer)
    renderer.engine = driver.engine

    outcome = driver.run()

    assert outcome.saved
    assert store.read_all().records == [HistoryRecord(1, 0, START_UNIX + 1)]


def test_ctrl_c_signal_while_saving_is_ignored(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history")
    renderer = InterruptOnFinalDraw(send_signal=True)
    driver, _, _, _ = make_driver([KeyboardInterrupt()], store=store, renderer=renderer)
    renderer.engine = driver.engine
    handler_before = signal.getsignal(signal.SIGINT)

    outcome = driver.run()

    assert outcome.saved
    assert len(store.read_all().records) == 1
    assert signal.getsignal(signal.SIGINT) is handler_before
