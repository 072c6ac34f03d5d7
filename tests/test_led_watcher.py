"""
Тести датчика стану живлення за світлодіодом.
"""

import pytest

from controllers.power_state import PinLevel, PowerState
from sensors.led_watcher import LedWatcher

from conftest import START_MS


@pytest.fixture
def events():
    return []


def make_watcher(lines, scheduler, events, poll_interval_ms=0):
    return LedWatcher(
        lines,
        scheduler,
        lambda state, ts: events.append((state, ts)),
        debounce_ms=1000,
        poll_interval_ms=poll_interval_ms
    )


def test_start_seeds_state_without_debounce(lines, scheduler, events):
    lines.input_levels['led'] = PinLevel.HIGH
    watcher = make_watcher(lines, scheduler, events)

    watcher.start()

    assert watcher.current_state == PowerState.ON
    assert events == [(PowerState.ON, START_MS)]
    assert scheduler.pending() == []


def test_bouncing_signal_commits_once_after_last_change(lines, scheduler, events):
    watcher = make_watcher(lines, scheduler, events)
    watcher.start()
    events.clear()

    # Сигнал дрижить протягом 700 мс перед тим, як стати HIGH
    for level in (PinLevel.HIGH, PinLevel.LOW, PinLevel.HIGH, PinLevel.LOW, PinLevel.HIGH):
        lines.set_input('led', level)
        scheduler.advance(175)
    last_bounce = START_MS + 4 * 175
    scheduler.advance(last_bounce + 999 - scheduler.now)

    assert events == []
    assert watcher.current_state == PowerState.OFF

    scheduler.advance(1)

    assert events == [(PowerState.ON, last_bounce + 1000)]
    assert watcher.current_state == PowerState.ON
    assert watcher.last_change == last_bounce + 1000


def test_return_to_committed_state_cancels_change(lines, scheduler, events):
    watcher = make_watcher(lines, scheduler, events)
    watcher.start()
    events.clear()

    lines.set_input('led', PinLevel.HIGH)
    scheduler.advance(500)
    lines.set_input('led', PinLevel.LOW)
    scheduler.advance(5000)

    assert events == []
    assert watcher.current_state == PowerState.OFF
    assert watcher.get_status()['debounce_pending'] is False


def test_repeated_sample_does_not_restart_timer(lines, scheduler, events):
    watcher = make_watcher(lines, scheduler, events)
    watcher.start()
    events.clear()

    watcher.handle_sample(1)
    scheduler.advance(600)
    watcher.handle_sample(1)
    scheduler.advance(400)

    assert events == [(PowerState.ON, START_MS + 1000)]


def test_polling_detects_change_without_interrupts(lines, scheduler, events):
    watcher = make_watcher(lines, scheduler, events, poll_interval_ms=500)
    watcher.start()
    events.clear()
    lines.watchers.clear()

    lines.set_input('led', PinLevel.HIGH)
    scheduler.advance(500)   # опитування бачить HIGH
    scheduler.advance(999)
    assert events == []

    scheduler.advance(1)
    assert events == [(PowerState.ON, START_MS + 1500)]


def test_read_failure_is_unknown(lines, scheduler, events):
    lines.fail_reads = True
    watcher = make_watcher(lines, scheduler, events, poll_interval_ms=500)

    watcher.start()

    assert watcher.current_state == PowerState.UNKNOWN
    assert events == []

    lines.fail_reads = False
    lines.input_levels['led'] = PinLevel.LOW
    scheduler.advance(500 + 1000)

    assert events == [(PowerState.OFF, START_MS + 1500)]


def test_unsure_level_becomes_unknown_after_debounce(lines, scheduler, events):
    watcher = make_watcher(lines, scheduler, events)
    watcher.start()
    events.clear()

    watcher.handle_sample(PinLevel.UNSURE)
    scheduler.advance(1000)

    assert watcher.current_state == PowerState.UNKNOWN
    assert events == [(PowerState.UNKNOWN, START_MS + 1000)]


def test_stop_cancels_timers(lines, scheduler, events):
    watcher = make_watcher(lines, scheduler, events, poll_interval_ms=500)
    watcher.start()
    lines.set_input('led', PinLevel.HIGH)

    watcher.stop()

    assert scheduler.pending() == []
    scheduler.advance(10_000)
    assert watcher.current_state == PowerState.OFF
