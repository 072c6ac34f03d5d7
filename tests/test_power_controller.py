"""
Тести контролера живлення з симульованими лініями та ручним часом.
"""

import pytest

import controllers.power_controller as power_controller_module
from controllers.errors import HardwareUnavailable
from controllers.power_controller import PowerController
from controllers.power_state import PinLevel, PowerState

from conftest import START_MS


@pytest.fixture
def controller(config, history, scheduler, lines):
    ctrl = PowerController(config, history, scheduler=scheduler, lines=lines)
    ctrl.start()
    yield ctrl
    ctrl.shutdown()


def button_writes(lines):
    return [(name, level) for _, name, level in lines.writes]


def test_start_records_initial_state(controller, history):
    assert controller.started
    assert controller.current_state == PowerState.OFF
    events = [evt for day in history.get_event_history() for evt in day]
    assert [(evt.state, evt.timestamp) for evt in events] == [(PowerState.OFF, START_MS)]


def test_request_current_state_is_noop(controller, lines):
    result = controller.request_state(0)

    assert result.success
    assert result.message == 'Nothing to do'
    assert result.data == {'currentState': 0}
    assert lines.writes == []


def test_request_unchanged_is_noop(controller, lines):
    result = controller.request_state(-2)

    assert result.success
    assert lines.writes == []


def test_request_on_presses_power(controller, lines, scheduler):
    result = controller.request_state(1)

    assert result.success
    assert result.data['duration_ms'] == 200
    assert lines.outputs['power'] is PinLevel.HIGH

    scheduler.advance(200)
    assert button_writes(lines) == [('power', PinLevel.HIGH), ('power', PinLevel.LOW)]


def test_request_off_holds_power(controller, lines, scheduler):
    lines.set_input('led', PinLevel.HIGH)
    scheduler.advance(1000)
    assert controller.current_state == PowerState.ON

    result = controller.request_state('off')

    assert result.success
    assert result.data['duration_ms'] == 5000
    scheduler.advance(4999)
    assert lines.outputs['power'] is PinLevel.HIGH
    scheduler.advance(1)
    assert lines.outputs['power'] is PinLevel.LOW


@pytest.mark.parametrize('goal', [-1, 7, 'sideways', None, True])
def test_request_unknown_goal(controller, lines, goal):
    result = controller.request_state(goal)

    assert not result.success
    assert result.code == 400
    assert result.error == 'Bad Goal State'
    assert lines.writes == []


def test_state_change_is_recorded_in_history(controller, lines, scheduler, history):
    lines.set_input('led', PinLevel.HIGH)
    scheduler.advance(1000)

    info = controller.get_info()
    assert info['currentState'] == 1
    assert len(info['summary']) == 7
    days = controller.get_history()
    assert {'timestamp': START_MS + 1000, 'state': 1} in days[1]


def test_shutdown_releases_lines_and_timers(config, history, scheduler, lines):
    ctrl = PowerController(config, history, scheduler=scheduler, lines=lines)
    ctrl.start()
    ctrl.hold_button('reset')
    lines.set_input('led', PinLevel.HIGH)

    ctrl.shutdown()

    assert ('reset', PinLevel.LOW) in button_writes(lines)
    assert ('power', PinLevel.LOW) in button_writes(lines)
    assert lines.outputs == {}
    assert lines.inputs == set()
    assert scheduler.pending() == []

    # Повторний виклик безпечний
    ctrl.shutdown()


def test_shutdown_without_start(config, history, scheduler):
    ctrl = PowerController(config, history, scheduler=scheduler)

    ctrl.shutdown()

    assert not ctrl.started


def test_shutdown_after_failed_start(config, history, scheduler, monkeypatch):
    def broken_open_lines(cfg):
        raise HardwareUnavailable("no gpio")

    monkeypatch.setattr(power_controller_module, 'open_lines', broken_open_lines)
    ctrl = PowerController(config, history, scheduler=scheduler)

    with pytest.raises(HardwareUnavailable):
        ctrl.start()
    ctrl.shutdown()

    assert not ctrl.started
    result = ctrl.press_button('power')
    assert result.code == 503


def test_start_with_corrupt_history_file(config, history, store, scheduler, lines):
    store.path.parent.mkdir(parents=True)
    store.path.write_bytes(b'\xff\xfe\x00garbage')
    ctrl = PowerController(config, history, scheduler=scheduler, lines=lines)

    ctrl.start()
    try:
        assert ctrl.started
        events = [evt for day in history.get_event_history() for evt in day]
        assert [(evt.state, evt.timestamp) for evt in events] == [(PowerState.OFF, START_MS)]
    finally:
        ctrl.shutdown()


def test_start_opens_simulated_lines_in_test_mode(config, history, scheduler):
    ctrl = PowerController(config, history, scheduler=scheduler)
    ctrl.start()
    try:
        assert ctrl.lines.simulated
        assert ctrl.get_status()['simulated'] is True
        assert ctrl.current_state == PowerState.OFF
    finally:
        ctrl.shutdown()


def test_wake_without_command(controller):
    result = controller.wake()

    assert result.code == 501
    assert result.error == 'Not Implemented'


def test_wake_runs_configured_command(controller, monkeypatch):
    calls = []
    monkeypatch.setattr(power_controller_module, 'run_detached', lambda command: calls.append(command))
    controller.wake_command = 'wakeonlan 78:24:AF:45:2F:6E'

    result = controller.wake()

    assert result.success
    assert result.message == 'Sent wake command'
    assert calls == ['wakeonlan 78:24:AF:45:2F:6E']


def test_wake_launch_failure(controller, monkeypatch):
    def missing(command):
        raise FileNotFoundError(command)

    monkeypatch.setattr(power_controller_module, 'run_detached', missing)
    controller.wake_command = 'no-such-binary'

    result = controller.wake()

    assert result.code == 500
