"""
Тести завантаження та валідації конфігурації.
"""

import pytest

from utils.config_manager import DEFAULT_CONFIG, ConfigManager


def write_config(tmp_path, text):
    path = tmp_path / 'config.yaml'
    path.write_text(text, encoding='utf-8')
    return str(path)


def test_defaults_without_file():
    config = ConfigManager(None)

    assert config.get('gpio.power_pin') == 24
    assert config.get('gpio.reset_pin') == 23
    assert config.get('gpio.led_pin') == 18
    assert config.get('timing.debounce_ms') == 1000
    assert config.get('api.port') == 8084
    assert config.get('wake.command') is None
    assert not config.is_test_mode()
    assert config.validate()


def test_file_overrides_defaults(tmp_path):
    path = write_config(tmp_path, "gpio:\n  led_pin: 17\ntiming:\n  debounce_ms: 250\n")

    config = ConfigManager(path)

    assert config.get('gpio.led_pin') == 17
    assert config.get('gpio.power_pin') == 24
    assert config.get('timing.debounce_ms') == 250
    assert config.get('timing.hold_duration_ms') == 5000


def test_overrides_win_and_defaults_are_not_mutated():
    config = ConfigManager(None, overrides={'gpio': {'power_pin': 5}, 'test_mode': {'enabled': True}})
    config.config['timing']['debounce_ms'] = 1

    assert config.get('gpio.power_pin') == 5
    assert config.get('gpio.led_pin') == 18
    assert config.is_test_mode()
    assert DEFAULT_CONFIG['gpio']['power_pin'] == 24
    assert DEFAULT_CONFIG['timing']['debounce_ms'] == 1000
    assert DEFAULT_CONFIG['test_mode']['enabled'] is False


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        ConfigManager('/nonexistent/config.yaml')


def test_invalid_yaml(tmp_path):
    path = write_config(tmp_path, "gpio: [unclosed\n")

    with pytest.raises(ValueError):
        ConfigManager(path)


def test_get_missing_key_returns_default():
    config = ConfigManager(None)

    assert config.get('gpio.nothing', 'x') == 'x'
    assert config.get('no.such.section') is None
    assert config.get_section('nothing') == {}


@pytest.mark.parametrize('overrides', [
    {'gpio': {'power_pin': 18}},
    {'gpio': {'reset_pin': 'twenty'}},
    {'timing': {'debounce_ms': 0}},
    {'timing': {'poll_interval_ms': -1}},
    {'test_mode': {'led_level': 'MAYBE'}},
])
def test_validate_rejects_bad_values(overrides):
    config = ConfigManager(None, overrides=overrides)

    with pytest.raises(ValueError):
        config.validate()


def test_reload_reads_file_again(tmp_path):
    path = write_config(tmp_path, "api:\n  port: 9000\n")
    config = ConfigManager(path)
    assert config.get('api.port') == 9000

    write_config(tmp_path, "api:\n  port: 9001\n")
    config.reload()

    assert config.get('api.port') == 9001
