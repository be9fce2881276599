from pydantic import ValidationError
import pytest

from udpping.probe import Config


def test_defaults():
    config = Config()

    assert "0.0.0.0" == config.host
    assert 5555 == config.port
    assert 1000 == config.interval
    assert 64 == config.packet_size
    assert not config.server_mode
    assert config.count is None
    assert 1.0 == config.interval_seconds


@pytest.mark.parametrize('kwargs', [
    {'port': 0},
    {'port': 70000},
    {'interval': 9},
    {'packet_size': 63},
    {'packet_size': 1501},
    {'count': 0},
])
def test_invalid_values(kwargs):
    with pytest.raises(ValidationError):
        Config(**kwargs)


def test_bounds_are_inclusive():
    config = Config(port=65535, interval=10, packet_size=1500)
    assert 0.01 == config.interval_seconds
