"""Tests for the service entry point."""
from unittest import mock

import pytest

import flux_display
from fluxdisplay import usb_device


@pytest.fixture(autouse=True)
def no_signals(monkeypatch):
    handlers = {}
    monkeypatch.setattr(flux_display.signal, 'signal', lambda sig, handler: handlers.__setitem__(sig, handler))
    return handlers


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / 'config.toml'
    path.write_text('polling_interval = 100\n')
    return str(path)


def test_device_not_found_exits_nonzero(monkeypatch, config_path, caplog):
    monkeypatch.setattr(usb_device.usb.core, 'find', lambda **kwargs: None)

    assert flux_display.main(['--config', config_path]) == 1
    assert 'USB device not found' in caplog.text


def test_bad_config_exits_nonzero(tmp_path):
    path = tmp_path / 'config.toml'
    path.write_text('polling_interval = "fast"\n')

    assert flux_display.main(['-c', str(path)]) == 1


def test_runs_until_signal(monkeypatch, config_path, no_signals):
    device = mock.Mock()
    gpu = mock.Mock()
    gpu.temp.return_value = None
    monkeypatch.setattr(usb_device.UsbDevice, 'open', classmethod(lambda cls, vid, pid: device))
    monkeypatch.setattr(flux_display.cpu_scanner, 'default_cpu_device', lambda: None)
    monkeypatch.setattr(flux_display.gpu_scanner, 'get_available_gpu', lambda backends: gpu)

    def send(cpu_temp, gpu_temp):
        if device.send_payload.call_count == 2:
            no_signals[flux_display.signal.SIGTERM](flux_display.signal.SIGTERM, None)

    device.send_payload.side_effect = send

    assert flux_display.main(['--config', config_path]) == 0

    calls = device.send_payload.call_args_list
    assert calls[0] == mock.call(None, None)
    assert calls[-1] == mock.call(0.0, 0.0)
    assert len(calls) == 3
    gpu.close.assert_called_once_with()
