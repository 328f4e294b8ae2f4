"""Tests for the poll/transmit loop."""
import os
import signal
from unittest import mock

import pytest

from fluxdisplay import control
from fluxdisplay.control import ControlLoop
from fluxdisplay.gpu_scanner import UnknownGpu
from fluxdisplay.payload import generate_payload


class FakeDevice:
    def __init__(self, on_send=None):
        self.sent = []
        self.on_send = on_send

    def send_payload(self, cpu_temp, gpu_temp):
        self.sent.append(generate_payload(cpu_temp, gpu_temp))
        if self.on_send:
            self.on_send(len(self.sent))
        return True


ZERO_FRAME = bytes([85, 170, 1, 1, 6, 0, 0, 0, 0, 0, 0, 7])


@pytest.fixture(autouse=True)
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(control.time, 'sleep', calls.append)
    return calls


def test_stop_before_run_sends_only_zero_frame():
    device = FakeDevice()
    loop = ControlLoop(device, UnknownGpu(), None, 100)
    loop.stop()

    loop.run()

    assert device.sent == [ZERO_FRAME]


def test_polls_until_stopped(tmp_path):
    cpu = tmp_path / 'temp1_input'
    cpu.write_text('24000\n')
    gpu = mock.Mock()
    gpu.temp.return_value = 16.0

    loop = None

    def on_send(count):
        if count == 3:
            loop.stop()

    device = FakeDevice(on_send)
    loop = ControlLoop(device, gpu, str(cpu), 100)
    loop.run()

    assert device.sent[:3] == [generate_payload(24.0, 16.0)] * 3
    assert device.sent[3:] == [ZERO_FRAME]
    assert gpu.temp.call_count == 3


def test_absent_readings_use_sentinel():
    device = FakeDevice()
    loop = ControlLoop(device, UnknownGpu(), None, 100)

    loop.poll_once()

    assert list(device.sent[0][5:11]) == [238] * 6


def test_unreadable_cpu_sensor(tmp_path):
    device = FakeDevice()
    loop = ControlLoop(device, UnknownGpu(), str(tmp_path / 'missing'), 100)

    loop.poll_once()

    assert device.sent == [generate_payload(None, None)]


def test_sleeps_polling_interval(sleeps):
    loop = None
    device = FakeDevice(lambda count: loop.stop() if count == 2 else None)
    loop = ControlLoop(device, UnknownGpu(), None, 1500)

    loop.run()

    assert sleeps == [1.5, 1.5]


@pytest.mark.skipif(not hasattr(signal, 'SIGUSR1'), reason='needs POSIX signals')
def test_stop_from_signal_handler_during_sleep(monkeypatch):
    device = FakeDevice()
    loop = ControlLoop(device, UnknownGpu(), None, 60000)

    # deliver the signal to this thread while the loop is sleeping
    monkeypatch.setattr(control.time, 'sleep', lambda seconds: os.kill(os.getpid(), signal.SIGUSR1))
    previous = signal.signal(signal.SIGUSR1, lambda sig, frame: loop.stop())
    try:
        loop.run()
    finally:
        signal.signal(signal.SIGUSR1, previous)

    assert loop.running is False
    assert device.sent == [generate_payload(None, None), ZERO_FRAME]
