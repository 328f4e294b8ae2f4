"""
Control Loop Module

Polls the CPU sensor and GPU backend and pushes a frame to the display
every polling interval until stopped. On exit a final 0.0 / 0.0 frame is
sent so the display goes dark instead of freezing on the last reading.
"""
import logging
import time
from typing import Optional

from .sensors import read_temp

logger = logging.getLogger('FluxDisplay.control')


class ControlLoop:
    """Poll/transmit loop.

    stop() only assigns a bool, so it can run from a signal handler that
    interrupts the loop at any point. The flag is checked once per
    iteration; a stop takes effect within one polling interval.
    """

    def __init__(self, device, gpu, cpu_path: Optional[str], polling_interval: int):
        self.device = device
        self.gpu = gpu
        self.cpu_path = cpu_path
        self.polling_interval = polling_interval
        self.running = True

    def stop(self):
        self.running = False

    def read_cpu_temp(self) -> Optional[float]:
        if not self.cpu_path:
            return None
        return read_temp(self.cpu_path)

    def poll_once(self):
        cpu_temp = self.read_cpu_temp()
        gpu_temp = self.gpu.temp()
        logger.debug(f"CPU: {cpu_temp} GPU: {gpu_temp}")
        self.device.send_payload(cpu_temp, gpu_temp)

    def run(self):
        logger.info(f"Polling every {self.polling_interval}ms")

        while self.running:
            self.poll_once()
            time.sleep(self.polling_interval / 1000.0)

        logger.info("Stopping, clearing display")
        self.device.send_payload(0.0, 0.0)
