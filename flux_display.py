#!/usr/bin/env python3
"""
Antec Flux Pro display service.

Sends CPU and GPU temperatures to the case display until SIGINT/SIGTERM.
"""
import argparse
import logging
import signal
import sys

from fluxdisplay import config, cpu_scanner, gpu_scanner, usb_device
from fluxdisplay.control import ControlLoop

logger = logging.getLogger('FluxDisplay')


def setup_logging(verbose=False, log_file=None):
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Antec Flux Pro temperature display service')
    parser.add_argument('-c', '--config', help='path to config.toml')
    parser.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    parser.add_argument('--log-file', help='also write logs to this file')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    logger.info("Starting Flux Display Service")

    try:
        settings = config.load_config(config.resolve_config_path(args.config))
    except config.ConfigError as e:
        logger.error(str(e))
        return 1

    try:
        device = usb_device.UsbDevice.open(usb_device.VENDOR_ID, usb_device.PRODUCT_ID)
    except usb_device.UsbDeviceError as e:
        logger.error(str(e))
        return 1

    cpu_path = settings.cpu_device or cpu_scanner.default_cpu_device()
    gpu = gpu_scanner.get_available_gpu(settings.gpu_backends)

    loop = ControlLoop(device, gpu, cpu_path, settings.polling_interval)

    def signal_handler(sig, frame):
        logger.info("Stopping flux display service...")
        loop.stop()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        loop.run()
    finally:
        gpu.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
