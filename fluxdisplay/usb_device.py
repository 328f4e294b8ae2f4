"""
USB Device Module

Owns the connection to the Antec Flux Pro temperature display
(VID 0x2022, PID 0x0522). The device is opened and interface 0 claimed
once at startup; frames are then written to its interrupt OUT endpoint.
"""
import errno
import logging
from typing import Optional

import usb.core
import usb.util

from .payload import generate_payload

logger = logging.getLogger('FluxDisplay.usb')

VENDOR_ID = 0x2022
PRODUCT_ID = 0x0522

INTERFACE = 0
FALLBACK_ENDPOINT = 0x03
WRITE_TIMEOUT_MS = 1000


class UsbDeviceError(Exception):
    """Startup failure that makes talking to the display impossible."""


class DeviceNotFound(UsbDeviceError):
    pass


class PermissionDenied(UsbDeviceError):
    pass


class InterfaceClaimFailed(UsbDeviceError):
    pass


def _is_access_error(e: usb.core.USBError) -> bool:
    return e.errno in (errno.EACCES, errno.EPERM)


def find_out_endpoint(dev) -> int:
    """Return the address of the first interrupt OUT endpoint, or 0x03."""
    try:
        cfg = dev.get_active_configuration()
        for interface in cfg:
            for endpoint in interface:
                if (usb.util.endpoint_type(endpoint.bmAttributes) == usb.util.ENDPOINT_TYPE_INTR
                        and usb.util.endpoint_direction(endpoint.bEndpointAddress) == usb.util.ENDPOINT_OUT):
                    return endpoint.bEndpointAddress
    except usb.core.USBError as e:
        logger.warning(f"Could not read configuration descriptor: {e}")

    logger.warning(f"No interrupt OUT endpoint found, using 0x{FALLBACK_ENDPOINT:02x}")
    return FALLBACK_ENDPOINT


class UsbDevice:
    """Claimed display device with a cached OUT endpoint."""

    def __init__(self, dev, endpoint: int):
        self.dev = dev
        self.endpoint = endpoint

    @classmethod
    def open(cls, vendor_id: int = VENDOR_ID, product_id: int = PRODUCT_ID) -> 'UsbDevice':
        """
        Find the device, detach any kernel driver from interface 0,
        claim it and look up the OUT endpoint.

        Raises DeviceNotFound, PermissionDenied or InterfaceClaimFailed.
        """
        ids = f"{vendor_id:04x}:{product_id:04x}"

        # Enumeration only reads descriptors, so a visible device that
        # fails below with EACCES is a udev/permissions problem.
        dev = usb.core.find(idVendor=vendor_id, idProduct=product_id)
        if dev is None:
            raise DeviceNotFound(
                f"USB device not found. Is it connected? Looking for device {ids}"
            )

        try:
            driver_active = dev.is_kernel_driver_active(INTERFACE)
        except usb.core.USBError as e:
            if _is_access_error(e):
                raise PermissionDenied(
                    f"Permission denied accessing USB device {ids}. "
                    "Please ensure udev rules are properly configured."
                ) from e
            driver_active = False
        except NotImplementedError:
            # libusb backends without kernel driver support
            driver_active = False

        if driver_active:
            try:
                dev.detach_kernel_driver(INTERFACE)
            except usb.core.USBError as e:
                logger.debug(f"Could not detach kernel driver: {e}")

        try:
            usb.util.claim_interface(dev, INTERFACE)
        except usb.core.USBError as e:
            if _is_access_error(e):
                raise PermissionDenied(
                    f"Permission denied accessing USB device {ids}. "
                    "Please ensure udev rules are properly configured."
                ) from e
            raise InterfaceClaimFailed(f"Error claiming interface: {e}") from e

        endpoint = find_out_endpoint(dev)
        logger.info(f"USB device opened, endpoint: 0x{endpoint:02x}")
        return cls(dev, endpoint)

    def write(self, payload: bytes) -> bool:
        # pyusb raises ValueError for an endpoint missing from the active
        # configuration, e.g. the 0x03 fallback
        try:
            self.dev.write(self.endpoint, payload, timeout=WRITE_TIMEOUT_MS)
            return True
        except (usb.core.USBError, ValueError) as e:
            logger.error(f"Error writing to USB device: {e}")
            return False

    def send_payload(self, cpu_temp: Optional[float], gpu_temp: Optional[float]) -> bool:
        """Encode and send one frame. Failures are logged, never raised."""
        return self.write(generate_payload(cpu_temp, gpu_temp))
