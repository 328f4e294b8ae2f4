"""
Flux Display Package

CPU and GPU temperature reporting for the Antec Flux Pro USB display.
"""

from . import config
from . import sensors
from . import cpu_scanner
from . import gpu_scanner
from . import payload
from . import usb_device
from . import control

# Re-export commonly used items
from .config import Settings, ConfigError, load_config, resolve_config_path
from .sensors import read_temp
from .cpu_scanner import default_cpu_device, scan_temp_sensors
from .gpu_scanner import get_available_gpu, NvidiaGpu, AmdGpu, IntelGpu, UnknownGpu
from .payload import generate_payload
from .usb_device import (
    UsbDevice,
    UsbDeviceError,
    DeviceNotFound,
    PermissionDenied,
    InterfaceClaimFailed,
    VENDOR_ID,
    PRODUCT_ID
)
from .control import ControlLoop
