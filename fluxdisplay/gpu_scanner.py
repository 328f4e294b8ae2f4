"""
GPU Scanner Module

Detects the GPU whose temperature is shown on the display.

Probes run once at startup in a fixed order: NVIDIA (NVML), AMD (amdgpu),
Intel (i915 / xe). The first probe that succeeds provides the backend for
the whole run. When nothing is found, UnknownGpu is used and every reading
is None.
"""
import glob
import logging
import os
from typing import Iterable, Optional, Tuple

import pynvml

from .config import GPU_BACKENDS
from .sensors import read_temp

logger = logging.getLogger('FluxDisplay.gpu')

HWMON_ROOT = '/sys/class/hwmon'
DRM_ROOT = '/sys/class/drm'

AMD_DRIVERS = ('amdgpu',)
# i915 for legacy/integrated, xe for Arc and newer
INTEL_DRIVERS = ('i915', 'xe')

BACKENDS = GPU_BACKENDS


class GpuNotFound(Exception):
    """Raised by a vendor probe when no usable GPU is found."""


class Gpu:
    """Base backend. temp() returns degrees Celsius or None."""

    vendor = 'unknown'

    def temp(self) -> Optional[float]:
        return None

    def close(self):
        pass

    def __repr__(self):
        return f'{type(self).__name__}()'


class UnknownGpu(Gpu):
    pass


class NvidiaGpu(Gpu):
    """NVIDIA GPU read through NVML. Always bound to device index 0."""

    vendor = 'nvidia'

    def __init__(self, device_index: int = 0):
        self.device_index = device_index

    def temp(self) -> Optional[float]:
        try:
            handle = pynvml.nvmlDeviceGetHandleByIndex(self.device_index)
        except pynvml.NVMLError as e:
            logger.warning(f"Error getting NVIDIA GPU device: {e}")
            return None
        try:
            return float(pynvml.nvmlDeviceGetTemperature(handle, pynvml.NVML_TEMPERATURE_GPU))
        except pynvml.NVMLError as e:
            logger.warning(f"Error getting NVIDIA GPU temperature: {e}")
            return None

    def close(self):
        """Release NVML, once the last frame has been sent."""
        try:
            pynvml.nvmlShutdown()
        except pynvml.NVMLError as e:
            logger.warning(f"Error shutting down NVML: {e}")

    def __repr__(self):
        return f'NvidiaGpu(device_index={self.device_index})'


class HwmonGpu(Gpu):
    """GPU whose temperature is exposed as an hwmon temp1_input file."""

    def __init__(self, hwmon_path: str):
        self.hwmon_path = hwmon_path

    def temp(self) -> Optional[float]:
        return read_temp(self.hwmon_path)

    def __repr__(self):
        return f'{type(self).__name__}({self.hwmon_path!r})'


class AmdGpu(HwmonGpu):
    vendor = 'amd'


class IntelGpu(HwmonGpu):
    vendor = 'intel'


def _read_name(hwmon_path: str) -> Optional[str]:
    try:
        with open(os.path.join(hwmon_path, 'name'), 'r') as f:
            return f.read().strip()
    except OSError:
        return None


def find_hwmon_temp(drivers: Tuple[str, ...],
                    hwmon_root: str = HWMON_ROOT,
                    drm_root: str = DRM_ROOT) -> Optional[str]:
    """
    Find the temp1_input of a GPU driven by one of `drivers`.

    First looks for an hwmon device whose name is the driver name.
    Some kernels/drivers don't register one, so it then walks
    /sys/class/drm/*/device/hwmon/* and accepts an entry only if the
    card's device/driver symlink mentions the driver.
    """
    for hwmon_path in sorted(glob.glob(os.path.join(hwmon_root, '*'))):
        if _read_name(hwmon_path) in drivers:
            temp_path = os.path.join(hwmon_path, 'temp1_input')
            if os.path.exists(temp_path):
                return temp_path

    for card_path in sorted(glob.glob(os.path.join(drm_root, '*'))):
        device_hwmon = os.path.join(card_path, 'device', 'hwmon')
        if not os.path.isdir(device_hwmon):
            continue
        for hwmon_path in sorted(glob.glob(os.path.join(device_hwmon, '*'))):
            temp_path = os.path.join(hwmon_path, 'temp1_input')
            if not os.path.exists(temp_path):
                continue
            try:
                driver_link = os.readlink(os.path.join(card_path, 'device', 'driver'))
            except OSError:
                continue
            if any(driver in driver_link for driver in drivers):
                return temp_path

    return None


def try_get_nvidia_gpu() -> NvidiaGpu:
    try:
        pynvml.nvmlInit()
    except pynvml.NVMLError as e:
        raise GpuNotFound(f"NVML unavailable: {e}") from e

    gpu = NvidiaGpu(0)
    try:
        driver_version = pynvml.nvmlSystemGetDriverVersion()
        device_count = pynvml.nvmlDeviceGetCount()
    except pynvml.NVMLError as e:
        gpu.close()
        raise GpuNotFound(f"NVML query failed: {e}") from e

    if isinstance(driver_version, bytes):
        driver_version = driver_version.decode()
    logger.info(f"NVML initialized, driver version: {driver_version}")
    logger.info(f"Found {device_count} NVML-supported GPUs")
    return gpu


def try_get_amd_gpu(hwmon_root: str = HWMON_ROOT, drm_root: str = DRM_ROOT) -> AmdGpu:
    temp_path = find_hwmon_temp(AMD_DRIVERS, hwmon_root, drm_root)
    if temp_path is None:
        raise GpuNotFound("No AMD GPU found")
    logger.info(f"Found AMD GPU at: {temp_path}")
    return AmdGpu(temp_path)


def try_get_intel_gpu(hwmon_root: str = HWMON_ROOT, drm_root: str = DRM_ROOT) -> IntelGpu:
    temp_path = find_hwmon_temp(INTEL_DRIVERS, hwmon_root, drm_root)
    if temp_path is None:
        raise GpuNotFound("No Intel GPU found")
    logger.info(f"Found Intel GPU at: {temp_path}")
    return IntelGpu(temp_path)


def get_available_gpu(backends: Iterable[str] = BACKENDS,
                      hwmon_root: str = HWMON_ROOT,
                      drm_root: str = DRM_ROOT) -> Gpu:
    """
    Run the enabled probes in NVIDIA -> AMD -> Intel order and return the
    first backend found, or UnknownGpu.
    """
    enabled = set(backends)
    probes = (
        ('nvidia', 'NVIDIA', try_get_nvidia_gpu),
        ('amd', 'AMD', lambda: try_get_amd_gpu(hwmon_root, drm_root)),
        ('intel', 'Intel', lambda: try_get_intel_gpu(hwmon_root, drm_root)),
    )

    for key, label, probe in probes:
        if key not in enabled:
            continue
        try:
            gpu = probe()
        except GpuNotFound as e:
            logger.warning(f"Failed to get {label} GPU. Error: {e}")
            continue
        logger.info(f"Using GPU backend: {gpu!r}")
        return gpu

    logger.warning("No supported GPU found, GPU temperature will not be shown")
    return UnknownGpu()
