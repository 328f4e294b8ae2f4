"""
CPU Temperature Sensor Scanner Module

Scans for temperature sensors in /sys/class/hwmon and the thermal zones.
Provides functions for discovering and listing CPU temperature sensors.
"""
import glob
import logging
import os
from typing import List, Dict, Optional

from .sensors import read_temp

logger = logging.getLogger('FluxDisplay.cpu')

HWMON_ROOT = '/sys/class/hwmon'
THERMAL_ZONE0_TEMP = '/sys/class/thermal/thermal_zone0/temp'
HWMON0_TEMP = '/sys/class/hwmon/hwmon0/temp1_input'

# AMD k10temp label for the die control temperature
CPU_LABEL = 'Tctl'


def _read_line(path: str) -> Optional[str]:
    try:
        with open(path, 'r') as f:
            return f.read().strip()
    except OSError:
        return None


def _is_readable(path: str) -> bool:
    try:
        with open(path, 'r') as f:
            f.read()
        return True
    except OSError:
        return False


def default_cpu_device(hwmon_root: str = HWMON_ROOT,
                       thermal_zone: str = THERMAL_ZONE0_TEMP,
                       hwmon0: str = HWMON0_TEMP) -> Optional[str]:
    """
    Automatically detect the CPU temperature sensor.

    Order:
      1. hwmon device whose temp1_label is 'Tctl' (AMD CPUs)
      2. thermal_zone0
      3. hwmon0/temp1_input
    Returns path to the sensor or None.
    """
    for hwmon_path in sorted(glob.glob(os.path.join(hwmon_root, '*'))):
        if _read_line(os.path.join(hwmon_path, 'temp1_label')) == CPU_LABEL:
            path = os.path.join(hwmon_path, 'temp1_input')
            logger.info(f"Found {CPU_LABEL} CPU sensor at: {path}")
            return path

    if _is_readable(thermal_zone):
        logger.info(f"Using thermal zone CPU sensor: {thermal_zone}")
        return thermal_zone

    if _is_readable(hwmon0):
        logger.info(f"Using hwmon0 CPU sensor: {hwmon0}")
        return hwmon0

    logger.warning("Could not find CPU temp path")
    return None


def scan_temp_sensors(hwmon_root: str = HWMON_ROOT) -> List[Dict]:
    """
    Scan all temperature sensors in /sys/class/hwmon.

    Returns list of:
    {
        'path': '/sys/class/hwmon/hwmon2/temp1_input',
        'hwmon': 'hwmon2',
        'name': 'k10temp',
        'label': 'Tctl',
        'value': 45.0
    }
    """
    sensors = []

    for hwmon_path in sorted(glob.glob(os.path.join(hwmon_root, 'hwmon*'))):
        name = _read_line(os.path.join(hwmon_path, 'name')) or ''

        for temp_input in sorted(glob.glob(os.path.join(hwmon_path, 'temp*_input'))):
            temp_id = os.path.basename(temp_input).replace('_input', '')
            label = _read_line(temp_input.replace('_input', '_label'))

            sensors.append({
                'path': temp_input,
                'hwmon': os.path.basename(hwmon_path),
                'name': name,
                'label': label or f'{name} {temp_id}'.strip(),
                'value': read_temp(temp_input)
            })

    return sensors
