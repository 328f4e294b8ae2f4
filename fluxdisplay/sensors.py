"""
Sensors Module

Reads temperature values from kernel-exposed sensor files
(hwmon temp*_input, thermal_zone*/temp). Values are millidegrees Celsius.
"""
import logging
from typing import Optional

logger = logging.getLogger('FluxDisplay.sensors')


def read_temp(path: str) -> Optional[float]:
    """Read a sensor file and return degrees Celsius, or None if unavailable."""
    try:
        with open(path, 'r') as f:
            content = f.read()
    except OSError as e:
        logger.warning(f"Error reading temperature from {path}: {e}")
        return None

    try:
        return float(content.strip()) / 1000.0
    except ValueError:
        logger.warning(f"Unparseable temperature in {path}: {content.strip()!r}")
        return None
