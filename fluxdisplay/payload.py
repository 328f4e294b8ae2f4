"""
Payload Module

Encodes CPU/GPU temperatures into the 12-byte frame understood by the
display firmware:

    [85, 170, 1, 1, 6, cpu_a, cpu_b, cpu_c, gpu_a, gpu_b, gpu_c, checksum]

Each reading is three digits (tens, ones, tenths). A missing reading is
sent as 238, 238, 238. The checksum is the 8-bit sum of the first 11 bytes.
"""
import math
from typing import Optional, Tuple

HEADER = (85, 170, 1, 1, 6)
NO_SENSOR = (238, 238, 238)
PAYLOAD_SIZE = 12


def encode_temperature(temp: Optional[float]) -> Tuple[int, int, int]:
    """Split a temperature into its display digits.

    Out-of-range values wrap to a byte; None and non-finite values
    become the no-sensor sentinel.
    """
    if temp is None or not math.isfinite(temp):
        return NO_SENSOR
    return (
        math.floor(temp / 10) & 0xFF,
        math.floor(temp % 10) & 0xFF,
        math.floor((temp * 10) % 10) & 0xFF,
    )


def checksum(data) -> int:
    return sum(data) & 0xFF


def generate_payload(cpu_temp: Optional[float], gpu_temp: Optional[float]) -> bytes:
    """Build the full frame for a pair of readings."""
    frame = bytearray(HEADER)
    frame.extend(encode_temperature(cpu_temp))
    frame.extend(encode_temperature(gpu_temp))
    frame.append(checksum(frame))
    return bytes(frame)
