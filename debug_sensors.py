#!/usr/bin/env python3
"""Print what the display service would detect and send, without touching USB."""
import logging

from fluxdisplay import cpu_scanner, gpu_scanner, payload
from fluxdisplay.sensors import read_temp


def main():
    logging.basicConfig(level=logging.INFO, format='%(name)s - %(levelname)s - %(message)s')

    print("=== hwmon Temperature Sensors ===")
    sensors = cpu_scanner.scan_temp_sensors()
    if not sensors:
        print("No hwmon temperature sensors found.")
    for s in sensors:
        value = f"{s['value']:.1f}°C" if s['value'] is not None else 'n/a'
        print(f"{s['hwmon']:<8} {s['name']:<12} {s['label']:<20} {value:>8}  {s['path']}")

    print("\n=== CPU ===")
    cpu_path = cpu_scanner.default_cpu_device()
    cpu_temp = read_temp(cpu_path) if cpu_path else None
    print(f"Sensor: {cpu_path or 'not found'}")
    print(f"Temperature: {cpu_temp}")

    print("\n=== GPU ===")
    gpu = gpu_scanner.get_available_gpu()
    gpu_temp = gpu.temp()
    gpu.close()
    print(f"Backend: {gpu!r}")
    print(f"Temperature: {gpu_temp}")

    print("\n=== Payload ===")
    frame = payload.generate_payload(cpu_temp, gpu_temp)
    print(' '.join(f'{b:02x}' for b in frame))
    print(list(frame))


if __name__ == "__main__":
    main()
