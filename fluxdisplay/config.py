"""
Configuration Module

Handles config file location, loading and validation.

Example config.toml:

    cpu_device = "/sys/class/hwmon/hwmon2/temp1_input"
    polling_interval = 1000
    gpu_backends = ["nvidia", "amd", "intel"]
"""
import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger('FluxDisplay.config')

SYSTEM_CONFIG_PATH = Path('/etc/antec-flux-pro-display/config.toml')
USER_CONFIG_PATH = Path('~/.config/antec-flux-pro-display/config.toml')

DEFAULT_POLLING_INTERVAL = 1000
# Below 100ms floods the USB bus, above 60s the display goes stale
MIN_POLLING_INTERVAL = 100
MAX_POLLING_INTERVAL = 60000

# GPU probes, in the order they are tried
GPU_BACKENDS = ('nvidia', 'amd', 'intel')


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class Settings:
    cpu_device: Optional[str] = None
    polling_interval: int = DEFAULT_POLLING_INTERVAL
    gpu_backends: Tuple[str, ...] = GPU_BACKENDS


def resolve_config_path(cli_path: Optional[str] = None,
                        system_path: Path = SYSTEM_CONFIG_PATH,
                        user_path: Path = USER_CONFIG_PATH) -> Path:
    """CLI argument, then the system config if present, then the user config."""
    if cli_path:
        return Path(cli_path).expanduser()
    if system_path.exists():
        return system_path
    return user_path.expanduser()


def parse_config(data: dict) -> Settings:
    """Build Settings from a parsed TOML table. Unknown keys are ignored."""
    cpu_device = data.get('cpu_device')
    if cpu_device is not None and not isinstance(cpu_device, str):
        raise ConfigError(f"cpu_device must be a string, got {cpu_device!r}")

    polling_interval = data.get('polling_interval', DEFAULT_POLLING_INTERVAL)
    if isinstance(polling_interval, bool) or not isinstance(polling_interval, int):
        raise ConfigError(f"polling_interval must be an integer, got {polling_interval!r}")

    gpu_backends = data.get('gpu_backends', list(GPU_BACKENDS))
    if not isinstance(gpu_backends, list) or not all(isinstance(b, str) for b in gpu_backends):
        raise ConfigError(f"gpu_backends must be a list of strings, got {gpu_backends!r}")

    return Settings(cpu_device=cpu_device,
                    polling_interval=polling_interval,
                    gpu_backends=tuple(gpu_backends))


def validated(settings: Settings) -> Settings:
    """Clamp and sanitize values, warning about every correction."""
    polling_interval = settings.polling_interval
    if polling_interval < MIN_POLLING_INTERVAL:
        logger.warning(f"polling_interval {polling_interval}ms too low "
                       f"(min {MIN_POLLING_INTERVAL}ms), using {MIN_POLLING_INTERVAL}ms")
        polling_interval = MIN_POLLING_INTERVAL
    elif polling_interval > MAX_POLLING_INTERVAL:
        logger.warning(f"polling_interval {polling_interval}ms too high "
                       f"(max 60s), using {MAX_POLLING_INTERVAL}ms")
        polling_interval = MAX_POLLING_INTERVAL

    # Only sysfs paths are accepted, to avoid reading arbitrary files
    cpu_device = settings.cpu_device
    if cpu_device is not None:
        valid = (cpu_device.startswith('/sys/')
                 and '..' not in cpu_device
                 and os.path.exists(cpu_device))
        if not valid:
            logger.warning(f"cpu_device '{cpu_device}' invalid or not found, using auto-detection")
            cpu_device = None
        elif 'temp' not in cpu_device:
            logger.warning(f"cpu_device '{cpu_device}' doesn't look like a temperature sensor")

    gpu_backends = []
    for backend in settings.gpu_backends:
        name = backend.strip().lower()
        if name not in GPU_BACKENDS:
            logger.warning(f"Unknown GPU backend '{backend}' ignored")
        elif name not in gpu_backends:
            gpu_backends.append(name)

    return replace(settings,
                   cpu_device=cpu_device,
                   polling_interval=polling_interval,
                   gpu_backends=tuple(gpu_backends))


def load_config(path: Path) -> Settings:
    """Load and validate settings from `path`, or defaults if it doesn't exist."""
    if not path.exists():
        logger.warning(f"Config file not found at: {path}, using defaults")
        return Settings()

    try:
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e

    logger.info(f"Using config: {path}")
    return validated(parse_config(data))
