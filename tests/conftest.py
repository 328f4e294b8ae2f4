import os

import pytest


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


@pytest.fixture
def sysfs(tmp_path):
    """Empty fake /sys/class tree with hwmon, thermal and drm roots."""
    roots = {
        'hwmon': tmp_path / 'class' / 'hwmon',
        'thermal': tmp_path / 'class' / 'thermal',
        'drm': tmp_path / 'class' / 'drm',
    }
    for root in roots.values():
        root.mkdir(parents=True)
    return roots


@pytest.fixture
def make_hwmon(sysfs):
    def _make(index, name=None, temp=None, label=None):
        hwmon = sysfs['hwmon'] / f'hwmon{index}'
        hwmon.mkdir()
        if name is not None:
            write(hwmon / 'name', name + '\n')
        if temp is not None:
            write(hwmon / 'temp1_input', f'{temp}\n')
        if label is not None:
            write(hwmon / 'temp1_label', label + '\n')
        return hwmon
    return _make


@pytest.fixture
def make_drm_card(sysfs, tmp_path):
    def _make(card, driver, temp=45000):
        device = tmp_path / 'devices' / card
        hwmon = device / 'hwmon' / 'hwmon9'
        hwmon.mkdir(parents=True)
        if temp is not None:
            write(hwmon / 'temp1_input', f'{temp}\n')
        driver_dir = tmp_path / 'bus' / 'pci' / 'drivers' / driver
        driver_dir.mkdir(parents=True, exist_ok=True)
        os.symlink(driver_dir, device / 'driver')
        card_dir = sysfs['drm'] / card
        card_dir.mkdir()
        os.symlink(device, card_dir / 'device')
        return hwmon / 'temp1_input'
    return _make
