import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Constants:
    # Hardware
    DEFAULT_MODEL_ID: str = 'IOT-GATE-iMX8'

    # ADC (MAX11108 current loop add-on)
    ADC_FULL_SCALE: int = 4095
    CURRENT_FALLBACK_FACTOR: float = 0.00684  # mA per LSB
    CURRENT_LOOP_MIN_MA: float = 4.0
    CURRENT_LOOP_MAX_MA: float = 20.0
    CURRENT_VALID_MIN_MA: float = 3.8
    CURRENT_VALID_MAX_MA: float = 20.5
    VOLTAGE_VALID_MIN_V: float = -0.1
    VOLTAGE_VALID_MARGIN_V: float = 0.5
    DEFAULT_MAX_VOLTAGE: float = 10.0

    # Platinum RTD, linear approximation
    RTD_ALPHA: float = 0.00385
    PT100_R0: float = 100.0
    PT1000_R0: float = 1000.0

    # Geo
    EARTH_RADIUS_M: float = 6371000.0

    # Serial
    UART_MODE_GPIO: int = 507

    # Legacy sysfs gpio numbering: chip base = chip * GPIO_CHIP_WIDTH
    GPIO_CHIP_WIDTH: int = 32

    # Commands
    COMMAND_TIMEOUT: int = 10

    # gpsd
    GPSD_HOST: str = 'localhost'
    GPSD_PORT: int = 2947

    # Host System Paths
    HOST_FS: str = ''


class BaseFileConstants(object):
    @property
    def root_fs(self) -> Path:
        return self._root_fs

    def __init__(self, root_fs: str):
        self._root_fs: str = root_fs

    def __getattribute__(self, item) -> Path:
        if item in ['_root_fs', 'root_fs']:
            return Path(object.__getattribute__(self, item))

        value = object.__getattribute__(self, item)
        if callable(value) or item.startswith('__'):
            return value
        return Path(f'{self._root_fs}{value}')


class SysfsPaths(BaseFileConstants):
    """ Host paths the adapters read and write, resolved against a root filesystem """
    DEVICE_TREE_OPTIONS = '/proc/device-tree/baseboard-options'
    DEVICE_TREE_SERIAL = '/proc/device-tree/baseboard-sn'
    DEVICE_TREE_MODEL = '/proc/device-tree/model'
    CPUINFO = '/proc/cpuinfo'

    GPIO_CLASS = '/sys/class/gpio'
    GPIO_EXPORT = '/sys/class/gpio/export'

    IIO_DEVICES = '/sys/bus/iio/devices'

    NET_CLASS = '/sys/class/net'

    THERMAL_ZONE = '/sys/class/thermal/thermal_zone0/temp'
    VIRTUAL_THERMAL_ZONE = '/sys/devices/virtual/thermal/thermal_zone0/temp'
    RTC_CLASS = '/sys/class/rtc/rtc0'
    WATCHDOG_CLASS = '/sys/class/watchdog'

    DEV = '/dev'


CTE: Constants = Constants(HOST_FS=os.getenv('CLABEDGE_ROOT_FS', ''))
