"""
Serial ports of the gateway and the RS232/RS485 mode switch of the back panel UART
"""
import logging
from pathlib import Path

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.constants import SysfsPaths
from clabedge.common.exceptions import DeviceAccessError, UnsupportedFeatureError
from clabedge.common.file_operations import read_sysfs_value, write_sysfs_value
from clabedge.common.utils import device_lock
from clabedge.models.hardware import HardwareProfile, ModeSwitch

logger: logging.Logger = get_clabedge_logger(__name__)

UNKNOWN_MODE: str = 'unknown'


class UartModeSwitch:
    """
    Switches the dual mode port between RS232 and RS485. Only the iMX8 family carries the switch, wired to a legacy
    sysfs gpio.
    """

    def __init__(self, profile: HardwareProfile, root_fs: str = ''):
        self.profile: HardwareProfile = profile
        self.root_fs: str = root_fs
        self.paths: SysfsPaths = SysfsPaths(root_fs)

    def _switch(self) -> ModeSwitch:
        if self.profile.mode_switch is None:
            raise UnsupportedFeatureError('UART mode switch', self.profile.model_id)
        return self.profile.mode_switch

    @property
    def lock_key(self) -> str:
        return f'uart-mode:{self._switch().gpio}'

    def set_mode(self, mode: str) -> str:
        """
        Args:
            mode: 'rs232' or 'rs485', case insensitive

        Returns:
            the mode set

        Raises:
            UnsupportedFeatureError: the model has no mode switch
            ValueError: unknown mode
            DeviceAccessError: the gpio could not be written
        """
        switch = self._switch()
        mode = str(mode).lower()
        if mode not in switch.modes:
            raise ValueError(f"Invalid mode: {mode}. Must be one of {', '.join(switch.modes)}")

        gpio_dir = self.paths.GPIO_CLASS / f'gpio{switch.gpio}'
        with device_lock(self.lock_key):
            try:
                if not (gpio_dir / 'value').exists():
                    # EBUSY here means it is already exported
                    write_sysfs_value(self.paths.GPIO_EXPORT, switch.gpio, fail_if_error=False)
                    write_sysfs_value(gpio_dir / 'direction', 'out', fail_if_error=False)
                write_sysfs_value(gpio_dir / 'value', switch.modes[mode])
            except OSError as ex:
                raise DeviceAccessError(gpio_dir / 'value', str(ex)) from ex

        logger.info(f'UART mode set to {mode.upper()} (gpio {switch.gpio})')
        return mode

    def get_mode(self) -> str:
        """ Current mode, 'unknown' if the gpio is not exported or holds an unexpected value """
        switch = self._switch()
        value = read_sysfs_value(self.paths.GPIO_CLASS / f'gpio{switch.gpio}' / 'value')
        if value is None:
            return UNKNOWN_MODE

        for mode, level in switch.modes.items():
            if value == str(level):
                return mode
        logger.warning(f'Unexpected UART mode gpio value {value!r}')
        return UNKNOWN_MODE

    def list_ports(self) -> dict[str, str]:
        """
        Serial ports of the profile whose device node exists

        Returns:
            port name to device path
        """
        available: dict[str, str] = {}
        for name, device in self.profile.serial_ports.items():
            if Path(f'{self.root_fs}{device}').exists():
                available[name] = device
            else:
                logger.debug(f'Serial port {name} ({device}) not present')
        return available
