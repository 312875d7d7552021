"""
Digital inputs, outputs and the user LED.

Lines are driven with the libgpiod tools (gpioget/gpioset) when they are installed. Otherwise the legacy
/sys/class/gpio interface is used, exporting each line on first use.
"""
import logging
from pathlib import Path

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.constants import SysfsPaths
from clabedge.common.exceptions import ClabEdgeError, DeviceAccessError, UnsupportedFeatureError
from clabedge.common.file_operations import file_exists, read_sysfs_value, write_sysfs_value
from clabedge.common.utils import check_output, command_available, device_lock
from clabedge.hardware import registry
from clabedge.models.hardware import HardwareProfile, PinRef

logger: logging.Logger = get_clabedge_logger(__name__)


def line_lock_key(pin: PinRef) -> str:
    return f'gpio:{pin.chip}:{pin.line}'


class GpioController:
    """
    GPIO access for one hardware profile
    """
    _GET_COMMAND: str = 'gpioget'
    _SET_COMMAND: str = 'gpioset'

    def __init__(self, profile: HardwareProfile, root_fs: str = '', use_gpiotools: bool | None = None):
        self.profile: HardwareProfile = profile
        self.paths: SysfsPaths = SysfsPaths(root_fs)

        if use_gpiotools is None:
            use_gpiotools = command_available(self._GET_COMMAND) and command_available(self._SET_COMMAND)
        self.use_gpiotools: bool = use_gpiotools
        logger.debug(f'GPIO access for {profile.model_id} through {"gpiotools" if use_gpiotools else "sysfs"}')

    # Sysfs fallback
    def _line_dir(self, pin: PinRef) -> Path:
        return self.paths.GPIO_CLASS / f'gpio{pin.sysfs_number}'

    def _export(self, pin: PinRef, direction: str):
        """ Exports the line if needed and sets its direction. Must be called holding the line lock """
        line_dir = self._line_dir(pin)
        try:
            if not file_exists(line_dir / 'value'):
                logger.debug(f'Exporting gpio {pin.sysfs_number} ({pin.chip}/{pin.line})')
                write_sysfs_value(self.paths.GPIO_EXPORT, pin.sysfs_number)
            write_sysfs_value(line_dir / 'direction', direction)
        except OSError as ex:
            raise DeviceAccessError(line_dir, str(ex)) from ex

    def _read_sysfs(self, pin: PinRef) -> int:
        value_file = self._line_dir(pin) / 'value'
        if not file_exists(value_file):
            with device_lock(line_lock_key(pin)):
                self._export(pin, 'in')

        value = read_sysfs_value(value_file)
        if value is None:
            raise DeviceAccessError(value_file, 'value not readable')
        try:
            return int(value)
        except ValueError:
            raise DeviceAccessError(value_file, f'unexpected value {value!r}') from None

    def _write_sysfs(self, pin: PinRef, value: int):
        self._export(pin, 'out')
        value_file = self._line_dir(pin) / 'value'
        try:
            write_sysfs_value(value_file, value)
        except OSError as ex:
            raise DeviceAccessError(value_file, str(ex)) from ex

    # Line primitives
    def _read_line(self, pin: PinRef) -> int:
        if not self.use_gpiotools:
            return self._read_sysfs(pin)

        output = check_output([self._GET_COMMAND, str(pin.chip), str(pin.line)])
        try:
            return int(output.strip())
        except ValueError:
            raise DeviceAccessError(f'gpiochip{pin.chip} line {pin.line}',
                                    f'unexpected {self._GET_COMMAND} output {output!r}') from None

    def _write_line(self, pin: PinRef, value: int):
        with device_lock(line_lock_key(pin)):
            if self.use_gpiotools:
                check_output([self._SET_COMMAND, str(pin.chip), f'{pin.line}={value}'])
            else:
                self._write_sysfs(pin, value)

    # Public API
    def read_input(self, name: str) -> int:
        """
        Reads a digital input

        Args:
            name: input name in the profile, e.g. IN0

        Returns:
            0 or 1
        """
        return self._read_line(registry.get_input(self.profile, name))

    def write_output(self, name: str, value: int | bool) -> bool:
        pin = registry.get_output(self.profile, name)
        level = 1 if value else 0
        self._write_line(pin, level)
        logger.debug(f'{name} set to {level}')
        return True

    def read_all_inputs(self) -> dict[str, int | dict]:
        """
        Reads every input of the profile. A failing input does not stop the others, its entry holds the error.
        """
        values: dict[str, int | dict] = {}
        for name in self.profile.inputs:
            try:
                values[name] = self.read_input(name)
            except ClabEdgeError as ex:
                logger.warning(f'Failed to read input {name}: {ex}')
                values[name] = {'error': str(ex)}
        return values

    def set_led(self, color: str) -> bool:
        """
        Sets the user LED colour. 'off' clears every LED line; combined colours (orange) light several lines and
        switch the remaining ones off.

        Raises:
            UnsupportedFeatureError: the model has no user LED
            UnknownPinError: the colour is not available
        """
        if not self.profile.has_led:
            raise UnsupportedFeatureError('LED', self.profile.model_id)

        color = color.lower()
        if color == registry.LED_OFF:
            lit: set[tuple[int, int]] = set()
        else:
            lit = {pin.key for pin in registry.get_led_lines(self.profile, color)}

        all_lines: dict[tuple[int, int], PinRef] = {}
        for pins in self.profile.led_lines.values():
            for pin in pins:
                all_lines.setdefault(pin.key, pin)

        for key, pin in all_lines.items():
            self._write_line(pin, 1 if key in lit else 0)

        logger.info(f'LED set to {color}')
        return True

    def available_pins(self) -> dict[str, list[str]]:
        return {
            'inputs': list(self.profile.inputs.keys()),
            'outputs': list(self.profile.outputs.keys()),
            'led': registry.led_colors(self.profile)
        }
