"""
Analog inputs exposed by the kernel IIO subsystem (MAX11108 current loop add-on and compatible ADCs)
"""
import logging
import re
from pathlib import Path

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.constants import CTE, SysfsPaths
from clabedge.common.exceptions import DeviceAccessError, UnknownPinError
from clabedge.common.file_operations import read_sysfs_value
from clabedge.conversions.analog import raw_to_celsius, raw_to_current_ma, raw_to_voltage, rescale
from clabedge.models.analog import (AnalogChannelDescriptor, InputType, ScaledReading, SensorType,
                                    TemperatureReading)

logger: logging.Logger = get_clabedge_logger(__name__)


class AnalogInputs:
    """
    Scans /sys/bus/iio/devices and reads the channels found. Devices and channels are addressed by index, in
    numeric order (iio:device0 first, in_voltage0 before in_voltage1).
    """
    _DEVICE_PREFIX: str = 'iio:device'
    _CHANNEL_PATTERN: re.Pattern = re.compile(r'^(in_voltage\d+|in_current\d*)_raw$')

    def __init__(self, root_fs: str = ''):
        self.paths: SysfsPaths = SysfsPaths(root_fs)
        self.devices: list[list[AnalogChannelDescriptor]] | None = None

    @staticmethod
    def _natural_key(name: str) -> tuple[str, int]:
        match = re.search(r'(\d+)\D*$', name)
        return (name[:match.start(1)], int(match.group(1))) if match else (name, -1)

    @staticmethod
    def _read_float(file: Path) -> float | None:
        value = read_sysfs_value(file)
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            logger.warning(f'Ignoring non numeric value {value!r} in {file}')
            return None

    def _scan_device(self, device_dir: Path) -> list[AnalogChannelDescriptor]:
        device_name = read_sysfs_value(device_dir / 'name')
        try:
            files = sorted((f.name for f in device_dir.iterdir()), key=self._natural_key)
        except OSError as ex:
            logger.warning(f'Cannot list {device_dir}: {ex}')
            return []

        channels = []
        for file_name in files:
            match = self._CHANNEL_PATTERN.match(file_name)
            if not match:
                continue
            channel = match.group(1)
            channels.append(AnalogChannelDescriptor(
                device_id=device_dir.name,
                device_name=device_name,
                channel_name=channel,
                raw_value_path=str(device_dir / file_name),
                scale=self._read_float(device_dir / f'{channel}_scale'),
                offset=self._read_float(device_dir / f'{channel}_offset')))
        return channels

    def scan(self) -> list[AnalogChannelDescriptor]:
        """
        Rebuilds the channel list. Devices without any voltage or current channel are skipped.

        Returns:
            every channel found, device by device
        """
        self.devices = []
        iio_dir = self.paths.IIO_DEVICES
        if not iio_dir.is_dir():
            logger.info(f'No IIO devices found in {iio_dir}')
            return []

        device_dirs = sorted((d for d in iio_dir.iterdir() if d.name.startswith(self._DEVICE_PREFIX)),
                             key=lambda d: self._natural_key(d.name))
        for device_dir in device_dirs:
            channels = self._scan_device(device_dir)
            if channels:
                logger.debug(f'{device_dir.name} ({channels[0].device_name}): '
                             f'{[c.channel_name for c in channels]}')
                self.devices.append(channels)

        return [channel for channels in self.devices for channel in channels]

    def get_channel(self, device: int = 0, channel: int = 0) -> AnalogChannelDescriptor:
        if self.devices is None:
            self.scan()

        if not 0 <= device < len(self.devices):
            raise UnknownPinError('analog device', device)
        channels = self.devices[device]
        if not 0 <= channel < len(channels):
            raise UnknownPinError('analog channel', channel, channels[0].device_id)
        return channels[channel]

    def read_raw(self, device: int = 0, channel: int = 0) -> int:
        descriptor = self.get_channel(device, channel)
        value = read_sysfs_value(descriptor.raw_value_path)
        if value is None:
            raise DeviceAccessError(descriptor.raw_value_path, 'channel not readable')
        try:
            return int(value)
        except ValueError:
            raise DeviceAccessError(descriptor.raw_value_path, f'unexpected value {value!r}') from None

    @staticmethod
    def _label(reading: ScaledReading | TemperatureReading, descriptor: AnalogChannelDescriptor):
        reading.device = descriptor.device_name or descriptor.device_id
        reading.channel = descriptor.channel_name
        return reading

    def read_current(self, device: int = 0, channel: int = 0) -> ScaledReading:
        descriptor = self.get_channel(device, channel)
        reading = raw_to_current_ma(self.read_raw(device, channel), descriptor.calibration)
        return self._label(reading, descriptor)

    def read_voltage(self, device: int = 0, channel: int = 0,
                     max_voltage: float = CTE.DEFAULT_MAX_VOLTAGE) -> ScaledReading:
        descriptor = self.get_channel(device, channel)
        reading = raw_to_voltage(self.read_raw(device, channel), descriptor.calibration, max_voltage)
        return self._label(reading, descriptor)

    def read_temperature(self, device: int = 0, channel: int = 0,
                         sensor_type: SensorType | str = SensorType.PT100) -> TemperatureReading:
        descriptor = self.get_channel(device, channel)
        reading = raw_to_celsius(self.read_raw(device, channel), descriptor.calibration, sensor_type)
        return self._label(reading, descriptor)

    def read_scaled(self,
                    device: int = 0,
                    channel: int = 0,
                    input_type: InputType | str = InputType.CURRENT,
                    min_value: float = 0,
                    max_value: float = 100,
                    unit: str = '',
                    decimals: int = 2,
                    max_voltage: float = CTE.DEFAULT_MAX_VOLTAGE) -> ScaledReading:
        """
        Reads a current or voltage input and maps its percent of range into [min_value, max_value], e.g. a
        4-20 mA pressure transmitter into 0-10 bar.

        Args:
            device: IIO device index
            channel: channel index in the device
            input_type: current (4 mA = min_value) or voltage (0 V = min_value)
            min_value: value at the bottom of the range
            max_value: value at the top of the range
            unit: unit of the scaled value
            decimals: decimals of the scaled value
            max_voltage: full scale of voltage inputs

        Returns:
            ScaledReading with scaled and scaled_unit set
        """
        match InputType(input_type):
            case InputType.VOLTAGE:
                reading = self.read_voltage(device, channel, max_voltage)
            case _:
                reading = self.read_current(device, channel)

        reading.scaled = rescale(reading.percent_of_range, min_value, max_value, decimals)
        reading.scaled_unit = unit
        return reading
