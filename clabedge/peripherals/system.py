"""
Read only system queries: uptime, load, memory, CPU temperature, hardware clock, watchdog and TPM.

Host counters come from psutil. Clock, watchdog and TPM state come from hwclock, systemd and tpm2-tools, with
sysfs and /dev as fallback when the tools are missing.
"""
import logging
import re
import socket
import time
from datetime import datetime, timezone

import psutil

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.constants import SysfsPaths
from clabedge.common.exceptions import CommandError, DeviceAccessError
from clabedge.common.file_operations import read_sysfs_value
from clabedge.common.utils import check_output, execute_cmd
from clabedge.hardware.detector import detect_resolution
from clabedge.models.hardware import ProfileResolution
from clabedge.peripherals.data.system_data import (CpuTemperature, LoadAverage, MemoryUsage, RtcTime, SystemInfo,
                                                   TpmStatus, Uptime, WatchdogStatus)

logger: logging.Logger = get_clabedge_logger(__name__)

WATCHDOG_DEVICES: list[str] = ['watchdog', 'watchdog0', 'watchdog1']
TPM_DEVICES: list[str] = ['tpm0', 'tpmrm0']
TPM_MAX_RANDOM_BYTES: int = 64

_WATCHDOG_USEC = re.compile(r'^RuntimeWatchdogUSec=(.*)$', re.MULTILINE)
_TIME_SPAN = re.compile(r'(\d+(?:\.\d+)?)(us|ms|min|s|h)')
_SPAN_USEC: dict[str, int] = {'us': 1, 'ms': 1_000, 's': 1_000_000, 'min': 60_000_000, 'h': 3_600_000_000}


def format_uptime(seconds: float) -> str:
    """ 93784 -> '1d 2h 3m' """
    days, rest = divmod(int(seconds), 86400)
    hours, rest = divmod(rest, 3600)
    return f'{days}d {hours}h {rest // 60}m'


def celsius_to_fahrenheit(celsius: float) -> float:
    return round(celsius * 9 / 5 + 32, 1)


def parse_time_span_usec(value: str) -> int | None:
    """
    Converts a systemd time span as printed by systemctl show ('0', '30000000', '30s', '1min 30s') into
    microseconds.

    Returns:
        the span, None for 'infinity' or text that is not a time span
    """
    value = (value or '').strip()
    if value.isdigit():
        return int(value)
    spans = _TIME_SPAN.findall(value)
    if not spans or _TIME_SPAN.sub('', value).strip():
        return None
    return int(sum(float(number) * _SPAN_USEC[unit] for number, unit in spans))


def _parse_timestamp(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f'Clock text is not an ISO timestamp: {text}')
        return None


class SystemMonitor:
    """
    Queries the state of the gateway host. Nothing here changes the system: setting the clock, arming the
    watchdog and loading TPM modules are left to the platform.
    """

    def __init__(self, root_fs: str = ''):
        self.root_fs: str = root_fs
        self.paths: SysfsPaths = SysfsPaths(root_fs)

    def get_uptime(self) -> Uptime:
        boot_time = psutil.boot_time()
        seconds = max(0, int(time.time() - boot_time))
        return Uptime(seconds=seconds,
                      formatted=format_uptime(seconds),
                      boot_time=datetime.fromtimestamp(boot_time, tz=timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ'))

    def get_load_average(self) -> LoadAverage:
        load_1, load_5, load_15 = psutil.getloadavg()
        return LoadAverage(load_1=round(load_1, 2), load_5=round(load_5, 2), load_15=round(load_15, 2))

    def get_memory(self) -> MemoryUsage:
        memory = psutil.virtual_memory()
        used = (1 - memory.available / memory.total) * 100 if memory.total else 0
        return MemoryUsage(total_kb=memory.total // 1024,
                           available_kb=memory.available // 1024,
                           used_percent=round(used))

    def _sensor_temperature(self) -> CpuTemperature | None:
        # Only available on Linux and FreeBSD builds of psutil
        if not hasattr(psutil, 'sensors_temperatures'):
            return None

        for name, entries in psutil.sensors_temperatures().items():
            for entry in entries:
                if entry.current is not None:
                    celsius = round(entry.current, 1)
                    return CpuTemperature(celsius=celsius,
                                          fahrenheit=celsius_to_fahrenheit(celsius),
                                          source=f'psutil:{name}')
        return None

    def get_temperature(self) -> CpuTemperature | None:
        """
        SoC temperature from thermal zone 0, in millidegrees, with psutil sensors as fallback.

        Returns:
            CpuTemperature, None if the host exposes no temperature
        """
        for path in (self.paths.THERMAL_ZONE, self.paths.VIRTUAL_THERMAL_ZONE):
            value = read_sysfs_value(path)
            if value is None:
                continue
            try:
                celsius = round(int(value) / 1000, 1)
            except ValueError:
                logger.warning(f'Unexpected temperature {value!r} in {path}')
                continue
            return CpuTemperature(celsius=celsius, fahrenheit=celsius_to_fahrenheit(celsius), source=str(path))

        temperature = self._sensor_temperature()
        if temperature is None:
            logger.info('No CPU temperature available')
        return temperature

    def get_system_info(self, resolution: ProfileResolution | None = None) -> SystemInfo:
        """
        Host summary. The model is detected unless a resolution is given.
        """
        if resolution is None:
            resolution = detect_resolution(root_fs=self.root_fs)
        return SystemInfo(device_type=resolution.model_id,
                          known=resolution.known,
                          hostname=socket.gethostname(),
                          uptime=self.get_uptime(),
                          load_average=self.get_load_average(),
                          memory=self.get_memory(),
                          temperature=self.get_temperature())

    def get_rtc_time(self) -> RtcTime:
        """
        Reads the hardware clock with hwclock, or from /sys/class/rtc/rtc0 when hwclock is not usable.
        The sysfs clock is UTC.

        Raises:
            DeviceAccessError: no readable RTC
        """
        result = execute_cmd(['hwclock', '-r'])
        if result is not None and result.returncode == 0 and result.stdout.strip():
            text = result.stdout.strip()
            return RtcTime(time=text, timestamp=_parse_timestamp(text), source='hwclock')

        logger.debug('hwclock failed, reading the RTC from sysfs')
        rtc_date = read_sysfs_value(self.paths.RTC_CLASS / 'date')
        rtc_time = read_sysfs_value(self.paths.RTC_CLASS / 'time')
        if not rtc_date or not rtc_time:
            raise DeviceAccessError(self.paths.RTC_CLASS, 'no readable RTC')

        return RtcTime(time=f'{rtc_date} {rtc_time}',
                       timestamp=_parse_timestamp(f'{rtc_date}T{rtc_time}+00:00'),
                       source='sysfs')

    def _systemd_watchdog(self) -> WatchdogStatus | None:
        result = execute_cmd(['systemctl', 'show', '--property=RuntimeWatchdogUSec'])
        if result is None or result.returncode != 0:
            return None

        match = _WATCHDOG_USEC.search(result.stdout)
        usec = parse_time_span_usec(match.group(1)) if match else None
        if usec is None:
            return None
        return WatchdogStatus(enabled=usec > 0, timeout_sec=usec / 1_000_000 if usec else None, source='systemd')

    def get_watchdog_status(self) -> WatchdogStatus:
        """
        Runtime watchdog configured in systemd. Without systemd, the first watchdog device found is reported as
        enabled, with the timeout from /sys/class/watchdog when readable.
        """
        status = self._systemd_watchdog()
        if status is not None:
            return status

        for name in WATCHDOG_DEVICES:
            if not (self.paths.DEV / name).exists():
                continue
            timeout = read_sysfs_value(self.paths.WATCHDOG_CLASS / name / 'timeout')
            if timeout and timeout.isdigit():
                return WatchdogStatus(enabled=True, device=f'/dev/{name}', timeout_sec=int(timeout), source='sysfs')
            return WatchdogStatus(enabled=True, device=f'/dev/{name}', source='device')

        return WatchdogStatus(enabled=False)

    def _tpm_device(self) -> str | None:
        for name in TPM_DEVICES:
            if (self.paths.DEV / name).exists():
                return f'/dev/{name}'
        return None

    def get_tpm_random(self, num_bytes: int = 32) -> str:
        """
        Random bytes from the TPM, hex encoded.

        Raises:
            ValueError: num_bytes outside [1, TPM_MAX_RANDOM_BYTES]
            CommandError: tpm2_getrandom failed
        """
        if not 1 <= num_bytes <= TPM_MAX_RANDOM_BYTES:
            raise ValueError(f'Number of random bytes must be between 1 and {TPM_MAX_RANDOM_BYTES}, got {num_bytes}')
        return check_output(['tpm2_getrandom', str(num_bytes), '--hex']).strip()

    def get_tpm_status(self) -> TpmStatus:
        """ A TPM is functional when it answers a small random number request """
        device = self._tpm_device()
        if device is None:
            return TpmStatus(available=False)

        try:
            random = self.get_tpm_random(8)
        except CommandError as ex:
            logger.warning(f'TPM {device} present but not answering: {ex}')
            return TpmStatus(available=True, device=device, functional=False)
        return TpmStatus(available=True, device=device, functional=True, random=random)
