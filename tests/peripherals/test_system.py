from collections import namedtuple
from datetime import datetime, timezone
from pathlib import Path
from subprocess import CompletedProcess
from tempfile import TemporaryDirectory
from unittest import TestCase

import mock
import pytest

from clabedge.common.exceptions import CommandError, DeviceAccessError
from clabedge.hardware.registry import resolve_profile
from clabedge.peripherals.system import (SystemMonitor, celsius_to_fahrenheit, format_uptime,
                                         parse_time_span_usec)

svmem = namedtuple('svmem', ['total', 'available', 'percent'])
shwtemp = namedtuple('shwtemp', ['label', 'current', 'high', 'critical'])


@pytest.mark.parametrize('seconds, formatted', [(0, '0d 0h 0m'), (59, '0d 0h 0m'), (93784, '1d 2h 3m'),
                                                (864000.9, '10d 0h 0m')])
def test_format_uptime(seconds, formatted):
    assert format_uptime(seconds) == formatted


@pytest.mark.parametrize('value, usec', [('0', 0), ('30000000', 30000000), ('30s', 30000000),
                                         ('1min 30s', 90000000), ('500ms', 500000), ('infinity', None),
                                         ('', None), ('30 seconds', None)])
def test_parse_time_span_usec(value, usec):
    assert parse_time_span_usec(value) == usec


def test_celsius_to_fahrenheit():
    assert celsius_to_fahrenheit(100) == 212.0
    assert celsius_to_fahrenheit(45.2) == 113.4


class TestSystemMonitor(TestCase):

    def setUp(self):
        self.tmp = TemporaryDirectory()
        self.root = Path(self.tmp.name)
        (self.root / 'dev').mkdir()
        self.monitor = SystemMonitor(root_fs=self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, relative: str, content: str):
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)

    @mock.patch('clabedge.peripherals.system.time')
    @mock.patch('clabedge.peripherals.system.psutil')
    def test_get_uptime(self, mock_psutil, mock_time):
        mock_psutil.boot_time.return_value = 1_700_000_000
        mock_time.time.return_value = 1_700_000_000 + 93784.5

        uptime = self.monitor.get_uptime()
        self.assertEqual(uptime.seconds, 93784)
        self.assertEqual(uptime.formatted, '1d 2h 3m')
        self.assertEqual(uptime.boot_time, '2023-11-14T22:13:20Z')

    @mock.patch('clabedge.peripherals.system.psutil')
    def test_load_and_memory(self, mock_psutil):
        mock_psutil.getloadavg.return_value = (0.514, 0.3, 0.25)
        mock_psutil.virtual_memory.return_value = svmem(total=2048 * 1024 * 1024, available=512 * 1024 * 1024,
                                                        percent=75.0)

        self.assertEqual(self.monitor.get_load_average().load_1, 0.51)
        memory = self.monitor.get_memory()
        self.assertEqual(memory.total_kb, 2097152)
        self.assertEqual(memory.available_kb, 524288)
        self.assertEqual(memory.used_percent, 75)

    @mock.patch('clabedge.peripherals.system.psutil')
    def test_temperature_from_thermal_zone(self, mock_psutil):
        self._write('sys/class/thermal/thermal_zone0/temp', '45230\n')
        temperature = self.monitor.get_temperature()
        self.assertEqual(temperature.celsius, 45.2)
        self.assertEqual(temperature.fahrenheit, 113.4)
        self.assertTrue(temperature.source.endswith('thermal_zone0/temp'))
        mock_psutil.sensors_temperatures.assert_not_called()

    @mock.patch('clabedge.peripherals.system.psutil')
    def test_temperature_from_virtual_zone(self, mock_psutil):
        self._write('sys/class/thermal/thermal_zone0/temp', 'n/a\n')
        self._write('sys/devices/virtual/thermal/thermal_zone0/temp', '51000\n')
        with self.assertLogs('clabedge.peripherals.system', level='WARNING'):
            temperature = self.monitor.get_temperature()
        self.assertEqual(temperature.celsius, 51.0)
        mock_psutil.sensors_temperatures.assert_not_called()

    @mock.patch('clabedge.peripherals.system.psutil')
    def test_temperature_from_psutil(self, mock_psutil):
        mock_psutil.sensors_temperatures.return_value = {
            'cpu_thermal': [shwtemp(label='', current=48.55, high=None, critical=None)]
        }
        temperature = self.monitor.get_temperature()
        self.assertEqual(temperature.celsius, 48.5)
        self.assertEqual(temperature.source, 'psutil:cpu_thermal')

        mock_psutil.sensors_temperatures.return_value = {}
        self.assertIsNone(self.monitor.get_temperature())

    @mock.patch('clabedge.peripherals.system.socket.gethostname', return_value='gateway-01')
    @mock.patch('clabedge.peripherals.system.psutil')
    def test_get_system_info(self, mock_psutil, _mock_hostname):
        mock_psutil.boot_time.return_value = 0
        mock_psutil.getloadavg.return_value = (1.0, 0.5, 0.25)
        mock_psutil.virtual_memory.return_value = svmem(total=1024 * 1024, available=256 * 1024, percent=75.0)
        mock_psutil.sensors_temperatures.return_value = {}

        info = self.monitor.get_system_info(resolve_profile('IOT-LINK'))
        self.assertEqual(info.device_type, 'IOT-LINK')
        self.assertTrue(info.known)
        self.assertEqual(info.hostname, 'gateway-01')
        self.assertEqual(info.memory.used_percent, 75)
        self.assertIsNone(info.temperature)

        # Empty root filesystem: nothing to detect from
        info = self.monitor.get_system_info()
        self.assertEqual(info.device_type, 'IOT-GATE-iMX8')
        self.assertFalse(info.known)

    @mock.patch('clabedge.peripherals.system.execute_cmd')
    def test_rtc_from_hwclock(self, mock_execute):
        mock_execute.return_value = CompletedProcess(['hwclock'], 0, stdout='2026-10-19 08:30:00.123456+00:00\n')
        rtc = self.monitor.get_rtc_time()
        self.assertEqual(rtc.source, 'hwclock')
        self.assertEqual(rtc.timestamp, datetime(2026, 10, 19, 8, 30, 0, 123456, tzinfo=timezone.utc))
        mock_execute.assert_called_once_with(['hwclock', '-r'])

        mock_execute.return_value = CompletedProcess(['hwclock'], 0, stdout='Mon 19 Oct 2026 08:30:00 AM UTC\n')
        rtc = self.monitor.get_rtc_time()
        self.assertEqual(rtc.time, 'Mon 19 Oct 2026 08:30:00 AM UTC')
        self.assertIsNone(rtc.timestamp)

    @mock.patch('clabedge.peripherals.system.execute_cmd')
    def test_rtc_from_sysfs(self, mock_execute):
        mock_execute.return_value = None
        with self.assertRaises(DeviceAccessError):
            self.monitor.get_rtc_time()

        self._write('sys/class/rtc/rtc0/date', '2026-10-19\n')
        self._write('sys/class/rtc/rtc0/time', '08:30:00\n')
        mock_execute.return_value = CompletedProcess(['hwclock'], 1, stdout='hwclock: Cannot access the RTC')
        rtc = self.monitor.get_rtc_time()
        self.assertEqual(rtc.source, 'sysfs')
        self.assertEqual(rtc.time, '2026-10-19 08:30:00')
        self.assertEqual(rtc.timestamp, datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc))

    @mock.patch('clabedge.peripherals.system.execute_cmd')
    def test_watchdog_from_systemd(self, mock_execute):
        mock_execute.return_value = CompletedProcess(['systemctl'], 0, stdout='RuntimeWatchdogUSec=30s\n')
        status = self.monitor.get_watchdog_status()
        self.assertTrue(status.enabled)
        self.assertEqual(status.timeout_sec, 30.0)
        self.assertEqual(status.source, 'systemd')
        mock_execute.assert_called_once_with(['systemctl', 'show', '--property=RuntimeWatchdogUSec'])

        mock_execute.return_value = CompletedProcess(['systemctl'], 0, stdout='RuntimeWatchdogUSec=0\n')
        status = self.monitor.get_watchdog_status()
        self.assertFalse(status.enabled)
        self.assertIsNone(status.timeout_sec)

    @mock.patch('clabedge.peripherals.system.execute_cmd')
    def test_watchdog_from_devices(self, mock_execute):
        mock_execute.return_value = None
        self.assertFalse(self.monitor.get_watchdog_status().enabled)

        (self.root / 'dev' / 'watchdog0').touch()
        status = self.monitor.get_watchdog_status()
        self.assertTrue(status.enabled)
        self.assertEqual(status.device, '/dev/watchdog0')
        self.assertIsNone(status.timeout_sec)
        self.assertEqual(status.source, 'device')

        self._write('sys/class/watchdog/watchdog0/timeout', '60\n')
        status = self.monitor.get_watchdog_status()
        self.assertEqual(status.timeout_sec, 60)
        self.assertEqual(status.source, 'sysfs')

    @mock.patch('clabedge.peripherals.system.check_output')
    def test_tpm_status(self, mock_output):
        self.assertFalse(self.monitor.get_tpm_status().available)
        mock_output.assert_not_called()

        (self.root / 'dev' / 'tpmrm0').touch()
        mock_output.return_value = '9f3a21c4d07e55b1\n'
        status = self.monitor.get_tpm_status()
        self.assertTrue(status.available)
        self.assertTrue(status.functional)
        self.assertEqual(status.device, '/dev/tpmrm0')
        self.assertEqual(status.random, '9f3a21c4d07e55b1')
        mock_output.assert_called_once_with(['tpm2_getrandom', '8', '--hex'])

        mock_output.side_effect = CommandError(['tpm2_getrandom'], 1, 'ERROR: Esys_GetRandom')
        with self.assertLogs('clabedge.peripherals.system', level='WARNING'):
            status = self.monitor.get_tpm_status()
        self.assertTrue(status.available)
        self.assertFalse(status.functional)

    def test_tpm_random_bounds(self):
        for num_bytes in (0, 65):
            with self.assertRaises(ValueError):
                self.monitor.get_tpm_random(num_bytes)
