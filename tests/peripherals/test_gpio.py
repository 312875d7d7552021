from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

import mock

from clabedge.common.exceptions import CommandError, DeviceAccessError, UnknownPinError, UnsupportedFeatureError
from clabedge.hardware.registry import PROFILES
from clabedge.models.hardware import ModelId
from clabedge.peripherals.gpio import GpioController, line_lock_key


class TestGpiotools(TestCase):

    def setUp(self):
        self.gpio = GpioController(PROFILES[ModelId.IOT_GATE_IMX8], use_gpiotools=True)

    @mock.patch('clabedge.peripherals.gpio.command_available')
    def test_autodetect(self, mock_available):
        mock_available.return_value = False
        self.assertFalse(GpioController(PROFILES[ModelId.IOT_LINK]).use_gpiotools)
        mock_available.return_value = True
        self.assertTrue(GpioController(PROFILES[ModelId.IOT_LINK]).use_gpiotools)

    @mock.patch('clabedge.peripherals.gpio.check_output')
    def test_read_input(self, mock_output):
        mock_output.return_value = '1\n'
        self.assertEqual(self.gpio.read_input('IN2'), 1)
        mock_output.assert_called_once_with(['gpioget', '2', '6'])

        mock_output.return_value = 'gpioget: error\n'
        with self.assertRaises(DeviceAccessError):
            self.gpio.read_input('IN2')

        with self.assertRaises(UnknownPinError):
            self.gpio.read_input('OUT0')

    @mock.patch('clabedge.peripherals.gpio.check_output')
    def test_write_output(self, mock_output):
        self.assertTrue(self.gpio.write_output('OUT3', True))
        mock_output.assert_called_once_with(['gpioset', '5', '10=1'])

        self.gpio.write_output('OUT0', 0)
        mock_output.assert_called_with(['gpioset', '2', '8=0'])

    @mock.patch('clabedge.peripherals.gpio.check_output')
    def test_read_all_inputs(self, mock_output):
        mock_output.side_effect = ['0\n', CommandError(['gpioget', '2', '1'], 1, 'busy'), '1\n', '0\n']
        values = self.gpio.read_all_inputs()
        self.assertEqual(values['IN0'], 0)
        self.assertIn('error', values['IN1'])
        self.assertEqual(values['IN2'], 1)
        self.assertEqual(values['IN3'], 0)

    @mock.patch('clabedge.peripherals.gpio.check_output')
    def test_set_led(self, mock_output):
        self.gpio.set_led('green')
        self.assertEqual(mock_output.call_args_list, [mock.call(['gpioset', '2', '25=1']),
                                                      mock.call(['gpioset', '2', '19=0'])])

        mock_output.reset_mock()
        self.gpio.set_led('ORANGE')
        self.assertEqual(mock_output.call_args_list, [mock.call(['gpioset', '2', '25=1']),
                                                      mock.call(['gpioset', '2', '19=1'])])

        mock_output.reset_mock()
        self.gpio.set_led('off')
        self.assertEqual(mock_output.call_args_list, [mock.call(['gpioset', '2', '25=0']),
                                                      mock.call(['gpioset', '2', '19=0'])])

        with self.assertRaises(UnknownPinError):
            self.gpio.set_led('purple')

    def test_set_led_unsupported(self):
        gpio = GpioController(PROFILES[ModelId.IOT_DIN_IMX8PLUS], use_gpiotools=True)
        with self.assertRaises(UnsupportedFeatureError):
            gpio.set_led('green')

    def test_available_pins(self):
        pins = self.gpio.available_pins()
        self.assertEqual(pins['inputs'], ['IN0', 'IN1', 'IN2', 'IN3'])
        self.assertEqual(pins['outputs'], ['OUT0', 'OUT1', 'OUT2', 'OUT3'])
        self.assertEqual(pins['led'], ['off', 'green', 'yellow', 'orange'])

    def test_lock_key(self):
        self.assertEqual(line_lock_key(PROFILES[ModelId.IOT_GATE_IMX8].outputs['OUT0']), 'gpio:2:8')


class TestSysfs(TestCase):

    def setUp(self):
        self.tmp = TemporaryDirectory()
        self.root = self.tmp.name
        self.gpio_class = Path(self.root) / 'sys/class/gpio'
        self.gpio_class.mkdir(parents=True)
        self.gpio = GpioController(PROFILES[ModelId.IOT_GATE_IMX8], root_fs=self.root, use_gpiotools=False)

    def tearDown(self):
        self.tmp.cleanup()

    def _line(self, number: int, value: str) -> Path:
        line_dir = self.gpio_class / f'gpio{number}'
        line_dir.mkdir()
        (line_dir / 'value').write_text(value)
        return line_dir

    def test_read_exported(self):
        self._line(64, '1\n')
        self.assertEqual(self.gpio.read_input('IN0'), 1)

    def test_read_bad_value(self):
        self._line(64, 'x\n')
        with self.assertRaises(DeviceAccessError):
            self.gpio.read_input('IN0')

    def test_write(self):
        line_dir = self._line(72, '0')
        self.gpio.write_output('OUT0', 1)
        self.assertEqual((line_dir / 'value').read_text(), '1')
        self.assertEqual((line_dir / 'direction').read_text(), 'out')
        # Already exported, nothing written to export
        self.assertFalse((self.gpio_class / 'export').exists())

    def test_export_on_first_use(self):
        # Export is written but the kernel never creates the line directory
        with self.assertRaises(DeviceAccessError):
            self.gpio.write_output('OUT1', 1)
        self.assertEqual((self.gpio_class / 'export').read_text(), '73')
