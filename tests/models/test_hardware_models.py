import unittest

import pytest
from pydantic import ValidationError

from clabedge.models.hardware import HardwareProfile, ModelId, PinRef


class TestPinRef(unittest.TestCase):

    def test_sysfs_number(self):
        self.assertEqual(PinRef(chip=2, line=8).sysfs_number, 72)
        self.assertEqual(PinRef(chip=0, line=17).sysfs_number, 17)
        self.assertEqual(PinRef(chip=5, line=10).key, (5, 10))

    def test_negative_line(self):
        with self.assertRaises(ValidationError):
            PinRef(chip=0, line=-1)

    def test_aliases(self):
        pin = PinRef.model_validate({'chip': 1, 'line': 4, 'physical-pin': 4})
        self.assertEqual(pin.physical_pin, 4)
        self.assertEqual(pin.dict(by_alias=True), {'chip': 1, 'line': 4, 'physical-pin': 4})


class TestHardwareProfile(unittest.TestCase):

    def test_aliased_lines_rejected(self):
        with self.assertRaises(ValidationError):
            HardwareProfile(model_id=ModelId.IOT_GATE_RPI,
                            inputs={'IN0': PinRef(chip=0, line=17)},
                            outputs={'OUT0': PinRef(chip=0, line=17)})

    def test_led_aliasing_output_rejected(self):
        with self.assertRaises(ValidationError):
            HardwareProfile(model_id=ModelId.IOT_GATE_RPI,
                            outputs={'OUT4': PinRef(chip=0, line=12)},
                            led_lines={'yellow': [PinRef(chip=0, line=12)]})

    def test_shared_lines_allowed(self):
        profile = HardwareProfile(model_id=ModelId.IOT_GATE_RPI,
                                  outputs={'OUT4': PinRef(chip=0, line=12)},
                                  led_lines={'yellow': [PinRef(chip=0, line=12)]},
                                  shared_lines=[(0, 12)])
        self.assertTrue(profile.has_led)

    def test_bidirectional_and_combined_colours_allowed(self):
        profile = HardwareProfile(model_id=ModelId.IOT_LINK,
                                  inputs={'DIO0': PinRef(chip=0, line=0)},
                                  outputs={'DIO0': PinRef(chip=0, line=0)},
                                  led_lines={'green': [PinRef(chip=2, line=25)],
                                             'yellow': [PinRef(chip=2, line=19)],
                                             'orange': [PinRef(chip=2, line=25), PinRef(chip=2, line=19)]})
        self.assertEqual(len(profile.led_lines['orange']), 2)

    def test_frozen(self):
        profile = HardwareProfile(model_id=ModelId.IOT_LINK)
        self.assertFalse(profile.has_led)
        with self.assertRaises(ValidationError):
            profile.has_can = True


@pytest.mark.parametrize('value', ['IOT-GATE-iMX8', 'SBC-IOT-iMX8', 'IOT-GATE-IMX8PLUS', 'SBC-IOT-IMX8PLUS',
                                   'IOT-DIN-IMX8PLUS', 'IOT-LINK', 'IOT-GATE-RPi'])
def test_model_ids(value):
    assert ModelId(value) == value


def test_profile_tables_are_read_only():
    profile = HardwareProfile(model_id=ModelId.IOT_LINK,
                              inputs={'DIO0': {'chip': 0, 'line': 0}},
                              led_lines={'green': [{'chip': 2, 'line': 25}]})
    assert isinstance(profile.led_lines['green'], tuple)
    with pytest.raises(TypeError):
        profile.inputs['DIO1'] = PinRef(chip=0, line=1)
    with pytest.raises(TypeError):
        profile.outputs['DIO0'] = PinRef(chip=0, line=0)
    assert profile.outputs == {}
