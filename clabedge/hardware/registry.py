"""
Static capability tables of the supported CompuLab gateways and the lookups over them.

Tables are plain data, validated into frozen HardwareProfile objects once at import time.
"""
import logging
from collections.abc import Mapping
from types import MappingProxyType

from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.constants import CTE
from clabedge.common.exceptions import UnknownPinError, UnsupportedFeatureError
from clabedge.models.hardware import (DEFAULT_MODEL_ID, HardwareProfile, ModelId, PinRef,
                                      ProfileResolution)

logger: logging.Logger = get_clabedge_logger(__name__)


# I/O add-on shared by the iMX8 and iMX8 Plus gateways and SBCs
_IMX8_FAMILY: dict = {
    'inputs': {
        'IN0': {'chip': 2, 'line': 0, 'physical_pin': 15},
        'IN1': {'chip': 2, 'line': 1, 'physical_pin': 17},
        'IN2': {'chip': 2, 'line': 6, 'physical_pin': 16},
        'IN3': {'chip': 2, 'line': 7, 'physical_pin': 18}
    },
    'outputs': {
        'OUT0': {'chip': 2, 'line': 8, 'physical_pin': 11},
        'OUT1': {'chip': 2, 'line': 9, 'physical_pin': 13},
        'OUT2': {'chip': 5, 'line': 9, 'physical_pin': 12},
        'OUT3': {'chip': 5, 'line': 10, 'physical_pin': 14}
    },
    # User LED DS4, bi-colour: orange is both dies on
    'led_lines': {
        'green': [{'chip': 2, 'line': 25}],
        'yellow': [{'chip': 2, 'line': 19}],
        'orange': [{'chip': 2, 'line': 25}, {'chip': 2, 'line': 19}]
    },
    'has_analog': True,
    'has_can': True,
    'serial_ports': {
        'console': '/dev/ttyUSB0',
        'backpanel': '/dev/ttymxc2',
        'addon_rs232': '/dev/ttymxc1',
        'addon_rs485': '/dev/ttymxc3'
    },
    'mode_switch': {'gpio': CTE.UART_MODE_GPIO}
}

_PROFILE_TABLES: dict[ModelId, dict] = {
    ModelId.IOT_GATE_IMX8: _IMX8_FAMILY,
    ModelId.SBC_IOT_IMX8: _IMX8_FAMILY,
    ModelId.IOT_GATE_IMX8PLUS: _IMX8_FAMILY,
    ModelId.SBC_IOT_IMX8PLUS: _IMX8_FAMILY,
    ModelId.IOT_DIN_IMX8PLUS: {
        # Built-in CLT03-2Q3 inputs and TPS272C outputs
        'inputs': {
            'DI0': {'chip': 1, 'line': 0, 'physical_pin': 2, 'description': 'Digital Input 0'},
            'DI1': {'chip': 1, 'line': 4, 'physical_pin': 4, 'description': 'Digital Input 1'}
        },
        'outputs': {
            'DO0': {'chip': 1, 'line': 8, 'physical_pin': 3, 'description': 'Digital Output 0'},
            'DO1': {'chip': 1, 'line': 9, 'physical_pin': 5, 'description': 'Digital Output 1'}
        },
        'led_lines': None,
        'has_analog': False,
        'has_can': False,
        'serial_ports': {
            'console': '/dev/ttyUSB0',
            'rs485': '/dev/ttymxc2'
        },
        'mode_switch': None
    },
    ModelId.IOT_LINK: {
        # i.MX93, three bidirectional lines
        'inputs': {
            'DIO0': {'chip': 0, 'line': 0, 'physical_pin': 1, 'description': 'Digital I/O 0'},
            'DIO1': {'chip': 0, 'line': 1, 'physical_pin': 2, 'description': 'Digital I/O 1'},
            'DIO2': {'chip': 0, 'line': 2, 'physical_pin': 3, 'description': 'Digital I/O 2'}
        },
        'outputs': {
            'DIO0': {'chip': 0, 'line': 0, 'physical_pin': 1, 'description': 'Digital I/O 0'},
            'DIO1': {'chip': 0, 'line': 1, 'physical_pin': 2, 'description': 'Digital I/O 1'},
            'DIO2': {'chip': 0, 'line': 2, 'physical_pin': 3, 'description': 'Digital I/O 2'}
        },
        'led_lines': None,
        'has_analog': False,
        'has_can': True,
        # FARS4/FBRS4 and FACAN/FBCAN configuration options share the same pins
        'can_exclusive_with_rs485': True,
        'serial_ports': {
            'console': '/dev/ttyUSB0',
            'rs485_a': '/dev/ttyLP6',
            'rs485_b': '/dev/ttyLP4'
        },
        'mode_switch': None
    },
    ModelId.IOT_GATE_RPI: {
        'inputs': {
            'IN0': {'chip': 0, 'line': 17, 'physical_pin': 11},
            'IN1': {'chip': 0, 'line': 27, 'physical_pin': 13},
            'IN2': {'chip': 0, 'line': 22, 'physical_pin': 15},
            'IN3': {'chip': 0, 'line': 23, 'physical_pin': 16},
            'IN4': {'chip': 0, 'line': 5, 'physical_pin': 29},
            'IN5': {'chip': 0, 'line': 6, 'physical_pin': 31},
            'IN6': {'chip': 0, 'line': 13, 'physical_pin': 33},
            'IN7': {'chip': 0, 'line': 19, 'physical_pin': 35}
        },
        'outputs': {
            'OUT0': {'chip': 0, 'line': 24, 'physical_pin': 18},
            'OUT1': {'chip': 0, 'line': 25, 'physical_pin': 22},
            'OUT2': {'chip': 0, 'line': 8, 'physical_pin': 24},
            'OUT3': {'chip': 0, 'line': 7, 'physical_pin': 26},
            'OUT4': {'chip': 0, 'line': 12, 'physical_pin': 32},
            'OUT5': {'chip': 0, 'line': 16, 'physical_pin': 36},
            'OUT6': {'chip': 0, 'line': 20, 'physical_pin': 38},
            'OUT7': {'chip': 0, 'line': 21, 'physical_pin': 40}
        },
        'led_lines': {
            'green': [{'chip': 0, 'line': 18}],
            'yellow': [{'chip': 0, 'line': 12}],
            'orange': [{'chip': 0, 'line': 18}, {'chip': 0, 'line': 12}]
        },
        # Vendor wiring drives the yellow LED and OUT4 from BCM12
        'shared_lines': ((0, 12),),
        'has_analog': False,
        'has_can': True,
        'serial_ports': {
            'console': '/dev/ttyAMA0',
            'usb0': '/dev/ttyUSB0',
            'usb1': '/dev/ttyUSB1',
            'rs485_0': '/dev/ttyAMA1',
            'rs485_1': '/dev/ttyAMA2',
            'rs485_2': '/dev/ttyAMA3',
            'rs485_3': '/dev/ttyAMA4'
        },
        'mode_switch': None
    }
}

LED_OFF: str = 'off'


def _build_profiles() -> dict[ModelId, HardwareProfile]:
    return {model_id: HardwareProfile.model_validate({'model_id': model_id, **table})
            for model_id, table in _PROFILE_TABLES.items()}


PROFILES: Mapping[ModelId, HardwareProfile] = MappingProxyType(_build_profiles())


def known_model_ids() -> list[ModelId]:
    return list(PROFILES.keys())


def _as_model_id(model_id: str | None) -> ModelId | None:
    if not model_id:
        return None
    try:
        return ModelId(model_id)
    except ValueError:
        pass
    # Model strings are written with inconsistent casing (iMX8 vs IMX8PLUS)
    for known in ModelId:
        if known.value.lower() == str(model_id).strip().lower():
            return known
    return None


def resolve_profile(model_id: str | None) -> ProfileResolution:
    """
    Looks up the profile of a model. Unknown or empty ids resolve to the default profile with known=False so the
    caller can decide whether to warn, fail or carry on.

    Args:
        model_id: model identifier, e.g. 'IOT-GATE-iMX8'

    Returns:
        ProfileResolution
    """
    resolved = _as_model_id(model_id)
    if resolved is None:
        return ProfileResolution(requested=model_id,
                                 model_id=DEFAULT_MODEL_ID,
                                 profile=PROFILES[DEFAULT_MODEL_ID],
                                 known=False)

    return ProfileResolution(requested=model_id, model_id=resolved, profile=PROFILES[resolved], known=True)


def resolve(model_id: str | None) -> HardwareProfile:
    """
    Returns the profile of a model, or the default profile if the model is unknown. Never fails.
    """
    resolution = resolve_profile(model_id)
    if not resolution.known:
        logger.warning(f'Unknown hardware model {model_id}, falling back to {resolution.model_id}')
    return resolution.profile


def get_input(profile: HardwareProfile, name: str) -> PinRef:
    try:
        return profile.inputs[name]
    except KeyError:
        raise UnknownPinError('input', name, profile.model_id) from None


def get_output(profile: HardwareProfile, name: str) -> PinRef:
    try:
        return profile.outputs[name]
    except KeyError:
        raise UnknownPinError('output', name, profile.model_id) from None


def get_led_lines(profile: HardwareProfile, color: str) -> tuple[PinRef, ...]:
    """
    Lines driving one LED colour. Combined colours return more than one line.
    Raises UnsupportedFeatureError if the model has no user LED.
    """
    if not profile.has_led:
        raise UnsupportedFeatureError('LED', profile.model_id)
    try:
        return profile.led_lines[color.lower()]
    except KeyError:
        raise UnknownPinError('LED color', color, profile.model_id) from None


def get_serial_port(profile: HardwareProfile, name: str) -> str:
    """
    Device path of a named serial port. Absolute device paths are accepted as they are.
    """
    if name in profile.serial_ports:
        return profile.serial_ports[name]
    if name.startswith('/dev/'):
        return name
    raise UnknownPinError('serial port', name, profile.model_id)


def led_colors(profile: HardwareProfile) -> list[str]:
    if not profile.has_led:
        return []
    return [LED_OFF] + list(profile.led_lines.keys())


def capabilities(profile: HardwareProfile) -> dict:
    return {
        'device-type': profile.model_id,
        'inputs': list(profile.inputs.keys()),
        'outputs': list(profile.outputs.keys()),
        'led-colors': led_colors(profile),
        'serial-ports': list(profile.serial_ports.keys()),
        'has-led': profile.has_led,
        'has-analog': profile.has_analog,
        'has-can': profile.has_can,
        'can-exclusive-with-rs485': profile.can_exclusive_with_rs485,
        'has-mode-switch': profile.mode_switch is not None
    }
