""" Hardware profile data structures """
from collections import defaultdict
from collections.abc import Mapping
from types import MappingProxyType

from strenum import StrEnum

from pydantic import ConfigDict, Field, field_serializer, field_validator, model_validator

from clabedge.common.clabedge_base_model import ClabEdgeStaticModel
from clabedge.common.constants import CTE


class ModelId(StrEnum):
    IOT_GATE_IMX8 = 'IOT-GATE-iMX8'
    SBC_IOT_IMX8 = 'SBC-IOT-iMX8'
    IOT_GATE_IMX8PLUS = 'IOT-GATE-IMX8PLUS'
    SBC_IOT_IMX8PLUS = 'SBC-IOT-IMX8PLUS'
    IOT_DIN_IMX8PLUS = 'IOT-DIN-IMX8PLUS'
    IOT_LINK = 'IOT-LINK'
    IOT_GATE_RPI = 'IOT-GATE-RPi'


DEFAULT_MODEL_ID: ModelId = ModelId(CTE.DEFAULT_MODEL_ID)


class PinRef(ClabEdgeStaticModel):
    """ One GPIO line, addressed by gpiochip and line offset """
    chip:           int = Field(ge=0)
    line:           int = Field(ge=0)
    physical_pin:   int | None = None
    description:    str | None = None

    @property
    def key(self) -> tuple[int, int]:
        return self.chip, self.line

    @property
    def sysfs_number(self) -> int:
        """ Legacy /sys/class/gpio number. Assumes every chip exposes GPIO_CHIP_WIDTH lines """
        return self.chip * CTE.GPIO_CHIP_WIDTH + self.line


def _read_only(value: Mapping | None) -> Mapping | None:
    """ Frozen models only block attribute assignment, the containers they hold are wrapped as well """
    if value is None:
        return None
    return MappingProxyType(dict(value))


def _plain_dict(value: Mapping | None, handler):
    return handler(dict(value) if value is not None else None)


class ModeSwitch(ClabEdgeStaticModel):
    """ RS232/RS485 toggle of the back panel UART, driven through a legacy sysfs gpio """
    model_config = ConfigDict(validate_default=True)

    gpio:           int
    modes:          Mapping[str, int] = {'rs232': 0, 'rs485': 1}

    @field_validator('modes')
    @classmethod
    def read_only_modes(cls, value):
        return _read_only(value)

    @field_serializer('modes', mode='wrap')
    def serialize_modes(self, value, handler):
        return _plain_dict(value, handler)


class HardwareProfile(ClabEdgeStaticModel):
    """
    Pin and port layout of one gateway model.

    A physical line may only be used by one logical name. The exceptions are combined LED colours (more than one
    line per colour), a bidirectional line listed under the same name as input and output, and the lines listed
    in shared_lines.

    Profiles are shared by every caller of the registry, so the pin tables are read-only mappings and the LED
    lines are tuples.
    """
    model_config = ConfigDict(validate_default=True)

    model_id:                   ModelId
    inputs:                     Mapping[str, PinRef] = {}
    outputs:                    Mapping[str, PinRef] = {}
    led_lines:                  Mapping[str, tuple[PinRef, ...]] | None = None
    has_analog:                 bool = False
    has_can:                    bool = False
    can_exclusive_with_rs485:   bool = False
    serial_ports:               Mapping[str, str] = {}
    mode_switch:                ModeSwitch | None = None
    shared_lines:               tuple[tuple[int, int], ...] = ()

    @field_validator('inputs', 'outputs', 'led_lines', 'serial_ports')
    @classmethod
    def read_only_tables(cls, value):
        return _read_only(value)

    @field_serializer('inputs', 'outputs', 'led_lines', 'serial_ports', mode='wrap')
    def serialize_tables(self, value, handler):
        return _plain_dict(value, handler)

    @model_validator(mode='after')
    def check_line_aliasing(self):
        owners: dict[tuple[int, int], set[str]] = defaultdict(set)

        for name, pin in self.inputs.items():
            owners[pin.key].add(f'io:{name}')
        for name, pin in self.outputs.items():
            owners[pin.key].add(f'io:{name}')
        for color, pins in (self.led_lines or {}).items():
            if len(pins) == 1:
                owners[pins[0].key].add(f'led:{color}')

        aliased = [(key, sorted(names)) for key, names in owners.items()
                   if len(names) > 1 and key not in self.shared_lines]
        if aliased:
            raise ValueError(f'{self.model_id}: physical lines used by more than one name: {aliased}')

        return self

    @property
    def has_led(self) -> bool:
        return bool(self.led_lines)


class ProfileResolution(ClabEdgeStaticModel):
    """
    Result of resolving a model id. known is False when the requested id (or the detected one) did not match any
    model and the default profile was used instead.
    """
    requested:  str | None = None
    model_id:   ModelId
    profile:    HardwareProfile
    known:      bool
