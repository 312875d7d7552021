"""
Field diagnosis entrypoint: python -m clabedge <command>

Prints the detected model, a hardware profile, a conversion or the state of a peripheral as JSON.
"""
import json
import logging
import sys
from argparse import ArgumentParser, Namespace

from clabedge.common.clabedge_config import parse_arguments_and_initialize_logging
from clabedge.common.clabedge_logging import recompute_clabedge_loggers, set_logging_configuration
from clabedge.common.exceptions import ClabEdgeError
from clabedge.common.settings import GatewaySettings
from clabedge.conversions.analog import raw_to_celsius, raw_to_current_ma, raw_to_voltage
from clabedge.conversions.network import cidr_to_netmask, netmask_to_cidr
from clabedge.hardware import registry
from clabedge.hardware.detector import detect_resolution
from clabedge.models.analog import SensorType, calibration_from

logger: logging.Logger = logging.getLogger(__name__)

STATUS_PERIPHERALS: list[str] = ['system', 'rtc', 'watchdog', 'tpm', 'ethernet', 'wifi', 'cellular', 'gps']


def arguments(parser: ArgumentParser):
    parser.add_argument('--root-fs', dest='root_fs', default=None,
                        help='Prefix of the host filesystem (default: CLABEDGE_ROOT_FS or /)')
    parser.add_argument('--model', dest='model', default=None,
                        help='Hardware model, skips detection')

    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('detect', help='Detect the gateway model')

    profile = commands.add_parser('profile', help='Print the hardware profile of a model')
    profile.add_argument('model_id', nargs='?', default=None, metavar='MODEL')

    convert = commands.add_parser('convert', help='Convert a raw ADC code')
    convert.add_argument('input_type', choices=['current', 'voltage', 'temperature'])
    convert.add_argument('raw', type=int, metavar='RAW')
    convert.add_argument('--scale', type=float, default=None)
    convert.add_argument('--offset', type=float, default=None)
    convert.add_argument('--max-voltage', dest='max_voltage', type=float, default=10.0)
    convert.add_argument('--sensor', choices=[s.value for s in SensorType], default=SensorType.PT100.value)

    netmask = commands.add_parser('netmask', help='Prefix length to netmask')
    netmask.add_argument('bits', type=int, metavar='BITS')

    cidr = commands.add_parser('cidr', help='Netmask to prefix length')
    cidr.add_argument('mask', metavar='MASK')

    status = commands.add_parser('status', help='Read the state of a peripheral')
    status.add_argument('peripheral', choices=STATUS_PERIPHERALS)


def _settings(args: Namespace) -> GatewaySettings:
    settings = GatewaySettings()
    if args.root_fs is not None:
        settings.root_fs = args.root_fs
    if args.model:
        settings.model_id = args.model
    return settings


def _dump(model) -> dict:
    return model.model_dump(by_alias=True, mode='json', exclude_none=True)


def peripheral_status(peripheral: str, settings: GatewaySettings) -> dict:
    match peripheral:
        case 'system':
            return _dump(settings.system().get_system_info(settings.resolve_model()))
        case 'rtc':
            return _dump(settings.system().get_rtc_time())
        case 'watchdog':
            return _dump(settings.system().get_watchdog_status())
        case 'tpm':
            return _dump(settings.system().get_tpm_status())
        case 'ethernet':
            ethernet = settings.ethernet()
            return {'address': _dump(ethernet.get_address()), 'statistics': _dump(ethernet.get_statistics())}
        case 'wifi':
            return _dump(settings.wifi().get_signal())
        case 'cellular':
            return _dump(settings.cellular().get_signal_strength())
        case 'gps':
            position = settings.gps().get_position()
            return _dump(position) if position is not None else {}

    raise ValueError(f'Unknown peripheral {peripheral}')


def run_command(args: Namespace, settings: GatewaySettings) -> dict:
    match args.command:
        case 'detect':
            resolution = detect_resolution(root_fs=settings.root_fs)
            return {'model-id': resolution.model_id, 'known': resolution.known}

        case 'profile':
            model_id = args.model_id or settings.model_id
            resolution = registry.resolve_profile(model_id) if model_id else settings.resolve_model()
            return {'known': resolution.known,
                    'capabilities': registry.capabilities(resolution.profile),
                    'profile': _dump(resolution.profile)}

        case 'convert':
            calibration = calibration_from(args.scale, args.offset)
            match args.input_type:
                case 'current':
                    reading = raw_to_current_ma(args.raw, calibration)
                case 'voltage':
                    reading = raw_to_voltage(args.raw, calibration, args.max_voltage)
                case _:
                    reading = raw_to_celsius(args.raw, calibration, args.sensor)
            return _dump(reading)

        case 'netmask':
            return {'cidr': args.bits, 'netmask': cidr_to_netmask(args.bits)}

        case 'cidr':
            return {'netmask': args.mask, 'cidr': netmask_to_cidr(args.mask)}

        case 'status':
            return peripheral_status(args.peripheral, settings)

    raise ValueError(f'Unknown command {args.command}')


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments_and_initialize_logging('diagnosis', additional_arguments=arguments, args=argv)
    if args is None:
        return 2

    settings = _settings(args)
    log_level = 'DEBUG' if settings.debug else args.log_level
    set_logging_configuration(debug=log_level == 'DEBUG',
                              log_path=settings.log_path,
                              log_level=logging.getLevelName(log_level),
                              disable_file_logging=settings.disable_file_logging)
    recompute_clabedge_loggers()

    try:
        result = run_command(args, settings)
    except (ClabEdgeError, ValueError) as ex:
        logger.error(f'{args.command} failed: {ex}')
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == '__main__':
    sys.exit(main())
