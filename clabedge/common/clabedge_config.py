"""
Module to be imported first in any clabedge entrypoint so logging
configuration if done before any log
"""
import os
import logging
import logging.config
import sys

from argparse import ArgumentParser

LOGGING_BASIC_FORMAT: str = '[%(asctime)s - %(name)s/%(funcName)s - %(levelname)s]: %(message)s'
LOGGING_DEFAULT_LEVEL = 'INFO'


def initialize_logging(log_level: str = '', config_file: str = ''):
    """
    Resets handlers that might have been created before proper configuration of logging
    :param log_level
    :param config_file
    :return:
    """
    # Remove possible initial handlers before configuring
    while len(logging.root.handlers) > 0:
        logging.root.removeHandler(logging.root.handlers[-1])

    # Load configuration from file if present, else apply default configuration
    if config_file:
        logging.config.fileConfig(config_file)
    else:
        logging.basicConfig(format=LOGGING_BASIC_FORMAT, level=logging.INFO)

    if log_level:
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.getLevelName(log_level))


def clabedge_arg_parser(component_name: str, additional_arguments: callable = None) -> ArgumentParser:
    """
    Common arguments creator for all clabedge entrypoints.
    It also receives a custom_arguments function to add extra arguments that
    might be required in different components
    :return: A configured ArgumentParser object
    """

    parser: ArgumentParser = ArgumentParser(prog='clabedge',
                                            description=f"CompuLab gateway {component_name}",
                                            exit_on_error=False)
    parser.add_argument('-l', '--log-level', dest='log_level',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO', help='Log level')
    parser.add_argument('-d', '--debug', dest='log_level',
                        action='store_const', const='DEBUG',
                        help='Set log level to debug')

    # If more arguments are required, implement the function on the specific component and pass it
    # to this function as an argument
    if additional_arguments:
        additional_arguments(parser)

    return parser


def parse_arg(parser: ArgumentParser, args=None):
    try:
        return parser.parse_args(args)
    except SystemExit as e:
        # Subparsers and missing positionals call parser.error() even with exit_on_error disabled
        if not e.code:
            raise
        logging.error(f'Invalid arguments: {args}')
    except Exception as e:
        logging.error(f'Error while parsing argument: {e}')
    return None


def handle_environment_variables(argv: list[str]) -> list[str]:
    log_level = os.environ.get('CLABEDGE_LOG_LEVEL')
    if log_level \
            and '--log-level' not in argv \
            and '-l' not in argv \
            and '-d' not in argv \
            and '--debug' not in argv:
        return ['--log-level', log_level] + argv
    return argv


def parse_arguments_and_initialize_logging(component_name: str,
                                           additional_arguments: callable = None,
                                           logging_config_file: str = '',
                                           args: list[str] | None = None):
    parser = clabedge_arg_parser(component_name, additional_arguments)
    argv = handle_environment_variables(sys.argv[1:] if args is None else args)
    parsed = parse_arg(parser, argv)

    log_level = 'INFO'
    if parsed:
        log_level = parsed.log_level

    initialize_logging(log_level=log_level, config_file=logging_config_file)
    return parsed
