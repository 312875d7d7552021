"""
clabedge logging

clabedge logging is configured so by default logs to console with the level configured. Also, logs to individual files
errors and warnings
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Global logging settings. They should only be modified from set_logging_configuration.
# This settings won't affect already existing loggers
_DEBUG: bool = False
_LOG_LEVEL: int = logging.INFO
_DISABLE_FILE_LOGGING: bool = False


logger: logging.Logger | None = None

if os.getenv('TOX_TESTENV') or os.getenv('PYTEST_CURRENT_TEST'):
    # With this there is no need to trick every test module, it should work using /tmp/
    _LOG_PATH: Path = Path('/tmp/clabedge/')
else:
    _LOG_PATH: Path = Path('/var/log/clabedge')

COMMON_LOG_FORMATTER: logging.Formatter = \
    logging.Formatter('[%(asctime)s - %(levelname)s - %(name)s/%(funcName)s]: %(message)s')


def set_logging_configuration(debug: bool,
                              log_path: str | Path = _LOG_PATH,
                              log_level: int | None = _LOG_LEVEL,
                              disable_file_logging: bool = _DISABLE_FILE_LOGGING) -> None:
    global _DEBUG, _LOG_LEVEL, _LOG_PATH, _DISABLE_FILE_LOGGING
    _DEBUG = debug
    _LOG_LEVEL = log_level if log_level is not None else logging.INFO
    _DISABLE_FILE_LOGGING = disable_file_logging

    if isinstance(log_path, str):
        _LOG_PATH = Path(log_path)
    else:
        _LOG_PATH = log_path

    if not _DISABLE_FILE_LOGGING and not _LOG_PATH.exists():
        logging.warning(f"Configured logging path {log_path} doesn't exist, creating it.")
        try:
            _LOG_PATH.mkdir(parents=True)
        except OSError as ex:
            logging.warning(f'Cannot create {_LOG_PATH}, file logging disabled: {ex}')
            _DISABLE_FILE_LOGGING = True


def __get_file_handler(filename: str) -> logging.Handler:
    """
    Creates a rotating file handler for the given module name. Files rotate at 5 MiB and only receive warnings
    and errors unless debug mode is on.

    Args:
        filename (str): The name (without file extension) of the log file. The log files are saved with
        '.log' extension in the '_LOG_PATH' directory.

    Returns:
        logging.Handler: the file handler. If the log directory cannot be created or file logging is disabled,
        a NullHandler is returned instead so callers never have to care.
    """
    if _DISABLE_FILE_LOGGING:
        return logging.NullHandler()

    try:
        if not _LOG_PATH.exists():
            _LOG_PATH.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(_LOG_PATH/f"{filename}.log", maxBytes=5*1024*1024)
    except OSError as ex:
        logging.warning(f'Cannot log to {_LOG_PATH}, file logging disabled for {filename}: {ex}')
        return logging.NullHandler()

    file_handler.setFormatter(COMMON_LOG_FORMATTER)
    file_handler.setLevel(logging.WARNING)

    if _DEBUG:
        file_handler.setLevel(_LOG_LEVEL)

    return file_handler


def __get_common_handler() -> logging.StreamHandler:
    """
    Returns a console handler configured with the common formatter and the global log level.
    If the _DEBUG flag is set, the log level is set to logging.DEBUG.

    Returns:
        logging.StreamHandler: The common console handler for logging.

    """

    stream_handler = logging.StreamHandler(stream=sys.stdout)

    stream_handler.setFormatter(COMMON_LOG_FORMATTER)
    stream_handler.setLevel(_LOG_LEVEL)

    if _DEBUG:
        stream_handler.setLevel(logging.DEBUG)

    return stream_handler


def __sanityze_logger_name(logger_name: str | None) -> tuple[str | None, str]:

    if logger_name is None:
        return logger_name, 'clabedge'

    modules = logger_name.split('.')
    if len(modules) <= 1:
        return logger_name, logger_name

    # For corner cases
    match modules[-1]:
        case '__init__':
            module_name = modules[-2] + '_init'
        case '__main__':
            module_name = modules[-2] + '_main'
        case _:
            module_name = modules[-1]

    package = '.'.join(modules)

    return package, module_name


def get_clabedge_logger(name: str | None = None) -> logging.Logger:
    """
    Configures a new logger for clabedge. The logging configuration expects the logger name to come from the module
    level variable name `__name__`.
    Args:
        name: The name of the logger. If no name is provided, the root logger will be configured.

    Returns:
        A logging.Logger object that has been configured according to the provided parameters.
    """
    global logger
    if logger is None and name is not None:
        logger = get_clabedge_logger()

    package, module_name = __sanityze_logger_name(name)

    sub_logger = logging.getLogger(package)
    sub_logger.propagate = False
    sub_logger.level = _LOG_LEVEL
    for handler in list(sub_logger.handlers):
        sub_logger.removeHandler(handler)
    sub_logger.addHandler(__get_common_handler())
    sub_logger.addHandler(__get_file_handler(module_name))

    return sub_logger


def recompute_clabedge_loggers():
    for k, v in logging.root.manager.loggerDict.items():
        if isinstance(v, logging.Logger) and k.startswith(('clabedge.', '__main__')):
            logging.root.manager.loggerDict[k] = get_clabedge_logger(k)
