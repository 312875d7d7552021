"""
This file gathers the execution adapter: running system utilities and serialising configuration writes per device
"""
import logging
import os
import shutil
import threading
from contextlib import contextmanager
from subprocess import run, PIPE, STDOUT, TimeoutExpired, SubprocessError, CompletedProcess

from clabedge.common.constants import CTE
from clabedge.common.exceptions import CommandError
from clabedge.common.clabedge_logging import get_clabedge_logger

# Extended PATH so sbin utilities (hwclock, ip, gpioset) are found from unprivileged services
SYSTEM_PATH: str = '/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin'

logger: logging.Logger = get_clabedge_logger(__name__)

_device_locks: dict[str, threading.Lock] = {}
_device_locks_guard: threading.Lock = threading.Lock()


def _command_env() -> dict[str, str]:
    env = os.environ.copy()
    env['PATH'] = SYSTEM_PATH
    return env


def execute_cmd(command: list[str], timeout: int = CTE.COMMAND_TIMEOUT) -> CompletedProcess | None:
    """
    Shell wrapper to execute a command
    Args:
        command: command to execute
        timeout: seconds to wait before giving up

    Returns: the completed process (stdout and stderr merged), None if the command could not be run at all

    """
    try:
        return run(command, stdout=PIPE, stderr=STDOUT, encoding='UTF-8', timeout=timeout, env=_command_env())

    except ValueError as ex:
        logger.error(f"Invalid arguments executed: {ex}")

    except TimeoutExpired as ex:
        logger.error(f"Timeout {ex} expired waiting for command: {command}")

    except SubprocessError as ex:
        logger.error(f"Exception not identified: {ex}")

    except OSError as ex:
        logger.error(f"Trying to execute non existent file: {ex}")

    return None


def check_output(command: list[str], timeout: int = CTE.COMMAND_TIMEOUT) -> str:
    """
    Runs a command and returns its output, raising CommandError if it could not be run or exited non zero
    """
    result = execute_cmd(command, timeout=timeout)
    if result is None:
        raise CommandError(command)
    if result.returncode != 0:
        raise CommandError(command, result.returncode, result.stdout)
    return result.stdout


def command_available(name: str) -> bool:
    return shutil.which(name, path=SYSTEM_PATH) is not None


@contextmanager
def device_lock(resource: str):
    """
    Serialises configuration writes to one physical resource (a GPIO line, the UART mode switch...).
    Locks are process wide and created on first use.
    """
    with _device_locks_guard:
        lock = _device_locks.setdefault(resource, threading.Lock())

    logger.debug(f'Acquiring device lock {resource}')
    with lock:
        yield
