import logging
from pathlib import Path

logger: logging.Logger = logging.getLogger(__name__)


def file_exists(file: str | Path):
    """
    Checks whether a file exists (and it is a file)
    Args:
        file: File path to check

    Returns: true if conditions are met

    """
    if isinstance(file, str):
        file = Path(file)

    return file.exists() and file.is_file()


def file_exists_and_not_empty(filename: str | Path):
    """
    Checks whether a file exists (and it is a file) and whether it's empty. Sysfs attributes always report a
    size of 4096 so this is only meaningful for regular files.
    Args:
        filename: File path to check

    Returns: true if conditions are met

    """
    if isinstance(filename, str):
        filename = Path(filename)

    return file_exists(filename) and filename.stat().st_size != 0


def read_file(file: str | Path,
              warn_on_missing: bool = False,
              **kwargs) -> str | None:
    """
    Reads a text file and returns its content, or None if it does not exist or cannot be read.
    Device tree files are NUL terminated, use read_device_tree_string for those.
    """

    if isinstance(file, str):
        file = Path(file)

    if not file_exists(file):
        if warn_on_missing:
            logger.warning(f"File {file} does not exists")
        return None

    try:
        with file.open(mode='r', **kwargs) as f:
            file_content = f.read()
    except (OSError, UnicodeDecodeError) as ex:
        logger.warning(f'Cannot read file {file}: {ex}')
        return None

    return file_content


def read_device_tree_string(file: str | Path) -> str | None:
    """
    Reads a /proc/device-tree property. Those are NUL terminated (and NUL separated when the property holds a list)
    Returns: the stripped string, or None if the property is missing or empty
    """
    content = read_file(file, errors='replace')
    if content is None:
        return None
    content = content.replace('\0', ' ').strip()
    return content or None


def read_sysfs_value(file: str | Path) -> str | None:
    """ Reads a single sysfs attribute, stripped. None if missing """
    content = read_file(file)
    if content is None:
        return None
    return content.strip()


def write_sysfs_value(file: str | Path, value: str | int, fail_if_error: bool = True) -> bool:
    """
    Writes a value into a sysfs attribute. Sysfs files cannot be replaced atomically so the value is written in place.
    Args:
        file: attribute path
        value: value to write, converted to str
        fail_if_error: re-raise the OSError instead of returning False

    Returns: True if written
    """
    if isinstance(file, str):
        file = Path(file)
    logger.debug(f"Writing {value} to {file}")

    try:
        file.write_text(str(value))
        return True
    except OSError as ex:
        logger.warning(f'Could not write {value} into {file} : {ex}')
        if fail_if_error:
            raise
    return False
