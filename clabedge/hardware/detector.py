"""
Identifies the gateway model from the device tree and the CPU description.

Sources are checked from the most specific to the most generic one: baseboard option string, board model string,
CPU description. The first marker found wins.
"""
import logging

from clabedge.common.clabedge_base_model import ClabEdgeStaticModel
from clabedge.common.clabedge_logging import get_clabedge_logger
from clabedge.common.constants import SysfsPaths
from clabedge.common.file_operations import read_device_tree_string, read_file
from clabedge.hardware.registry import PROFILES
from clabedge.models.hardware import DEFAULT_MODEL_ID, ModelId, ProfileResolution

logger: logging.Logger = get_clabedge_logger(__name__)


class IdentificationSources(ClabEdgeStaticModel):
    baseboard_options:  str | None = None
    baseboard_serial:   str | None = None
    model:              str | None = None
    cpuinfo:            str | None = None


# More specific SKUs first
_OPTION_MARKERS: list[tuple[tuple[str, ...], ModelId]] = [
    (('IOT-DIN-IMX8PLUS', 'IOTD-IMX8P'), ModelId.IOT_DIN_IMX8PLUS),
    (('IOT-GATE-IMX8PLUS',), ModelId.IOT_GATE_IMX8PLUS),
    (('SBC-IOT-IMX8PLUS',), ModelId.SBC_IOT_IMX8PLUS),
    (('IOT-GATE-iMX8',), ModelId.IOT_GATE_IMX8),
    (('SBC-IOT-iMX8',), ModelId.SBC_IOT_IMX8)
]

_MODEL_MARKERS: list[tuple[tuple[str, ...], ModelId]] = [
    (('IOT-LINK', 'imx93', 'i.MX93'), ModelId.IOT_LINK),
    (('Raspberry Pi',), ModelId.IOT_GATE_RPI)
]

_CPU_MARKERS: list[tuple[tuple[str, ...], ModelId]] = [
    (('i.MX93',), ModelId.IOT_LINK)
]


def read_identification_sources(root_fs: str = '') -> IdentificationSources:
    paths = SysfsPaths(root_fs)
    cpuinfo = read_file(paths.CPUINFO, errors='replace')
    return IdentificationSources(
        baseboard_options=read_device_tree_string(paths.DEVICE_TREE_OPTIONS),
        baseboard_serial=read_device_tree_string(paths.DEVICE_TREE_SERIAL),
        model=read_device_tree_string(paths.DEVICE_TREE_MODEL),
        cpuinfo=cpuinfo.replace('\0', '') if cpuinfo else None)


def _first_marker(text: str | None, markers: list[tuple[tuple[str, ...], ModelId]]) -> ModelId | None:
    if not text:
        return None
    for needles, model_id in markers:
        if any(needle in text for needle in needles):
            return model_id
    return None


def match_model(sources: IdentificationSources) -> ModelId | None:
    """
    Matches the identification sources against the known hardware markers.

    Args:
        sources: strings read from the device tree and procfs

    Returns:
        the matching ModelId, None if nothing matched
    """
    if sources.baseboard_serial is not None:
        model_id = _first_marker(sources.baseboard_options, _OPTION_MARKERS)
        if model_id:
            logger.debug(f'Model {model_id} identified from baseboard options')
            return model_id

    model_id = _first_marker(sources.model, _MODEL_MARKERS)
    if model_id:
        logger.debug(f'Model {model_id} identified from device tree model "{sources.model}"')
        return model_id

    model_id = _first_marker(sources.cpuinfo, _CPU_MARKERS)
    if model_id:
        logger.debug(f'Model {model_id} identified from cpuinfo')
    return model_id


def _detect(sources: IdentificationSources | None, root_fs: str) -> ModelId | None:
    try:
        if sources is None:
            sources = read_identification_sources(root_fs)
        return match_model(sources)
    except Exception as ex:
        logger.warning(f'Hardware detection failed: {ex}')
        return None


def detect(sources: IdentificationSources | None = None, root_fs: str = '') -> ModelId:
    """
    Detects the gateway model. Never raises: unreadable or unknown hardware gives the default model.
    """
    model_id = _detect(sources, root_fs)
    if model_id is None:
        logger.info(f'No known hardware marker found, assuming {DEFAULT_MODEL_ID}')
        return DEFAULT_MODEL_ID
    return model_id


def detect_resolution(sources: IdentificationSources | None = None, root_fs: str = '') -> ProfileResolution:
    model_id = _detect(sources, root_fs)
    if model_id is None:
        logger.warning(f'Could not identify the hardware, falling back to {DEFAULT_MODEL_ID}')
        return ProfileResolution(model_id=DEFAULT_MODEL_ID, profile=PROFILES[DEFAULT_MODEL_ID], known=False)

    return ProfileResolution(requested=model_id, model_id=model_id, profile=PROFILES[model_id], known=True)
