""" System query data structures """
from datetime import datetime

from clabedge.common.clabedge_base_model import ClabEdgeBaseModel


class Uptime(ClabEdgeBaseModel):
    seconds:    int
    formatted:  str
    boot_time:  str | None = None


class CpuTemperature(ClabEdgeBaseModel):
    """ SoC temperature. source is the thermal zone file or the psutil sensor it was read from """
    celsius:    float
    fahrenheit: float
    source:     str


class LoadAverage(ClabEdgeBaseModel):
    load_1:     float
    load_5:     float
    load_15:    float


class MemoryUsage(ClabEdgeBaseModel):
    total_kb:       int
    available_kb:   int
    used_percent:   int


class SystemInfo(ClabEdgeBaseModel):
    device_type:    str
    known:          bool
    hostname:       str
    uptime:         Uptime
    load_average:   LoadAverage
    memory:         MemoryUsage
    temperature:    CpuTemperature | None = None


class RtcTime(ClabEdgeBaseModel):
    """ Hardware clock reading. timestamp is None when the clock text cannot be parsed """
    time:       str
    timestamp:  datetime | None = None
    source:     str


class WatchdogStatus(ClabEdgeBaseModel):
    enabled:        bool = False
    device:         str | None = None
    timeout_sec:    float | None = None
    source:         str | None = None


class TpmStatus(ClabEdgeBaseModel):
    available:  bool = False
    device:     str | None = None
    functional: bool | None = None
    random:     str | None = None
