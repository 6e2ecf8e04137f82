"""
Thin adapter over the NVML Python binding (pynvml).

Every accessor raises pynvml.NVMLError on failure; `read()` turns a call
into a Reading so callers can decide per field whether to skip or continue.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

import pynvml
from pynvml import NVMLError

__all__ = ["NVMLError", "Device", "Reading", "read", "init", "shutdown", "driver_version", "device_count"]


def _text(value) -> str:
    # Older bindings hand back bytes for strings
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


@dataclass
class Reading:
    """Outcome of a single NVML query: either a value or the error it raised."""
    value: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def unexpected(self) -> bool:
        """True when the failure did not come from NVML itself."""
        return self.error is not None and not isinstance(self.error, NVMLError)


def read(fn: Callable, *args) -> Reading:
    """Call fn, capturing any exception it raises as the Reading's error."""
    try:
        return Reading(value=fn(*args))
    except Exception as e:
        return Reading(error=e)


def init() -> None:
    pynvml.nvmlInit()


def shutdown() -> None:
    pynvml.nvmlShutdown()


def driver_version() -> str:
    return _text(pynvml.nvmlSystemGetDriverVersion())


def device_count() -> int:
    return int(pynvml.nvmlDeviceGetCount())


class Device:
    """A GPU looked up by index for the duration of one scrape."""

    def __init__(self, handle):
        self.handle = handle

    @classmethod
    def from_index(cls, index: int) -> "Device":
        return cls(pynvml.nvmlDeviceGetHandleByIndex(index))

    def minor_number(self) -> int:
        return int(pynvml.nvmlDeviceGetMinorNumber(self.handle))

    def uuid(self) -> str:
        return _text(pynvml.nvmlDeviceGetUUID(self.handle))

    def name(self) -> str:
        return _text(pynvml.nvmlDeviceGetName(self.handle))

    def memory_info(self) -> Tuple[int, int]:
        """Returns (total, used) framebuffer memory in bytes."""
        mem = pynvml.nvmlDeviceGetMemoryInfo(self.handle)
        return mem.total, mem.used

    def utilization(self) -> int:
        """Percent of the last sample period a kernel was running."""
        return pynvml.nvmlDeviceGetUtilizationRates(self.handle).gpu

    def power_usage(self) -> int:
        return pynvml.nvmlDeviceGetPowerUsage(self.handle)  # milliwatts

    def temperature(self) -> int:
        return pynvml.nvmlDeviceGetTemperature(self.handle, pynvml.NVML_TEMPERATURE_GPU)

    def fan_speed(self) -> int:
        return pynvml.nvmlDeviceGetFanSpeed(self.handle)
