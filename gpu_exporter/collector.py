"""
Prometheus collector for NVIDIA GPU telemetry.

Devices are enumerated fresh on every scrape. Identity lookups (handle,
minor number, uuid, name) are mandatory and skip the device on failure;
telemetry reads are independent and only drop their own metric.
"""

import logging
import threading

from prometheus_client import Gauge

from gpu_exporter import nvml as nvml_module

logger = logging.getLogger(__name__)

NAMESPACE = "nvidia_gpu"
LABELS = ["minor_number", "uuid", "name"]


class GPUCollector:
    def __init__(self, nvml=nvml_module):
        self._nvml = nvml
        # Only one collect() in progress at a time
        self._lock = threading.Lock()

        # registry=None keeps these out of the global default registry;
        # the collector itself is what gets registered.
        self.num_devices = Gauge(
            "num_devices", "Number of GPU devices",
            namespace=NAMESPACE, registry=None,
        )
        self.used_memory = Gauge(
            "memory_used_bytes", "Memory used by the GPU device in bytes",
            LABELS, namespace=NAMESPACE, registry=None,
        )
        self.total_memory = Gauge(
            "memory_total_bytes", "Total memory of the GPU device in bytes",
            LABELS, namespace=NAMESPACE, registry=None,
        )
        self.duty_cycle = Gauge(
            "duty_cycle",
            "Percent of time over the past sample period during which one or more kernels were executing on the GPU device",
            LABELS, namespace=NAMESPACE, registry=None,
        )
        self.power_usage = Gauge(
            "power_usage_milliwatts", "Power usage of the GPU device in milliwatts",
            LABELS, namespace=NAMESPACE, registry=None,
        )
        self.temperature = Gauge(
            "temperature_celsius", "Temperature of the GPU device in celsius",
            LABELS, namespace=NAMESPACE, registry=None,
        )
        self.fan_speed = Gauge(
            "fanspeed_percent", "Fanspeed of the GPU device as a percent of its maximum",
            LABELS, namespace=NAMESPACE, registry=None,
        )

    @property
    def _vectors(self):
        return [
            self.used_memory,
            self.total_memory,
            self.duty_cycle,
            self.power_usage,
            self.temperature,
            self.fan_speed,
        ]

    def describe(self):
        """Static metric schema; never touches NVML."""
        descs = list(self.num_devices.describe())
        for vec in self._vectors:
            descs.extend(vec.describe())
        return descs

    def collect(self):
        """Re-enumerate devices and return the current metric families."""
        with self._lock:
            for vec in self._vectors:
                vec.clear()

            count = self._nvml.read(self._nvml.device_count)
            if not count.ok:
                logger.error("Cannot get device count: %s", count.error, exc_info=_trace(count))
                return []
            self.num_devices.set(count.value)

            for index in range(count.value):
                self._collect_device(index)

            families = list(self.num_devices.collect())
            for vec in self._vectors:
                families.extend(vec.collect())
            return families

    def _collect_device(self, index: int) -> None:
        """Populate the gauges for one device, skipping it if identity fails."""
        handle = self._nvml.read(self._nvml.Device.from_index, index)
        if not handle.ok:
            logger.warning(
                "Cannot get device handle (device_index=%d): %s", index, handle.error, exc_info=_trace(handle)
            )
            return
        dev = handle.value

        labels = []
        for field, accessor in (("minor number", dev.minor_number), ("UUID", dev.uuid), ("name", dev.name)):
            result = self._nvml.read(accessor)
            if not result.ok:
                logger.warning(
                    "Cannot get device %s (device_index=%d): %s", field, index, result.error, exc_info=_trace(result)
                )
                return
            labels.append(str(result.value))

        memory = self._nvml.read(dev.memory_info)
        if memory.ok:
            total, used = memory.value
            self.used_memory.labels(*labels).set(used)
            self.total_memory.labels(*labels).set(total)
        else:
            logger.debug("Cannot get memory info (device_index=%d): %s", index, memory.error, exc_info=_trace(memory))

        for field, accessor, gauge in (
            ("utilization rates", dev.utilization, self.duty_cycle),
            ("power usage", dev.power_usage, self.power_usage),
            ("temperature", dev.temperature, self.temperature),
            ("fan speed", dev.fan_speed, self.fan_speed),
        ):
            result = self._nvml.read(accessor)
            if result.ok:
                gauge.labels(*labels).set(result.value)
            else:
                logger.debug("Cannot get %s (device_index=%d): %s", field, index, result.error, exc_info=_trace(result))


def _trace(reading):
    # NVML errors are routine; anything else gets its traceback logged
    return reading.error if reading.unexpected else None
