import pynvml
import pytest
from prometheus_client import CollectorRegistry

from gpu_exporter import nvml
from gpu_exporter.collector import GPUCollector


def nvml_error(code=pynvml.NVML_ERROR_NOT_SUPPORTED):
    return pynvml.NVMLError(code)


class FakeDevice:
    """Stands in for nvml.Device; any accessor named in `failing` raises."""

    def __init__(
        self,
        minor=0,
        uuid="GPU-00000000-0000-0000-0000-000000000000",
        name="Tesla T4",
        memory=(16106127360, 4294967296),
        utilization=42,
        power=70250,
        temperature=61,
        fan=33,
        failing=(),
    ):
        self._values = {
            "minor_number": minor,
            "uuid": uuid,
            "name": name,
            "memory_info": memory,
            "utilization": utilization,
            "power_usage": power,
            "temperature": temperature,
            "fan_speed": fan,
        }
        self.failing = set(failing)

    def _get(self, field):
        if field in self.failing:
            raise nvml_error()
        return self._values[field]

    def minor_number(self):
        return self._get("minor_number")

    def uuid(self):
        return self._get("uuid")

    def name(self):
        return self._get("name")

    def memory_info(self):
        return self._get("memory_info")

    def utilization(self):
        return self._get("utilization")

    def power_usage(self):
        return self._get("power_usage")

    def temperature(self):
        return self._get("temperature")

    def fan_speed(self):
        return self._get("fan_speed")


class _DeviceLookup:
    def __init__(self, owner):
        self._owner = owner

    def from_index(self, index):
        if index in self._owner.handle_errors:
            raise nvml_error(pynvml.NVML_ERROR_GPU_IS_LOST)
        return self._owner.devices[index]


class FakeNVML:
    """Drop-in for the gpu_exporter.nvml module, driven by a device list."""

    read = staticmethod(nvml.read)

    def __init__(self, devices=(), count_error=False, handle_errors=()):
        self.devices = list(devices)
        self.count_error = count_error
        self.handle_errors = set(handle_errors)
        self.Device = _DeviceLookup(self)

    def device_count(self):
        if self.count_error:
            raise nvml_error(pynvml.NVML_ERROR_UNKNOWN)
        return len(self.devices)


def labels_for(device: FakeDevice) -> dict:
    return {
        "minor_number": str(device._values["minor_number"]),
        "uuid": device._values["uuid"],
        "name": device._values["name"],
    }


@pytest.fixture
def fake_nvml() -> FakeNVML:
    """Two healthy GPUs."""
    return FakeNVML(
        [
            FakeDevice(minor=0, uuid="GPU-aaaa", name="Tesla T4"),
            FakeDevice(
                minor=1,
                uuid="GPU-bbbb",
                name="NVIDIA A100-SXM4-40GB",
                memory=(42949672960, 1073741824),
                utilization=97,
                power=310000,
                temperature=74,
                fan=0,
            ),
        ]
    )


@pytest.fixture
def collector(fake_nvml: FakeNVML) -> GPUCollector:
    return GPUCollector(nvml=fake_nvml)


@pytest.fixture
def registry(collector: GPUCollector) -> CollectorRegistry:
    reg = CollectorRegistry()
    reg.register(collector)
    return reg
