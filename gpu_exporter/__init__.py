"""gpu_exporter
Prometheus exporter for NVIDIA GPU telemetry read through NVML.

Modules
-------
nvml      : pynvml adapter (init/shutdown, device lookups, Reading results)
collector : GPUCollector, rebuilds the gauge set on every scrape
app       : Flask app serving a CollectorRegistry
config    : command-line / environment options
logs      : logging setup
"""

__version__ = "1.0.0"

__all__ = ["nvml", "collector", "app", "config", "logs"]
