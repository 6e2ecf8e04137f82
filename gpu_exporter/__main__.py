"""
nvidia-gpu-exporter [--web.listen-address ADDR] [--log.debug]

Example:
    python -m gpu_exporter --web.listen-address 127.0.0.1:9445
"""

import logging
import sys
from typing import List, Optional

from prometheus_client import CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector

from gpu_exporter import app as webapp
from gpu_exporter import nvml
from gpu_exporter.collector import GPUCollector
from gpu_exporter.config import parse_args
from gpu_exporter.logs import setup_logging

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug)

    try:
        nvml.init()
    except nvml.NVMLError as e:
        logger.critical(
            "Couldn't initialize NVML. Make sure NVML is in the shared library search path: %s", e
        )
        sys.exit(1)

    try:
        logger.info("Driver version: %s", nvml.driver_version())
    except nvml.NVMLError as e:
        logger.error("Cannot get driver version: %s", e)

    registry = CollectorRegistry()
    # process_*, python_info and python_gc_* alongside the GPU metrics
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    registry.register(GPUCollector())
    app = webapp.create_app(registry)

    status = 0
    logger.info("Listening on %s", args.listen_address)
    try:
        webapp.run(app, args.host, args.port)
    # werkzeug calls sys.exit(1) itself when the port is taken
    except (OSError, SystemExit) as e:
        logger.error("Shutting down, HTTP server failed: %s", e)
        status = 1
    finally:
        try:
            nvml.shutdown()
        except nvml.NVMLError as e:
            logger.error("Failed to shutdown NVML: %s", e)
        else:
            logger.info("Shutting down NVML")
    return status


if __name__ == "__main__":
    sys.exit(main())
