"""
Command-line options for the exporter.

Both flags can also be preset through the environment:
    GPU_EXPORTER_LISTEN_ADDRESS=127.0.0.1:9445
    GPU_EXPORTER_DEBUG=true
"""

import argparse
import os
from typing import List, Optional, Tuple

DEFAULT_LISTEN_ADDRESS = ":9445"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in ("1", "true", "yes")


def parse_listen_address(addr: str) -> Tuple[str, int]:
    """Split "host:port" into its parts. An empty host binds all interfaces."""
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port_num = int(port)
    except ValueError:
        raise ValueError(f"invalid port in address {addr!r}") from None
    if not 0 < port_num < 65536:
        raise ValueError(f"port out of range in address {addr!r}")
    return host or "0.0.0.0", port_num


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="nvidia-gpu-exporter",
        description="Export NVIDIA GPU metrics in Prometheus format",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=os.getenv("GPU_EXPORTER_LISTEN_ADDRESS", DEFAULT_LISTEN_ADDRESS),
        help="Address to listen on for web interface and telemetry.",
    )
    parser.add_argument(
        "--log.debug",
        dest="debug",
        action="store_true",
        default=_env_flag("GPU_EXPORTER_DEBUG"),
        help="sets log level to debug",
    )
    args = parser.parse_args(argv)

    try:
        args.host, args.port = parse_listen_address(args.listen_address)
    except ValueError as e:
        parser.error(str(e))
    return args
