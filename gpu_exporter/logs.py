import logging

LOG_FORMAT = "%(asctime)s  %(levelname)s %(name)s %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Configure the root logger; DEBUG surfaces per-field telemetry misses."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
    )
