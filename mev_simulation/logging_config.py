"""
Logging configuration for simulation scripts.

Usage:
    from mev_simulation import logging_config
    logging_config.setup()
"""

import logging
import sys


def setup(level=logging.INFO):
    """
    Configure root logging for readable simulation output.

    - Uses shorter timestamp format (HH:MM:SS instead of full datetime)
    - Keeps the per-trade chatter of the actors at WARNING unless debugging
    """

    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
    )
    console.setFormatter(formatter)
    root.addHandler(console)

    logging.getLogger("mev_simulation").setLevel(level)
    if level > logging.DEBUG:
        logging.getLogger("mev_simulation.actors").setLevel(logging.WARNING)


def setup_minimal():
    """
    Only warnings and errors.
    Good for batch sweeps where per-run progress is noise.
    """
    setup(level=logging.WARNING)


def setup_debug():
    """
    Verbose logging for debugging.
    Shows every commit, reveal and sandwich leg.
    """
    setup(level=logging.DEBUG)
