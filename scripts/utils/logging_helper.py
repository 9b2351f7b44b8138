"""A basic logging helper."""
import logging
import sys
from typing import TextIO


def setup_logging(level=logging.INFO, stream: TextIO = sys.stderr):
    """Configures basic logging.

    Log records go to *stream* (stderr by default) so that a script's report
    on stdout stays clean.
    """
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(stream)],
        force=True,
    )
