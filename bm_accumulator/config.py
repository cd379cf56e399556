"""
Accumulator configuration
Values are read from the environment once, at import time.
"""

import logging
import os
import sys

DEFAULT_PAIRING_CURVE = os.getenv('ACC_PAIRING_CURVE', 'MNT224')
DEFAULT_LOG_LEVEL = os.getenv('ACC_LOG_LEVEL', 'WARNING')

# Members and verifiers reject unsigned announcements unless disabled
VERIFY_UPDATE_SIGNATURES = os.getenv('ACC_VERIFY_UPDATE_SIGNATURES', 'true').lower() == 'true'

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


class Config:
    """Configuration holder"""

    def __init__(self):
        self.pairing_curve = DEFAULT_PAIRING_CURVE
        self.log_level = DEFAULT_LOG_LEVEL
        self.verify_update_signatures = VERIFY_UPDATE_SIGNATURES


def setup_logging(level: str = None) -> None:
    """
    Configure the root logger for the package and the role modules.

    Parameters
    ----------
    level : str, optional
        Logging level name. Defaults to ``config.log_level``.

    Notes
    -----
    Calling this more than once only changes the level.
    """
    logger = logging.getLogger()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.WARNING)
    logger.setLevel(log_level)

    if not any(getattr(h, '_bm_accumulator', False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._bm_accumulator = True
        logger.addHandler(handler)


# Global configuration instance
config = Config()
