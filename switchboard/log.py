import logging
import os
from typing import Optional

LOG_FORMAT = '%(levelname)s: %(message)s'

_ALIASES = {
    'warn': 'WARNING',
    'crit': 'CRITICAL',
}


def level_name(level: Optional[str]=None) -> str:
    """
    Normalise a level name, falling back to ``LOG_LEVEL`` and then ``info``.
    """
    level = level or os.environ.get('LOG_LEVEL') or 'info'
    level = level.strip().lower()
    return _ALIASES.get(level, level.upper())


def configure(level: Optional[str]=None) -> None:
    logging.basicConfig(format=LOG_FORMAT, level=level_name(level))
