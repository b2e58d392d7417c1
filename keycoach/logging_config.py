"""keycoach logging configuration.

keycoach uses the shared InstruktAI logging standard (`instrukt_ai_logging`).
The log level is read from `KEYCOACH_LOG_LEVEL`.
"""

from __future__ import annotations

import os
from typing import Optional

from instrukt_ai_logging import configure_logging


def setup_logging(level: Optional[str] = None) -> None:
    """Configure keycoach logging.

    Args:
        level: Optional override for `KEYCOACH_LOG_LEVEL`.
    """
    if level:
        os.environ["KEYCOACH_LOG_LEVEL"] = level

    configure_logging("keycoach")
