"""Project defaults for decant.

Transform defaults mirror the command-line defaults; the log level can be
overridden with ``DECANT_LOG_LEVEL``.
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Transform defaults
# ---------------------------------------------------------------------------
DEFAULT_KEEP_LINKS = True
DEFAULT_KEEP_IMAGES = False
DEFAULT_PRESERVE_TABLES = True
DEFAULT_MAX_HEADING_LEVEL = 6
DEFAULT_AGGRESSIVE = False

# ---------------------------------------------------------------------------
# Stats output
# ---------------------------------------------------------------------------
STATS_FORMATS = ("md", "json")
DEFAULT_STATS_FORMAT = "md"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.getenv("DECANT_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
