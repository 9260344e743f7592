"""
injectrack configuration.

Every value can be overridden with an INJECTRACK_* environment variable:
the sample horizon, the aggregate class keyword and label, whether the
minimum skips zero samples, projection length and stabilization tolerance,
and the log level used by the viewer.
"""

import os

# --- Sample grid ---
# Longest supported reporting window; the daily grid always spans this many days back.
HORIZON_DAYS: int = int(os.getenv("INJECTRACK_HORIZON_DAYS", "365"))

# --- Aggregate class ---
CLASS_KEYWORD: str = os.getenv("INJECTRACK_CLASS_KEYWORD", "testosterone")
CLASS_LABEL: str = os.getenv("INJECTRACK_CLASS_LABEL", "Total T")

# --- Statistics ---
# Minimum over strictly positive samples only (gaps would otherwise pin min at 0)
MIN_EXCLUDES_ZERO: bool = os.getenv("INJECTRACK_MIN_EXCLUDES_ZERO", "true").lower() == "true"

# --- Projection ---
PROJECTION_DAYS: int = int(os.getenv("INJECTRACK_PROJECTION_DAYS", "90"))
PROJECTION_MIN_DAYS: int = int(os.getenv("INJECTRACK_PROJECTION_MIN_DAYS", "30"))
STABILIZATION_TOLERANCE_MG: float = float(os.getenv("INJECTRACK_STABILIZATION_TOLERANCE_MG", "2"))
STABILIZATION_RUNS: int = int(os.getenv("INJECTRACK_STABILIZATION_RUNS", "3"))

# --- Logging ---
LOG_LEVEL: str = os.getenv("INJECTRACK_LOG_LEVEL", "INFO")
