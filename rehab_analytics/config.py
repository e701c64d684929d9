"""
Rehab Analytics - Configuration
===============================
Centralised constants for the comparison engine and the few runtime
settings of the HTTP app. Runtime settings load from the project-level
.env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

LOG_LEVEL: str = os.getenv("REHAB_ANALYTICS_LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("REHAB_ANALYTICS_LOG_FILE", "")    # empty = console only

APP_VERSION = "1.0.0"

# ── Score normalisation ─────────────────────────────────────────────────
SCORE_MIN = 1.0
SCORE_MAX = 5.0
MINUTES_PER_CONCENTRATION_POINT = 60.0
DEFAULT_SEVERITY_RATING = 3
CONSTRAINTS_INVERSION_BASE = 6

# Success score weights
ACHIEVEMENT_AREA_WEIGHT = 0.5
SIGNIFICANT_ACHIEVEMENT_WEIGHT = 2.0
LEARNING_WEIGHT = 1.0
TRANSFERABLE_STRATEGY_WEIGHT = 1.0

# ── Time comparison ─────────────────────────────────────────────────────
# Absolute-difference cutoffs, not a hypothesis test
DIMENSION_SIGNIFICANCE_THRESHOLD = 0.5
OVERALL_SIGNIFICANCE_THRESHOLD = 0.3
ZERO_BASELINE_GROWTH_RATE = 100.0

# ── Progress analysis ───────────────────────────────────────────────────
TREND_THRESHOLD = 0.05          # slope per assessment, tunable
MIN_PROGRESS_ASSESSMENTS = 2
RELIABILITY_ASSESSMENT_SCALE = 5.0
RELIABILITY_DAY_SCALE = 30.0

# ── Score bands (lower bounds, inclusive) ───────────────────────────────
EXCELLENT_BAND_MIN = 4.0
GOOD_BAND_MIN = 3.0
FAIR_BAND_MIN = 2.0

# ── Outlier detection ───────────────────────────────────────────────────
IQR_OUTLIER_FACTOR = 1.5
