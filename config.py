"""
Rewards Configuration
Adjust these values to change how points, badges and levels are awarded
"""

import os
from dotenv import load_dotenv

load_dotenv()

# ============================================================================
# Runtime Toggles
# ============================================================================

# True in development: an unknown condition tag raises instead of
# evaluating as locked
REWARDS_STRICT_CONDITIONS = os.getenv("REWARDS_STRICT_CONDITIONS", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "true").lower() in ("1", "true", "yes")

# ============================================================================
# Session Points
# ============================================================================

BASE_SESSION_POINTS = {
    "strength": 100,
    "cardio": 50,
    "yoga": 40,
    "recovery": 30,
    "rest": 0,
    "unknown": 0,
}

# Applied when 3+ strength sessions are logged in the current week
WEEKLY_CONSISTENCY_MIN_SESSIONS = 3
WEEKLY_CONSISTENCY_MULTIPLIER = 1.20

# (minimum day streak, multiplier), highest first
STREAK_MULTIPLIERS = [
    (365, 1.40),
    (90, 1.30),
    (30, 1.20),
    (7, 1.10),
]

# ============================================================================
# Badges
# ============================================================================

# Flat bonus added once when a badge unlocks
BADGE_UNLOCK_POINTS = 500

# Bump when the badge catalog changes shape (see badge_migration.py)
CURRENT_BADGE_SCHEMA_VERSION = 2

# ============================================================================
# Penalties
# ============================================================================

STREAK_BREAK_PENALTY = -100
WEEKLY_SHORTFALL_PENALTY = -150

# ============================================================================
# Duration Units
# ============================================================================

# Producers disagree on units: anything below this is read as minutes
DURATION_MINUTES_THRESHOLD = 300

# ============================================================================
# Level Progression
# ============================================================================

# LEVEL_THRESHOLDS[n] is the total needed to reach level n + 1
# Level 1: 0, Level 2: 500, Level 3: 1500, ...
LEVEL_THRESHOLDS = [0, 500, 1500, 3000, 5000, 7500, 10500, 14000, 18000, 22500, 27500]

# Each level past the table costs this much more
LEVEL_EXTRAPOLATION_STEP = 5000
