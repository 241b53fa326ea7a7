"""
Step Scientists Domain Constants

Purpose
-------
Gameplay constants for step conversion, lifetime bonuses and infinite
progression. These values define how steps become cells and experience from
a player's perspective.

IMPORTANT:
This module contains GAMEPLAY constants only. Infrastructure settings
(database URL, log level) belong in stepscientists.core.config.

Design Notes
------------
- Values are annotated with typing.Final to signal immutability
- Grouped by game system
- All percentages are whole-number integers; no float math downstream
- The named achievement and milestone tables live in
  stepscientists.modules.progression.catalog
"""

from __future__ import annotations

from typing import Final

# ============================================================================
# STEP CONVERSION
# ============================================================================

DISCOVERY_STEPS_PER_CELL: Final[int] = 1000  # Base rate in discovery mode
TRAINING_STEPS_PER_XP: Final[int] = 10  # Base rate in training mode
MIN_STEPS_PER_UNIT: Final[int] = 1  # Efficiency can never push a rate below 1

# ============================================================================
# EFFICIENCY & BONUS CAPS
# ============================================================================

MAX_EFFICIENCY_PCT: Final[int] = 50  # 20 from named tiers + 30 from infinite progression
MAX_BONUS_CELLS_PER_DAY: Final[int] = 15  # 5 from named tiers + 10 from infinite progression
PERCENT: Final[int] = 100

# ============================================================================
# BASELINE BUNDLE (0 STEPS)
# ============================================================================

BASE_BONUS_CELLS_PER_DAY: Final[int] = 0
BASE_DISCOVERY_EFFICIENCY_PCT: Final[int] = 0
BASE_TRAINING_EFFICIENCY_PCT: Final[int] = 0
BASE_CLICK_POWER: Final[int] = 1
BASE_EXPERIENCE_BANK_CAP: Final[int] = 100
BASE_TRAINING_ROSTER_SLOTS: Final[int] = 10
BASE_RELEASE_XP_BONUS_PCT: Final[int] = 0

# ============================================================================
# INFINITE PROGRESSION
# ============================================================================

INFINITE_PROGRESSION_START_STEPS: Final[int] = 3_500_000
INFINITE_PROGRESSION_INTERVAL_STEPS: Final[int] = 600_000
INFINITE_MAX_EXTRA_BONUS_CELLS: Final[int] = 10
INFINITE_EFFICIENCY_PER_MILESTONE: Final[int] = 2
INFINITE_MAX_EXTRA_EFFICIENCY_PCT: Final[int] = 30
INFINITE_PROGRESSION_NAME: Final[str] = "Infinite Progression"
