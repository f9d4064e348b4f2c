"""Shared vocabulary and thresholds for grind coaching and shot analytics.

Every component that classifies an extraction reads its bands from here so
the correlator, recommender, tracker and statistics agree on what "optimal"
means.
"""

from enum import Enum


class TastePrimary(str, Enum):
    SOUR = "SOUR"  # under-extracted
    PERFECT = "PERFECT"
    BITTER = "BITTER"  # over-extracted


class TasteSecondary(str, Enum):
    WEAK = "WEAK"
    STRONG = "STRONG"


class AdjustmentDirection(str, Enum):
    FINER = "FINER"
    COARSER = "COARSER"
    NO_CHANGE = "NO_CHANGE"


class ConfidenceLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ReasonCode(str, Enum):
    TASTE_SOUR = "TASTE_SOUR"
    TASTE_BITTER = "TASTE_BITTER"
    TASTE_PERFECT = "TASTE_PERFECT"
    TIME_TOO_FAST = "TIME_TOO_FAST"
    TIME_TOO_SLOW = "TIME_TOO_SLOW"
    TIME_OPTIMAL = "TIME_OPTIMAL"
    NO_SIGNAL = "NO_SIGNAL"


TASTE_REASON_CODES = frozenset(
    {ReasonCode.TASTE_SOUR, ReasonCode.TASTE_BITTER, ReasonCode.TASTE_PERFECT}
)


# Extraction time band, seconds, inclusive on both edges.
OPTIMAL_EXTRACTION_MIN_SECONDS = 25
OPTIMAL_EXTRACTION_MAX_SECONDS = 30

# Deviation (seconds outside the optimal band) -> grind steps.
MINOR_DEVIATION_SECONDS = 3
MODERATE_DEVIATION_SECONDS = 6
MINOR_ADJUSTMENT_STEPS = 1
MODERATE_ADJUSTMENT_STEPS = 2
MAJOR_ADJUSTMENT_STEPS = 3

# Inside the band, a shot this far from both edges counts as comfortably optimal.
BAND_EDGE_MARGIN_SECONDS = 1

FOLLOW_THROUGH_TOLERANCE = 0.1

MIN_SHOTS_FOR_DISTRIBUTION = 3
MIN_SHOTS_FOR_TRENDS = 5

# Brew ratio (yield / dose) bands.
TYPICAL_RATIO_MIN = 1.5
TYPICAL_RATIO_MAX = 3.0
OPTIMAL_RATIO_MIN = 2.0
OPTIMAL_RATIO_MAX = 2.5

# Below these absolute changes between halves a trend is "stable".
STABLE_RATIO_DELTA = 0.1
STABLE_TIME_DELTA_SECONDS = 1.0

# Grinder scale validation limits.
SCALE_MIN_FLOOR = 0.0
SCALE_MAX_CEILING = 1000.0
STEP_SIZE_MIN = 0.01
STEP_SIZE_MAX = 10.0
STEP_SIZE_PRESETS = (0.1, 0.2, 0.5, 1.0)

GRINDER_PRESETS: tuple[tuple[float, float, float], ...] = (
    (1.0, 10.0, 0.5),
    (30.0, 80.0, 1.0),
    (50.0, 60.0, 0.5),
    (0.0, 100.0, 1.0),
)

# Trends look back this many days from the newest shot.
TREND_WINDOW_DAYS = 30

# Per-shot quality score components, 0-100 in total.
QUALITY_OPTIMAL_TIME_POINTS = 25
QUALITY_ACCEPTABLE_TIME_POINTS = 15
QUALITY_POOR_TIME_POINTS = 5
QUALITY_TYPICAL_RATIO_POINTS = 20
QUALITY_ACCEPTABLE_RATIO_POINTS = 12
QUALITY_POOR_RATIO_POINTS = 4
QUALITY_TASTE_PERFECT_POINTS = 30
QUALITY_TASTE_NEUTRAL_POINTS = 15
QUALITY_TASTE_INFORMATIVE_POINTS = 10
QUALITY_CONSISTENT_POINTS = 15
QUALITY_INCONSISTENT_POINTS = 5
QUALITY_DEVIATION_BONUS_POINTS = 5
QUALITY_MAX_SCORE = 100

ACCEPTABLE_EXTRACTION_MIN_SECONDS = 20
ACCEPTABLE_EXTRACTION_MAX_SECONDS = 35
ACCEPTABLE_RATIO_MIN = 1.3
ACCEPTABLE_RATIO_MAX = 2.8

# Distance from the bean's averages for the consistency points and the precision bonus.
CONSISTENT_RATIO_DEVIATION = 0.3
CONSISTENT_TIME_DEVIATION_SECONDS = 5
TIGHT_RATIO_DEVIATION = 0.1
TIGHT_TIME_DEVIATION_SECONDS = 2

EXCELLENT_QUALITY_SCORE = 85
GOOD_QUALITY_SCORE = 60
QUALITY_TREND_THRESHOLD = 5
RECENT_QUALITY_WINDOW = 5
