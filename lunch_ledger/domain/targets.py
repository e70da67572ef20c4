"""Weekly experience target derived from the user's budget profile"""

import math

from lunch_ledger.domain.models import Preferences

MIN_TARGET_EXPERIENCES = 5
MAX_TARGET_EXPERIENCES = 21
BASELINE_BUDGET_LEVEL = 4.0  # "$$$$" keeps the full meal frequency


def target_experiences(preferences: Preferences) -> int:
    """
    Number of experiences the user aims to log this week.

    meal_frequency_per_day * 7, scaled by budget_level / 4, rounded half-up and
    clamped to 5-21.

    Example:
        frequency 2, level 4 -> 14 * 1.0 = 14
        frequency 3, level 2 -> 21 * 0.5 = 10.5 -> 11
    """
    base = preferences.meal_frequency_per_day * 7
    scaled = base * (preferences.budget_level / BASELINE_BUDGET_LEVEL)

    # Round half away from zero; built-in round() would send 10.5 to 10
    rounded = int(math.copysign(math.floor(abs(scaled) + 0.5), scaled))

    return max(MIN_TARGET_EXPERIENCES, min(rounded, MAX_TARGET_EXPERIENCES))
