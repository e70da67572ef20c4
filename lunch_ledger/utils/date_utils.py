"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Iterable, List


def distinct_days(moments: Iterable[datetime]) -> List[date]:
    """Calendar days touched by the given moments, sorted and de-duplicated"""
    return sorted({moment.date() for moment in moments})


def longest_consecutive_run(days: List[date]) -> int:
    """
    Length of the longest run of consecutive calendar days.

    Expects sorted, de-duplicated days (see distinct_days). A gap of more than
    one day resets the run to 1.
    """
    if not days:
        return 0

    longest = current = 1
    for previous, day in zip(days, days[1:]):
        if (day - previous).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest
