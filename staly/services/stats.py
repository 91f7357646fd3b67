"""
Derived figures for a stay list: counts, day totals, search.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from staly.core.localization import is_japanese, localized_text
from staly.models.schemas import Stay


@dataclass
class StayStats:
    """Aggregates shown on the dashboard."""

    stay_count: int
    total_days: int
    total_nights: int
    city_count: int
    hotel_count: int
    year_fraction: float
    first_stay: Optional[Stay] = None


def day_count(stay: Stay) -> int:
    """Calendar days covered, counting both ends. Open stays count as 1."""
    if stay.check_out is None:
        return 1
    return max(1, (stay.check_out - stay.check_in).days + 1)


def nights_count(check_in: date, check_out: Optional[date]) -> int:
    """Nights between the dates; 0 without a check-out."""
    if check_out is None:
        return 0
    return max(0, (check_out - check_in).days)


def _distinct_normalized(values) -> int:
    return len({v.strip().lower() for v in values if v and v.strip()})


def summarize_stays(stays: list[Stay]) -> StayStats:
    total_days = sum(day_count(stay) for stay in stays)
    return StayStats(
        stay_count=len(stays),
        total_days=total_days,
        total_nights=sum(nights_count(stay.check_in, stay.check_out) for stay in stays),
        city_count=_distinct_normalized(stay.city for stay in stays),
        hotel_count=_distinct_normalized(stay.title for stay in stays),
        year_fraction=round(total_days / 365.0, 2),
        first_stay=min(stays, key=lambda stay: stay.check_in) if stays else None,
    )


def filter_stays(stays: list[Stay], query: Optional[str]) -> list[Stay]:
    """
    Newest-first stays whose title, city or note contains the query.

    Matching is case-insensitive; a blank query keeps every stay.
    """
    ordered = sorted(stays, key=lambda stay: stay.check_in, reverse=True)
    needle = (query or "").strip().casefold()
    if not needle:
        return ordered
    return [
        stay
        for stay in ordered
        if needle in stay.title.casefold()
        or (stay.city and needle in stay.city.casefold())
        or (stay.note and needle in stay.note.casefold())
    ]


def share_summary(stats: StayStats) -> str:
    """Plain-text summary for sharing."""
    if is_japanese():
        days = f"{stats.total_days}日"
    else:
        days = f"{stats.total_days} days"
    return "\n".join([
        localized_text("CheckInn ライフステータス", "CheckInn Life Status"),
        f"{localized_text('滞在', 'Stays')}: {stats.stay_count}",
        f"{localized_text('日数', 'Days')}: {days}",
        f"{localized_text('都市', 'Cities')}: {stats.city_count}",
        f"{localized_text('ホテル', 'Hotels')}: {stats.hotel_count}",
    ])
