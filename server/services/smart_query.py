"""
Smart Query

Best-effort keyword interpretation for free text event searches.
Recognises a handful of period words (English and Japanese); every other
word is passed to Google Calendar as free text search terms.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from services.time_range import PresetRange, TimeRangePreset, resolve_time_range

PERIOD_KEYWORDS = {
    "today": TimeRangePreset.TODAY,
    "今日": TimeRangePreset.TODAY,
    "this_week": TimeRangePreset.THIS_WEEK,
    "this-week": TimeRangePreset.THIS_WEEK,
    "今週": TimeRangePreset.THIS_WEEK,
    "this_month": TimeRangePreset.THIS_MONTH,
    "this-month": TimeRangePreset.THIS_MONTH,
    "今月": TimeRangePreset.THIS_MONTH,
}


@dataclass
class QueryInterpretation:
    time_min: Optional[str]
    time_max: Optional[str]
    keywords: List[str]

    @property
    def search_text(self) -> Optional[str]:
        return " ".join(self.keywords) or None

    def to_dict(self) -> Dict[str, Any]:
        time_range: Any = "unspecified"
        if self.time_min and self.time_max:
            time_range = {"start": self.time_min, "end": self.time_max}
        return {"timeRange": time_range, "keywords": self.keywords}


def interpret_query(query: str, now: Optional[datetime] = None, time_zone: str = "UTC") -> QueryInterpretation:
    """Split a query into an optional period and search keywords."""
    words = query.lower().split()

    # today beats this week, this week beats this month
    preset = None
    for candidate in (TimeRangePreset.TODAY, TimeRangePreset.THIS_WEEK, TimeRangePreset.THIS_MONTH):
        if any(PERIOD_KEYWORDS.get(word) is candidate for word in words):
            preset = candidate
            break

    keywords = [word for word in words if word not in PERIOD_KEYWORDS]
    if preset is None:
        return QueryInterpretation(time_min=None, time_max=None, keywords=keywords)

    time_min, time_max = resolve_time_range(PresetRange(preset), now=now, time_zone=time_zone)
    return QueryInterpretation(time_min=time_min, time_max=time_max, keywords=keywords)
