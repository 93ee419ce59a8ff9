"""Daily Content: date keys, prompts and parsing for the quote / almanac cards.

Invariants:
    - "Today" is the ISO date in the configured reference timezone, not UTC
    - An entry is fresh only when its date equals today exactly
    - Generated text is stored cleaned: no '*' markup, no surrounding whitespace
    - parse_almanac never raises; unknown lines are kept in `lines`
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from zoneinfo import ZoneInfo

from samaj_diary.core.domain_types import IsoDate


@dataclass
class CachedText:
    date: str
    text: str
    sources: list[dict] = field(default_factory=list)

    def to_document(self) -> dict:
        return {"date": self.date, "text": self.text, "sources": self.sources}

    @classmethod
    def from_document(cls, doc: dict | None) -> "CachedText | None":
        if not isinstance(doc, dict) or not doc.get("date") or not doc.get("text"):
            return None
        sources = doc.get("sources")
        return cls(
            date=str(doc["date"]),
            text=str(doc["text"]),
            sources=sources if isinstance(sources, list) else [],
        )


def today_in_timezone(tz_name: str, now: datetime) -> IsoDate:
    """`now` must be timezone-aware."""
    return IsoDate(now.astimezone(ZoneInfo(tz_name)).date().isoformat())


def is_fresh(entry: CachedText | None, today: str) -> bool:
    return entry is not None and entry.date == today


def clean_generated_text(text: str) -> str:
    return (text or "").replace("*", "").strip()


# --- Hindi date display -------------------------------------------------------

_WEEKDAYS_HI = (
    "सोमवार", "मंगलवार", "बुधवार", "गुरुवार", "शुक्रवार", "शनिवार", "रविवार",
)
_MONTHS_HI = (
    "जनवरी", "फ़रवरी", "मार्च", "अप्रैल", "मई", "जून",
    "जुलाई", "अगस्त", "सितंबर", "अक्तूबर", "नवंबर", "दिसंबर",
)


def hindi_date_display(day: date) -> str:
    """e.g. 'सोमवार, 19 अक्तूबर 2026'."""
    return (
        f"{_WEEKDAYS_HI[day.weekday()]}, "
        f"{day.day} {_MONTHS_HI[day.month - 1]} {day.year}"
    )


# --- Prompts -----------------------------------------------------------------

QUOTE_PROMPT = (
    "लिखें: डॉ. बी.आर. अंबेडकर का एक छोटा और प्रेरणादायक हिंदी सुविचार जो "
    "एकता और शिक्षा पर आधारित हो। केवल सुविचार ही लिखें, कोई विशेष चिन्ह "
    "(जैसे **) न लगाएं।"
)


def build_panchang_prompt(day: date) -> str:
    return (
        f"आज {hindi_date_display(day)} के लिए संक्षिप्त हिंदी पंचांग बताएं। "
        "आउटपुट केवल इस फॉर्मेट में दें, कोई स्टार या बोल्ड चिन्ह न लगाएं:\n"
        "तारीख- [आज की तारीख]\n"
        "तिथि- [हिंदी तिथि]\n"
        "वार- [दिन]\n"
        "सूर्योदय- [समय]"
    )


def build_name_cleanup_prompt(raw_text: str) -> str:
    return (
        "नीचे दिए गए समाज के नामों और गाँवों की सूची को शुद्ध करें, वर्तनी "
        "(spelling) ठीक करें और मानक हिंदी रूप दें। केवल सुधरी हुई सूची "
        f"लौटाएं, उसी क्रम और उसी फॉर्मेट में:\n{raw_text}"
    )


# --- Almanac parsing ---------------------------------------------------------

_ALMANAC_LABELS = {
    "तारीख": "date",
    "तिथि": "tithi",
    "वार": "weekday",
    "सूर्योदय": "sunrise",
    "सूर्यास्त": "sunset",
    "नक्षत्र": "nakshatra",
    "पंचांग": "info",
}


def _split_label(line: str) -> tuple[str, str] | None:
    # earliest separator wins: "सूर्योदय- 06:30" splits on '-'
    positions = [i for i in (line.find(s) for s in (":", "-", "–")) if i > 0]
    if not positions:
        return None
    cut = min(positions)
    return line[:cut].strip(), line[cut + 1:].strip()


def parse_almanac(text: str) -> dict:
    """Split 'label- value' / 'label: value' lines into known fields."""
    lines = [ln.strip() for ln in (text or "").splitlines() if ln.strip()]
    fields: dict[str, str] = {}
    for line in lines:
        pair = _split_label(line)
        if pair is None:
            continue
        key = _ALMANAC_LABELS.get(pair[0])
        if key and pair[1] and key not in fields:
            fields[key] = pair[1]
    return {
        "fields": fields,
        "lines": lines,
        "structured": bool(fields.get("weekday") or fields.get("tithi") or fields.get("info")),
    }
