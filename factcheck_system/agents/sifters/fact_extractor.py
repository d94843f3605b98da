"""Rule-based fact extraction from destination article content.

Finds verifiable statements (prices, opening hours, addresses, phone numbers,
transport directions, entry regulations, statistics) with categorized regular
expressions, expands each hit to its surrounding sentence and tags it with the
nearest heading so an editor can locate it.

Usage:
    from factcheck_system.agents.sifters.fact_extractor import extract_facts

    facts = extract_facts(article.content)
"""

import re
from dataclasses import dataclass

from pydantic import ValidationError

from factcheck_system.data_management.schemas import ExtractedFact, FactCategory

MIN_CONTENT_LENGTH = 50
MIN_FACT_LENGTH = 10
MAX_FACT_LENGTH = 500
MAX_LOCATION_LENGTH = 80

_DAYS = "Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday"
_TIME = r"\d{1,2}[:.]\d{2}\s*(?:AM|PM|am|pm)?"
_TUBE_LINES = (
    r"Elizabeth\s+line|Northern\s+line|Central\s+line|Piccadilly\s+line|Jubilee\s+line|"
    r"Victoria\s+line|Circle\s+line|District\s+line|Hammersmith\s+line|Bakerloo\s+line|"
    r"Metropolitan\s+line"
)


@dataclass(frozen=True)
class FactPattern:
    """A categorized regular expression for one kind of verifiable fact."""

    pattern: re.Pattern
    category: FactCategory
    label: str


FACT_PATTERNS: tuple[FactPattern, ...] = (
    # Prices written with GBP or "pounds"
    FactPattern(
        re.compile(
            r"(?:(?:GBP|gbp)\s*\d[\d,.]*|\d[\d,.]*\s*"
            r"(?:pounds?|GBP|gbp|per\s+(?:person|adult|child|night|ticket)))"
        ),
        FactCategory.PRICE,
        "price-gbp-word",
    ),
    # Schedules
    FactPattern(
        re.compile(
            r"(?:opens?\s+at|closes?\s+at|opening\s+hours?|hours?\s+of\s+operation|"
            rf"open\s+(?:from|daily|{_DAYS})|closing\s+time)[:\s]*{_TIME}"
            rf"(?:\s*[-–]\s*{_TIME})?",
            re.IGNORECASE,
        ),
        FactCategory.SCHEDULE,
        "schedule-hours",
    ),
    FactPattern(
        re.compile(
            rf"(?:{_DAYS})(?:\s*[-–]\s*(?:{_DAYS}))?\s*(?::\s*)?{_TIME}\s*[-–]\s*{_TIME}",
            re.IGNORECASE,
        ),
        FactCategory.SCHEDULE,
        "schedule-day-range",
    ),
    # London postcodes and street addresses
    FactPattern(
        re.compile(
            r"(?:(?:EC|WC|SW|SE|NW|NE|EN|HA|UB|TW|KT|SM|CR|BR|DA|RM|IG|E|W|N)"
            r"[0-9]{1,2}[A-Z]?\s+[0-9][A-Z]{2})"
        ),
        FactCategory.ADDRESS,
        "address-postcode",
    ),
    FactPattern(
        re.compile(
            r"\d{1,4}\s+(?:[A-Z][a-z]+\s+){0,3}"
            r"(?:Street|St|Road|Rd|Lane|Ln|Avenue|Ave|Place|Pl|Square|Sq|Terrace|Crescent|"
            r"Gardens|Gdns|Way|Row|Hill|Court|Ct|Close|Mews|Drive|Dr|Boulevard|Blvd|Circus|"
            r"Gate|Walk|Passage|Yard),?\s*(?:London)?"
        ),
        FactCategory.ADDRESS,
        "address-street",
    ),
    # UK phone numbers
    FactPattern(
        re.compile(
            r"(?:\+44\s*\(?0?\)?\s*|0)"
            r"(?:20\s*\d{4}\s*\d{4}|[1-9]\d{2,4}\s*\d{5,6}|\d{3,4}\s+\d{3,4})"
        ),
        FactCategory.CONTACT,
        "contact-phone",
    ),
    # Transport
    FactPattern(
        re.compile(
            r"(?:nearest\s+(?:tube|underground|station|stop)|"
            rf"(?:take|catch|board|use)\s+the\s+(?:tube|bus|train|DLR|Overground|{_TUBE_LINES}))"
            r"[^.]*\.",
            re.IGNORECASE,
        ),
        FactCategory.TRANSPORT,
        "transport-directions",
    ),
    FactPattern(
        re.compile(
            r"(?:Zone\s+[1-9](?:\s*[-–]\s*[1-9])?|Oyster\s+card|Travelcard|"
            r"contactless\s+(?:payment|travel))\s+[^.]{0,80}\.",
            re.IGNORECASE,
        ),
        FactCategory.TRANSPORT,
        "transport-fares",
    ),
    # Visa, entry and customs rules
    FactPattern(
        re.compile(
            r"(?:visa[-\s]free\s+for\s+(?:up\s+to\s+)?\d+\s+(?:days?|months?|weeks?)|"
            r"visa\s+(?:required|not\s+required|on\s+arrival)|ETA\s+(?:system|required|applies)|"
            r"passport\s+(?:valid\s+for|must\s+be|validity)|entry\s+requirements?)[^.]*\.",
            re.IGNORECASE,
        ),
        FactCategory.REGULATION,
        "regulation-visa",
    ),
    FactPattern(
        re.compile(
            r"(?:customs?\s+(?:allowance|limit|declaration)|duty[-\s]free\s+(?:allowance|limit)|"
            r"VAT\s+refund|tax[-\s]free\s+shopping)[^.]*\.",
            re.IGNORECASE,
        ),
        FactCategory.REGULATION,
        "regulation-customs",
    ),
    # Counted statistics and rankings; bare years are never matched
    FactPattern(
        re.compile(
            r"(?:over|more\s+than|approximately|around|nearly|up\s+to|at\s+least)\s+"
            r"[\d,]+(?:\.\d+)?\s+(?:million|thousand|billion|visitors?|tourists?|people|"
            r"passengers?|rooms?|restaurants?|shops?|stores?)",
            re.IGNORECASE,
        ),
        FactCategory.STATISTIC,
        "statistic-count",
    ),
    FactPattern(
        re.compile(
            r"(?:ranked|rated)\s+(?:#?\d+|number\s+\d+|first|second|third|top\s+\d+)\s+[^.]{0,60}\.",
            re.IGNORECASE,
        ),
        FactCategory.STATISTIC,
        "statistic-ranking",
    ),
    # Pound-sign prices, optionally a range and a per-unit suffix
    FactPattern(
        re.compile(
            r"£\s?\d[\d,.]*(?:\s*(?:[-–]\s*£?\s?\d[\d,.]*)?"
            r"(?:\s+(?:per\s+(?:person|adult|child|night|ticket)|each|pp))?)"
        ),
        FactCategory.PRICE,
        "price-pound-sign",
    ),
)

_MARKDOWN_IMAGE = re.compile(r"!\[.*?\]\(.*?\)")
_MARKDOWN_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_HEADING = re.compile(r"^#+[ \t]+(.+)$", re.MULTILINE)
_PARAGRAPH_BREAK = re.compile(r"\n\n+")
_WHITESPACE = re.compile(r"\s+")


def strip_markdown(content: str) -> str:
    """Drop markdown images and keep only the text of links."""
    return _MARKDOWN_LINK.sub(r"\1", _MARKDOWN_IMAGE.sub("", content))


def location_hint(text: str, index: int) -> str:
    """Nearest preceding heading, or ``paragraph-N`` when there is none."""
    before = text[:index]
    headings = _HEADING.findall(before)
    if headings:
        return headings[-1].strip()[:MAX_LOCATION_LENGTH]
    return f"paragraph-{len(_PARAGRAPH_BREAK.split(before))}"


def expand_to_sentence(text: str, start: int, end: int) -> str:
    """Widen a match to the sentence containing it, falling back to the match."""
    sentence_start = text.rfind(".", 0, start)
    sentence_end = text.find(".", end)
    begin = sentence_start + 1 if sentence_start >= 0 else start
    if sentence_end >= 0:
        stop = min(sentence_end + 1, begin + MAX_FACT_LENGTH)
    else:
        stop = end
    sentence = text[begin:stop].strip()
    if MIN_FACT_LENGTH < len(sentence) <= MAX_FACT_LENGTH:
        return sentence
    return text[start:end]


def extract_facts(content: str) -> list[ExtractedFact]:
    """
    Extract verifiable facts from article content.

    Args:
        content: Article body in markdown or plain text

    Returns:
        Facts in pattern order, de-duplicated per category on lowercased text
    """
    if not content or len(content) < MIN_CONTENT_LENGTH:
        return []

    cleaned = strip_markdown(content)
    facts: list[ExtractedFact] = []
    seen: set[str] = set()

    for fact_pattern in FACT_PATTERNS:
        for match in fact_pattern.pattern.finditer(cleaned):
            sentence = expand_to_sentence(cleaned, match.start(), match.end())
            normalized = _WHITESPACE.sub(" ", sentence).strip()
            if not MIN_FACT_LENGTH <= len(normalized) <= MAX_FACT_LENGTH:
                continue

            key = f"{fact_pattern.category.value}::{normalized.lower()}"
            if key in seen:
                continue
            seen.add(key)

            try:
                facts.append(
                    ExtractedFact(
                        text=normalized,
                        category=fact_pattern.category,
                        location=location_hint(cleaned, match.start()),
                    )
                )
            except ValidationError:
                continue

    return facts
