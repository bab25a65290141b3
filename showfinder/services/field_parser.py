"""
Best-effort extraction of structured show fields from scraped text.

Typical input:

    "Aug 2nd – Indianapolis, LaQuinta Inn – 5120 Victory Drive (8-2)"

Patterns are applied in a fixed order (date, hours, street address, ZIP,
"City, ST", then the remaining dash/comma separated chunks). Anything that
does not match is left empty rather than guessed. Dates without a year are
returned as a PartialDate; the search date window decides the year later.
"""

import logging
import re
from datetime import date
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field

from showfinder.schemas.show import PartialDate, ShowRecord
from showfinder.utils.us_states import STATE_CODES, to_state_code

logger = logging.getLogger(__name__)

MONTHS = {
    'jan': 1, 'january': 1, 'feb': 2, 'february': 2, 'mar': 3, 'march': 3,
    'apr': 4, 'april': 4, 'may': 5, 'jun': 6, 'june': 6, 'jul': 7, 'july': 7,
    'aug': 8, 'august': 8, 'sep': 9, 'sept': 9, 'september': 9, 'oct': 10, 'october': 10,
    'nov': 11, 'november': 11, 'dec': 12, 'december': 12
}

STREET_SUFFIXES = (
    'Drive', 'Dr', 'Street', 'St', 'Avenue', 'Ave', 'Road', 'Rd', 'Boulevard', 'Blvd',
    'Lane', 'Ln', 'Way', 'Parkway', 'Pkwy', 'Highway', 'Hwy', 'Court', 'Ct', 'Place', 'Pl',
    'Circle', 'Cir', 'Pike', 'Trail', 'Terrace'
)
_SUFFIX = r'(?:' + '|'.join(STREET_SUFFIXES) + r')\b'
_DIRECTION = r'(?:[NSEW]\.?\s+)?'

# A four digit number followed by a street name is a house number, not a year
DATE_PATTERN = re.compile(
    r'\b(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?|'
    r'sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?\s+'
    r'(\d{1,2})(?:st|nd|rd|th)?\b'
    r'(?:,?\s+((?:19|20)\d{2})\b(?!\s+' + _DIRECTION + r'(?:[A-Za-z.\']+\s+){1,4}?' + _SUFFIX + r'))?',
    re.IGNORECASE
)

_TIME = r'(\d{1,2})(?::(\d{2}))?\s*([ap])?\.?\s*(?:m\b\.?)?'
HOURS_PATTERN = re.compile(r'\(\s*' + _TIME + r'\s*(?:-|–|—|to)\s*' + _TIME + r'\s*\)', re.IGNORECASE)
HOURS_WITH_MERIDIEM_PATTERN = re.compile(
    r'\b(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\.?\s*(?:-|–|—|to)\s*(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\.?',
    re.IGNORECASE
)

ADDRESS_PATTERN = re.compile(
    r'\b(\d{1,6}\s+' + _DIRECTION + r'(?:[A-Za-z0-9.\']+\s+){0,4}?' + _SUFFIX + r'\.?)',
    re.IGNORECASE
)

ZIP_PATTERN = re.compile(r'\b(\d{5})(?:-\d{4})?\b')
CITY_STATE_PATTERN = re.compile(r'([A-Z][A-Za-z.\' ]*?),\s*([A-Z]{2})\b')
# A hyphen separates segments only when it stands alone, so "Winston-Salem" stays whole
SEGMENT_SEPARATORS = re.compile(r'\s*(?:–|—|\||(?<!\S)-(?!\S)|,)\s*')
CHUNK_STRIP = ' .;:-–—'

# Substrings that identify a venue rather than a city or show name
VENUE_KEYWORDS = (
    'inn', 'hotel', 'suites', 'center', 'centre', 'hall', 'fairgrounds', 'expo', 'arena',
    'mall', 'church', 'lodge', 'legion', 'vfw', 'ballroom', 'club', 'civic', 'pavilion',
    'convention', 'library', 'school', 'community', 'casino', 'resort', 'marriott',
    'hilton', 'sheraton', 'hyatt', 'laquinta', 'la quinta', 'ramada', 'wyndham',
    'elks', 'moose', 'armory', 'coliseum', 'gym', 'market'
)
NAME_KEYWORDS = ('show', 'shows', 'swap', 'meet', 'expo show')

REQUIRED_FIELDS = ('start_date', 'venue_name', 'address', 'city', 'state', 'hours')

class ParsedShow(BaseModel):
    """Fields extracted from one line of show text."""
    raw: str
    name: Optional[str] = None
    start_date: Optional[date] = None
    partial_date: Optional[PartialDate] = None
    venue_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    hours: Optional[str] = None
    missing_fields: List[str] = Field(default_factory=list)

    def to_record(self, **overrides: Any) -> ShowRecord:
        """Convert to a ShowRecord; keyword arguments override parsed fields."""
        data = self.model_dump(exclude={'raw', 'missing_fields'})
        data['description'] = self.raw
        data.update(overrides)
        return ShowRecord.model_validate(data)

def _contains_keyword(text: str, keywords: Tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(re.search(r'\b' + re.escape(k) + r'\b', lowered) for k in keywords)

def _blank(text: str, span: Tuple[int, int]) -> str:
    """Replace a matched span with a segment separator."""
    return text[:span[0]] + ' – ' + text[span[1]:]

def _format_time(hour: int, minute: Optional[str], meridiem: str) -> str:
    minutes = f":{minute}" if minute and minute != '00' else ''
    return f"{hour}{minutes}{meridiem}"

def normalize_hours(
    open_hour: int,
    open_minute: Optional[str],
    open_meridiem: Optional[str],
    close_hour: int,
    close_minute: Optional[str],
    close_meridiem: Optional[str]
) -> str:
    """
    Render an hour range as "8am-2pm", inferring am/pm when missing.

    Shows open in the morning unless the opening hour is 12-6; a closing hour
    at or before the opening hour, or noon, is afternoon.
    """
    open_suffix = (open_meridiem or '').lower()
    if open_suffix:
        open_suffix += 'm'
    else:
        open_suffix = 'am' if 7 <= open_hour <= 11 else 'pm'

    close_suffix = (close_meridiem or '').lower()
    if close_suffix:
        close_suffix += 'm'
    elif open_suffix == 'pm' or close_hour <= open_hour or close_hour == 12:
        close_suffix = 'pm'
    else:
        close_suffix = 'am'

    return (
        f"{_format_time(open_hour, open_minute, open_suffix)}-"
        f"{_format_time(close_hour, close_minute, close_suffix)}"
    )

def _extract_date(text: str, parsed: ParsedShow) -> str:
    match = DATE_PATTERN.search(text)
    if not match:
        return text
    month = MONTHS[match.group(1).lower()]
    day = int(match.group(2))
    try:
        partial = PartialDate(month=month, day=day)
        if match.group(3):
            parsed.start_date = partial.with_year(int(match.group(3)))
        else:
            parsed.partial_date = partial
    except ValueError:
        logger.debug(f"Ignoring impossible date {match.group(0)!r}")
    return _blank(text, match.span())

def _extract_hours(text: str, parsed: ParsedShow) -> str:
    match = HOURS_PATTERN.search(text) or HOURS_WITH_MERIDIEM_PATTERN.search(text)
    if not match:
        return text
    open_hour, open_minute, open_mer, close_hour, close_minute, close_mer = match.groups()
    parsed.hours = normalize_hours(
        int(open_hour), open_minute, open_mer,
        int(close_hour), close_minute, close_mer
    )
    return _blank(text, match.span())

def _extract_address(text: str, parsed: ParsedShow) -> str:
    match = ADDRESS_PATTERN.search(text)
    if not match:
        return text
    parsed.address = match.group(1).rstrip('.').strip()
    return _blank(text, match.span())

def _extract_zip(text: str, parsed: ParsedShow) -> str:
    match = ZIP_PATTERN.search(text)
    if not match:
        return text
    parsed.zip_code = match.group(1)
    return _blank(text, match.span())

def _extract_city_state(text: str, parsed: ParsedShow) -> str:
    for match in CITY_STATE_PATTERN.finditer(text):
        if match.group(2) in STATE_CODES:
            parsed.city = match.group(1).strip()
            parsed.state = match.group(2)
            return _blank(text, match.span())
    return text

def _chunk_state(chunk: str) -> Optional[str]:
    return to_state_code(chunk) if (chunk.isupper() or len(chunk) > 2) else None

def _looks_like_place(chunk: str) -> bool:
    words = chunk.replace('.', '').replace('-', '').split()
    return len(words) <= 4 and all(word.isalpha() for word in words)

def _classify_chunks(text: str, parsed: ParsedShow) -> None:
    chunks = [chunk.strip(CHUNK_STRIP) for chunk in SEGMENT_SEPARATORS.split(text)]
    chunks = [chunk for chunk in chunks if chunk]

    for index, chunk in enumerate(chunks):
        # "Washington – Pennsylvania": a state name followed by another state is the city
        state = _chunk_state(chunk)
        if state and not parsed.state and not any(_chunk_state(c) for c in chunks[index + 1:]):
            parsed.state = state
            continue

        if parsed.name is None and _contains_keyword(chunk, NAME_KEYWORDS):
            parsed.name = chunk
        elif parsed.venue_name is None and _contains_keyword(chunk, VENUE_KEYWORDS):
            parsed.venue_name = chunk
        elif parsed.city is None and _looks_like_place(chunk):
            tokens = chunk.split()
            # "Indianapolis IN"
            if len(tokens) > 1 and tokens[-1] in STATE_CODES and not parsed.state:
                parsed.state = tokens[-1]
                tokens = tokens[:-1]
            parsed.city = ' '.join(tokens)
        else:
            logger.debug(f"Unclassified chunk {chunk!r} in {parsed.raw!r}")

def parse_show_text(raw: str) -> ParsedShow:
    """
    Extract structured show fields from free text.

    Args:
        raw: Unstructured show description

    Returns:
        ParsedShow; fields that could not be extracted are None and listed in missing_fields
    """
    parsed = ParsedShow(raw=raw or '')
    text = ' '.join(parsed.raw.split())

    text = _extract_date(text, parsed)
    text = _extract_hours(text, parsed)
    text = _extract_address(text, parsed)
    text = _extract_zip(text, parsed)
    text = _extract_city_state(text, parsed)
    _classify_chunks(text, parsed)

    for field in REQUIRED_FIELDS:
        value = getattr(parsed, field)
        if field == 'start_date':
            value = value or parsed.partial_date
        if value is None:
            parsed.missing_fields.append(field)

    if parsed.missing_fields:
        logger.debug(f"Parse ambiguity for {parsed.raw!r}: missing {', '.join(parsed.missing_fields)}")

    return parsed
