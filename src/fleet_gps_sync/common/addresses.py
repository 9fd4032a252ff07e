# fleet_gps_sync/common/addresses.py
"""
Address normalization shared by the vendor adapters.

Vendors report locations as anything from a full street address to a bare
"City ST". Trailer rows store a short "City, ST" form, so free-text
addresses are reduced here before they reach the Asset model.
"""

import logging
import re
from typing import Final

logger: logging.Logger = logging.getLogger(__name__)

__all__: list[str] = ['extract_city_state', 'format_city_state']

# Two-letter uppercase region code ("CA", "TX"). "US" is a country, not a state.
_STATE_CODE_PATTERN: Final[re.Pattern[str]] = re.compile(r'^[A-Z]{2}$')
_COUNTRY_CODE: Final[str] = 'US'


def _is_state_code(candidate: str | None) -> bool:
    """Return True if candidate looks like a US/CA state or province code."""
    if not candidate or candidate == _COUNTRY_CODE:
        return False
    return bool(_STATE_CODE_PATTERN.match(candidate))


def _first_token(text: str) -> str:
    tokens: list[str] = text.split()
    return tokens[0] if tokens else ''


def format_city_state(city: str | None, state: str | None) -> str | None:
    """
    Join structured city/state fields into "City, ST".

    Args:
        city: City name, may be None or blank.
        state: State or province, may be None or blank.

    Returns:
        "City, ST" when both parts are present, whichever single part is
        present otherwise, or None when both are missing.
    """
    parts: list[str] = [part.strip() for part in (city, state) if part and part.strip()]
    if not parts:
        return None
    return ', '.join(parts)


def extract_city_state(address: str | None) -> str | None:
    """
    Reduce a free-text address to "City, ST".

    Recognized shapes:
        - "315 Resource Dr, Bloomington, CA, US"  (street, city, state, country)
        - "San Leandro, CA, US"                   (city, state, country)
        - "315 Resource Dr, Bloomington, CA 92316" (street, city, state zip)
        - "Bloomington, CA"                        (city, state)
        - "Bloomington CA"                         (no comma)

    Args:
        address: Raw address text from a vendor payload.

    Returns:
        "City, ST" if a state code could be located, the trimmed input if the
        text is non-empty but unrecognized, or None for empty input.
    """
    if address is None:
        return None

    clean_address: str = ' '.join(address.split())
    if not clean_address:
        return None

    city: str | None = None
    state: str | None = None

    if ',' in clean_address:
        parts: list[str] = [part.strip() for part in clean_address.split(',')]

        match parts:
            case [*_, city_part, state_part, _country] if len(parts) >= 4:  # noqa: PLR2004
                city, state = city_part, state_part
            case [city_part, state_part, 'US']:
                city, state = city_part, state_part
            case [_street, city_part, state_zip]:
                city, state = city_part, _first_token(state_zip)
            case [city_part, state_zip]:
                city, state = city_part, _first_token(state_zip)
            case _:
                pass

    if not _is_state_code(state) and ' ' in clean_address and ',' not in clean_address:
        tokens: list[str] = clean_address.split(' ')
        city, state = ' '.join(tokens[:-1]), tokens[-1]

    if city and _is_state_code(state):
        return f'{city}, {state}'

    logger.debug('Could not reduce address to city/state: %r', clean_address)
    return clean_address
