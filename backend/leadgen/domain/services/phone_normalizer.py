"""
Phone Normalizer
Canonicalizes human-entered phone numbers into the directory key format
used to match tenants and agents at login.

Supported shapes of the same number all map to one key:
    0714276444      -> +255714276444  (local trunk prefix)
    714276444       -> +255714276444  (bare subscriber number)
    255714276444    -> +255714276444  (country code, no plus)
    +255714276444   -> +255714276444  (already canonical)

Any other shape still gets the country code prepended. That guess is
reported as PhoneVariant.ASSUMED so callers can reject it if they want.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_COUNTRY_CODE = "255"
DEFAULT_TRUNK_PREFIX = "0"
SUBSCRIBER_NUMBER_LENGTH = 9

_NON_DIGITS = re.compile(r"\D")
_PHONE_LIKE = re.compile(r"[\d+\-\s()]")


class PhoneVariant(str, Enum):
    """How the canonical form was reached"""
    CANONICAL = "canonical"    # Input matched a supported shape
    ASSUMED = "assumed"        # Country code guessed for an unrecognized shape


@dataclass(frozen=True)
class CanonicalPhone:
    value: str
    variant: PhoneVariant

    @property
    def is_assumed(self) -> bool:
        return self.variant == PhoneVariant.ASSUMED

    def __str__(self) -> str:
        return self.value


def canonicalize(
    value: Any,
    country_code: str = DEFAULT_COUNTRY_CODE,
    trunk_prefix: str = DEFAULT_TRUNK_PREFIX,
) -> CanonicalPhone:
    """
    Canonicalize a phone number and report which rule produced it.

    Never raises: None becomes the empty string and other objects are
    coerced with str().
    """
    text = "" if value is None else str(value)
    digits = _NON_DIGITS.sub("", text)

    if trunk_prefix and digits.startswith(trunk_prefix):
        digits = country_code + digits[len(trunk_prefix):]
        variant = PhoneVariant.CANONICAL
    elif digits.startswith(country_code):
        variant = PhoneVariant.CANONICAL
    elif len(digits) == SUBSCRIBER_NUMBER_LENGTH:
        digits = country_code + digits
        variant = PhoneVariant.CANONICAL
    else:
        digits = country_code + digits
        variant = PhoneVariant.ASSUMED

    return CanonicalPhone(value=f"+{digits}", variant=variant)


def normalize(
    value: Any,
    country_code: str = DEFAULT_COUNTRY_CODE,
    trunk_prefix: str = DEFAULT_TRUNK_PREFIX,
) -> str:
    """
    Normalize a phone number to its canonical `+<country><subscriber>` key.

    Example: normalize("0714 276 444") -> "+255714276444"
    """
    return canonicalize(value, country_code, trunk_prefix).value


def looks_like_phone(identifier: str) -> bool:
    """
    Login heuristic: identifiers containing digits or phone punctuation
    are treated as phone numbers, everything else as an email.
    """
    return bool(_PHONE_LIKE.search((identifier or "").strip()))


def normalize_email(identifier: str) -> str:
    return (identifier or "").strip().lower()
