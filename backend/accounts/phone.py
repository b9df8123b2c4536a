"""
Phone number variants for contact lookup.

Residents and managers type their numbers in every shape: with or
without the country code, with a trunk zero, with spaces and dashes.
build_phone_variants() turns one input into the set of stored forms it
could match, so lookups become a single `__in` query on an indexed column.
"""
import re

from django.conf import settings


_SEPARATORS = re.compile(r"[\s\-\.\(\)/]")


def normalize_phone(raw: str) -> str:
    """Strip separators; keep a leading '+'."""
    cleaned = _SEPARATORS.sub("", raw or "")
    if cleaned.startswith("+"):
        return "+" + re.sub(r"\D", "", cleaned[1:])
    return re.sub(r"\D", "", cleaned)


def build_phone_variants(raw: str, country_code: str = None) -> list[str]:
    """
    Return the sorted, de-duplicated list of forms `raw` may be stored as.

    For country code 966 and input "050 123 4567" the result includes
    "0501234567", "501234567", "966501234567" and "+966501234567".
    Pure: no I/O, same input gives the same output.
    """
    country_code = country_code or getattr(settings, "DEFAULT_PHONE_COUNTRY_CODE", "")
    cleaned = normalize_phone(raw)
    if not cleaned:
        return []

    variants = {cleaned}
    digits = cleaned.lstrip("+")
    if cleaned.startswith("00"):
        digits = cleaned[2:]

    if country_code and digits.startswith(country_code) and (
        cleaned.startswith("+") or cleaned.startswith("00") or len(digits) > 10
    ):
        national = digits[len(country_code):]
    elif digits.startswith("0"):
        national = digits[1:]
    else:
        national = digits

    national = national.lstrip("0")
    if national:
        variants.add(national)
        variants.add("0" + national)
        if country_code:
            variants.add(country_code + national)
            variants.add("+" + country_code + national)
            variants.add("00" + country_code + national)
    variants.add(digits)

    return sorted(v for v in variants if v)
