from __future__ import annotations

from app.wellness.schemas import CrisisResources

HELPLINE_DIRECTORY_URL = "https://findahelpline.com"
DEFAULT_COUNTRY = "US"
_FALLBACK_NUMBER = "112"

_EMERGENCY_NUMBERS = {
    "US": "911",
    "CA": "911",
    "GB": "112",
    "DE": "112",
    "FR": "112",
    "ES": "112",
    "IT": "112",
    "NL": "112",
    "BE": "112",
    "AU": "000",
}

_CRISIS_HOTLINES = {
    "US": "988",
    "CA": "988",
    "GB": "116 123",
    "DE": "0800 111 0 111",
    "FR": "3114",
    "ES": "717 003 717",
    "IT": "800 86 00 22",
    "NL": "113",
    "BE": "1813",
    "AU": "13 11 14",
}


def country_from_locale(locale: str | None) -> str:
    """`en-US` / `en_GB` -> `US` / `GB`. A locale without a region falls back to US."""

    if not locale:
        return DEFAULT_COUNTRY
    parts = locale.replace("_", "-").split("-")
    if len(parts) < 2 or not parts[1]:
        return DEFAULT_COUNTRY
    return parts[1].upper()


def crisis_resources(locale: str | None) -> CrisisResources:
    country = country_from_locale(locale)
    emergency = _EMERGENCY_NUMBERS.get(country, _FALLBACK_NUMBER)
    hotline = _CRISIS_HOTLINES.get(country, _FALLBACK_NUMBER)

    lines = [
        "I'm very concerned about what you're sharing. "
        "Your safety is the most important thing right now.",
        f"If you're in immediate danger, call {emergency} for emergency services.",
    ]
    if emergency == hotline:
        lines.append(
            f"For crisis support, visit {HELPLINE_DIRECTORY_URL} to find resources in your country."
        )
    else:
        lines.append(
            f"For crisis support, call {hotline} or visit {HELPLINE_DIRECTORY_URL} "
            "for more resources."
        )
    lines.append(
        "You're not alone, and there are people who want to help you. Your life has value."
    )

    return CrisisResources(
        country_code=country,
        emergency_number=emergency,
        crisis_hotline=hotline,
        helpline_directory_url=HELPLINE_DIRECTORY_URL,
        message="\n\n".join(lines),
    )
