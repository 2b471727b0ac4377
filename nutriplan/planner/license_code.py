"""License code input formatting, validation and admin list filtering.

Codes look like NUTRI-XXXX-XXXX-XXXX where each X is an uppercase letter or
a digit 2-9 (0 and 1 are excluded to avoid O/I confusion).
"""

from __future__ import annotations

import re
from typing import Iterable

from nutriplan.planner.models import License

LICENSE_PREFIX = "NUTRI"
SEGMENT_LENGTH = 4
SEGMENT_COUNT = 3

LICENSE_CODE_RE = re.compile(r"^NUTRI-[A-Z2-9]{4}-[A-Z2-9]{4}-[A-Z2-9]{4}$")
_WHITESPACE_RE = re.compile(r"\s")
_DISALLOWED_RE = re.compile(r"[^A-Z0-9-]")

INVALID_FORMAT_MESSAGE = (
    "Le code doit être au format NUTRI-XXXX-XXXX-XXXX (4 caractères par segment)"
)


def format_license_input(raw: str) -> str:
    """Auto-format what the user typed so far.

    'nutri abcd2345' -> 'NUTRI-ABCD-2345'. Until the prefix is complete the
    input is only cleaned and capped at 5 characters.
    """
    value = _WHITESPACE_RE.sub("", raw.upper())
    value = _DISALLOWED_RE.sub("", value)

    if not value.startswith(LICENSE_PREFIX):
        return value[: len(LICENSE_PREFIX)]

    rest = value[len(LICENSE_PREFIX):].replace("-", "")
    rest = rest[: SEGMENT_LENGTH * SEGMENT_COUNT]
    parts = [LICENSE_PREFIX]
    parts.extend(rest[i : i + SEGMENT_LENGTH] for i in range(0, len(rest), SEGMENT_LENGTH))
    return "-".join(p for p in parts if p)


def clean_license_code(code: str) -> str:
    return _WHITESPACE_RE.sub("", code).upper()


def is_valid_license_code(code: str) -> bool:
    return LICENSE_CODE_RE.match(clean_license_code(code)) is not None


def filter_licenses(
    licenses: Iterable[License],
    license_type: str | None = None,
    status: str | None = None,
    search: str | None = None,
) -> list[License]:
    """Admin list filter.

    `license_type`: "QUOTA" | "SUBSCRIPTION" | "all"/None.
    `status`: "active" | "inactive" | "all"/None.
    `search`: case-insensitive substring of the code or the name.
    """
    result = list(licenses)

    if license_type and license_type != "all":
        result = [lic for lic in result if lic.type.value == license_type]

    if status == "active":
        result = [lic for lic in result if lic.is_active]
    elif status == "inactive":
        result = [lic for lic in result if not lic.is_active]

    if search and search.strip():
        query = search.lower()
        result = [lic for lic in result if query in lic.code.lower() or query in lic.name.lower()]

    return result
