"""Canned fallback data and text coercion for submitted form data.

Field trials often submit incomplete data.  :func:`merge_with_fallback` fills
every key of a form type's canned table with a sample value so the generated
document is always reviewable.  Submitted values that are present (not
``None``, empty or ``"N/A"``) are copied verbatim and never replaced, so
callers that must tell placeholder from real data inspect the submission, not
the merged result.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

EMPTY_MARKERS = {"undefined", "N/A"}


# ---------------------------------------------------------------------------
# Text coercion
# ---------------------------------------------------------------------------


def is_blank(value: Any) -> bool:
    return value is None or value == "" or value == "N/A"


def safe_text(value: Any) -> str:
    """Return printable text for ``value``.

    ``None``, ``NaN``, the strings ``"undefined"``/``"N/A"`` and structured
    values (mappings, lists) become an empty string instead of their literal
    representation.
    """

    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (int, str)):
        text = str(value).strip()
        return "" if text in EMPTY_MARKERS else text
    return ""


def lookup(data: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted ``path`` in nested mappings and lists.

    Flat keys win over nested lookups so submitted keys containing dots still
    resolve.  An empty path returns ``data`` itself.
    """

    if not path:
        return data
    if isinstance(data, Mapping) and path in data:
        return data[path]
    current: Any = data
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def _ordinal(day: int) -> str:
    if 10 <= day % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_date(today: date, style: str) -> str:
    """Format ``today`` in one of the date styles the templates print."""

    if style == "numeric":
        return today.strftime("%d/%m/%Y")
    if style == "long":
        return f"{today.strftime('%B')} {_ordinal(today.day)}, {today.year}"
    if style == "day_month":
        return f"{_ordinal(today.day)},{today.month:02d}"
    if style == "iso":
        return today.isoformat()
    raise ValueError(f"Unknown date style: {style}")


# ---------------------------------------------------------------------------
# Canned defaults
# ---------------------------------------------------------------------------


def _common(today: date) -> dict[str, Any]:
    iso = today.isoformat()
    return {
        "field-csa-ref": "CSA-2024-001",
        "field-full-name": "John Smith",
        "field-claim-number": "CLM-123456789",
        "field-property-address": "123 Main Street, Johannesburg, 2001",
        "field-cause-damage": "Geyser burst due to age",
        "field-contact-number": "011-555-0123",
        "field-email": "john.smith@example.com",
        "field-date": iso,
        "assessmentDate": iso,
        "materialCost": "R 2,500.00",
        "labourCost": "R 1,500.00",
        "totalEstimate": "R 4,000.00",
        "clientName": "John Smith",
        "claimNo": "CLM-123456789",
        "underwriter": "ABSA Insurance Company Limited",
        "plumberName": "Demo Plumber",
        "plumberLicense": "PL-12345",
        "completionDate": iso,
        "workDescription": "Geyser replacement and plumbing repairs",
    }


def _form_specific(form_type: str, today: date) -> dict[str, Any]:
    iso = today.isoformat()
    if form_type == "absa-form":
        return {
            "field-certificate-number": "ABSA-CERT-2024-001",
            "field-installation-date": iso,
            "field-geyser-model": "Kwikot 150L Electric",
            "field-pressure-valve": "Yes - Installed",
            "field-vacuum-breaker": "Yes - Installed",
            "field-thermostat": "Dual Element - Working",
            "field-staff-name-absa": "Demo Plumber",
            "field-excess-paid-absa": "No",
        }
    if form_type == "clearance-certificate-form":
        return {
            "field-clearance-number": "CLEAR-2024-001",
            "field-inspection-date": iso,
            "field-installation-compliant": "Yes",
            "field-safety-standards": "SANS 10254 Compliant",
            "cname": "John Smith",
            "cref": "CLM-123456789",
            "caddress": "123 Main Street, Johannesburg, 2001",
            "cdamage": "Geyser burst due to age",
            "staff": "Demo Plumber",
        }
    if form_type == "sahl-certificate-form":
        return {
            "field-sahl-number": "SAHL-2024-001",
            "field-warranty-period": "5 Years",
            "field-installer-details": "Demo Installer - Lic: SAHL-12345",
            "field-clientname": "John Smith",
            "field-clientref": "CLM-123456789",
            "field-clientaddress": "123 Main Street, Johannesburg, 2001",
            "field-clientdamage": "Geyser burst due to age",
            "field-staffname": "Demo Plumber",
        }
    if form_type == "discovery-form":
        return {
            "field-discovery-ref": "DISC-2024-001",
            "field-geyser-size": "150 Litres",
            "field-element-type": "Dual Element 3000W",
            "field-client-name": "John Smith",
            "field-address": "123 Main Street, Johannesburg, 2001",
            "field-plumber-name": "Demo Plumber",
            "field-license-number": "PL-12345",
        }
    if form_type == "liability-form":
        return {
            "field-liability-number": "LIB-2024-001",
            "field-coverage-amount": "R 1,000,000.00",
            "field-policy-number": "POL-987654321",
            "insurance": "ABSA Insurance Company Limited",
            "claimNumber": "CLM-123456789",
            "client": "John Smith",
            "plumber": "Demo Plumber",
        }
    if form_type == "noncompliance-form":
        return {
            "field-noncompliance-ref": "NC-2024-001",
            "field-issue-description": "Minor plumbing adjustments required",
            "field-resolution-date": iso,
            "field-compliance-status": "Resolved",
            "date": iso,
            "insuranceName": "ABSA Insurance Company Limited",
            "claimNumber": "CLM-123456789",
            "installersName": "Demo Plumber",
        }
    if form_type == "material-list-form":
        return {
            "materialCost": "R 2,500.00",
            "plumberName": "Demo Plumber",
            "date": iso,
            "plumber": "Demo Plumber",
            "claimNumber": "CLM-123456789",
            "insurance": "ABSA Insurance Company Limited",
        }
    return {}


def canned_defaults(form_type: str, today: Optional[date] = None) -> dict[str, Any]:
    """Return the placeholder table for ``form_type`` (common keys included)."""

    today = today or date.today()
    table = _common(today)
    table.update(_form_specific(form_type, today))
    return table


def merge_with_fallback(
    data: Optional[Mapping[str, Any]],
    form_type: str,
    today: Optional[date] = None,
    placeholders: bool = True,
) -> dict[str, Any]:
    """Overlay present submitted values on the canned table for ``form_type``.

    With ``placeholders`` disabled only blank submitted values are dropped.
    """

    merged: dict[str, Any] = canned_defaults(form_type, today) if placeholders else {}
    submitted = dict(data or {})
    kept = 0
    for key, value in submitted.items():
        if is_blank(value):
            continue
        merged[key] = value
        kept += 1
    logger.debug(
        "[formfill] merged %s: %d submitted keys kept, %d total",
        form_type,
        kept,
        len(merged),
    )
    return merged


__all__ = [
    "canned_defaults",
    "format_date",
    "is_blank",
    "lookup",
    "merge_with_fallback",
    "safe_text",
]
