"""
Privacy redaction for client contact details.

Phone numbers and email addresses are masked before any client record is
included in a contact answer. All functions are total: they never raise and
always return a displayable string.
"""

import re
from typing import Iterable, List, Optional, Tuple

from clientqa.models.client import Client

MASK_CHAR = "x"
EMAIL_MASK = "xxxx"
MISSING = "N/A"

# Longest codes first so "+91" is tried before "+1"
COUNTRY_CODES: Tuple[str, ...] = ("+91", "+44", "+61", "+1")
MIN_NATIONAL_DIGITS = 10

_MASKED_PHONE = re.compile(r"^\+\d{1,3} ?\d{2}x+\d{2}$")
_EMAIL = re.compile(r"^(.{2}).*(@.*)$")


def mask_phone(phone: Optional[str]) -> str:
    """
    Mask a phone number.

    "+91 1234567890" becomes "+91 12xxxxxx90". Numbers without a recognized
    country code keep their first and last two characters. Values that are
    already masked are returned unchanged.
    """
    if not phone:
        return MISSING

    if _MASKED_PHONE.match(phone):
        return phone

    stripped = phone.strip()
    for code in COUNTRY_CODES:
        if not stripped.startswith(code):
            continue
        national = re.sub(r"\D", "", stripped[len(code):])
        if len(national) >= MIN_NATIONAL_DIGITS:
            separator = " " if stripped[len(code):len(code) + 1].isspace() else ""
            middle = MASK_CHAR * (len(national) - 4)
            return f"{code}{separator}{national[:2]}{middle}{national[-2:]}"
        break

    if len(phone) >= 4:
        return phone[:2] + MASK_CHAR * (len(phone) - 4) + phone[-2:]

    return phone


def mask_email(email: Optional[str]) -> str:
    """Keep the first two characters of the local part and the domain."""
    if not email:
        return MISSING
    return _EMAIL.sub(rf"\1{EMAIL_MASK}\2", email)


def redact_client(client: Client) -> Client:
    """Return a copy of the client with masked phone and email."""
    return client.model_copy(
        update={
            "phone": mask_phone(client.phone),
            "email": mask_email(client.email),
        }
    )


def redact_clients(clients: Iterable[Client]) -> List[Client]:
    return [redact_client(c) for c in clients]
