from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

SUBJECTS = {
    "general": "General Inquiry",
    "bug": "Bug Report",
    "feature": "Feature Request",
    "support": "Technical Support",
    "feedback": "Feedback",
    "other": "Other",
}

SUCCESS_MESSAGE = "Thank you for your message! We will get back to you within 24 hours."
FAILURE_MESSAGE = "Sorry, there was an error sending your message. Please try again later"

_RX_TAG = re.compile(r"<[^>]+>")
_RX_EMAIL = re.compile(r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$")


def _clean(s: Optional[str]) -> str:
    return _RX_TAG.sub("", (s or "")).strip()


def _clean_email(s: Optional[str]) -> str:
    # keep only characters that can appear in an address
    return re.sub(r"[^A-Za-z0-9.!#$%&'*+/=?^_`{|}~@\[\]-]", "", (s or "").strip())


@dataclass(frozen=True)
class ContactMessage:
    name: str
    email: str
    subject: str  # code as submitted, e.g. "bug"
    message: str

    @property
    def subject_title(self) -> str:
        return SUBJECTS.get(self.subject, self.subject)

    def email_subject(self, site_name: str) -> str:
        title = SUBJECTS.get(self.subject, "Contact Form Submission")
        return f"[{site_name}] {title} - From: {self.name}"


def validate_contact(
    name: Optional[str],
    email: Optional[str],
    subject: Optional[str],
    message: Optional[str],
) -> Tuple[Optional[ContactMessage], List[str]]:
    n = _clean(name)
    e = _clean_email(email)
    s = _clean(subject)
    m = _clean(message)

    errors: List[str] = []
    if not n:
        errors.append("Name is required")
    if not e:
        errors.append("Email is required")
    elif not _RX_EMAIL.match(e):
        errors.append("Invalid email address")
    if not s:
        errors.append("Subject is required")
    if not m:
        errors.append("Message is required")

    if errors:
        return None, errors
    return ContactMessage(name=n, email=e, subject=s, message=m), []


def failure_message(inbox: str = "") -> str:
    if inbox:
        return f"{FAILURE_MESSAGE} or email us directly at {inbox}"
    return f"{FAILURE_MESSAGE}."
