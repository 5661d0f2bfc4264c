"""Supplier aggregate.

Suppliers are referenced by purchase orders.  Like products they are
soft-deactivated rather than removed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from stockledger.domain.exceptions import ValidationError

PAYMENT_TERMS = ("cash", "net15", "net30", "net45", "net60")
MAX_NAME_LENGTH = 100
MAX_CONTACT_LENGTH = 50

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")
_PHONE_RE = re.compile(r"^\+?[0-9]\d{0,15}$")


@dataclass
class Supplier:

    id: str
    name: str
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    payment_terms: str = "net30"
    is_active: bool = True

    @staticmethod
    def create(
        supplier_id: str,
        name: str,
        contact_person: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        payment_terms: str = "net30",
    ) -> Supplier:
        return Supplier(
            id=supplier_id,
            name=_clean_name(name),
            contact_person=_clean_contact(contact_person),
            email=_clean_email(email),
            phone=_clean_phone(phone),
            payment_terms=_check_terms(payment_terms),
        )

    def update_details(
        self,
        name: str | None = None,
        contact_person: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        payment_terms: str | None = None,
    ) -> None:
        """Change the given fields; None leaves a field as it is."""
        # Validate everything before assigning anything
        new_name = _clean_name(name) if name is not None else self.name
        new_contact = (
            _clean_contact(contact_person) if contact_person is not None else self.contact_person
        )
        new_email = _clean_email(email) if email is not None else self.email
        new_phone = _clean_phone(phone) if phone is not None else self.phone
        new_terms = _check_terms(payment_terms) if payment_terms is not None else self.payment_terms

        self.name = new_name
        self.contact_person = new_contact
        self.email = new_email
        self.phone = new_phone
        self.payment_terms = new_terms

    def deactivate(self) -> None:
        if not self.is_active:
            raise ValidationError(f"Supplier '{self.name}' is already inactive")
        self.is_active = False


def _clean_name(name: str) -> str:
    if not name or not name.strip():
        raise ValidationError("Supplier name is required")
    if len(name.strip()) > MAX_NAME_LENGTH:
        raise ValidationError(f"Supplier name cannot exceed {MAX_NAME_LENGTH} characters")
    return name.strip()


def _clean_contact(contact_person: str | None) -> str | None:
    if not contact_person or not contact_person.strip():
        return None
    if len(contact_person.strip()) > MAX_CONTACT_LENGTH:
        raise ValidationError(
            f"Contact person name cannot exceed {MAX_CONTACT_LENGTH} characters"
        )
    return contact_person.strip()


def _clean_email(email: str | None) -> str | None:
    if email is None:
        return None
    email = email.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"Invalid email address '{email}'")
    return email


def _clean_phone(phone: str | None) -> str | None:
    if phone is None:
        return None
    phone = phone.strip()
    if not _PHONE_RE.match(phone):
        raise ValidationError(f"Invalid phone number '{phone}'")
    return phone


def _check_terms(payment_terms: str) -> str:
    if payment_terms not in PAYMENT_TERMS:
        raise ValidationError(f"Unknown payment terms '{payment_terms}'")
    return payment_terms
