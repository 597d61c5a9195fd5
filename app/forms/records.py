from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.exceptions import NotFoundError, StorageError
from app.forms.models import Benefit

logger = logging.getLogger("app.form_fill")


@dataclass(frozen=True)
class BenefitDocument:
    id: str
    raw_text: str


@dataclass(frozen=True)
class ContactDetails:
    name: str
    email: str
    phone: str


# Contact lookup is not wired to a contact store yet: every contact id resolves to this
# placeholder.
PLACEHOLDER_CONTACT = ContactDetails(
    name="John Doe",
    email="john.doe@example.com",
    phone="555-0100",
)


async def get_benefit_document(*, session: AsyncSession, benefit_id: str) -> BenefitDocument:
    try:
        benefit = await session.get(Benefit, benefit_id)
    except SQLAlchemyError as exc:
        raise StorageError("Failed to load benefit document") from exc
    if benefit is None:
        raise NotFoundError("Benefit not found")
    return BenefitDocument(id=benefit.id, raw_text=benefit.raw_text)


async def get_contact_details(*, session: AsyncSession, contact_id: str) -> ContactDetails:
    """
    Resolve contact details for a form fill.

    Currently returns `PLACEHOLDER_CONTACT` for any `contact_id`; `session` is accepted so
    callers already depend on the real lookup signature.
    """

    logger.debug(
        "Contact lookup not implemented; using placeholder contact",
        extra={"contact_id": contact_id, "step": "fetch_contact"},
    )
    return PLACEHOLDER_CONTACT
