"""Seed benefit documents for local development.

Safe to run multiple times:
- It only runs when APP_ENV=development
- It inserts rows only when the benefits table is empty
"""

# ruff: noqa: I001
# pyright: reportMissingImports=false
from __future__ import annotations

import asyncio

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.db import create_engine, create_schema
from app.core.settings import get_settings
from app.forms.models import Benefit


def _seed_rows() -> list[dict]:
    """Return a deterministic set of benefit documents."""
    return [
        {
            "id": "B1",
            "name": "Unemployment Insurance Claim",
            "raw_text": (
                "UNEMPLOYMENT INSURANCE CLAIM FORM\n"
                "Section 1 - Claimant Information\n"
                "Full name: ____________\n"
                "Email address: ____________\n"
                "Telephone: ____________\n"
                "Section 2 - Employment History\n"
                "Last employer: ____________\n"
                "Last day worked: ____________\n"
            ),
        },
        {
            "id": "B2",
            "name": "Housing Assistance Application",
            "raw_text": (
                "HOUSING ASSISTANCE APPLICATION\n"
                "Applicant name: ____________\n"
                "Contact email: ____________\n"
                "Contact phone: ____________\n"
                "Household size: ____________\n"
                "Monthly household income: ____________\n"
            ),
        },
        {
            "id": "B3",
            "name": "Supplemental Nutrition Assistance Application",
            "raw_text": (
                "SUPPLEMENTAL NUTRITION ASSISTANCE PROGRAM (SNAP)\n"
                "Name of head of household: ____________\n"
                "Email: ____________\n"
                "Phone number: ____________\n"
                "Number of people who buy and prepare food together: ____________\n"
            ),
        },
    ]


async def main() -> None:
    settings = get_settings()
    if not settings.is_development:
        print("Seed skipped: APP_ENV is not 'development'.")
        return

    engine = create_engine(database_url=str(settings.database_url))
    # Local development only; deployed environments run the Alembic migrations.
    await create_schema(engine=engine)
    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)

    try:
        async with sessionmaker() as session:
            count = (await session.execute(select(func.count()).select_from(Benefit))).scalar_one()
            if count:
                print(f"Seed skipped: benefits table already has {count} rows.")
                return

            rows = _seed_rows()
            session.add_all([Benefit(**row) for row in rows])
            await session.commit()
            print(f"Seeded {len(rows)} benefit documents.")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
