from __future__ import annotations

from sqlalchemy import select

from .db import SessionLocal
from .models import Customer


SEED_CUSTOMERS = [
    {
        "name": "Delba de Oliveira",
        "email": "delba@oliveira.com",
        "image_url": "/customers/delba-de-oliveira.png",
    },
    {
        "name": "Lee Robinson",
        "email": "lee@robinson.com",
        "image_url": "/customers/lee-robinson.png",
    },
    {
        "name": "Hector Simpson",
        "email": "hector@simpson.com",
        "image_url": "/customers/hector-simpson.png",
    },
    {
        "name": "Steven Tey",
        "email": "steven@tey.com",
        "image_url": "/customers/steven-tey.png",
    },
    {
        "name": "Steph Dietz",
        "email": "steph@dietz.com",
        "image_url": "/customers/steph-dietz.png",
    },
    {
        "name": "Michael Novotny",
        "email": "michael@novotny.com",
        "image_url": "/customers/michael-novotny.png",
    },
]


def seed_customers() -> int:
    created = 0
    with SessionLocal() as session:
        for entry in SEED_CUSTOMERS:
            exists = session.execute(
                select(Customer).where(Customer.email == entry["email"])
            ).scalar_one_or_none()
            if exists:
                continue
            session.add(Customer(**entry))
            created += 1
        if created:
            session.commit()
    return created


def main() -> None:
    created = seed_customers()
    print(f"Seeded customers: {created}")


if __name__ == "__main__":
    main()
