"""Seed script for storefront data.

Creates a back-office admin account and a handful of sample furniture
products so the catalog, cart and order board can be tried end-to-end.

Usage:
    python -m services.storefront_service.seed_catalog \
        --admin-email admin@cabellakc.fr --admin-password changeme
"""

import argparse
import asyncio
from decimal import Decimal

from libs.db.config import AsyncSessionLocal
from services.storefront_service.models import Admin, Product
from services.storefront_service.services.identity import hash_password
from sqlalchemy import func, select

SAMPLE_PRODUCTS = [
    {
        "name": "Canapé Milano 3 places",
        "category": "Canapé",
        "price": Decimal("1250.00"),
        "description": "Canapé en velours côtelé, pieds en chêne massif.",
    },
    {
        "name": "Table Oslo extensible",
        "category": "Table",
        "price": Decimal("640.00"),
        "description": "Table de salle à manger en frêne, 6 à 10 couverts.",
    },
    {
        "name": "Chaise Lina",
        "category": "Chaise",
        "price": Decimal("89.90"),
        "description": "Chaise en rotin naturel avec assise tressée.",
    },
    {
        "name": "Lit Sora 160x200",
        "category": "Lit",
        "price": Decimal("780.00"),
        "description": "Lit plateforme en noyer avec tête de lit capitonnée.",
    },
    {
        "name": "Bureau Atelier",
        "category": "Bureau",
        "price": Decimal("320.00"),
        "description": "Bureau compact en métal noir et plateau chêne.",
    },
    {
        "name": "Étagère Modulo",
        "category": "Étagère",
        "price": Decimal("150.00"),
        "description": "Étagère murale modulable, cinq niveaux.",
    },
]


async def seed_catalog(admin_email: str, admin_password: str) -> None:
    async with AsyncSessionLocal() as db:
        print("Seeding storefront data...")

        admin_email = admin_email.lower()
        existing_admin = await db.execute(select(Admin).where(Admin.email == admin_email))
        if existing_admin.scalar_one_or_none() is None:
            db.add(
                Admin(
                    email=admin_email,
                    password_hash=hash_password(admin_password),
                    name="Administrateur",
                )
            )
            print(f"  Admin account: {admin_email}")
        else:
            print(f"  Admin {admin_email} already exists. Skipping.")

        product_count = (await db.execute(select(func.count()).select_from(Product))).scalar()
        if product_count:
            print(f"  Catalog already has {product_count} products. Skipping products.")
        else:
            db.add_all(Product(**fields) for fields in SAMPLE_PRODUCTS)
            print(f"  Products: {len(SAMPLE_PRODUCTS)}")

        await db.commit()
        print("=" * 60)
        print("Storefront data seeded successfully!")
        print("=" * 60)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed storefront admin and sample catalog")
    parser.add_argument("--admin-email", required=True)
    parser.add_argument("--admin-password", required=True)
    args = parser.parse_args()
    asyncio.run(seed_catalog(args.admin_email, args.admin_password))


if __name__ == "__main__":
    main()
