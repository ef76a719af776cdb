#!/usr/bin/env python3
"""
Seed script to load the demo catalog (categories, brands, medicines) into the database.
Usage: python seed_medicines.py
"""

import json
import sys
from pathlib import Path

# Add backend directory to path
backend_dir = Path(__file__).parent / "backend"
sys.path.insert(0, str(backend_dir))

from medora.db.session import SessionLocal
from medora.db.init_db import init_db
from medora.models.catalog import Brand, Category
from medora.models.medicine import Medicine


def seed_medicines(json_file: Path = Path(__file__).parent / "medicines_catalog.json") -> bool:
    """Insert whatever in the JSON catalog is not there yet (matched by slug)."""
    if not json_file.exists():
        print(f"Error: {json_file} not found!")
        return False

    with open(json_file, "r", encoding="utf-8") as f:
        data = json.load(f)

    # Ensure tables exist
    init_db(create_default_admin=False)

    db = SessionLocal()

    try:
        categories = {}
        for entry in data["categories"]:
            category = db.query(Category).filter(Category.slug == entry["slug"]).first()
            if not category:
                category = Category(**entry)
                db.add(category)
                db.flush()
                print(f"[OK] Category: {category.name}")
            categories[entry["slug"]] = category

        brands = {}
        for entry in data["brands"]:
            brand = db.query(Brand).filter(Brand.slug == entry["slug"]).first()
            if not brand:
                brand = Brand(**entry)
                db.add(brand)
                db.flush()
                print(f"[OK] Brand: {brand.name}")
            brands[entry["slug"]] = brand

        added_count = 0
        for entry in data["medicines"]:
            if db.query(Medicine).filter(Medicine.slug == entry["slug"]).first():
                print(f"[SKIP] {entry['name']} already exists")
                continue

            fields = dict(entry)
            fields["category_id"] = categories[fields.pop("category")].id
            brand_slug = fields.pop("brand", None)
            fields["brand_id"] = brands[brand_slug].id if brand_slug else None

            db.add(Medicine(**fields))
            added_count += 1
            print(f"[OK] Added: {entry['name']} (Stock: {entry['stock']}, Price: {entry['price']})")

        db.commit()
        print(f"\nSuccessfully seeded {added_count} medicines!")
        return True

    except Exception as e:
        db.rollback()
        print(f"\n[ERROR] Error seeding data: {e}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    print("Medora - Catalog Seeding\n")
    sys.exit(0 if seed_medicines() else 1)
