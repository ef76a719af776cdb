#!/usr/bin/env python
"""Create the demo admin and customer accounts for development."""

from medora.core.security import get_password_hash
from medora.db.init_db import init_db
from medora.db.session import SessionLocal
from medora.models.enums import Role
from medora.models.user import User

DEMO_USERS = [
    {
        "email": "admin@medora.com",
        "name": "Admin User",
        "password": "Admin@123",
        "role": Role.ADMIN,
        "email_verified": True,
    },
    {
        "email": "customer@test.com",
        "phone": "01712345678",
        "name": "Test Customer",
        "password": "Test@123",
        "role": Role.CUSTOMER,
        "address": "123 Test Street",
        "city": "Dhaka",
        "state": "Dhaka",
        "zip_code": "1200",
    },
]


def main():
    init_db(create_default_admin=False)
    db = SessionLocal()
    try:
        users = db.query(User).all()
        print(f"\n{'=' * 60}")
        print(f"Current users in database: {len(users)}")
        print(f"{'=' * 60}")

        for u in users:
            print(f"  ID: {u.id} | Email: {u.email} | Role: {u.role.value}")

        for demo in DEMO_USERS:
            fields = dict(demo)
            password = fields.pop("password")
            if db.query(User).filter(User.email == fields["email"]).first():
                print(f"\n  {fields['email']} already exists, skipping")
                continue

            db.add(User(hashed_password=get_password_hash(password), **fields))
            db.commit()

            print(f"\n{'=' * 60}")
            print(f"Created {fields['role'].value}: {fields['email']}")
            print(f"Password: {password}")
            print(f"{'=' * 60}")
        print()
    finally:
        db.close()


if __name__ == "__main__":
    main()
