"""Create all tables. Run on app startup.

SECURITY: Auto-generates secure random default password (not hardcoded).
Admin must change this after first login.
"""
import logging
import secrets

from medora.core.security import get_password_hash
from medora.db.base import Base
from medora.db.session import SessionLocal, engine
from medora import models  # noqa: F401 - register models
from medora.models.enums import Role
from medora.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@medora.com"


def init_db(create_default_admin: bool = True):
    Base.metadata.create_all(bind=engine)

    if not create_default_admin:
        return

    # Create default admin user if no users exist
    db = SessionLocal()
    try:
        if db.query(User).count() == 0:
            # SECURITY: Generate random password (not hardcoded weak password)
            default_password = secrets.token_urlsafe(16)

            db.add(User(
                name="Administrator",
                email=DEFAULT_ADMIN_EMAIL,
                hashed_password=get_password_hash(default_password),
                role=Role.ADMIN,
                email_verified=True,
            ))
            db.commit()
            logger.warning(f"Default admin user created: {DEFAULT_ADMIN_EMAIL}")

            # Print to console (only on initial setup)
            print("\n" + "=" * 70)
            print("DEFAULT ADMIN USER CREATED")
            print("=" * 70)
            print(f"Email:    {DEFAULT_ADMIN_EMAIL}")
            print(f"Password: {default_password}")
            print("\nSECURITY: Change this password immediately after first login!")
            print("=" * 70 + "\n")
    finally:
        db.close()
