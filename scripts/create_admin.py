"""
Create an admin identity, or promote an existing one.
Run: python -m scripts.create_admin admin@example.com --password 'secret123'
"""
import argparse
import logging
import sys
from typing import Optional

from app.core.security import hash_password
from app.db.models.identity import Identity, IdentityRole
from app.db.session import SessionLocal

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_admin(email: str, password: Optional[str] = None) -> bool:
    db = SessionLocal()
    try:
        identity = db.query(Identity).filter(Identity.email == email.lower()).first()
        if identity is None:
            if not password:
                logger.error(f"Identity {email} not found and no password provided. Cannot create admin.")
                return False
            identity = Identity(
                email=email.lower(),
                password_hash=hash_password(password),
                role=IdentityRole.ADMIN.value,
                email_verified=True,
            )
            db.add(identity)
            logger.info(f"Creating admin identity: {email}")
        else:
            logger.info(f"Promoting existing identity to admin: {email} (ID: {identity.id})")
            identity.role = IdentityRole.ADMIN.value
            identity.is_active = True
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating admin: {e}", exc_info=True)
        return False
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote an admin identity")
    parser.add_argument("email")
    parser.add_argument("--password", default=None)
    args = parser.parse_args()

    if create_admin(args.email, args.password):
        print(f"\n[SUCCESS] {args.email} is an admin")
    else:
        print(f"\n[ERROR] Failed to set up admin {args.email}")
        sys.exit(1)
