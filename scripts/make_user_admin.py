"""
Script to promote an account to the admin role (creating it if needed).
Run: python -m scripts.make_user_admin EMAIL [PASSWORD]
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import SessionLocal
from app.services import auth_service
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def make_user_admin(email: str, password: str = None) -> bool:
    """Give `email` the admin role. Unknown accounts are created when a password is given."""
    db = SessionLocal()
    try:
        user = auth_service.get_user_by_email(db, email)

        if not user:
            if not password:
                logger.error(f"User {email} not found and no password provided. Cannot create user.")
                return False

            logger.info(f"Creating new user: {email}")
            user = auth_service.signup(db, email, password, "Admin")
            logger.info(f"Created user with ID: {user.id}")
        else:
            logger.info(f"Found existing user: {email} (ID: {user.id})")

        auth_service.set_role(db, user.id, "admin")
        logger.info(f"Successfully set user {email} to admin")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating user: {e}", exc_info=True)
        return False
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.make_user_admin EMAIL [PASSWORD]")
        sys.exit(2)

    email = sys.argv[1]
    password = sys.argv[2] if len(sys.argv) > 2 else None

    if make_user_admin(email, password):
        print(f"\n[SUCCESS] User {email} is now an admin")
    else:
        print(f"\n[ERROR] Failed to promote user {email}")
        sys.exit(1)
