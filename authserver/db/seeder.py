"""
Database seeder – creates a default admin account on first startup.

⚠️  FOR DEVELOPMENT ONLY.
    Disable with SEED_ADMIN=false before deploying to production.

Default credentials:
    username : admin@auth.local
    password : Admin1234!
"""
import logging

from authserver.core.security import hash_password
from authserver.db.database import get_db
from authserver.models.user import ProviderType, RoleType, User
from authserver.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

ADMIN_USERNAME = "admin@auth.local"
ADMIN_PASSWORD = "Admin1234!"


def seed_admin() -> None:
    """
    Insert the default admin user if it does not already exist.
    Safe to call on every startup – it is a no-op when the user is present.
    """
    with get_db() as conn:
        repo = UserRepository(conn)
        if repo.get_by_username(ADMIN_USERNAME):
            logger.info("Seeder: admin user '%s' already exists – skipping.", ADMIN_USERNAME)
            return

        repo.create(
            User.new_instance(
                username=ADMIN_USERNAME,
                password=hash_password(ADMIN_PASSWORD),
                provider_type=ProviderType.LOCAL,
                role=RoleType.ROLE_ADMIN,
            )
        )
        logger.info("Seeder: created default admin user '%s'.", ADMIN_USERNAME)
