"""
Seed script to populate default permissions and roles.

Run this script after database initialization to create:
- The permission catalog (view/create/edit/delete for roles, permissions and
  users, plus dashboard and profile permissions)
- The default ``admin`` and ``user`` roles
- An administrator account when ADMIN_EMAIL and ADMIN_PASSWORD are set

Safe to run repeatedly.

Usage:
    uv run python -m scripts.seed_permissions
"""
import asyncio

from app.core import config
from app.core.database.engine import AsyncSessionLocal, init_db
from app.features.permissions.catalog import DEFAULT_ROLES
from app.features.permissions.seed import seed, seed_admin_user
from app.utils import get_logger


log = get_logger(__name__)


async def main():
    """Main function to seed permissions and roles."""
    log.info("Starting permission seeding...")
    
    # Initialize database tables first
    log.info("Initializing database tables...")
    await init_db()
    
    async with AsyncSessionLocal() as db:
        try:
            roles = await seed(db)
            await seed_admin_user(
                db,
                roles["admin"],
                config.ADMIN_NAME,
                config.ADMIN_EMAIL,
                config.ADMIN_PASSWORD,
            )
        except Exception as e:
            log.error(f"Error seeding permissions: {e}", exc_info=True)
            await db.rollback()
            raise
    
    log.info("Permission seeding completed successfully!")
    log.info("Default roles: %s", ", ".join(DEFAULT_ROLES))


if __name__ == "__main__":
    asyncio.run(main())
