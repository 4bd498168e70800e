"""
Seed database script.

Creates one officer per main unit role, each with a profile and an
authoritative role assignment.
"""

import asyncio
from caselab.db.database import async_session_factory
from caselab.apps.access.permissions import Role
from caselab.apps.auth.models import Profile, RoleAssignment
from caselab.config.settings import settings
from caselab.utils.security import hash_password
from caselab.utils.logger import get_logger

logger = get_logger(__name__)

SEED_PASSWORD = "Password123!"

USERS_TO_SEED = [
    {"email": "chief@caselab.local", "full_name": "Chief of Cyber", "badge_number": "CC-0001", "role": Role.CHIEF_OF_CYBER},
    {"email": "ocu@caselab.local", "full_name": "Officer Commanding Unit", "badge_number": "OCU-0001", "role": Role.OFFICER_COMMANDING_UNIT},
    {"email": "co@caselab.local", "full_name": "Commanding Officer", "badge_number": "CO-0001", "role": Role.COMMANDING_OFFICER},
    {"email": "admin@caselab.local", "full_name": "System Administrator", "badge_number": "ADM-0001", "role": Role.ADMINISTRATOR},
    {"email": "exhibits@caselab.local", "full_name": "Exhibit Officer", "badge_number": "EX-0001", "role": Role.EXHIBIT_OFFICER},
    {"email": "analyst@caselab.local", "full_name": "Forensic Analyst", "badge_number": "FA-0001", "role": Role.FORENSIC_ANALYST},
    {"email": "investigator@caselab.local", "full_name": "Investigator", "badge_number": "INV-0001", "role": Role.INVESTIGATOR},
]


async def seed_users() -> None:
    async with async_session_factory() as session:
        try:
            logger.info("Starting database seed process...")

            for user_data in USERS_TO_SEED:
                if await Profile.exists(db=session, filters={"email": user_data["email"]}):
                    logger.info(f"User {user_data['email']} already exists. Skipping.")
                    continue

                role = user_data["role"]
                logger.info(f"Creating {role.value}: {user_data['email']}")

                profile = await Profile.create(
                    db=session,
                    commit=False,
                    email=user_data["email"],
                    full_name=user_data["full_name"],
                    hashed_password=hash_password(SEED_PASSWORD),
                    badge_number=user_data["badge_number"],
                    department=settings.DEFAULT_DEPARTMENT,
                    role=role.value,
                    is_active=True,
                )
                await RoleAssignment.create(db=session, commit=False, user_id=profile.id, role=role.value)

            await session.commit()
            logger.info("Database seeded successfully")

        except Exception as e:
            await session.rollback()
            logger.error(f"Failed to seed database: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(seed_users())
