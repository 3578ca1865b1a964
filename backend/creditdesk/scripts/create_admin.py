"""
Create Admin User Script
Creates the admin account from ADMIN_EMAIL / ADMIN_PASSWORD if it does not exist.
Usage: python -m creditdesk.scripts.create_admin
"""

import asyncio
import os

from creditdesk.database import AsyncSessionLocal
from creditdesk.models.user import UserRole
from creditdesk.services.user_service import UserService
from creditdesk.utils.password_policy import validate_password

DEFAULT_ADMIN_EMAIL = "admin@sistema.com"


async def create_admin():
    email = os.getenv("ADMIN_EMAIL", DEFAULT_ADMIN_EMAIL)
    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        print("ADMIN_PASSWORD is required to create the admin user.")
        return

    errors = validate_password(password)
    if errors:
        print("ADMIN_PASSWORD does not meet password policy:")
        for err in errors:
            print(f"- {err}")
        return

    async with AsyncSessionLocal() as db:
        service = UserService(db)
        if await service.get_by_email(email):
            print("Admin user already exists.")
            return

        admin = await service.create(
            email=email,
            password=password,
            first_name="Administrador",
            last_name="Sistema",
            role=UserRole.ADMIN,
        )
        print(f"Successfully created admin user: {admin.email}")


if __name__ == "__main__":
    asyncio.run(create_admin())
