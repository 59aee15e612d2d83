import uuid
import os
from datetime import datetime, timezone
from utils.auth import hash_password

DEFAULT_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
DEFAULT_PASSWORD = os.environ.get("ADMIN_PASSWORD", "VccAdmin2026!")


def seed_accounts():
    """
    Accounts created on first start: (user, password).
    The admin always; an operator (data entry, no delete) when
    OPERATOR_USERNAME and OPERATOR_PASSWORD are set.
    """
    accounts = [(
        {
            "id": str(uuid.uuid5(uuid.NAMESPACE_DNS, DEFAULT_USERNAME)),
            "username": DEFAULT_USERNAME,
            "full_name": "Administrator",
            "role": "admin",
            "is_active": True,
        },
        DEFAULT_PASSWORD,
    )]

    operator_username = os.environ.get("OPERATOR_USERNAME")
    operator_password = os.environ.get("OPERATOR_PASSWORD")
    if operator_username and operator_password:
        accounts.append((
            {
                "id": str(uuid.uuid5(uuid.NAMESPACE_DNS, operator_username)),
                "username": operator_username,
                "full_name": "Operator",
                "role": "operator",
                "is_active": True,
            },
            operator_password,
        ))
    return accounts


async def seed_database(db):
    """Create the seed accounts and the vehicle indexes"""
    created = 0
    for seed, password in seed_accounts():
        existing = await db.users.find_one({"username": seed["username"]})
        if existing:
            continue
        user = {
            **seed,
            "password_hash": hash_password(password),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        await db.users.insert_one(user)
        created += 1

    await db.vehicles.create_index("id", unique=True)
    await db.vehicles.create_index("vccNo", unique=True)

    if created:
        return {"message": f"Seeded {created} user(s)"}
    return {"message": "Already seeded"}
