#!/usr/bin/env python3
"""
Import registered users from a CSV export.

Consecutive rows sharing an e-mail address form one household: the
first row creates the user, every row adds a participant. Imported
users get a random password and, when SMTP is configured, a password
reset e-mail so they can choose their own.

Columns used:
    1: First Name
    2: Last Name
    4: Family Code
    5: E-Mail Address
    6: Organization
    7-53: Commitments (first non-empty one wins)

Usage:
    python scripts/import_users.py --file users.csv            # dry run
    python scripts/import_users.py --file users.csv --commit   # write and e-mail

Environment variables required:
    MONGODB_URI - MongoDB connection string
    MONGODB_DATABASE - Database name (default: nhc)
    JWT_SECRET - Used for password hashing settings
"""

import argparse
import asyncio
import csv
import os
import sys
from typing import Dict, List, Any, Iterable, Optional, Sequence

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv

from common.auth import JWTAuth
from common.utils.exceptions import APIException
from config.messages import IMPORTED_PARTICIPANT_CATEGORY, UNKNOWN_COMMITMENT
from nhc.config import settings
from nhc.database import ensure_indexes
from nhc.services.auth.roles import UserStatus
from nhc.services.email.email_service import EmailService, EmailDeliveryError
from nhc.services.user.user_service import UserService, generate_code

# Load environment variables
load_dotenv()

FIRST_NAME_COLUMN = 1
LAST_NAME_COLUMN = 2
FAMILY_COLUMN = 4
EMAIL_COLUMN = 5
ORGANIZATION_COLUMN = 6
COMMITMENT_COLUMNS = slice(7, 54)


def find_commitment(fields: Iterable[str]) -> str:
    """First non-empty commitment column."""
    for field in fields:
        if field and field.strip():
            return field.strip()
    return UNKNOWN_COMMITMENT


def _participant(record: Sequence[str], participant_id: int) -> Dict[str, Any]:
    return {
        "id": participant_id,
        "firstName": record[FIRST_NAME_COLUMN].strip(),
        "lastName": record[LAST_NAME_COLUMN].strip(),
        "category": IMPORTED_PARTICIPANT_CATEGORY,
        "commitment": find_commitment(record[COMMITMENT_COLUMNS]),
        "points": 0,
    }


def parse_records(records: List[Sequence[str]]) -> List[Dict[str, Any]]:
    """
    Group CSV rows (header excluded) into households.

    Returns:
        One dict per user with email, names, family, organization and
        participants
    """
    users: List[Dict[str, Any]] = []
    current: Optional[Dict[str, Any]] = None

    for record in records:
        email = record[EMAIL_COLUMN].strip().lower()
        if not email:
            continue

        if current is None or email != current["email"]:
            current = {
                "email": email,
                "firstName": record[FIRST_NAME_COLUMN].strip(),
                "lastName": record[LAST_NAME_COLUMN].strip(),
                "family": record[FAMILY_COLUMN].strip().upper() or None,
                "organization": record[ORGANIZATION_COLUMN].strip() or None,
                "participants": [],
            }
            users.append(current)

        current["participants"].append(_participant(record, len(current["participants"])))

    return users


def read_csv(path: str) -> List[Dict[str, Any]]:
    with open(path, newline="", encoding="utf-8") as f:
        records = list(csv.reader(f))
    return parse_records(records[1:])


async def import_users(
    user_service: UserService,
    users: List[Dict[str, Any]],
    email_service: Optional[EmailService] = None,
) -> Dict[str, int]:
    """
    Create the parsed users, then send each new user a reset e-mail.

    Args:
        user_service: For creating users and reset codes
        users: Output of parse_records()
        email_service: Reset e-mails are skipped when None

    Returns:
        Success and failure counts for creation and e-mails
    """
    counts = {"created": 0, "failed": 0, "emailed": 0, "emailFailed": 0}
    created = []

    for user in users:
        try:
            doc = await user_service.create_user(
                email=user["email"],
                password=generate_code(),
                first_name=user["firstName"],
                last_name=user["lastName"],
                status=UserStatus.REGISTERED,
                extra={
                    "family": user["family"],
                    "organization": user["organization"],
                    "participants": user["participants"],
                },
            )
        except APIException as e:
            print(f"  Failed to add user {user['email']}: {e.message}")
            counts["failed"] += 1
            continue
        counts["created"] += 1
        created.append(doc)

    if email_service is None:
        print("Skipping password reset e-mails, SMTP is not configured.")
        return counts

    print("Sending password reset e-mails...")
    for doc in created:
        try:
            reset_code = await user_service.set_reset_code(doc["_id"])
            message = email_service.reset_password_message(doc.get("firstName"), reset_code)
            await email_service.send_mail(doc["email"], message)
        except (APIException, EmailDeliveryError) as e:
            print(f"  Failed to send reset e-mail to {doc['email']}: {e}")
            counts["emailFailed"] += 1
            continue
        counts["emailed"] += 1

    return counts


async def run(path: str, commit: bool) -> int:
    users = read_csv(path)
    participant_count = sum(len(u["participants"]) for u in users)
    print(f"Parsed {len(users)} users with a total of {participant_count} participants.")

    if not commit:
        print("Dry run: no changes made. Pass --commit to import.")
        return 0

    print(f"Connecting to database: {settings.MONGODB_DATABASE}")
    client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
    db = client[settings.MONGODB_DATABASE]

    try:
        await ensure_indexes(db)
        before = await db["users"].count_documents({})
        print(f"Current user count: {before}")

        signing_key, verify_key = settings.read_jwt_keys()
        user_service = UserService(
            db=db,
            jwt_auth=JWTAuth(secret=signing_key, algorithm=settings.JWT_ALGORITHM, verify_key=verify_key),
        )
        email_service = None
        if settings.smtp_configured():
            email_service = EmailService(
                mode="smtp",
                from_email=settings.SMTP_FROM_EMAIL,
                from_name=settings.SMTP_FROM_NAME,
                site_url=settings.SITE_URL,
                smtp_host=settings.SMTP_HOST,
                smtp_port=settings.SMTP_PORT,
                smtp_user=settings.SMTP_USER,
                smtp_password=settings.SMTP_PASSWORD,
            )

        counts = await import_users(user_service, users, email_service)

        after = await db["users"].count_documents({})
        print(f"Users added: {counts['created']}. Failed: {counts['failed']}.")
        print(f"User count after import: {after}")
        if email_service is not None:
            print(f"Reset e-mails sent: {counts['emailed']}. Failed: {counts['emailFailed']}.")
    finally:
        client.close()

    return 1 if counts["failed"] or counts["emailFailed"] else 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Import users from a CSV export.")
    parser.add_argument("--file", required=True, help="CSV file to load users from")
    parser.add_argument("--commit", action="store_true", help="write to the database (default is a dry run)")
    args = parser.parse_args(argv)

    return asyncio.run(run(args.file, args.commit))


if __name__ == "__main__":
    sys.exit(main())
