#!/usr/bin/env python3
"""Create accounts and store Garmin connections from the command line.

There is no self sign-up, and the OAuth handshake that produces Garmin
user tokens runs outside this service, so both are seeded here.

Usage:
    # Create a user (password prompted when omitted)
    python scripts/seed_user.py user --email user@example.com --name "User Name"

    # Store a Garmin token pair as the user's active connection
    python scripts/seed_user.py connection --email user@example.com \
        --access-token TOKEN --token-secret SECRET

    # List users and their connection state
    python scripts/seed_user.py list
"""

import argparse
import asyncio
import getpass
import os
import sys

from sqlalchemy import select

from strength_sync.core.database import async_session_maker
from strength_sync.core.security import hash_password
from strength_sync.models.user import User
from strength_sync.services.connection_store import ConnectionStore


async def create_user(email: str, password: str, display_name: str | None = None) -> User:
    """Create a user.

    Raises:
        ValueError: If the email is already taken.
    """
    async with async_session_maker() as session:
        result = await session.execute(select(User).where(User.email == email))
        if result.scalar_one_or_none():
            raise ValueError(f"User with email '{email}' already exists")

        user = User(
            email=email,
            password_hash=hash_password(password),
            display_name=display_name,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


async def store_connection(
    email: str,
    access_token: str,
    token_secret: str | None,
    garmin_user_id: str | None = None,
) -> int:
    """Make the given token pair the user's only active connection.

    Returns:
        Id of the new connection row.
    """
    async with async_session_maker() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            raise ValueError(f"No user with email '{email}'")

        connection = await ConnectionStore(session).upsert_active(
            user.id,
            access_token=access_token,
            token_secret=token_secret,
            garmin_user_id=garmin_user_id,
        )
        return connection.id


async def list_users() -> None:
    async with async_session_maker() as session:
        users = (await session.execute(select(User).order_by(User.id))).scalars().all()
        if not users:
            print("No users found")
            return

        store = ConnectionStore(session)
        for user in users:
            connection = await store.get_active(user.id)
            state = "connected" if connection else "not connected"
            last_sync = connection.last_sync_at if connection else None
            print(f"{user.id:>4}  {user.email:<40} garmin: {state}, last sync: {last_sync or '-'}")


def read_password() -> str:
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Confirm password: "):
        raise ValueError("Passwords do not match")
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")
    return password


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed StrengthSync accounts")
    sub = parser.add_subparsers(dest="command", required=True)

    user = sub.add_parser("user", help="Create a user")
    user.add_argument("--email", default=os.environ.get("SEED_EMAIL"))
    user.add_argument("--password", default=os.environ.get("SEED_PASSWORD"))
    user.add_argument("--name", default=os.environ.get("SEED_NAME"))

    conn = sub.add_parser("connection", help="Store a Garmin connection")
    conn.add_argument("--email", required=True)
    conn.add_argument("--access-token", required=True)
    conn.add_argument("--token-secret")
    conn.add_argument("--garmin-user-id")

    sub.add_parser("list", help="List users")
    return parser


async def main() -> None:
    args = build_parser().parse_args()

    try:
        if args.command == "list":
            await list_users()
        elif args.command == "user":
            if not args.email:
                args.email = input("Email: ").strip()
            password = args.password or read_password()
            user = await create_user(args.email, password, args.name)
            print(f"Created user {user.id} ({user.email})")
        elif args.command == "connection":
            connection_id = await store_connection(
                args.email,
                args.access_token,
                args.token_secret,
                args.garmin_user_id,
            )
            print(f"Stored active Garmin connection {connection_id} for {args.email}")
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
