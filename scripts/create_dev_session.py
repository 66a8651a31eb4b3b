"""Create a local user and session so the API can be called without the auth provider.

Prints a session token; use it as ``Authorization: Bearer <token>`` or put
it in .env as DASHBOARD_SESSION_TOKEN for the client.

Usage:
    python -m scripts.create_dev_session dev@example.com "Dev User"
"""

import asyncio
import secrets
import sys
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from campaign_dashboard.db.session import async_session_factory, engine
from campaign_dashboard.models.user import AuthSession, User


async def create_dev_session(email: str, name: str | None = None, days: int = 30) -> str:
    async with async_session_factory() as db:
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(email=email, name=name)
            db.add(user)
            await db.flush()
            print(f"Created user {user.id} <{email}>")
        else:
            print(f"Reusing user {user.id} <{email}>")

        token = secrets.token_urlsafe(32)
        expires = datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=days)
        db.add(AuthSession(session_token=token, user_id=user.id, expires=expires))
        await db.commit()

    await engine.dispose()
    return token


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.create_dev_session <email> [name]")
        sys.exit(1)

    token = asyncio.run(
        create_dev_session(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
    )
    print(f"Session token: {token}")
