#!/usr/bin/env python3
"""
Example demonstrating the vet-session authentication and session core.

This example shows how to:
- Build a session manager from environment settings
- Restore a stored session at startup
- Sign in, check role access and sign out
- React to session changes through a subscription
- Handle sign-in errors for display
"""

import asyncio
import getpass
import os

from vet_session import (
    InvalidCredentials,
    SessionSnapshot,
    TransportFailure,
    build_session_manager,
    session_provider,
)
from vet_session.exceptions import create_error_response
from vet_session.utils import LoggingConfigurator, SessionSettings


def print_snapshot(snapshot: SessionSnapshot) -> None:
    """Subscriber that prints every committed session state."""
    if snapshot.system_user is not None:
        who = f"{snapshot.system_user.name} ({snapshot.system_user.role})"
    elif snapshot.client_owner is not None:
        who = snapshot.client_owner.name
    else:
        who = "nobody"
    print(f"  -> session: {snapshot.active_kind.value}, signed in: {who}")


async def demonstrate_session():
    """Walk through the session lifecycle against a running backend."""
    print("🏥 Vet Session Package - Session Demo")
    print("=" * 50)

    settings = SessionSettings.from_environment()
    LoggingConfigurator.configure_basic_logging(settings.log_level)
    print(f"\n1. Backend: {settings.api_base_url}, storage: {settings.storage}")

    manager = build_session_manager(settings)
    manager.subscribe(print_snapshot)

    async with session_provider(manager) as session:
        print("\n2. Restoring stored session...")
        snapshot = await session.restore()
        if snapshot.is_authenticated:
            print("✓ Previous session is still valid")
        else:
            print("✓ No valid stored session")

        print("\n3. Signing in...")
        email = os.getenv("VET_SESSION_DEMO_EMAIL") or input("Email: ")
        password = os.getenv("VET_SESSION_DEMO_PASSWORD") or getpass.getpass("Password: ")
        try:
            await session.login(email, password)
        except InvalidCredentials as e:
            print(f"⚠️  {e.message}")
            return
        except TransportFailure as e:
            print(f"⚠️  {e.message}")
            print(create_error_response(e))
            return

        print("\n4. Checking access...")
        for roles in (["ADMIN"], ["VET", "ADMIN"], None):
            result = session.has_access(roles)
            print(f"  - roles {roles or 'any staff'}: {'allowed' if result.has_access else 'denied'}")

        print("\n5. Signing out...")
        await session.logout()
        print("✓ Signed out, stored credentials cleared")


if __name__ == "__main__":
    print("Starting vet-session demonstration...")
    print("Set VET_SESSION_API_BASE_URL to point at your clinic backend")
    asyncio.run(demonstrate_session())
