"""Assign a portal role to an existing profile.

Roles are never editable through the API; an operator runs this script
against the database instead.

    python scripts/assign_role.py <profile-id> admin
    python scripts/assign_role.py <profile-id> patient
"""

import argparse
import asyncio
import sys


async def assign_role(profile_id: str, role: str) -> bool:
    """Set the role of a profile.

    Returns:
        True if the profile exists and was updated
    """
    from sqlalchemy import select, text

    from consent_portal.db.session import AsyncSessionLocal
    from consent_portal.models.profile import Profile

    async with AsyncSessionLocal() as session:
        if session.sync_session.get_bind().dialect.name == "postgresql":
            # Row policies only expose a profile to itself
            await session.execute(
                text("SELECT set_config('app.current_user_id', :user_id, true)"),
                {"user_id": profile_id},
            )
            await session.execute(
                text("SELECT set_config('app.role_assignment', 'on', true)")
            )

        profile = await session.scalar(select(Profile).where(Profile.id == profile_id))
        if profile is None:
            return False

        previous = profile.role
        profile.role = role
        await session.commit()

        print(f"{profile.email}: {previous} -> {role}")
        return True


def main():
    """Main entry point."""
    from consent_portal.models.profile import ProfileRole

    parser = argparse.ArgumentParser(description="Assign a consent portal role")
    parser.add_argument("profile_id", help="Profile id (identity provider subject)")
    parser.add_argument(
        "role",
        choices=[r.value for r in ProfileRole],
        help="Role to assign",
    )
    args = parser.parse_args()

    updated = asyncio.run(assign_role(args.profile_id, args.role))
    if not updated:
        print(f"No profile with id {args.profile_id}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
