import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.savishkar.audit import record_event
from app.savishkar.models import Profile, User
from app.savishkar.modules.members.service import provision_member
from app.savishkar.roles import Role
from scripts._db_utils import script_session


def seed_only(*, database_url: str | None = None) -> None:
    """
    Seed the bootstrap super controller in an idempotent way.
    Does NOT overwrite an existing account's password or role.
    """
    load_dotenv()
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@savishkar.org").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"
    admin_name = (os.environ.get("ADMIN_NAME") or "Super Controller").strip()

    # Use a direct engine/session so this can run in release without importing app.wsgi (avoids recursion).
    with script_session(database_url) as s:
        user = s.query(User).filter(User.email == admin_email).one_or_none()
        if user is None:
            profile = provision_member(
                s,
                email=admin_email,
                password=admin_password,
                full_name=admin_name,
                role=Role.SUPER_CONTROLLER,
                must_change_password=admin_password == "change-me",
            )
            record_event(
                s,
                actor=None,
                action="seed.super_controller",
                entity_type="Profile",
                entity_id=str(profile.id),
                metadata={"email": admin_email, "membership_id": profile.membership_id},
            )
            print(f"Created super controller: {admin_email}")
        elif s.query(Profile).filter(Profile.user_id == user.id).one_or_none() is None:
            print(f"User {admin_email} exists without a profile; run scripts/attach_admin_role.py --email {admin_email}")
        else:
            print(f"Super controller already present: {admin_email}")

    print("Initialized database (seed_only).")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
