#!/usr/bin/env python3
"""Grant an administrative role to an existing member (idempotent).

Usage:
  python scripts/attach_admin_role.py --email someone@example.org
  python scripts/attach_admin_role.py --email someone@example.org --role SUPER_CONTROLLER
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.savishkar.audit import record_event
from app.savishkar.models import User
from app.savishkar.roles import ADMIN_ROLES, Role
from scripts._db_utils import script_session


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", required=True, help="Member email")
    parser.add_argument("--database-url", default=None, help="Defaults to DATABASE_URL")
    parser.add_argument(
        "--role",
        default=Role.ADMIN.value,
        choices=sorted(r.value for r in ADMIN_ROLES),
        help="Administrative role to grant",
    )
    args = parser.parse_args()

    with script_session(args.database_url) as s:
        user = s.query(User).filter(User.email.ilike(args.email.strip())).one_or_none()
        if not user:
            print(f"User not found: {args.email}")
            return
        profile = user.profile
        if profile is None:
            print(f"User has no member profile: {args.email}")
            return
        if profile.role == args.role:
            print(f"User already has {args.role}: {args.email}")
            return
        old = profile.role
        profile.role = args.role
        profile.event_manager_expiry = None
        record_event(
            s,
            actor=None,
            action="profile.change_role",
            entity_type="Profile",
            entity_id=str(profile.id),
            reason="scripts/attach_admin_role.py",
            metadata={"membership_id": profile.membership_id, "old": old, "new": args.role},
        )
    print(f"{args.role} granted to {args.email}")


if __name__ == "__main__":
    main()
