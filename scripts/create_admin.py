"""Create an administrator account, or reset an existing one's password.

Usage:
    python scripts/create_admin.py <username> [--name "Full Name"]

The password is read interactively and stored only as a bcrypt hash.
"""
import argparse
import getpass
import sys

from sqlalchemy import select

from markscard.core.database import SessionLocal
from markscard.core.security import hash_password
from markscard.models.admin import Admin

MIN_PASSWORD_LENGTH = 8


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("username")
    parser.add_argument("--name", dest="full_name", default=None)
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return 1
    if password != getpass.getpass("Confirm password: "):
        print("Passwords do not match")
        return 1

    with SessionLocal() as session:
        admin = session.execute(
            select(Admin).where(Admin.username == args.username)
        ).scalar_one_or_none()

        if admin is None:
            admin = Admin(username=args.username, full_name=args.full_name, is_active=True)
            session.add(admin)
            action = "Created"
        else:
            action = "Updated"
            if args.full_name:
                admin.full_name = args.full_name

        admin.password_hash = hash_password(password)
        session.commit()

    print(f"{action} admin '{args.username}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
