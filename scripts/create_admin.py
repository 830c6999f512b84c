# scripts/create_admin.py

import os
import sys
from getpass import getpass

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from werkzeug.security import generate_password_hash

from app import app
from flask_app.models import User, UserRole, UserStatus
from flask_app.utils.tokens import create_access_token


def create_admin():
    with app.app_context():
        email = input("Enter email: ").strip().lower()
        first_name = input("Enter first name: ").strip()
        last_name = input("Enter last name: ").strip()

        if not email:
            print("Error: Email cannot be empty.")
            sys.exit(1)

        if User.find_by_email(email):
            print("Error: Email already exists.")
            sys.exit(1)

        password = getpass("Enter password: ")
        password2 = getpass("Confirm password: ")

        if password != password2:
            print("Error: Passwords do not match.")
            sys.exit(1)

        if not password:
            print("Error: Password cannot be empty.")
            sys.exit(1)

        admin_user, error = User.safe_create(
            email=email,
            first_name=first_name or "Admin",
            last_name=last_name or "User",
            password_hash=generate_password_hash(password),
            role=UserRole.ADMINISTRATOR,
            status=UserStatus.ACTIVE,
        )

        if error:
            print(f"Error creating admin account: {error}")
            sys.exit(1)

        print("✅ Administrator account created successfully!")
        print(f"   Email: {admin_user.email}")
        print(f"   Role: {admin_user.role.name}")
        print(f"   Active: {admin_user.is_active}")
        print("\nBearer token (expires in " f"{app.config['JWT_EXPIRES_MINUTES']} minutes):")
        print(create_access_token(admin_user))


if __name__ == "__main__":
    create_admin()
