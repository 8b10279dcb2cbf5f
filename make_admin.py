# make_admin.py
# Usage: python make_admin.py <phone>

import sys

from app import create_app
from models import db, User, Role


def make_admin(phone):
    app = create_app()
    with app.app_context():
        user = User.query.filter_by(phone=phone).first()

        if not user:
            raise SystemExit(f"No user with phone {phone} found. Register the account first.")

        if user.is_admin:
            print(f"User {user.phone} is already admin.")
            return

        user.role = Role.ADMIN.value
        db.session.commit()
        print(f"User (id={user.id}, phone={user.phone}) is now admin.")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        raise SystemExit("Usage: python make_admin.py <phone>")
    make_admin(sys.argv[1])
