"""
Create a user (e.g. the first admin) without going through the API. Run from project root:
  python -m staffauth.scripts.create_user NAME STAFF_NO EMAIL PASSWORD [user_type]
Example:
  python -m staffauth.scripts.create_user "Ada Admin" S0001 ada@example.com your-secure-password ADMIN
"""
import argparse
import sys

from pydantic import ValidationError

from staffauth.core.config import get_settings
from staffauth.core.database import SessionLocal
from staffauth.schemas.user import SignupRequest
from staffauth.services.directory import UserDirectory
from staffauth.services.errors import UserServiceError
from staffauth.services.tokens import TokenIssuer
from staffauth.services.users import UserService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a staff user account.")
    parser.add_argument("name", help="Full name (2-100 chars)")
    parser.add_argument("staff_no", help="Staff number")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("user_type", nargs="?", default="USER", choices=["USER", "ADMIN"])
    args = parser.parse_args(argv)

    try:
        body = SignupRequest(
            name=args.name.strip(),
            staff_no=args.staff_no.strip(),
            email=args.email.strip(),
            password=args.password,
            user_type=args.user_type,
        )
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1

    settings = get_settings()
    db = SessionLocal()
    try:
        service = UserService(
            UserDirectory(db, settings.SIGNUP_DB_TIMEOUT_SEC),
            TokenIssuer(settings),
            bcrypt_rounds=settings.BCRYPT_ROUNDS,
        )
        result = service.signup(body)
    except UserServiceError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created {body.user_type} '{body.staff_no}' with user_id {result.inserted_id}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
