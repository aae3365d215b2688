"""Check a password against a bcrypt hash; exit 0 on match, 1 otherwise."""

import sys
from argparse import ArgumentParser
from typing import List, Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def check_password(password: str, hashed: str) -> bool:
    """
    Verify ``password`` against ``hashed``.

    Raises:
        ValueError: If ``hashed`` is not a bcrypt hash
    """
    return pwd_context.verify(password, hashed)


def main(argv: Optional[List[str]] = None) -> int:
    parser = ArgumentParser(description=__doc__)
    parser.add_argument("hash", help="bcrypt hash ($2a$/$2b$ ...)")
    parser.add_argument("password", nargs="?", default="demo123", help="Password to check")
    args = parser.parse_args(argv)

    try:
        matched = check_password(args.password, args.hash)
    except (ValueError, TypeError) as e:
        print(f"Error verifying password: {e}", file=sys.stderr)
        return 1

    print(f"Password match result: {str(matched).lower()}")
    return 0 if matched else 1


if __name__ == "__main__":
    sys.exit(main())
