"""Print bcrypt hashes for passwords (defaults: the demo account passwords)."""

import sys
from argparse import ArgumentParser
from typing import List, Optional

from passlib.context import CryptContext

DEFAULT_PASSWORDS = ["demo123", "admin123"]
DEFAULT_ROUNDS = 10


def hash_passwords(passwords: List[str], rounds: int = DEFAULT_ROUNDS) -> List[str]:
    context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)
    return [context.hash(password) for password in passwords]


def main(argv: Optional[List[str]] = None) -> int:
    parser = ArgumentParser(description=__doc__)
    parser.add_argument("passwords", nargs="*", default=DEFAULT_PASSWORDS, help="Passwords to hash")
    parser.add_argument("--rounds", type=int, default=DEFAULT_ROUNDS, help="bcrypt cost factor (4-31)")
    args = parser.parse_args(argv)

    try:
        hashes = hash_passwords(args.passwords, args.rounds)
    except ValueError as e:
        print(f"Error generating hash: {e}", file=sys.stderr)
        return 1

    for password, hashed in zip(args.passwords, hashes):
        print(f"Hashed {password}: {hashed}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
