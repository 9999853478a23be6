"""Create the admin account, or reset its password with --reset.

Usage: python scripts/make_admin.py USERNAME PASSWORD [--reset]
"""
import argparse
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from schoolsite import create_app  # noqa: E402
from schoolsite.services.users import ensure_admin  # noqa: E402


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('username')
    parser.add_argument('password')
    parser.add_argument('--reset', action='store_true', help='reset the password if the user exists')
    args = parser.parse_args(argv)

    app = create_app()
    with app.app_context():
        _, created = ensure_admin(args.username, args.password, reset_password=args.reset)

    if created:
        print(f"New admin user '{args.username}' created")
    elif args.reset:
        print(f"Password reset for '{args.username}'")
    else:
        print(f"User '{args.username}' already exists (use --reset to change the password)")
    return 0


if __name__ == '__main__':
    sys.exit(main())
