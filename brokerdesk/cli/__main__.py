# brokerdesk/cli/__main__.py
from __future__ import annotations

import argparse
import getpass

from brokerdesk.cli.create_user import create_user
from brokerdesk.db import init_db


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(prog="brokerdesk")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create tables")

    cu = sub.add_parser("create-user", help="create a user (admins included)")
    cu.add_argument("--email", required=True)
    cu.add_argument("--password", default=None, help="prompted for when omitted")
    cu.add_argument("--role", default="admin", choices=["broker", "channel_partner", "admin"])
    cu.add_argument("--first-name", default="Admin")
    cu.add_argument("--last-name", default="User")
    cu.add_argument("--firm-name", default="BrokerDesk")
    cu.add_argument("--city", default="")

    args = p.parse_args(argv)

    init_db()
    if args.command == "init-db":
        print({"ok": True})
        return

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        raise SystemExit("password must be at least 6 characters")

    out = create_user(
        email=args.email,
        password=password,
        role=args.role,
        first_name=args.first_name,
        last_name=args.last_name,
        firm_name=args.firm_name,
        city=args.city,
    )
    print(
        {
            "ok": True,
            "created": out.created,
            "user_id": out.user_id,
            "email": out.email,
            "role": out.role,
        }
    )


if __name__ == "__main__":
    main()
