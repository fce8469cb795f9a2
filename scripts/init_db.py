from __future__ import annotations

import argparse
import os

from dotenv import load_dotenv

from aliya.db.session import init_db, ping_db


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def main() -> None:
    load_dotenv(override=False)
    parser = argparse.ArgumentParser(description="Create the Aliya database tables.")
    parser.add_argument(
        "--db",
        default=os.getenv("DB_PATH", "").strip() or "aliya.db",
        help="Path to sqlite db file (default: DB_PATH or aliya.db)",
    )
    args = parser.parse_args()

    database_url = os.getenv("DATABASE_URL", "").strip() or None
    init_db(database_url, args.db, require_ssl=_env_flag("DATABASE_REQUIRE_SSL"))
    ping_db()
    if database_url:
        print("Initialized DB using DATABASE_URL")
    else:
        print(f"Initialized DB at {args.db}")


if __name__ == "__main__":
    main()
