"""Create or reset the bootstrap admin account from ADMIN_EMAIL / ADMIN_PASSWORD."""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.od_tracker.od_tracker.database.bootstrap import ensure_admin_user


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    email = getattr(settings, "ADMIN_EMAIL")
    password = getattr(settings, "ADMIN_PASSWORD", "")
    if not password:
        raise SystemExit("ADMIN_PASSWORD is not set")

    ensure_admin_user(db_config, email=email, password=password)
    print(
        f"OK: Admin {email} ready -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
