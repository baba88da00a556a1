from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.pickup_system.pickup_system.database.bootstrap import apply_seed_sql, reset_child_statuses


def main() -> None:
    parser = argparse.ArgumentParser(description="Load demo guardians and children.")
    parser.add_argument(
        "--reset-status",
        action="store_true",
        help="set every child back to ABSENT (start of a new day)",
    )
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    if args.reset_status:
        changed = reset_child_statuses(db_config)
        print(f"Reset {changed} children to ABSENT")

    print(f"OK: seeded {db_config.get('database')} on {db_config.get('host')}:{db_config.get('port', 3306)}")


if __name__ == "__main__":
    main()
