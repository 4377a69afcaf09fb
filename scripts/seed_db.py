"""Create the default settings record and this year's leave balances.

Safe to re-run: an existing settings record and existing balance rows are kept.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hr_ledger.hr_ledger.common.datetime_utils import now_local
from src.hr_ledger.hr_ledger.container import build_container
from src.hr_ledger.hr_ledger.settings.model import Settings


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    container = build_container(db_config=db_config)

    if container.settings_provider.get() is None:
        container.settings_service.create_settings(Settings())
        print("OK: Created default settings")
    else:
        print("Settings already configured, leaving them unchanged")

    year = now_local().year
    created = container.leave_ledger.initialize_balances(year)
    print(
        f"OK: Initialized {created} leave balances for {year} -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
