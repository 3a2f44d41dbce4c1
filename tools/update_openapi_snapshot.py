import json
from pathlib import Path

from task_manager.api.main import create_app
from task_manager.api.openapi import openapi_contract
from task_manager.core.config import Settings


def main() -> int:
    snap_path = Path("tests/snapshots/openapi_snapshot.json")
    snap_path.parent.mkdir(parents=True, exist_ok=True)

    app = create_app(Settings(database_path=":memory:", seed_enabled=False, audit_log_path=None))
    contract = openapi_contract(app.openapi())
    app.state.store.close()

    snap_path.write_text(
        json.dumps(contract, sort_keys=True, indent=2) + "\n",
        encoding="utf-8",
    )
    print(f"Wrote OpenAPI contract snapshot: {snap_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
