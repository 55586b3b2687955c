"""Utility script to export the report service OpenAPI specification."""

from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from branch_reports.main import create_application


def main(destination: Path = Path("docs/openapi.json")) -> Path:
    app = create_application()
    schema = app.openapi()
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(schema, indent=2), encoding="utf-8")
    print(f"OpenAPI specification written to {destination}")
    return destination


if __name__ == "__main__":
    main()
