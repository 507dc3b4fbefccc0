import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from esg.config import get_settings
from esg.ingest.schema import export_json_schema

out = get_settings().output_dir / "schema.json"
out.parent.mkdir(parents=True, exist_ok=True)
out.write_text(
    json.dumps(export_json_schema(), indent=2, ensure_ascii=False), encoding="utf-8"
)
print(f"Wrote {out}")
