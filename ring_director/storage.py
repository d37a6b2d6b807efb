"""JSON file storage.

All engine state is stored in flat JSON files under a configurable base
directory. There is no database or ORM; reads and writes go through plain
helper methods that load and dump JSON.

Directory layout:

    {base}/
      state.json      ← storyline director snapshot (bounded history)
      history.jsonl   ← append-only storyline audit log, one beat per line
      engine.json     ← championships, match history, PPV events

The snapshot and the audit log are independent: the snapshot keeps only the
last 100 beats, the log keeps everything.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

from ring_director.clock import now_ms
from ring_director.models import DirectorSnapshot


class StateStore:
    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    @property
    def state_file(self) -> Path:
        return self._base / "state.json"

    @property
    def history_file(self) -> Path:
        return self._base / "history.jsonl"

    @property
    def engine_file(self) -> Path:
        return self._base / "engine.json"

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text())

    def _ensure_base(self) -> None:
        self._base.mkdir(parents=True, exist_ok=True)

    def _write_json(self, path: Path, data: Any) -> None:
        self._ensure_base()
        # Atomic replace: readers see the old file or the new one, never half of each.
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2))
        tmp.replace(path)

    # ------------------------------------------------------------------
    # Director snapshot
    # ------------------------------------------------------------------

    def load_director(self) -> DirectorSnapshot | None:
        if not self.state_file.exists():
            return None
        return DirectorSnapshot.model_validate(self._read_json(self.state_file))

    def save_director(self, snapshot: DirectorSnapshot) -> None:
        self._write_json(self.state_file, snapshot.dump())

    # ------------------------------------------------------------------
    # Audit log (append-only)
    # ------------------------------------------------------------------

    def append_history(self, entry: dict[str, Any]) -> None:
        line = json.dumps({"timestamp": now_ms(), **entry})
        self._ensure_base()
        with self.history_file.open("a") as f:
            f.write(line + "\n")

    def read_history(self, limit: int | None = None) -> list[dict[str, Any]]:
        if not self.history_file.exists():
            return []
        lines = [l for l in self.history_file.read_text().splitlines() if l.strip()]
        if limit is not None:
            lines = lines[-limit:]
        return [json.loads(l) for l in lines]

    def export_history(self, dest: Path) -> Path:
        """Copy the audit log to ``dest`` for transcript export."""
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        if self.history_file.exists():
            shutil.copyfile(self.history_file, dest)
        else:
            dest.write_text("")
        return dest

    # ------------------------------------------------------------------
    # Engine state (championships, matches, PPV)
    # ------------------------------------------------------------------

    def load_engine(self) -> dict[str, Any]:
        if not self.engine_file.exists():
            return {}
        data = self._read_json(self.engine_file)
        if not isinstance(data, dict):
            raise ValueError(f"engine.json must hold an object, got {type(data).__name__}")
        return data

    def save_engine(self, data: dict[str, Any]) -> None:
        self._write_json(self.engine_file, data)
