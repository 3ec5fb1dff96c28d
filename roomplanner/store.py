from __future__ import annotations
import json, logging, os, tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .models import DesignData, DesignRecord
from .utils import DEFAULT_DESIGN_NAME, DEFAULT_THUMBNAIL

log = logging.getLogger("roomplanner.store")

STORE_ENV = "ROOMPLANNER_STORE"


class PersistenceError(Exception):
    """Writing the design store failed. In-memory state is unaffected."""


def default_store_path(settings_path: Optional[str] = None) -> Path:
    env = os.getenv(STORE_ENV)
    if env:
        return Path(env).expanduser()
    if settings_path:
        return Path(settings_path).expanduser()
    return Path.home() / ".roomplanner" / "designs.json"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_record(design_id: str, name: str = DEFAULT_DESIGN_NAME,
               data: Optional[DesignData] = None) -> DesignRecord:
    ts = now_iso()
    return DesignRecord(id=design_id, name=name, created_at=ts, updated_at=ts,
                        thumbnail=DEFAULT_THUMBNAIL, data=data or DesignData())


def record_from_dict(d: Dict) -> DesignRecord:
    """Record fields are required; a broken ``data`` block degrades to defaults."""
    if not isinstance(d, dict):
        raise TypeError("design record must be an object")
    try:
        data = DesignData.from_dict(d.get("data"))
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        log.warning("design %r has malformed data, using defaults: %s", d.get("id"), e)
        data = DesignData()
    return DesignRecord(
        id=str(d["id"]),
        name=str(d.get("name") or DEFAULT_DESIGN_NAME),
        created_at=str(d.get("createdAt") or now_iso()),
        updated_at=str(d.get("updatedAt") or now_iso()),
        thumbnail=str(d.get("thumbnail") or DEFAULT_THUMBNAIL),
        data=data,
    )


class DesignStore:
    """JSON-file persistence gateway: the whole list is read and written at once."""

    def __init__(self, path):
        self.path = Path(path)

    def load_designs(self) -> List[DesignRecord]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("cannot read %s, starting empty: %s", self.path, e)
            return []
        if not isinstance(raw, list):
            log.warning("%s does not hold a design list, starting empty", self.path)
            return []
        out: List[DesignRecord] = []
        for d in raw:
            try:
                out.append(record_from_dict(d))
            except (KeyError, TypeError, AttributeError) as e:
                log.warning("skipping unreadable design record: %s", e)
        return out

    def save_designs(self, records: List[DesignRecord]):
        payload = [r.to_dict() for r in records]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".designs-", suffix=".json", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, ensure_ascii=False, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise PersistenceError(f"could not write {self.path}: {e}") from e
        log.info("saved %d design(s) to %s", len(records), self.path)

    # ---- record helpers ----
    def open_design(self, design_id: str) -> DesignRecord:
        """Existing record, or a fresh default one that is persisted right away."""
        records = self.load_designs()
        for r in records:
            if r.id == design_id:
                return r
        rec = new_record(design_id)
        try:
            self.save_designs(records + [rec])
        except PersistenceError as e:
            log.warning("new design %r not persisted: %s", design_id, e)
        return rec

    def upsert(self, record: DesignRecord):
        records = self.load_designs()
        for i, r in enumerate(records):
            if r.id == record.id:
                records[i] = record
                break
        else:
            records.append(record)
        self.save_designs(records)
