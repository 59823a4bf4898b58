import os
from sqlite_utils import Database
from datetime import datetime, timezone

CONFIG_ROW_ID = 1


class TranslatorDB:
    def __init__(self, db_path: str):
        """Initialize the database and ensure tables exist."""
        db_dir = os.path.dirname(db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        self.db = Database(db_path)
        self._ensure_tables()

    def _ensure_tables(self):
        """Ensure tables exist with proper structure. sqlite-utils will handle migrations/creation."""
        # Single-row table holding the user's translator settings
        if "translator_config" not in self.db.table_names():
            # pyrefly: ignore [missing-attribute]
            self.db["translator_config"].create({
                "id": int,
                "enabled": int,  # 1 for enabled, 0 for disabled
                "source_language": str,
                "target_language": str,
                "show_original": int,
                "delay_ms": int,
                "updated_at": str
            }, pk="id")

    def load_config(self) -> dict | None:
        """Get the saved settings row, or None if nothing was saved yet."""
        rows = list(self.db["translator_config"].rows_where("id = ?", [CONFIG_ROW_ID]))
        if rows:
            return rows[0]
        return None

    def save_config(self, values: dict) -> bool:
        """Insert or replace the settings row."""
        row = {
            "id": CONFIG_ROW_ID,
            "enabled": int(bool(values["enabled"])),
            "source_language": values["source_language"],
            "target_language": values["target_language"],
            "show_original": int(bool(values["show_original"])),
            "delay_ms": int(values["delay_ms"]),
            "updated_at": datetime.now(timezone.utc).isoformat()
        }
        try:
            # pyrefly: ignore [missing-attribute]
            self.db["translator_config"].upsert(row, pk="id")
            return True
        except Exception:
            return False
