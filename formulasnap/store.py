"""Key/value settings store persisted as ``config.json`` in the data dir.

Holds the user's credentials and preferences.  Values are plain JSON
strings or lists of strings; every ``set`` is written straight to disk.
"""

import json
import logging
from pathlib import Path
from typing import Any

from formulasnap.config import settings

logger = logging.getLogger("formulasnap.store")

STORE_FILENAME = "config.json"

SIMPLETEX_TOKEN = "simpletex_token"
SILICONFLOW_KEY = "siliconflow_key"
SIMPLETEX_MODEL = "simpletex_model"
VOUCHER_MODELS = "voucher_models"

DEFAULT_VALUES: dict[str, Any] = {
    SIMPLETEX_TOKEN: "",
    SILICONFLOW_KEY: "",
    VOUCHER_MODELS: [],
}


class SettingsStore:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._values: dict[str, Any] = self._read()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable settings file %s", self._path)
            return {}
        return payload if isinstance(payload, dict) else {}

    def _write(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._values, indent=2, ensure_ascii=False), encoding="utf-8")

    def ensure_defaults(self) -> None:
        missing = {k: v for k, v in DEFAULT_VALUES.items() if k not in self._values}
        if missing:
            self._values.update(missing)
            self._write()

    def get(self, key: str) -> Any:
        return self._values.get(key)

    def get_string(self, key: str) -> str:
        value = self._values.get(key)
        return value if isinstance(value, str) else ""

    def get_list(self, key: str) -> list[str]:
        value = self._values.get(key)
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    def set(self, key: str, value: str | list[str]) -> None:
        self._values[key] = value
        self._write()


_store: SettingsStore | None = None


def get_store() -> SettingsStore:
    global _store
    if _store is None:
        _store = SettingsStore(settings.data_dir() / STORE_FILENAME)
        _store.ensure_defaults()
    return _store
