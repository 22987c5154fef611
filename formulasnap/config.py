"""Global configuration singleton for FormulaSnap.

Reads values from environment variables by default.  When embedded
(e.g. from a desktop shell), the caller can populate the singleton
*before* the first request so that paths and endpoints don't have to
live in the process environment.

    from formulasnap.config import settings
    settings.FORMULASNAP_DATA_DIR = "/tmp/formulasnap"
"""

import os
from pathlib import Path
from typing import Optional

DEFAULTS: dict[str, str] = {
    "FORMULASNAP_LANG": "zh",
    "HTTP_TIMEOUT": "120",
    "SIMPLETEX_API_BASE": "https://server.simpletex.net/api",
    "SILICONFLOW_API_BASE": "https://api.siliconflow.cn/v1",
    "SILICONFLOW_PRICING_URL": "https://siliconflow.cn/pricing",
    "HOST": "127.0.0.1",
    "PORT": "8071",
    "LOG_LEVEL": "INFO",
}


class Settings:
    """Lightweight mutable config, one global instance."""

    FORMULASNAP_DATA_DIR: Optional[str] = None
    FORMULASNAP_LANG: Optional[str] = None
    HTTP_TIMEOUT: Optional[float] = None
    SIMPLETEX_API_BASE: Optional[str] = None
    SILICONFLOW_API_BASE: Optional[str] = None
    SILICONFLOW_PRICING_URL: Optional[str] = None
    HOST: Optional[str] = None
    PORT: Optional[int] = None
    LOG_LEVEL: Optional[str] = None

    def get(self, name: str) -> Optional[str]:
        """Return the attribute value if set, otherwise fall back to env, then defaults."""
        value = getattr(self, name, None)
        if value is not None:
            return value if isinstance(value, str) else str(value)
        return os.getenv(name) or DEFAULTS.get(name)

    def data_dir(self) -> Path:
        raw = self.get("FORMULASNAP_DATA_DIR")
        path = Path(raw).expanduser() if raw else Path.home() / ".formulasnap"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def language(self) -> str:
        return self.get("FORMULASNAP_LANG") or "zh"

    def http_timeout(self) -> float:
        return float(self.get("HTTP_TIMEOUT") or 120.0)

    def endpoint(self, name: str) -> str:
        return (self.get(name) or "").rstrip("/")


settings = Settings()
