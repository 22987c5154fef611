"""Standalone FormulaSnap backend for the desktop shell.

Run with:
    formulasnap
or:
    uvicorn formulasnap.main:app --host 127.0.0.1 --port 8071 --reload
"""

import logging

import uvicorn
from dotenv import load_dotenv

from formulasnap.config import settings
from formulasnap.main import app

__all__ = ["app", "main"]


def main() -> None:
    load_dotenv()
    level = (settings.get("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        app,
        host=settings.get("HOST") or "127.0.0.1",
        port=int(settings.get("PORT") or 8071),
        log_level=level.lower(),
    )


if __name__ == "__main__":
    main()
