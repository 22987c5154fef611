import base64
from unittest.mock import AsyncMock, MagicMock

import pytest

from formulasnap import i18n, store, usage
from formulasnap.config import settings

SAMPLE_PNG_B64 = base64.b64encode(b"\x89PNG\r\n\x1a\nfakedata").decode()
SAMPLE_DATA_URL = f"data:image/png;base64,{SAMPLE_PNG_B64}"


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path):
    """English strings and a throwaway data dir for every test."""
    settings.FORMULASNAP_LANG = "en"
    settings.FORMULASNAP_DATA_DIR = str(tmp_path)
    store._store = None
    usage._tracker = None
    i18n._translators.clear()
    yield
    settings.FORMULASNAP_LANG = None
    settings.FORMULASNAP_DATA_DIR = None
    store._store = None
    usage._tracker = None
    i18n._translators.clear()


def mock_response(status_code: int = 200, json_data=None, text: str = "") -> MagicMock:
    """Create a mock httpx.Response; ``json_data=ValueError`` makes ``.json()`` fail."""
    resp = MagicMock()
    resp.status_code = status_code
    if json_data is ValueError:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = {} if json_data is None else json_data
    resp.text = text
    return resp


def _mock_client(method: str, *responses: MagicMock) -> AsyncMock:
    client = AsyncMock()
    getattr(client, method).side_effect = list(responses)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


def mock_post(*responses: MagicMock) -> AsyncMock:
    """An httpx.AsyncClient stand-in whose ``post`` returns ``responses`` in order."""
    return _mock_client("post", *responses)


def mock_get(*responses: MagicMock) -> AsyncMock:
    """An httpx.AsyncClient stand-in whose ``get`` returns ``responses`` in order."""
    return _mock_client("get", *responses)


def chat_response(content: str) -> dict:
    return {"choices": [{"message": {"content": content}}]}
