from unittest.mock import patch

import httpx
import pytest

from formulasnap import pricing
from tests.conftest import mock_get, mock_response


def _row(model_id: str, input_price: str, output_price: str) -> str:
    return (
        f'<div><a href="/models?target={model_id}" class="link">{model_id}</a></div>'
        f'<div class="cell">{input_price}</div><div class="cell">{output_price}</div>'
    )


PAGE = "<html><body>" + "".join([
    _row("Qwen/Qwen2-VL-72B-Instruct", "4.13", "4.13"),
    _row("THUDM/GLM-4.1V-9B-Thinking", "免费", "免费"),
    _row("deepseek-ai/DeepSeek-OCR", "0.5", "免费"),
]) + "</body></html>"


class TestParsePricingHtml:
    def test_rows(self):
        prices = pricing.parse_pricing_html(PAGE)
        assert prices == {
            "Qwen/Qwen2-VL-72B-Instruct": (4.13, 4.13),
            "THUDM/GLM-4.1V-9B-Thinking": (0.0, 0.0),
            "deepseek-ai/DeepSeek-OCR": (0.5, 0.0),
        }

    def test_unrelated_html(self):
        assert pricing.parse_pricing_html("<p>maintenance</p>") == {}


class TestFetchPricingMap:
    @pytest.mark.asyncio
    async def test_success(self):
        client = mock_get(mock_response(200, text=PAGE))
        with patch("formulasnap.pricing.httpx.AsyncClient", return_value=client):
            prices = await pricing.fetch_pricing_map()
        assert prices["THUDM/GLM-4.1V-9B-Thinking"] == (0.0, 0.0)
        assert client.get.call_args[0][0] == "https://siliconflow.cn/pricing"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = mock_get(mock_response(503, text=PAGE))
        with patch("formulasnap.pricing.httpx.AsyncClient", return_value=client):
            assert await pricing.fetch_pricing_map() == {}

    @pytest.mark.asyncio
    async def test_network_failure(self):
        client = mock_get()
        client.get.side_effect = httpx.ConnectError("offline")
        with patch("formulasnap.pricing.httpx.AsyncClient", return_value=client):
            assert await pricing.fetch_pricing_map() == {}
