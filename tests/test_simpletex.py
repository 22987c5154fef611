from unittest.mock import patch

import httpx
import pytest

from formulasnap.errors import (
    AuthError,
    NetworkError,
    ProviderError,
    QuotaExhausted,
    ValidationError,
)
from formulasnap.providers import simpletex
from tests.conftest import SAMPLE_DATA_URL, SAMPLE_PNG_B64, mock_post, mock_response

CLIENT = "formulasnap.providers.base.httpx.AsyncClient"


# --- error_type ---

class TestErrorType:
    @pytest.mark.parametrize("payload", [
        {"res": {"errType": "req_unauthorized"}},
        {"err_info": {"err_type": "req_unauthorized"}},
        {"errType": "req_unauthorized"},
    ])
    def test_unauthorized_found_at_every_path(self, payload):
        assert simpletex.error_type(payload) == simpletex.UNAUTHORIZED
        assert isinstance(simpletex.error_for_code(simpletex.error_type(payload)), AuthError)

    def test_first_path_wins(self):
        payload = {"res": {"errType": "resource_no_valid"}, "errType": "req_unauthorized"}
        assert simpletex.error_type(payload) == simpletex.NO_VALID_RESOURCE

    def test_absent(self):
        assert simpletex.error_type({"status": True}) is None
        assert simpletex.error_type(None) is None

    def test_error_for_code(self):
        assert isinstance(simpletex.error_for_code("resource_no_valid"), QuotaExhausted)
        err = simpletex.error_for_code("server_busy")
        assert isinstance(err, ProviderError)
        assert "server_busy" in str(err)


# --- extract_text ---

class TestExtractText:
    def test_info_string(self):
        assert simpletex.extract_text({"info": "plain text"}) == "plain text"

    def test_info_markdown(self):
        assert simpletex.extract_text({"info": {"markdown": "# Title", "text": "Title"}}) == "# Title"

    def test_info_text(self):
        assert simpletex.extract_text({"info": {"text": "Title"}}) == "Title"

    def test_info_object_serialized(self):
        assert simpletex.extract_text({"info": {"blocks": [1]}}) == '{"blocks": [1]}'

    def test_top_level_latex(self):
        assert simpletex.extract_text({"latex": "x^2", "conf": 0.9}) == "x^2"

    def test_nothing(self):
        assert simpletex.extract_text({}) == ""
        assert simpletex.extract_text(None) == ""


# --- decode_image ---

class TestDecodeImage:
    def test_data_url(self):
        assert simpletex.decode_image(SAMPLE_DATA_URL).startswith(b"\x89PNG")

    def test_empty(self):
        with pytest.raises(ValidationError):
            simpletex.decode_image("data:image/png;base64,")

    def test_invalid_base64(self):
        with pytest.raises(ValidationError):
            simpletex.decode_image("not base64!!")


# --- recognize ---

class TestRecognize:
    @pytest.mark.asyncio
    async def test_success(self):
        client = mock_post(mock_response(200, {"status": True, "res": {"latex": "x^2", "conf": 0.98}}))
        with patch(CLIENT, return_value=client):
            text, confidence = await simpletex.recognize("tok", SAMPLE_PNG_B64, "latex_ocr")
        assert text == "x^2"
        assert confidence == pytest.approx(0.98)
        args, kwargs = client.post.call_args
        assert args[0] == "https://server.simpletex.net/api/latex_ocr"
        assert kwargs["headers"]["token"] == "tok"
        assert kwargs["files"]["file"][0] == "image.png"
        assert kwargs["data"] is None

    @pytest.mark.asyncio
    async def test_rec_mode_sent(self):
        client = mock_post(mock_response(200, {"status": True, "res": {"info": {"markdown": "# A"}}}))
        with patch(CLIENT, return_value=client):
            text, _ = await simpletex.recognize("tok", SAMPLE_PNG_B64, "simpletex_ocr", "document")
        assert text == "# A"
        assert client.post.call_args[1]["data"] == {"rec_mode": "document"}

    @pytest.mark.asyncio
    async def test_unauthorized_in_body(self):
        client = mock_post(mock_response(200, {"status": False, "res": {"errType": "req_unauthorized"}}))
        with patch(CLIENT, return_value=client):
            with pytest.raises(AuthError):
                await simpletex.recognize("bad", SAMPLE_PNG_B64, "latex_ocr")

    @pytest.mark.asyncio
    async def test_quota(self):
        client = mock_post(mock_response(200, {"status": False, "err_info": {"err_type": "resource_no_valid"}}))
        with patch(CLIENT, return_value=client):
            with pytest.raises(QuotaExhausted):
                await simpletex.recognize("tok", SAMPLE_PNG_B64, "latex_ocr")

    @pytest.mark.asyncio
    async def test_other_failure(self):
        client = mock_post(mock_response(200, {"status": False}))
        with patch(CLIENT, return_value=client):
            with pytest.raises(ProviderError):
                await simpletex.recognize("tok", SAMPLE_PNG_B64, "latex_ocr")

    @pytest.mark.asyncio
    async def test_http_401(self):
        client = mock_post(mock_response(401, ValueError))
        with patch(CLIENT, return_value=client):
            with pytest.raises(AuthError):
                await simpletex.recognize("bad", SAMPLE_PNG_B64, "latex_ocr")

    @pytest.mark.asyncio
    async def test_http_500(self):
        client = mock_post(mock_response(500, ValueError))
        with patch(CLIENT, return_value=client):
            with pytest.raises(ProviderError, match="500"):
                await simpletex.recognize("tok", SAMPLE_PNG_B64, "latex_ocr")

    @pytest.mark.asyncio
    async def test_unparseable_body(self):
        client = mock_post(mock_response(200, ValueError))
        with patch(CLIENT, return_value=client):
            with pytest.raises(ProviderError):
                await simpletex.recognize("tok", SAMPLE_PNG_B64, "latex_ocr")

    @pytest.mark.asyncio
    async def test_network_error(self):
        client = mock_post()
        client.post.side_effect = httpx.ConnectTimeout("timed out")
        with patch(CLIENT, return_value=client):
            with pytest.raises(NetworkError, match="timed out"):
                await simpletex.recognize("tok", SAMPLE_PNG_B64, "latex_ocr")

    @pytest.mark.asyncio
    async def test_bad_image_never_hits_network(self):
        client = mock_post()
        with patch(CLIENT, return_value=client):
            with pytest.raises(ValidationError):
                await simpletex.recognize("tok", "", "latex_ocr")
        client.post.assert_not_called()


@pytest.mark.asyncio
async def test_upload_test_image_uses_turbo_model():
    client = mock_post(mock_response(200, {"status": True, "res": {}}))
    with patch(CLIENT, return_value=client):
        response = await simpletex.upload_test_image("tok")
    assert response.status_code == 200
    args, kwargs = client.post.call_args
    assert args[0].endswith("/latex_ocr_turbo")
    assert kwargs["files"]["file"][0] == "test.png"
