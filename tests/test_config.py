from unittest.mock import patch

from formulasnap.config import Settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        with patch.dict("os.environ", {}, clear=True):
            assert s.language() == "zh"
            assert s.http_timeout() == 120.0
            assert s.endpoint("SIMPLETEX_API_BASE") == "https://server.simpletex.net/api"

    def test_env_overrides_default(self):
        with patch.dict("os.environ", {"SILICONFLOW_API_BASE": "http://localhost:9000/v1/"}):
            assert Settings().endpoint("SILICONFLOW_API_BASE") == "http://localhost:9000/v1"

    def test_attribute_overrides_env(self):
        s = Settings()
        s.HTTP_TIMEOUT = 5.0
        with patch.dict("os.environ", {"HTTP_TIMEOUT": "30"}):
            assert s.http_timeout() == 5.0

    def test_data_dir_created(self, tmp_path):
        s = Settings()
        s.FORMULASNAP_DATA_DIR = str(tmp_path / "nested" / "data")
        assert s.data_dir().is_dir()
