# frontend/test_config.py
# Unit tests for catalog URL resolution and validation

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from frontend.config import LOCAL_CATALOG_URL, get_catalog_url, validate_catalog_url


CLEAN_ENV = {"CATALOG_API_URL": "", "BACKEND_URL": ""}


class TestValidateCatalogUrl:

    def test_production_requires_https(self):
        with pytest.raises(ValueError):
            validate_catalog_url("http://catalog.example.test", "production")

    def test_staging_rejects_localhost(self):
        with pytest.raises(ValueError):
            validate_catalog_url("https://localhost:8000", "staging")

    def test_empty_is_rejected(self):
        with pytest.raises(ValueError):
            validate_catalog_url("", "local")

    def test_local_allows_http(self):
        validate_catalog_url("http://127.0.0.1:8000", "local")


class TestGetCatalogUrl:

    def test_catalog_var_wins_and_is_trimmed(self):
        env = {"CATALOG_API_URL": " https://catalog.example.test/ ", "BACKEND_URL": "https://other.example.test"}
        with patch.dict("os.environ", env):
            assert get_catalog_url("production") == "https://catalog.example.test"

    def test_falls_back_to_backend_url(self):
        with patch.dict("os.environ", {**CLEAN_ENV, "BACKEND_URL": "https://api.example.test"}):
            assert get_catalog_url("staging") == "https://api.example.test"

    def test_local_default(self):
        with patch.dict("os.environ", CLEAN_ENV):
            assert get_catalog_url("local") == LOCAL_CATALOG_URL

    def test_unconfigured_production_raises(self):
        with patch.dict("os.environ", CLEAN_ENV):
            with pytest.raises(RuntimeError):
                get_catalog_url("production")

    def test_invalid_configured_url_raises(self):
        with patch.dict("os.environ", {**CLEAN_ENV, "CATALOG_API_URL": "http://catalog.example.test"}):
            with pytest.raises(ValueError):
                get_catalog_url("production")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
