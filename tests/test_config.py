# File: tests/test_config.py

from expense_tracker.core.config import Settings


def test_cors_origins_from_comma_separated_string():
    s = Settings(backend_cors_origins="http://a.local:3000, http://b.local ,")
    assert s.backend_cors_origins == ["http://a.local:3000", "http://b.local"]


def test_defaults():
    s = Settings()
    assert s.api_v1_prefix == "/api/v1"
    assert s.algorithm == "HS256"
    assert s.access_token_expire_minutes == 60 * 24
    assert s.default_page_size == 5
    assert s.max_page_size == 100


def test_log_level_is_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"
