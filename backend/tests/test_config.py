"""
TerpTaster Backend - Settings Tests
===================================

What:  Cross-field consistency checks run at startup.
"""

import pytest

from terptaster.config import Settings


class TestValidateConsistency:

    def test_defaults_are_consistent(self):
        Settings().validate_consistency()

    def test_all_problems_reported_together(self, tmp_path):
        settings = Settings(
            search_default_limit=300,
            search_max_limit=200,
            db_connect_retry_min_wait=20,
            db_connect_retry_max_wait=5,
            terpene_data_path=str(tmp_path / "missing.json"),
        )
        with pytest.raises(ValueError) as exc_info:
            settings.validate_consistency()

        message = str(exc_info.value)
        assert "SEARCH_DEFAULT_LIMIT" in message
        assert "DB_CONNECT_RETRY_MIN_WAIT" in message
        assert "TERPENE_DATA_PATH" in message

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValueError):
            Settings(log_level="CHATTY")
