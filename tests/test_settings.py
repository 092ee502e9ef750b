"""
Tests for configuration loading.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from pocketledger.config import (
    GoogleSheetsSettings,
    LedgerSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "LEDGER_INITIAL_BALANCE",
        "LEDGER_STORAGE_BACKEND",
        "LEDGER_LOG_LEVEL",
        "GOOGLE_SHEETS_CREDENTIALS_PATH",
        "GOOGLE_SHEETS_SPREADSHEET_ID",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestLedgerSettings:
    """Tests for ledger settings."""

    def test_defaults(self):
        """Test the default ledger configuration."""
        settings = LedgerSettings(_env_file=None)
        assert settings.initial_balance == Decimal("0")
        assert settings.default_user_id == "DEFAULT_USER"
        assert settings.storage_backend == "memory"
        assert settings.log_level == "INFO"

    def test_reads_environment(self, monkeypatch):
        """Test that LEDGER_ variables are picked up and normalized."""
        monkeypatch.setenv("LEDGER_INITIAL_BALANCE", "250.75")
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", " Google_Sheets ")
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "debug")

        settings = LedgerSettings(_env_file=None)

        assert settings.initial_balance == Decimal("250.75")
        assert settings.storage_backend == "google_sheets"
        assert settings.log_level == "DEBUG"

    def test_rejects_unknown_backend(self):
        """Test storage backend validation."""
        with pytest.raises(ValidationError, match="Unsupported storage backend"):
            LedgerSettings(_env_file=None, storage_backend="postgres")

    def test_rejects_negative_initial_balance(self):
        """Test that the opening balance can't be negative."""
        with pytest.raises(ValidationError):
            LedgerSettings(_env_file=None, initial_balance=Decimal("-1"))


class TestGoogleSheetsSettings:
    """Tests for Google Sheets settings."""

    def test_requires_credentials_and_spreadsheet(self):
        """Test that the Sheets section needs both required values."""
        with pytest.raises(ValidationError):
            GoogleSheetsSettings()

    def test_missing_credentials_file_only_warns(self, monkeypatch, tmp_path):
        """Test that a missing credentials file is a warning."""
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(tmp_path / "missing.json"))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "sheet-123")

        with pytest.warns(UserWarning, match="credentials file not found"):
            settings = GoogleSheetsSettings()

        assert settings.spreadsheet_id == "sheet-123"
        assert settings.transactions_sheet_name == "Transactions"


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_reports_each_section(self):
        """Test that a missing Sheets config is reported, not raised."""
        results = validate_all_settings()
        assert results["ledger"] is True
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
