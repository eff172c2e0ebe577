"""Tests for chatkit_starter.config.settings."""

import pytest


@pytest.mark.usefixtures("clean_env")
class TestSettings:
    """Test the Settings pydantic-settings class."""

    def _make(self, **kwargs):
        """Create a Settings instance without reading a .env file."""
        from chatkit_starter.config.settings import Settings
        return Settings(_env_file=None, **kwargs)

    # -- defaults --

    def test_defaults(self):
        s = self._make()
        assert s.ENVIRONMENT == "development"
        assert s.OPENAI_API_KEY == ""
        assert s.CHATKIT_WORKFLOW_ID == ""
        assert s.CHATKIT_API_BASE == "https://api.openai.com"
        assert s.CHATKIT_SCRIPT_URL.startswith("https://cdn.platform.openai.com/")
        assert s.LOG_LEVEL == "INFO"
        assert "http://localhost:3000" in s.CORS_ORIGINS

    # -- environment --

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("CHATKIT_WORKFLOW_ID", "wf_env")
        s = self._make()
        assert s.OPENAI_API_KEY == "sk-env"
        assert s.CHATKIT_WORKFLOW_ID == "wf_env"

    def test_next_public_alias_for_workflow_id(self, monkeypatch):
        monkeypatch.setenv("NEXT_PUBLIC_CHATKIT_WORKFLOW_ID", "wf_public")
        s = self._make()
        assert s.CHATKIT_WORKFLOW_ID == "wf_public"

    def test_workflow_id_is_stripped(self):
        s = self._make(CHATKIT_WORKFLOW_ID="  wf_abc  ")
        assert s.CHATKIT_WORKFLOW_ID == "wf_abc"

    # -- _strip_trailing_slash validator --

    def test_api_base_trailing_slash_removed(self):
        s = self._make(CHATKIT_API_BASE="https://proxy.example.com/")
        assert s.CHATKIT_API_BASE == "https://proxy.example.com"

    def test_empty_api_base_falls_back_to_default(self):
        s = self._make(CHATKIT_API_BASE="")
        assert s.CHATKIT_API_BASE == "https://api.openai.com"

    # -- cookies --

    def test_secure_cookies_only_in_production(self):
        assert self._make(ENVIRONMENT="production").secure_cookies is True
        assert self._make(ENVIRONMENT="development").secure_cookies is False

    # -- invalid values --

    def test_invalid_environment_rejected(self):
        from pydantic import ValidationError
        with pytest.raises(ValidationError):
            self._make(ENVIRONMENT="staging")

    def test_invalid_log_level_rejected(self):
        from pydantic import ValidationError
        with pytest.raises(ValidationError):
            self._make(LOG_LEVEL="LOUD")
