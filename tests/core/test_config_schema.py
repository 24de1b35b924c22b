"""Tests for daybook.core.config_schema and Config.validated()."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from daybook.core.config import Config, reset_config
from daybook.core.config_schema import DaybookConfig


@pytest.fixture(autouse=True)
def _reset_singleton():
    reset_config()
    yield
    reset_config()


@pytest.mark.smoke
class TestConfigSchema:
    def test_valid_config_roundtrip(self):
        data = {
            "paths": {"data_dir": "/tmp/daybook", "entries_dir": "/tmp/daybook/entries"},
            "backend": "supabase",
            "supabase": {"url": "https://x.supabase.co/", "api_key": "anon", "timeout": "5"},
            "journal": {"insert_policy": "sorted", "timezone": "America/Toronto"},
            "logging": {"level": "info"},
        }
        cfg = DaybookConfig.model_validate(data)
        assert cfg.paths.data_dir == Path("/tmp/daybook")
        assert cfg.supabase.url == "https://x.supabase.co"
        assert cfg.supabase.timeout == 5
        assert cfg.journal.insert_policy == "sorted"
        assert cfg.logging.level == "INFO"

    def test_defaults_populate(self):
        cfg = DaybookConfig()
        assert cfg.backend == "local"
        assert cfg.journal.insert_policy == "prepend"
        assert cfg.supabase.table == "journal_entries"
        assert cfg.local.session_file is None
        assert set(type(cfg.paths).model_fields) == {"data_dir", "entries_dir"}

    def test_path_expansion(self):
        cfg = DaybookConfig.model_validate({"paths": {"data_dir": "~/.daybook"}, "local": {"session_file": "~/s.json"}})
        assert "~" not in str(cfg.paths.data_dir)
        assert "~" not in str(cfg.local.session_file)

    def test_unknown_insert_policy(self):
        with pytest.raises(ValidationError):
            DaybookConfig.model_validate({"journal": {"insert_policy": "random"}})

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError, match="unknown timezone"):
            DaybookConfig.model_validate({"journal": {"timezone": "Mars/Olympus"}})

    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            DaybookConfig.model_validate({"backend": "sqlite"})

    def test_supabase_needs_credentials(self):
        with pytest.raises(ValidationError, match="requires supabase.url"):
            DaybookConfig.model_validate({"backend": "supabase"})

    def test_extra_sections_allowed(self):
        cfg = DaybookConfig.model_validate({"custom": {"anything": 1}})
        assert cfg.model_extra["custom"] == {"anything": 1}

    def test_config_validated_from_env(self, monkeypatch, tmp_dir):
        monkeypatch.setenv("DAYBOOK_JOURNAL__INSERT_POLICY", "bogus")
        with pytest.raises(ValidationError):
            Config(data_dir=tmp_dir).validated()
