"""Tests for YAML configuration loading and application settings."""

import pytest
import yaml

from schooladmin.common.config import load_access_level_documents, load_config
from schooladmin.core.config import Settings


def _write(tmp_path, content, name="config.yaml"):
    path = tmp_path / name
    path.write_text(content)
    return str(path)


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_mapping(self, tmp_path, sample_config):
        path = _write(tmp_path, yaml.safe_dump(sample_config))
        assert load_config(path) == sample_config

    def test_empty_file(self, tmp_path):
        assert load_config(_write(tmp_path, "")) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_non_mapping_root(self, tmp_path):
        with pytest.raises(TypeError):
            load_config(_write(tmp_path, "- a\n- b\n"))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(yaml.YAMLError):
            load_config(_write(tmp_path, "access_levels: [unclosed\n"))

    def test_env_var_expansion(self, tmp_path, monkeypatch):
        """Test ${VAR} references in string values are expanded."""
        monkeypatch.setenv("SCHOOL_NAME", "Hillside")
        path = _write(tmp_path, "access_levels:\n  - name: ${SCHOOL_NAME} Bursar\n    count: 3\n")

        config = load_config(path)
        assert config["access_levels"][0]["name"] == "Hillside Bursar"
        assert config["access_levels"][0]["count"] == 3


class TestLoadAccessLevelDocuments:
    """Tests for reading access level seed files."""

    def test_documents(self, tmp_path, sample_config):
        docs = load_access_level_documents(_write(tmp_path, yaml.safe_dump(sample_config)))
        assert [doc.get("name") for doc in docs] == ["Read Only Fees", "Attendance Clerk"]

    def test_missing_key(self, tmp_path):
        assert load_access_level_documents(_write(tmp_path, "other: 1\n")) == []

    def test_null_key(self, tmp_path):
        assert load_access_level_documents(_write(tmp_path, "access_levels:\n")) == []

    def test_non_mapping_entries_dropped(self, tmp_path):
        path = _write(tmp_path, "access_levels:\n  - teacher\n  - name: Bursar\n")
        assert load_access_level_documents(path) == [{"name": "Bursar"}]

    def test_not_a_list(self, tmp_path):
        with pytest.raises(TypeError):
            load_access_level_documents(_write(tmp_path, "access_levels:\n  name: Bursar\n"))


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SCHOOLADMIN_DENIED_ROLES", raising=False)
        settings = Settings(_env_file=None)
        assert settings.denied_roles_list == ["Parent"]
        assert settings.access_levels_file is None
        assert settings.seed_predefined_levels is False

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SCHOOLADMIN_DENIED_ROLES", "Parent, Staff ,")
        monkeypatch.setenv("SCHOOLADMIN_SEED_PREDEFINED_LEVELS", "true")
        settings = Settings(_env_file=None)
        assert settings.denied_roles_list == ["Parent", "Staff"]
        assert settings.seed_predefined_levels is True

    def test_no_denied_roles(self):
        assert Settings(_env_file=None, denied_roles="").denied_roles_list == []
