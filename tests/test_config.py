"""
Unit tests for configuration loading and classifier selection.
"""

import pytest

from src.adapters.factory import build_classifier
from src.adapters.keyword_adapter import KeywordRuleAdapter
from src.adapters.remote_adapter import RemoteClassifierAdapter
from src.core.config import (
    get_categories,
    get_classifier_settings,
    get_server_settings,
    get_ui_settings,
    load_config,
)


SAMPLE_YAML = """
triage:
  categories: [Access, Hardware, REVIEW]
classifier:
  strategy: remote
  remote:
    timeout_seconds: 5
ui:
  api_url: http://proxy:9000/
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(SAMPLE_YAML, encoding="utf-8")
    return path


class TestLoadConfig:

    def test_loads_yaml(self, config_file):
        config = load_config(str(config_file))

        assert config["classifier"]["strategy"] == "remote"
        assert get_categories(config) == ["Access", "Hardware", "REVIEW"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml_exits(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("triage: [unclosed", encoding="utf-8")

        with pytest.raises(SystemExit):
            load_config(str(path))

    def test_repository_config_is_valid(self):
        config = load_config("config.yaml")

        assert "REVIEW" in get_categories(config)
        assert get_classifier_settings(config)["timeout_seconds"] == 12


class TestSettingsHelpers:

    def test_classifier_defaults(self):
        assert get_classifier_settings({}) == {"strategy": "remote", "timeout_seconds": 12.0}

    def test_unknown_strategy_exits(self):
        with pytest.raises(SystemExit):
            get_classifier_settings({"classifier": {"strategy": "magic"}})

    def test_missing_categories_exits(self):
        with pytest.raises(SystemExit):
            get_categories({})

    def test_ui_settings(self, config_file):
        settings = get_ui_settings(load_config(str(config_file)))

        assert settings["api_url"] == "http://proxy:9000"
        assert settings["default_threshold"] == 0.6

    def test_server_defaults(self):
        assert get_server_settings({}) == {"host": "0.0.0.0", "port": 8000}


class TestBuildClassifier:

    def test_local_strategy(self):
        classifier = build_classifier({"classifier": {"strategy": "local"}})

        assert isinstance(classifier, KeywordRuleAdapter)

    def test_remote_strategy_reads_env(self, monkeypatch, config_file):
        monkeypatch.setenv("ML_API_URL", "http://model:8000")

        classifier = build_classifier(load_config(str(config_file)))

        assert isinstance(classifier, RemoteClassifierAdapter)
        assert classifier.predict_url == "http://model:8000/predict"
        assert classifier.timeout_seconds == 5.0

    def test_remote_strategy_without_env_does_not_fall_back(self, monkeypatch, config_file):
        monkeypatch.delenv("ML_API_URL", raising=False)

        classifier = build_classifier(load_config(str(config_file)))

        assert isinstance(classifier, RemoteClassifierAdapter)
        assert classifier.base_url is None
