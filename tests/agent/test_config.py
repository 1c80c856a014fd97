"""
Tests for ModelConfig, BackupModelConfig and AgentConfig.
"""

from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from toolloop.agent import AgentConfig, BackupModelConfig, ModelConfig
from toolloop.exceptions import ConfigurationError


class TestModelConfig:
    def test_defaults(self):
        config = ModelConfig()

        assert config.model == "google/gemini-2.5-flash"
        assert config.temperature == 0.7
        assert config.max_tokens == 12800
        assert config.max_retries == 3
        assert config.json_mode is False
        assert config.provider_order is None
        assert config.backup_model is None

    def test_is_immutable(self):
        config = ModelConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.model = "openai/gpt-5"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"model": "gpt-4o"},
            {"model": "mistral/large"},
            {"temperature": 2.5},
            {"temperature": -0.1},
            {"max_tokens": 0},
            {"max_retries": 11},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(ConfigurationError):
            ModelConfig(**kwargs)

    def test_openrouter_model_names_keep_their_slashes(self):
        config = ModelConfig(model="openrouter/x-ai/grok-code-fast-1", provider_order=["xai"])
        assert config.provider_order == ["xai"]


class TestBackupModelConfig:
    def test_only_model_is_required(self):
        backup = BackupModelConfig(model="openai/gpt-5-mini")
        assert (backup.temperature, backup.max_tokens, backup.max_retries) == (None, None, None)

    def test_cannot_hold_a_nested_backup(self):
        field_names = {f.name for f in dataclasses.fields(BackupModelConfig)}
        assert "backup_model" not in field_names

    def test_invalid_backup_model_raises(self):
        with pytest.raises(ConfigurationError):
            BackupModelConfig(model="no-provider")


class TestAgentConfig:
    def test_defaults(self):
        config = AgentConfig()

        assert config.system_prompt == "You are a helpful AI assistant"
        assert config.max_iterations == 10
        assert config.retry_base_delay == 1.0
        assert config.retry_max_delay == 32.0
        assert config.image_fetch_timeout == 30.0
        assert config.tools == []
        assert isinstance(config.model, ModelConfig)

    def test_max_iterations_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            AgentConfig(max_iterations=0)

    def test_negative_delays_are_rejected(self):
        with pytest.raises(ConfigurationError):
            AgentConfig(retry_base_delay=-1)
