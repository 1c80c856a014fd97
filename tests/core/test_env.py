"""
Tests for env.py (.env loading and credential lookup).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from toolloop.env import (
    credentials_from_env,
    generic_openai_base_url,
    load_env_if_present,
    normalize_credentials,
)
from toolloop.models import ProviderKind

CREDENTIAL_VARS = [
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "ANTHROPIC_API_KEY",
    "OPENROUTER_API_KEY",
    "LLM_PROVIDER",
    "GENERIC_OPEN_AI_BASE_PATH",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> Generator[None, None, None]:
    for key in CREDENTIAL_VARS:
        monkeypatch.delenv(key, raising=False)
    yield
    for key in ["TOOLLOOP_TEST_A", "TOOLLOOP_TEST_B", "TOOLLOOP_EXISTING"]:
        os.environ.pop(key, None)


class TestLoadEnvIfPresent:
    def test_loads_key_values(self, tmp_path: Path) -> None:
        env = tmp_path / ".env"
        env.write_text("# comment\n\nTOOLLOOP_TEST_A=hello\nTOOLLOOP_TEST_B='quoted'\nbroken\n")

        assert load_env_if_present([env]) == env
        assert os.environ["TOOLLOOP_TEST_A"] == "hello"
        assert os.environ["TOOLLOOP_TEST_B"] == "quoted"

    def test_existing_variables_win(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("TOOLLOOP_EXISTING", "from-shell")
        env = tmp_path / ".env"
        env.write_text("TOOLLOOP_EXISTING=from-file\n")

        load_env_if_present([env])
        assert os.environ["TOOLLOOP_EXISTING"] == "from-shell"

    def test_missing_files_are_skipped(self, tmp_path: Path) -> None:
        assert load_env_if_present([tmp_path / "missing.env"]) is None


class TestCredentials:
    def test_reads_provider_variables(self, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
        monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")

        credentials = credentials_from_env(load_dotenv_file=False)

        assert credentials == {
            ProviderKind.OPENAI: "sk-openai",
            ProviderKind.GOOGLE: "g-key",
            ProviderKind.OPENROUTER: "or-key",
        }

    def test_gemini_key_takes_priority(self, monkeypatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "gemini")
        monkeypatch.setenv("GOOGLE_API_KEY", "google")

        assert credentials_from_env(load_dotenv_file=False)[ProviderKind.GOOGLE] == "gemini"

    def test_normalize_accepts_string_keys(self) -> None:
        credentials = normalize_credentials(
            {"OpenAI": "a", ProviderKind.ANTHROPIC: "b", "google": "", "mistral": "c"}
        )
        assert credentials == {ProviderKind.OPENAI: "a", ProviderKind.ANTHROPIC: "b"}

    def test_generic_openai_requires_both_variables(self, monkeypatch) -> None:
        monkeypatch.setenv("GENERIC_OPEN_AI_BASE_PATH", "http://localhost:8000/v1")
        assert generic_openai_base_url() is None

        monkeypatch.setenv("LLM_PROVIDER", "generic-openai")
        assert generic_openai_base_url() == "http://localhost:8000/v1"
