from __future__ import annotations

import json
from pathlib import Path

import pytest

import okuma.cli.transform_text as transform_text_cli
from okuma.segmentation.openrouter import Completion
from okuma.storage.token_usage import TokenUsageRepository


class _StubGenerator:
    def __init__(self, settings, **kwargs) -> None:
        self.settings = settings
        self.calls = 0

    def complete(self, *, system: str, user: str, json_mode: bool = False) -> Completion:
        self.calls += 1
        return Completion(text=f"  Başlık: {user[:5]}  ", model=self.settings.model, total_tokens=30)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(transform_text_cli, "load_dotenv", lambda: None)
    monkeypatch.setattr(transform_text_cli, "OpenRouterGenerator", _StubGenerator)
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-v1-test")


def test_transform_cli_prints_trimmed_text_and_records_usage(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    db_path = tmp_path / "okuma.db"

    exit_code = transform_text_cli.main(
        ["--db-path", str(db_path), "--user-id", "user-1", "--prompt", "Okuma alışkanlığı için başlık yaz"]
    )
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["transformed_text"] == "Başlık: Okuma"
    assert payload["tokens_used"] == 30
    with TokenUsageRepository(db_path) as quota:
        assert quota.get_usage("user-1").used == 30


def test_transform_cli_rejects_empty_prompt(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = transform_text_cli.main(["--db-path", str(tmp_path / "okuma.db"), "--user-id", "user-1"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["kind"] == "invalid_input"
    assert "prompt cannot be empty" in payload["error"]


def test_transform_cli_reports_exhausted_quota(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_path = tmp_path / "okuma.db"
    with TokenUsageRepository(db_path, daily_limit=10) as quota:
        quota.record_usage("user-1", 10)

    exit_code = transform_text_cli.main(
        ["--db-path", str(db_path), "--user-id", "user-1", "--prompt", "Başlık yaz", "--daily-limit", "10"]
    )
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["kind"] == "quota_exceeded"
