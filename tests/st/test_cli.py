"""CLI 端到端测试（click CliRunner）"""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from vcslocator.cli import main
from vcslocator.utils.logger import reset_logging


@pytest.fixture()
def runner(monkeypatch):
    monkeypatch.setenv("VCSLOCATOR_LOG_LEVEL", "ERROR")
    yield CliRunner()
    reset_logging()


class TestParseCommand:
    def test_json(self, runner) -> None:
        result = runner.invoke(main, ["parse", "--json", "owner/repo@v1#a/b.txt"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["hostname"] == "github.com"
        assert data["tag"] == "v1" and data["sub_path"] == "a/b.txt"

    def test_ref_as_branch(self, runner) -> None:
        result = runner.invoke(main, ["--ref-as-branch", "parse", "--json", "owner/repo@dev"])
        assert json.loads(result.output)["branch"] == "dev"

    def test_text_output_has_repo_url(self, runner) -> None:
        result = runner.invoke(main, ["parse", "ssh://host/group/proj"])
        assert result.exit_code == 0
        assert "git@host:group/proj" in result.output

    def test_error(self, runner) -> None:
        result = runner.invoke(main, ["parse", "ftp://host/x"])
        assert result.exit_code != 0
        assert "UNSUPPORTED_TRANSPORT" in result.output


class TestConfigCommand:
    def test_masks_password(self, runner, tmp_path) -> None:
        cfg = tmp_path / "c.yml"
        cfg.write_text("max_workers: 2\nhttp_username: bob\nhttp_password: pw\n", encoding="utf-8")
        result = runner.invoke(main, ["--config", str(cfg), "--workers", "3", "config"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["max_workers"] == 3
        assert data["http_username"] == "bob" and data["http_password"] == "***"

    def test_invalid_workers(self, runner) -> None:
        result = runner.invoke(main, ["--workers", "0", "config"])
        assert result.exit_code != 0
        assert "CONFIG_ERROR" in result.output


@pytest.mark.git
class TestFetchCommands:
    def test_get_stdout(self, runner, git_repo) -> None:
        result = runner.invoke(main, ["--no-credentials", "get", f"{git_repo.locator_base}@v1.0#README.md"])
        assert result.exit_code == 0, result.output
        assert "version one" in result.output

    def test_get_to_file(self, runner, git_repo, tmp_path) -> None:
        out = tmp_path / "out.md"
        result = runner.invoke(main, ["get", f"{git_repo.locator_base}#docs/guide.md", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text(encoding="utf-8") == "# guide\n"

    def test_get_without_subpath(self, runner, git_repo) -> None:
        result = runner.invoke(main, ["get", git_repo.locator_base])
        assert result.exit_code != 0
        assert "NO_SUBPATH" in result.output

    def test_download(self, runner, git_repo, tmp_path) -> None:
        result = runner.invoke(main, ["download", f"{git_repo.locator_base}#src", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "src" / "app.py").exists()

    def test_group(self, runner, git_repo, tmp_path) -> None:
        base = git_repo.locator_base
        result = runner.invoke(main, [
            "group", f"{base}#README.md", f"{base}@v1.0#README.md", "-d", str(tmp_path),
        ])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "0-README.md").read_text(encoding="utf-8") == "version two\n"
        assert (tmp_path / "1-README.md").read_text(encoding="utf-8") == "version one\n"

    def test_group_partial_failure(self, runner, git_repo, tmp_path) -> None:
        base = git_repo.locator_base
        result = runner.invoke(main, ["group", f"{base}#README.md", f"{base}#nope", "-d", str(tmp_path)])
        assert result.exit_code != 0
        assert (tmp_path / "0-README.md").exists()
        assert not (tmp_path / "1-nope").exists()
        assert "1/2" in result.output
