import json
import logging
import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import main


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RELEASE_NOTES_LOG_LEVEL", raising=False)
    monkeypatch.delenv("RELEASE_NOTES_INCLUDE_DRAFTS", raising=False)
    yield
    # main.setup_logging binds handlers to this test's captured streams and files.
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root_logger.removeHandler(handler)
            handler.close()


def _write_releases(path: Path) -> None:
    releases = [
        {
            "tag_name": "v1.0.0",
            "published_at": "2024-01-10T08:00:00Z",
            "body": "### TapLogin\r\n#### Bug\r\n- Token refresh\r\n",
            "draft": False,
        },
        {
            "tag_name": "v1.1.0",
            "published_at": "2024-02-10T08:00:00Z",
            "body": "## TapFriend SDK\n#### Features\n- Share links\n",
            "draft": False,
        },
        {
            "tag_name": "v1.2.0",
            "published_at": "2024-03-10T08:00:00Z",
            "body": "- unreleased\n",
            "draft": True,
        },
    ]
    path.write_text(json.dumps(releases), encoding="utf-8")


def test_render_command_prints_canonical_body(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    notes = tmp_path / "notes.md"
    notes.write_text("Stability release.\n\n#### Fixed\n- Crash on resume\n", encoding="utf-8")
    assert main.main(["render", str(notes)]) == 0
    out = capsys.readouterr().out
    assert out == "Stability release.\n\n### Bug fixes\n- Crash on resume\n\n\n"


def test_changelog_command_orders_releases_and_prints_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    releases = tmp_path / "releases.json"
    _write_releases(releases)
    assert main.main(["changelog", str(releases)]) == 0
    out = capsys.readouterr().out
    assert out.index("## 1.1.0") < out.index("## 1.0.0")
    assert "1.2.0" not in out
    assert "- **Friend:** Share links" in out
    assert "- **Login:** Token refresh" in out
    assert "Summary:\nTypes ['feat', 'bugfix']\nModules ['Friend', 'Login']" in out


def test_changelog_command_can_include_drafts_and_skip_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    releases = tmp_path / "releases.json"
    _write_releases(releases)
    assert main.main(["--include-drafts", "changelog", str(releases), "--no-summary"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("## 1.2.0\nReleased 2024-03-10\n\n- unreleased\n")
    assert "Summary:" not in out


def test_output_option_writes_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    notes = tmp_path / "notes.md"
    notes.write_text("#### Features\n- Thing\n", encoding="utf-8")
    target = tmp_path / "out" / "CHANGELOG.md"
    assert main.main(["--output", str(target), "render", str(notes)]) == 0
    assert target.read_text(encoding="utf-8") == "### Features\n- Thing\n\n"
    assert capsys.readouterr().out == ""


def test_log_file_receives_diagnostics(tmp_path: Path) -> None:
    notes = tmp_path / "notes.md"
    notes.write_text("# Title\n\n```\ncode\n```\n", encoding="utf-8")
    log_file = tmp_path / "logs" / "run.log"
    assert main.main(["--log-file", str(log_file), "render", str(notes)]) == 0
    log_text = log_file.read_text(encoding="utf-8")
    assert "Ignoring unexpected heading depth 1" in log_text
    assert "Ignoring unexpected block kind code" in log_text


def test_missing_input_returns_error_code(tmp_path: Path) -> None:
    assert main.main(["render", str(tmp_path / "missing.md")]) == 2
    assert main.main(["changelog", str(tmp_path / "missing.json")]) == 2


def test_bad_config_returns_error_code(tmp_path: Path) -> None:
    notes = tmp_path / "notes.md"
    notes.write_text("- a\n", encoding="utf-8")
    config = tmp_path / "cfg.yaml"
    config.write_text("unknown_key: 1\n", encoding="utf-8")
    assert main.main(["--config", str(config), "render", str(notes)]) == 2


def test_non_string_release_body_returns_error_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    releases = tmp_path / "releases.json"
    releases.write_text(
        json.dumps([{"tag_name": "v1.0.0", "published_at": "2024-01-01T00:00:00Z", "body": ["- a"]}]),
        encoding="utf-8",
    )
    assert main.main(["changelog", str(releases)]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "release #0 body must be a string" in captured.err
