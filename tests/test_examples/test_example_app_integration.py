"""Integration tests that exercise the example Django app entrypoint."""

import os
import subprocess
import sys
from pathlib import Path

EXAMPLES_DIR = Path(__file__).resolve().parents[2] / "examples"
REPO_ROOT = EXAMPLES_DIR.parent


def _run_example_manage(*args: str) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["DJANGO_SETTINGS_MODULE"] = "settings"
    env["PYTHONPATH"] = os.pathsep.join([str(REPO_ROOT / "src"), str(REPO_ROOT)])
    return subprocess.run(
        [sys.executable, "manage.py", *args],
        cwd=EXAMPLES_DIR,
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )


def test_example_app_django_check_passes() -> None:
    result = _run_example_manage("check")
    assert result.returncode == 0, result.stderr


def test_example_conference_config_validates_in_dry_run() -> None:
    result = _run_example_manage("bootstrap_conference", "--config", "conference.example.toml", "--dry-run")
    assert result.returncode == 0, result.stderr
    assert "[DRY RUN]" in result.stdout
    assert "Sections (5):" in result.stdout


def test_example_app_has_no_missing_migrations() -> None:
    result = _run_example_manage("makemigrations", "--check", "--dry-run")
    assert result.returncode == 0, result.stdout + result.stderr
