"""
Script Runner Tests

Spawns real shell scripts, so POSIX only.
"""

import logging
import sys
from pathlib import Path

import pytest

from docslot.runner import ScriptRunner, default_script_name

from conftest import wait_for


pytestmark = pytest.mark.skipif(sys.platform.startswith("win"), reason="uses sh scripts")


def write_script(root: Path, body: str) -> Path:
    path = root / "run.sh"
    path.write_text(body, encoding="utf-8")
    return path


@pytest.fixture
def runner(tmp_path: Path):
    runner = ScriptRunner(root=tmp_path)
    yield runner
    runner.stop()


class TestScriptRunner:
    """Tests for spawning and relaying."""

    def test_default_script_name(self):
        assert default_script_name() == "run.sh"

    def test_missing_script(self, runner):
        """Test a missing script is reported, not raised."""
        assert not runner.start()
        assert not runner.is_running()

    def test_output_relayed(self, tmp_path, runner, caplog):
        """Test script output is logged line by line with a prefix."""
        caplog.set_level(logging.INFO, logger="docslot.runner")
        write_script(tmp_path, "echo hello\necho oops 1>&2\nexit 3\n")
        assert runner.start()
        assert wait_for(lambda: not runner.is_running())
        assert wait_for(lambda: "Script finished, exit code: 3" in caplog.text)
        assert "[script] hello" in caplog.text
        assert "[script] oops" in caplog.text

    def test_runs_in_root(self, tmp_path, runner):
        write_script(tmp_path, "pwd > where.txt\n")
        assert runner.start()
        assert wait_for(lambda: (tmp_path / "where.txt").exists() and not runner.is_running())
        assert Path((tmp_path / "where.txt").read_text().strip()).resolve() == tmp_path.resolve()

    def test_stop_long_running(self, tmp_path, runner):
        """Test stop terminates a script that would run for a long time."""
        write_script(tmp_path, "exec sleep 30\n")
        assert runner.start()
        assert runner.is_running()
        runner.stop()
        assert not runner.is_running()

    def test_start_twice(self, tmp_path, runner):
        write_script(tmp_path, "exec sleep 30\n")
        assert runner.start()
        process = runner._process
        assert runner.start()
        assert runner._process is process

    def test_restart_spawns_new_process(self, tmp_path, runner):
        write_script(tmp_path, "exec sleep 30\n")
        runner.start()
        first = runner._process
        assert runner.restart()
        assert runner._process is not first
        assert runner.is_running()

    def test_stop_when_idle(self, runner):
        runner.stop()
        assert not runner.is_running()
