"""
Server Manager Tests

Shell dispatch is exercised with the server, script runner and monitor
replaced by mocks; configuration is real and lives in tmp_path.
"""

import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from docslot.manager import ServerManager, default_document, main


@pytest.fixture
def manager(tmp_path: Path) -> ServerManager:
    mgr = ServerManager(root=tmp_path)
    mgr.server = MagicMock(local_ip="10.0.0.5", port=11000)
    mgr.server.get_port.return_value = 11000
    mgr.server.is_running.return_value = True
    mgr.runner = MagicMock()
    mgr.runner.is_running.return_value = False
    mgr.monitor = MagicMock()
    mgr.monitor.is_monitoring.return_value = False
    mgr.running = True
    return mgr


class TestSetup:
    """Tests for construction."""

    def test_default_document_extracted(self, tmp_path):
        ServerManager(root=tmp_path)
        assert (tmp_path / "index.html").read_bytes() == default_document()
        assert (tmp_path / "server.conf").exists()

    def test_existing_document_kept(self, tmp_path):
        (tmp_path / "index.html").write_bytes(b"mine")
        ServerManager(root=tmp_path)
        assert (tmp_path / "index.html").read_bytes() == b"mine"

    def test_default_document_has_upload_form(self):
        assert b"/upload" in default_document()

    def test_start_starts_components(self, manager, capsys):
        manager.running = False
        manager.start()
        assert manager.running
        manager.server.start.assert_called_once()
        manager.runner.start.assert_called_once()
        manager.monitor.start.assert_called_once()
        assert "Type 'help'" in capsys.readouterr().out

    def test_start_run_disabled(self, manager):
        manager.config.set_start_run_enabled(False)
        manager.start()
        manager.runner.start.assert_not_called()


class TestShell:
    """Tests for command dispatch."""

    def test_unknown_command(self, manager, capsys):
        manager.execute("frobnicate")
        assert "Unknown command: frobnicate" in capsys.readouterr().out

    def test_blank_line_ignored(self, manager, capsys):
        manager.execute("   ")
        assert capsys.readouterr().out == ""

    def test_help(self, manager, capsys):
        manager.execute("help")
        assert "config set <key> <value>" in capsys.readouterr().out

    def test_restart_all(self, manager):
        manager.execute("restart")
        manager.server.restart.assert_called_once()
        manager.runner.restart.assert_called_once()
        manager.monitor.restart.assert_called_once()

    @pytest.mark.parametrize("target,component", [
        ("web", "server"),
        ("run", "runner"),
        ("monitor", "monitor"),
    ])
    def test_restart_single(self, manager, target, component):
        manager.execute(f"restart {target}")
        getattr(manager, component).restart.assert_called_once()

    def test_restart_web_reads_port(self, manager):
        """Test a changed port is applied on restart."""
        manager.config.set_web_port(12345)
        manager.execute("restart web")
        assert manager.server.port == 12345

    def test_restart_unknown_target(self, manager, capsys):
        manager.execute("restart everything")
        assert "Unknown restart target" in capsys.readouterr().out

    def test_config_show(self, manager, capsys):
        manager.execute("config show")
        out = capsys.readouterr().out
        assert "web_port: 11000" in out
        assert "enable_start_run: true" in out
        assert "monitor_web_status: 10.0.0.5:11000" in out

    def test_config_set(self, manager, capsys):
        manager.execute("config set monitor_web_status example.com")
        assert "Set monitor_web_status to: example.com" in capsys.readouterr().out
        assert manager.config.get_monitor_web_status() == "example.com"

    def test_config_set_missing_value(self, manager, capsys):
        manager.execute("config set web_port")
        assert "Invalid format" in capsys.readouterr().out

    def test_config_set_invalid(self, manager, capsys):
        manager.execute("config set web_port 0")
        assert "Invalid value for web_port" in capsys.readouterr().out
        assert manager.config.get_web_port() == 11000

    def test_monitor_status(self, manager, capsys):
        manager.execute("monitor status")
        assert "Web status monitor: stopped" in capsys.readouterr().out

    @pytest.mark.parametrize("action", ["start", "stop", "restart"])
    def test_monitor_actions(self, manager, action):
        manager.execute(f"monitor {action}")
        getattr(manager.monitor, action).assert_called_once()

    def test_status(self, manager, capsys):
        manager.execute("status")
        out = capsys.readouterr().out
        assert "Web server: running (port 11000)" in out
        assert "Script: stopped" in out

    def test_info(self, manager, capsys):
        manager.execute("info")
        out = capsys.readouterr().out
        assert "http://10.0.0.5:11000" in out
        assert "http://localhost:11000" in out

    def test_command_error_reported(self, manager, capsys):
        """Test a failing command is printed, not raised."""
        manager.server.restart.side_effect = RuntimeError("port busy")
        manager.execute("restart web")
        assert "Error handling command: port busy" in capsys.readouterr().out

    @pytest.mark.parametrize("command", ["exit", "quit", "EXIT"])
    def test_exit(self, manager, command):
        manager.execute(command)
        assert not manager.running
        manager.server.stop.assert_called_once()
        manager.runner.stop.assert_called_once()
        manager.monitor.stop.assert_called_once()

    def test_run_shell_until_exit(self, manager, capsys):
        manager.run_shell(io.StringIO("status\nexit\nstatus\n"))
        assert not manager.running
        assert capsys.readouterr().out.count("Current status:") == 1

    def test_run_shell_end_of_input(self, manager):
        manager.run_shell(io.StringIO(""))
        assert not manager.running
        manager.server.stop.assert_called_once()


class TestMain:
    """Tests for the command line entry point."""

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "docslot" in capsys.readouterr().out
