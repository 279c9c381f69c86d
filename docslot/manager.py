"""
Server manager

Wires configuration, the document server, the companion script and the
health monitor together, and runs the interactive operator shell.
"""

import argparse
import logging
import sys
import time
from importlib import resources
from pathlib import Path
from typing import Callable, Dict, Optional, TextIO, Union

from . import __version__
from .config import CONFIG_FILE, ConfigManager
from .exceptions import ConfigError
from .http import DocumentSlot, Server
from .monitor import HealthMonitor
from .runner import ScriptRunner

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

HELP_TEXT = """Available commands:
  restart                    - restart web server, script and monitor
  restart web                - restart the web server only
  restart run                - restart the script only
  restart monitor            - restart the web status monitor only
  status                     - show current status
  config show                - show current configuration
  config set <key> <value>   - change a configuration value
  monitor status             - show monitor status
  monitor restart            - restart the monitor
  monitor stop               - stop the monitor
  monitor start              - start the monitor
  info                       - show network information
  help                       - show this help
  exit/quit                  - shut down and exit"""


def default_document() -> bytes:
    """Bundled document written when the working directory has none."""
    return resources.files("docslot").joinpath("resources/index.html").read_bytes()


class ServerManager:
    """
    Owns every component and the operator shell.

    Example:
        manager = ServerManager(root="/srv/site")
        manager.start()
        manager.run_shell()
    """

    def __init__(self, root: Union[str, Path] = ".", config_path: Optional[Union[str, Path]] = None):
        self.root = Path(root)
        self.slot = DocumentSlot(self.root / "index.html")
        self.ensure_resources()

        self.config = ConfigManager(config_path or self.root / CONFIG_FILE)
        self.server = Server(port=self.config.get_web_port(), root=self.root, slot=self.slot)
        self.runner = ScriptRunner(root=self.root)
        self.monitor = HealthMonitor(self.server, target=self.config.get_monitor_web_status)
        self.running = False

        self._commands: Dict[str, Callable[[str], None]] = {
            'help': lambda arg: self.show_help(),
            'restart': self.handle_restart,
            'status': lambda arg: self.show_status(),
            'config': self.handle_config,
            'monitor': self.handle_monitor,
            'info': lambda arg: self.show_network_info(),
            'exit': lambda arg: self.shutdown(),
            'quit': lambda arg: self.shutdown(),
        }

    def ensure_resources(self) -> None:
        try:
            self.slot.ensure(default_document())
        except OSError as e:
            logger.error(f"Failed to extract default document: {e}")

    def start(self) -> None:
        self.print_banner()
        self.running = True
        self.server.start()
        if self.config.is_start_run_enabled():
            self.runner.start()
        self.monitor.start()

    def monitor_target(self) -> str:
        return self.config.get_monitor_web_status() or f"{self.server.local_ip}:{self.server.get_port()}"

    def print_banner(self) -> None:
        print("=== docslot web server and script manager ===")
        print(f"Address: http://{self.server.local_ip}:{self.config.get_web_port()}")
        print(f"Run script on start: {str(self.config.is_start_run_enabled()).lower()}")
        print(f"Monitor target: {self.monitor_target()}")
        print("Type 'help' for available commands")
        print("=" * 45)

    # -- shell -------------------------------------------------------------

    def run_shell(self, stream: Optional[TextIO] = None) -> None:
        """Read commands until ``exit``/``quit`` or end of input."""
        stream = stream or sys.stdin
        while self.running:
            print("> ", end="", flush=True)
            line = stream.readline()
            if not line:
                self.shutdown()
                break
            self.execute(line)

    def execute(self, line: str) -> None:
        """Dispatch one command line. Errors are reported, never raised."""
        command = line.strip()
        if not command:
            return
        name, _, argument = command.partition(" ")
        handler = self._commands.get(name.lower())
        if handler is None:
            print(f"Unknown command: {command}")
            print("Type 'help' for available commands")
            return
        try:
            handler(argument.strip())
        except Exception as e:
            logger.exception(f"Error handling command {command!r}")
            print(f"Error handling command: {e}")

    def show_help(self) -> None:
        print(HELP_TEXT)

    def handle_restart(self, argument: str) -> None:
        if not argument:
            print("Restarting web server and script...")
            self.restart_web()
            self.runner.restart()
            self.monitor.restart()
            return
        targets = {
            'web': self.restart_web,
            'run': self.runner.restart,
            'monitor': self.monitor.restart,
        }
        action = targets.get(argument.lower())
        if action is None:
            print(f"Unknown restart target: {argument}")
            print("Available targets: web, run, monitor")
            return
        action()

    def restart_web(self) -> None:
        # Pick up a changed web_port on restart
        self.server.port = self.config.get_web_port()
        self.server.restart()

    def handle_config(self, argument: str) -> None:
        if not argument:
            print("config usage:")
            print("  config show               - show current configuration")
            print("  config set <key> <value>  - change a configuration value")
            return
        sub, _, rest = argument.partition(" ")
        sub = sub.lower()
        if sub == "show":
            self.show_config()
        elif sub == "set":
            key, _, value = rest.strip().partition(" ")
            if not key or not value:
                print("Invalid format, expected: config set <key> <value>")
                return
            self.set_config(key, value.strip())
        else:
            print(f"Unknown config subcommand: {sub}")

    def set_config(self, key: str, value: str) -> None:
        try:
            self.config.set(key, value)
        except ConfigError as e:
            print(e.message)
            if e.detail:
                print(e.detail)
            return
        key = key.lower()
        print(f"Set {key} to: {value}")
        if key == "web_port":
            print("Restart the web server for the new port to take effect")
        elif key == "monitor_web_status":
            print("The monitor uses the new target from its next check")

    def show_config(self) -> None:
        print("=== Current configuration ===")
        print(f"web_port: {self.config.get_web_port()}")
        print(f"enable_start_run: {str(self.config.is_start_run_enabled()).lower()}")
        print(f"monitor_web_status: {self.monitor_target()}")

    def handle_monitor(self, argument: str) -> None:
        actions = {
            'status': lambda: print(
                f"Web status monitor: {'running' if self.monitor.is_monitoring() else 'stopped'}"
            ),
            'restart': self.monitor.restart,
            'stop': self.monitor.stop,
            'start': self.monitor.start,
        }
        if not argument:
            print("monitor usage:")
            print("  monitor status   - show monitor status")
            print("  monitor restart  - restart the monitor")
            print("  monitor stop     - stop the monitor")
            print("  monitor start    - start the monitor")
            return
        action = actions.get(argument.lower())
        if action is None:
            print(f"Unknown monitor subcommand: {argument}")
            return
        action()

    def show_network_info(self) -> None:
        ip, port = self.server.local_ip, self.server.get_port()
        print("=== Network information ===")
        print(f"Local IP address: {ip}")
        print(f"Port: {port}")
        print("Addresses:")
        print(f"  http://{ip}:{port}")
        print(f"  http://localhost:{port}")
        print(f"  http://127.0.0.1:{port}")

    def show_status(self) -> None:
        server_state = f"running (port {self.server.get_port()})" if self.server.is_running() else "stopped"
        print("Current status:")
        print(f"  Web server: {server_state}")
        print(f"  Script: {'running' if self.runner.is_running() else 'stopped'}")
        print(f"  Web monitor: {'running' if self.monitor.is_monitoring() else 'stopped'}")
        print(f"  Run on start: {'enabled' if self.config.is_start_run_enabled() else 'disabled'}")
        print(f"  Monitor target: {self.monitor_target()}")

    def shutdown(self) -> None:
        if not self.running:
            return
        print("Shutting down...")
        self.running = False
        self.server.stop()
        self.runner.stop()
        self.monitor.stop()
        print("Server shut down")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="docslot", description="Serve and hot-swap a single HTML document")
    parser.add_argument("--root", type=Path, default=Path.cwd(), help="Working directory (default: cwd)")
    parser.add_argument("--config", type=Path, default=None, help=f"Config file (default: <root>/{CONFIG_FILE})")
    parser.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    parser.add_argument("--no-shell", action="store_true", help="Run without the interactive shell")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    manager = ServerManager(root=args.root, config_path=args.config)
    try:
        manager.start()
        if args.no_shell:
            while manager.running:
                time.sleep(0.5)
        else:
            manager.run_shell()
    except KeyboardInterrupt:
        print("\nReceived shutdown signal, cleaning up...")
    finally:
        manager.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
