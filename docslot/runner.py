"""Companion script runner: spawns run.sh / run.bat and relays its output."""

import logging
import os
import subprocess
import sys
import threading
from pathlib import Path
from typing import Optional, Union

from .exceptions import ScriptError

logger = logging.getLogger(__name__)

STOP_JOIN_TIMEOUT_SECS = 3.0


def default_script_name() -> str:
    return "run.bat" if sys.platform.startswith("win") else "run.sh"


class ScriptRunner:
    """
    Runs one script from the working directory in the background.

    stdout and stderr are merged and each line is logged with a
    ``[script]`` prefix. ``is_running`` turns False once the output
    stream closes.
    """

    def __init__(self, root: Union[str, Path] = ".", script: Optional[str] = None):
        self.root = Path(root)
        self.script = script or default_script_name()
        self._process: Optional[subprocess.Popen] = None
        self._reader: Optional[threading.Thread] = None
        self._running = False
        self._lock = threading.RLock()

    @property
    def script_path(self) -> Path:
        return self.root / self.script

    def _command(self) -> list:
        if self.script.endswith(".bat"):
            return ["cmd", "/c", self.script]
        return ["sh", self.script]

    def start(self) -> bool:
        """
        Spawn the script.

        Returns:
            True if the script is running afterwards.
        """
        with self._lock:
            if self._running:
                logger.info("Script is already running")
                return True
            try:
                self._spawn()
            except ScriptError as e:
                if e.code == 404:
                    logger.info(e.message)
                else:
                    logger.error(f"Failed to start script: {e.message} ({e.detail})")
                return False

        logger.info(f"Script started: {self.script}")
        return True

    def _spawn(self) -> None:
        path = self.script_path
        if not path.exists():
            raise ScriptError(f"Script file {self.script} not found", code=404)
        if not self.script.endswith(".bat"):
            try:
                os.chmod(path, path.stat().st_mode | 0o111)
            except OSError as e:
                logger.debug(f"chmod {path} failed: {e}")
        try:
            self._process = subprocess.Popen(
                self._command(),
                cwd=self.root,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ScriptError(f"Unable to spawn {self.script}", detail=str(e)) from e

        self._running = True
        self._reader = threading.Thread(
            target=self._relay_output,
            args=(self._process,),
            name="docslot-script-output",
            daemon=True,
        )
        self._reader.start()

    def _relay_output(self, process: subprocess.Popen) -> None:
        try:
            for line in process.stdout:
                logger.info(f"[script] {line.rstrip()}")
        except (OSError, ValueError) as e:
            if self._running:
                logger.error(f"Error reading script output: {e}")
        finally:
            if self._process is process:
                self._running = False
            exit_code = process.wait()
            logger.info(f"Script finished, exit code: {exit_code}")

    def stop(self) -> None:
        with self._lock:
            if self._process is None or not self._running:
                return
            self._running = False
            self._process.terminate()
            if self._reader is not None and self._reader.is_alive():
                self._reader.join(STOP_JOIN_TIMEOUT_SECS)
        logger.info("Script stopped")

    def restart(self) -> bool:
        logger.info("Restarting script...")
        with self._lock:
            self.stop()
            return self.start()

    def is_running(self) -> bool:
        return self._running
