"""Package manager capability and its Composer implementation."""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from .errors import ComposerError

logger = logging.getLogger(__name__)

# Exit code reported when a command could not be started at all.
EXIT_NOT_STARTED = 127

COMMON_FLAGS = ("-W", "-n", "--ignore-platform-reqs")


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured output of one package manager command."""

    exit_code: int
    output: str = ""


class PackageManager(ABC):
    """Package manager operations needed by the update driver.

    Classification can be exercised against any implementation without
    spawning processes.
    """

    @abstractmethod
    def list_outdated(self, pattern: str) -> str:
        """Return the JSON listing of outdated locked packages.

        Args:
            pattern: Package name pattern, e.g. "drupal/*"

        Returns:
            Raw JSON text
        """
        raise NotImplementedError("list_outdated method is not implemented.")

    @abstractmethod
    def update(self, *names: str) -> CommandResult:
        """Update the given packages within their current constraints.

        Args:
            names: Package names or wildcards
        """
        raise NotImplementedError("update method is not implemented.")

    @abstractmethod
    def require(self, constraints: dict[str, str]) -> CommandResult:
        """Require packages pinned to exact versions.

        Args:
            constraints: Mapping of package name to version
        """
        raise NotImplementedError("require method is not implemented.")


class Composer(PackageManager):
    """Runs Composer as a subprocess in the project directory."""

    def __init__(self, project_dir: Path, prefix: str | None = None):
        """Initialize Composer runner.

        Args:
            project_dir: Directory holding composer.json
            prefix: Optional command prefix, e.g. "ddev" for `ddev composer`
        """
        self.project_dir = project_dir
        self.base_command = [*shlex.split(prefix or ""), "composer"]

    def list_outdated(self, pattern: str) -> str:
        command = [
            *self.base_command,
            "outdated",
            pattern,
            "-f",
            "json",
            "-D",
            "--locked",
            "--ignore-platform-reqs",
        ]
        logger.debug("Running %s", shlex.join(command))
        try:
            completed = subprocess.run(
                command,
                cwd=self.project_dir,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise ComposerError(f"Cannot run {command[0]}: {e}") from e

        if completed.returncode != 0:
            raise ComposerError(
                f"composer outdated exited with code {completed.returncode}",
                completed.stderr,
            )
        return completed.stdout

    def update(self, *names: str) -> CommandResult:
        return self._run(["update", *names, *COMMON_FLAGS])

    def require(self, constraints: dict[str, str]) -> CommandResult:
        pinned = [f"{name}:{version}" for name, version in constraints.items()]
        return self._run(["require", *pinned, *COMMON_FLAGS])

    def _run(self, arguments: list[str]) -> CommandResult:
        command = [*self.base_command, *arguments]
        logger.debug("Running %s", shlex.join(command))
        try:
            completed = subprocess.run(
                command,
                cwd=self.project_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as e:
            logger.error("Cannot run %s: %s", command[0], e)
            return CommandResult(exit_code=EXIT_NOT_STARTED, output=str(e))

        logger.debug("%s exited with %d", command[0], completed.returncode)
        return CommandResult(exit_code=completed.returncode, output=completed.stdout or "")
