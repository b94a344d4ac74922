"""Detection of files and executables required before any update runs."""

import logging
import shlex
import shutil
from pathlib import Path

from .errors import MissingPrerequisiteError

logger = logging.getLogger(__name__)

REQUIRED_FILES = ("composer.json", "composer.lock")
REQUIRED_BINARIES = ("php", "composer")


def required_binaries(prefix: str | None = None) -> list[str]:
    """List executables needed on PATH.

    Args:
        prefix: Optional command prefix, e.g. "ddev"

    Returns:
        Executable names, the prefix executable first if any
    """
    binaries = list(REQUIRED_BINARIES)
    if prefix:
        parts = shlex.split(prefix)
        if parts and parts[0] not in binaries:
            binaries.insert(0, parts[0])
    return binaries


def check_requirements(project_dir: Path, prefix: str | None = None) -> None:
    """Verify composer files and binaries are present.

    Raises:
        MissingPrerequisiteError: Naming the first missing requirement
    """
    missing_files = [name for name in REQUIRED_FILES if not (project_dir / name).is_file()]
    if missing_files:
        raise MissingPrerequisiteError(
            f"{' or '.join(missing_files)} missing in {project_dir}."
        )

    for binary in required_binaries(prefix):
        if shutil.which(binary) is None:
            raise MissingPrerequisiteError(f"{binary} is not installed.")
        logger.debug("Found %s at %s", binary, shutil.which(binary))
