"""Classification of a Composer command result into an update outcome."""

from collections.abc import Sequence

from .models import (
    DEPENDENCY_ERROR,
    DEV_PREFIX,
    GENERIC_ERROR,
    SUCCESS,
    UNKNOWN,
    UpdateOutcome,
)


def classify(
    exit_code: int,
    target_version: str,
    lock_contents: str,
    output: str,
    patches: Sequence[str] = (),
) -> UpdateOutcome:
    """Classify the result of an update or require command.

    Composer exits with 1 both on real failures and when a patch fails to
    apply after the lock file was already written, so exit code 1 is checked
    against the lock file and the captured output.

    Args:
        exit_code: Exit status of the command
        target_version: Version the package was updated to
        lock_contents: composer.lock text after the command ran
        output: Captured command output
        patches: Patch descriptors known for the package

    Returns:
        The outcome
    """
    if exit_code == 0:
        return SUCCESS
    if exit_code == 2:
        return DEPENDENCY_ERROR
    if exit_code != 1:
        return UNKNOWN

    # dev- versions are branch aliases and never appear verbatim in the lock.
    if target_version.startswith(DEV_PREFIX) or target_version in lock_contents:
        outcome = SUCCESS
    else:
        outcome = GENERIC_ERROR

    haystack = output.lower()
    for patch in patches:
        # Last match wins.
        if patch and patch.lower() in haystack:
            outcome = UpdateOutcome.patch_failure(patch)

    return outcome
