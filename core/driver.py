"""Update driver: decides, runs and records updates package by package."""

import logging
from collections.abc import Iterable
from pathlib import Path

from rich.console import Console

from .classify import classify
from .composer import CommandResult, PackageManager
from .models import (
    OutcomeKind,
    PackageRecord,
    RunConfig,
    SKIPPED,
    SummaryReport,
    UpdateOutcome,
    UpdateType,
)

logger = logging.getLogger(__name__)

CORE_PACKAGE = "drupal/core"
CORE_RECOMMENDED = "drupal/core-recommended"
CORE_FAMILY = (
    CORE_RECOMMENDED,
    "drupal/core-composer-scaffold",
    "drupal/core-project-message",
)
CORE_WILDCARD = "drupal/core-*"
VENDOR_PREFIX = "drupal/"
UPDATE_POSSIBLE = "update-possible"


def is_core_package(name: str) -> bool:
    return name == CORE_PACKAGE or name.startswith(CORE_PACKAGE + "-")


class UpdateDriver:
    """Runs updates for outdated packages and accumulates the summary."""

    def __init__(
        self,
        config: RunConfig,
        package_manager: PackageManager,
        lock_file: Path,
        console: Console | None = None,
    ):
        """Initialize the update driver.

        Args:
            config: Resolved run configuration
            package_manager: Runner for update and require commands
            lock_file: composer.lock, re-read after every command
            console: Where progress lines are printed
        """
        self.config = config
        self.package_manager = package_manager
        self.lock_file = lock_file
        self.console = console or Console(stderr=True)
        self.report = SummaryReport()

    def is_excluded(self, package: PackageRecord) -> bool:
        """Excludes match the full name or the short project name."""
        for item in self.config.exclude:
            if package.name == item or package.name == VENDOR_PREFIX + item:
                return True
        return False

    def should_skip(self, package: PackageRecord) -> bool:
        if self.is_excluded(package):
            return True
        return (
            self.config.update_type != UpdateType.ALL
            and package.update_status != self.config.update_type.value
        )

    def apply(self, package: PackageRecord) -> CommandResult:
        """Issue the update or require command suited to the package."""
        version = package.latest_version
        major_bump = package.update_status == UPDATE_POSSIBLE

        if package.name in (CORE_PACKAGE, CORE_RECOMMENDED):
            # Core and its companions must move together.
            if self.config.update_type == UpdateType.ALL and major_bump:
                return self.package_manager.require({name: version for name in CORE_FAMILY})
            return self.package_manager.update(CORE_WILDCARD)

        if major_bump:
            return self.package_manager.require({package.name: version})
        return self.package_manager.update(package.name)

    def _read_lock(self) -> str:
        try:
            return self.lock_file.read_text()
        except OSError as e:
            logger.warning("Cannot read %s: %s", self.lock_file, e)
            return ""

    def update_package(self, package: PackageRecord) -> UpdateOutcome:
        """Update or skip one package and record its row.

        Args:
            package: Outdated package to process

        Returns:
            The recorded outcome
        """
        if self.should_skip(package):
            self.console.print(f"Skipping upgrades for {package.name}")
            logger.info("Skipped %s (%s)", package.name, package.update_status)
            self.report.add_row(package, SKIPPED)
            return SKIPPED

        self.console.print(
            f"Update {package.name} from {package.current_version} to {package.latest_version}"
        )
        result = self.apply(package)
        outcome = classify(
            exit_code=result.exit_code,
            target_version=package.latest_version,
            lock_contents=self._read_lock(),
            output=result.output,
            patches=package.patches,
        )
        logger.info("%s: %s", package.name, outcome.label)

        if outcome.kind == OutcomeKind.PATCH_FAILURE:
            self.report.add_highlight(
                f"**{package.name}** failed to apply a patch: *{outcome.detail}*."
            )
        elif outcome.kind == OutcomeKind.DEPENDENCY_ERROR:
            self.report.add_highlight(f"**{package.name}** has an unresolved dependency.")

        self.report.add_row(package, outcome)
        return outcome

    def run(self, packages: Iterable[PackageRecord]) -> SummaryReport:
        """Process contributed packages in order, then core last.

        Args:
            packages: Records in listing order

        Returns:
            The accumulated summary report
        """
        packages = list(packages)
        for package in packages:
            if is_core_package(package.name):
                continue
            self.update_package(package)

        if self.config.update_core:
            core = find_core_package(packages)
            if core is not None:
                self.update_package(core)
            else:
                logger.info("No core update available")

        return self.report


def find_core_package(packages: Iterable[PackageRecord]) -> PackageRecord | None:
    """Pick drupal/core, falling back to drupal/core-recommended."""
    by_name = {package.name: package for package in packages}
    return by_name.get(CORE_PACKAGE) or by_name.get(CORE_RECOMMENDED)
