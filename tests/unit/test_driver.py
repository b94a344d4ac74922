"""Tests for the update driver."""

from io import StringIO

import pytest
from rich.console import Console

from conftest import FakePackageManager
from core.composer import CommandResult
from core.driver import CORE_FAMILY, UpdateDriver, find_core_package, is_core_package
from core.models import OutcomeKind, PackageRecord, RunConfig, UpdateType

SAFE = "semver-safe-update"
MAJOR = "update-possible"


def record(name, latest="1.2.0", status=SAFE, patches=()):
    return PackageRecord(
        name=name,
        current_version="1.0.0",
        latest_version=latest,
        update_status=status,
        patches=tuple(patches),
    )


@pytest.fixture
def lock_file(tmp_path):
    lock = tmp_path / "composer.lock"
    lock.write_text('{"packages": [{"name": "drupal/token", "version": "1.2.0"}]}')
    return lock


def make_driver(lock_file, manager, **config):
    return UpdateDriver(
        RunConfig(**config),
        manager,
        lock_file,
        console=Console(file=StringIO()),
    )


class TestSkipping:
    """Test skip rules."""

    def test_excluded_by_short_name(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer, exclude=frozenset({"token"}))
        outcome = driver.update_package(record("drupal/token"))
        assert outcome.kind == OutcomeKind.SKIPPED
        assert fake_composer.calls == []

    def test_excluded_by_full_name(self, lock_file, fake_composer):
        driver = make_driver(
            lock_file, fake_composer, update_type=UpdateType.ALL, exclude=frozenset({"drupal/token"})
        )
        assert driver.update_package(record("drupal/token")).kind == OutcomeKind.SKIPPED
        assert fake_composer.calls == []

    def test_major_bump_skipped_for_semver_safe(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer)
        outcome = driver.update_package(record("drupal/pathauto", "2.0.0", MAJOR))
        assert outcome.kind == OutcomeKind.SKIPPED
        assert fake_composer.calls == []

    def test_skipped_package_still_reported(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer, exclude=frozenset({"token"}))
        driver.update_package(record("drupal/token"))
        assert len(driver.report.rows) == 1
        assert driver.report.rows[0].outcome.label == "skipped"


class TestCommands:
    """Test which Composer command is issued."""

    def test_minor_update(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer)
        driver.update_package(record("drupal/token"))
        assert fake_composer.calls == [("update", ("drupal/token",))]

    def test_major_update_requires_version(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer, update_type=UpdateType.ALL)
        driver.update_package(record("drupal/pathauto", "2.0.0", MAJOR))
        assert fake_composer.calls == [("require", {"drupal/pathauto": "2.0.0"})]

    def test_core_minor_update_uses_wildcard(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer, update_type=UpdateType.ALL)
        driver.update_package(record("drupal/core", "10.1.6"))
        assert fake_composer.calls == [("update", ("drupal/core-*",))]

    def test_core_major_update_pins_family(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer, update_type=UpdateType.ALL)
        driver.update_package(record("drupal/core", "11.0.1", MAJOR))
        assert fake_composer.calls == [("require", {name: "11.0.1" for name in CORE_FAMILY})]


class TestOutcomes:
    """Test outcome recording and highlights."""

    def test_patch_failure_highlight(self, lock_file):
        manager = FakePackageManager(
            {"drupal/token": CommandResult(1, "Cannot apply patch Fix Token (fix.patch)")}
        )
        driver = make_driver(lock_file, manager)
        outcome = driver.update_package(record("drupal/token", patches=["fix token"]))

        assert outcome.kind == OutcomeKind.PATCH_FAILURE
        assert outcome.detail == "fix token"
        assert driver.report.rows[0].outcome.label == "patch failure"
        assert driver.report.highlights == ["**drupal/token** failed to apply a patch: *fix token*."]

    def test_dependency_error_highlight(self, lock_file):
        manager = FakePackageManager({"drupal/token": CommandResult(2, "conflict")})
        driver = make_driver(lock_file, manager)
        outcome = driver.update_package(record("drupal/token"))

        assert outcome.kind == OutcomeKind.DEPENDENCY_ERROR
        assert driver.report.highlights == ["**drupal/token** has an unresolved dependency."]

    def test_exit_one_checks_lock_file(self, lock_file):
        manager = FakePackageManager({
            "drupal/token": CommandResult(1),
            "drupal/redirect": CommandResult(1),
        })
        driver = make_driver(lock_file, manager)
        assert driver.update_package(record("drupal/token", "1.2.0")).kind == OutcomeKind.SUCCESS
        assert driver.update_package(record("drupal/redirect", "3.2.0")).kind == OutcomeKind.GENERIC_ERROR
        assert driver.report.highlights == []

    def test_failures_do_not_abort_run(self, lock_file):
        manager = FakePackageManager({"drupal/a": CommandResult(255)})
        driver = make_driver(lock_file, manager)
        report = driver.run([record("drupal/a"), record("drupal/b")])
        assert [row.outcome.kind for row in report.rows] == [OutcomeKind.UNKNOWN, OutcomeKind.SUCCESS]


class TestRun:
    """Test ordering of a whole run."""

    def test_core_processed_last(self, lock_file, fake_composer):
        packages = [
            record("drupal/core", "10.1.6"),
            record("drupal/core-recommended", "10.1.6"),
            record("drupal/token"),
            record("drupal/redirect"),
        ]
        driver = make_driver(lock_file, fake_composer)
        report = driver.run(packages)

        assert [row.package.name for row in report.rows] == [
            "drupal/token",
            "drupal/redirect",
            "drupal/core",
        ]
        assert fake_composer.calls[-1] == ("update", ("drupal/core-*",))

    def test_core_disabled(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer, update_core=False)
        report = driver.run([record("drupal/core"), record("drupal/token")])
        assert [row.package.name for row in report.rows] == ["drupal/token"]

    def test_core_recommended_fallback(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer)
        report = driver.run([record("drupal/core-recommended"), record("drupal/token")])
        assert report.rows[-1].package.name == "drupal/core-recommended"
        assert fake_composer.calls[-1] == ("update", ("drupal/core-*",))

    def test_no_core_record(self, lock_file, fake_composer):
        driver = make_driver(lock_file, fake_composer)
        report = driver.run([record("drupal/token")])
        assert len(report.rows) == 1


def test_is_core_package():
    assert is_core_package("drupal/core")
    assert is_core_package("drupal/core-composer-scaffold")
    assert not is_core_package("drupal/core_event_dispatcher")
    assert not is_core_package("drupal/token")


def test_find_core_package_prefers_core():
    packages = [record("drupal/core-recommended"), record("drupal/core")]
    assert find_core_package(packages).name == "drupal/core"
