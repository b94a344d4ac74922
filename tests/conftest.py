"""Pytest configuration and fixtures."""

import json

import pytest

from core.composer import CommandResult, PackageManager


class FakePackageManager(PackageManager):
    """Records commands instead of running Composer."""

    def __init__(self, results=None, listing=""):
        # name -> CommandResult, default success
        self.results = results or {}
        self.listing = listing
        self.calls = []

    def list_outdated(self, pattern):
        self.calls.append(("outdated", pattern))
        return self.listing

    def update(self, *names):
        self.calls.append(("update", names))
        return self.results.get(names[0], CommandResult(0))

    def require(self, constraints):
        self.calls.append(("require", dict(constraints)))
        return self.results.get(next(iter(constraints)), CommandResult(0))


@pytest.fixture
def fake_composer():
    return FakePackageManager()


@pytest.fixture
def sample_outdated():
    """Sample `composer outdated -f json --locked` output."""
    return json.dumps({
        "locked": [
            {
                "name": "drupal/core",
                "homepage": "https://www.drupal.org/project/drupal",
                "version": "10.1.5",
                "latest": "10.1.6",
                "latest-status": "semver-safe-update",
                "abandoned": False,
            },
            {
                "name": "drupal/token",
                "homepage": "https://www.drupal.org/project/token",
                "version": "1.11.0",
                "latest": "1.13.0",
                "latest-status": "semver-safe-update",
                "abandoned": False,
            },
            {
                "name": "drupal/pathauto",
                "version": "1.11.0",
                "latest": "2.0.0",
                "latest-status": "update-possible",
            },
        ]
    })


@pytest.fixture
def sample_composer_json():
    return {
        "name": "acme/site",
        "require": {"drupal/core-recommended": "^10.1"},
        "extra": {
            "patches": {
                "drupal/token": {
                    "Fix token replacement": "patches/token-fix.patch",
                },
            }
        },
    }


@pytest.fixture
def project_dir(tmp_path, sample_composer_json):
    """A Drupal project directory with composer.json and composer.lock."""
    (tmp_path / "composer.json").write_text(json.dumps(sample_composer_json))
    (tmp_path / "composer.lock").write_text('{"packages": []}')
    return tmp_path
