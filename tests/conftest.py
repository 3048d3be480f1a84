"""Shared fixtures for generate-license-file tests."""

import json
from pathlib import Path
from typing import Dict, Optional

import pytest

from generate_license_file.cli_config import reset_config
from generate_license_file.scanner import BaseLicenseScanner, ModuleInfo

MIT_TEXT = (
    "MIT License\n\nPermission is hereby granted, free of charge, to any person "
    "obtaining a copy of this software.\n"
)
ISC_TEXT = "ISC License\n\nPermission to use, copy, modify, and/or distribute this software.\n"
BSD_TEXT = "BSD 3-Clause License\n\nRedistribution and use in source and binary forms.\n"


class FakeScanner(BaseLicenseScanner):
    """Scanner returning a fixed mapping, recording how it was called."""

    name = "fake"

    def __init__(self, modules: Dict[str, ModuleInfo], error: Optional[Exception] = None):
        self.modules = modules
        self.error = error
        self.calls = []

    async def scan(self, path: str, production: bool = True) -> Dict[str, ModuleInfo]:
        self.calls.append((path, production))
        if self.error:
            raise self.error
        return self.modules


def write_package(
    package_dir: Path, manifest: dict, license_text: Optional[str] = None,
    license_name: str = "LICENSE",
) -> Path:
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    if license_text is not None:
        (package_dir / license_name).write_text(license_text, encoding="utf-8")
    return package_dir


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config files and environment variables from leaking into tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in (
        "GENERATE_LICENSE_FILE_SCANNER",
        "GENERATE_LICENSE_FILE_TIMEOUT",
        "GENERATE_LICENSE_FILE_OUTPUT",
        "GENERATE_LICENSE_FILE_JSON",
        "GENERATE_LICENSE_FILE_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def temp_dir(tmp_path):
    return tmp_path


@pytest.fixture
def npm_project(tmp_path):
    """
    An installed npm project:

    - left-pad and right-pad share the same MIT license file
    - @scope/pkg declares Apache-2.0 but ships no license file
    - nested-dep is installed under left-pad's own node_modules
    - no-license has neither a license file nor a declared license
    - dev-tool is a devDependency only
    """
    root = tmp_path / "project"
    modules = root / "node_modules"

    write_package(
        root,
        {
            "name": "my-app",
            "version": "1.0.0",
            "dependencies": {
                "left-pad": "^1.0.0",
                "right-pad": "^1.0.0",
                "@scope/pkg": "^2.0.0",
                "no-license": "0.1.0",
            },
            "optionalDependencies": {"not-installed": "1.0.0"},
            "devDependencies": {"dev-tool": "^5.0.0"},
        },
    )
    write_package(
        modules / "left-pad",
        {
            "name": "left-pad",
            "version": "1.0.0",
            "license": "MIT",
            "dependencies": {"nested-dep": "^3.0.0"},
        },
        MIT_TEXT,
    )
    write_package(
        modules / "left-pad" / "node_modules" / "nested-dep",
        {"name": "nested-dep", "version": "3.0.0", "license": "ISC"},
        ISC_TEXT,
        license_name="LICENSE.md",
    )
    write_package(
        modules / "right-pad",
        {"name": "right-pad", "version": "1.0.0", "license": "MIT"},
        MIT_TEXT,
    )
    write_package(
        modules / "@scope" / "pkg",
        {"name": "@scope/pkg", "version": "2.0.0", "license": {"type": "Apache-2.0"}},
    )
    write_package(modules / "no-license", {"name": "no-license", "version": "0.1.0"})
    write_package(
        modules / "dev-tool",
        {"name": "dev-tool", "version": "5.0.0", "license": "BSD-3-Clause"},
        BSD_TEXT,
    )

    return root
