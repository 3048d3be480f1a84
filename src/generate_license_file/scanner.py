"""
Dependency scanners that report license metadata for an npm project.

A scanner turns a project directory into a mapping from package identifier
(name@version, with scoped names kept as @scope/name) to ModuleInfo. The
collector only depends on BaseLicenseScanner, so implementations can be
swapped or mocked freely.
"""

import asyncio
import json
import subprocess
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .cli_config import get_config
from .error_handling import ScannerError, log_scanner_error
from .structured_logging import get_scanner_logger

LICENSE_FILE_PREFIXES = ("license", "licence", "copying")


@dataclass(frozen=True)
class ModuleInfo:
    """License metadata for one installed package."""

    license_file: Optional[str] = None
    licenses: Optional[Union[str, List[str]]] = None

    def first_license(self) -> Optional[str]:
        """Return the first declared license type, if any."""
        if isinstance(self.licenses, str):
            return self.licenses or None
        if self.licenses:
            return self.licenses[0]
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModuleInfo":
        """Build from license-checker's JSON shape."""
        licenses = data.get("licenses")
        if licenses is not None and not isinstance(licenses, str):
            licenses = [str(entry) for entry in licenses]
        return cls(license_file=data.get("licenseFile"), licenses=licenses)


class BaseLicenseScanner(ABC):
    """Base class for license scanners."""

    name = "base"

    @abstractmethod
    async def scan(self, path: str, production: bool = True) -> Dict[str, ModuleInfo]:
        """Return license metadata for every dependency of the project at path."""


class NodeModulesScanner(BaseLicenseScanner):
    """Reads license metadata straight from an installed node_modules tree."""

    name = "node_modules"

    def __init__(self):
        self.logger = get_scanner_logger()

    async def scan(self, path: str, production: bool = True) -> Dict[str, ModuleInfo]:
        root = Path(path).resolve()
        manifest = self._read_manifest(root)

        results: Dict[str, ModuleInfo] = {}
        root_name = manifest.get("name")
        if root_name:
            identifier = f"{root_name}@{manifest.get('version', '0.0.0')}"
            results[identifier] = self._module_info(root, manifest)

        seen = {root}
        queue = deque(
            (root, dep_name, optional)
            for dep_name, optional in self._dependency_names(manifest, production)
        )

        while queue:
            requirer, dep_name, optional = queue.popleft()
            package_dir = self._resolve_package(requirer, dep_name, root)

            if package_dir is None:
                if not optional:
                    self.logger.warning(
                        "dependency_not_installed",
                        dependency=dep_name,
                        required_by=str(requirer),
                    )
                continue

            package_dir = package_dir.resolve()
            if package_dir in seen:
                continue
            seen.add(package_dir)

            dep_manifest = self._read_manifest(package_dir)
            name = dep_manifest.get("name", dep_name)
            identifier = f"{name}@{dep_manifest.get('version', '0.0.0')}"
            results[identifier] = self._module_info(package_dir, dep_manifest)

            # Nested packages never pull in their own devDependencies
            for child, child_optional in self._dependency_names(dep_manifest, True):
                queue.append((package_dir, child, child_optional))

        self.logger.debug("node_modules_scanned", project_path=str(root), packages=len(results))
        return dict(sorted(results.items()))

    def _read_manifest(self, package_dir: Path) -> Dict[str, Any]:
        manifest_path = package_dir / "package.json"
        if not manifest_path.is_file():
            raise ScannerError(f"No package.json found in {package_dir}")

        try:
            with open(manifest_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ScannerError(f"Failed to read {manifest_path}: {e}") from e

        if not isinstance(data, dict):
            raise ScannerError(f"Malformed package.json in {package_dir}")
        return data

    @staticmethod
    def _dependency_names(
        manifest: Dict[str, Any], production: bool
    ) -> List[Tuple[str, bool]]:
        names: List[Tuple[str, bool]] = []
        sections = [("dependencies", False), ("optionalDependencies", True)]
        if not production:
            sections.append(("devDependencies", False))

        for section, optional in sections:
            for dep_name in manifest.get(section) or {}:
                names.append((dep_name, optional))
        return names

    @staticmethod
    def _resolve_package(requirer: Path, dep_name: str, root: Path) -> Optional[Path]:
        """Find dep_name the way Node does: nearest node_modules walking up to root."""
        current = requirer
        while True:
            if current.name != "node_modules":
                candidate = current / "node_modules" / dep_name
                if (candidate / "package.json").is_file():
                    return candidate
            if current == root or current.parent == current:
                return None
            current = current.parent

    @staticmethod
    def _find_license_file(package_dir: Path) -> Optional[str]:
        for entry in sorted(package_dir.iterdir(), key=lambda p: p.name):
            if entry.is_file() and entry.name.lower().startswith(LICENSE_FILE_PREFIXES):
                return str(entry)
        return None

    def _module_info(self, package_dir: Path, manifest: Dict[str, Any]) -> ModuleInfo:
        return ModuleInfo(
            license_file=self._find_license_file(package_dir),
            licenses=self._declared_licenses(manifest),
        )

    @staticmethod
    def _declared_licenses(manifest: Dict[str, Any]) -> Optional[Union[str, List[str]]]:
        declared = manifest.get("license")
        if isinstance(declared, str) and declared:
            return declared
        if isinstance(declared, dict) and declared.get("type"):
            return str(declared["type"])

        # Legacy "licenses": [{"type": "MIT", "url": ...}]
        legacy = manifest.get("licenses")
        if isinstance(legacy, list):
            types = [
                str(entry.get("type") if isinstance(entry, dict) else entry)
                for entry in legacy
                if entry
            ]
            return types or None
        return None


class LicenseCheckerScanner(BaseLicenseScanner):
    """Delegates to the npm license-checker tool and parses its JSON output."""

    name = "license-checker"

    def __init__(
        self,
        command: Optional[List[str]] = None,
        timeout_seconds: Optional[int] = None,
    ):
        config = get_config()
        self.command = list(command or config.scan.license_checker_command)
        self.timeout_seconds = timeout_seconds or config.scan.timeout_seconds
        self.logger = get_scanner_logger()

    def build_command(self, path: str, production: bool = True) -> List[str]:
        command = self.command + ["--json", "--start", str(path)]
        if production:
            command.append("--production")
        return command

    async def scan(self, path: str, production: bool = True) -> Dict[str, ModuleInfo]:
        stdout, stderr, return_code = await self._run_command_safely(
            self.build_command(path, production), cwd=Path(path)
        )

        if return_code != 0:
            raise ScannerError(
                f"license-checker exited with code {return_code}: {stderr.strip()}"
            )

        try:
            data = json.loads(stdout)
        except ValueError as e:
            raise ScannerError(f"license-checker returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ScannerError("license-checker returned an unexpected document")

        return {
            identifier: ModuleInfo.from_dict(info or {})
            for identifier, info in data.items()
        }

    async def _run_command_safely(
        self, command: List[str], cwd: Optional[Path] = None
    ) -> Tuple[str, str, int]:
        """
        Run a command with a timeout.

        Returns:
            Tuple of (stdout, stderr, return_code)
        """
        safe_command = [str(arg) for arg in command]

        try:
            process = await asyncio.create_subprocess_exec(
                *safe_command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
            )
        except OSError as e:
            raise ScannerError(f"Command failed to start: {safe_command[0]}: {e}") from e

        try:
            stdout_data, stderr_data = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ScannerError(
                f"Command timed out after {self.timeout_seconds}s: {safe_command[0]}"
            )

        stdout = stdout_data.decode("utf-8", errors="replace") if stdout_data else ""
        stderr = stderr_data.decode("utf-8", errors="replace") if stderr_data else ""

        return stdout, stderr, process.returncode or 0


def get_license_scanner(name: Optional[str] = None) -> BaseLicenseScanner:
    """
    Factory function to get a license scanner.

    Args:
        name: "node_modules" or "license-checker"; defaults to the configured scanner

    Raises:
        ValueError: If the scanner name is unknown
    """
    scanner_name = name or get_config().scan.scanner

    if scanner_name == NodeModulesScanner.name:
        return NodeModulesScanner()
    elif scanner_name == LicenseCheckerScanner.name:
        return LicenseCheckerScanner()

    log_scanner_error(
        f"Unknown scanner: {scanner_name}", "scanner", "get_license_scanner"
    )
    raise ValueError(f"Unknown scanner: {scanner_name}")
