"""
License collection: scan a project and group its dependencies by license text.
"""

import time
from pathlib import Path
from typing import Dict, List, Optional

from .error_handling import (
    DirectoryNotFoundError,
    ErrorCategory,
    get_error_handler,
    log_filesystem_error,
    log_scanner_error,
)
from .license import LicenseRecord
from .naming import split_identifier
from .scanner import BaseLicenseScanner, ModuleInfo, get_license_scanner
from .structured_logging import (
    log_collection_complete,
    log_collection_start,
    log_dependency_skipped,
)


def resolve_license_text(identifier: str, info: ModuleInfo) -> Optional[str]:
    """
    Work out the license text a dependency contributes.

    Returns the license file's contents when the file exists, otherwise
    "(<license type>)" for the first declared type, otherwise None.
    """
    if info.license_file and Path(info.license_file).is_file():
        try:
            with open(info.license_file, encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            log_filesystem_error(
                f"Failed to read license file for {identifier}",
                "collector",
                "resolve_license_text",
                file_path=info.license_file,
                exception=e,
            )
            raise

    license_type = info.first_license()
    if license_type:
        return f"({license_type})"

    return None


def group_licenses(modules: Dict[str, ModuleInfo]) -> List[LicenseRecord]:
    """Collapse dependencies sharing identical license text into one record each."""
    records: Dict[str, LicenseRecord] = {}

    for identifier, info in modules.items():
        text = resolve_license_text(identifier, info)
        if text is None:
            log_dependency_skipped(identifier, "no license file or license type")
            continue

        record = records.get(text)
        if record is None:
            name, version = split_identifier(identifier)
            record = LicenseRecord(content=text, name=name, version=version)
            records[text] = record

        record.dependencies.append(identifier)

    return list(records.values())


async def collect_licenses(
    path: str, scanner: Optional[BaseLicenseScanner] = None, production: bool = True
) -> List[LicenseRecord]:
    """
    Scan the project at path and return its license records in scanner order.

    Raises:
        DirectoryNotFoundError: If path is not an existing directory
        ScannerError: If the scanner cannot read the dependency tree
    """
    if not Path(path).is_dir():
        get_error_handler().error(
            ErrorCategory.INPUT,
            f"Cannot find directory {path}",
            "collector",
            "collect_licenses",
            details={"project_path": str(path)},
        )
        raise DirectoryNotFoundError(str(path))

    scanner = scanner or get_license_scanner()
    start_time = time.time()
    log_collection_start(str(path), scanner.name)

    try:
        modules = await scanner.scan(str(path), production=production)
    except Exception as e:
        log_scanner_error(
            f"Dependency scan failed: {e}",
            "collector",
            "collect_licenses",
            project_path=str(path),
            exception=e,
        )
        raise

    records = group_licenses(modules)

    grouped = sum(len(record.dependencies) for record in records)
    log_collection_complete(
        total_dependencies=len(modules),
        record_count=len(records),
        skipped_count=len(modules) - grouped,
        duration_ms=int((time.time() - start_time) * 1000),
    )

    return records


async def get_project_licenses(
    path: str, scanner: Optional[BaseLicenseScanner] = None
) -> List[LicenseRecord]:
    """
    Get the deduplicated production licenses of the project at path.

    Args:
        path: Directory containing the project's package.json (relative or absolute)
        scanner: Optional scanner; defaults to the configured one

    Returns:
        License records, each holding the license content and the dependencies using it
    """
    return await collect_licenses(path, scanner, production=True)
