"""
generate-license-file: collect the license texts of an npm project's
production dependencies into one text or JSON file.
"""

__version__ = "1.0.0"

from .collector import get_project_licenses
from .error_handling import (
    DirectoryNotFoundError,
    LicenseFileError,
    OutputError,
    ScannerError,
)
from .generator import generate_license_file
from .license import LicenseRecord
from .renderer import OutputFormat

__all__ = [
    "generate_license_file",
    "get_project_licenses",
    "LicenseRecord",
    "OutputFormat",
    "LicenseFileError",
    "DirectoryNotFoundError",
    "ScannerError",
    "OutputError",
]
