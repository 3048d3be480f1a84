from pathlib import Path
from typing import Optional, Union

from .collector import get_project_licenses
from .renderer import OutputFormat, render_licenses
from .scanner import BaseLicenseScanner


async def generate_license_file(
    path: str,
    output_path: Union[str, Path],
    output_json: bool = False,
    scanner: Optional[BaseLicenseScanner] = None,
) -> None:
    """
    Scan the project at path and write its license file to output_path.

    The output file is only opened once every license has been collected,
    so a failed scan leaves any existing output untouched.

    Args:
        path: A path to a directory containing a package.json
        output_path: A file path for the resulting license file
        output_json: True to write JSON, False for plain text
        scanner: Optional scanner; defaults to the configured one
    """
    licenses = await get_project_licenses(path, scanner)
    render_licenses(
        licenses,
        output_path,
        OutputFormat.JSON if output_json else OutputFormat.TEXT,
    )
