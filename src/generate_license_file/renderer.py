"""
Report rendering for collected license records.

Renderers write straight to a text stream piece by piece, so large
dependency sets are never built up as one string in memory. All line
breaks use the host platform's convention (os.linesep).
"""

import json
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, TextIO, Union

from .error_handling import ErrorCategory, OutputError, get_error_handler
from .license import LicenseRecord
from .structured_logging import log_render_complete

EOL = os.linesep

BULLET = " - "
PREFIX = "The following NPM package may be included in this product:" + EOL + EOL
PREFIX_PLURAL = "The following NPM packages may be included in this product:" + EOL + EOL
MIDFIX = EOL + "This package contains the following license and notice below:" + EOL + EOL
MIDFIX_PLURAL = (
    EOL + "These packages each contain the following license and notice below:" + EOL + EOL
)
SUFFIX = EOL + EOL + "-----------" + EOL + EOL
FOOTER = (
    "This file was generated with generate-license-file! "
    "https://www.npmjs.com/package/generate-license-file"
)


class OutputFormat(Enum):
    """Supported report formats."""

    TEXT = "text"
    JSON = "json"


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC ISO-8601 timestamp with millisecond precision and a Z suffix."""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BaseLicenseRenderer(ABC):
    """Writes license records to a text stream."""

    output_format: OutputFormat

    @abstractmethod
    def render(
        self, records: Sequence[LicenseRecord], stream: TextIO, generated_on: str
    ) -> None:
        pass


class TextLicenseRenderer(BaseLicenseRenderer):
    """Plain-text notice file, one section per distinct license."""

    output_format = OutputFormat.TEXT

    def render(
        self, records: Sequence[LicenseRecord], stream: TextIO, generated_on: str
    ) -> None:
        for record in records:
            has_multiple_deps = len(record.dependencies) > 1
            stream.write(PREFIX_PLURAL if has_multiple_deps else PREFIX)

            for dependency in record.dependencies:
                stream.write(BULLET)
                stream.write(dependency)
                stream.write(EOL)

            stream.write(MIDFIX_PLURAL if has_multiple_deps else MIDFIX)
            stream.write(record.content.strip())
            stream.write(SUFFIX)

        stream.write(EOL)
        stream.write(f"Generated on {generated_on}")
        stream.write(EOL)
        stream.write(FOOTER)


class JsonLicenseRenderer(BaseLicenseRenderer):
    """JSON document of the form {"licenses": [...], "generatedOn": "..."}."""

    output_format = OutputFormat.JSON

    def render(
        self, records: Sequence[LicenseRecord], stream: TextIO, generated_on: str
    ) -> None:
        stream.write('{ "licenses": [')
        stream.write(EOL)

        for index, record in enumerate(records):
            if index:
                stream.write(",")
                stream.write(EOL)
            stream.write(
                json.dumps(record.to_dict(), ensure_ascii=False, separators=(",", ":"))
            )

        stream.write(EOL)
        stream.write("],")
        stream.write(EOL)
        stream.write(f'"generatedOn": {json.dumps(generated_on)}')
        stream.write(EOL)
        stream.write(" }")


def get_renderer(output_format: Union[OutputFormat, str]) -> BaseLicenseRenderer:
    """
    Get the renderer for a format.

    Raises:
        ValueError: If the format is unknown
    """
    output_format = OutputFormat(output_format)
    if output_format == OutputFormat.JSON:
        return JsonLicenseRenderer()
    return TextLicenseRenderer()


def render_licenses(
    records: Sequence[LicenseRecord],
    destination: Union[str, Path, TextIO],
    output_format: Union[OutputFormat, str] = OutputFormat.TEXT,
    generated_on: Optional[str] = None,
) -> None:
    """
    Render records to destination, creating or truncating it.

    Args:
        records: License records in output order
        destination: File path, or an already open text stream
        output_format: OutputFormat.TEXT or OutputFormat.JSON
        generated_on: Timestamp to embed; defaults to now

    Raises:
        OutputError: If the destination file cannot be opened for writing
    """
    renderer = get_renderer(output_format)
    generated_on = generated_on or iso_timestamp()

    if hasattr(destination, "write"):
        renderer.render(records, destination, generated_on)
        return

    try:
        stream = open(destination, "w", encoding="utf-8", newline="")
    except OSError as e:
        get_error_handler().error(
            ErrorCategory.RENDERING,
            f"Cannot open {destination} for writing",
            "renderer",
            "render_licenses",
            exception=e,
            details={"output_path": str(destination)},
            suggestions=["Check that the output directory exists and is writable"],
        )
        raise OutputError(f"Cannot open {destination} for writing: {e}") from e

    with stream:
        renderer.render(records, stream, generated_on)

    log_render_complete(str(destination), renderer.output_format.value, len(records))
