"""Output format selection.

Machines get the ServiceResult as indented JSON; humans get the Rich
rendering from :mod:`kbcheck.output.renderers`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel

from kbcheck.output.renderers import render_result

if TYPE_CHECKING:
    from kbcheck.services.result import ServiceResult


class OutputSettings(BaseModel):
    """How a result should be formatted."""

    model_config = {"frozen": True}

    format: Literal["json", "text"] = "text"
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format *result* for display according to *settings*."""
    settings = settings or OutputSettings()
    if settings.format == "json":
        return result.model_dump_json(indent=2, exclude_none=True)
    return render_result(result, verbose=settings.verbose)
