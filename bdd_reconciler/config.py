"""Configuration for directory scans."""

from collections.abc import Sequence

from pydantic import BaseModel, Field


class ScanConfig(BaseModel):
    """Configuration for collecting report files from a directory."""

    patterns: Sequence[str] = ("*.xml", "*.trx", "*.json")
    recursive: bool = True
    max_concurrency: int = Field(default=8, ge=1)
    report_format: str | None = Field(
        default=None,
        description="Parser key forcing one format for every file, e.g. 'nunit3'",
    )
