"""Configuration for the merged date/time extractor.

Uses Pydantic settings for environment-based configuration,
following the same pattern as other service configs in the project.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MergeConfig(BaseSettings):
    """
    Option flags for the merged date/time extractor.

    All settings can be overridden via environment variables with MERGE_ prefix.
    Example: MERGE_CALENDAR_MODE=true

    Attributes:
        enable_preview: Strip superfluous words before detection and run
            timezone detection.
        skip_from_to_merge: Discard "from X to Y" candidates during merging.
        extended_types: Run the alternative-expression reinterpretation pass.
        calendar_mode: Remove spans matching the calendar deny list.
        candidates_dir: Directory of JSONL candidate pattern files used by
            the default regex candidate source.
    """

    model_config = SettingsConfigDict(
        env_prefix="MERGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    enable_preview: bool = Field(
        default=False,
        description="Enable superfluous-word stripping and timezone detection.",
    )
    skip_from_to_merge: bool = Field(
        default=False,
        description="Skip candidates whose text is a 'from X to Y' range marker.",
    )
    extended_types: bool = Field(
        default=False,
        description="Reinterpret time spans following a datetime as alternatives.",
    )
    calendar_mode: bool = Field(
        default=False,
        description="Apply the calendar filter-word deny list.",
    )

    candidates_dir: Path = Field(
        default=Path(__file__).parent / "candidates",
        description="Directory containing JSONL candidate pattern files.",
    )
