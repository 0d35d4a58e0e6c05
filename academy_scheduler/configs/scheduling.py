"""
Scheduling configuration settings.

Grid geometry used by drag relocation, generation defaults and limits.

Dependencies: pydantic, pydantic_settings
System role: Tunables for the schedule grid and session generator
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from academy_scheduler.configs.base import BaseSettings
from academy_scheduler.core.enums import SessionMode


class SchedulingSettings(BaseSettings):
    """Time grid and generation settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SCHEDULING_",
        case_sensitive=False,
        extra="ignore",
    )

    grid_start_hour: int = Field(default=8, ge=0, le=23, description="First hour shown on the grid")
    grid_end_hour: int = Field(default=22, ge=1, le=24, description="Last hour shown on the grid")
    pixels_per_hour: int = Field(default=60, gt=0, description="Vertical pixels per grid hour")
    snap_granularity: int = Field(
        default=30,
        gt=0,
        le=60,
        description="Minutes a proposed start time is snapped to",
    )
    default_block_minutes: int = Field(
        default=120,
        gt=0,
        description="Length of a block created by clicking an empty grid cell",
    )

    default_session_mode: SessionMode = Field(
        default=SessionMode.IN_PERSON,
        description="Mode for generated sessions held in physical classrooms",
    )
    default_generation_days: int = Field(
        default=28,
        gt=0,
        description="Days covered when generation is requested without an end date",
    )
    max_generation_days: int = Field(
        default=366,
        gt=0,
        description="Largest date range accepted by one generation batch",
    )

    @model_validator(mode="after")
    def _check_grid_hours(self) -> "SchedulingSettings":
        if self.grid_end_hour <= self.grid_start_hour:
            raise ValueError("grid_end_hour must be after grid_start_hour")
        return self
