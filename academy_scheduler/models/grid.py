"""
Grid models and schemas.

Layout responses carry each block's vertical geometry so clients only
position what they receive.

Dependencies: pydantic
System role: Grid API contracts
"""

import uuid
import datetime as dt

from pydantic import BaseModel, Field, model_validator

from academy_scheduler.configs.scheduling import SchedulingSettings
from academy_scheduler.core import time_grid
from academy_scheduler.core.enums import Classroom, DayOfWeek, SessionStatus
from academy_scheduler.core.grid import Buckets, GridItem
from academy_scheduler.models.common import TIME_PATTERN


class GridItemResponse(BaseModel):
    """One block on the grid."""

    id: uuid.UUID
    day: DayOfWeek
    date: dt.date | None = None
    start_time: str
    end_time: str
    classroom: Classroom
    top: float = Field(description="Offset from the top of the grid, in pixels")
    height: float = Field(description="Block height, in pixels")
    blocking: bool = True
    group_id: uuid.UUID | None = None
    status: SessionStatus | None = None

    @classmethod
    def from_item(cls, item: GridItem, settings: SchedulingSettings) -> "GridItemResponse":
        top, height = time_grid.block_geometry(
            item.start_time, item.end_time, settings.grid_start_hour, settings.pixels_per_hour
        )
        source = item.source
        return cls(
            id=item.id,
            day=item.day,
            date=item.date,
            start_time=item.start_time,
            end_time=item.end_time,
            classroom=item.classroom,
            top=top,
            height=height,
            blocking=item.blocking,
            group_id=getattr(source, "group_id", None),
            status=getattr(source, "status", None),
        )


def layout(
    buckets: Buckets,
    settings: SchedulingSettings,
) -> dict[DayOfWeek, dict[Classroom, list[GridItemResponse]]]:
    return {
        day: {
            room: [GridItemResponse.from_item(item, settings) for item in items]
            for room, items in rooms.items()
        }
        for day, rooms in buckets.items()
    }


class GridGeometry(BaseModel):
    """Grid dimensions clients render with."""

    grid_start_hour: int
    grid_end_hour: int
    pixels_per_hour: int
    snap_granularity: int
    default_block_minutes: int

    @classmethod
    def from_settings(cls, settings: SchedulingSettings) -> "GridGeometry":
        return cls(
            grid_start_hour=settings.grid_start_hour,
            grid_end_hour=settings.grid_end_hour,
            pixels_per_hour=settings.pixels_per_hour,
            snap_granularity=settings.snap_granularity,
            default_block_minutes=settings.default_block_minutes,
        )


class ScheduleGridResponse(BaseModel):
    """Weekly schedules bucketed by day and classroom."""

    geometry: GridGeometry
    days: dict[DayOfWeek, dict[Classroom, list[GridItemResponse]]]


class SessionGridResponse(BaseModel):
    """Sessions of one week bucketed by day and classroom."""

    geometry: GridGeometry
    week_start: dt.date
    dates: dict[DayOfWeek, dt.date]
    today: dt.date | None = Field(None, description="Today's date when it falls in the week")
    days: dict[DayOfWeek, dict[Classroom, list[GridItemResponse]]]


class MoveRequest(BaseModel):
    """
    Destination of a dragged block.

    Give either start_time (end_time optional, duration kept otherwise) or a
    pointer_offset in pixels from the top of the grid.
    """

    day: DayOfWeek
    start_time: str | None = Field(None, pattern=TIME_PATTERN)
    end_time: str | None = Field(None, pattern=TIME_PATTERN)
    classroom: Classroom | None = None
    pointer_offset: float | None = Field(None, ge=0)
    expected_version: int | None = Field(None, ge=1, description="Sessions only")

    @model_validator(mode="after")
    def _check_destination(self) -> "MoveRequest":
        if self.start_time is None and self.pointer_offset is None:
            raise ValueError("start_time or pointer_offset is required")
        return self
