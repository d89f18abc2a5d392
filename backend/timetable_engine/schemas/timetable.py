from __future__ import annotations

import re
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

BREAK_OR_LUNCH_SUBJECT = re.compile(r"break|lunch", re.IGNORECASE)


class SlotStatus(str, Enum):
    free = "free"
    break_ = "break"
    elective = "elective"
    confirmed = "confirmed"
    sub_request = "sub_request"


LabelKind = Literal["class", "break", "lunch"]

SlotKind = Literal[
    "class",
    "free",
    "break",
    "lunch",
    "elective_unresolved",
    "elective_resolved",
]

SelectionValue = Union[str, list[str]]
ElectiveSelections = dict[str, SelectionValue]


class Slot(BaseModel):
    subject_name: str = Field(default="", alias="subjectName")
    class_name: str | None = Field(default=None, alias="className")
    teacher_id: str | None = Field(default=None, alias="teacherId")
    status: SlotStatus | None = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @field_validator("subject_name", mode="before")
    @classmethod
    def coerce_subject_name(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value)

    @field_validator("class_name", "teacher_id", mode="before")
    @classmethod
    def coerce_optional_text(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: object) -> str | None:
        # Unknown statuses fall back to a plain assignment.
        if value is None:
            return None
        if isinstance(value, SlotStatus):
            return value.value
        normalized = str(value).strip().lower()
        if normalized in {status.value for status in SlotStatus}:
            return normalized
        return None

    @property
    def subject(self) -> str:
        return self.subject_name.strip()

    @property
    def is_break_or_lunch(self) -> bool:
        return self.status == SlotStatus.break_ or bool(BREAK_OR_LUNCH_SUBJECT.search(self.subject_name))


class LabelDescriptor(BaseModel):
    index: int
    original_label: str
    normalized_label: str
    display_label: str
    kind: LabelKind = "class"

    model_config = ConfigDict(frozen=True)

    @property
    def is_interval(self) -> bool:
        return self.kind in ("break", "lunch")


class AlignedPeriod(BaseModel):
    display_index: int
    descriptor: LabelDescriptor
    data_index: int | None = None
    synthetic: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def consumes_data(self) -> bool:
        """True when the period is backed by a data cell.

        A non-synthetic period past the end of the day's data consumes nothing,
        so count consumption with this flag rather than ``not synthetic``.
        """
        return self.data_index is not None


class ClassifiedSlot(BaseModel):
    kind: SlotKind
    display_text: str
    color_token: str
    text_color: str
    start_time: str | None = None
    end_time: str | None = None
    subject_name: str = ""
    class_name: str = ""
    status: SlotStatus | None = None
    period_index: int | None = None
    data_index: int | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_interval(self) -> bool:
        return self.kind in ("break", "lunch")

    @property
    def is_teaching(self) -> bool:
        return self.kind not in ("break", "lunch", "free")


class ElectiveGroup(BaseModel):
    group_name: str = Field(min_length=1, max_length=200, alias="groupName")
    choose_count: int = Field(default=1, ge=1, alias="chooseCount")
    options: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("group_name")
    @classmethod
    def strip_group_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Elective group name cannot be blank")
        return trimmed

    @field_validator("options")
    @classmethod
    def clean_options(cls, value: list[str]) -> list[str]:
        cleaned: list[str] = []
        for option in value:
            name = str(option).strip()
            if name and name not in cleaned:
                cleaned.append(name)
        return cleaned

    @property
    def multi_choice(self) -> bool:
        return self.choose_count > 1


class SelectionResult(BaseModel):
    accepted: bool
    reason: Literal["saved", "locked", "cap_exceeded", "incomplete", "unknown_option", "empty"]
    message: str
    group_name: str
    value: SelectionValue | None = None


class EnrolledCourse(BaseModel):
    name: str
    code: str = ""
    color: str


class WeeklyStats(BaseModel):
    total_classes: int = 0
    free_periods: int = 0
    break_periods: int = 0
    weekly_hours: float = 0.0
    class_duration_minutes: int = 60

    @property
    def counted_periods(self) -> int:
        return self.total_classes + self.free_periods + self.break_periods


class CompletionProgress(BaseModel):
    completed: int = 0
    total: int = 0

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return min(100, round(self.completed / self.total * 100))


class ExportMatrix(BaseModel):
    header: list[str]
    rows: list[list[str]] = Field(default_factory=list)
    filename_stem: str = "class"

    def as_rows(self) -> list[list[str]]:
        return [list(self.header), *[list(row) for row in self.rows]]

    @property
    def column_count(self) -> int:
        return len(self.header)


class ExportArtifact(BaseModel):
    filename: str
    media_type: str
    content: bytes
