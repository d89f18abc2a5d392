from __future__ import annotations

from datetime import datetime
from typing import Sequence

from timetable_engine.core.config import Settings, get_settings
from timetable_engine.schemas.timetable import (
    ClassifiedSlot,
    CompletionProgress,
    ElectiveGroup,
    ElectiveSelections,
    ExportArtifact,
    ExportMatrix,
    LabelDescriptor,
    WeeklyStats,
)
from timetable_engine.services.alignment import coerce_grid, describe_labels, resolve_time_slots
from timetable_engine.services.classifier import SlotClassifier
from timetable_engine.services.electives import ElectiveResolver
from timetable_engine.services.encoders import export_timetable
from timetable_engine.services.export import build_matrix
from timetable_engine.services.statistics import aggregate, completion_progress


class TimetableRenderer:
    """Everything a student or teacher view derives from one weekly timetable.

    Nothing is cached: each call reads the current grid, labels and elective
    selections, so a confirmed elective shows up on the next render.
    """

    def __init__(
        self,
        timetable: object,
        time_slots: Sequence[object] | None = None,
        *,
        working_days: int | None = None,
        hours_per_day: int | None = None,
        selections: ElectiveSelections | None = None,
        elective_groups: Sequence[ElectiveGroup] | None = None,
        identifier: object = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.timetable = timetable
        self.time_slots = time_slots
        self.working_days = working_days if working_days is not None else self.settings.working_days
        self.hours_per_day = hours_per_day if hours_per_day is not None else self.settings.hours_per_day
        self.selections = selections if selections is not None else {}
        self.elective_groups = list(elective_groups or [])
        self.identifier = identifier

    @property
    def labels(self) -> list[str]:
        return resolve_time_slots(
            self.time_slots,
            hours_per_day=self.hours_per_day,
            timetable=self.timetable,
            settings=self.settings,
        )

    @property
    def descriptors(self) -> list[LabelDescriptor]:
        return describe_labels(self.labels)

    @property
    def resolver(self) -> ElectiveResolver:
        return ElectiveResolver(self.selections, self.elective_groups, settings=self.settings)

    def day(self, day_index: int) -> list[ClassifiedSlot]:
        days = coerce_grid(self.timetable)
        data = days[day_index] if 0 <= day_index < len(days) else []
        classifier = SlotClassifier(self.resolver, settings=self.settings)
        return classifier.classify_day(self.descriptors, data)

    def week(self) -> list[list[ClassifiedSlot]]:
        day_count = max(0, min(int(self.working_days), len(self.settings.weekday_labels)))
        return [self.day(index) for index in range(day_count)]

    def today(self, now: datetime) -> list[ClassifiedSlot]:
        """Periods for ``now``'s weekday; empty on days the school is closed."""
        index = now.weekday()
        if index >= self.working_days:
            return []
        return self.day(index)

    def stats(self) -> WeeklyStats:
        return aggregate(
            self.timetable,
            self.descriptors,
            self.working_days,
            self.hours_per_day,
            resolver=self.resolver,
            settings=self.settings,
        )

    def progress(self, now: datetime) -> CompletionProgress:
        return completion_progress(
            self.timetable,
            self.descriptors,
            self.working_days,
            self.hours_per_day,
            now=now,
            resolver=self.resolver,
            settings=self.settings,
        )

    def export_matrix(self, day_names: Sequence[str] | None = None) -> ExportMatrix:
        return build_matrix(
            self.timetable,
            self.descriptors,
            self.working_days,
            day_names,
            identifier=self.identifier,
            resolver=self.resolver,
            settings=self.settings,
        )

    def export(self, fmt: str, day_names: Sequence[str] | None = None) -> ExportArtifact:
        return export_timetable(
            self.export_matrix(day_names),
            fmt,
            identifier=self.identifier,
            settings=self.settings,
        )
