from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Iterable, Sequence

from timetable_engine.core.config import Settings, get_settings
from timetable_engine.schemas.timetable import (
    ClassifiedSlot,
    CompletionProgress,
    LabelDescriptor,
    Slot,
    WeeklyStats,
)
from timetable_engine.services.alignment import (
    align_day,
    coerce_grid,
    describe_labels,
    label_descriptors,
    label_timeline,
)
from timetable_engine.services.classifier import SlotClassifier
from timetable_engine.services.electives import ElectiveResolver

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def _as_descriptors(labels: Sequence[object] | None) -> list[LabelDescriptor]:
    labels = list(labels or [])
    if all(isinstance(label, LabelDescriptor) for label in labels):
        return labels
    return describe_labels(labels)


def infer_class_duration(labels: Sequence[object] | None, *, default: int = 60) -> int:
    """Minutes of the first ordinary ``H:MM - H:MM`` label, or ``default``."""
    descriptors = _as_descriptors(labels)
    timeline = label_timeline(descriptor.normalized_label for descriptor in descriptors)
    for descriptor, minutes in zip(descriptors, timeline):
        if descriptor.is_interval:
            continue
        if minutes is not None:
            start, end = minutes
            return max(1, (end - start + MINUTES_PER_DAY) % MINUTES_PER_DAY)
    return default


def weekly_hours(total_classes: int, duration_minutes: int) -> float:
    """Class hours rounded to one decimal, halves rounding up."""
    return math.floor(total_classes * duration_minutes / 6 + 0.5) / 10


def counted_periods(
    classifier: SlotClassifier,
    descriptors: Sequence[LabelDescriptor],
    day: Sequence[Slot | None],
    hours_per_day: int,
) -> Iterable[ClassifiedSlot]:
    """Yield the classified cells of one day that count toward the weekly totals.

    Only data-backed periods inside ``hours_per_day`` count. Cells the labels do
    not reach are still classified so nothing in the clipped grid is dropped.
    """
    limit = max(0, min(int(hours_per_day or 0), len(day)))
    aligned = align_day(descriptors, day)
    row = classifier.classify_aligned(aligned, day)
    reached = 0
    for period, cell in zip(aligned, row):
        if period.data_index is None:
            continue
        reached = max(reached, period.data_index + 1)
        if period.data_index < limit:
            yield cell
    for index in range(reached, limit):
        yield classifier.classify(day[index], None, synthetic=False, data_index=index)


def aggregate(
    grid: object,
    labels: Sequence[object] | None,
    working_days: int,
    hours_per_day: int,
    *,
    resolver: ElectiveResolver | None = None,
    settings: Settings | None = None,
) -> WeeklyStats:
    settings = settings or get_settings()
    classifier = SlotClassifier(resolver, settings=settings)
    days = coerce_grid(grid)
    descriptors = label_descriptors(labels, timetable=days, hours_per_day=hours_per_day, settings=settings)

    total = free = intervals = 0
    for day in days[: max(0, min(int(working_days or 0), len(days)))]:
        for cell in counted_periods(classifier, descriptors, day, hours_per_day):
            if cell.is_interval:
                intervals += 1
            elif cell.kind == "free":
                free += 1
            else:
                total += 1

    duration = infer_class_duration(descriptors, default=settings.default_class_minutes)
    stats = WeeklyStats(
        total_classes=total,
        free_periods=free,
        break_periods=intervals,
        weekly_hours=weekly_hours(total, duration),
        class_duration_minutes=duration,
    )
    logger.debug(
        "Aggregated %d class(es), %d free and %d break period(s) over %d day(s)",
        total,
        free,
        intervals,
        min(int(working_days or 0), len(days)),
    )
    return stats


def aggregate_many(
    grids: Iterable[object],
    labels: Sequence[object] | None,
    working_days: int,
    hours_per_day: int,
    *,
    resolver: ElectiveResolver | None = None,
    settings: Settings | None = None,
) -> WeeklyStats:
    """Sum the weekly statistics of several class timetables."""
    settings = settings or get_settings()
    descriptors = label_descriptors(labels, hours_per_day=hours_per_day, settings=settings)
    total = free = intervals = 0
    for grid in grids:
        stats = aggregate(grid, descriptors, working_days, hours_per_day, resolver=resolver, settings=settings)
        total += stats.total_classes
        free += stats.free_periods
        intervals += stats.break_periods
    duration = infer_class_duration(descriptors, default=settings.default_class_minutes)
    return WeeklyStats(
        total_classes=total,
        free_periods=free,
        break_periods=intervals,
        weekly_hours=weekly_hours(total, duration),
        class_duration_minutes=duration,
    )


def completion_progress(
    grid: object,
    labels: Sequence[object] | None,
    working_days: int,
    hours_per_day: int,
    *,
    now: datetime,
    resolver: ElectiveResolver | None = None,
    settings: Settings | None = None,
) -> CompletionProgress:
    """Count the week's class periods that have already ended at ``now``.

    Day 0 is Monday. A period on the current weekday counts once its label's end
    time has passed; periods without a parseable label only count on earlier days.
    Labels on a 12-hour clock are read as running into the afternoon.
    """
    classifier = SlotClassifier(resolver, settings=settings)
    days = coerce_grid(grid)
    descriptors = label_descriptors(labels, timetable=days, hours_per_day=hours_per_day, settings=settings)
    timeline = label_timeline(descriptor.normalized_label for descriptor in descriptors)
    today = now.weekday()
    now_minutes = now.hour * 60 + now.minute

    completed = total = 0
    for day_index, day in enumerate(days[: max(0, min(int(working_days or 0), len(days)))]):
        for cell in counted_periods(classifier, descriptors, day, hours_per_day):
            if not cell.is_teaching:
                continue
            total += 1
            if day_index < today:
                completed += 1
            elif day_index == today and cell.period_index is not None:
                minutes = timeline[cell.period_index]
                if minutes is not None and minutes[1] <= now_minutes:
                    completed += 1
    return CompletionProgress(completed=completed, total=total)
