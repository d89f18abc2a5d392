from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

from pydantic import ValidationError

from timetable_engine.core.config import Settings, get_settings
from timetable_engine.schemas.timetable import AlignedPeriod, LabelDescriptor, Slot

logger = logging.getLogger(__name__)

LUNCH_LABEL = re.compile(r"\bLUNCH\b", re.IGNORECASE)
BREAK_LABEL = re.compile(r"\bBREAK\b", re.IGNORECASE)
TIME_RANGE = re.compile(r"(\d{1,2}:\d{2})\s*-\s*(\d{1,2}:\d{2})")
HALF_DAY_MINUTES = 12 * 60


def describe_label(label: object, index: int) -> LabelDescriptor:
    original = "" if label is None else str(label)
    normalized = original.strip()
    has_lunch = bool(LUNCH_LABEL.search(normalized))
    has_break = not has_lunch and bool(BREAK_LABEL.search(normalized))
    if has_lunch:
        kind, display = "lunch", "Lunch"
    elif has_break:
        kind, display = "break", "Break"
    else:
        kind, display = "class", normalized
    return LabelDescriptor(
        index=index,
        original_label=original,
        normalized_label=normalized,
        display_label=display,
        kind=kind,
    )


def describe_labels(labels: Iterable[object] | None) -> list[LabelDescriptor]:
    if labels is None:
        return []
    return [describe_label(label, index) for index, label in enumerate(labels)]


def parse_clock(value: str) -> int | None:
    try:
        hours, minutes = value.strip().split(":")
        return int(hours) * 60 + int(minutes)
    except ValueError:
        return None


def parse_time_range(label: object) -> tuple[str, str] | None:
    """Return the ``H:MM`` start and end embedded in a slot label, if any."""
    match = TIME_RANGE.search("" if label is None else str(label))
    if not match:
        return None
    return match.group(1), match.group(2)


def label_minutes(label: object) -> tuple[int, int] | None:
    parsed = parse_time_range(label)
    if parsed is None:
        return None
    start, end = parse_clock(parsed[0]), parse_clock(parsed[1])
    if start is None or end is None:
        return None
    return start, end


def label_timeline(labels: Iterable[object]) -> list[tuple[int, int] | None]:
    """Start and end minutes of each label, read in order on one running clock.

    Labels written on a 12-hour clock ("12:00-1:00", "1:00-2:00") roll over to
    the afternoon whenever a time would otherwise run backwards.
    """
    timeline: list[tuple[int, int] | None] = []
    offset = latest = 0
    for label in labels:
        minutes = label_minutes(label)
        if minutes is None:
            timeline.append(None)
            continue
        points = []
        for value in minutes:
            while value + offset < latest:
                offset += HALF_DAY_MINUTES
            latest = value + offset
            points.append(latest)
        timeline.append((points[0], points[1]))
    return timeline


def coerce_slot(raw: object) -> Slot | None:
    if raw is None:
        return None
    if isinstance(raw, Slot):
        return raw
    if isinstance(raw, dict):
        try:
            return Slot.model_validate(raw)
        except ValidationError:
            logger.debug("Treating malformed timetable cell as free: %r", raw)
            return None
    logger.debug("Treating unsupported timetable cell type %s as free", type(raw).__name__)
    return None


def coerce_day(raw: object) -> list[Slot | None]:
    if not isinstance(raw, (list, tuple)):
        return []
    return [coerce_slot(cell) for cell in raw]


def coerce_grid(raw: object) -> list[list[Slot | None]]:
    if not isinstance(raw, (list, tuple)):
        return []
    return [coerce_day(day) for day in raw]


def resolve_time_slots(
    time_slots: Sequence[object] | None,
    *,
    hours_per_day: int | None = None,
    timetable: Sequence[Sequence[object]] | None = None,
    settings: Settings | None = None,
) -> list[str]:
    if time_slots:
        return ["" if label is None else str(label) for label in time_slots]

    settings = settings or get_settings()
    if hours_per_day and hours_per_day > 0:
        period_count = int(hours_per_day)
    else:
        period_count = max((len(day) for day in coerce_grid(timetable)), default=0)
        if period_count == 0:
            period_count = len(settings.default_time_slots)

    labels: list[str] = []
    for index in range(period_count):
        if index < len(settings.default_time_slots):
            labels.append(settings.default_time_slots[index])
        else:
            labels.append(f"{9 + index}:00-{10 + index}:00")
    return labels


def align_day(descriptors: Sequence[LabelDescriptor], data: Sequence[Slot | None]) -> list[AlignedPeriod]:
    """Map each display period onto the day's data cells.

    Break/lunch headers only consume a data cell when that cell is itself a
    break/lunch marker; otherwise they are synthetic and the pointer stays put.
    """
    aligned: list[AlignedPeriod] = []
    pointer = 0
    for descriptor in descriptors:
        current = data[pointer] if pointer < len(data) else None
        if descriptor.is_interval and (current is None or not current.is_break_or_lunch):
            aligned.append(AlignedPeriod(display_index=descriptor.index, descriptor=descriptor, synthetic=True))
            continue
        if pointer >= len(data):
            aligned.append(AlignedPeriod(display_index=descriptor.index, descriptor=descriptor))
            continue
        aligned.append(AlignedPeriod(display_index=descriptor.index, descriptor=descriptor, data_index=pointer))
        pointer += 1

    if pointer < len(data):
        logger.debug("%d timetable cell(s) are not covered by slot labels", len(data) - pointer)
    return aligned


def label_descriptors(
    labels: Sequence[object] | None,
    *,
    timetable: object = None,
    hours_per_day: int | None = None,
    settings: Settings | None = None,
) -> list[LabelDescriptor]:
    """Descriptors for ``labels``, or for the default slot labels when none are given."""
    labels = list(labels or [])
    if labels and all(isinstance(label, LabelDescriptor) for label in labels):
        return labels
    return describe_labels(
        resolve_time_slots(labels, hours_per_day=hours_per_day, timetable=timetable, settings=settings)
    )
