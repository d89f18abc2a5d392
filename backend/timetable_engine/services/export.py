from __future__ import annotations

import re
from typing import Sequence

from timetable_engine.core.config import Settings, get_settings
from timetable_engine.schemas.timetable import ClassifiedSlot, ExportMatrix
from timetable_engine.services.alignment import coerce_grid, label_descriptors
from timetable_engine.services.classifier import SlotClassifier
from timetable_engine.services.electives import ElectiveResolver

NON_WORD = re.compile(r"\W+", re.ASCII)


def filename_stem(identifier: object) -> str:
    return NON_WORD.sub("_", str(identifier or "class"))


def export_filename(identifier: object, extension: str) -> str:
    return f"{filename_stem(identifier)}_timetable.{extension.lstrip('.')}"


def export_cell(cell: ClassifiedSlot) -> str:
    if cell.kind == "lunch":
        return "Lunch"
    if cell.kind == "break":
        return "Break"
    if cell.kind == "free":
        return "Free"
    return cell.display_text


def build_matrix(
    grid: object,
    labels: Sequence[object] | None,
    working_days: int,
    day_names: Sequence[str] | None = None,
    *,
    identifier: object = None,
    resolver: ElectiveResolver | None = None,
    settings: Settings | None = None,
) -> ExportMatrix:
    """Lay the classified week out as one row per display period."""
    settings = settings or get_settings()
    day_names = list(day_names if day_names is not None else settings.weekday_labels)
    days = coerce_grid(grid)
    descriptors = label_descriptors(labels, timetable=days, settings=settings)
    day_count = max(0, min(int(working_days or 0), len(day_names)))

    classifier = SlotClassifier(resolver, settings=settings)
    columns = [classifier.classify_day(descriptors, days[index] if index < len(days) else []) for index in range(day_count)]

    rows: list[list[str]] = []
    for period, descriptor in enumerate(descriptors):
        rows.append([descriptor.normalized_label, *[export_cell(column[period]) for column in columns]])

    return ExportMatrix(
        header=["Time", *day_names[:day_count]],
        rows=rows,
        filename_stem=filename_stem(identifier),
    )
