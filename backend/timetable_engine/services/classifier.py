from __future__ import annotations

import re
from typing import Sequence

from timetable_engine.core.config import Settings, get_settings
from timetable_engine.schemas.timetable import (
    AlignedPeriod,
    ClassifiedSlot,
    LabelDescriptor,
    Slot,
    SlotStatus,
)
from timetable_engine.services.alignment import align_day, label_descriptors, parse_time_range
from timetable_engine.services.colors import subject_color, text_color_for
from timetable_engine.services.electives import ElectiveResolver

BREAK_SUBJECT = re.compile(r"break", re.IGNORECASE)
LUNCH_SUBJECT = re.compile(r"lunch", re.IGNORECASE)


class SlotClassifier:
    """Resolves a single timetable cell into what the dashboard shows for it."""

    def __init__(self, resolver: ElectiveResolver | None = None, *, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.resolver = resolver or ElectiveResolver(settings=self.settings)

    def _fixed(self, kind: str, text: str, color: str, slot: Slot | None = None) -> ClassifiedSlot:
        return ClassifiedSlot(
            kind=kind,
            display_text=text,
            color_token=color,
            text_color=text_color_for(color),
            subject_name=text,
            status=slot.status if slot is not None else None,
        )

    def is_elective(self, slot: Slot | None) -> bool:
        if slot is None or self._is_free(slot) or self._interval_kind(slot):
            return False
        return self.resolver.is_elective(slot)

    @staticmethod
    def _is_free(slot: Slot) -> bool:
        if slot.status == SlotStatus.free or slot.subject == "Free":
            return True
        # A blank cell that is not a break or elective marker carries nothing to show.
        return not slot.subject and slot.status not in (SlotStatus.break_, SlotStatus.elective)

    @staticmethod
    def _interval_kind(slot: Slot) -> str | None:
        if slot.status == SlotStatus.break_ or BREAK_SUBJECT.search(slot.subject_name):
            return "break"
        if LUNCH_SUBJECT.search(slot.subject_name):
            return "lunch"
        return None

    def classify(
        self,
        slot: Slot | None,
        descriptor: LabelDescriptor | None = None,
        *,
        synthetic: bool | None = None,
        elective_ordinal: int | None = None,
        data_index: int | None = None,
    ) -> ClassifiedSlot:
        settings = self.settings
        if synthetic is None:
            # Same rule the aligner uses: an interval header wins unless the cell is itself an interval.
            synthetic = descriptor is not None and descriptor.is_interval and (slot is None or not slot.is_break_or_lunch)
        if synthetic and descriptor is not None and descriptor.is_interval:
            if descriptor.kind == "lunch":
                result = self._fixed("lunch", "Lunch", settings.lunch_color)
            else:
                result = self._fixed("break", "Break", settings.break_color)
        elif slot is None or self._is_free(slot):
            result = self._fixed("free", "Free", settings.free_color, slot)
        elif self._interval_kind(slot) == "break":
            result = self._fixed("break", "Break", settings.break_color, slot)
        elif self._interval_kind(slot) == "lunch":
            result = self._fixed("lunch", "Lunch", settings.lunch_color, slot)
        elif self.resolver.is_elective(slot):
            result = self.resolver.resolve(slot, ordinal=elective_ordinal)
        else:
            class_name = (slot.class_name or "").strip()
            color = subject_color(slot.subject, settings.subject_color_palette)
            result = ClassifiedSlot(
                kind="class",
                display_text=f"{slot.subject} — {class_name}" if class_name else slot.subject,
                color_token=color,
                text_color=text_color_for(color),
                subject_name=slot.subject,
                class_name=class_name,
                status=slot.status,
            )

        times = parse_time_range(descriptor.normalized_label) if descriptor is not None else None
        return result.model_copy(
            update={
                "start_time": times[0] if times else None,
                "end_time": times[1] if times else None,
                "period_index": descriptor.index if descriptor is not None else None,
                "data_index": data_index,
            }
        )

    def classify_aligned(
        self,
        aligned: Sequence[AlignedPeriod],
        data: Sequence[Slot | None],
    ) -> list[ClassifiedSlot]:
        """Classify one aligned day, numbering unresolved electives per day."""
        row: list[ClassifiedSlot] = []
        elective_counter = 0
        for period in aligned:
            slot = None
            if period.data_index is not None and period.data_index < len(data):
                slot = data[period.data_index]
            ordinal = None
            if not period.synthetic and self.is_elective(slot):
                elective_counter += 1
                if self.settings.elective_ordinal_labels:
                    ordinal = elective_counter
            row.append(
                self.classify(
                    slot,
                    period.descriptor,
                    synthetic=period.synthetic,
                    elective_ordinal=ordinal,
                    data_index=period.data_index,
                )
            )
        return row

    def classify_day(
        self,
        descriptors: Sequence[LabelDescriptor],
        data: Sequence[Slot | None],
    ) -> list[ClassifiedSlot]:
        if not descriptors:
            descriptors = label_descriptors(None, timetable=[list(data)], settings=self.settings)
        return self.classify_aligned(align_day(descriptors, data), data)


def classify(
    slot: Slot | None,
    descriptor: LabelDescriptor | None = None,
    *,
    synthetic: bool | None = None,
    resolver: ElectiveResolver | None = None,
    elective_ordinal: int | None = None,
    settings: Settings | None = None,
) -> ClassifiedSlot:
    return SlotClassifier(resolver, settings=settings).classify(
        slot,
        descriptor,
        synthetic=synthetic,
        elective_ordinal=elective_ordinal,
    )
