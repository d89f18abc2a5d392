from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

from timetable_engine.core.config import Settings, get_settings
from timetable_engine.core.exceptions import (
    ElectiveCapExceededError,
    ElectiveLockedError,
    ElectiveSelectionError,
    EmptyElectiveSelectionError,
    IncompleteElectiveSelectionError,
    UnknownElectiveOptionError,
)
from timetable_engine.schemas.timetable import (
    ClassifiedSlot,
    ElectiveGroup,
    ElectiveSelections,
    EnrolledCourse,
    SelectionResult,
    SelectionValue,
    Slot,
    SlotStatus,
)
from timetable_engine.services.alignment import coerce_grid
from timetable_engine.services.colors import subject_color, text_color_for

logger = logging.getLogger(__name__)

ELECTIVE_SUBJECT = re.compile(r"Electives?", re.IGNORECASE)
NOT_SELECTED_TEXT = "Elective (Not Selected)"


def selection_options(value: SelectionValue | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return [str(item) for item in value if item is not None and str(item).strip()]


def has_selection(value: SelectionValue | None) -> bool:
    return bool(selection_options(value))


class ElectiveResolver:
    """Turns elective cells into the student's chosen option names."""

    def __init__(
        self,
        selections: ElectiveSelections | None = None,
        groups: Sequence[ElectiveGroup] | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.selections = selections if selections is not None else {}
        self.groups = list(groups or [])
        self.settings = settings or get_settings()

    @property
    def group_names(self) -> set[str]:
        return {group.group_name for group in self.groups} | set(self.selections.keys())

    def selected_options(self) -> list[str]:
        options: list[str] = []
        for value in self.selections.values():
            options.extend(selection_options(value))
        return options

    def is_elective(self, slot: Slot) -> bool:
        if slot.status == SlotStatus.elective:
            return True
        subject = slot.subject
        if subject and subject in self.group_names:
            return True
        return bool(ELECTIVE_SUBJECT.search(subject))

    def resolve(self, slot: Slot, *, ordinal: int | None = None) -> ClassifiedSlot:
        chosen = self.selected_options()
        if not chosen:
            text = f"Elective {ordinal}" if ordinal else NOT_SELECTED_TEXT
            return ClassifiedSlot(
                kind="elective_unresolved",
                display_text=text,
                color_token=self.settings.elective_pending_color,
                text_color=text_color_for(self.settings.elective_pending_color),
                subject_name=text,
                status=slot.status,
            )

        names = ", ".join(f"{name} (elective)" for name in chosen)
        class_name = (slot.class_name or "").strip()
        return ClassifiedSlot(
            kind="elective_resolved",
            display_text=f"{names} — {class_name}" if class_name else names,
            color_token=self.settings.elective_resolved_color,
            text_color=text_color_for(self.settings.elective_resolved_color),
            subject_name=names,
            class_name=class_name,
            status=slot.status,
        )


class ElectiveSelectionStore:
    """Holds a student's elective choices; a group locks once it has a value."""

    def __init__(
        self,
        groups: Sequence[ElectiveGroup] | None = None,
        selections: ElectiveSelections | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._groups = {group.group_name: group for group in groups or []}
        self._selections = selections if selections is not None else {}

    @property
    def groups(self) -> list[ElectiveGroup]:
        return list(self._groups.values())

    @property
    def selections(self) -> ElectiveSelections:
        return dict(self._selections)

    def group(self, group_name: str) -> ElectiveGroup:
        group = self._groups.get(group_name)
        if group is None:
            # Groups missing from the class definition default to a single choice.
            return ElectiveGroup(group_name=group_name, choose_count=1, options=[])
        return group

    def is_locked(self, group_name: str) -> bool:
        return has_selection(self._selections.get(group_name))

    def toggle_option(self, group_name: str, option: str, draft: Sequence[str] | None = None) -> list[str]:
        """Return the pending choice list after clicking ``option``."""
        if self.is_locked(group_name):
            raise ElectiveLockedError(group_name)
        group = self.group(group_name)
        self._check_option(group, option)
        if not group.multi_choice:
            return [option]

        current = list(draft or [])
        if option in current:
            return [item for item in current if item != option]
        if len(current) >= group.choose_count:
            raise ElectiveCapExceededError(group_name, group.choose_count)
        return [*current, option]

    def commit(self, group_name: str, value: SelectionValue) -> SelectionValue:
        if self.is_locked(group_name):
            raise ElectiveLockedError(group_name)

        group = self.group(group_name)
        chosen: list[str] = []
        for option in selection_options(value):
            name = option.strip()
            if name not in chosen:
                chosen.append(name)
        if not chosen:
            raise EmptyElectiveSelectionError(group_name)
        for option in chosen:
            self._check_option(group, option)
        if len(chosen) > group.choose_count:
            raise ElectiveCapExceededError(group_name, group.choose_count)
        if self.settings.elective_require_full_selection and len(chosen) < group.choose_count:
            raise IncompleteElectiveSelectionError(group_name, group.choose_count)

        stored: SelectionValue = chosen if group.multi_choice else chosen[0]
        self._selections[group_name] = stored
        logger.info("Locked elective selection for %s: %s", group_name, ", ".join(chosen))
        return stored

    def save_student_elective(self, group_name: str, value: SelectionValue) -> SelectionResult:
        try:
            stored = self.commit(group_name, value)
        except ElectiveSelectionError as exc:
            logger.info("Rejected elective selection for %s (%s)", group_name, exc.reason)
            return SelectionResult(
                accepted=False,
                reason=exc.reason,
                message=exc.message,
                group_name=group_name,
                value=self._selections.get(group_name),
            )
        return SelectionResult(
            accepted=True,
            reason="saved",
            message="Elective saved.",
            group_name=group_name,
            value=stored,
        )

    def resolver(self, *, settings: Settings | None = None) -> ElectiveResolver:
        return ElectiveResolver(self._selections, self.groups, settings=settings or self.settings)

    @staticmethod
    def _check_option(group: ElectiveGroup, option: str) -> None:
        if group.options and option not in group.options:
            raise UnknownElectiveOptionError(group.group_name, option)


def _subject_entry(raw: object) -> tuple[str, str, bool]:
    if isinstance(raw, dict):
        name = str(raw.get("name") or "").strip()
        code = str(raw.get("code") or "").strip()
        is_elective = str(raw.get("courseType") or raw.get("course_type") or "").lower() == "elective"
        return name, code, is_elective
    return str(raw or "").strip(), "", False


def _timetable_subjects(timetable: object) -> Iterable[str]:
    for day in coerce_grid(timetable):
        for slot in day:
            if slot is None or not slot.subject:
                continue
            lowered = slot.subject.lower()
            if slot.status in (SlotStatus.break_, SlotStatus.free):
                continue
            if "break" in lowered or "free" in lowered or "lunch" in lowered:
                continue
            yield slot.subject


def enrolled_courses(
    subjects: Sequence[object],
    selections: ElectiveSelections | None = None,
    timetable: object = None,
    *,
    settings: Settings | None = None,
) -> list[EnrolledCourse]:
    """Mandatory subjects, chosen electives and timetable subjects, deduplicated by name."""
    settings = settings or get_settings()
    palette = settings.subject_color_palette
    candidates: list[tuple[str, str]] = []

    for raw in subjects or []:
        name, code, is_elective = _subject_entry(raw)
        if name and not is_elective:
            candidates.append((name, code))
    for value in (selections or {}).values():
        candidates.extend((name, "") for name in selection_options(value))
    candidates.extend((name, "") for name in _timetable_subjects(timetable))

    seen: set[str] = set()
    courses: list[EnrolledCourse] = []
    for name, code in candidates:
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        courses.append(EnrolledCourse(name=name, code=code, color=subject_color(name, palette)))
    return courses
