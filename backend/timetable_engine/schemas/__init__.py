from timetable_engine.schemas.timetable import (  # noqa: F401
    AlignedPeriod,
    ClassifiedSlot,
    CompletionProgress,
    ElectiveGroup,
    ElectiveSelections,
    EnrolledCourse,
    ExportArtifact,
    ExportMatrix,
    LabelDescriptor,
    SelectionResult,
    Slot,
    SlotStatus,
    WeeklyStats,
)
