import pytest

from timetable_engine.core.config import Settings
from timetable_engine.schemas.timetable import ElectiveGroup


@pytest.fixture()
def settings():
    # Ignore backend/.env and TIMETABLE_* overrides from the developer's shell.
    return Settings(_env_file=None)


@pytest.fixture()
def lunch_labels():
    return ["9:00-10:00", "10:00-11:00 (LUNCH)", "11:00-12:00"]


@pytest.fixture()
def week_grid():
    return [
        [
            {"subjectName": "Math", "className": "10A"},
            {"subjectName": "Physics", "className": "10A"},
            {"subjectName": "Break", "status": "break"},
            {"subjectName": "Elective", "status": "elective"},
            None,
        ],
        [
            {"subjectName": "Chemistry"},
            {"subjectName": "Free", "status": "free"},
            {"subjectName": "Short Break", "status": "break"},
            {"subjectName": "Math"},
            {"subjectName": "Elective", "status": "elective"},
        ],
        [
            {"subjectName": "Biology"},
            {"subjectName": "Lunch"},
            {"subjectName": "History"},
        ],
    ]


@pytest.fixture()
def week_labels():
    return ["9:00-9:50", "9:50-10:40", "Break", "11:00-11:50", "12:00 - 12:50 (LUNCH)", "1:00-1:50"]


@pytest.fixture()
def elective_groups():
    return [
        ElectiveGroup(groupName="Group A", chooseCount=1, options=["Option 1", "Option 2"]),
        ElectiveGroup(groupName="Group B", chooseCount=2, options=["A", "B", "C"]),
    ]
