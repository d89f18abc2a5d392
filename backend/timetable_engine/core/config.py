from functools import lru_cache
import json
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # Resolve to backend/.env so the engine picks up overrides from any cwd.
    model_config = SettingsConfigDict(
        env_file=str(BACKEND_ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="TIMETABLE_",
    )

    project_name: str = "Timetable Engine"
    environment: str = "development"
    log_level: str | None = None

    working_days: int = 6
    hours_per_day: int = 7
    weekday_labels: list[str] = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
    default_time_slots: list[str] = [
        "9:00-10:00",
        "10:00-11:00",
        "11:00-12:00",
        "12:00-1:00",
        "1:00-2:00",
        "2:00-3:00",
        "3:00-4:00",
        "4:00-5:00",
    ]
    default_class_minutes: int = 60

    subject_color_palette: list[str] = [
        "#155DFC",
        "#10B981",
        "#F59E0B",
        "#EF4444",
        "#8B5CF6",
        "#06B6D4",
        "#F97316",
        "#84CC16",
        "#0EA5E9",
        "#DB2777",
    ]
    break_color: str = "#3B82F6"
    lunch_color: str = "#F59E0B"
    free_color: str = "#F5F5F5"
    elective_pending_color: str = "#FEF3C7"
    elective_resolved_color: str = "#DCFCE7"

    # "Elective 1", "Elective 2" per day instead of "Elective (Not Selected)".
    elective_ordinal_labels: bool = False
    # Reject commits with fewer options than the group's choose count.
    elective_require_full_selection: bool = False

    xlsx_sheet_title: str = "Timetable"
    xlsx_time_column_width: int = 14
    xlsx_day_column_width: int = 22
    pdf_margin_points: int = 40
    pdf_time_column_width: int = 90
    pdf_line_height: int = 16

    @field_validator("weekday_labels", "default_time_slots", "subject_color_palette", mode="before")
    @classmethod
    def split_list_values(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("working_days", "hours_per_day", "default_class_minutes")
    @classmethod
    def ensure_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Value must be at least 1")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
