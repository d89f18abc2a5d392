from datetime import datetime

import pytest

from timetable_engine.services.alignment import coerce_grid
from timetable_engine.services.electives import ElectiveResolver
from timetable_engine.services.schedule import TimetableRenderer
from timetable_engine.services.statistics import (
    aggregate,
    aggregate_many,
    completion_progress,
    infer_class_duration,
    weekly_hours,
)


def test_example_week(settings, lunch_labels):
    grid = [[{"subjectName": "Math"}, {"subjectName": "Free"}]]
    stats = aggregate(grid, lunch_labels, working_days=1, hours_per_day=7, settings=settings)

    assert stats.total_classes == 1
    assert stats.free_periods == 1
    assert stats.break_periods == 0
    assert stats.weekly_hours == 1.0


def test_full_week_counts(settings, week_grid, week_labels):
    stats = aggregate(week_grid, week_labels, working_days=3, hours_per_day=5, settings=settings)

    assert stats.total_classes == 8
    assert stats.free_periods == 2
    assert stats.break_periods == 3
    assert stats.class_duration_minutes == 50
    assert stats.weekly_hours == 6.7


def test_clips_to_declared_bounds(settings, week_grid, week_labels):
    stats = aggregate(week_grid, week_labels, working_days=2, hours_per_day=3, settings=settings)
    # Monday: Math, Physics, Break. Tuesday: Chemistry, Free, Break.
    assert (stats.total_classes, stats.free_periods, stats.break_periods) == (3, 1, 2)

    assert aggregate(week_grid, week_labels, working_days=0, hours_per_day=5, settings=settings).counted_periods == 0
    assert aggregate("garbage", week_labels, working_days=5, hours_per_day=5, settings=settings).counted_periods == 0


@pytest.mark.parametrize("working_days, hours_per_day", [(1, 1), (2, 4), (3, 5), (6, 9)])
def test_every_counted_cell_is_accounted_for(settings, week_grid, week_labels, working_days, hours_per_day):
    stats = aggregate(week_grid, week_labels, working_days, hours_per_day, settings=settings)
    days = coerce_grid(week_grid)[:working_days]
    assert stats.counted_periods == sum(min(hours_per_day, len(day)) for day in days)


def test_cells_past_the_last_label_still_count(settings):
    grid = [[{"subjectName": "Math"}, {"subjectName": "Art"}, None]]
    stats = aggregate(grid, ["9:00-10:00"], working_days=1, hours_per_day=3, settings=settings)
    assert (stats.total_classes, stats.free_periods) == (2, 1)


def test_electives_count_as_classes(settings):
    grid = [[{"subjectName": "Elective", "status": "elective"}, {"subjectName": "Free"}]]
    resolver = ElectiveResolver({"Group A": "Art"}, settings=settings)
    stats = aggregate(grid, ["9:00-10:00", "10:00-11:00"], 1, 2, resolver=resolver, settings=settings)
    assert (stats.total_classes, stats.free_periods) == (1, 1)


def test_infer_class_duration():
    assert infer_class_duration(["12:00-1:00 (LUNCH)", "Break", "9:00 - 9:45", "10:00-11:00"]) == 45
    assert infer_class_duration(["Period 1", "Period 2"]) == 60
    assert infer_class_duration([], default=50) == 50
    assert infer_class_duration(["11:30-12:10"]) == 40
    # Ranges past midnight wrap around the day.
    assert infer_class_duration(["23:30-0:20"]) == 50


def test_weekly_hours_rounds_to_one_decimal(settings):
    grid = [[{"subjectName": "Math"}] * 5]
    stats = aggregate(grid, ["8:00-8:50"] * 5, 1, 5, settings=settings)
    assert stats.weekly_hours == 4.2


def test_aggregate_many_sums_classes(settings, week_grid, week_labels):
    single = aggregate(week_grid, week_labels, 3, 5, settings=settings)
    combined = aggregate_many([week_grid, week_grid], week_labels, 3, 5, settings=settings)

    assert combined.total_classes == single.total_classes * 2
    assert combined.free_periods == single.free_periods * 2
    assert combined.weekly_hours == round(single.total_classes * 2 * 50 / 60, 1)


def test_completion_progress_counts_finished_periods(settings):
    grid = [[{"subjectName": "Math"}, {"subjectName": "Science"}]] * 3
    labels = ["9:00-10:00", "10:00-11:00"]
    wednesday_morning = datetime(2024, 1, 3, 10, 30)

    progress = completion_progress(grid, labels, 3, 2, now=wednesday_morning, settings=settings)
    assert progress.completed == 5
    assert progress.total == 6
    assert progress.percent == 83

    monday_early = datetime(2024, 1, 1, 8, 0)
    assert completion_progress(grid, labels, 3, 2, now=monday_early, settings=settings).completed == 0


def test_weekly_hours_rounds_halves_up(settings):
    grid = [[{"subjectName": "Math"}] * 3]
    stats = aggregate(grid, ["9:00-9:45"] * 3, 1, 3, settings=settings)
    assert stats.class_duration_minutes == 45
    assert stats.weekly_hours == 2.3
    assert weekly_hours(1, 15) == 0.3
    assert weekly_hours(0, 60) == 0.0


def test_twelve_hour_lunch_label_duration():
    assert infer_class_duration(["12:00-1:00", "1:00-2:00"]) == 60


def test_progress_with_default_labels_follows_the_afternoon(settings):
    grid = [[{"subjectName": "Math"}] * 7]
    renderer = TimetableRenderer(grid, None, working_days=1, hours_per_day=7, settings=settings)

    assert renderer.progress(datetime(2024, 1, 8, 9, 30)).completed == 0
    assert renderer.progress(datetime(2024, 1, 8, 13, 5)).completed == 4
    assert renderer.progress(datetime(2024, 1, 8, 17, 0)).completed == 7


def test_missing_labels_use_default_slots(settings):
    grid = [[{"subjectName": "Math"}, {"subjectName": "Art"}, {"subjectName": "Free"}]]
    stats = aggregate(grid, None, 1, 3, settings=settings)
    assert (stats.total_classes, stats.free_periods) == (2, 1)
    assert stats.weekly_hours == 2.0

    progress = completion_progress(grid, None, 1, 3, now=datetime(2024, 1, 8, 10, 0), settings=settings)
    assert (progress.completed, progress.total) == (1, 2)
