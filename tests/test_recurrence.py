from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from config.settings import Config
from src.scheduler.recurrence import (
    expand_recurrence,
    get_visible_range,
    instance_id,
    is_instance_id,
    occurrence_index,
    original_event_id,
)


def test_daily_event_fills_a_week_view(make_event):
    monday = datetime(2026, 10, 19, 9, 0)
    standup = make_event(monday, monday + timedelta(minutes=30), event_id="standup", recurrence="daily")
    range_start, range_end = datetime(2026, 10, 19), datetime(2026, 10, 26)

    instances = expand_recurrence([standup], range_start, range_end)

    assert len(instances) == 7
    assert [instance.start.date() for instance in instances] == [
        (monday + timedelta(days=i)).date() for i in range(7)
    ]
    for instance in instances:
        assert (instance.start.hour, instance.start.minute) == (9, 0)
        assert (instance.end.hour, instance.end.minute) == (9, 30)


def test_weekly_instances_get_derived_ids(make_event):
    start = datetime(2026, 10, 1, 10, 0)
    event = make_event(start, event_id="piano", recurrence="weekly")

    instances = expand_recurrence([event], datetime(2026, 10, 1), datetime(2026, 10, 29))

    assert [instance.id for instance in instances] == ["piano", "piano__r1", "piano__r2", "piano__r3"]
    assert [instance.start.day for instance in instances] == [1, 8, 15, 22]


def test_instance_ids_reverse_to_definition():
    assert instance_id("evt-1", 0) == "evt-1"
    assert instance_id("evt-1", 12) == "evt-1__r12"
    assert original_event_id("evt-1__r12") == "evt-1"
    assert original_event_id("evt-1") == "evt-1"
    assert occurrence_index("evt-1__r12") == 12
    assert occurrence_index("evt-1") == 0


def test_instance_ids_survive_underscores_in_source_id():
    assert original_event_id("family__dinner__r3") == "family__dinner"


def test_is_instance_id():
    assert is_instance_id("evt-1__r4")
    assert not is_instance_id("evt-1")
    assert not is_instance_id("evt__rx")


@pytest.mark.parametrize("year, expected_day", [(2025, 28), (2024, 29)])
def test_monthly_clamps_to_end_of_february(make_event, year, expected_day):
    event = make_event(datetime(year, 1, 31, 18, 0), event_id="rent", recurrence="monthly")

    instances = expand_recurrence([event], datetime(year, 2, 1), datetime(year, 3, 1))

    assert len(instances) == 1
    assert instances[0].id == "rent__r1"
    assert instances[0].start == datetime(year, 2, expected_day, 18, 0)


def test_monthly_clamp_does_not_drift(make_event):
    event = make_event(datetime(2025, 1, 31, 18, 0), recurrence="monthly")

    instances = expand_recurrence([event], datetime(2025, 3, 1), datetime(2025, 5, 1))

    assert [instance.start.date() for instance in instances] == [
        datetime(2025, 3, 31).date(),
        datetime(2025, 4, 30).date(),
    ]


def test_monthly_crosses_year_boundary(make_event):
    event = make_event(datetime(2026, 11, 15, 12, 0), recurrence="monthly")

    instances = expand_recurrence([event], datetime(2027, 1, 1), datetime(2027, 2, 1))

    assert [instance.start for instance in instances] == [datetime(2027, 1, 15, 12, 0)]


def test_yearly_leap_day_falls_back_to_february_28(make_event):
    birthday = make_event(datetime(2024, 2, 29, 0, 0), event_id="bday", recurrence="yearly", all_day=True)

    instances = expand_recurrence([birthday], datetime(2025, 1, 1), datetime(2029, 1, 1))

    assert [(instance.id, instance.start.date()) for instance in instances] == [
        ("bday__r1", datetime(2025, 2, 28).date()),
        ("bday__r2", datetime(2026, 2, 28).date()),
        ("bday__r3", datetime(2027, 2, 28).date()),
        ("bday__r4", datetime(2028, 2, 29).date()),
    ]


@pytest.mark.parametrize("recurrence", [None, "none", "custom", "fortnightly"])
def test_non_expandable_events_pass_through_unchanged(make_event, recurrence):
    event = make_event(datetime(2020, 5, 1, 9, 0), event_id="one-off", recurrence=recurrence,
                       recurrence_custom="every other Tuesday" if recurrence == "custom" else None)

    instances = expand_recurrence([event], datetime(2026, 1, 1), datetime(2026, 2, 1))

    assert instances == [event]
    assert instances[0] is event


def test_instances_stay_inside_the_range(make_event):
    events = [
        make_event(datetime(2026, 9, 1, 23, 0), datetime(2026, 9, 2, 1, 0), recurrence="daily"),
        make_event(datetime(2026, 8, 3, 8, 0), recurrence="weekly"),
        make_event(datetime(2025, 10, 20, 7, 0), recurrence="monthly"),
    ]
    range_start, range_end = datetime(2026, 10, 18), datetime(2026, 10, 25)

    instances = expand_recurrence(events, range_start, range_end)

    assert instances
    for instance in instances:
        assert instance.end > range_start and instance.start < range_end


def test_occurrence_straddling_range_start_is_included(make_event):
    event = make_event(datetime(2026, 10, 1, 23, 0), datetime(2026, 10, 2, 1, 0),
                       event_id="night", recurrence="daily")

    instances = expand_recurrence([event], datetime(2026, 10, 10), datetime(2026, 10, 11))

    # 9th 23:00-01:00 overlaps the start of the 10th; 10th 23:00 starts inside
    assert [instance.id for instance in instances] == ["night__r8", "night__r9"]


def test_duration_is_preserved(make_event):
    event = make_event(datetime(2026, 1, 31, 22, 15), datetime(2026, 2, 1, 0, 45), recurrence="monthly")
    duration = event.end - event.start

    instances = expand_recurrence([event], datetime(2026, 1, 1), datetime(2027, 1, 1))

    assert len(instances) == 12
    assert all(instance.end - instance.start == duration for instance in instances)


def test_daily_stepping_keeps_wall_clock_across_dst(make_event):
    new_york = ZoneInfo("America/New_York")
    # US clocks fall back on 1 November 2026
    event = make_event(datetime(2026, 10, 30, 9, 0, tzinfo=new_york),
                       datetime(2026, 10, 30, 10, 0, tzinfo=new_york), recurrence="daily")

    instances = expand_recurrence(
        [event], datetime(2026, 11, 2, tzinfo=new_york), datetime(2026, 11, 3, tzinfo=new_york)
    )

    assert len(instances) == 1
    instance = instances[0]
    assert (instance.start.hour, instance.start.minute) == (9, 0)
    absolute = instance.end.astimezone(timezone.utc) - instance.start.astimezone(timezone.utc)
    assert absolute == timedelta(hours=1)


def test_instances_carry_definition_metadata(make_event):
    event = make_event(datetime(2026, 10, 19, 18, 0), event_id="dinner", recurrence="weekly",
                       title="Family Dinner", color="#123456", guest_ids=["f1"], location="Home")

    instances = expand_recurrence([event], datetime(2026, 10, 26), datetime(2026, 11, 2))

    assert len(instances) == 1
    instance = instances[0]
    assert (instance.title, instance.color, instance.guest_ids, instance.location) == (
        "Family Dinner", "#123456", ["f1"], "Home"
    )
    assert instance.recurrence == "weekly"
    # The definition itself is never touched
    assert event.id == "dinner"
    assert event.start == datetime(2026, 10, 19, 18, 0)


def test_iteration_cap_truncates_silently(make_event):
    class SmallCap(Config):
        MAX_RECURRENCE_ITERATIONS = 5

    event = make_event(datetime(2026, 10, 1, 9, 0), recurrence="daily")

    instances = expand_recurrence([event], datetime(2026, 10, 1), datetime(2026, 11, 1), SmallCap())

    assert len(instances) == 5


def test_default_cap_is_one_thousand_occurrences(make_event):
    event = make_event(datetime(2020, 1, 1, 9, 0), recurrence="daily")

    # Occurrence 1000 would land on 2022-09-27; the cap stops at index 999
    instances = expand_recurrence([event], datetime(2022, 9, 1), datetime(2023, 1, 1))

    assert instances[-1].id.endswith("__r999")


def test_expansion_stops_at_the_end_of_the_calendar(make_event):
    event = make_event(datetime(9998, 6, 1, 12, 0), recurrence="yearly")

    instances = expand_recurrence([event], datetime(9998, 1, 1), datetime(9999, 12, 31))

    assert [instance.start.year for instance in instances] == [9998, 9999]


def test_mixed_definitions_keep_input_order(make_event):
    single = make_event(datetime(2026, 10, 20, 12, 0), event_id="lunch")
    daily = make_event(datetime(2026, 10, 19, 7, 0), event_id="run", recurrence="daily")

    instances = expand_recurrence([single, daily], datetime(2026, 10, 19), datetime(2026, 10, 21))

    assert [instance.id for instance in instances] == ["lunch", "run", "run__r1"]


class TestVisibleRange:
    # Wednesday 21 October 2026
    anchor = datetime(2026, 10, 21, 15, 30)

    def test_day(self):
        assert get_visible_range("day", self.anchor) == (datetime(2026, 10, 21), datetime(2026, 10, 22))

    def test_week_starts_on_sunday(self):
        assert get_visible_range("week", self.anchor) == (datetime(2026, 10, 18), datetime(2026, 10, 25))

    def test_week_anchored_on_sunday(self):
        assert get_visible_range("week", datetime(2026, 10, 18, 23, 59)) == (
            datetime(2026, 10, 18), datetime(2026, 10, 25)
        )

    def test_month_grid_is_42_days_from_preceding_sunday(self):
        start, end = get_visible_range("month", self.anchor)
        # 1 October 2026 is a Thursday
        assert start == datetime(2026, 9, 27)
        assert end == datetime(2026, 11, 8)
        assert end - start == timedelta(days=42)

    def test_month_starting_on_sunday(self):
        # 1 November 2026 is a Sunday
        assert get_visible_range("month", datetime(2026, 11, 17))[0] == datetime(2026, 11, 1)

    def test_unknown_view_uses_month_grid(self):
        assert get_visible_range("agenda", self.anchor) == get_visible_range("month", self.anchor)

    def test_aware_anchor_keeps_timezone(self):
        anchor = datetime(2026, 10, 21, 15, 30, tzinfo=ZoneInfo("Europe/London"))
        start, _ = get_visible_range("day", anchor)
        assert start.tzinfo is anchor.tzinfo
        assert (start.hour, start.minute) == (0, 0)
