"""Tests for the Textual form, driven through App.run_test()."""

import datetime

import pytest
from textual.widgets import Button, DataTable, Input, RadioButton

from ledger import Category, Ledger, ProjectList, Setting
from main import HoursApp
from timer import WorkTimer
from ui import MainAppScreen, ProjectSelect
from tests.fakes import FakeClock, FakeScheduler, MemoryStore


@pytest.fixture
def app(tmp_path) -> HoursApp:
    return HoursApp(Ledger(MemoryStore([])), ProjectList(MemoryStore()), Setting(MemoryStore("Sam")),
                    export_path=tmp_path / "hours.xlsx")


def _fill(screen: MainAppScreen, date: str, start: str, end: str) -> None:
    screen.query_one("#input-date", Input).value = date
    screen.query_one("#input-start-time", Input).value = start
    screen.query_one("#input-end-time", Input).value = end


async def test_add_entry_from_form(app):
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        screen = app.screen
        assert isinstance(screen, MainAppScreen)
        _fill(screen, "2024-03-04", "09:00", "12:00")
        screen.action_add_entry()
        await pilot.pause()

        assert len(app.ledger) == 1
        entry = app.ledger.entries[0]
        assert (entry.owner, entry.project, entry.category, entry.duration_minutes) == ("Sam", "General", Category.WORK, 180)
        assert screen.query_one("#entry-table", DataTable).row_count == 1
        assert screen.query_one("#input-start-time", Input).value == "12:00"
        assert screen.query_one("#input-end-time", Input).value == ""


async def test_break_category_from_radio(app):
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        screen = app.screen
        screen.query_one("#radio-break", RadioButton).value = True
        await pilot.pause()
        _fill(screen, "2024-03-04", "12:00", "12:30")
        screen.action_add_entry()
        await pilot.pause()
        assert app.ledger.total_minutes(Category.BREAK) == 30


async def test_incomplete_form_adds_nothing(app):
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        screen = app.screen
        _fill(screen, "2024-03-04", "09:00", "")
        screen.action_add_entry()
        await pilot.pause()
        assert len(app.ledger) == 0


async def test_new_project_is_added_to_list(app):
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        screen = app.screen
        screen.query_one("#fselect-project-input", Input).focus()
        screen.query_one("#fselect-project-input", Input).value = "Website"
        await pilot.pause()
        await pilot.press("enter")
        await pilot.pause()
        assert "Website" in app.projects
        assert screen.query_one("#fselect-project", ProjectSelect).value == "Website"


async def test_timer_toggle_records_entry(app):
    clock = FakeClock(datetime.datetime(2024, 3, 4, 9, 0))
    scheduler = FakeScheduler()
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        screen = app.screen
        screen.timer = WorkTimer(app.ledger, scheduler=scheduler, clock=clock)
        screen.timer.add_tick_listener(screen._on_timer_tick)
        screen.query_one("#input-date", Input).value = "2024-03-04"

        screen.action_toggle_timer()
        await pilot.pause()
        assert screen.timer.running
        assert screen.query_one("#btn-timer", Button).variant == "error"

        clock.advance(seconds=90)
        scheduler.calls[0][1]()
        await pilot.pause()
        assert screen.timer.elapsed_seconds == 90

        clock.set(17, 0)
        screen.action_toggle_timer()
        await pilot.pause()
        assert not screen.timer.running
        assert app.ledger.entries[0].duration_minutes == 480
        assert screen.query_one("#btn-timer", Button).variant == "success"


async def test_export_writes_workbook(app, tmp_path):
    app.ledger.add("Sam", "2024-03-04", "General", Category.WORK, "09:00", "17:00")
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        app.screen.action_export()
        await app.screen.workers.wait_for_complete()
        await pilot.pause()
    assert (tmp_path / "hours.xlsx").exists()


def _install_fake_timer(screen: MainAppScreen, clock: FakeClock, scheduler: FakeScheduler) -> WorkTimer:
    screen.timer = WorkTimer(screen.ledger, scheduler=scheduler, clock=clock)
    screen.timer.add_tick_listener(screen._on_timer_tick)
    return screen.timer


async def test_enter_adds_name_contained_in_existing_project(tmp_path):
    app = HoursApp(Ledger(MemoryStore([])), ProjectList(MemoryStore(["Website Redesign"])),
                   Setting(MemoryStore("")), export_path=tmp_path / "hours.xlsx")
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        app.screen.query_one("#fselect-project-input", Input).focus()
        app.screen.query_one("#fselect-project-input", Input).value = ""
        await pilot.pause()
        await pilot.press(*"Website")
        await pilot.press("enter")
        await pilot.pause()
        assert app.projects.names == ["Website Redesign", "Website"]
        assert app.screen.query_one("#fselect-project", ProjectSelect).value == "Website"


async def test_closing_screen_cancels_running_timer(app):
    clock = FakeClock(datetime.datetime(2024, 3, 4, 9, 0))
    scheduler = FakeScheduler()
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        timer = _install_fake_timer(app.screen, clock, scheduler)
        app.screen.action_toggle_timer()
        await pilot.pause()
        assert timer.running

        clock.set(11, 0)
        await app.pop_screen()
        await pilot.pause()

        assert scheduler.handles[0].stopped
        assert not timer.running
        assert len(app.ledger) == 0


@pytest.mark.parametrize("date_text", ["", "garbage"])
async def test_timer_stop_without_readable_date_uses_start_day(app, date_text):
    clock = FakeClock(datetime.datetime(2024, 3, 4, 9, 0))
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        screen = app.screen
        _install_fake_timer(screen, clock, FakeScheduler())
        screen.query_one("#input-date", Input).value = date_text
        await pilot.pause()

        screen.action_toggle_timer()
        clock.set(10, 30)
        screen.action_toggle_timer()
        await pilot.pause()

        assert len(app.ledger) == 1
        assert app.ledger.entries[0].date == "2024-03-04"
        assert app.ledger.entries[0].duration_minutes == 90


async def test_owner_saved_on_submit(app):
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        owner_input = app.screen.query_one("#input-owner", Input)
        owner_input.focus()
        owner_input.value = "Alex"
        await pilot.press("enter")
        await pilot.pause()
        assert app.owner.value == "Alex"


async def test_owner_saved_on_blur(app):
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        owner_input = app.screen.query_one("#input-owner", Input)
        owner_input.focus()
        await pilot.pause()
        owner_input.value = "Alex"
        app.screen.query_one("#input-start-time", Input).focus()
        await pilot.pause()
        assert app.owner.value == "Alex"


async def test_owner_saved_when_adding_entry(app):
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        screen = app.screen
        screen.query_one("#input-owner", Input).value = "Alex"
        _fill(screen, "2024-03-04", "09:00", "10:00")
        screen.action_add_entry()
        await pilot.pause()
        assert app.owner.value == "Alex"
        assert app.ledger.entries[0].owner == "Alex"


async def test_owner_saved_when_screen_closes_with_focus_in_field(app):
    async with app.run_test(size=(140, 50)) as pilot:
        await pilot.pause()
        owner_input = app.screen.query_one("#input-owner", Input)
        owner_input.focus()
        await pilot.pause()
        owner_input.value = "Alex"
        await pilot.pause()
        await app.pop_screen()
        await pilot.pause()
        assert app.owner.value == "Alex"
