# ui.py
# Textual UI: entry form, live timer, entry overview, totals and export

import datetime
import logging
from typing import List, Optional

from textual import events, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.message import Message
from textual.reactive import reactive
from textual.screen import Screen
from textual.validation import ValidationResult, Validator
from textual.widgets import (
    Button, DataTable, Footer, Header, Input, Label, OptionList, RadioButton, RadioSet, Static
)

import export
import utils
from config import EXPORT_PATH, TIME_INCREMENT_MINUTES
from ledger import Category, Ledger, ProjectList, Setting, TimeEntry
from timer import WorkTimer


# --- Custom Messages ---
class ProjectChosen(Message):
    """Sent when a project is picked from (or typed into) the ProjectSelect."""
    def __init__(self, control_id: str, name: str, is_new: bool) -> None:
        self.control_id = control_id
        self.name = name
        self.is_new = is_new
        super().__init__()


# --- Validators ---
class ClockValidator(Validator):
    """Validates HH:MM format."""
    def validate(self, value: str) -> ValidationResult:
        if not value:
            return self.success()
        if utils.validate_clock_format(value):
            return self.success()
        return self.failure("Use HH:MM format.")


class DateValidator(Validator):
    """Accepts anything dateutil can read as a date."""
    def validate(self, value: str) -> ValidationResult:
        if not value or utils.normalize_date(value):
            return self.success()
        return self.failure("Use YYYY-MM-DD format.")


# --- Project Select Widget ---
class ProjectSelect(Container):
    """An Input with a filtered OptionList of project names.

    Enter on text that matches no option offers it as a new project.
    """

    DEFAULT_CSS = """
    ProjectSelect { height: auto; border: none; padding: 0; margin-bottom: 1; }
    ProjectSelect Input { border: round $accent; margin-bottom: 0; padding: 0 1; }
    ProjectSelect Input:focus { border: round $accent-darken-1; }
    ProjectSelect OptionList { height: auto; max-height: 6; border: thick $accent; display: none; margin-top: 0; padding: 0; background: $panel; border-top: none; width: 100%; }
    ProjectSelect OptionList:focus { border: thick $accent-darken-1; }
    ProjectSelect .visible { display: block; }
    """

    options: reactive[List[str]] = reactive(list)
    filtered_options: reactive[List[str]] = reactive(list)
    show_options: reactive[bool] = reactive(False)
    selected_name: reactive[str] = reactive("")

    def __init__(self, prompt: str = "Filter...", id: Optional[str] = None):
        super().__init__(id=id)
        self.prompt = prompt
        self._input = Input(placeholder=prompt, id=f"{id}-input" if id else None)
        self._option_list = OptionList(id=f"{id}-options" if id else None)

    def compose(self) -> ComposeResult:
        yield self._input
        yield self._option_list

    def on_mount(self) -> None:
        self.watch(self._input, "value", self._filter_options)
        self.watch(self, "filtered_options", self._update_option_list)
        self.watch(self, "show_options", self._toggle_option_list_display)

    @property
    def value(self) -> str:
        return self._input.value.strip()

    def _filter_options(self, filter_value: str) -> None:
        filter_value = filter_value.lower()
        if not filter_value:
            self.filtered_options = self.options[:]
        else:
            self.filtered_options = [opt for opt in self.options if filter_value in opt.lower()]
        self.show_options = self._input.has_focus and bool(self.filtered_options)

    def _update_option_list(self) -> None:
        if not self.is_mounted:
            return
        self._option_list.clear_options()
        for opt in self.filtered_options:
            self._option_list.add_option(opt)
        if self.filtered_options:
            self._option_list.highlighted = 0

    def _toggle_option_list_display(self) -> None:
        if not self.is_mounted:
            return
        self._option_list.set_class(self.show_options, "visible")

    def on_descendant_focus(self, event: events.DescendantFocus) -> None:
        if event.widget is self._input:
            self._filter_options(self._input.value)

    def on_descendant_blur(self, event: events.DescendantBlur) -> None:
        if not (self._input.has_focus or self._option_list.has_focus):
            self.show_options = False

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input is self._input:
            self.selected_name = event.value if event.value in self.options else ""

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input is not self._input:
            return
        event.stop()
        name = self.value
        # Enter in the input takes the typed text; listed options are picked in the OptionList
        if not name:
            return
        self._choose(name)

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_list is self._option_list:
            event.stop()
            if 0 <= event.option_index < len(self.filtered_options):
                self._choose(self.filtered_options[event.option_index])

    def _choose(self, name: str) -> None:
        is_new = name not in self.options
        self.selected_name = name
        self._input.value = name
        self._input.cursor_position = len(name)
        self.show_options = False
        self.post_message(ProjectChosen(str(self.id), name, is_new))

    def on_key(self, event: events.Key) -> None:
        if not (self._input.has_focus or self._option_list.has_focus):
            return
        if event.key in ("down", "up") and not self.show_options and self.options:
            event.stop()
            self.filtered_options = self.options[:]
            self.show_options = True
            self._option_list.focus()
            if event.key == "down": self._option_list.action_first()
            else: self._option_list.action_last()
        elif event.key == "escape" and self.show_options:
            event.stop()
            self.show_options = False
            self._input.focus()

    def set_options(self, names: List[str]) -> None:
        self.options = list(names)
        self._filter_options(self._input.value)

    def set_value(self, name: str) -> None:
        self._input.value = name
        self.selected_name = name if name in self.options else ""
        self.show_options = False


# --- Main Application Screen ---
class MainAppScreen(Screen):
    """Single screen for logging hours, running the timer, and exporting."""

    BINDINGS = [
        Binding("ctrl+s", "add_entry", "Add Entry", show=True),
        Binding("ctrl+t", "toggle_timer", "Start/Stop Timer", show=True),
        Binding("ctrl+e", "export", "Export", show=True),
        Binding("escape", "reset_focus", "Reset Focus", show=True),
        Binding("up", "adjust_time(-1)", "Adjust Time Up", show=False),
        Binding("down", "adjust_time(1)", "Adjust Time Down", show=False),
        Binding("f1", "change_date(-1)", "Prev Day", show=True),
        Binding("f2", "change_date(1)", "Next Day", show=True),
        Binding("f3", "change_date(0)", "Today", show=True),
        Binding("ctrl+o", "focus_overview", "Focus Overview", show=True),
    ]

    selected_date: reactive[datetime.date] = reactive(datetime.date.today, init=False)

    def __init__(self, ledger: Ledger, projects: ProjectList, owner: Setting,
                 timer: Optional[WorkTimer] = None, export_path=EXPORT_PATH):
        super().__init__()
        self.ledger = ledger
        self.projects = projects
        self.owner = owner
        self.export_path = export_path
        self.timer = timer or WorkTimer(ledger, scheduler=self.set_interval)
        self.timer.add_tick_listener(self._on_timer_tick)
        self._owner_text: Optional[str] = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()
        with Container(id="overview-container"):
            yield Label("Entries (Ctrl+O to focus)", id="overview-title")
            yield DataTable(id="entry-table", cursor_type="row", zebra_stripes=True)
            yield Static("", id="totals")
        with Container(id="log-container"):
            yield Label("Log Hours", classes="title")
            yield Label("Name:", classes="label")
            yield Input(self.owner.value, id="input-owner", placeholder="Your name (optional)")
            yield Label("Date (F1/F2/F3):", classes="label")
            yield Input(self.selected_date.isoformat(), id="input-date", placeholder="YYYY-MM-DD",
                        validators=[DateValidator()])
            yield Label("Project:", classes="label")
            yield ProjectSelect(prompt="Filter or add project...", id="fselect-project")
            with RadioSet(id="radio-category"):
                yield RadioButton(Category.WORK.label, value=True, id="radio-work")
                yield RadioButton(Category.BREAK.label, id="radio-break")
            with Horizontal(id="time-inputs"):
                yield Input("", id="input-start-time", placeholder="Start HH:MM", validators=[ClockValidator()])
                yield Input("", id="input-end-time", placeholder="End HH:MM", validators=[ClockValidator()])
            with Horizontal(id="buttons"):
                yield Button("Add entry", variant="primary", id="btn-add")
                yield Button("Start timer", variant="success", id="btn-timer")
                yield Button("Export", id="btn-export")
            yield Static("Timer idle", id="timer-display")

    def on_mount(self) -> None:
        project_select = self.query_one("#fselect-project", ProjectSelect)
        project_select.set_options(self.projects.names)
        if self.projects.names:
            project_select.set_value(self.projects.names[0])
        self.refresh_entries()

    def on_unmount(self) -> None:
        self.timer.remove_tick_listener(self._on_timer_tick)
        self.timer.cancel()
        # Widgets may already be gone here, so use the last typed value
        if self._owner_text is not None:
            self.owner.set(self._owner_text.strip())

    # --- Form state ---
    def _form_date(self) -> str:
        return utils.normalize_date(self.query_one("#input-date", Input).value)

    def _form_project(self) -> str:
        return self.query_one("#fselect-project", ProjectSelect).value

    def _form_category(self) -> Category:
        pressed = self.query_one("#radio-category", RadioSet).pressed_button
        if pressed is not None and pressed.id == "radio-break":
            return Category.BREAK
        return Category.WORK

    def _form_owner(self) -> str:
        return self.query_one("#input-owner", Input).value.strip()

    def _save_owner(self) -> None:
        self.owner.set(self._form_owner())

    # --- Overview ---
    def refresh_entries(self) -> None:
        try:
            table = self.query_one("#entry-table", DataTable)
            table.clear(columns=True)
            if not len(self.ledger):
                table.add_column("Status")
                table.add_row("No entries yet.")
            else:
                table.add_columns("Date", "Project", "Category", "Start", "End", "Hours")
                for index, entry in enumerate(self.ledger):
                    table.add_row(
                        entry.date,
                        entry.project,
                        entry.category.label,
                        entry.start_time,
                        entry.end_time,
                        utils.format_hours(entry.duration_minutes),
                        key=str(index),
                    )
                table.move_cursor(row=table.row_count - 1, animate=False)
            self._update_totals()
        except Exception as e:
            logging.exception("Error updating entry table")
            self.notify(f"Error updating entry table: {e}", severity="error")

    def _update_totals(self) -> None:
        lines = [
            f"Work: {self.ledger.total_hours(Category.WORK):.2f} h   "
            f"Break: {self.ledger.total_hours(Category.BREAK):.2f} h   "
            f"Overtime: {self.ledger.overtime_hours():.2f} h"
        ]
        month = self.ledger.for_month(self.selected_date.year, self.selected_date.month)
        lines.append(
            f"{self.selected_date:%B %Y}: work {month.total_hours(Category.WORK):.2f} h, "
            f"overtime {month.overtime_hours():.2f} h"
        )
        self.query_one("#totals", Static).update("\n".join(lines))

    def watch_selected_date(self, old_date: datetime.date, new_date: datetime.date) -> None:
        if not self.is_mounted:
            return
        date_input = self.query_one("#input-date", Input)
        if utils.normalize_date(date_input.value) != new_date.isoformat():
            date_input.value = new_date.isoformat()
        self._update_totals()

    # --- Actions ---
    def action_add_entry(self) -> None:
        self._save_owner()
        start = self.query_one("#input-start-time", Input).value.strip()
        end = self.query_one("#input-end-time", Input).value.strip()
        entry = self.ledger.add(self._form_owner(), self._form_date(), self._form_project(),
                                self._form_category(), start, end)
        if entry is None:
            logging.debug("Add entry ignored: incomplete or invalid form.")
            return
        self._entry_recorded(entry)
        self.query_one("#input-start-time", Input).value = end
        self.query_one("#input-end-time", Input).value = ""

    def action_toggle_timer(self) -> None:
        self._save_owner()
        button = self.query_one("#btn-timer", Button)
        if not self.timer.running:
            self.timer.start()
            button.label = "Stop timer"
            button.variant = "error"
            return
        entry = self.timer.stop(owner=self._form_owner(), date=self._form_date() or None,
                                project=self._form_project(), category=self._form_category())
        button.label = "Start timer"
        button.variant = "success"
        if entry is not None:
            self._entry_recorded(entry)
        else:
            self.notify("Timer stopped, nothing recorded.", severity="warning")

    def _entry_recorded(self, entry: TimeEntry) -> None:
        if entry.project:
            self.projects.add(entry.project)
            self.query_one("#fselect-project", ProjectSelect).set_options(self.projects.names)
        self.refresh_entries()
        self.notify(f"Added {utils.format_hours(entry.duration_minutes)} h "
                    f"{entry.category.label.lower()} on {entry.date}.", severity="information", timeout=3)

    def action_export(self) -> None:
        self.export_entries(self.ledger.entries)

    @work(exclusive=True, thread=True)
    def export_entries(self, entries: tuple) -> None:
        try:
            path = export.export_workbook(entries, self.export_path)
            self.app.call_from_thread(self.app.notify, f"Exported to {path}", title="Export", severity="information")
        except Exception as e:
            logging.exception("Error exporting entries")
            self.app.call_from_thread(self.app.notify, f"Export failed: {e}", title="Export Error", severity="error")

    def action_change_date(self, direction: int) -> None:
        if direction == 0:
            self.selected_date = datetime.date.today()
        else:
            current = utils.parse_date_string(self._form_date()) or self.selected_date
            self.selected_date = current + datetime.timedelta(days=direction)

    def action_reset_focus(self) -> None:
        self.set_focus(None)

    def action_focus_overview(self) -> None:
        table = self.query_one("#entry-table", DataTable)
        if len(self.ledger):
            table.focus()
        else:
            self.notify("No entries to focus.", severity="warning")

    def action_adjust_time(self, direction: int) -> None:
        focused_widget = self.focused
        if not (isinstance(focused_widget, Input) and focused_widget.id in ("input-start-time", "input-end-time")):
            self.app.bell()
            return
        current_time_str = focused_widget.value.strip()
        if current_time_str and not utils.validate_clock_format(current_time_str):
            self.app.bell()
            return
        if current_time_str:
            minutes = utils.clock_to_minutes(current_time_str)
            current_dt = datetime.datetime.combine(self.selected_date, datetime.time(minutes // 60, minutes % 60))
        else:
            current_dt = utils.snap_time_to_interval(datetime.datetime.now())

        new_dt = current_dt + datetime.timedelta(minutes=TIME_INCREMENT_MINUTES * -direction)
        focused_widget.value = utils.format_clock(new_dt)
        focused_widget.cursor_position = len(focused_widget.value)

    # --- Events ---
    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-add":
            self.action_add_entry()
        elif event.button.id == "btn-timer":
            self.action_toggle_timer()
        elif event.button.id == "btn-export":
            self.action_export()

    def on_project_chosen(self, message: ProjectChosen) -> None:
        if message.is_new and self.projects.add(message.name):
            self.query_one("#fselect-project", ProjectSelect).set_options(self.projects.names)
            self.notify(f"Project '{message.name}' added.", severity="information", timeout=3)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "input-owner":
            self._owner_text = event.value
        if event.input.id in ("input-start-time", "input-end-time", "input-date"):
            event.input.set_class(event.validation_result is not None and not event.validation_result.is_valid,
                                  "input--invalid")
        if event.input.id == "input-date":
            parsed = utils.parse_date_string(utils.normalize_date(event.value))
            if parsed and parsed != self.selected_date:
                self.selected_date = parsed

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "input-owner":
            self._save_owner()
            self.query_one("#fselect-project-input", Input).focus()
        elif event.input.id == "input-start-time":
            self.query_one("#input-end-time", Input).focus()
        elif event.input.id == "input-end-time":
            self.action_add_entry()

    def on_descendant_blur(self, event: events.DescendantBlur) -> None:
        if isinstance(event.widget, Input) and event.widget.id == "input-owner":
            self.owner.set(event.widget.value.strip())

    def _on_timer_tick(self, elapsed_seconds: int) -> None:
        if not self.is_mounted:
            return
        display = self.query_one("#timer-display", Static)
        if self.timer.running:
            display.update(f"Running since {self.timer.start_instant:%H:%M}  "
                           f"{utils.format_elapsed(elapsed_seconds)}")
        else:
            display.update("Timer idle")
