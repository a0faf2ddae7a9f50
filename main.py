# main.py
# Main entry point for the work hours Textual application

import pathlib
import sys
import logging

from textual.app import App

import config
import utils
import db
from ledger import Ledger, ProjectList, Setting
from ui import MainAppScreen


class HoursApp(App[None]):
    """Personal work hours log."""

    TITLE = "Work Hours"
    SUB_TITLE = "Log, time and export your hours"
    CSS_PATH = "main.css"
    BINDINGS = [
        ("ctrl+q", "quit", "Quit App"),
    ]

    def __init__(self, ledger: Ledger, projects: ProjectList, owner: Setting, export_path=config.EXPORT_PATH):
        super().__init__()
        self.ledger = ledger
        self.projects = projects
        self.owner = owner
        self.export_path = export_path

    def on_mount(self) -> None:
        """Called when the app is mounted."""
        logging.info(f"Work Hours App Mounted with {len(self.ledger)} entries.")
        self.push_screen(MainAppScreen(self.ledger, self.projects, self.owner, export_path=self.export_path))


def check_database(db_file: str = str(config.DATABASE_PATH)) -> bool:
    """Makes sure the blob table exists, creating the database file if needed."""
    if not pathlib.Path(db_file).exists():
        logging.warning(f'Database file not found at {db_file}, creating it.')
    if not db.init_db(db_file):
        logging.error('Failed to create database schema.')
        return False
    logging.info("Database check passed.")
    return True


def build_app(db_file: str = str(config.DATABASE_PATH)) -> HoursApp:
    """Restores the ledger, project list and owner name from the database."""
    ledger = Ledger(db.BlobStore(config.ENTRIES_BLOB, default=[], db_file=db_file))
    projects = ProjectList(db.BlobStore(config.PROJECTS_BLOB, db_file=db_file))
    owner = Setting(db.BlobStore(config.OWNER_BLOB, default="", db_file=db_file))
    return HoursApp(ledger, projects, owner)


def run() -> None:
    utils.setup_logging()
    logging.info("--- Application Start ---")

    if not check_database():
        logging.critical("Database check failed. Exiting.")
        sys.exit(1)

    app = build_app()
    app.run()
    logging.info("--- Application Finish ---")


if __name__ == "__main__":
    run()
