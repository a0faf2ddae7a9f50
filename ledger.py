# ledger.py
# Time entries, the append-only ledger and its aggregates, projects and settings

import enum
import logging
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Protocol

import utils
from config import DEFAULT_PROJECTS, OVERTIME_THRESHOLD_HOURS


class Store(Protocol):
    """Anything that can load and save a JSON-compatible snapshot."""
    def load(self) -> Any: ...
    def save(self, snapshot: Any) -> bool: ...


class Category(str, enum.Enum):
    WORK = 'work'
    BREAK = 'break'

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Any) -> 'Category':
        """Reads a stored or displayed category. Unknown values count as work."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logging.warning(f"Unknown category {value!r}, counting it as work.")
            return cls.WORK


class TimeEntry(NamedTuple):
    """One recorded interval. The duration is fixed when the entry is created."""
    owner: str
    date: str
    project: str
    category: Category
    start_time: str
    end_time: str
    duration_minutes: int

    @classmethod
    def create(cls, owner: str, date: str, project: str, category: Category,
               start_time: str, end_time: str) -> 'TimeEntry':
        """Builds an entry, computing its duration. Raises ValueError on malformed times."""
        return cls(owner or "", date, project or "", Category.parse(category),
                   start_time, end_time, utils.minutes_between(start_time, end_time))

    @property
    def hours(self) -> float:
        return self.duration_minutes / 60

    def to_dict(self) -> Dict[str, Any]:
        return {
            'owner': self.owner,
            'date': self.date,
            'project': self.project,
            'category': self.category.value,
            'start': self.start_time,
            'end': self.end_time,
            'minutes': self.duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimeEntry':
        """Restores a stored entry. Records without owner or category load as the owner-less work entries they were."""
        minutes = data['minutes']
        if isinstance(minutes, bool) or not isinstance(minutes, int):
            raise ValueError(f"Invalid minutes value: {minutes!r}")
        for key in ('date', 'start', 'end'):
            if not data.get(key):
                raise ValueError(f"Missing {key}")
        return cls(
            str(data.get('owner') or ''),
            str(data['date']),
            str(data.get('project') or ''),
            Category.parse(data.get('category', Category.WORK)),
            str(data['start']),
            str(data['end']),
            minutes,
        )


class Ledger:
    """Ordered, append-only collection of time entries.

    Totals are recomputed from the full sequence on every call. When a store
    is given the ledger is restored from it and saved after each append.
    """

    def __init__(self, store: Optional[Store] = None, entries: Optional[List[TimeEntry]] = None):
        self._store = store
        if entries is not None:
            self._entries = [e._replace(category=Category.parse(e.category)) for e in entries]
        elif store is not None:
            self._entries = self._restore(store.load())
        else:
            self._entries = []

    @staticmethod
    def _restore(snapshot: Any) -> List[TimeEntry]:
        if not isinstance(snapshot, list):
            if snapshot is not None:
                logging.warning(f"Stored entries are not a list ({type(snapshot).__name__}). Starting empty.")
            return []
        entries = []
        for index, record in enumerate(snapshot):
            try:
                entries.append(TimeEntry.from_dict(record))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logging.warning(f"Skipping stored entry #{index} ({record!r}): {e}")
        return entries

    @property
    def entries(self) -> tuple:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TimeEntry]:
        return iter(tuple(self._entries))

    def append(self, entry: TimeEntry) -> bool:
        """Adds an entry to the end. Entries without date, start or end are ignored."""
        if not entry.date or not entry.start_time or not entry.end_time:
            logging.debug(f"Ignoring incomplete entry: {entry!r}")
            return False
        entry = entry._replace(category=Category.parse(entry.category))
        self._entries.append(entry)
        logging.info(f"Entry added: {entry.date} {entry.start_time}-{entry.end_time} "
                     f"{entry.project} ({entry.category.label}, {entry.duration_minutes} min)")
        self._save()
        return True

    def add(self, owner: str, date: str, project: str, category: Category,
            start_time: str, end_time: str) -> Optional[TimeEntry]:
        """Creates and appends an entry. Returns None when nothing was added."""
        if not date or not start_time or not end_time:
            return None
        try:
            entry = TimeEntry.create(owner, date, project, category, start_time, end_time)
        except ValueError as e:
            logging.warning(f"Not adding entry for {date}: {e}")
            return None
        return entry if self.append(entry) else None

    def total_minutes(self, category: Category) -> int:
        category = Category.parse(category)
        return sum(e.duration_minutes for e in self._entries if e.category == category)

    def total_hours(self, category: Category) -> float:
        return self.total_minutes(category) / 60

    def overtime_hours(self) -> float:
        return max(0.0, self.total_hours(Category.WORK) - OVERTIME_THRESHOLD_HOURS)

    def for_month(self, year: int, month: int) -> 'Ledger':
        """A detached ledger with only the entries dated in the given month."""
        first, next_first = utils.month_range(year, month)
        selected = []
        for entry in self._entries:
            entry_date = utils.parse_date_string(entry.date)
            if entry_date and first <= entry_date < next_first:
                selected.append(entry)
        return Ledger(entries=selected)

    def snapshot(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._entries]

    def _save(self) -> None:
        if self._store is not None:
            self._store.save(self.snapshot())


class ProjectList:
    """Ordered, append-only list of unique project names."""

    def __init__(self, store: Optional[Store] = None, defaults: Optional[List[str]] = None):
        self._store = store
        defaults = list(DEFAULT_PROJECTS if defaults is None else defaults)
        loaded = store.load() if store is not None else None
        if isinstance(loaded, list) and all(isinstance(name, str) for name in loaded) and loaded:
            self._names = list(dict.fromkeys(loaded))
        else:
            if loaded is not None:
                logging.warning(f"Stored projects unusable ({loaded!r}). Using defaults.")
            self._names = list(dict.fromkeys(defaults))

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def add(self, name: str) -> bool:
        name = (name or "").strip()
        if not name or name in self._names:
            return False
        self._names.append(name)
        logging.info(f"Project added: {name}")
        if self._store is not None:
            self._store.save(self.names)
        return True


class Setting:
    """A single persisted string value, e.g. the owner name."""

    def __init__(self, store: Optional[Store] = None, default: str = ""):
        self._store = store
        loaded = store.load() if store is not None else None
        self._value = loaded if isinstance(loaded, str) else default

    @property
    def value(self) -> str:
        return self._value

    def set(self, value: str) -> bool:
        value = value or ""
        if value == self._value:
            return False
        self._value = value
        if self._store is not None:
            self._store.save(value)
        return True
