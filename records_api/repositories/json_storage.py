"""
JSON-file record store.

Each collection (users, posts) is one JSON array on disk. A mutation always
loads the whole array, transforms it in memory and rewrites the file. Writes
go to a temporary file in the same directory and are moved into place with
``os.replace`` so readers see either the old or the new collection.

``RecordStore.mutate`` holds a per-path lock from load through save, so two
concurrent mutations of the same file are serialized instead of one silently
overwriting the other.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Generic, Iterator, Optional, Sequence, Type, TypeVar
import json
import logging
import os
import tempfile
import threading

from pydantic import TypeAdapter, ValidationError as SchemaError

from .models import Record

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)
Predicate = Callable[[R], bool]


class StorageError(Exception):
    """Base class for failures at the persistence boundary."""

    def __init__(self, message: str, path: str | os.PathLike | None = None):
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None


class CollectionNotFoundError(StorageError):
    """The collection file does not exist."""


class MalformedDataError(StorageError):
    """The file content is not a valid collection of the expected records."""


class ReadError(StorageError):
    """The collection file exists but could not be read."""


class WriteError(StorageError):
    """The collection could not be persisted; previous content is untouched."""


class DuplicateIdError(StorageError):
    """Two records of one collection share an id."""


_locks: dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: str | os.PathLike) -> threading.Lock:
    key = str(Path(path).resolve())
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.Lock()
        return lock


def _first_duplicate_id(records: Sequence[Record]):
    seen = set()
    for record in records:
        if record.id in seen:
            return record.id
        seen.add(record.id)
    return None


# -------------------------- file I/O --------------------------
def load_collection(path: str | os.PathLike, model: Type[R], *, missing_ok: bool = False) -> list[R]:
    """Read and validate the whole collection stored at ``path``."""
    file = Path(path)
    try:
        raw = file.read_text(encoding="utf-8")
    except FileNotFoundError:
        if missing_ok:
            return []
        raise CollectionNotFoundError(f"Collection {file} does not exist", file) from None
    except UnicodeDecodeError as exc:
        raise MalformedDataError(f"{file} is not valid UTF-8: {exc}", file) from exc
    except OSError as exc:
        raise ReadError(f"Could not read {file}: {exc}", file) from exc

    try:
        records = TypeAdapter(list[model]).validate_json(raw)
    except SchemaError as exc:
        raise MalformedDataError(
            f"{file} is not a valid {model.__name__} collection ({exc.error_count()} errors)", file
        ) from exc

    duplicate = _first_duplicate_id(records)
    if duplicate is not None:
        raise MalformedDataError(f"{file} contains duplicate id {duplicate!r}", file)
    return records


def save_collection(path: str | os.PathLike, records: Sequence[Record]) -> None:
    """Replace the collection stored at ``path`` with ``records``."""
    file = Path(path)
    duplicate = _first_duplicate_id(records)
    if duplicate is not None:
        raise DuplicateIdError(f"Refusing to save duplicate id {duplicate!r} to {file}", file)

    payload = json.dumps(
        [record.model_dump(mode="json", by_alias=True) for record in records],
        ensure_ascii=False,
        indent=2,
    )
    try:
        data = payload.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise WriteError(f"Could not encode {file} as UTF-8: {exc}", file) from exc
    tmp_name = None
    try:
        file.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb", dir=file.parent, prefix=f".{file.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, file)
        tmp_name = None
    except OSError as exc:
        raise WriteError(f"Could not write {file}: {exc}", file) from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.warning("Could not remove temporary file %s", tmp_name)


# -------------------------- in-memory operations --------------------------
def find_one(records: Sequence[R], predicate: Predicate) -> Optional[R]:
    for record in records:
        if predicate(record):
            return record
    return None


def upsert_mutate(records: Sequence[R], predicate: Predicate, mutator: Callable[[R], R]) -> list[R]:
    """Return a new list where every record matching ``predicate`` went through ``mutator``."""
    return [mutator(record) if predicate(record) else record for record in records]


def remove_where(records: Sequence[R], predicate: Predicate) -> list[R]:
    return [record for record in records if not predicate(record)]


class RecordStore(Generic[R]):
    """Binds a collection file to its record type."""

    def __init__(self, path: str | os.PathLike, model: Type[R]) -> None:
        self.path = Path(path)
        self.model = model

    def __repr__(self) -> str:
        return f"RecordStore({str(self.path)!r}, {self.model.__name__})"

    def load(self, *, missing_ok: bool = True) -> list[R]:
        return load_collection(self.path, self.model, missing_ok=missing_ok)

    def save(self, records: Sequence[R]) -> None:
        save_collection(self.path, records)

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Exclusive scope over this collection file within the process."""
        lock = _lock_for(self.path)
        with lock:
            yield

    def mutate(self, transform: Callable[[list[R]], list[R]], *, missing_ok: bool = True) -> list[R]:
        """Load, transform and save the collection as one locked unit.

        ``transform`` may raise to abort the cycle; nothing is written then.
        Returns the saved collection.
        """
        with self.locked():
            records = self.load(missing_ok=missing_ok)
            updated = transform(records)
            self.save(updated)
            logger.debug("Saved %d records to %s", len(updated), self.path)
            return updated
