"""Durable storage for quote submissions.

The file store writes two files per submission into one directory::

    form-submissions/
        2025-09-27_14-03-11_65f1c2a9b3d4e.json   (structured, parsed back by list_all)
        2025-09-27_14-03-11_65f1c2a9b3d4e.txt    (plain-text copy for humans)

Each write targets a distinct, uniquely named file, so concurrent requests
never contend for the same path. A listing taken while a submission is being
written may or may not include it.
"""

import logging
import os
import threading
from pathlib import Path

from django.conf import settings
from django.utils.module_loading import import_string
from pydantic import ValidationError

from .models import Submission

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for submission store failures."""

    reason = "save_error"


class StoreDirectoryError(StoreError):
    """The storage directory is missing and could not be created."""

    reason = "directory_error"


class StoreNotWritable(StoreError):
    """The storage directory exists but cannot be written to."""


class StoreWriteFailed(StoreError):
    """At least one of the two representations could not be written."""


def render_text(submission: Submission) -> str:
    """Render the human-readable plain-text copy of a submission."""
    data = submission.form_data
    return (
        "=== OFFERTE AANVRAAG ===\n"
        f"ID: {submission.id}\n"
        f"Datum/Tijd: {submission.timestamp}\n"
        f"IP Adres: {submission.ip_address}\n\n"
        "CONTACTGEGEVENS:\n"
        f"Bedrijfsnaam: {data.company}\n"
        f"Naam: {data.full_name}\n"
        f"Email: {data.emailaddress}\n"
        f"Telefoon: {data.phonenumber}\n"
        f"Adres: {data.address_display}\n\n"
        "GEWENSTE DIENSTEN:\n"
        f"{submission.services_text}\n\n"
        "BERICHT:\n"
        f"{data.message}\n"
        "\n=== EINDE AANVRAAG ===\n"
    )


def sort_newest_first(submissions) -> list[Submission]:
    """
    Order by creation time descending; the id breaks ties within the same second.

    The UTC ``created_at`` decides, so the repeated hour after the autumn DST
    change does not shuffle records. Records without it fall back to the
    local ``timestamp``.
    """
    return sorted(submissions, key=lambda s: (s.created_at or s.timestamp, s.id), reverse=True)


class SubmissionStore:
    """Interface for submission persistence."""

    def persist(self, submission: Submission) -> None:
        """Durably store a submission or raise a StoreError."""
        raise NotImplementedError

    def list_all(self) -> list[Submission]:
        """Return every stored submission, newest first."""
        raise NotImplementedError


class FileSubmissionStore(SubmissionStore):
    """
    Filesystem-backed store: one JSON and one TXT file per submission.

    The directory is created (with parents) once, before the first write of
    the process. Both files must be written for ``persist`` to succeed;
    a half-written pair is left on disk for manual recovery.
    """

    json_suffix = ".json"
    text_suffix = ".txt"

    def __init__(self, directory: Path | str | None = None) -> None:
        if directory is None:
            directory = settings.QUOTE_SUBMISSIONS_DIR
        self.directory = Path(directory)
        self._ensured = False
        self._lock = threading.Lock()

    def _ensure_directory(self) -> None:
        with self._lock:
            if self._ensured:
                return
            self._ensured = True
            if self.directory.is_dir():
                return
            try:
                self.directory.mkdir(mode=0o755, parents=True, exist_ok=True)
            except OSError as exc:
                logger.error("Failed to create submissions directory %s: %s", self.directory, exc)
                raise StoreDirectoryError(f"Cannot create {self.directory}") from exc
            logger.info("Created submissions directory %s", self.directory)

    def _write(self, path: Path, content: str) -> bool:
        try:
            # "x" mode: never overwrite an existing submission
            with path.open("x", encoding="utf-8") as fh:
                written = fh.write(content)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            return False
        logger.info("Wrote %s (%d chars)", path, written)
        return True

    def persist(self, submission: Submission) -> None:
        self._ensure_directory()

        if not self.directory.is_dir():
            raise StoreDirectoryError(f"{self.directory} does not exist")
        if not os.access(self.directory, os.W_OK):
            logger.error("Submissions directory is not writable: %s", self.directory)
            raise StoreNotWritable(f"{self.directory} is not writable")

        json_path = self.directory / f"{submission.id}{self.json_suffix}"
        text_path = self.directory / f"{submission.id}{self.text_suffix}"

        json_ok = self._write(json_path, submission.model_dump_json(indent=4))
        text_ok = self._write(text_path, render_text(submission))

        if not (json_ok and text_ok):
            raise StoreWriteFailed(f"Incomplete write for submission {submission.id}")

    def list_all(self) -> list[Submission]:
        if not self.directory.is_dir():
            return []

        submissions = []
        for path in self.directory.glob(f"*{self.json_suffix}"):
            try:
                submissions.append(Submission.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError, ValidationError) as exc:
                logger.warning("Skipping unreadable submission file %s: %s", path, exc)
        return sort_newest_first(submissions)


class InMemorySubmissionStore(SubmissionStore):
    """Process-local store, used in tests and for local experiments."""

    def __init__(self) -> None:
        self._records: dict[str, Submission] = {}
        self._lock = threading.Lock()

    def persist(self, submission: Submission) -> None:
        with self._lock:
            if submission.id in self._records:
                raise StoreWriteFailed(f"Submission {submission.id} already stored")
            self._records[submission.id] = submission

    def list_all(self) -> list[Submission]:
        with self._lock:
            records = list(self._records.values())
        return sort_newest_first(records)

    def __len__(self) -> int:
        return len(self._records)


_stores: dict[tuple[str, str], SubmissionStore] = {}
_stores_lock = threading.Lock()


def get_submission_store() -> SubmissionStore:
    """
    Return the configured store, one instance per (class, directory) per process.

    The store class is taken from ``settings.QUOTE_SUBMISSION_STORE``.
    """
    path = settings.QUOTE_SUBMISSION_STORE
    key = (path, str(settings.QUOTE_SUBMISSIONS_DIR))
    with _stores_lock:
        store = _stores.get(key)
        if store is None:
            store = import_string(path)()
            _stores[key] = store
        return store
