"""Record providers feeding the query pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence
from xml.etree import ElementTree

from pydantic import ValidationError

from usersearch.domain.models import Record
from usersearch.services.exceptions import FatalError

_ROW_FIELDS = ("id", "first_name", "last_name", "age", "about", "gender")


class RecordProvider(Protocol):
    def load(self) -> Sequence[Record]:
        """Return the full dataset in its natural order."""


class StaticRecordProvider:
    """Serve a fixed, already-loaded sequence of records."""

    def __init__(self, records: Sequence[Record]) -> None:
        self._records = tuple(records)

    def load(self) -> Sequence[Record]:
        return self._records


class XmlRecordProvider:
    """Read ``<root><row>...</row></root>`` datasets from disk on every call.

    Unknown row elements are ignored. Any I/O or parse failure is raised as
    ``FatalError`` with the underlying description.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Sequence[Record]:
        try:
            data = self._path.read_bytes()
        except OSError as exc:
            raise FatalError(f"open {self._path}: {exc.strerror or exc}") from exc

        try:
            root = ElementTree.fromstring(data)
        except ElementTree.ParseError as exc:
            raise FatalError(f"malformed dataset {self._path}: {exc}") from exc

        records: list[Record] = []
        for row in root.iter("row"):
            values = {name: (row.findtext(name) or "").strip() for name in _ROW_FIELDS}
            # about keeps its surrounding whitespace
            values["about"] = row.findtext("about") or ""
            try:
                records.append(Record.model_validate(values))
            except ValidationError as exc:
                raise FatalError(f"malformed dataset row in {self._path}: {exc}") from exc
        return records


__all__ = ["RecordProvider", "StaticRecordProvider", "XmlRecordProvider"]
