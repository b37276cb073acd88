"""Loader and validator for design system data files.

Reads design-tokens.json, components.json and guidelines.json from a
data directory and validates each record, collecting error messages
that name the offending record rather than stopping at the first one.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import configuration_error
from .models import CacheSnapshot, Component, DesignToken, Guideline

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

DATA_FILE_SUFFIXES = frozenset({".json"})


@dataclass(frozen=True)
class DataSource(Generic[RecordT]):
    """Describes one data file and how its records are identified."""

    key: str
    filename: str
    model: type[RecordT]
    label: str
    noun: str
    id_field: str


TOKENS_SOURCE = DataSource("design_tokens", "design-tokens.json", DesignToken, "Design tokens", "token", "name")
COMPONENTS_SOURCE = DataSource("components", "components.json", Component, "Components", "component", "name")
GUIDELINES_SOURCE = DataSource("guidelines", "guidelines.json", Guideline, "Guidelines", "guideline", "id")

SOURCES: tuple[DataSource[Any], ...] = (TOKENS_SOURCE, COMPONENTS_SOURCE, GUIDELINES_SOURCE)


@dataclass
class LoadOutcome:
    """Parsed records plus every collected error."""

    design_tokens: list[DesignToken] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)
    guidelines: list[Guideline] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if every file parsed and every record validated."""
        return not self.errors


def _describe_record(record: Any, index: int, source: DataSource[Any]) -> str:
    identifier = record.get(source.id_field) if isinstance(record, dict) else None
    if isinstance(identifier, str) and identifier:
        return f"{source.noun} {index} ({identifier})"
    return f"{source.noun} {index}"


def validate_records(
    raw_records: list[Any], source: DataSource[RecordT]
) -> tuple[list[RecordT], list[str]]:
    """Validate raw dicts against the source's model.

    Args:
        raw_records: Decoded JSON values.
        source: Which collection these belong to.

    Returns:
        (valid records, error messages). Errors name the record index,
        its identifier when present, and the failing field.
    """
    records: list[RecordT] = []
    errors: list[str] = []
    for index, raw in enumerate(raw_records):
        try:
            records.append(source.model.model_validate(raw))
        except ValidationError as exc:
            where = _describe_record(raw, index, source)
            for detail in exc.errors():
                loc = ".".join(str(part) for part in detail["loc"]) or "<record>"
                errors.append(f"{source.label}: {where}: {loc}: {detail['msg']}")
    return records, errors


def validate_snapshot(snapshot: CacheSnapshot) -> list[str]:
    """Re-validate an already cached snapshot.

    Returns:
        Error messages; empty when the snapshot is consistent.
    """
    errors: list[str] = []
    collections: list[tuple[DataSource[Any], tuple[BaseModel, ...]]] = [
        (TOKENS_SOURCE, snapshot.design_tokens),
        (COMPONENTS_SOURCE, snapshot.components),
        (GUIDELINES_SOURCE, snapshot.guidelines),
    ]
    for source, records in collections:
        raw = [record.model_dump(mode="json") for record in records]
        _, source_errors = validate_records(raw, source)
        errors.extend(source_errors)
    return errors


class DataLoader:
    """Reads and validates the three data files of a data directory.

    Usage:
        loader = DataLoader(Path("data"))
        outcome = await loader.load()
        if outcome.ok:
            ...
    """

    def __init__(self, data_path: Path | str) -> None:
        self._data_path = Path(data_path)

    @property
    def data_path(self) -> Path:
        return self._data_path

    def check_source(self) -> None:
        """Verify the data directory exists.

        Raises:
            DesignSystemError: CONFIGURATION if the directory is missing
                or is not a directory.
        """
        if not self._data_path.exists():
            raise configuration_error(
                "data.data_path", f"data directory not found: {self._data_path}"
            )
        if not self._data_path.is_dir():
            raise configuration_error(
                "data.data_path", f"data path is not a directory: {self._data_path}"
            )

    async def load(self) -> LoadOutcome:
        """Read and validate every data file.

        Per-file problems (missing file, bad JSON, invalid records) are
        collected in the outcome. Only an inaccessible data directory raises.

        Raises:
            DesignSystemError: CONFIGURATION if the data directory is inaccessible.
        """
        self.check_source()
        outcome = LoadOutcome()
        for source in SOURCES:
            records, errors = await asyncio.to_thread(self._load_source, source)
            setattr(outcome, source.key, records)
            outcome.errors.extend(errors)
        logger.debug(
            "Loaded %s: %d tokens, %d components, %d guidelines, %d errors",
            self._data_path,
            len(outcome.design_tokens),
            len(outcome.components),
            len(outcome.guidelines),
            len(outcome.errors),
        )
        return outcome

    def _load_source(self, source: DataSource[RecordT]) -> tuple[list[RecordT], list[str]]:
        path = self._data_path / source.filename
        if not path.is_file():
            return [], [f"{source.label} file not found: {path}"]

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return [], [f"Failed to read {source.label.lower()} from {path}: {exc}"]

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            return [], [f"Invalid JSON in {path}: {exc}"]

        raw_records = data if isinstance(data, list) else [data]
        return validate_records(raw_records, source)
