"""Core data types: index entries, matches and the selection phase."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Phase(str, Enum):
    """Top-level lifecycle of the selection model."""

    LOADING = "loading"
    READY = "ready"
    QUITTING = "quitting"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.QUITTING, Phase.FAILED)


@dataclass(frozen=True)
class Entry:
    """One searchable item from the index."""

    id: str
    label: str = ""
    observed_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Entry id must be non-empty")


@dataclass(frozen=True)
class Match:
    """An entry scored against the current query.

    ``positions`` are character offsets into the entry id, ascending.
    """

    entry_index: int
    score: int = 0
    positions: tuple[int, ...] = field(default_factory=tuple)


class IndexRecord(BaseModel):
    """Wire shape of one line of the Go module index."""

    model_config = ConfigDict(extra="ignore")

    path: str = Field(alias="Path", min_length=1)
    version: str = Field(default="", alias="Version")
    timestamp: datetime | None = Field(default=None, alias="Timestamp")

    @field_validator("version", mode="before")
    @classmethod
    def _none_version(cls, value: object) -> object:
        return "" if value is None else value

    def to_entry(self) -> Entry:
        return Entry(id=self.path, label=self.version, observed_at=self.timestamp)
