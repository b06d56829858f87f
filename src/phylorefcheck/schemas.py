from __future__ import annotations

from datetime import datetime
from typing import FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from .utils import stable_hash

StatusTag = Literal["draft", "final-draft", "submitted", "published", "other"]
Outcome = Literal["PASS", "FAIL", "EXPECTED_FAIL", "NOT_TESTABLE"]

NO_SUCCESS_EXIT_STATUS = -1


class Definition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: Optional[str] = None
    specifiers: FrozenSet[str] = Field(default_factory=frozenset)

    @property
    def display_label(self) -> str:
        return self.label if self.label else self.id

    @field_serializer("specifiers")
    def _sorted_specifiers(self, specifiers: FrozenSet[str]) -> List[str]:
        return sorted(specifiers)


class Specifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    unmatched: bool = False


class StatusRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: StatusTag
    status_iri: str = ""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.start is not None and self.end is None

    def __str__(self) -> str:
        name = self.status_iri or self.status
        if self.start is None and self.end is None:
            return name
        start = self.start.isoformat() if self.start is not None else "?"
        end = self.end.isoformat() if self.end is not None else "ongoing"
        return f"{name} ({start} to {end})"


class ReconciliationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    resolved: FrozenSet[str]
    expected: FrozenSet[str]
    missing: FrozenSet[str]
    extra: FrozenSet[str]

    @property
    def exact(self) -> bool:
        return not self.missing and not self.extra


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    outcome: Outcome
    reason: Optional[str] = None
    comments: Tuple[str, ...] = ()

    @model_validator(mode="after")
    def _validate_reason(self) -> "Verdict":
        if self.outcome in ("EXPECTED_FAIL", "NOT_TESTABLE") and not self.reason:
            raise ValueError(f"{self.outcome} requires reason")
        if self.outcome in ("PASS", "FAIL") and self.reason is not None:
            raise ValueError(f"{self.outcome} does not take a reason")
        return self

    @classmethod
    def passed(cls, comments: Tuple[str, ...] = ()) -> "Verdict":
        return cls(outcome="PASS", comments=comments)

    @classmethod
    def failed(cls, comments: Tuple[str, ...] = ()) -> "Verdict":
        return cls(outcome="FAIL", comments=comments)

    @classmethod
    def expected_fail(cls, reason: str, comments: Tuple[str, ...] = ()) -> "Verdict":
        return cls(outcome="EXPECTED_FAIL", reason=reason, comments=comments)

    @classmethod
    def not_testable(cls, reason: str, comments: Tuple[str, ...] = ()) -> "Verdict":
        return cls(outcome="NOT_TESTABLE", reason=reason, comments=comments)

    @property
    def ok(self) -> bool:
        return self.outcome == "PASS"

    @property
    def directive(self) -> Optional[str]:
        if self.outcome == "EXPECTED_FAIL":
            return "TODO"
        if self.outcome == "NOT_TESTABLE":
            return "SKIP"
        return None


class ReportEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    sequence: int = Field(ge=1)
    definition: Definition
    verdict: Verdict


class ReportCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: int = 0
    failure: int = 0
    todo: int = 0
    skip: int = 0

    @property
    def exit_status(self) -> int:
        if self.success == 0:
            return NO_SUCCESS_EXIT_STATUS
        return self.failure


class Report(BaseModel):
    model_config = ConfigDict(frozen=True)

    header_comments: List[str] = Field(default_factory=list)
    entries: List[ReportEntry] = Field(default_factory=list)
    counts: ReportCounts = Field(default_factory=ReportCounts)

    @model_validator(mode="after")
    def _validate_sequence(self) -> "Report":
        for index, entry in enumerate(self.entries, start=1):
            if entry.sequence != index:
                raise ValueError(
                    f"entry {entry.definition.id} has sequence {entry.sequence}, expected {index}"
                )
        return self

    @property
    def plan(self) -> int:
        return len(self.entries)

    @property
    def exit_status(self) -> int:
        return self.counts.exit_status

    @property
    def digest(self) -> str:
        """blake3 of the canonical JSON form of the report."""
        return stable_hash(self.model_dump(mode="json"))
