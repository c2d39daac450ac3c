from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .enums import CheckStatus


class _Contract(BaseModel):
    """
    Serialized field names are camelCase and stable; reporters dump with by_alias=True.
    Instances are immutable once produced.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class CheckResult(_Contract):
    name: str = Field(min_length=1, max_length=256)
    status: CheckStatus
    # Copied from Check.description for the reporters
    description: str = ""

    # Top-level trials only; shrink re-runs are counted separately.
    trials_run: int = Field(ge=0, default=0)
    shrink_attempts: int = Field(ge=0, default=0)
    duration: float = Field(ge=0.0, default=0.0, description="Wall time in milliseconds")

    # Set by the runner; the counterexample itself may legitimately be None
    has_counterexample: bool = False
    counterexample: Optional[Any] = None
    error_message: Optional[str] = None
    aborted: bool = Field(default=False, description="True when a DriverFatalError ended this check")

    @model_validator(mode="after")
    def check_failure_evidence(self) -> "CheckResult":
        if self.status == CheckStatus.FAIL and not self.aborted and not self.has_counterexample:
            raise ValueError(f"Failed check {self.name!r} must carry a counterexample")
        if self.status == CheckStatus.SKIP and self.trials_run != 0:
            raise ValueError(f"Skipped check {self.name!r} cannot report trials")
        return self

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS

    @property
    def failed(self) -> bool:
        return self.status == CheckStatus.FAIL


class Summary(_Contract):
    total: int = Field(ge=0)
    passed: int = Field(ge=0)
    failed: int = Field(ge=0)
    skipped: int = Field(ge=0)

    @model_validator(mode="after")
    def check_counts(self) -> "Summary":
        if self.passed + self.failed + self.skipped != self.total:
            raise ValueError(
                f"Summary counts do not add up: {self.passed}+{self.failed}+{self.skipped} != {self.total}"
            )
        return self


class Report(_Contract):
    """
    Run-level document handed to reporters.
    One seed and one timestamp per run; results keep execution order.
    """
    version: str
    seed: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    target_base_url: str
    results: List[CheckResult] = Field(default_factory=list)
    summary: Summary

    @model_validator(mode="after")
    def check_summary_total(self) -> "Report":
        if self.summary.total != len(self.results):
            raise ValueError(f"summary.total={self.summary.total} but {len(self.results)} results")
        return self

    @property
    def succeeded(self) -> bool:
        return self.summary.failed == 0

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
