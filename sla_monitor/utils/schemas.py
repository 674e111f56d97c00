"""Pydantic models validating data crossing the store and queue boundaries.

`SubmissionRow` validates a row handed back by a submission store before the
engine turns it into a `Submission`; `JobMessage` validates a job payload
popped off the queue. Both are strict about the fields the engine reads and
ignore anything else the store or broker carries along.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SubmissionRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    received_at: datetime
    sla_days: int = Field(gt=0)
    status: Literal["OPEN", "ESCALATED", "RESOLVED"]
    escalation_count: int = Field(default=0, ge=0)
    category: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        # numeric primary keys are common in relational stores
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("escalation_count", mode="before")
    @classmethod
    def _null_count(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("received_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return _as_utc(v)


class JobMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    job_id: str
    type: Literal["SCAN", "ESCALATE"]
    submission_id: Optional[str] = None
    scheduled_at: datetime
    retry_count: int = Field(default=0, ge=0)

    @field_validator("scheduled_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @model_validator(mode="after")
    def _check_submission_id(self) -> "JobMessage":
        if self.type == "ESCALATE" and not self.submission_id:
            raise ValueError("ESCALATE jobs require a submission_id")
        if self.type == "SCAN" and self.submission_id is not None:
            raise ValueError("SCAN jobs must not carry a submission_id")
        return self


__all__ = ["SubmissionRow", "JobMessage"]
