"""
EngagementModel Model.

One row of ``master_engagement_models``.  The behavioural ``kind`` is
resolved once when the row is loaded.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from marketplace_console.models.enums import EngagementModelKind


class EngagementModel(BaseModel):
    """Billing/relationship style between the platform and an organization."""

    id: str
    name: str = Field(min_length=1)
    description: Optional[str] = None
    is_user_created: bool = False
    kind: EngagementModelKind = EngagementModelKind.SUBSCRIPTION

    @field_validator("name", mode="before")
    @classmethod
    def _strip_whitespace(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: object) -> object:
        if isinstance(v, int):
            return str(v)
        return v

    @model_validator(mode="before")
    @classmethod
    def _resolve_kind(cls, data: object) -> object:
        if isinstance(data, dict) and not data.get("kind") and data.get("name"):
            return {**data, "kind": EngagementModelKind.from_name(str(data["name"]))}
        return data

    @property
    def is_fee_based(self) -> bool:
        return self.kind.is_fee_based

    model_config = {"from_attributes": True}
