"""Usage quota schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from .reports import utcnow


class QuotaRecord(BaseModel):
    """Per-user monthly analysis allowance."""

    user_id: str
    email: Optional[str] = None
    enabled: bool = True
    limit: int = Field(default=5, ge=0)
    usage_this_month: int = Field(default=0, ge=0)
    period: str = Field(default="", description="YYYY-MM the usage counter belongs to")
    created_at: datetime = Field(default_factory=utcnow)

    @computed_field
    @property
    def can_use(self) -> bool:
        """A disabled limit is not enforced."""
        return not self.enabled or self.usage_this_month < self.limit

    @computed_field
    @property
    def remaining(self) -> Optional[int]:
        """Analyses left this month, or None while the limit is disabled."""
        if not self.enabled:
            return None
        return max(self.limit - self.usage_this_month, 0)


class QuotaLimitUpdate(BaseModel):
    """Admin request to change a user's limit or enable flag."""

    limit: int = Field(..., ge=0)
    enabled: bool = True
