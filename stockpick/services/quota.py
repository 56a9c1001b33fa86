"""Per-user monthly analysis quota.

Usage belongs to a calendar month in ``settings.quota_timezone``. Each
record remembers the month its counter was started in; loading a record
from an earlier month resets the counter before anything reads it, so
no scheduled job is needed for the monthly rollover.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import ValidationError as PydanticValidationError

from stockpick.core.config import settings
from stockpick.core.exceptions import AuthorizationError, ValidationError
from stockpick.core.logging import get_logger
from stockpick.core.security import TokenData
from stockpick.schemas.quota import QuotaRecord
from stockpick.store.base import DocumentStore, join_path


logger = get_logger("services.quota")

USERS = "users"
USAGE_FIELD = "usage_this_month"
COMPUTED_FIELDS = {"can_use", "remaining"}


def quota_path(user_id: str) -> str:
    return join_path(USERS, user_id)


def _document(record: QuotaRecord) -> dict:
    return record.model_dump(mode="json", exclude=COMPUTED_FIELDS)


def _require_admin(actor: TokenData, action: str) -> None:
    if not actor.is_admin:
        logger.warning(f"Non-admin {actor.user_id} attempted quota {action}")
        raise AuthorizationError(message=f"Admin privileges required to {action}")


class QuotaLedger:
    """Reads and updates quota records in the document store."""

    def __init__(
        self,
        store: DocumentStore,
        default_limit: Optional[int] = None,
        default_enabled: Optional[bool] = None,
        timezone: Optional[str] = None,
    ):
        self.store = store
        self.default_limit = settings.quota_default_limit if default_limit is None else default_limit
        self.default_enabled = settings.quota_default_enabled if default_enabled is None else default_enabled
        self.timezone = ZoneInfo(timezone or settings.quota_timezone)

    def current_period(self, now: Optional[datetime] = None) -> str:
        now = now.astimezone(self.timezone) if now else datetime.now(self.timezone)
        return now.strftime("%Y-%m")

    async def load(self, user_id: str, email: Optional[str] = None) -> QuotaRecord:
        """Get a user's record, creating it with defaults on first access."""
        path = quota_path(user_id)
        period = self.current_period()
        document = await self.store.get(path)

        if document is None:
            record = QuotaRecord(
                user_id=user_id,
                email=email,
                enabled=self.default_enabled,
                limit=self.default_limit,
                period=period,
            )
            await self.store.set(path, _document(record))
            logger.info(f"Created quota record for {user_id}", extra={"limit": record.limit})
            return record

        record = QuotaRecord.model_validate({**document, "user_id": user_id})
        changes: dict = {}
        if record.period != period:
            changes.update({USAGE_FIELD: 0, "period": period})
            logger.info(
                f"Quota period rolled over for {user_id}",
                extra={"from_period": record.period, "to_period": period},
            )
        if email and record.email != email:
            changes["email"] = email
        if changes:
            await self.store.set(path, changes, merge=True)
            record = record.model_copy(update=changes)
        return record

    async def can_use(self, user_id: str) -> bool:
        return (await self.load(user_id)).can_use

    async def increment(self, user_id: str) -> int:
        """Count one analysis against this month's usage."""
        await self.load(user_id)
        usage = await self.store.increment(quota_path(user_id), USAGE_FIELD, 1)
        logger.debug(f"Quota usage for {user_id} is now {usage}")
        return usage

    async def reset_monthly(self, user_id: str, actor: TokenData) -> QuotaRecord:
        """Zero a user's usage. Allowed for the owner and for admins."""
        if actor.user_id != user_id and not actor.is_admin:
            raise AuthorizationError(message="Only the owner or an admin can reset this quota")

        record = await self.load(user_id)
        changes = {USAGE_FIELD: 0, "period": self.current_period()}
        await self.store.set(quota_path(user_id), changes, merge=True)
        logger.info(f"Quota reset for {user_id} by {actor.user_id}")
        return record.model_copy(update=changes)

    async def set_limit(
        self, user_id: str, limit: int, enabled: bool, actor: TokenData
    ) -> QuotaRecord:
        """Change a user's limit and enabled flag. Usage is left as is."""
        _require_admin(actor, "change limits")
        if limit < 0:
            raise ValidationError(message="Quota limit must be zero or greater")

        record = await self.load(user_id)
        changes = {"limit": limit, "enabled": enabled}
        await self.store.set(quota_path(user_id), changes, merge=True)
        logger.info(
            f"Quota limit for {user_id} set by {actor.user_id}",
            extra={"limit": limit, "enabled": enabled},
        )
        return record.model_copy(update=changes)

    async def list_records(self, actor: TokenData) -> list[QuotaRecord]:
        """All quota records, as of the current period."""
        _require_admin(actor, "list quotas")
        period = self.current_period()
        records: list[QuotaRecord] = []
        for document in await self.store.list(USERS, order_by="created_at"):
            try:
                record = QuotaRecord.model_validate(document)
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed quota record: {e}")
                continue
            if record.period != period:
                record = record.model_copy(update={USAGE_FIELD: 0, "period": period})
            records.append(record)
        return records

    async def reset_all(self, actor: TokenData) -> int:
        """Zero every user's usage; returns the number of records reset."""
        _require_admin(actor, "reset all quotas")
        changes = {USAGE_FIELD: 0, "period": self.current_period()}
        records = await self.list_records(actor)
        for record in records:
            await self.store.set(quota_path(record.user_id), changes, merge=True)
        logger.info(f"All quotas reset by {actor.user_id}", extra={"count": len(records)})
        return len(records)
