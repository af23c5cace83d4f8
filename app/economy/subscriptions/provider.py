from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import get_settings
from app.db.models.subscriptions import Subscription
from app.db.models.users import User
from app.db.repo.subscriptions_repo import SubscriptionsRepo
from app.db.session import SessionLocal

from .errors import ProvisioningError
from .panel_client import PanelClientState, ProvisioningPanelClient

logger = structlog.get_logger(__name__)
UTC = timezone.utc


class SubscriptionProvider(Protocol):
    async def ensure_provisioned(self, user: User) -> Subscription: ...

    async def sync_state(self, user: User) -> None: ...


def _status_for(expires_at: datetime | None, *, now_utc: datetime) -> str:
    if expires_at is not None and expires_at <= now_utc:
        return "EXPIRED"
    return "ACTIVE"


def _effective_expiry(subscription: Subscription) -> datetime | None:
    candidates = [value for value in (subscription.paid_until, subscription.expires_at) if value]
    if not candidates:
        return None
    return max(candidates)


class PanelSubscriptionProvider:
    """Keeps the local ``subscriptions`` row and the provisioning panel in step.

    Without a panel client only the local row is managed.
    """

    def __init__(
        self,
        *,
        panel: ProvisioningPanelClient | None = None,
        session_factory: async_sessionmaker[AsyncSession] = SessionLocal,
    ) -> None:
        self._panel = panel
        self._session_factory = session_factory

    async def _load(self, user_id: int) -> Subscription | None:
        async with self._session_factory.begin() as session:
            return await SubscriptionsRepo.get_by_user_id(session, user_id=user_id)

    async def ensure_provisioned(self, user: User) -> Subscription:
        try:
            existing = await self._load(user.id)
        except SQLAlchemyError as exc:
            raise ProvisioningError(f"subscription lookup failed for user {user.id}") from exc
        if existing is not None:
            return existing

        now_utc = datetime.now(UTC)
        client_state: PanelClientState | None = None
        if self._panel is not None:
            client_state = await self._panel.ensure_client(user.telegram_user_id)

        expires_at = client_state.expires_at if client_state is not None else None
        subscription = Subscription(
            user_id=user.id,
            status=_status_for(expires_at, now_utc=now_utc),
            paid_until=None,
            expires_at=expires_at,
            enabled=client_state.enabled if client_state is not None else True,
            last_synced_at=now_utc if client_state is not None else None,
            created_at=now_utc,
            updated_at=now_utc,
        )
        try:
            async with self._session_factory.begin() as session:
                created = await SubscriptionsRepo.create(session, subscription=subscription)
        except IntegrityError:
            # A concurrent registration provisioned the same user first.
            reread = await self._load(user.id)
            if reread is None:
                raise ProvisioningError(f"subscription vanished for user {user.id}")
            return reread
        except SQLAlchemyError as exc:
            raise ProvisioningError(f"subscription create failed for user {user.id}") from exc

        logger.info(
            "subscription_provisioned",
            user_id=user.id,
            panel_synced=client_state is not None,
        )
        return created

    async def sync_state(self, user: User) -> None:
        subscription = await self._load(user.id)
        if subscription is None:
            logger.warning("subscription_sync_missing_row", user_id=user.id)
            return

        now_utc = datetime.now(UTC)
        confirmed_expires_at: datetime | None = None
        target_expiry = _effective_expiry(subscription)
        if self._panel is not None and target_expiry is not None:
            state = await self._panel.push_expiry(user.telegram_user_id, target_expiry)
            confirmed_expires_at = state.expires_at

        async with self._session_factory.begin() as session:
            await SubscriptionsRepo.mark_synced(
                session,
                user_id=user.id,
                synced_at=now_utc,
                expires_at=confirmed_expires_at,
            )


def build_subscription_provider() -> PanelSubscriptionProvider:
    settings = get_settings()
    panel: ProvisioningPanelClient | None = None
    if settings.provisioning_panel_url:
        panel = ProvisioningPanelClient(
            base_url=settings.provisioning_panel_url,
            token=settings.provisioning_panel_token,
            timeout_seconds=settings.provisioning_timeout_seconds,
        )
    return PanelSubscriptionProvider(panel=panel)
