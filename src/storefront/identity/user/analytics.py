"""User counts and the monthly registration trend."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from storefront.identity.user.user import User, UserRole

TREND_MONTHS = 12


def _month_start(when, months_back=0) -> datetime:
    month_index = when.year * 12 + (when.month - 1) - months_back
    return datetime(month_index // 12, month_index % 12 + 1, 1, tzinfo=UTC)


def _aware(value):
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass
class UserSummary:
    total_users: int = 0
    active_users: int = 0
    admin_users: int = 0
    new_users_this_month: int = 0
    registration_trend: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_users": self.total_users,
            "active_users": self.active_users,
            "admin_users": self.admin_users,
            "new_users_this_month": self.new_users_this_month,
            "registration_trend": self.registration_trend,
        }


def registration_trend(users, since) -> list[dict]:
    """Registrations per calendar month from ``since``, oldest month first; empty months are omitted."""
    months = Counter()
    for user in users:
        created = _aware(user.created_at) if user.created_at else None
        if created is not None and created >= since:
            months[(created.year, created.month)] += 1
    return [{"year": year, "month": month, "count": months[(year, month)]} for year, month in sorted(months)]


def summarize_users(now=None) -> UserSummary:
    now = now or datetime.now(UTC)
    repo = current_domain.repository_for(User)

    trend_start = _month_start(now, months_back=TREND_MONTHS - 1)
    recent = repo.registered_since(trend_start)
    this_month = _month_start(now)

    return UserSummary(
        total_users=repo.count(),
        active_users=repo.count(is_active=True),
        admin_users=repo.count(role=UserRole.ADMIN.value),
        new_users_this_month=sum(1 for user in recent if user.created_at and _aware(user.created_at) >= this_month),
        registration_trend=registration_trend(recent, trend_start),
    )
