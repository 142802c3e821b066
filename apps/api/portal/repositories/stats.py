"""Row counts for the admin dashboard."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.invoice import Invoice
from ..models.profile import Profile
from ..models.property import Property
from ..models.user_property import UserProperty
from ..models.user_redirect import UserRedirect

COUNTED_TABLES = {
    "properties": Property,
    "clients": Profile,
    "assignments": UserProperty,
    "redirects": UserRedirect,
    "invoices": Invoice,
}


async def count_rows(session: AsyncSession) -> dict[str, int]:
    """Return row counts for every dashboard table in a single round trip."""

    columns = [
        select(func.count()).select_from(model).scalar_subquery().label(name)
        for name, model in COUNTED_TABLES.items()
    ]
    row = (await session.execute(select(*columns))).one()
    return {name: int(row._mapping[name] or 0) for name in COUNTED_TABLES}
