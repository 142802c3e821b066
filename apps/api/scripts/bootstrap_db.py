"""Create the portal schema, install change triggers and seed demo data."""
from __future__ import annotations

import asyncio
import logging
import re
from datetime import date
from decimal import Decimal

from sqlalchemy import select, text

from portal.core.config import settings
from portal.core.logging import configure_logging
from portal.db.session import SessionLocal, engine
from portal.models import (
	AppRole,
	Base,
	Invoice,
	Profile,
	Property,
	RedirectType,
	UserProperty,
	UserRedirect,
	UserRole,
)

logger = logging.getLogger("bootstrap_db")

NOTIFIED_TABLES = ("invoices", "properties", "user_properties", "user_redirects")

NOTIFY_FUNCTION = """
CREATE OR REPLACE FUNCTION notify_table_change() RETURNS trigger AS $$
BEGIN
	PERFORM pg_notify(
		TG_ARGV[0],
		json_build_object(
			'table', TG_TABLE_NAME,
			'type', TG_OP,
			'record', CASE WHEN TG_OP = 'DELETE' THEN NULL ELSE row_to_json(NEW) END,
			'old_record', CASE WHEN TG_OP = 'INSERT' THEN NULL ELSE row_to_json(OLD) END
		)::text
	);
	RETURN NULL;
END;
$$ LANGUAGE plpgsql
"""

PROFILES = [
	{"id": "00000000-0000-4000-8000-000000000001", "email": "admin@apexrenting.example", "full_name": "Portal Admin", "admin": True},
	{"id": "00000000-0000-4000-8000-000000000002", "email": "ava.khan@example.com", "full_name": "Ava Khan", "admin": False},
	{"id": "00000000-0000-4000-8000-000000000003", "email": "daniel.lee@example.com", "full_name": None, "admin": False},
]

PROPERTIES = [
	{
		"id": "10000000-0000-4000-8000-000000000001",
		"name": "Maple Court Duplex",
		"address": "14 Maple Court, Springfield",
		"assigned_to": ["00000000-0000-4000-8000-000000000002"],
		"invoices": [
			(Decimal("100.00"), "Maintenance", "Handy Co", date(2024, 1, 15)),
			(Decimal("50.00"), "Maintenance", "Handy Co", date(2024, 2, 10)),
			(Decimal("75.00"), "Utilities", "City Water", date(2024, 1, 20)),
			(Decimal("1200.00"), "Mortgage", "First Bank", date(2024, 2, 1)),
			(Decimal("40.00"), None, "Misc Supply", date(2024, 3, 3)),
		],
	},
	{
		"id": "10000000-0000-4000-8000-000000000002",
		"name": "Harbor View Loft",
		"address": "220 Harbor Street, Unit 5",
		"assigned_to": [],
		"invoices": [
			(Decimal("310.50"), "Insurance", "Shield Mutual", date(2024, 1, 5)),
			(Decimal("89.99"), "Utilities", "Metro Power", date(2024, 1, 28)),
		],
	},
]

REDIRECTS = [
	("00000000-0000-4000-8000-000000000002", RedirectType.LEASE, "https://leases.example.com/ava"),
	("00000000-0000-4000-8000-000000000002", RedirectType.REPORT, "https://reports.example.com/ava"),
]


async def create_schema() -> None:
	"""Create the database schema if it does not already exist."""

	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)


async def install_change_triggers(channel: str) -> None:
	"""Emit a NOTIFY on ``channel`` for every row change on the watched tables."""

	if not re.fullmatch(r"[a-z_][a-z0-9_]*", channel):
		raise ValueError(f"Unsafe channel name: {channel!r}")

	async with engine.begin() as conn:
		await conn.execute(text(NOTIFY_FUNCTION))
		for table in NOTIFIED_TABLES:
			await conn.execute(text(f"DROP TRIGGER IF EXISTS {table}_notify ON {table}"))
			await conn.execute(
				text(
					f"CREATE TRIGGER {table}_notify AFTER INSERT OR UPDATE OR DELETE ON {table} "
					f"FOR EACH ROW EXECUTE FUNCTION notify_table_change('{channel}')"
				)
			)


async def seed_profiles() -> None:
	"""Insert demo profiles and the admin role row."""

	async with SessionLocal() as session:
		async with session.begin():
			for data in PROFILES:
				profile = await session.get(Profile, data["id"])
				if profile is None:
					session.add(Profile(id=data["id"], email=data["email"], full_name=data["full_name"]))
				else:
					profile.email = data["email"]
					profile.full_name = data["full_name"]
			await session.flush()

			for data in PROFILES:
				if not data["admin"]:
					continue
				existing = await session.execute(
					select(UserRole).where(UserRole.user_id == data["id"], UserRole.role == AppRole.ADMIN)
				)
				if existing.scalar_one_or_none() is None:
					session.add(UserRole(user_id=data["id"], role=AppRole.ADMIN))


async def seed_properties() -> None:
	"""Insert demo properties with their invoices and assignments."""

	async with SessionLocal() as session:
		async with session.begin():
			for data in PROPERTIES:
				prop = await session.get(Property, data["id"])
				if prop is None:
					session.add(Property(id=data["id"], name=data["name"], address=data["address"]))
				else:
					prop.name = data["name"]
					prop.address = data["address"]
				await session.flush()

				has_invoices = await session.execute(
					select(Invoice.id).where(Invoice.property_id == data["id"]).limit(1)
				)
				if has_invoices.first() is None:
					for amount, category, vendor, invoice_date in data["invoices"]:
						session.add(
							Invoice(
								property_id=data["id"],
								amount=amount,
								category=category,
								vendor=vendor,
								invoice_date=invoice_date,
							)
						)

				for user_id in data["assigned_to"]:
					existing = await session.execute(
						select(UserProperty.id).where(
							UserProperty.user_id == user_id,
							UserProperty.property_id == data["id"],
						)
					)
					if existing.first() is None:
						session.add(UserProperty(user_id=user_id, property_id=data["id"]))


async def seed_redirects() -> None:
	"""Insert demo lease and report links."""

	async with SessionLocal() as session:
		async with session.begin():
			for user_id, redirect_type, url in REDIRECTS:
				existing = await session.execute(
					select(UserRedirect).where(
						UserRedirect.user_id == user_id,
						UserRedirect.redirect_type == redirect_type,
					)
				)
				redirect = existing.scalar_one_or_none()
				if redirect is None:
					session.add(UserRedirect(user_id=user_id, redirect_type=redirect_type, redirect_url=url))
				else:
					redirect.redirect_url = url


async def main() -> None:
	configure_logging(settings.log_level)
	await create_schema()
	await install_change_triggers(settings.realtime_channel)
	await seed_profiles()
	await seed_properties()
	await seed_redirects()
	await engine.dispose()
	logger.info("Database schema ensured, change triggers installed and demo data seeded.")


if __name__ == "__main__":
	asyncio.run(main())
