"""Seed script to populate the database with sample data."""

from datetime import date

from billtracker.core.database import Base, SessionLocal, engine
from billtracker.main import app  # noqa: F401  (registers all models)
from billtracker.models.bill_upload import BillUpload
from billtracker.models.building import Building
from billtracker.models.enums import UtilityType
from billtracker.models.meter import Meter
from billtracker.models.organization import Organization
from billtracker.schemas.ingest import InboundItem, IngestRequest
from billtracker.services.auth import create_user, get_user_by_email
from billtracker.services.ingest import ingest_bills

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo-password"


def seed_database() -> None:
    """Seed the database with sample data."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if get_user_by_email(db, DEMO_EMAIL):
            print("Database already has data. Skipping seed.")
            return

        print("Seeding database...")

        user = create_user(db, DEMO_EMAIL, DEMO_PASSWORD, full_name="Demo User")
        org = Organization(name="Demo Properties")
        org.members.append(user)
        db.add(org)
        db.flush()

        building = Building(
            organization_id=org.id,
            name="Main Street Office",
            address="123 Main St, Wichita, KS",
            state="KS",
            square_feet=42000,
        )
        db.add(building)
        db.flush()
        print(f"Created building: {building.name} (ID: {building.id})")

        gas_meter = Meter(
            building_id=building.id,
            label="G7781",
            utility=UtilityType.GAS,
            provider="Kansas Gas Service",
        )
        db.add(gas_meter)
        db.flush()

        db.add(BillUpload(building_id=building.id, meter_id=gas_meter.id, file_name="kgs-2024-03.pdf"))
        db.commit()

        months = [
            (date(2024, 1, 1), date(2024, 1, 31), "1180.22", 9400),
            (date(2024, 2, 1), date(2024, 2, 29), "1095.80", 8710),
        ]
        request = IngestRequest(
            utility=UtilityType.ELECTRIC,
            items=[
                InboundItem.model_validate(
                    {
                        "buildingId": building.id,
                        "meter_no": "E-1001",
                        "utility_provider": "Evergy",
                        "period_start": start,
                        "period_end": end,
                        "total_cost": cost,
                        "usage_kwh": kwh,
                    }
                )
                for start, end, cost, kwh in months
            ],
        )
        response = ingest_bills(db, user, request)
        print(f"Ingested {response.summary.bills_created} electric bills")

        print("\nSeed complete!")
        print(f"Sign in as {DEMO_EMAIL} / {DEMO_PASSWORD}")
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
