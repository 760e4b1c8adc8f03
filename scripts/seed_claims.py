#!/usr/bin/env python3
"""
Seed three sample claims (POL-001..POL-003) when the claims table is empty.

Uses DATABASE_URL environment variable. Incident dates are relative to today.
"""

from __future__ import annotations
import os
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.database.postgres_real import PostgresDB


def sample_claims(today: date) -> list[dict]:
    return [
        {
            "claim_number": "CLM-2023-001",
            "policy_number": "POL-001",
            "incident_date": today - timedelta(days=5),
            "description": "Car accident on Main Street. Front bumper damaged.",
            "estimated_amount": Decimal("1500.00"),
            "type": "AUTO",
            "status": "SUBMITTED",
            "claimant_name": "John Doe",
            "claimant_email": "john.doe@example.com",
            "claimant_phone": "+1234567890",
        },
        {
            "claim_number": "CLM-2023-002",
            "policy_number": "POL-002",
            "incident_date": today - timedelta(days=10),
            "description": "Water damage in kitchen due to pipe burst.",
            "estimated_amount": Decimal("5000.00"),
            "type": "HOME",
            "status": "UNDER_REVIEW",
            "claimant_name": "Jane Smith",
            "claimant_email": "jane.smith@example.com",
            "claimant_phone": "+1987654321",
        },
        {
            "claim_number": "CLM-2023-003",
            "policy_number": "POL-003",
            "incident_date": today - timedelta(days=15),
            "description": "Medical expenses for emergency surgery.",
            "estimated_amount": Decimal("12000.00"),
            "type": "HEALTH",
            "status": "APPROVED",
            "claimant_name": "Robert Brown",
            "claimant_email": "robert.brown@example.com",
            "claimant_phone": "+1567890123",
        },
    ]


def seed(db, today: date | None = None) -> int:
    """Insert the sample claims into an empty store. Returns the number inserted."""
    if db.count_claims() > 0:
        return 0
    claims = sample_claims(today or date.today())
    for data in claims:
        db.add_claim(data)
    return len(claims)


def main() -> int:
    url = os.environ.get("DATABASE_URL")
    if not url:
        print("DATABASE_URL is not set", file=sys.stderr)
        return 1

    db = PostgresDB(url)
    db.create_tables()
    inserted = seed(db)
    if inserted:
        print(f"✅ Seeded {inserted} sample claims")
    else:
        print("Claims table is not empty; nothing seeded")
    return 0


if __name__ == "__main__":
    sys.exit(main())
