"""Pytest configuration for MediPass tests."""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src/ to path for src-layout imports without an editable install
_SRC = Path(__file__).parent.parent / 'src'
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import pytest

from medipass.inmemory import InMemoryDocumentStore
from medipass.records.model import (
    Allergy,
    Condition,
    EmergencyContact,
    MedicalRecord,
    Medication,
    PersonalInfo,
    Severity,
)

T0 = datetime(2026, 10, 18, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable UTC clock for expiry tests."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def record():
    """Two allergies, one medication, no conditions, one contact."""
    return MedicalRecord(
        personal_info=PersonalInfo(
            full_name='Ada Lovelace',
            date_of_birth='1990-12-10',
            blood_type='O-',
            height='170 cm',
            weight='60 kg',
            organ_donor=True,
        ),
        allergies=[
            Allergy(name='Penicillin', severity=Severity.SEVERE),
            Allergy(name='Peanuts', severity=Severity.MODERATE),
        ],
        medications=[
            Medication(name='Levothyroxine', dosage='50 mcg', frequency='daily'),
        ],
        conditions=[],
        emergency_contacts=[
            EmergencyContact(name='Charles Babbage', relationship='Friend', phone_number='+44 20 7946 0000'),
        ],
    )
