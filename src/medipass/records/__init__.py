"""Medical record model and persistence."""

from .model import (
    Allergy,
    Condition,
    DocumentReference,
    EmergencyContact,
    MedicalRecord,
    Medication,
    PersonalInfo,
    Severity,
)
from .repository import MedicalRecordRepository

__all__ = [
    'Allergy',
    'Condition',
    'DocumentReference',
    'EmergencyContact',
    'MedicalRecord',
    'MedicalRecordRepository',
    'Medication',
    'PersonalInfo',
    'Severity',
]
