"""Medical record data model.

The stored document shape follows the mobile client's ``medicalInfo``
collection: camelCase keys (``fullName``, ``dateOfBirth``,
``emergencyContacts``...). Python attributes are snake_case and the models
accept either spelling on input; ``to_document()`` always emits camelCase.

Every sequence keeps its input order. Fields left blank by the owner are
empty strings rather than ``None`` so a partially filled record still
round-trips cleanly.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Document(BaseModel):
    """Base for models persisted as camelCase JSON documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)


class Severity(str, Enum):
    MILD = 'Mild'
    MODERATE = 'Moderate'
    SEVERE = 'Severe'


class Allergy(_Document):
    name: str
    severity: Severity = Severity.MILD


class Medication(_Document):
    name: str
    dosage: str = ''
    frequency: str = ''


class Condition(_Document):
    name: str
    diagnosed_date: str = ''
    notes: str = ''


class EmergencyContact(_Document):
    name: str
    relationship: str = ''
    phone_number: str = ''


class PersonalInfo(_Document):
    full_name: str = ''
    date_of_birth: str = ''
    blood_type: str = ''
    height: str = ''
    weight: str = ''
    organ_donor: bool = False


class MedicalRecord(_Document):
    """Full record for one subject.

    Owned by the subject and replaced wholesale on save (last write wins).
    """

    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    allergies: list[Allergy] = Field(default_factory=list)
    medications: list[Medication] = Field(default_factory=list)
    conditions: list[Condition] = Field(default_factory=list)
    emergency_contacts: list[EmergencyContact] = Field(default_factory=list)
    updated_at: datetime | None = None


class DocumentReference(_Document):
    """Metadata of an uploaded medical document.

    Documents live in blob storage, not inside ``MedicalRecord``; a sharing
    request passes the references it wants to expose explicitly.
    """

    document_id: str
    file_name: str
    file_type: str = 'application/octet-stream'
    file_size: int = Field(default=0, ge=0)
    download_url: str = Field(default='', alias='downloadURL')
    description: str = ''
    document_type: str = 'Other'
    upload_date: str = ''
