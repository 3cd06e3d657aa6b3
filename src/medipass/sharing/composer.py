"""Disclosure composition: redact a medical record by category.

The owner picks which categories a link exposes. ``compose`` copies each
selected slice of the record verbatim into a ``RedactedDisclosure`` and
omits every deselected category entirely. A selected category with no
entries is still present, as an empty list.

Category keys use the stored document names so a disclosure can be
persisted as-is:

  personalInfo, allergies, medications, conditions, emergencyContacts,
  documents

``documents`` is not part of ``MedicalRecord``; the caller passes the
document references to expose.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from medipass.records.model import DocumentReference, MedicalRecord

from .errors import InvalidSelectionError, MissingRecordError

# Canonical category order (document key, selection attribute).
CATEGORIES: tuple[tuple[str, str], ...] = (
    ('personalInfo', 'personal_info'),
    ('allergies', 'allergies'),
    ('medications', 'medications'),
    ('conditions', 'conditions'),
    ('emergencyContacts', 'emergency_contacts'),
    ('documents', 'documents'),
)
CATEGORY_KEYS: frozenset[str] = frozenset(key for key, _ in CATEGORIES)


@dataclass(frozen=True, slots=True)
class DisclosureSelection:
    """Per-category flags for one sharing request. No flag has a default."""

    personal_info: bool
    allergies: bool
    medications: bool
    conditions: bool
    emergency_contacts: bool
    documents: bool

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, bool):
                raise InvalidSelectionError(
                    f'{f.name} must be a bool, got {type(value).__name__}'
                )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DisclosureSelection:
        """Build a selection from camelCase or snake_case keys.

        Every flag must be present; absent keys are not read as false.
        """
        values: dict[str, Any] = {}
        missing: list[str] = []
        for key, attr in CATEGORIES:
            if key in data:
                values[attr] = data[key]
            elif attr in data:
                values[attr] = data[attr]
            else:
                missing.append(key)
        if missing:
            raise InvalidSelectionError(
                f'selection is missing flags: {", ".join(missing)}'
            )
        return cls(**values)

    @classmethod
    def all(cls) -> DisclosureSelection:
        return cls(True, True, True, True, True, True)

    @classmethod
    def none(cls) -> DisclosureSelection:
        return cls(False, False, False, False, False, False)

    def is_selected(self, category: str) -> bool:
        for key, attr in CATEGORIES:
            if key == category:
                return getattr(self, attr)
        raise KeyError(category)

    def selected_categories(self) -> tuple[str, ...]:
        return tuple(key for key, attr in CATEGORIES if getattr(self, attr))


class RedactedDisclosure(Mapping[str, Any]):
    """Immutable category -> slice mapping embedded in a sharing grant.

    Values are JSON-compatible. Item access hands out copies so the stored
    slices cannot be mutated through the mapping.
    """

    __slots__ = ('_sections',)

    def __init__(self, sections: Mapping[str, Any]) -> None:
        unknown = set(sections) - CATEGORY_KEYS
        if unknown:
            raise ValueError(f'unknown disclosure categories: {sorted(unknown)}')
        ordered = {key: copy.deepcopy(sections[key]) for key, _ in CATEGORIES if key in sections}
        self._sections = MappingProxyType(ordered)

    def __getitem__(self, key: str) -> Any:
        return copy.deepcopy(self._sections[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RedactedDisclosure):
            return dict(self._sections) == dict(other._sections)
        if isinstance(other, Mapping):
            return dict(self._sections) == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f'RedactedDisclosure(categories={list(self._sections)})'

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(dict(self._sections))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RedactedDisclosure:
        return cls(data)


def compose(
    record: MedicalRecord | None,
    selection: DisclosureSelection,
    documents: Iterable[DocumentReference] = (),
) -> RedactedDisclosure:
    """Redact ``record`` down to the categories flagged in ``selection``.

    Raises:
        MissingRecordError: ``record`` is None.
    """
    if record is None:
        raise MissingRecordError()

    sections: dict[str, Any] = {}
    if selection.personal_info:
        sections['personalInfo'] = record.personal_info.to_document()
    if selection.allergies:
        sections['allergies'] = [a.to_document() for a in record.allergies]
    if selection.medications:
        sections['medications'] = [m.to_document() for m in record.medications]
    if selection.conditions:
        sections['conditions'] = [c.to_document() for c in record.conditions]
    if selection.emergency_contacts:
        sections['emergencyContacts'] = [
            c.to_document() for c in record.emergency_contacts
        ]
    if selection.documents:
        sections['documents'] = [d.to_document() for d in documents]

    return RedactedDisclosure(sections)
