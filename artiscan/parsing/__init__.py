"""
Parsing Package - Recognized strings to typed item records.

Public API:
    - ItemRecord, Stat: Typed record
    - StatKind, Slot: Closed vocabularies
    - RecordParser: RawFieldSet -> ItemRecord

Usage:
    from artiscan.parsing import RecordParser

    record = RecordParser().parse(raw_fields)
    print(record.describe())
"""

from .vocabulary import (
    ARTIFACT_SETS,
    SETS_BY_KEY,
    ArtifactSet,
    Slot,
    StatKind,
)
from .record import ItemRecord, Stat
from .parser import RecordParser, parse_number

__all__ = [
    "ARTIFACT_SETS",
    "SETS_BY_KEY",
    "ArtifactSet",
    "Slot",
    "StatKind",
    "ItemRecord",
    "Stat",
    "RecordParser",
    "parse_number",
]
