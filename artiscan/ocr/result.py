"""
Recognition Result Dataclasses

Shared data structures for recognizer output and per-item field sets.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class RecognitionResult:
    """Decoded text for one field image."""
    text: str
    confidence: float  # 0.0-1.0


@dataclass
class RawFieldSet:
    """
    Recognized strings for one cell visit, keyed by field name.

    Transient: produced by the item reader and consumed right away by the
    record parser.
    """
    fields: Dict[str, RecognitionResult]
    stars: int
    processing_time_ms: float = 0.0

    def text(self, name: str) -> str:
        result = self.fields.get(name)
        return result.text if result else ""

    def min_confidence(self, ignore_empty: bool = True) -> Tuple[Optional[str], float]:
        """
        Lowest-confidence field.

        Args:
            ignore_empty: Skip fields that decoded to an empty string
                          (missing substats, unequipped items)

        Returns:
            (field_name, confidence), or (None, 1.0) when nothing qualifies
        """
        worst_name: Optional[str] = None
        worst = 1.0
        for name, result in self.fields.items():
            if ignore_empty and not result.text.strip():
                continue
            if result.confidence < worst:
                worst_name, worst = name, result.confidence
        return worst_name, worst

