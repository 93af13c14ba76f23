"""Binding proposal model for column-to-field matching."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MatchConfidence(Enum):
    """How a template field was matched to a data header."""
    EXACT = "exact"
    FUZZY = "fuzzy"
    NONE = "none"


@dataclass
class BindingProposal:
    """Proposed binding of a template field to a data header."""

    template_field: str
    matched_header: Optional[str] = None
    confidence: MatchConfidence = MatchConfidence.NONE

    @property
    def is_matched(self) -> bool:
        return self.matched_header is not None
