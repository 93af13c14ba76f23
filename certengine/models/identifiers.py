"""Element id generator."""

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass
class IdConfig:
    """Configuration for element id generation."""
    prefix: str = "element"
    sequence_start: int = 1
    width: int = 4


class ElementIdGenerator:
    """Monotonic element id generator (element-0001, element-0002, ...)."""

    def __init__(self, config: Optional[IdConfig] = None):
        """
        Initialize the generator.

        Args:
            config: Optional IdConfig, defaults to standard values
        """
        self.config = config or IdConfig()
        self._counter = self.config.sequence_start

    def next_id(self, taken: Iterable[str] = ()) -> str:
        """
        Generate the next id not contained in ``taken``.

        Args:
            taken: Ids already in use (e.g. ids loaded from a file)

        Returns:
            New unique id
        """
        taken = set(taken)
        while True:
            candidate = f"{self.config.prefix}-{self._counter:0{self.config.width}d}"
            self._counter += 1
            if candidate not in taken:
                return candidate

    def reset_counter(self):
        """Reset the sequence to its configured start."""
        self._counter = self.config.sequence_start
