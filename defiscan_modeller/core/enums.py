"""
Closed value domains of the rating pipeline.

Every domain is an ordered Enum whose value is the display label used in
persisted data. The declaration order is the risk order, lowest first
(FinalRating is declared best first, so AAA has rank 0 and D the highest rank).
"""

from enum import Enum
from typing import Any, Optional


class _OrderedDomain(Enum):
    """Enum with a total order given by declaration position."""

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    @classmethod
    def parse(cls, value: Any) -> Optional["_OrderedDomain"]:
        """Return the member for ``value`` or None if it is outside the domain."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        return None

    @classmethod
    def values(cls) -> list:
        return [member.value for member in cls]

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank >= other.rank


class Impact(_OrderedDomain):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Likelihood(_OrderedDomain):
    MITIGATED = "Mitigated"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Severity(_OrderedDomain):
    INFORMATIONAL = "Informational"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class FinalRating(_OrderedDomain):
    AAA = "AAA"
    AA = "AA"
    A = "A"
    BBB = "BBB"
    BB = "BB"
    B = "B"
    CCC = "CCC"
    CC = "CC"
    C = "C"
    D = "D"


class FunctionType(Enum):
    ADMIN = "Admin"
    DEPENDENCY = "Dependency"
    OPERATOR = "Operator"
