"""
Tournament settings names.

The document uses English setting names ("canonical"), the ``INFO`` table
uses the French names PAPI expects ("local"). Both directions are derived
from the single ``VARIABLES`` table below so they can never disagree.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# Longest value the INFO.Value column accepts
MAX_VALUE_LENGTH = 50

# (canonical, local) in INFO table order
VARIABLES: Tuple[Tuple[str, str], ...] = (
    ("name", "Nom"),
    ("type", "Genre"),
    ("rounds", "NbrRondes"),
    ("pairing", "Pairing"),
    ("timeControl", "Cadence"),
    ("ratingClass", "ClassElo"),
    ("minRating", "EloBase1"),
    ("maxRating", "EloBase2"),
    ("tiebreak1", "Dep1"),
    ("tiebreak2", "Dep2"),
    ("tiebreak3", "Dep3"),
    ("pointSystem", "DecomptePoints"),
    ("venue", "Lieu"),
    ("startDate", "DateDebut"),
    ("endDate", "DateFin"),
    ("arbiter", "Arbitre"),
    ("homologation", "Homologation"),
)


class VariableTranslator:
    """Bidirectional lookup between canonical and local setting names."""

    def __init__(
        self,
        pairs: Tuple[Tuple[str, str], ...] = VARIABLES,
        max_length: int = MAX_VALUE_LENGTH,
    ):
        self._local_by_canonical: Mapping[str, str] = MappingProxyType(dict(pairs))
        self._canonical_by_local: Mapping[str, str] = MappingProxyType(
            {local: canonical for canonical, local in pairs}
        )
        self.max_length = max_length

    def to_local(self, canonical_name: str) -> Optional[str]:
        return self._local_by_canonical.get(canonical_name)

    def to_canonical(self, local_name: str) -> Optional[str]:
        return self._canonical_by_local.get(local_name)

    def is_recognized(self, local_name: str) -> bool:
        return local_name in self._canonical_by_local

    def canonical_names(self) -> Tuple[str, ...]:
        return tuple(self._local_by_canonical)

    def local_names(self) -> Tuple[str, ...]:
        return tuple(self._canonical_by_local)

    def truncate(self, value: str) -> Tuple[str, bool]:
        """Cut ``value`` down to the column width.

        Returns:
            Tuple of (value that fits, whether anything was cut)
        """
        if len(value) <= self.max_length:
            return value, False
        return value[: self.max_length], True


DEFAULT_TRANSLATOR = VariableTranslator()
