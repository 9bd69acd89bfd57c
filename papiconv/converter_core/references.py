"""
Player references on both sides of the conversion.

The document addresses players by their zero-based position in the
``players`` list. The store addresses them by ``Ref``, where ``1`` is the
EXEMPT player and real players start at ``2``. The two are related by a
constant offset; the only state needed is the ref -> index table built on
export, because stored refs may have gaps and rows come back unordered.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from papiconv.converter_core.errors import ReferenceIntegrityError
from papiconv.converter_core.schema import FIRST_PLAYER_REF, REF_COLUMN, SENTINEL_REF


def index_to_ref(index: int) -> int:
    """Document index (0, 1, 2...) -> store reference (2, 3, 4...)."""
    return index + FIRST_PLAYER_REF


def ref_to_index(ref: int) -> int:
    """Store reference (2, 3, 4...) -> document index (0, 1, 2...)."""
    return ref - FIRST_PLAYER_REF


def row_ref(row: Dict[str, Any]) -> Optional[int]:
    """The ``Ref`` of a player row as an int, or None when unset."""
    value = row.get(REF_COLUMN)
    if value is None:
        return None
    return int(value)


def is_real_player(row: Dict[str, Any]) -> bool:
    ref = row_ref(row)
    return ref is not None and ref > SENTINEL_REF


class ReferenceMap:
    """Read-only mapping from store reference to document index."""

    def __init__(self, refs: Iterable[int]):
        self._index_by_ref: Dict[int, int] = {
            ref: index for index, ref in enumerate(refs)
        }

    def __len__(self) -> int:
        return len(self._index_by_ref)

    def __contains__(self, ref: int) -> bool:
        return ref in self._index_by_ref

    def index_of(self, ref: int, player_ref: Optional[int] = None) -> int:
        """Document index for ``ref``.

        Raises:
            ReferenceIntegrityError: if no player with that reference exists.
        """
        try:
            return self._index_by_ref[ref]
        except KeyError:
            raise ReferenceIntegrityError(ref, player_ref) from None


def build_reference_map(
    rows: Iterable[Dict[str, Any]],
) -> Tuple[List[Dict[str, Any]], ReferenceMap]:
    """Sort the real player rows by reference and index them.

    The EXEMPT row and rows without a reference are dropped. Every row must be
    seen before any round is decoded, since opponents may point forward.

    Returns:
        Tuple of (sorted player rows, ref -> index map)
    """
    players = sorted((row for row in rows if is_real_player(row)), key=row_ref)
    return players, ReferenceMap(row_ref(row) for row in players)
