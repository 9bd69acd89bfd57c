"""
Mapping of a whole player between a document entry and a ``JOUEUR`` row.

Scalar fields are copied one-to-one through ``PLAYER_FIELDS``; the birth date
and checked-in flag need type conversion; rounds are delegated to
``papiconv.converter_core.rounds``.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from papiconv.converter_core.references import ReferenceMap, row_ref
from papiconv.converter_core.report import ConversionReport, warn
from papiconv.converter_core.rounds import (
    SentinelPatch,
    decode_rounds,
    default_round_columns,
    encode_rounds,
)
from papiconv.converter_core.schema import REF_COLUMN

logger = logging.getLogger(__name__)

BIRTH_DATE_FORMAT = "%d/%m/%Y"

SCALAR = "scalar"
DATE = "date"
BOOLEAN = "boolean"

# (document key, JOUEUR column, kind) in document order
PLAYER_FIELDS = (
    ("refFFE", "RefFFE", SCALAR),
    ("nr", "Nr", SCALAR),
    ("nrFFE", "NrFFE", SCALAR),
    ("lastName", "Nom", SCALAR),
    ("firstName", "Prenom", SCALAR),
    ("gender", "Sexe", SCALAR),
    ("birthDate", "NeLe", DATE),
    ("category", "Cat", SCALAR),
    ("elo", "Elo", SCALAR),
    ("rapidElo", "Rapide", SCALAR),
    ("blitzElo", "Blitz", SCALAR),
    ("federation", "Federation", SCALAR),
    ("club", "Club", SCALAR),
    ("league", "Ligue", SCALAR),
    ("fideElo", "Fide", SCALAR),
    ("fideRapidElo", "RapideFide", SCALAR),
    ("fideBlitzElo", "BlitzFide", SCALAR),
    ("fideCode", "FideCode", SCALAR),
    ("fideTitle", "FideTitre", SCALAR),
    ("licenceType", "AffType", SCALAR),
    ("paid", "InscriptionRegle", SCALAR),
    ("owed", "InscriptionDu", SCALAR),
    ("fixedBoard", "Fixe", SCALAR),
    ("checkedIn", "Pointe", BOOLEAN),
    ("address", "Adresse", SCALAR),
    ("postalCode", "CP", SCALAR),
    ("phone", "Tel", SCALAR),
    ("email", "EMail", SCALAR),
    ("comment", "Commentaire", SCALAR),
)

# Set on every imported row; the document may override all but ClubRef
ROW_DEFAULTS = {
    "ClubRef": 0,
    "Fixe": 0,
    "InscriptionRegle": 0,
    "InscriptionDu": 0,
    "AffType": "N",
}


@dataclass
class PlayerRow:
    """A staged ``JOUEUR`` row and the EXEMPT patches its rounds imply."""

    ref: int
    values: Dict[str, Any]
    patches: List[SentinelPatch] = field(default_factory=list)

    def ordered(self, columns: Sequence[str]) -> List[Any]:
        return order_row(columns, self.values)


def order_row(columns: Sequence[str], values: Dict[str, Any]) -> List[Any]:
    """Values laid out in the table's own column order.

    Columns with no value get None; values for columns the table lacks are
    dropped.
    """
    unknown = set(values) - set(columns)
    if unknown:
        logger.debug("Dropping values for unknown columns: %s", sorted(unknown))
    return [values.get(column) for column in columns]


def coerce_scalar(value: Any) -> Any:
    """Store value for a document scalar, or None when nothing should be written."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        return value or None
    return None


def coerce_boolean(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    if isinstance(value, (int, float)):
        return value != 0
    return None


def parse_birth_date(
    value: Any, player_ref: int, report: Optional[ConversionReport] = None
) -> Optional[date]:
    """``DD/MM/YYYY`` text -> date. Malformed input is warned about and dropped."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), BIRTH_DATE_FORMAT).date()
        except ValueError:
            pass
    warn(
        report,
        logger,
        f"Invalid birth date format for player {player_ref}: {value} (expected DD/MM/YYYY)",
    )
    return None


def format_birth_date(
    value: Any, player_ref: Optional[int], report: Optional[ConversionReport] = None
) -> Optional[str]:
    """Stored birth date -> ``DD/MM/YYYY``, or None if it cannot be read."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime(BIRTH_DATE_FORMAT)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.strptime(text, BIRTH_DATE_FORMAT).strftime(BIRTH_DATE_FORMAT)
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10]).strftime(BIRTH_DATE_FORMAT)
        except ValueError:
            pass
    warn(report, logger, f"Unreadable birth date for player {player_ref}: {value!r}")
    return None


def player_label(player: Dict[str, Any], ref: int) -> str:
    name = " ".join(
        str(player[key]) for key in ("firstName", "lastName") if player.get(key)
    )
    return name or f"Player {ref}"


def player_to_row(
    player: Dict[str, Any], ref: int, report: Optional[ConversionReport] = None
) -> PlayerRow:
    """Build the ``JOUEUR`` row for one document player.

    Args:
        player: Document entry for the player
        ref: Store reference assigned to this player
        report: Collects warnings when given

    Returns:
        The staged row with any EXEMPT patches its byes require
    """
    values: Dict[str, Any] = {REF_COLUMN: ref}
    values.update(ROW_DEFAULTS)
    values.update(default_round_columns())

    for key, column, kind in PLAYER_FIELDS:
        if key not in player:
            continue
        raw = player[key]
        if kind == DATE:
            value = parse_birth_date(raw, ref, report)
        elif kind == BOOLEAN:
            value = coerce_boolean(raw)
        else:
            value = coerce_scalar(raw)
        if value is not None:
            values[column] = value

    patches: List[SentinelPatch] = []
    rounds = player.get("rounds")
    if isinstance(rounds, dict):
        round_values, patches = encode_rounds(rounds, ref, report)
        values.update(round_values)
    elif rounds is not None:
        warn(report, logger, f"Rounds for player {ref} are not an object, skipped")

    logger.debug("Staged player: %s (Ref: %s)", player_label(player, ref), ref)
    return PlayerRow(ref=ref, values=values, patches=patches)


def _has_content(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def row_to_player(
    row: Dict[str, Any],
    reference_map: ReferenceMap,
    report: Optional[ConversionReport] = None,
) -> Dict[str, Any]:
    """Build the document entry for one ``JOUEUR`` row.

    Only fields with a value are emitted. Opponents are resolved through
    ``reference_map``, which must cover every real player in the table.
    """
    ref = row_ref(row)
    player: Dict[str, Any] = {}

    for key, column, kind in PLAYER_FIELDS:
        raw = row.get(column)
        if kind == DATE:
            formatted = format_birth_date(raw, ref, report)
            if formatted is not None:
                player[key] = formatted
        elif kind == BOOLEAN:
            if isinstance(raw, bool):
                player[key] = raw
        elif _has_content(raw):
            player[key] = raw

    rounds = decode_rounds(row, reference_map)
    if rounds:
        player["rounds"] = rounds
    return player
