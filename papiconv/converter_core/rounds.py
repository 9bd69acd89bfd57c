"""
Per-round encoding between document round entries and ``RdNN*`` columns.

Each player row has three columns per round: colour (``Cl``), opponent
reference (``Adv``) and result code (``Res``). The document only lists rounds
that carry information, keyed by the round number as a string.

A bye is stored as a game against the EXEMPT player (reference 1). When the
document gives a bye result without an opponent, the EXEMPT row gets the
mirror entry for the same round. That write touches a row other than the one
being built, so encoding returns it as a ``SentinelPatch`` for the caller to
apply alongside the new rows.
"""

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple

from papiconv.converter_core.references import ReferenceMap, index_to_ref, row_ref
from papiconv.converter_core.report import ConversionReport, warn
from papiconv.converter_core.schema import (
    COLOR_SUFFIX,
    MAX_ROUNDS,
    OPPONENT_SUFFIX,
    RESULT_SUFFIX,
    SENTINEL_REF,
    round_column,
)

logger = logging.getLogger(__name__)


class Color(str, Enum):
    WHITE = "B"
    BLACK = "N"
    UNPAIRED = "R"
    FORFEIT = "F"


class ResultCode(IntEnum):
    NONE = 0
    LOSS = 1
    DRAW = 2
    WIN = 3
    BYE = 6


@dataclass(frozen=True)
class SentinelPatch:
    """Mirror entry written on the EXEMPT row for a detected bye."""

    round_number: int
    player_ref: int

    def columns(self) -> Dict[str, Any]:
        return {
            round_column(self.round_number, COLOR_SUFFIX): Color.BLACK.value,
            round_column(self.round_number, OPPONENT_SUFFIX): self.player_ref,
            round_column(self.round_number, RESULT_SUFFIX): ResultCode.NONE.value,
        }


def default_round_columns() -> Dict[str, Any]:
    """Unplayed values for every round slot."""
    columns: Dict[str, Any] = {}
    for round_number in range(1, MAX_ROUNDS + 1):
        columns[round_column(round_number, COLOR_SUFFIX)] = Color.UNPAIRED.value
        columns[round_column(round_number, OPPONENT_SUFFIX)] = None
        columns[round_column(round_number, RESULT_SUFFIX)] = ResultCode.NONE.value
    return columns


def parse_round_number(
    key: Any, player_ref: int, report: Optional[ConversionReport] = None
) -> Optional[int]:
    """Round number from a document key, or None if it must be skipped."""
    try:
        round_number = int(key)
    except (TypeError, ValueError):
        warn(report, logger, f"Invalid round number '{key}' for player {player_ref}")
        return None
    if not 1 <= round_number <= MAX_ROUNDS:
        warn(
            report,
            logger,
            f"Round {round_number} for player {player_ref} is outside 1..{MAX_ROUNDS}, skipped",
        )
        return None
    return round_number


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def encode_round(
    round_data: Dict[str, Any],
    round_number: int,
    player_ref: int,
    report: Optional[ConversionReport] = None,
) -> Tuple[Dict[str, Any], Optional[SentinelPatch]]:
    """Columns for one document round entry.

    Args:
        round_data: The document entry (``color``, ``opponent``, ``result``)
        round_number: Round number, already validated
        player_ref: Reference of the player owning the row

    Returns:
        Tuple of (column values, sentinel patch when a bye was detected)
    """
    color_column = round_column(round_number, COLOR_SUFFIX)
    opponent_column = round_column(round_number, OPPONENT_SUFFIX)
    result_column = round_column(round_number, RESULT_SUFFIX)

    columns: Dict[str, Any] = {}
    patch = None

    color = round_data.get("color")
    if color is not None:
        columns[color_column] = str(color)

    result = ResultCode.NONE.value
    if round_data.get("result") is not None:
        result = _as_int(round_data["result"])
        if result is None:
            warn(
                report,
                logger,
                f"Invalid result '{round_data['result']}' in round {round_number} "
                f"for player {player_ref}",
            )
            result = ResultCode.NONE.value
        columns[result_column] = result

    opponent = round_data.get("opponent")
    if opponent is not None:
        opponent_index = _as_int(opponent)
        if opponent_index is not None and opponent_index >= 0:
            columns[opponent_column] = index_to_ref(opponent_index)
        else:
            warn(
                report,
                logger,
                f"Invalid opponent '{opponent}' in round {round_number} "
                f"for player {player_ref}",
            )
    elif result == ResultCode.BYE:
        columns[opponent_column] = SENTINEL_REF
        patch = SentinelPatch(round_number, player_ref)
        logger.info(
            "Auto-detected bye for player %s in round %s (vs EXEMPT)",
            player_ref,
            round_number,
        )

    return columns, patch


def encode_rounds(
    rounds: Dict[Any, Any],
    player_ref: int,
    report: Optional[ConversionReport] = None,
) -> Tuple[Dict[str, Any], List[SentinelPatch]]:
    """Columns for all rounds of a player, plus the EXEMPT patches they imply."""
    columns: Dict[str, Any] = {}
    patches: List[SentinelPatch] = []

    for key, round_data in rounds.items():
        round_number = parse_round_number(key, player_ref, report)
        if round_number is None:
            continue
        if not isinstance(round_data, dict):
            warn(
                report,
                logger,
                f"Round {round_number} for player {player_ref} is not an object, skipped",
            )
            continue

        round_columns, patch = encode_round(round_data, round_number, player_ref, report)
        columns.update(round_columns)
        if patch:
            patches.append(patch)

    return columns, patches


def decode_round(
    row: Dict[str, Any], round_number: int, reference_map: ReferenceMap
) -> Optional[Dict[str, Any]]:
    """Document entry for one round, or None when the round holds nothing."""
    color = row.get(round_column(round_number, COLOR_SUFFIX))
    opponent = _as_int(row.get(round_column(round_number, OPPONENT_SUFFIX)))
    result = _as_int(row.get(round_column(round_number, RESULT_SUFFIX)))

    has_color = color is not None and str(color) != Color.UNPAIRED.value
    has_opponent = opponent is not None and opponent > SENTINEL_REF
    has_result = result is not None and result != ResultCode.NONE

    if not (has_color or has_opponent or has_result):
        return None

    entry: Dict[str, Any] = {}
    if has_color:
        entry["color"] = str(color)
    if has_opponent:
        entry["opponent"] = reference_map.index_of(opponent, row_ref(row))
    if has_result:
        entry["result"] = result
    return entry


def decode_rounds(
    row: Dict[str, Any], reference_map: ReferenceMap
) -> Dict[str, Dict[str, Any]]:
    """All rounds of a player row that carry information, keyed ``"1"``..``"24"``."""
    rounds = {}
    for round_number in range(1, MAX_ROUNDS + 1):
        entry = decode_round(row, round_number, reference_map)
        if entry is not None:
            rounds[str(round_number)] = entry
    return rounds
