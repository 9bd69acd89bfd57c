"""
Whole-document conversion between the JSON document and the tournament store.

Import replaces the store contents from a document:

1. Settings are written to ``INFO``, updating rows by ``Variable`` and
   appending new ones.
2. Every real player row in ``JOUEUR`` is deleted (EXEMPT stays).
3. One row per document player is staged, refs assigned from 2 upward.
4. The EXEMPT patches produced by bye detection are applied to the EXEMPT row.
5. The staged rows are inserted and everything is committed once.

Export reads the store into a document. All player rows are read and sorted
before the first round is decoded so opponents can be resolved to indexes.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from papiconv.converter_core.errors import DocumentError
from papiconv.converter_core.players import PlayerRow, player_to_row, row_to_player
from papiconv.converter_core.references import build_reference_map, index_to_ref, row_ref
from papiconv.converter_core.report import ConversionReport
from papiconv.converter_core.schema import (
    INFO_TABLE,
    INFO_VALUE,
    INFO_VARIABLE,
    PLAYER_TABLE,
    REF_COLUMN,
    SENTINEL_REF,
)
from papiconv.converter_core.tables import Database, Table
from papiconv.converter_core.variables import DEFAULT_TRANSLATOR, VariableTranslator

logger = logging.getLogger(__name__)


def setting_text(value: Any) -> str:
    """Text stored in ``INFO.Value`` for a document setting value."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


class DocumentAssembler:
    """Runs a full import or export over one document/store pair."""

    def __init__(self, translator: Optional[VariableTranslator] = None):
        self.translator = translator or DEFAULT_TRANSLATOR

    # Import

    def import_document(self, document: Dict[str, Any], database: Database) -> ConversionReport:
        """Write ``document`` into ``database`` and commit.

        Raises:
            DocumentError: if the document does not have the expected shape
            MissingTableError: if ``INFO`` or ``JOUEUR`` is absent
        """
        if not isinstance(document, dict):
            raise DocumentError("Document root must be an object")
        database.require(INFO_TABLE, PLAYER_TABLE)

        report = ConversionReport()

        variables = document.get("variables")
        if isinstance(variables, dict):
            self._import_variables(variables, database.table(INFO_TABLE), report)
        elif variables is None:
            logger.info("No 'variables' object found in document")
        else:
            raise DocumentError("'variables' must be an object")

        players = document.get("players")
        if isinstance(players, list):
            self._import_players(players, database.table(PLAYER_TABLE), report)
        elif players is None:
            logger.info("No 'players' array found in document")
        else:
            raise DocumentError("'players' must be an array")

        database.commit()
        return report

    def _import_variables(
        self, variables: Dict[str, Any], table: Table, report: ConversionReport
    ):
        logger.info("Updating %s table with variables...", INFO_TABLE)
        existing = {
            str(row[INFO_VARIABLE]) for row in table if row.get(INFO_VARIABLE) is not None
        }

        for name, raw_value in variables.items():
            local_name = self.translator.to_local(name)
            if local_name is None or not self.translator.is_recognized(local_name):
                report.warn(f"Skipping invalid variable: {name}", logger)
                continue

            value = setting_text(raw_value)
            stored, truncated = self.translator.truncate(value)
            if truncated:
                report.warn(
                    f"Trimmed value of {name} from {len(value)} to "
                    f"{self.translator.max_length} characters: '{value}' -> '{stored}'",
                    logger,
                )

            if local_name in existing:
                table.update(INFO_VARIABLE, {INFO_VARIABLE: local_name, INFO_VALUE: stored})
                logger.debug("Updated: %s (%s) = %s", name, local_name, stored)
            else:
                table.insert_row({INFO_VARIABLE: local_name, INFO_VALUE: stored})
                existing.add(local_name)
                logger.debug("Added: %s (%s) = %s", name, local_name, stored)
            report.settings += 1

    def _import_players(
        self, players: List[Any], table: Table, report: ConversionReport
    ):
        logger.info("Processing players data...")
        staged = self.stage_players(players, report)

        doomed = [ref for ref in (row_ref(row) for row in table) if ref is not None and ref > SENTINEL_REF]
        table.delete(REF_COLUMN, doomed)
        logger.debug("Removed %d existing players", len(doomed))

        self._apply_sentinel_patches(staged, table, report)

        columns = table.columns
        for player_row in staged:
            table.insert(player_row.ordered(columns))
        report.players = len(staged)
        logger.info("Added %d players to %s table", len(staged), PLAYER_TABLE)

    def stage_players(
        self, players: List[Any], report: Optional[ConversionReport] = None
    ) -> List[PlayerRow]:
        """Build every row for ``players`` without touching the store."""
        staged = []
        for index, player in enumerate(players):
            if not isinstance(player, dict):
                raise DocumentError(f"Player {index} must be an object")
            staged.append(player_to_row(player, index_to_ref(index), report))
        return staged

    def _apply_sentinel_patches(
        self, staged: List[PlayerRow], table: Table, report: ConversionReport
    ):
        patches = [patch for player_row in staged for patch in player_row.patches]
        if not patches:
            return

        sentinel = table.find(REF_COLUMN, SENTINEL_REF)
        if sentinel is None:
            report.warn(
                f"EXEMPT player (Ref={SENTINEL_REF}) not found, "
                f"{len(patches)} bye(s) not mirrored",
                logger,
            )
            return

        update: Dict[str, Any] = {REF_COLUMN: SENTINEL_REF}
        for patch in patches:
            # Two byes in one round share the EXEMPT slot; the later one wins
            update.update(patch.columns())
        table.update(REF_COLUMN, update)
        report.byes = len(patches)

    # Export

    def export_document(
        self, database: Database, report: Optional[ConversionReport] = None
    ) -> Dict[str, Any]:
        """Read ``database`` into a document.

        Raises:
            MissingTableError: if ``INFO`` or ``JOUEUR`` is absent
            ReferenceIntegrityError: if a round points at an unknown player
        """
        database.require(INFO_TABLE, PLAYER_TABLE)
        report = report if report is not None else ConversionReport()

        variables = self.export_variables(database.table(INFO_TABLE))
        report.settings = len(variables)
        logger.info("Found %d tournament variables", len(variables))

        players = self.export_players(database.table(PLAYER_TABLE), report)
        report.players = len(players)
        logger.info("Found %d players", len(players))

        return {"variables": variables, "players": players}

    def export_variables(self, table: Table) -> Dict[str, str]:
        variables: Dict[str, str] = {}
        for row in table:
            local_name = row.get(INFO_VARIABLE)
            value = row.get(INFO_VALUE)
            if local_name is None or value is None:
                continue
            canonical_name = self.translator.to_canonical(str(local_name))
            if canonical_name is not None:
                variables[canonical_name] = str(value)
        return variables

    def export_players(
        self, table: Table, report: Optional[ConversionReport] = None
    ) -> List[Dict[str, Any]]:
        rows, reference_map = build_reference_map(table)
        return [row_to_player(row, reference_map, report) for row in rows]


def import_document(
    document: Dict[str, Any], database: Database
) -> ConversionReport:
    return DocumentAssembler().import_document(document, database)


def export_document(database: Database) -> Tuple[Dict[str, Any], ConversionReport]:
    report = ConversionReport()
    document = DocumentAssembler().export_document(database, report)
    return document, report
