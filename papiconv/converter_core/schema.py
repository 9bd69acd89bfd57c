"""
Fixed layout of the PAPI tournament store.

The store holds two tables: ``INFO`` with one ``Variable``/``Value`` row per
tournament setting, and ``JOUEUR`` with one row per player. Player rows carry
identity, rating and contact columns followed by three columns per round.
"""

from typing import List

INFO_TABLE = "INFO"
PLAYER_TABLE = "JOUEUR"

INFO_VARIABLE = "Variable"
INFO_VALUE = "Value"
INFO_COLUMNS = [INFO_VARIABLE, INFO_VALUE]

REF_COLUMN = "Ref"
BIRTH_DATE_COLUMN = "NeLe"
CHECKED_IN_COLUMN = "Pointe"

# Reference 1 is the EXEMPT player that byes are paired against
SENTINEL_REF = 1
SENTINEL_NAME = "EXEMPT"
FIRST_PLAYER_REF = 2

MAX_ROUNDS = 24

COLOR_SUFFIX = "Cl"
OPPONENT_SUFFIX = "Adv"
RESULT_SUFFIX = "Res"

PLAYER_FIELD_COLUMNS = [
    REF_COLUMN,
    "RefFFE",
    "Nr",
    "NrFFE",
    "Nom",
    "Prenom",
    "Sexe",
    BIRTH_DATE_COLUMN,
    "Cat",
    "AffType",
    "Elo",
    "Rapide",
    "Blitz",
    "Federation",
    "ClubRef",
    "Club",
    "Ligue",
    "Fide",
    "RapideFide",
    "BlitzFide",
    "FideCode",
    "FideTitre",
    "Fixe",
    CHECKED_IN_COLUMN,
    "InscriptionRegle",
    "InscriptionDu",
    "Adresse",
    "CP",
    "Tel",
    "EMail",
    "Commentaire",
]


def round_column(round_number: int, suffix: str) -> str:
    """Column name for one field of one round, e.g. ``Rd05Adv``."""
    return f"Rd{round_number:02d}{suffix}"


def round_columns() -> List[str]:
    columns = []
    for round_number in range(1, MAX_ROUNDS + 1):
        columns.append(round_column(round_number, COLOR_SUFFIX))
        columns.append(round_column(round_number, OPPONENT_SUFFIX))
        columns.append(round_column(round_number, RESULT_SUFFIX))
    return columns


PLAYER_COLUMNS = PLAYER_FIELD_COLUMNS + round_columns()
