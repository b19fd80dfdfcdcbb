"""Utilitaires de parsing des dates et de decoupage en periodes.

Les dates des rapports et des infractions sont saisies a la main ou importees
de tableurs : "2024-03-15", "15/03/2024" ou texte libre ("15 mars 2024").
Une date illisible n'interrompt jamais un calcul ; l'appelant decide de
l'exclure (``strict_date_filter``) ou de se rabattre sur une recherche de
l'annee dans la chaine brute (``lenient_year_match``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

from dateutil import parser as date_parser

from scp_analyzer.config.constants import NOMS_MOIS, TOUTES_ANNEES

# Valeurs par defaut des composantes absentes d'une date en texte libre
_DATE_PAR_DEFAUT = datetime(1970, 1, 1)
_ANNEE = re.compile(r"(?<!\d)\d{4}(?!\d)")
_LETTRE = re.compile(r"[^\W\d_]")


class FrenchParserInfo(date_parser.parserinfo):
    """Noms de mois et de jours francais en plus des noms anglais."""

    MONTHS = [
        ("Jan", "January", "janv", "janvier"),
        ("Feb", "February", "fev", "fevr", "février", "fevrier"),
        ("Mar", "March", "mars"),
        ("Apr", "April", "avr", "avril"),
        ("May", "mai"),
        ("Jun", "June", "juin"),
        ("Jul", "July", "juil", "juillet"),
        ("Aug", "August", "aout", "août"),
        ("Sep", "Sept", "September", "septembre"),
        ("Oct", "October", "octobre"),
        ("Nov", "November", "novembre"),
        ("Dec", "December", "déc", "decembre", "décembre"),
    ]
    WEEKDAYS = [
        ("Mon", "Monday", "lun", "lundi"),
        ("Tue", "Tuesday", "mardi"),
        ("Wed", "Wednesday", "mer", "mercredi"),
        ("Thu", "Thursday", "jeu", "jeudi"),
        ("Fri", "Friday", "ven", "vendredi"),
        ("Sat", "Saturday", "sam", "samedi"),
        ("Sun", "Sunday", "dim", "dimanche"),
    ]
    JUMP = date_parser.parserinfo.JUMP + ["le", "du", "er"]

    def __init__(self):
        super().__init__(dayfirst=True)


_PARSER_INFO = FrenchParserInfo()


@dataclass(frozen=True)
class ParsedDate:
    """Date resolue et ses rattachements de periode."""
    day: date
    year: str
    month: int
    week_start: date
    week_end: date


@dataclass(frozen=True)
class Unparsable:
    """Date illisible, conservee telle quelle."""
    raw: str


DateResult = Union[ParsedDate, Unparsable]


def _parser_jour_mois_annee(valeur: str) -> Optional[date]:
    """Reconstruit "dd/mm/yyyy" en date (equivalent de yyyy-mm-dd)."""
    parties = valeur.split("/")
    if len(parties) != 3:
        return None
    jour, mois, annee = parties
    try:
        return date(int(annee), int(mois), int(jour))
    except ValueError:
        return None


def _parser_texte(valeur: str) -> Optional[date]:
    """ISO d'abord, puis texte libre (noms de mois francais ou anglais).

    Le texte libre exige un nom de mois ou de jour et une annee sur 4
    chiffres : "2024-15-03" ou "mars" seuls restent illisibles.
    """
    try:
        return date_parser.isoparse(valeur).date()
    except (ValueError, OverflowError):
        pass
    annees = _ANNEE.findall(valeur)
    if not annees or not _LETTRE.search(valeur):
        return None
    try:
        jour = date_parser.parse(valeur, parserinfo=_PARSER_INFO, default=_DATE_PAR_DEFAUT).date()
    except (ValueError, OverflowError):
        return None
    return jour if str(jour.year) in annees else None


def bornes_semaine(jour: date) -> tuple[date, date]:
    """Semaine ISO commencant le lundi : (lundi <= jour, lundi + 6 jours)."""
    debut = jour - timedelta(days=jour.weekday())
    return debut, debut + timedelta(days=6)


def resolve_result(valeur) -> DateResult:
    """Resout une date saisie en annee, mois et semaine, ou en ``Unparsable``."""
    if not valeur or not isinstance(valeur, str) or not valeur.strip():
        return Unparsable(raw="" if valeur is None else str(valeur))

    texte = valeur.strip()
    if "/" in texte:
        jour = _parser_jour_mois_annee(texte)
    else:
        jour = _parser_texte(texte)

    if jour is None:
        return Unparsable(raw=valeur)

    debut, fin = bornes_semaine(jour)
    return ParsedDate(
        day=jour,
        year=str(jour.year),
        month=jour.month,
        week_start=debut,
        week_end=fin,
    )


def resolve(valeur) -> Optional[ParsedDate]:
    """Comme resolve_result, mais retourne None pour une date illisible."""
    resultat = resolve_result(valeur)
    return resultat if isinstance(resultat, ParsedDate) else None


def looks_like_year(valeur, annee: str) -> bool:
    """Recherche brute de l'annee dans la chaine de date."""
    if not valeur or not annee:
        return False
    return str(annee) in str(valeur)


def lenient_year_match(valeur, annee: str) -> bool:
    """Filtre annuel tolerant (registre de points).

    Une date illisible est retenue si la chaine brute contient l'annee.
    """
    if annee == TOUTES_ANNEES:
        return True
    if not valeur:
        return False
    resultat = resolve_result(valeur)
    if isinstance(resultat, ParsedDate):
        return resultat.year == str(annee)
    return looks_like_year(valeur, annee)


def strict_date_filter(valeur, annee: str, mois: Optional[int] = None) -> bool:
    """Filtre de periode strict (KPI) : une date illisible est toujours exclue."""
    parsed = resolve(valeur)
    if parsed is None:
        return False
    if annee != TOUTES_ANNEES and parsed.year != str(annee):
        return False
    if mois is not None and parsed.month != int(mois):
        return False
    return True


def week_label(parsed: ParsedDate) -> str:
    """Libelle de semaine : "Semaine du 11 mars au 17 mars 2024"."""
    debut, fin = parsed.week_start, parsed.week_end
    return (
        f"Semaine du {debut.day:02d} {NOMS_MOIS[debut.month - 1].lower()} "
        f"au {fin.day:02d} {NOMS_MOIS[fin.month - 1].lower()} {fin.year}"
    )


def libelle_mois(annee: str, mois: int) -> str:
    """Libelle de periode mensuelle : "Mars-24"."""
    return f"{NOMS_MOIS[int(mois) - 1]}-{str(annee)[2:]}"
