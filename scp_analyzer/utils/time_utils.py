"""Utilitaires de conversion des durees "hh:mm:ss" des rapports de trajet."""

import math

from scp_analyzer.config.constants import DUREE_NULLE, SEPARATEUR_DUREE


def parse_duration(valeur) -> int:
    """Convertit une duree "hh:mm:ss" en nombre de secondes.

    Les heures ne sont pas bornees ("125:00:00" est accepte). Retourne 0 pour
    une valeur vide, non textuelle, qui n'a pas exactement trois parties ou
    dont une partie n'est pas un entier. Ne leve jamais.
    """
    if not valeur or not isinstance(valeur, str):
        return 0

    parties = valeur.split(SEPARATEUR_DUREE)
    if len(parties) != 3:
        return 0

    try:
        heures, minutes, secondes = (int(p) for p in parties)
    except ValueError:
        return 0
    return heures * 3600 + minutes * 60 + secondes


def parse_duration_hours(valeur) -> float:
    """Meme conversion que parse_duration, exprimee en heures."""
    return parse_duration(valeur) / 3600


def format_duration(secondes) -> str:
    """Formate un nombre de secondes en "hh:mm:ss" (parties completees a 2 chiffres)."""
    if isinstance(secondes, bool) or not isinstance(secondes, (int, float)):
        return DUREE_NULLE
    if not math.isfinite(secondes):
        return DUREE_NULLE

    heures = math.floor(secondes / 3600)
    minutes = math.floor((secondes % 3600) / 60)
    reste = math.floor(secondes % 60)
    return f"{heures:02d}:{minutes:02d}:{reste:02d}"
