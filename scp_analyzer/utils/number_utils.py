"""Utilitaires pour le traitement des distances, vitesses et cibles."""

import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

# Nombre en tete de chaine ("12.5km" -> "12.5")
_PREFIXE_NUMERIQUE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_decimal(valeur) -> float:
    """Parse un decimal saisi au format francais ("11,9" -> 11.9).

    Seul le nombre en tete est lu : "12,5 km" -> 12.5, "1.250,5" -> 1.25.
    Les nombres deja types sont retournes tels quels. Retourne 0 si la valeur
    est vide ou ne commence pas par un nombre.
    """
    if isinstance(valeur, bool):
        return 0.0
    if isinstance(valeur, (int, float)):
        return float(valeur) if math.isfinite(valeur) else 0.0
    if not valeur or not isinstance(valeur, str) or not valeur.strip():
        return 0.0

    v = valeur.strip().replace(" ", "").replace("\u00a0", "")
    # Virgule comme separateur decimal
    v = v.replace(",", ".")

    prefixe = _PREFIXE_NUMERIQUE.match(v)
    if prefixe is None:
        return 0.0
    try:
        nombre = Decimal(prefixe.group())
    except InvalidOperation:
        return 0.0
    return float(nombre)


def format_zero_decimals(valeur: float) -> str:
    """Arrondit a l'entier le plus proche (demi vers le haut) et formate sans decimale."""
    if not math.isfinite(valeur):
        return "0"
    arrondi = Decimal(str(valeur)).quantize(Decimal("1"), ROUND_HALF_UP)
    # Evite l'affichage "-0"
    return str(int(arrondi))


def format_number(valeur: float) -> str:
    """Formate une cible d'objectif : 120.0 -> "120", 10.5 -> "10.5"."""
    if isinstance(valeur, float) and valeur.is_integer():
        return str(int(valeur))
    return str(valeur)
