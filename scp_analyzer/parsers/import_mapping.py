"""Correspondance des lignes d'import telematique vers les rapports de trajet.

La lecture du tableur n'est pas faite ici : chaque ligne arrive deja sous
forme de dictionnaire {en-tete: valeur}. Les rapports importes ne sont
rattaches a aucun conducteur ni invariant.
"""

import logging
from typing import Any, Iterable, Mapping

from scp_analyzer.models.records import TripReport

logger = logging.getLogger("scp_analyzer.import")

# En-tete du fichier d'export -> cle du magasin
COLONNES_IMPORT = {
    "Date": "date",
    "Jour": "jour",
    "Première heure de début du trajet": "heure_debut_trajet",
    "Heure de fin du dernier trajet": "heure_fin_trajet",
    "Temps de conduite (hh:mm:ss)": "temps_conduite",
    "Temps d'attente (hh:mm:ss)": "temps_attente",
    "durée (hh:mm:ss)": "duree",
    "Durée de ralenti (hh:mm:ss)": "duree_ralenti",
    "Distance (km)": "distance_km",
    "Vitesse moy. (km/h)": "vitesse_moy_kmh",
    "vitesse maximale (km/h)": "vitesse_max_kmh",
}


def _texte(valeur: Any) -> str:
    if valeur is None or valeur == "":
        return ""
    return str(valeur)


def map_import_row(row: Mapping[str, Any], partner_id: str) -> TripReport:
    """Convertit une ligne d'export en rapport non assigne du partenaire."""
    document = {cle: _texte(row.get(entete)) for entete, cle in COLONNES_IMPORT.items()}
    document.update({
        "partenaire_id": partner_id,
        "conducteur_id": "",
        "invariant_id": "",
    })
    return TripReport.model_validate(document)


def map_import_rows(rows: Iterable[Mapping[str, Any]], partner_id: str) -> list[TripReport]:
    rapports = [map_import_row(row, partner_id) for row in rows]
    logger.info("%d rapport(s) importe(s) pour le partenaire %s", len(rapports), partner_id)
    return rapports
