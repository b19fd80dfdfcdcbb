"""Tests de la correspondance des lignes d'import telematique."""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from scp_analyzer.parsers.import_mapping import COLONNES_IMPORT, map_import_row, map_import_rows


LIGNE = {
    "Date": "15/03/2024",
    "Jour": "Vendredi",
    "Première heure de début du trajet": "06:12:00",
    "Heure de fin du dernier trajet": "17:40:00",
    "Temps de conduite (hh:mm:ss)": "08:15:30",
    "Temps d'attente (hh:mm:ss)": "01:05:00",
    "durée (hh:mm:ss)": "11:28:00",
    "Durée de ralenti (hh:mm:ss)": "00:20:00",
    "Distance (km)": "412,7",
    "Vitesse moy. (km/h)": 52,
    "vitesse maximale (km/h)": "96",
}


class TestImportMapping:
    """Tests de la conversion d'une ligne d'export en rapport de trajet."""

    def test_ligne_complete(self):
        rapport = map_import_row(LIGNE, "p1")
        assert rapport.date == "15/03/2024"
        assert rapport.day == "Vendredi"
        assert rapport.start_time == "06:12:00"
        assert rapport.end_time == "17:40:00"
        assert rapport.driving_duration == "08:15:30"
        assert rapport.wait_duration == "01:05:00"
        assert rapport.total_duration == "11:28:00"
        assert rapport.idle_duration == "00:20:00"
        assert rapport.distance_km == "412,7"
        assert rapport.avg_speed == "52"
        assert rapport.max_speed == "96"
        assert rapport.partner_id == "p1"

    def test_rapport_non_assigne(self):
        rapport = map_import_row(LIGNE, "p1")
        assert rapport.driver_id is None
        assert rapport.invariant_id is None
        assert rapport.is_unassigned

    def test_colonnes_absentes(self):
        rapport = map_import_row({"Date": "2024-03-15", "Colonne inconnue": "x"}, "p1")
        assert rapport.date == "2024-03-15"
        assert rapport.driving_duration == ""
        assert rapport.distance_km == ""

    def test_toutes_les_colonnes_mappees(self):
        assert len(COLONNES_IMPORT) == 11

    def test_plusieurs_lignes(self):
        rapports = map_import_rows([LIGNE, {"Date": "2024-03-16"}], "p2")
        assert [r.date for r in rapports] == ["15/03/2024", "2024-03-16"]
        assert all(r.partner_id == "p2" for r in rapports)
