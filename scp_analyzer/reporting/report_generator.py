"""Generateur de la synthese JSON de l'analyse SCP.

Produit une structure JSON contenant :
- Registre de points de chaque conducteur
- Tableaux KPI mensuel et annuel
- Indicateurs du tableau de bord
- Suivi hebdomadaire des temps (si un conducteur est demande)
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional, TextIO

from scp_analyzer.models.records import Infraction
from scp_analyzer.models.results import (
    DashboardSummary, DriverProfile, EnrichedRecord, KpiRow, LedgerResult,
    TimeAnalysis,
)


class ReportGenerator:
    """Convertit les resultats de calcul en dictionnaires serialisables."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def generer_json(self, data: dict, chemin_sortie: Path) -> Path:
        """Ecrit la synthese dans un fichier JSON."""
        chemin_sortie.parent.mkdir(parents=True, exist_ok=True)
        with open(chemin_sortie, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=self.indent, default=str)
        return chemin_sortie

    def afficher_json(self, data: dict, flux: Optional[TextIO] = None) -> None:
        json.dump(data, flux or sys.stdout, ensure_ascii=False, indent=self.indent, default=str)
        (flux or sys.stdout).write("\n")

    @staticmethod
    def ledger_to_dict(ledger: LedgerResult, nom: str = "") -> dict[str, Any]:
        return {
            "conducteur_id": ledger.driver_id,
            "conducteur": nom,
            "capital": ledger.capital,
            "points_perdus": ledger.total_points_lost,
            "solde": ledger.balance,
            "solde_libelle": ledger.balance_label,
            "nb_infractions": ledger.infraction_count,
            "infractions": [
                {
                    "id": d.id,
                    "date": d.date,
                    "invariant": d.invariant_title,
                    "type": d.severity,
                    "points": d.points_lost,
                    "sanction": d.sanction_label,
                }
                for d in ledger.details
            ],
        }

    def profile_to_dict(self, profil: DriverProfile) -> dict[str, Any]:
        data = self.ledger_to_dict(profil.ledger, profil.driver.full_name)
        data.update({
            "total_km": round(profil.total_km, 2),
            "cle_obc": profil.obc_key_label,
            "vehicule": profil.vehicle.name if profil.vehicle else None,
            "niveau_fiche": profil.detail_band.value,
            "niveau_synthese": profil.overview_band.value,
        })
        return data

    @staticmethod
    def kpi_row_to_dict(row: KpiRow, annuel: bool) -> dict[str, Any]:
        data = {
            "invariant_id": row.invariant_id,
            "invariant": row.invariant_title,
            "valeur": row.display_value,
            "objectif": row.objective_label,
            "depassement": row.is_exceeded,
        }
        if annuel:
            data.update({
                "resultat": row.result_display,
                "analyse_cause": row.root_cause_display,
                "action_prise": row.action_taken_display,
            })
        else:
            data["commentaire"] = row.comment_display
        return data

    @staticmethod
    def time_analysis_to_dict(analyse: TimeAnalysis) -> dict[str, Any]:
        return {
            "conducteur_id": analyse.driver_id,
            "metrique": analyse.metric.value,
            "annee": analyse.year,
            "mois": analyse.month,
            "objectif": analyse.objective_label,
            "total": analyse.total,
            "semaines": [
                {
                    "libelle": s.week_label,
                    "debut": s.week_start.isoformat(),
                    "fin": s.week_end.isoformat(),
                    "sous_total": s.subtotal,
                    "rapports": [
                        {
                            "id": t.report.id,
                            "date": t.report.date,
                            "duree": t.duration,
                            "analyse_cause": t.annotation.root_cause if t.annotation else "",
                            "action_prise": t.annotation.action_taken if t.annotation else "",
                            "suivi": t.annotation.follow_up if t.annotation else "",
                        }
                        for t in s.reports
                    ],
                }
                for s in analyse.weeks
            ],
        }

    @staticmethod
    def _infraction_to_dict(enrichie: EnrichedRecord) -> dict[str, Any]:
        infraction: Infraction = enrichie.record
        return {
            "id": infraction.id,
            "date": infraction.date,
            "conducteur": enrichie.driver_full_name,
            "invariant": enrichie.invariant_title,
            "type": infraction.severity,
        }

    def dashboard_to_dict(self, tableau: DashboardSummary) -> dict[str, Any]:
        return {
            "annee": tableau.year,
            "infractions_par_mois": {p.label: p.count for p in tableau.infractions_by_month},
            "infractions_par_type": {p.label: p.count for p in tableau.infractions_by_type},
            "points_par_conducteur": [
                {"id": t.id, "nom": t.name, "points": t.points} for t in tableau.points_by_driver
            ],
            "points_par_invariant": [
                {"id": t.id, "nom": t.name, "points": t.points} for t in tableau.points_by_invariant
            ],
            "activite_par_mois": [
                {
                    "mois": a.label,
                    "heures_travail": round(a.work_hours, 2),
                    "heures_conduite": round(a.driving_hours, 2),
                    "heures_repos": round(a.rest_hours, 2),
                }
                for a in tableau.activity_by_month
            ],
            "dernieres_infractions": [
                self._infraction_to_dict(e) for e in tableau.recent_infractions
            ],
            "conducteurs_avec_cle_obc": tableau.drivers_with_obc_key,
        }
