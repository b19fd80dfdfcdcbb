"""Orchestrateur principal de l'analyse SCP.

Coordonne l'ensemble du workflow pour un partenaire :
1. Registre de points de chaque conducteur
2. Tableaux KPI mensuel et annuel
3. Indicateurs du tableau de bord
4. Suivi hebdomadaire des temps (conducteur demande)
"""

import logging
import time
from typing import Any, Optional

from scp_analyzer.analyzers.dashboard_stats import build_dashboard, infractions_in_month
from scp_analyzer.analyzers.objective_evaluator import ObjectiveEvaluator, period_label
from scp_analyzer.analyzers.time_analysis import TimeAnalyzer
from scp_analyzer.config.constants import TOUTES_ANNEES, MetricKind, PeriodMode
from scp_analyzer.config.settings import AppConfig
from scp_analyzer.core.exceptions import ConfigError
from scp_analyzer.database.snapshot_store import Snapshot
from scp_analyzer.models.results import DashboardSummary, KpiRow, LedgerResult, TimeAnalysis
from scp_analyzer.reporting.report_enricher import ReportEnricher
from scp_analyzer.reporting.report_generator import ReportGenerator
from scp_analyzer.rules.point_ledger import PointLedger
from scp_analyzer.rules.rule_catalog import RuleCatalog

logger = logging.getLogger("scp_analyzer")


def valider_annee(annee: Any) -> str:
    """Annee "YYYY" ou "all"."""
    annee = str(annee).strip()
    if annee == TOUTES_ANNEES or (len(annee) == 4 and annee.isdigit()):
        return annee
    raise ConfigError(f"Annee invalide : {annee!r} (attendu YYYY ou '{TOUTES_ANNEES}')")


def valider_mois(mois: Any) -> int:
    try:
        valeur = int(mois)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Mois invalide : {mois!r}") from e
    if not 1 <= valeur <= 12:
        raise ConfigError(f"Mois hors limites : {valeur} (attendu 1 a 12)")
    return valeur


def valider_mode(mode: Any) -> PeriodMode:
    try:
        return PeriodMode(mode)
    except ValueError as e:
        raise ConfigError(f"Mode de periode inconnu : {mode!r}") from e


class Orchestrator:
    """Coordonne le calcul des points, des KPI et des indicateurs."""

    def __init__(self, snapshot: Snapshot, config: Optional[AppConfig] = None):
        self.snapshot = snapshot
        self.config = config or AppConfig()
        self.report_generator = ReportGenerator(indent=self.config.json_indent)

    # --- Contexte partenaire ---

    def resolve_partner(self, partner_id: Optional[str] = None) -> str:
        """Partenaire demande, sinon le partenaire actif de l'instantane."""
        if partner_id:
            if self.snapshot.partner(partner_id) is None:
                raise ConfigError(f"Partenaire inconnu : {partner_id}")
            return partner_id
        actif = self.snapshot.active_partner()
        if actif is None:
            raise ConfigError("Aucun partenaire actif dans l'instantane")
        return actif.id

    def _donnees(self, partner_id: str) -> Snapshot:
        return self.snapshot.for_partner(partner_id)

    def _registre(self, donnees: Snapshot) -> PointLedger:
        return PointLedger(
            RuleCatalog(donnees.rules),
            donnees.invariant_titles(),
            capital=self.config.scoring.capital_points,
        )

    # --- Operations ---

    def ledger_for_driver(self, partner_id: str, driver_id: str, year: str = TOUTES_ANNEES) -> LedgerResult:
        donnees = self._donnees(partner_id)
        return self._registre(donnees).compute(driver_id, donnees.infractions, valider_annee(year))

    def ledgers(self, partner_id: str, year: str = TOUTES_ANNEES) -> dict[str, LedgerResult]:
        donnees = self._donnees(partner_id)
        return self._registre(donnees).compute_all(
            donnees.drivers, donnees.infractions, valider_annee(year),
        )

    def kpi(self, partner_id: str, mode: PeriodMode, year: str, month: Optional[int] = None) -> list[KpiRow]:
        mode = valider_mode(mode)
        if month is not None:
            month = valider_mois(month)
        donnees = self._donnees(partner_id)
        evaluateur = ObjectiveEvaluator(
            donnees.invariants, donnees.objectives, donnees.reports, donnees.kpi_annotations,
        )
        return evaluateur.evaluate(partner_id, mode, valider_annee(year), month)

    def time_analysis(
        self,
        partner_id: str,
        driver_id: str,
        year: str,
        month: int,
        metric: MetricKind = MetricKind.DRIVING_TIME,
    ) -> TimeAnalysis:
        donnees = self._donnees(partner_id)
        if metric is MetricKind.REST_TIME:
            annotations = donnees.rest_annotations
        else:
            annotations = donnees.driving_annotations
        try:
            analyseur = TimeAnalyzer(
                donnees.invariants, donnees.objectives, donnees.reports, annotations, metric,
            )
        except ValueError as e:
            raise ConfigError(str(e)) from e
        return analyseur.analyze(partner_id, driver_id, valider_annee(year), valider_mois(month))

    def dashboard(self, partner_id: str, year: str) -> DashboardSummary:
        donnees = self._donnees(partner_id)
        enricher = ReportEnricher(donnees.drivers, donnees.invariants, donnees.partners)
        return build_dashboard(
            valider_annee(year),
            donnees.drivers,
            donnees.invariants,
            donnees.infractions,
            donnees.reports,
            RuleCatalog(donnees.rules),
            enricher,
        )

    def run(
        self,
        partner_id: Optional[str] = None,
        year: Optional[str] = None,
        month: Optional[int] = None,
        driver_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Analyse complete d'un partenaire, retournee sous forme JSON.

        Args:
            partner_id: Partenaire analyse (defaut : partenaire actif).
            year: Annee "YYYY" ou "all" (defaut : annee courante).
            month: Mois du tableau KPI mensuel (defaut : mois courant).
            driver_id: Conducteur pour le suivi hebdomadaire des temps.

        Returns:
            Dictionnaire serialisable en JSON.
        """
        debut = time.time()
        partner_id = self.resolve_partner(partner_id)
        annee = valider_annee(year if year is not None else self.config.scoring.annee_defaut)
        mois = valider_mois(month if month is not None else self.config.scoring.mois_defaut)
        donnees = self._donnees(partner_id)
        partenaire = self.snapshot.partner(partner_id)

        logger.info("Demarrage de l'analyse - Partenaire %s, periode %s", partner_id, annee)

        # --- Phase 1 : Registres de points ---
        logger.info("Phase 1/4 : Registres de points (%d conducteur(s))", len(donnees.drivers))
        registre = self._registre(donnees)
        fiches = [
            registre.profile(
                d, donnees.infractions, donnees.reports, donnees.vehicles,
                donnees.obc_keys, annee,
            )
            for d in donnees.drivers
        ]
        logger.info(
            "  %d point(s) perdu(s) au total",
            sum(f.ledger.total_points_lost for f in fiches),
        )

        # --- Phase 2 : KPI ---
        logger.info("Phase 2/4 : Tableaux KPI")
        mensuel = self.kpi(partner_id, PeriodMode.MONTHLY, annee, mois)
        annuel = self.kpi(partner_id, PeriodMode.YEARLY, annee)
        logger.info(
            "  %d objectif(s) depasse(s) sur l'annee",
            sum(1 for r in annuel if r.is_exceeded),
        )

        # --- Phase 3 : Tableau de bord ---
        logger.info("Phase 3/4 : Tableau de bord")
        tableau = self.dashboard(partner_id, annee)

        resultat = {
            "partenaire": {
                "id": partner_id,
                "nom": partenaire.name if partenaire else "",
            },
            "periode": {"annee": annee, "mois": mois},
            "registres": [self.report_generator.profile_to_dict(f) for f in fiches],
            "kpi": {
                "mensuel": {
                    "periode": period_label(PeriodMode.MONTHLY, annee, mois),
                    "lignes": [self.report_generator.kpi_row_to_dict(r, False) for r in mensuel],
                },
                "annuel": {
                    "periode": period_label(PeriodMode.YEARLY, annee),
                    "lignes": [self.report_generator.kpi_row_to_dict(r, True) for r in annuel],
                },
            },
            "tableau_de_bord": self.report_generator.dashboard_to_dict(tableau),
        }
        if annee != TOUTES_ANNEES:
            resultat["tableau_de_bord"]["infractions_du_mois"] = infractions_in_month(
                donnees.infractions, int(annee), mois,
            )

        # --- Phase 4 : Suivi des temps ---
        if driver_id:
            logger.info("Phase 4/4 : Suivi des temps du conducteur %s", driver_id)
            resultat["temps"] = {
                "conduite": self.report_generator.time_analysis_to_dict(
                    self.time_analysis(partner_id, driver_id, annee, mois, MetricKind.DRIVING_TIME)
                ),
                "repos": self.report_generator.time_analysis_to_dict(
                    self.time_analysis(partner_id, driver_id, annee, mois, MetricKind.REST_TIME)
                ),
            }
        else:
            logger.info("Phase 4/4 : Suivi des temps ignore (aucun conducteur demande)")

        logger.info("Analyse terminee en %.1f secondes.", time.time() - debut)
        return resultat
