"""Suivi mensuel des temps de conduite et de repos d'un conducteur.

Les rapports du mois sont regroupes par semaine (lundi a dimanche) avec un
sous-total par semaine et un total mensuel. L'objectif affiche est celui de
l'invariant journalier correspondant ("Temps de conduite journalier" ou
"Temps de repos journalier") de frequence Journalier.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from scp_analyzer.config.constants import (
    INVARIANT_CONDUITE_JOURNALIER, INVARIANT_REPOS_JOURNALIER, NON_DISPONIBLE,
    Frequency, MetricKind,
)
from scp_analyzer.models.records import Invariant, Objective, TimeAnnotation, TripReport
from scp_analyzer.models.results import TimeAnalysis, TimedReport, WeeklyAnalysis
from scp_analyzer.utils.date_utils import resolve, strict_date_filter, week_label
from scp_analyzer.utils.number_utils import format_number
from scp_analyzer.utils.time_utils import parse_duration

logger = logging.getLogger("scp_analyzer.temps")

_INVARIANTS_JOURNALIERS = {
    MetricKind.DRIVING_TIME: INVARIANT_CONDUITE_JOURNALIER,
    MetricKind.REST_TIME: INVARIANT_REPOS_JOURNALIER,
}


def _duree(report: TripReport, metrique: MetricKind) -> int:
    if metrique is MetricKind.DRIVING_TIME:
        return parse_duration(report.driving_duration)
    return parse_duration(report.wait_duration)


class TimeAnalyzer:
    """Analyse hebdomadaire des temps de conduite (ou de repos)."""

    def __init__(
        self,
        invariants: Iterable[Invariant],
        objectives: Iterable[Objective],
        reports: Iterable[TripReport],
        annotations: Iterable[TimeAnnotation] = (),
        metric: MetricKind = MetricKind.DRIVING_TIME,
    ):
        if metric not in _INVARIANTS_JOURNALIERS:
            raise ValueError(f"Metrique de temps non supportee : {metric}")
        self.invariants = list(invariants)
        self.objectives = list(objectives)
        self.reports = list(reports)
        self.annotations = list(annotations)
        self.metric = metric

    def _objectif_journalier(self, partner_id: str) -> Optional[Objective]:
        titre = _INVARIANTS_JOURNALIERS[self.metric]
        invariant = next((i for i in self.invariants if i.title == titre), None)
        if invariant is None:
            return None
        return next(
            (o for o in self.objectives
             if o.invariant_id == invariant.id
             and o.partner_id == partner_id
             and o.frequency == Frequency.JOURNALIER.value),
            None,
        )

    def analyze(self, partner_id: str, driver_id: str, year: str, month: int) -> TimeAnalysis:
        """Semaines du mois pour le conducteur, dans l'ordre chronologique.

        Avec l'annee "all", le mois est retenu dans toutes les annees : mars
        2023 et mars 2024 sont cumules. Pour le seul mois courant, passer
        l'annee explicitement.
        """
        objectif = self._objectif_journalier(partner_id)
        libelle = (
            f"{format_number(objectif.target)} {objectif.unit}" if objectif else NON_DISPONIBLE
        )
        analyses = {
            a.report_id: a for a in self.annotations
            if a.report_id and a.partner_id == partner_id
        }

        resultat = TimeAnalysis(
            driver_id=driver_id,
            metric=self.metric,
            year=str(year),
            month=int(month),
            objective_label=libelle,
            objective_id=objectif.id if objectif else None,
        )

        semaines: dict[date, WeeklyAnalysis] = {}
        for report in self.reports:
            if report.partner_id != partner_id or report.driver_id != driver_id:
                continue
            if not strict_date_filter(report.date, year, month):
                continue
            parsed = resolve(report.date)

            semaine = semaines.get(parsed.week_start)
            if semaine is None:
                semaine = WeeklyAnalysis(
                    week_start=parsed.week_start,
                    week_end=parsed.week_end,
                    week_label=week_label(parsed),
                )
                semaines[parsed.week_start] = semaine

            secondes = _duree(report, self.metric)
            semaine.reports.append(TimedReport(
                report=report,
                seconds=secondes,
                objective_label=libelle,
                annotation=analyses.get(report.id),
            ))
            semaine.subtotal_seconds += secondes
            resultat.total_seconds += secondes

        resultat.weeks = sorted(semaines.values(), key=lambda s: s.week_start)
        logger.debug(
            "Temps %s conducteur %s %s-%s : %d semaine(s), %s",
            self.metric.value, driver_id, year, month, len(resultat.weeks), resultat.total,
        )
        return resultat
