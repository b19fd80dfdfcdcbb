"""Indicateurs agreges du tableau de bord d'un partenaire."""

from datetime import date
from typing import Iterable, Optional

from scp_analyzer.config.constants import (
    NB_DERNIERES_INFRACTIONS, NOMS_MOIS_COURTS, TOUTES_ANNEES, TYPE_NON_DEFINI,
)
from scp_analyzer.models.records import Driver, Infraction, Invariant, TripReport
from scp_analyzer.models.results import (
    DashboardSummary, EnrichedRecord, MonthlyActivity, PeriodCount, PointsTotal,
)
from scp_analyzer.reporting.report_enricher import ReportEnricher
from scp_analyzer.rules.rule_catalog import RuleCatalog
from scp_analyzer.utils.date_utils import resolve, strict_date_filter
from scp_analyzer.utils.time_utils import parse_duration_hours


def _dans_annee(valeur: str, annee: str) -> bool:
    # "all" retient aussi les dates illisibles
    return annee == TOUTES_ANNEES or strict_date_filter(valeur, annee)


def infractions_by_month(infractions: Iterable[Infraction], year: str) -> list[PeriodCount]:
    """Nombre d'infractions par mois (Jan a Dec) ; dates illisibles ignorees."""
    compteurs = [0] * 12
    for infraction in infractions:
        parsed = resolve(infraction.date)
        if parsed is None:
            continue
        if year == TOUTES_ANNEES or parsed.year == str(year):
            compteurs[parsed.month - 1] += 1
    return [PeriodCount(label=l, count=c) for l, c in zip(NOMS_MOIS_COURTS, compteurs)]


def infractions_by_type(infractions: Iterable[Infraction], year: str) -> list[PeriodCount]:
    """Nombre d'infractions par gravite, dans l'ordre de premiere apparition."""
    compteurs: dict[str, int] = {}
    for infraction in infractions:
        if not _dans_annee(infraction.date, year):
            continue
        type_infraction = infraction.severity or TYPE_NON_DEFINI
        compteurs[type_infraction] = compteurs.get(type_infraction, 0) + 1
    return [PeriodCount(label=t, count=c) for t, c in compteurs.items()]


def _totaux_points(
    infractions: Iterable[Infraction],
    catalogue: RuleCatalog,
    year: str,
    noms: dict[str, str],
    cle,
) -> list[PointsTotal]:
    points = dict.fromkeys(noms, 0)
    for infraction in infractions:
        ref = cle(infraction)
        if not ref or ref not in points:
            continue
        if not _dans_annee(infraction.date, year):
            continue
        points[ref] += catalogue.points_for(infraction.invariant_id, infraction.severity)

    totaux = [PointsTotal(id=i, name=noms[i], points=p) for i, p in points.items() if p > 0]
    return sorted(totaux, key=lambda t: t.points, reverse=True)


def points_by_driver(
    infractions: Iterable[Infraction],
    drivers: Iterable[Driver],
    catalogue: RuleCatalog,
    year: str,
) -> list[PointsTotal]:
    """Points perdus par conducteur (uniquement > 0, decroissant)."""
    noms = {d.id: d.full_name for d in drivers}
    return _totaux_points(infractions, catalogue, year, noms, lambda i: i.driver_id)


def points_by_invariant(
    infractions: Iterable[Infraction],
    invariants: Iterable[Invariant],
    catalogue: RuleCatalog,
    year: str,
) -> list[PointsTotal]:
    """Points perdus par invariant (uniquement > 0, decroissant)."""
    noms = {i.id: i.title for i in invariants}
    return _totaux_points(infractions, catalogue, year, noms, lambda i: i.invariant_id)


def activity_by_month(reports: Iterable[TripReport], year: str) -> list[MonthlyActivity]:
    """Heures de travail, de conduite et de repos cumulees par mois."""
    mois = [MonthlyActivity(label=l) for l in NOMS_MOIS_COURTS]
    for report in reports:
        parsed = resolve(report.date)
        if parsed is None:
            continue
        if year != TOUTES_ANNEES and parsed.year != str(year):
            continue
        activite = mois[parsed.month - 1]
        activite.work_hours += parse_duration_hours(report.total_duration)
        activite.driving_hours += parse_duration_hours(report.driving_duration)
        activite.rest_hours += parse_duration_hours(report.wait_duration)
    return mois


def recent_infractions(
    infractions: Iterable[Infraction],
    enricher: ReportEnricher,
    year: str,
    limit: int = NB_DERNIERES_INFRACTIONS,
) -> list[EnrichedRecord]:
    """Dernieres infractions enregistrees, avec le nom du conducteur."""
    retenues = [
        i for i in infractions
        if year == TOUTES_ANNEES or strict_date_filter(i.date, year)
    ]

    def cle(infraction: Infraction) -> date:
        parsed = resolve(infraction.date)
        return parsed.day if parsed else date.min

    retenues.sort(key=cle, reverse=True)
    return [enricher.enrich_infraction(i) for i in retenues[:limit]]


def infractions_in_month(infractions: Iterable[Infraction], year: int, month: int) -> int:
    """Nombre d'infractions d'un mois donne (par defaut le mois courant cote appelant)."""
    return sum(1 for i in infractions if strict_date_filter(i.date, str(year), month))


def drivers_with_obc_key(drivers: Iterable[Driver]) -> int:
    return sum(1 for d in drivers if d.obc_key_id)


def build_dashboard(
    year: str,
    drivers: Iterable[Driver],
    invariants: Iterable[Invariant],
    infractions: Iterable[Infraction],
    reports: Iterable[TripReport],
    catalogue: RuleCatalog,
    enricher: Optional[ReportEnricher] = None,
) -> DashboardSummary:
    """Assemble tous les indicateurs du tableau de bord pour une annee."""
    drivers = list(drivers)
    invariants = list(invariants)
    infractions = list(infractions)
    reports = list(reports)
    enricher = enricher or ReportEnricher(drivers=drivers, invariants=invariants)

    return DashboardSummary(
        year=str(year),
        infractions_by_month=infractions_by_month(infractions, year),
        infractions_by_type=infractions_by_type(infractions, year),
        points_by_driver=points_by_driver(infractions, drivers, catalogue, year),
        points_by_invariant=points_by_invariant(infractions, invariants, catalogue, year),
        activity_by_month=activity_by_month(reports, year),
        recent_infractions=recent_infractions(infractions, enricher, year),
        drivers_with_obc_key=drivers_with_obc_key(drivers),
    )
