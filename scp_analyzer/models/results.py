"""Modeles des resultats de calcul (registre de points, KPI, temps)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Generic, Optional, TypeVar

from scp_analyzer.config.constants import (
    ACTION_PRISE_DEFAUT, ANALYSE_CAUSE_DEFAUT, CAPITAL_POINTS, COMMENTAIRE_VIDE,
    NON_DISPONIBLE, RESULTAT_DEFAUT, BalanceBand, MetricKind,
)
from scp_analyzer.models.records import (
    Driver, KpiAnnotation, TimeAnnotation, TripReport, Vehicle,
)
from scp_analyzer.utils.time_utils import format_duration

R = TypeVar("R")


# --- Referentiel SCP ---

@dataclass(frozen=True)
class RuleMatch:
    """Resultat d'une recherche dans le referentiel SCP."""
    point_value: int
    sanction_label: str
    matched: bool = True


# --- Registre de points ---

@dataclass
class InfractionDetail:
    """Une ligne du registre : infraction et points retires."""
    id: str
    date: str
    invariant_title: str
    severity: str
    points_lost: int
    sanction_label: str


@dataclass
class LedgerResult:
    """Registre de points d'un conducteur sur une periode."""
    driver_id: str
    details: list[InfractionDetail] = field(default_factory=list)
    total_points_lost: int = 0
    balance: int = CAPITAL_POINTS
    infraction_count: int = 0
    capital: int = CAPITAL_POINTS

    @property
    def balance_label(self) -> str:
        return f"{self.balance} / {self.capital}"


@dataclass
class DriverProfile:
    """Fiche conducteur : registre, kilometrage, cle OBC et vehicule."""
    driver: Driver
    ledger: LedgerResult
    total_km: float = 0.0
    obc_key_label: str = NON_DISPONIBLE
    vehicle: Optional[Vehicle] = None
    detail_band: BalanceBand = BalanceBand.GOOD
    overview_band: BalanceBand = BalanceBand.GOOD


# --- KPI ---

@dataclass
class KpiRow:
    """Ligne du tableau KPI pour un invariant."""
    invariant_id: str
    invariant_title: str
    value: float
    display_value: str
    objective_label: str
    is_exceeded: bool
    annotation: Optional[KpiAnnotation] = None
    objective_id: Optional[str] = None
    scaled_target: Optional[float] = None
    metric: MetricKind = MetricKind.COUNT

    def _choisir(self, saisie: Optional[str], defauts: tuple[str, str]) -> str:
        if saisie:
            return saisie
        return defauts[0] if self.is_exceeded else defauts[1]

    @property
    def result_display(self) -> str:
        return self._choisir(self.annotation and self.annotation.result, RESULTAT_DEFAUT)

    @property
    def root_cause_display(self) -> str:
        return self._choisir(self.annotation and self.annotation.root_cause, ANALYSE_CAUSE_DEFAUT)

    @property
    def action_taken_display(self) -> str:
        return self._choisir(self.annotation and self.annotation.action_taken, ACTION_PRISE_DEFAUT)

    @property
    def comment_display(self) -> str:
        if self.annotation and self.annotation.comment:
            return self.annotation.comment
        return COMMENTAIRE_VIDE


# --- Suivi des temps ---

@dataclass
class TimedReport:
    """Rapport retenu dans l'analyse des temps, avec sa duree et son analyse."""
    report: TripReport
    seconds: int
    objective_label: str = NON_DISPONIBLE
    annotation: Optional[TimeAnnotation] = None

    @property
    def duration(self) -> str:
        return format_duration(self.seconds)


@dataclass
class WeeklyAnalysis:
    """Rapports d'une semaine (lundi a dimanche) et leur sous-total."""
    week_start: date
    week_end: date
    week_label: str
    reports: list[TimedReport] = field(default_factory=list)
    subtotal_seconds: int = 0

    @property
    def subtotal(self) -> str:
        return format_duration(self.subtotal_seconds)


@dataclass
class TimeAnalysis:
    """Analyse mensuelle des temps de conduite ou de repos d'un conducteur."""
    driver_id: str
    metric: MetricKind
    year: str
    month: int
    objective_label: str = NON_DISPONIBLE
    objective_id: Optional[str] = None
    weeks: list[WeeklyAnalysis] = field(default_factory=list)
    total_seconds: int = 0

    @property
    def total(self) -> str:
        return format_duration(self.total_seconds)


# --- Enrichissement ---

@dataclass(frozen=True)
class EnrichedRecord(Generic[R]):
    """Enregistrement brut accompagne de ses libelles d'affichage."""
    record: R
    driver_full_name: str = NON_DISPONIBLE
    invariant_title: str = NON_DISPONIBLE
    partner_name: str = NON_DISPONIBLE


@dataclass
class ReportClassification:
    """Repartition des rapports : non assignes, assignes, assignes sans infraction."""
    unassigned: list[EnrichedRecord] = field(default_factory=list)
    assigned: list[EnrichedRecord] = field(default_factory=list)
    without_infraction: list[EnrichedRecord] = field(default_factory=list)


# --- Tableau de bord ---

@dataclass
class PeriodCount:
    label: str
    count: int


@dataclass
class PointsTotal:
    id: str
    name: str
    points: int


@dataclass
class MonthlyActivity:
    label: str
    work_hours: float = 0.0
    driving_hours: float = 0.0
    rest_hours: float = 0.0


@dataclass
class DashboardSummary:
    """Indicateurs du tableau de bord pour un partenaire et une annee."""
    year: str
    infractions_by_month: list[PeriodCount] = field(default_factory=list)
    infractions_by_type: list[PeriodCount] = field(default_factory=list)
    points_by_driver: list[PointsTotal] = field(default_factory=list)
    points_by_invariant: list[PointsTotal] = field(default_factory=list)
    activity_by_month: list[MonthlyActivity] = field(default_factory=list)
    recent_infractions: list[EnrichedRecord] = field(default_factory=list)
    drivers_with_obc_key: int = 0
