"""Evaluation des objectifs KPI par invariant, en mensuel ou en annuel.

Pour chaque invariant, la valeur de la periode est agregee a partir des
rapports de trajet du partenaire :
- "Kms parcourus" : somme des distances de tous les rapports ;
- "Temps de conduite" / "Temps de repos" : somme des durees de tous les
  rapports, convertie en heures ;
- autres invariants : nombre de rapports rattaches a l'invariant.

La cible de l'objectif est mise a l'echelle selon sa frequence, puis
comparee a la valeur. Un invariant sans objectif n'est jamais en depassement.
"""

import logging
import unicodedata
from typing import Iterable, Optional

from scp_analyzer.config.constants import (
    INVARIANTS_PRIORITAIRES, METRIQUES_GLOBALES, NON_DISPONIBLE, TOUTES_ANNEES,
    Frequency, MetricKind, PeriodMode,
)
from scp_analyzer.models.records import Invariant, KpiAnnotation, Objective, TripReport
from scp_analyzer.models.results import KpiRow
from scp_analyzer.utils.date_utils import libelle_mois, strict_date_filter
from scp_analyzer.utils.number_utils import format_number, format_zero_decimals, parse_decimal
from scp_analyzer.utils.time_utils import parse_duration

logger = logging.getLogger("scp_analyzer.kpi")


def scale_target(objective: Objective, mode: PeriodMode) -> float:
    """Met la cible a l'echelle de la periode evaluee.

    Seul le cas Mensuel evalue en annuel est multiplie (x12). Les frequences
    Journalier et Hebdomadaire ne sont pas converties : la cible est utilisee
    telle quelle.
    """
    mode = PeriodMode(mode)
    if objective.frequency == Frequency.MENSUEL.value and mode is PeriodMode.YEARLY:
        return objective.target * 12
    return objective.target


def metric_for(invariant: Invariant) -> MetricKind:
    return METRIQUES_GLOBALES.get(invariant.title, MetricKind.COUNT)


def cle_alphabetique(titre: str) -> str:
    """Titre sans accents ni casse : "Écoconduite" se range avec les E."""
    decompose = unicodedata.normalize("NFKD", titre)
    return "".join(c for c in decompose if not unicodedata.combining(c)).casefold()


def sort_key(row: KpiRow) -> tuple:
    """Invariants prioritaires dans l'ordre fixe, puis les autres par titre."""
    if row.invariant_title in INVARIANTS_PRIORITAIRES:
        return (0, INVARIANTS_PRIORITAIRES.index(row.invariant_title), "", "")
    return (1, 0, cle_alphabetique(row.invariant_title), row.invariant_title)


def period_label(mode: PeriodMode, year: str, month: Optional[int] = None) -> str:
    """Libelle de colonne : "Mars-24" en mensuel, "2024" en annuel."""
    if PeriodMode(mode) is PeriodMode.MONTHLY and month is not None and year != TOUTES_ANNEES:
        return libelle_mois(year, month)
    return str(year)


class ObjectiveEvaluator:
    """Calcule les lignes KPI d'un partenaire pour une periode."""

    def __init__(
        self,
        invariants: Iterable[Invariant],
        objectives: Iterable[Objective],
        reports: Iterable[TripReport],
        annotations: Iterable[KpiAnnotation] = (),
    ):
        self.invariants = list(invariants)
        self.objectives = list(objectives)
        self.reports = list(reports)
        self.annotations = list(annotations)

    def evaluate(
        self,
        partner_id: Optional[str],
        mode: PeriodMode,
        year: str,
        month: Optional[int] = None,
    ) -> list[KpiRow]:
        """Une ligne par invariant, triee (prioritaires puis alphabetique).

        Sans partenaire, retourne une liste vide. Les rapports a date
        illisible sont exclus de la periode.
        """
        if not partner_id:
            return []

        mode = PeriodMode(mode)
        mois = month if mode is PeriodMode.MONTHLY else None
        if mode is PeriodMode.MONTHLY and mois is None:
            logger.debug("KPI mensuel sans mois : aucun rapport retenu")
            rapports = []
        else:
            rapports = [
                r for r in self.reports
                if r.partner_id == partner_id and strict_date_filter(r.date, year, mois)
            ]
        logger.debug(
            "KPI %s %s%s : %d rapport(s) sur la periode",
            mode.value, year, f"-{mois}" if mois else "", len(rapports),
        )

        # Regroupement unique par invariant
        par_invariant: dict[str, list[TripReport]] = {}
        for rapport in rapports:
            if rapport.invariant_id:
                par_invariant.setdefault(rapport.invariant_id, []).append(rapport)

        lignes = [
            self._evaluer_invariant(inv, partner_id, mode, rapports, par_invariant)
            for inv in self.invariants
        ]
        return sorted(lignes, key=sort_key)

    def _objectif(self, invariant_id: str, partner_id: str) -> Optional[Objective]:
        return next(
            (o for o in self.objectives
             if o.invariant_id == invariant_id and o.partner_id == partner_id),
            None,
        )

    def _annotation(self, objective: Optional[Objective], partner_id: str) -> Optional[KpiAnnotation]:
        if objective is None:
            return None
        return next(
            (k for k in self.annotations
             if k.objective_id == objective.id and k.partner_id == partner_id),
            None,
        )

    def _evaluer_invariant(
        self,
        invariant: Invariant,
        partner_id: str,
        mode: PeriodMode,
        rapports: list[TripReport],
        par_invariant: dict[str, list[TripReport]],
    ) -> KpiRow:
        metrique = metric_for(invariant)
        if metrique is MetricKind.COUNT:
            pertinents = par_invariant.get(invariant.id, [])
        else:
            pertinents = rapports

        valeur = aggregate(metrique, pertinents)
        objectif = self._objectif(invariant.id, partner_id)

        if objectif is not None:
            cible = scale_target(objectif, mode)
            libelle = f"{format_number(cible)}{objectif.unit or ''}"
            depasse = valeur > cible
        else:
            cible = None
            libelle = NON_DISPONIBLE
            depasse = False

        if metrique is MetricKind.COUNT:
            affichage = str(int(valeur))
        else:
            affichage = format_zero_decimals(valeur)

        return KpiRow(
            invariant_id=invariant.id,
            invariant_title=invariant.title,
            value=valeur,
            display_value=affichage,
            objective_label=libelle,
            is_exceeded=depasse,
            annotation=self._annotation(objectif, partner_id),
            objective_id=objectif.id if objectif else None,
            scaled_target=cible,
            metric=metrique,
        )


def aggregate(metrique: MetricKind, rapports: list[TripReport]) -> float:
    """Valeur agregee d'une metrique ; un champ illisible compte pour 0."""
    if metrique is MetricKind.DISTANCE:
        return sum((parse_decimal(r.distance_km) for r in rapports), 0.0)
    if metrique is MetricKind.DRIVING_TIME:
        return sum(parse_duration(r.driving_duration) for r in rapports) / 3600
    if metrique is MetricKind.REST_TIME:
        return sum(parse_duration(r.wait_duration) for r in rapports) / 3600
    return len(rapports)
