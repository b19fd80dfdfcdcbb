"""Registre de points des conducteurs (bareme SCP).

Chaque conducteur dispose d'un capital de 12 points. Chaque infraction
retenue sur la periode est rapprochee de sa regle SCP (invariant, gravite) ;
les points retires sont cumules et le solde en est deduit, sans plancher a
zero.

Deux grilles de presentation du solde coexistent et ne doivent pas etre
unifiees :
- ``driver_detail_band`` : fiche conducteur (> 8, > 4, sinon critique) ;
- ``scp_overview_band`` : synthese SCP (>= 11, >= 6, sinon critique).
"""

import logging
from datetime import date
from typing import Iterable, Mapping, Optional

from scp_analyzer.config.constants import (
    CAPITAL_POINTS, CLE_OBC_INCONNUE, INVARIANT_INCONNU, TOUTES_ANNEES,
    BalanceBand,
)
from scp_analyzer.models.records import Driver, Infraction, ObcKey, TripReport, Vehicle
from scp_analyzer.models.results import DriverProfile, InfractionDetail, LedgerResult
from scp_analyzer.rules.rule_catalog import RuleCatalog
from scp_analyzer.utils.date_utils import lenient_year_match, resolve
from scp_analyzer.utils.number_utils import parse_decimal

logger = logging.getLogger("scp_analyzer.ledger")


def driver_detail_band(balance: int) -> BalanceBand:
    """Grille de la fiche conducteur : > 8 bon, 5 a 8 vigilance, <= 4 critique."""
    if balance > 8:
        return BalanceBand.GOOD
    if balance > 4:
        return BalanceBand.WARNING
    return BalanceBand.CRITICAL


def scp_overview_band(balance: int) -> BalanceBand:
    """Grille de la synthese SCP : >= 11 bon, 6 a 10 vigilance, < 6 critique."""
    if balance >= 11:
        return BalanceBand.GOOD
    if balance >= 6:
        return BalanceBand.WARNING
    return BalanceBand.CRITICAL


def _cle_tri_date(detail: InfractionDetail) -> date:
    # Dates illisibles en fin de liste
    parsed = resolve(detail.date)
    return parsed.day if parsed else date.min


class PointLedger:
    """Calcule le registre de points d'un conducteur sur une periode."""

    def __init__(
        self,
        catalogue: RuleCatalog,
        invariants: Mapping[str, str],
        capital: int = CAPITAL_POINTS,
    ):
        self.catalogue = catalogue
        self.invariants = invariants
        self.capital = capital

    def compute(
        self,
        driver_id: str,
        infractions: Iterable[Infraction],
        period: str = TOUTES_ANNEES,
    ) -> LedgerResult:
        """Registre du conducteur pour ``period`` ("all" ou une annee "2024").

        Les infractions a date illisible sont retenues si la date brute
        contient l'annee demandee. Le tri par date decroissante est indicatif :
        les egalites conservent l'ordre d'entree.
        """
        details: list[InfractionDetail] = []
        ecartees = 0

        for infraction in infractions:
            if infraction.driver_id != driver_id:
                continue
            if not lenient_year_match(infraction.date, period):
                ecartees += 1
                continue

            regle = self.catalogue.lookup(infraction.invariant_id, infraction.severity)
            details.append(InfractionDetail(
                id=infraction.id,
                date=infraction.date,
                invariant_title=self.invariants.get(infraction.invariant_id or "", INVARIANT_INCONNU),
                severity=infraction.severity,
                points_lost=regle.point_value,
                sanction_label=regle.sanction_label,
            ))

        details.sort(key=_cle_tri_date, reverse=True)
        total = sum(d.points_lost for d in details)

        if ecartees:
            logger.debug(
                "Conducteur %s : %d infraction(s) hors periode %s", driver_id, ecartees, period,
            )

        return LedgerResult(
            driver_id=driver_id,
            details=details,
            total_points_lost=total,
            balance=self.capital - total,
            infraction_count=len(details),
            capital=self.capital,
        )

    def compute_all(
        self,
        drivers: Iterable[Driver],
        infractions: Iterable[Infraction],
        period: str = TOUTES_ANNEES,
    ) -> dict[str, LedgerResult]:
        """Registre de chaque conducteur, indexe par identifiant."""
        par_conducteur: dict[str, list[Infraction]] = {}
        for infraction in infractions:
            if infraction.driver_id:
                par_conducteur.setdefault(infraction.driver_id, []).append(infraction)

        return {
            d.id: self.compute(d.id, par_conducteur.get(d.id, []), period)
            for d in drivers
        }

    def profile(
        self,
        driver: Driver,
        infractions: Iterable[Infraction],
        reports: Iterable[TripReport],
        vehicles: Iterable[Vehicle],
        obc_keys: Iterable[ObcKey],
        period: str = TOUTES_ANNEES,
    ) -> DriverProfile:
        """Fiche conducteur : registre, kilometrage de la periode, cle OBC, vehicule."""
        registre = self.compute(driver.id, infractions, period)

        total_km = sum(
            parse_decimal(r.distance_km)
            for r in reports
            if r.driver_id == driver.id and lenient_year_match(r.date, period)
        )

        vehicule: Optional[Vehicle] = next(
            (v for v in vehicles if v.driver_id == driver.id), None,
        )

        return DriverProfile(
            driver=driver,
            ledger=registre,
            total_km=total_km,
            obc_key_label=_libelle_cle_obc(driver, obc_keys),
            vehicle=vehicule,
            detail_band=driver_detail_band(registre.balance),
            overview_band=scp_overview_band(registre.balance),
        )


def _libelle_cle_obc(driver: Driver, obc_keys: Iterable[ObcKey]) -> str:
    """Cle OBC du conducteur ; "Inconnue" sans cle ou pour une cle introuvable."""
    for cle in obc_keys:
        if cle.id == driver.obc_key_id:
            return cle.key or CLE_OBC_INCONNUE
    return CLE_OBC_INCONNUE
