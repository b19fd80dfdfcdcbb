"""Jointure des enregistrements bruts avec les referentiels (id -> libelle)."""

from typing import Iterable, Optional

from scp_analyzer.config.constants import NON_DISPONIBLE
from scp_analyzer.models.records import (
    Driver, Infraction, Invariant, Objective, Partner, RuleCatalogEntry, TripReport,
)
from scp_analyzer.models.results import EnrichedRecord, ReportClassification


class ReportEnricher:
    """Rattache nom du conducteur, titre de l'invariant et nom du partenaire.

    Sans effet de bord : les enregistrements d'origine ne sont pas modifies et
    un meme enregistrement produit toujours les memes libelles.
    """

    def __init__(
        self,
        drivers: Iterable[Driver] = (),
        invariants: Iterable[Invariant] = (),
        partners: Iterable[Partner] = (),
    ):
        self.driver_names = {d.id: d.full_name for d in drivers}
        self.invariant_titles = {i.id: i.title for i in invariants}
        self.partner_names = {p.id: p.name for p in partners}

    @staticmethod
    def _libelle(table: dict[str, str], cle: Optional[str]) -> str:
        if not cle:
            return NON_DISPONIBLE
        return table.get(cle) or NON_DISPONIBLE

    def driver_name(self, driver_id: Optional[str]) -> str:
        return self._libelle(self.driver_names, driver_id)

    def invariant_title(self, invariant_id: Optional[str]) -> str:
        return self._libelle(self.invariant_titles, invariant_id)

    def partner_name(self, partner_id: Optional[str]) -> str:
        return self._libelle(self.partner_names, partner_id)

    def enrich_report(self, report: TripReport) -> EnrichedRecord:
        return EnrichedRecord(
            record=report,
            driver_full_name=self.driver_name(report.driver_id),
            invariant_title=self.invariant_title(report.invariant_id),
            partner_name=self.partner_name(report.partner_id),
        )

    def enrich_infraction(self, infraction: Infraction) -> EnrichedRecord:
        return EnrichedRecord(
            record=infraction,
            driver_full_name=self.driver_name(infraction.driver_id),
            invariant_title=self.invariant_title(infraction.invariant_id),
            partner_name=self.partner_name(infraction.partner_id),
        )

    def enrich_objective(self, objective: Objective) -> EnrichedRecord:
        return EnrichedRecord(
            record=objective,
            invariant_title=self.invariant_title(objective.invariant_id),
            partner_name=self.partner_name(objective.partner_id),
        )

    def enrich_rule(self, rule: RuleCatalogEntry) -> EnrichedRecord:
        return EnrichedRecord(
            record=rule,
            invariant_title=self.invariant_title(rule.invariant_id),
            partner_name=self.partner_name(rule.partner_id),
        )

    def enrich_reports(self, reports: Iterable[TripReport]) -> list[EnrichedRecord]:
        return [self.enrich_report(r) for r in reports]

    def enrich_infractions(self, infractions: Iterable[Infraction]) -> list[EnrichedRecord]:
        return [self.enrich_infraction(i) for i in infractions]

    def classify_reports(
        self,
        reports: Iterable[TripReport],
        infractions: Iterable[Infraction],
    ) -> ReportClassification:
        """Repartit les rapports selon leur affectation et leur suivi.

        Un rapport sans conducteur ou sans invariant est non assigne. Parmi
        les rapports assignes, ceux qu'aucune infraction ne reference sont
        "sans infraction".
        """
        references = {i.source_report_id for i in infractions if i.source_report_id}
        classement = ReportClassification()
        for report in reports:
            enrichi = self.enrich_report(report)
            if report.is_unassigned:
                classement.unassigned.append(enrichi)
                continue
            classement.assigned.append(enrichi)
            if report.id not in references:
                classement.without_infraction.append(enrichi)
        return classement
