"""Lecture d'un instantane JSON du magasin de documents.

L'instantane est un export du magasin : un objet JSON dont chaque cle est le
nom d'une collection (``partenaires``, ``rapports``...). Une collection est
soit une liste de documents portant leur ``id``, soit un objet
``{id: document}``. Le magasin est en lecture seule.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from scp_analyzer.config.constants import COLLECTIONS
from scp_analyzer.core.exceptions import SnapshotError
from scp_analyzer.models.records import (
    Driver, Infraction, Invariant, KpiAnnotation, ObcKey, Objective, Partner,
    RuleCatalogEntry, TimeAnnotation, TripReport, Vehicle,
)

logger = logging.getLogger("scp_analyzer.store")

M = TypeVar("M", bound=BaseModel)


@dataclass
class Snapshot:
    """Collections validees, pretes pour le calcul."""
    partners: list[Partner] = field(default_factory=list)
    drivers: list[Driver] = field(default_factory=list)
    vehicles: list[Vehicle] = field(default_factory=list)
    obc_keys: list[ObcKey] = field(default_factory=list)
    invariants: list[Invariant] = field(default_factory=list)
    rules: list[RuleCatalogEntry] = field(default_factory=list)
    reports: list[TripReport] = field(default_factory=list)
    infractions: list[Infraction] = field(default_factory=list)
    objectives: list[Objective] = field(default_factory=list)
    kpi_annotations: list[KpiAnnotation] = field(default_factory=list)
    driving_annotations: list[TimeAnnotation] = field(default_factory=list)
    rest_annotations: list[TimeAnnotation] = field(default_factory=list)

    def active_partner(self) -> Optional[Partner]:
        """Premier partenaire marque actif, ou None."""
        return next((p for p in self.partners if p.active), None)

    def partner(self, partner_id: str) -> Optional[Partner]:
        return next((p for p in self.partners if p.id == partner_id), None)

    def invariant_titles(self) -> dict[str, str]:
        return {i.id: i.title for i in self.invariants}

    def for_partner(self, partner_id: str) -> "Snapshot":
        """Vue restreinte aux donnees du partenaire.

        Les referentiels communs (partenaires, invariants, cles OBC) sont
        conserves tels quels.
        """
        def garder(records):
            return [r for r in records if r.partner_id == partner_id]

        return replace(
            self,
            drivers=garder(self.drivers),
            vehicles=garder(self.vehicles),
            rules=garder(self.rules),
            reports=garder(self.reports),
            infractions=garder(self.infractions),
            objectives=garder(self.objectives),
            kpi_annotations=garder(self.kpi_annotations),
            driving_annotations=garder(self.driving_annotations),
            rest_annotations=garder(self.rest_annotations),
        )


class SnapshotStore:
    """Adaptateur en lecture seule sur un export JSON du magasin."""

    def __init__(self, donnees: dict[str, Any], source: str = "<memoire>"):
        if not isinstance(donnees, dict):
            raise SnapshotError(f"Instantane invalide ({source}) : objet JSON attendu")
        self._donnees = donnees
        self.source = source

    @classmethod
    def from_file(cls, chemin: Path) -> "SnapshotStore":
        """Charge un instantane depuis un fichier JSON."""
        chemin = Path(chemin)
        try:
            with open(chemin, "r", encoding="utf-8") as f:
                donnees = json.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotError(f"Instantane illisible : {chemin}") from e
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Instantane JSON invalide : {chemin} ({e.msg}, ligne {e.lineno})") from e
        logger.info("Instantane charge : %s", chemin.name)
        return cls(donnees, source=str(chemin))

    # --- Contrat du magasin ---

    def read_collection(self, nom: str) -> list[dict[str, Any]]:
        """Documents d'une collection ; collection absente = liste vide."""
        brut = self._donnees.get(nom)
        if brut is None:
            logger.debug("Collection absente de l'instantane : %s", nom)
            return []
        if isinstance(brut, dict):
            if not all(isinstance(doc, dict) for doc in brut.values()):
                raise SnapshotError(f"Collection '{nom}' invalide dans {self.source}")
            return [{**doc, "id": doc.get("id") or doc_id} for doc_id, doc in brut.items()]
        if isinstance(brut, list):
            return list(brut)
        raise SnapshotError(f"Collection '{nom}' invalide dans {self.source}")

    def read_document(self, nom: str, doc_id: str) -> Optional[dict[str, Any]]:
        return next((d for d in self.read_collection(nom) if d.get("id") == doc_id), None)

    # --- Acces types ---

    def _valider(self, cle: str, modele: Type[M]) -> list[M]:
        nom = COLLECTIONS[cle]
        documents = self.read_collection(nom)
        try:
            return [modele.model_validate(doc) for doc in documents]
        except ValidationError as e:
            raise SnapshotError(f"Collection '{nom}' invalide : {e.error_count()} erreur(s)") from e

    def partners(self) -> list[Partner]:
        return self._valider("partners", Partner)

    def drivers(self) -> list[Driver]:
        return self._valider("drivers", Driver)

    def vehicles(self) -> list[Vehicle]:
        return self._valider("vehicles", Vehicle)

    def obc_keys(self) -> list[ObcKey]:
        return self._valider("obc_keys", ObcKey)

    def invariants(self) -> list[Invariant]:
        return self._valider("invariants", Invariant)

    def rules(self) -> list[RuleCatalogEntry]:
        return self._valider("rules", RuleCatalogEntry)

    def reports(self) -> list[TripReport]:
        return self._valider("reports", TripReport)

    def infractions(self) -> list[Infraction]:
        return self._valider("infractions", Infraction)

    def objectives(self) -> list[Objective]:
        return self._valider("objectives", Objective)

    def kpi_annotations(self) -> list[KpiAnnotation]:
        return self._valider("kpi_annotations", KpiAnnotation)

    def driving_annotations(self) -> list[TimeAnnotation]:
        return self._valider("driving_annotations", TimeAnnotation)

    def rest_annotations(self) -> list[TimeAnnotation]:
        return self._valider("rest_annotations", TimeAnnotation)

    def snapshot(self) -> Snapshot:
        """Valide toutes les collections et les regroupe."""
        instantane = Snapshot(
            partners=self.partners(),
            drivers=self.drivers(),
            vehicles=self.vehicles(),
            obc_keys=self.obc_keys(),
            invariants=self.invariants(),
            rules=self.rules(),
            reports=self.reports(),
            infractions=self.infractions(),
            objectives=self.objectives(),
            kpi_annotations=self.kpi_annotations(),
            driving_annotations=self.driving_annotations(),
            rest_annotations=self.rest_annotations(),
        )
        logger.debug(
            "Instantane valide : %d conducteur(s), %d rapport(s), %d infraction(s)",
            len(instantane.drivers), len(instantane.reports), len(instantane.infractions),
        )
        return instantane
