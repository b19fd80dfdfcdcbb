"""Referentiel SCP : correspondance (invariant, gravite) -> sanction et points."""

import logging
from typing import Iterable, Optional

from scp_analyzer.config.constants import AUCUNE_REGLE_SCP
from scp_analyzer.models.records import RuleCatalogEntry
from scp_analyzer.models.results import RuleMatch

logger = logging.getLogger("scp_analyzer.rules")

REGLE_ABSENTE = RuleMatch(point_value=0, sanction_label=AUCUNE_REGLE_SCP, matched=False)


def cle_regle(invariant_id: Optional[str], severity: Optional[str]) -> str:
    """Cle de recherche insensible a la casse : "{invariant}-{gravite}"."""
    return f"{invariant_id or ''}-{severity or ''}".lower()


class RuleCatalog:
    """Index en memoire des regles SCP d'un partenaire.

    Construit une fois par evaluation. Seule la paire exacte (invariant,
    gravite) est reconnue ; une regle absente retire 0 point.
    """

    def __init__(self, regles: Iterable[RuleCatalogEntry]):
        self._regles: dict[str, RuleCatalogEntry] = {}
        for regle in regles:
            cle = cle_regle(regle.invariant_id, regle.severity)
            if cle in self._regles:
                logger.debug("Regle SCP en double pour %s, la derniere est retenue", cle)
            self._regles[cle] = regle

    def __len__(self) -> int:
        return len(self._regles)

    def __contains__(self, cle: str) -> bool:
        return cle.lower() in self._regles

    def lookup(self, invariant_id: Optional[str], severity: Optional[str]) -> RuleMatch:
        """Retourne les points et la sanction de la regle, ou la valeur par defaut."""
        regle = self._regles.get(cle_regle(invariant_id, severity))
        if regle is None:
            return REGLE_ABSENTE
        return RuleMatch(point_value=regle.point_value, sanction_label=regle.sanction_label)

    def points_for(self, invariant_id: Optional[str], severity: Optional[str]) -> int:
        return self.lookup(invariant_id, severity).point_value
