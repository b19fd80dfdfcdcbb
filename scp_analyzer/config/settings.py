"""Configuration globale de l'application."""

from datetime import date
from dataclasses import dataclass, field

from scp_analyzer.config.constants import CAPITAL_POINTS


@dataclass
class ScoringConfig:
    """Configuration du calcul des points et des KPI."""
    capital_points: int = CAPITAL_POINTS
    annee_defaut: str = field(default_factory=lambda: str(date.today().year))
    mois_defaut: int = field(default_factory=lambda: date.today().month)


@dataclass
class AppConfig:
    """Configuration principale de l'application."""
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    json_indent: int = 2
