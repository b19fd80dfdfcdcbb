"""
Constantes metier du bareme SCP et des KPI de flotte.

Le capital de points, les libelles sentinelles et l'ordre des invariants
globaux sont partages par le registre de points, l'evaluateur d'objectifs
et les statistiques du tableau de bord.
"""

from enum import Enum


# --- Capital de points ---

CAPITAL_POINTS = 12

SEPARATEUR_DUREE = ":"
DUREE_NULLE = "00:00:00"


class Frequency(str, Enum):
    """Frequence declaree d'un objectif."""
    JOURNALIER = "Journalier"
    HEBDOMADAIRE = "Hebdomadaire"
    MENSUEL = "Mensuel"
    ANNUEL = "Annuel"


class PeriodMode(str, Enum):
    """Mode de periode du tableau KPI."""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BalanceBand(str, Enum):
    """Bandes de presentation du solde de points."""
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class MetricKind(str, Enum):
    """Nature de l'agregat calcule pour un invariant."""
    DISTANCE = "distance"
    DRIVING_TIME = "driving_time"
    REST_TIME = "rest_time"
    COUNT = "count"


# Filtre de periode couvrant toutes les annees
TOUTES_ANNEES = "all"


# --- Invariants globaux ---

INVARIANT_KMS = "Kms parcourus"
INVARIANT_TEMPS_CONDUITE = "Temps de conduite"
INVARIANT_TEMPS_REPOS = "Temps de repos"

# Ordre d'affichage fixe, consulte par le comparateur des lignes KPI
INVARIANTS_PRIORITAIRES = (
    INVARIANT_KMS,
    INVARIANT_TEMPS_CONDUITE,
    INVARIANT_TEMPS_REPOS,
)

METRIQUES_GLOBALES = {
    INVARIANT_KMS: MetricKind.DISTANCE,
    INVARIANT_TEMPS_CONDUITE: MetricKind.DRIVING_TIME,
    INVARIANT_TEMPS_REPOS: MetricKind.REST_TIME,
}

# Invariants journaliers utilises par l'analyse hebdomadaire des temps
INVARIANT_CONDUITE_JOURNALIER = "Temps de conduite journalier"
INVARIANT_REPOS_JOURNALIER = "Temps de repos journalier"


# --- Libelles sentinelles ---

NON_DISPONIBLE = "N/A"
INVARIANT_INCONNU = "Invariant Inconnu"
AUCUNE_REGLE_SCP = "Aucune règle SCP correspondante"
CLE_OBC_INCONNUE = "Inconnue"
TYPE_NON_DEFINI = "Non défini"
COMMENTAIRE_VIDE = "-"

# Valeurs affichees par defaut dans le tableau KPI annuel (depasse, respecte)
RESULTAT_DEFAUT = ("Négatif", "OK")
ANALYSE_CAUSE_DEFAUT = ("Mauvaise conduite", "Bonne conduite")
ACTION_PRISE_DEFAUT = ("Suspension du conducteur", "R.A.S")


# --- Calendrier ---

NOMS_MOIS = (
    "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
    "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
)

NOMS_MOIS_COURTS = (
    "Jan", "Fév", "Mar", "Avr", "Mai", "Juin",
    "Juil", "Aoû", "Sep", "Oct", "Nov", "Déc",
)

NB_DERNIERES_INFRACTIONS = 5


# --- Collections du magasin de documents ---

COLLECTIONS = {
    "partners": "partenaires",
    "drivers": "conducteurs",
    "vehicles": "vehicules",
    "obc_keys": "cles_obc",
    "invariants": "invariants",
    "rules": "scp",
    "reports": "rapports",
    "infractions": "infractions",
    "objectives": "objectifs",
    "kpi_annotations": "kpis",
    "driving_annotations": "temps_conduite",
    "rest_annotations": "temps_repos",
}
