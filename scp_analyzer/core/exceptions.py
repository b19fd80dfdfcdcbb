"""Exceptions personnalisees pour SCP Analyzer.

Le moteur de calcul ne leve jamais sur des donnees sales : ces exceptions
ne concernent que le chargement des instantanes, la configuration et la CLI.
"""


class ScpAnalyzerError(Exception):
    """Exception de base."""


class SnapshotError(ScpAnalyzerError):
    """Instantane du magasin de documents illisible ou invalide."""


class ConfigError(ScpAnalyzerError):
    """Erreur de configuration."""
