"""SCP Analyzer - registre de points et suivi des objectifs KPI d'une flotte."""

__version__ = "1.0.0"
