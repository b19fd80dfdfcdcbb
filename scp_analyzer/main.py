"""Point d'entree CLI pour SCP Analyzer.

Usage :
    scp-analyzer instantane.json [--partenaire ID] [--annee YYYY|all] [--mois 1..12]
                                 [--conducteur ID] [--output FICHIER] [-v]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from scp_analyzer.config.constants import TOUTES_ANNEES
from scp_analyzer.config.settings import AppConfig
from scp_analyzer.core.exceptions import ScpAnalyzerError
from scp_analyzer.core.orchestrator import Orchestrator
from scp_analyzer.database.snapshot_store import SnapshotStore


def configurer_logging(verbose: bool = False) -> None:
    """Configure le logging de l'application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)-7s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def creer_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scp-analyzer",
        description="Registre de points SCP et suivi des objectifs KPI d'une flotte.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "instantane",
        type=Path,
        help="Export JSON du magasin de documents",
    )
    parser.add_argument(
        "--partenaire", "-p",
        default=None,
        help="Identifiant du partenaire (defaut: partenaire actif)",
    )
    parser.add_argument(
        "--annee", "-a",
        default=None,
        help=f"Annee analysee, YYYY ou '{TOUTES_ANNEES}' (defaut: annee courante)",
    )
    parser.add_argument(
        "--mois", "-m",
        type=int,
        choices=range(1, 13),
        metavar="1..12",
        default=None,
        help="Mois du tableau KPI mensuel (defaut: mois courant)",
    )
    parser.add_argument(
        "--conducteur", "-c",
        default=None,
        help="Conducteur pour le suivi hebdomadaire des temps",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Fichier JSON de sortie (defaut: sortie standard)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Mode verbeux (debug)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Point d'entree principal."""
    parser = creer_argument_parser()
    args = parser.parse_args(argv)

    configurer_logging(args.verbose)
    logger = logging.getLogger("scp_analyzer")

    config = AppConfig()

    try:
        snapshot = SnapshotStore.from_file(args.instantane).snapshot()
        orchestrator = Orchestrator(snapshot, config)
        resultat = orchestrator.run(
            partner_id=args.partenaire,
            year=args.annee,
            month=args.mois,
            driver_id=args.conducteur,
        )
    except ScpAnalyzerError as e:
        logger.error("Erreur d'analyse : %s", e)
        return 1

    if args.output:
        chemin = orchestrator.report_generator.generer_json(resultat, args.output)
        logger.info("Synthese ecrite : %s", chemin)
    else:
        orchestrator.report_generator.afficher_json(resultat)
    return 0


if __name__ == "__main__":
    sys.exit(main())
