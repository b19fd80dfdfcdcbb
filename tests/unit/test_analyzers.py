"""Tests de l'evaluation des objectifs KPI, du suivi des temps et du tableau de bord."""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from datetime import date

import pytest

from scp_analyzer.analyzers.dashboard_stats import (
    activity_by_month, build_dashboard, drivers_with_obc_key, infractions_by_month,
    infractions_by_type, infractions_in_month, points_by_driver, points_by_invariant,
    recent_infractions,
)
from scp_analyzer.analyzers.objective_evaluator import (
    ObjectiveEvaluator, aggregate, period_label, scale_target,
)
from scp_analyzer.analyzers.time_analysis import TimeAnalyzer
from scp_analyzer.config.constants import MetricKind, PeriodMode
from scp_analyzer.models.records import (
    Driver, Infraction, Invariant, KpiAnnotation, Objective, RuleCatalogEntry,
    TimeAnnotation, TripReport,
)
from scp_analyzer.reporting.report_enricher import ReportEnricher
from scp_analyzer.rules.rule_catalog import RuleCatalog


def _invariants():
    return [
        Invariant(id="i4", titre="Exces de vitesse"),
        Invariant(id="i2", titre="Temps de conduite"),
        Invariant(id="i1", titre="Kms parcourus"),
        Invariant(id="i5", titre="Anticipation"),
        Invariant(id="i3", titre="Temps de repos"),
        Invariant(id="i6", titre="Temps de conduite journalier"),
        Invariant(id="i7", titre="Temps de repos journalier"),
    ]


def _rapport(id, date, invariant_id="i4", conducteur_id="d1", partenaire_id="p1", **champs):
    return TripReport(
        id=id, date=date, invariant_id=invariant_id, conducteur_id=conducteur_id,
        partenaire_id=partenaire_id, **champs,
    )


class TestObjectiveEvaluator:
    """Tests des lignes KPI mensuelles et annuelles."""

    def setup_method(self):
        self.objectifs = [
            Objective(id="o1", partenaire_id="p1", invariant_id="i1", cible=1000, unite="km", frequence="Mensuel"),
            Objective(id="o2", partenaire_id="p1", invariant_id="i4", cible=3, unite="", frequence="Mensuel"),
            Objective(id="o3", partenaire_id="p1", invariant_id="i2", cible=10, unite="h", frequence="Journalier"),
        ]
        self.rapports = [
            _rapport("ra1", "2024-03-11", temps_conduite="08:00:00", temps_attente="01:00:00", distance_km="10"),
            _rapport("ra2", "12/03/2024", temps_conduite="07:30:00", distance_km="5,5"),
            _rapport("ra3", "2024-03-18", temps_conduite="bad", distance_km="abc"),
            _rapport("ra4", "2024-03-19"),
            _rapport("ra5", "2024-04-02", distance_km="100"),
            _rapport("ra6", "2024-03-20", partenaire_id="p2", distance_km="999"),
            _rapport("ra7", "date inconnue", distance_km="50"),
        ]
        self.evaluateur = ObjectiveEvaluator(
            _invariants(), self.objectifs, self.rapports,
            [KpiAnnotation(id="k1", partenaire_id="p1", objectifs_id="o2", commentaire="Relances")],
        )

    def _ligne(self, lignes, titre):
        return next(l for l in lignes if l.invariant_title == titre)

    def test_scenario_mensuel_depassement(self):
        lignes = self.evaluateur.evaluate("p1", PeriodMode.MONTHLY, "2024", 3)
        ligne = self._ligne(lignes, "Exces de vitesse")
        assert ligne.value == 4
        assert ligne.display_value == "4"
        assert ligne.objective_label == "3"
        assert ligne.is_exceeded
        assert ligne.comment_display == "Relances"

    def test_kms_mensuels(self):
        lignes = self.evaluateur.evaluate("p1", PeriodMode.MONTHLY, "2024", 3)
        ligne = self._ligne(lignes, "Kms parcourus")
        assert ligne.value == 15.5
        assert ligne.display_value == "16"
        assert ligne.objective_label == "1000km"
        assert not ligne.is_exceeded

    def test_temps_de_conduite_en_heures(self):
        lignes = self.evaluateur.evaluate("p1", PeriodMode.MONTHLY, "2024", 3)
        ligne = self._ligne(lignes, "Temps de conduite")
        assert ligne.value == 15.5
        assert ligne.display_value == "16"
        # Cible journaliere non convertie
        assert ligne.objective_label == "10h"
        assert ligne.is_exceeded

    def test_temps_de_repos(self):
        lignes = self.evaluateur.evaluate("p1", PeriodMode.MONTHLY, "2024", 3)
        ligne = self._ligne(lignes, "Temps de repos")
        assert ligne.value == 1.0
        assert ligne.objective_label == "N/A"
        assert not ligne.is_exceeded

    def test_annuel_cible_mensuelle_x12(self):
        lignes = self.evaluateur.evaluate("p1", PeriodMode.YEARLY, "2024")
        kms = self._ligne(lignes, "Kms parcourus")
        assert kms.value == 115.5
        assert kms.objective_label == "12000km"
        assert kms.scaled_target == 12000
        vitesse = self._ligne(lignes, "Exces de vitesse")
        assert vitesse.value == 5
        assert vitesse.objective_label == "36"
        assert not vitesse.is_exceeded
        assert vitesse.result_display == "OK"
        assert vitesse.root_cause_display == "Bonne conduite"
        assert vitesse.action_taken_display == "R.A.S"

    def test_valeurs_par_defaut_en_depassement(self):
        lignes = self.evaluateur.evaluate("p1", PeriodMode.YEARLY, "2024")
        conduite = self._ligne(lignes, "Temps de conduite")
        assert conduite.is_exceeded
        assert conduite.result_display == "Négatif"
        assert conduite.root_cause_display == "Mauvaise conduite"
        assert conduite.action_taken_display == "Suspension du conducteur"
        assert conduite.comment_display == "-"

    def test_ordre_des_lignes(self):
        lignes = self.evaluateur.evaluate("p1", PeriodMode.YEARLY, "2024")
        assert [l.invariant_title for l in lignes] == [
            "Kms parcourus",
            "Temps de conduite",
            "Temps de repos",
            "Anticipation",
            "Exces de vitesse",
            "Temps de conduite journalier",
            "Temps de repos journalier",
        ]

        accentues = [
            Invariant(id="a1", titre="Freinage brusque"),
            Invariant(id="a2", titre="Écoconduite"),
            Invariant(id="a3", titre="Excessive idle"),
            Invariant(id="a4", titre="Excès de vitesse"),
        ]
        lignes = ObjectiveEvaluator(accentues, [], []).evaluate("p1", PeriodMode.YEARLY, "2024")
        assert [l.invariant_title for l in lignes] == [
            "Écoconduite", "Excès de vitesse", "Excessive idle", "Freinage brusque",
        ]

    def test_sans_partenaire(self):
        assert self.evaluateur.evaluate(None, PeriodMode.MONTHLY, "2024", 3) == []
        assert self.evaluateur.evaluate("", PeriodMode.YEARLY, "2024") == []

    def test_mensuel_sans_mois(self):
        lignes = self.evaluateur.evaluate("p1", PeriodMode.MONTHLY, "2024")
        assert all(l.value == 0 for l in lignes)

    def test_autre_partenaire_sans_objectif(self):
        lignes = self.evaluateur.evaluate("p2", PeriodMode.MONTHLY, "2024", 3)
        kms = self._ligne(lignes, "Kms parcourus")
        assert kms.value == 999
        assert kms.objective_label == "N/A"
        assert not kms.is_exceeded

    def test_scale_target(self):
        mensuel = Objective(cible=10, frequence="Mensuel")
        annuel = Objective(cible=10, frequence="Annuel")
        hebdo = Objective(cible=10, frequence="Hebdomadaire")
        assert scale_target(mensuel, PeriodMode.YEARLY) == 120
        assert scale_target(mensuel, PeriodMode.MONTHLY) == 10
        assert scale_target(annuel, PeriodMode.YEARLY) == 10
        assert scale_target(hebdo, PeriodMode.YEARLY) == 10

    def test_aggregate(self):
        rapports = [_rapport("a", "2024-01-01", distance_km="1,5"), _rapport("b", "2024-01-02", distance_km="")]
        assert aggregate(MetricKind.DISTANCE, rapports) == 1.5
        assert aggregate(MetricKind.COUNT, rapports) == 2
        assert aggregate(MetricKind.DRIVING_TIME, []) == 0

    def test_period_label(self):
        assert period_label(PeriodMode.MONTHLY, "2024", 3) == "Mars-24"
        assert period_label(PeriodMode.YEARLY, "2024") == "2024"


class TestTimeAnalyzer:
    """Tests du suivi hebdomadaire des temps de conduite et de repos."""

    def setup_method(self):
        self.objectifs = [
            Objective(id="o6", partenaire_id="p1", invariant_id="i6", cible=9, unite="h", frequence="Journalier"),
            Objective(id="o7", partenaire_id="p1", invariant_id="i7", cible=11, unite="h", frequence="Mensuel"),
        ]
        self.rapports = [
            _rapport("ra3", "2024-03-18", temps_conduite="06:00:00", temps_attente="01:15:00"),
            _rapport("ra1", "2024-03-11", temps_conduite="08:00:00", temps_attente="01:00:00"),
            _rapport("ra2", "12/03/2024", temps_conduite="07:30:00", temps_attente="00:45:00"),
            _rapport("ra4", "2024-04-02", temps_conduite="03:00:00"),
            _rapport("ra5", "2024-03-19", conducteur_id="d2", temps_conduite="05:00:00"),
            _rapport("ra6", "illisible", temps_conduite="05:00:00"),
        ]
        self.annotations = [
            TimeAnnotation(id="t1", partenaire_id="p1", rapports_id="ra1", analyse_cause="Retard client"),
        ]

    def test_semaines_et_totaux(self):
        analyseur = TimeAnalyzer(_invariants(), self.objectifs, self.rapports, self.annotations)
        analyse = analyseur.analyze("p1", "d1", "2024", 3)

        assert [s.week_start for s in analyse.weeks] == [date(2024, 3, 11), date(2024, 3, 18)]
        premiere, seconde = analyse.weeks
        assert premiere.week_label == "Semaine du 11 mars au 17 mars 2024"
        assert [t.report.id for t in premiere.reports] == ["ra1", "ra2"]
        assert premiere.subtotal == "15:30:00"
        assert seconde.subtotal == "06:00:00"
        assert analyse.total_seconds == 21.5 * 3600
        assert analyse.total == "21:30:00"

    def test_objectif_journalier_et_annotation(self):
        analyseur = TimeAnalyzer(_invariants(), self.objectifs, self.rapports, self.annotations)
        analyse = analyseur.analyze("p1", "d1", "2024", 3)
        assert analyse.objective_label == "9 h"
        assert analyse.objective_id == "o6"
        ra1 = analyse.weeks[0].reports[0]
        assert ra1.annotation.root_cause == "Retard client"
        assert ra1.duration == "08:00:00"
        assert analyse.weeks[0].reports[1].annotation is None

    def test_toutes_annees_cumule_le_mois(self):
        rapports = self.rapports + [_rapport("ra9", "2023-03-06", temps_conduite="02:00:00")]
        analyse = TimeAnalyzer(_invariants(), self.objectifs, rapports).analyze("p1", "d1", "all", 3)
        assert analyse.weeks[0].week_start == date(2023, 3, 6)
        assert analyse.total_seconds == 23.5 * 3600

    def test_temps_de_repos_sans_objectif_journalier(self):
        analyseur = TimeAnalyzer(
            _invariants(), self.objectifs, self.rapports, metric=MetricKind.REST_TIME,
        )
        analyse = analyseur.analyze("p1", "d1", "2024", 3)
        # L'objectif o7 n'est pas de frequence Journalier
        assert analyse.objective_label == "N/A"
        assert analyse.total == "03:00:00"

    def test_mois_sans_rapport(self):
        analyseur = TimeAnalyzer(_invariants(), self.objectifs, self.rapports)
        analyse = analyseur.analyze("p1", "d1", "2024", 6)
        assert analyse.weeks == []
        assert analyse.total == "00:00:00"

    def test_metrique_non_supportee(self):
        with pytest.raises(ValueError):
            TimeAnalyzer(_invariants(), [], [], metric=MetricKind.DISTANCE)


class TestDashboardStats:
    """Tests des indicateurs du tableau de bord."""

    def setup_method(self):
        self.conducteurs = [
            Driver(id="d1", prenom="Jean", nom="Dupont", cle_obc_id="k1"),
            Driver(id="d2", prenom="Marie", nom="Curie"),
        ]
        self.invariants = _invariants()
        self.infractions = [
            Infraction(id="f1", date="2024-03-11", conducteur_id="d1", invariant_id="i4", type_infraction="Alarme"),
            Infraction(id="f2", date="15/03/2024", conducteur_id="d1", invariant_id="i5", type_infraction="Alerte"),
            Infraction(id="f3", date="2023-12-01", conducteur_id="d1", invariant_id="i4", type_infraction="Alarme"),
            Infraction(id="f4", date="2024-01-20", conducteur_id="d2", invariant_id="i5", type_infraction=""),
            Infraction(id="f5", date="illisible", conducteur_id="d2", invariant_id="i4", type_infraction="Alarme"),
        ]
        self.catalogue = RuleCatalog([
            RuleCatalogEntry(invariants_id="i4", type="Alarme", value=5),
            RuleCatalogEntry(invariants_id="i5", type="Alerte", value=2),
        ])

    def test_infractions_par_mois(self):
        par_mois = infractions_by_month(self.infractions, "2024")
        assert len(par_mois) == 12
        assert par_mois[0].label == "Jan"
        assert par_mois[0].count == 1
        assert par_mois[2].count == 2
        assert sum(p.count for p in par_mois) == 3

    def test_infractions_par_type(self):
        par_type = {p.label: p.count for p in infractions_by_type(self.infractions, "2024")}
        assert par_type == {"Alarme": 1, "Alerte": 1, "Non défini": 1}

    def test_infractions_par_type_toutes_annees(self):
        par_type = {p.label: p.count for p in infractions_by_type(self.infractions, "all")}
        assert par_type["Alarme"] == 3

    def test_points_par_conducteur(self):
        totaux = points_by_driver(self.infractions, self.conducteurs, self.catalogue, "all")
        assert [(t.id, t.points) for t in totaux] == [("d1", 12), ("d2", 5)]
        assert totaux[0].name == "Jean Dupont"

    def test_points_par_conducteur_positifs_seulement(self):
        totaux = points_by_driver(self.infractions, self.conducteurs, self.catalogue, "2024")
        assert [(t.id, t.points) for t in totaux] == [("d1", 7)]

    def test_points_par_invariant(self):
        totaux = points_by_invariant(self.infractions, self.invariants, self.catalogue, "2024")
        assert [(t.id, t.points) for t in totaux] == [("i4", 5), ("i5", 2)]

    def test_activite_par_mois(self):
        rapports = [
            _rapport("ra1", "2024-03-11", duree="09:30:00", temps_conduite="08:00:00", temps_attente="01:00:00"),
            _rapport("ra2", "2024-03-12", duree="02:30:00", temps_conduite="02:00:00", temps_attente="00:30:00"),
            _rapport("ra3", "2023-03-12", duree="10:00:00"),
        ]
        activite = activity_by_month(rapports, "2024")
        mars = activite[2]
        assert mars.label == "Mar"
        assert mars.work_hours == 12.0
        assert mars.driving_hours == 10.0
        assert mars.rest_hours == 1.5
        assert activite[0].work_hours == 0

    def test_dernieres_infractions(self):
        enricher = ReportEnricher(self.conducteurs, self.invariants)
        recentes = recent_infractions(self.infractions, enricher, "all", limit=3)
        assert [e.record.id for e in recentes] == ["f2", "f1", "f4"]
        assert recentes[0].driver_full_name == "Jean Dupont"

    def test_infractions_du_mois(self):
        assert infractions_in_month(self.infractions, 2024, 3) == 2
        assert infractions_in_month(self.infractions, 2024, 2) == 0

    def test_conducteurs_avec_cle_obc(self):
        assert drivers_with_obc_key(self.conducteurs) == 1

    def test_build_dashboard(self):
        tableau = build_dashboard(
            "2024", self.conducteurs, self.invariants, self.infractions, [], self.catalogue,
        )
        assert tableau.year == "2024"
        assert len(tableau.recent_infractions) == 3
        assert tableau.drivers_with_obc_key == 1
        assert tableau.points_by_driver[0].points == 7
