"""Modeles des enregistrements lus dans le magasin de documents.

Les champs sont nommes en anglais ; chaque champ accepte aussi la cle du
magasin (``partenaire_id``, ``type_infraction``...) comme alias. Les saisies
manuelles etant souvent sales, la validation ne rejette pas un enregistrement
pour un champ de calcul illisible : la valeur neutre est substituee.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

_VRAI = {"true", "1", "oui", "yes", "vrai"}
_ANNOTATIONS_TEXTE = (str, Optional[str])


class StoreRecord(BaseModel):
    """Base commune : alias du magasin, cles inconnues ignorees."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
        frozen=True,
    )

    id: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _valeur_neutre(cls, valeur: Any, info: ValidationInfo) -> Any:
        champ = cls.model_fields[info.field_name]
        if valeur is None:
            return champ.default
        # Cle etrangere vide = reference absente
        if champ.default is None and valeur == "":
            return None
        # Booleen, liste ou objet saisi dans un champ texte
        if champ.annotation in _ANNOTATIONS_TEXTE and (
            isinstance(valeur, bool) or not isinstance(valeur, (str, int, float))
        ):
            return champ.default
        return valeur


def _entier_ou_zero(valeur: Any) -> int:
    if isinstance(valeur, bool):
        return int(valeur)
    try:
        return int(float(str(valeur).replace(",", ".")))
    except (TypeError, ValueError, OverflowError):
        return 0


def _nombre_ou_zero(valeur: Any) -> float:
    if isinstance(valeur, bool):
        return float(valeur)
    try:
        return float(str(valeur).replace(",", "."))
    except (TypeError, ValueError):
        return 0.0


def _booleen(valeur: Any) -> bool:
    if isinstance(valeur, str):
        return valeur.strip().lower() in _VRAI
    return bool(valeur)


# --- Referentiels ---

class Partner(StoreRecord):
    name: str = Field("", alias="nom")
    active: bool = Field(False, alias="actif")

    @field_validator("active", mode="before")
    @classmethod
    def _parser_actif(cls, valeur: Any) -> bool:
        return _booleen(valeur)


class Driver(StoreRecord):
    first_name: str = Field("", alias="prenom")
    last_name: str = Field("", alias="nom")
    license_number: str = Field("", alias="numero_permis")
    license_category: str = Field("", alias="categorie_permis")
    obc_key_id: Optional[str] = Field(None, alias="cle_obc_id")
    work_site: str = Field("", alias="lieu_travail")
    partner_id: Optional[str] = Field(None, alias="partenaire_id")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Vehicle(StoreRecord):
    name: str = Field("", alias="nom")
    plate: str = Field("", alias="immatriculation")
    driver_id: Optional[str] = Field(None, alias="conducteur_id")
    partner_id: Optional[str] = Field(None, alias="partenaire_id")


class ObcKey(StoreRecord):
    key: str = Field("", alias="cle_obc")


class Invariant(StoreRecord):
    title: str = Field("", alias="titre")
    description: str = ""


class RuleCatalogEntry(StoreRecord):
    """Regle SCP : (invariant, gravite) -> sanction et points retires."""
    partner_id: Optional[str] = Field(None, alias="partenaire_id")
    invariant_id: str = Field("", alias="invariants_id")
    severity: str = Field("", alias="type")
    sanction_label: str = Field("", alias="sanction")
    point_value: int = Field(0, alias="value")

    @field_validator("point_value", mode="before")
    @classmethod
    def _parser_points(cls, valeur: Any) -> int:
        return _entier_ou_zero(valeur)


# --- Donnees d'exploitation ---

class TripReport(StoreRecord):
    """Rapport de trajet importe de la telematique (durees "hh:mm:ss")."""
    date: str = ""
    day: str = Field("", alias="jour")
    partner_id: str = Field("", alias="partenaire_id")
    driver_id: Optional[str] = Field(None, alias="conducteur_id")
    invariant_id: Optional[str] = None
    start_time: str = Field("", alias="heure_debut_trajet")
    end_time: str = Field("", alias="heure_fin_trajet")
    driving_duration: str = Field("", alias="temps_conduite")
    wait_duration: str = Field("", alias="temps_attente")
    total_duration: str = Field("", alias="duree")
    idle_duration: str = Field("", alias="duree_ralenti")
    distance_km: str = ""
    avg_speed: str = Field("", alias="vitesse_moy_kmh")
    max_speed: str = Field("", alias="vitesse_max_kmh")

    @property
    def is_unassigned(self) -> bool:
        return not self.driver_id or not self.invariant_id


class Infraction(StoreRecord):
    partner_id: str = Field("", alias="partenaire_id")
    date: str = ""
    driver_id: Optional[str] = Field(None, alias="conducteur_id")
    invariant_id: Optional[str] = None
    severity: str = Field("", alias="type_infraction")
    count: int = Field(1, alias="nombre")
    disciplinary_measure: Optional[str] = Field(None, alias="mesure_disciplinaire")
    other_measures: Optional[str] = Field(None, alias="autres_mesures_disciplinaire")
    follow_up_required: bool = Field(False, alias="suivi")
    follow_up_date: Optional[str] = Field(None, alias="date_suivi")
    improvement_observed: bool = Field(False, alias="amelioration")
    source_report_id: Optional[str] = Field(None, alias="rapports_id")

    @field_validator("count", mode="before")
    @classmethod
    def _parser_nombre(cls, valeur: Any) -> int:
        # Execute avant _valeur_neutre : null vaut une infraction
        if valeur is None:
            return cls.model_fields["count"].default
        return _entier_ou_zero(valeur)

    @field_validator("follow_up_required", "improvement_observed", mode="before")
    @classmethod
    def _parser_booleens(cls, valeur: Any) -> bool:
        return _booleen(valeur)


class Objective(StoreRecord):
    partner_id: str = Field("", alias="partenaire_id")
    invariant_id: str = ""
    chapter: str = Field("", alias="chapitre")
    target: float = Field(0.0, alias="cible")
    unit: str = Field("", alias="unite")
    mode: str = ""
    frequency: str = Field("", alias="frequence")

    @field_validator("target", mode="before")
    @classmethod
    def _parser_cible(cls, valeur: Any) -> float:
        return _nombre_ou_zero(valeur)


class KpiAnnotation(StoreRecord):
    """Analyse libre rattachee a la ligne KPI d'un objectif."""
    partner_id: str = Field("", alias="partenaire_id")
    objective_id: Optional[str] = Field(None, alias="objectifs_id")
    result: Optional[str] = Field(None, alias="resultat")
    root_cause: Optional[str] = Field(None, alias="analyse_cause")
    action_taken: Optional[str] = Field(None, alias="action_prise")
    comment: Optional[str] = Field(None, alias="commentaire")


class TimeAnnotation(StoreRecord):
    """Analyse d'un rapport dans le suivi des temps de conduite ou de repos."""
    partner_id: str = Field("", alias="partenaire_id")
    report_id: Optional[str] = Field(None, alias="rapports_id")
    objective_id: Optional[str] = Field(None, alias="objectifs_id")
    root_cause: str = Field("", alias="analyse_cause")
    action_taken: str = Field("", alias="action_prise")
    follow_up: str = Field("", alias="suivi")
