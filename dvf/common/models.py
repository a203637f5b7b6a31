"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any

from dvf.common.errors import ContractError
from dvf.common.parse import departement_from_commune


@dataclass(frozen=True)
class Mutation:
    """Normalized core of one transaction line, in output column order."""

    date_mutation: str
    nature_mutation: str
    valeur_fonciere: float | str
    adresse_numero: str
    adresse_suffixe: str
    adresse_nom_voie: str
    adresse_code_voie: str
    code_postal: str
    code_commune: str
    nom_commune: str
    code_departement: str
    id_parcelle: str
    numero_volume: str
    lot1_numero: str
    lot1_surface_carrez: str
    lot2_numero: str
    lot2_surface_carrez: str
    lot3_numero: str
    lot3_surface_carrez: str
    lot4_numero: str
    lot4_surface_carrez: str
    lot5_numero: str
    lot5_surface_carrez: str
    nombre_lots: str
    code_type_local: str
    type_local: str
    surface_reelle_bati: str
    nombre_pieces_principales: str
    code_nature_culture: str
    nature_culture: str
    code_nature_culture_speciale: str
    nature_culture_speciale: str
    surface_terrain: str

    def __post_init__(self) -> None:
        expected = departement_from_commune(self.code_commune)
        if self.code_departement != expected:
            raise ContractError(
                f"code_departement {self.code_departement!r} does not match commune {self.code_commune!r}"
            )


@dataclass(frozen=True)
class Position:
    longitude: float
    latitude: float


MUTATION_COLUMNS = [f.name for f in fields(Mutation)]
OUTPUT_COLUMNS = [*MUTATION_COLUMNS, "longitude", "latitude"]


class Row:
    """A normalized mutation plus its optional parcel position.

    ``locate`` is the only way to change a row after construction.
    """

    __slots__ = ("mutation", "position")

    def __init__(self, mutation: Mutation, position: Position | None = None) -> None:
        self.mutation = mutation
        self.position = position

    @property
    def code_commune(self) -> str:
        return self.mutation.code_commune

    @property
    def code_departement(self) -> str:
        return self.mutation.code_departement

    @property
    def id_parcelle(self) -> str:
        return self.mutation.id_parcelle

    @property
    def is_located(self) -> bool:
        return self.position is not None

    def locate(self, position: Position) -> None:
        if self.position is None:
            self.position = position
            return
        if self.position != position:
            raise ContractError(
                f"Parcel {self.id_parcelle or '?'} already located at {self.position}, refusing {position}"
            )

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self.mutation)
        if self.position is None:
            out["longitude"] = ""
            out["latitude"] = ""
        else:
            out["longitude"] = self.position.longitude
            out["latitude"] = self.position.latitude
        return out

    def __repr__(self) -> str:
        return f"Row(code_commune={self.code_commune!r}, id_parcelle={self.id_parcelle!r}, position={self.position!r})"
