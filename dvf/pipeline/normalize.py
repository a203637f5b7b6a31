"""Map raw DVF records to the canonical output schema."""

from __future__ import annotations

import math

from dvf.common.models import Mutation, Row
from dvf.common.parse import (
    RawRecord,
    departement_from_commune,
    field,
    parse_code_commune,
    parse_code_postal,
    parse_date_mutation,
    parse_id_parcelle,
)
from dvf.sources.cultures import ReferenceData

# Output column -> raw DVF column, copied verbatim.
PASSTHROUGH_COLUMNS = {
    "nature_mutation": "Nature mutation",
    "adresse_numero": "No voie",
    "adresse_suffixe": "B/T/Q",
    "adresse_code_voie": "Code voie",
    "nom_commune": "Commune",
    "numero_volume": "No Volume",
    "lot1_numero": "1er lot",
    "lot1_surface_carrez": "Surface Carrez du 1er lot",
    "lot2_numero": "2e lot",
    "lot2_surface_carrez": "Surface Carrez du 2e lot",
    "lot3_numero": "3e lot",
    "lot3_surface_carrez": "Surface Carrez du 3e lot",
    "lot4_numero": "4e lot",
    "lot4_surface_carrez": "Surface Carrez du 4e lot",
    "lot5_numero": "5e lot",
    "lot5_surface_carrez": "Surface Carrez du 5e lot",
    "nombre_lots": "Nombre de lots",
    "code_type_local": "Code type local",
    "type_local": "Type local",
    "surface_reelle_bati": "Surface reelle bati",
    "nombre_pieces_principales": "Nombre pieces principales",
    "code_nature_culture": "Nature culture",
    "code_nature_culture_speciale": "Nature culture speciale",
    "surface_terrain": "Surface terrain",
}


def parse_valeur_fonciere(value: str | None) -> float | str:
    """French decimal price to float; ``""`` when absent, zero or unparseable."""
    if not value:
        return ""
    try:
        parsed = float(value.strip().replace(",", "."))
    except ValueError:
        return ""
    if not math.isfinite(parsed) or parsed == 0:
        return ""
    return parsed


def join_nom_voie(type_voie: str, voie: str) -> str:
    return " ".join(part for part in (type_voie.strip(), voie.strip()) if part)


def normalize_record(raw: RawRecord, reference: ReferenceData) -> Row:
    code_commune = parse_code_commune(raw)
    passthrough = {column: raw.get(source) or "" for column, source in PASSTHROUGH_COLUMNS.items()}

    mutation = Mutation(
        date_mutation=parse_date_mutation(raw),
        valeur_fonciere=parse_valeur_fonciere(raw.get("Valeur fonciere")),
        adresse_nom_voie=join_nom_voie(field(raw, "Type de voie"), field(raw, "Voie")),
        code_postal=parse_code_postal(raw),
        code_commune=code_commune,
        code_departement=departement_from_commune(code_commune),
        id_parcelle=parse_id_parcelle(raw),
        nature_culture=reference.cultures.get(field(raw, "Nature culture"), ""),
        nature_culture_speciale=reference.cultures_speciales.get(field(raw, "Nature culture speciale"), ""),
        **passthrough,
    )
    return Row(mutation)
