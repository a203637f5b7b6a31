"""Field parsers for raw DVF records.

Raw records are mappings of the original French column names to text, as
decoded from the pipe-delimited source files. Every parser tolerates missing
or blank columns and returns an empty string instead of raising.
"""

from __future__ import annotations

import re
from typing import Mapping

RawRecord = Mapping[str, str]

_DATE_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
_OVERSEAS_PREFIX = "97"


def field(raw: RawRecord, name: str) -> str:
    value = raw.get(name)
    if value is None:
        return ""
    return value.strip()


def parse_date_mutation(raw: RawRecord) -> str:
    """``DD/MM/YYYY`` to ISO ``YYYY-MM-DD``."""
    match = _DATE_RE.match(field(raw, "Date mutation"))
    if not match:
        return ""
    day, month, year = match.groups()
    return f"{year}-{month}-{day}"


def departement_from_commune(code_commune: str) -> str:
    """Department code of an INSEE commune code.

    Overseas departments (971 to 976) use three characters; every other one,
    Corsican 2A and 2B included, uses the first two.
    """
    if not code_commune:
        return ""
    if code_commune.startswith(_OVERSEAS_PREFIX):
        return code_commune[:3]
    return code_commune[:2]


def parse_code_commune(raw: RawRecord) -> str:
    code_departement = field(raw, "Code departement")
    code_commune = field(raw, "Code commune")
    if not code_departement or not code_commune:
        return ""
    if code_departement.startswith(_OVERSEAS_PREFIX):
        return code_departement + code_commune.zfill(3)[-2:]
    return code_departement.zfill(2) + code_commune.zfill(3)


def parse_code_postal(raw: RawRecord) -> str:
    code_postal = field(raw, "Code postal")
    if not code_postal:
        return ""
    return code_postal.zfill(5)


def parse_id_parcelle(raw: RawRecord) -> str:
    code_commune = parse_code_commune(raw)
    section = field(raw, "Section")
    numero_plan = field(raw, "No plan")
    if not code_commune or not section or not numero_plan:
        return ""
    prefixe = field(raw, "Prefixe de section") or "000"
    return f"{code_commune}{prefixe.zfill(3)}{section.zfill(2)}{numero_plan.zfill(4)}"
