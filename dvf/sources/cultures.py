"""Crop-type label tables shared read-only by every vintage."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from dvf.common.config_loader import ConfigBundle


@dataclass(frozen=True)
class ReferenceData:
    cultures: Mapping[str, str]
    cultures_speciales: Mapping[str, str]


def build_reference_data(
    cultures: Mapping[str, str],
    cultures_speciales: Mapping[str, str],
) -> ReferenceData:
    return ReferenceData(
        cultures=MappingProxyType(dict(cultures)),
        cultures_speciales=MappingProxyType(dict(cultures_speciales)),
    )


def load_reference_data(bundle: ConfigBundle) -> ReferenceData:
    return build_reference_data(bundle.natures_culture, bundle.natures_culture_speciale)
