# -*- coding: utf-8 -*-
# Catálogo de tipos de limpieza de cabezales
# El valor entero de cada tipo se envía tal cual como campo btn_def del formulario

from enum import IntEnum
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

class CleaningType(IntEnum):
    BLACK_NORMAL = 1
    BLACK_STRONG = 2
    BLACK_STRONGEST = 3
    COLOR_NORMAL = 4
    COLOR_STRONG = 5
    COLOR_STRONGEST = 6
    ALL_NORMAL = 7
    ALL_STRONG = 8
    ALL_STRONGEST = 9
    SPECIAL = 10

DEFAULT_CLEANING_TYPE = CleaningType.ALL_NORMAL

# Valor fijo de btn_def del formulario final que refresca el estado de la limpieza
REFRESH_BUTTON = 14

@dataclass(frozen=True)
class CleaningOption:
    id: CleaningType
    label: str
    description: str
    # Duración aproximada del ciclo en milisegundos
    duration: int
    # "low", "medium", "high" o "very-high"
    ink_usage: str

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["id"] = int(self.id)
        data["name"] = self.id.name
        return data

CLEANING_OPTIONS: List[CleaningOption] = [
    CleaningOption(CleaningType.BLACK_NORMAL, "Black only - Normal", "Standard cleaning for black print head", 15000, "low"),
    CleaningOption(CleaningType.BLACK_STRONG, "Black only - Strong", "Intensive cleaning for black print head", 20000, "medium"),
    CleaningOption(CleaningType.BLACK_STRONGEST, "Black only - Strongest", "Deep cleaning for black print head", 30000, "high"),
    CleaningOption(CleaningType.COLOR_NORMAL, "Color only - Normal", "Standard cleaning for color print heads", 15000, "low"),
    CleaningOption(CleaningType.COLOR_STRONG, "Color only - Strong", "Intensive cleaning for color print heads", 20000, "medium"),
    CleaningOption(CleaningType.COLOR_STRONGEST, "Color only - Strongest", "Deep cleaning for color print heads", 30000, "high"),
    CleaningOption(CleaningType.ALL_NORMAL, "All - Normal", "Standard cleaning for all print heads", 15000, "medium"),
    CleaningOption(CleaningType.ALL_STRONG, "All - Strong", "Intensive cleaning for all print heads", 25000, "high"),
    CleaningOption(CleaningType.ALL_STRONGEST, "All - Strongest", "Deep cleaning for all print heads", 35000, "very-high"),
    CleaningOption(CleaningType.SPECIAL, "Special Cleaning", "Special cleaning sequence for severe clogs", 40000, "very-high"),
]

_OPTIONS_BY_TYPE = {option.id: option for option in CLEANING_OPTIONS}

def parse_cleaning_type(value) -> Optional[CleaningType]:
    # Acepta enteros o cadenas numéricas; bool se rechaza aunque sea subclase de int
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return CleaningType(int(value))
    except (TypeError, ValueError):
        return None

def get_option(cleaning_type: CleaningType) -> CleaningOption:
    return _OPTIONS_BY_TYPE.get(cleaning_type, _OPTIONS_BY_TYPE[DEFAULT_CLEANING_TYPE])
