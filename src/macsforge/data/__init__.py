"""MACSForge data module: nucleus identifiers, cross section curves and EXFOR access."""

from macsforge.data.elements import (
    ELEMENT_SYMBOLS,
    ATOMIC_NUMBERS,
    Nucleus,
    parse_nucleus,
)

from macsforge.data.crosssections import (
    ENERGY_UNITS,
    XS_UNITS,
    EnergyPoint,
    CrossSectionCurve,
    load_csv_curve,
    save_csv_curve,
)

from macsforge.data.exfor import (
    Section,
    CrossSectionDataset,
    ExforClient,
)

__all__ = [
    # Elements
    "ELEMENT_SYMBOLS",
    "ATOMIC_NUMBERS",
    "Nucleus",
    "parse_nucleus",
    # Cross sections
    "ENERGY_UNITS",
    "XS_UNITS",
    "EnergyPoint",
    "CrossSectionCurve",
    "load_csv_curve",
    "save_csv_curve",
    # EXFOR
    "Section",
    "CrossSectionDataset",
    "ExforClient",
]
