"""
Element symbols and nucleus identifiers.

Parses target identifiers such as ``Mo-94`` into element, atomic number and
mass number, and renders them in the form the EXFOR service expects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from macsforge.core.errors import InvalidInputError

# Atomic number to element symbol mapping
ELEMENT_SYMBOLS = {
    1: "H", 2: "He", 3: "Li", 4: "Be", 5: "B",
    6: "C", 7: "N", 8: "O", 9: "F", 10: "Ne",
    11: "Na", 12: "Mg", 13: "Al", 14: "Si", 15: "P",
    16: "S", 17: "Cl", 18: "Ar", 19: "K", 20: "Ca",
    21: "Sc", 22: "Ti", 23: "V", 24: "Cr", 25: "Mn",
    26: "Fe", 27: "Co", 28: "Ni", 29: "Cu", 30: "Zn",
    31: "Ga", 32: "Ge", 33: "As", 34: "Se", 35: "Br",
    36: "Kr", 37: "Rb", 38: "Sr", 39: "Y", 40: "Zr",
    41: "Nb", 42: "Mo", 43: "Tc", 44: "Ru", 45: "Rh",
    46: "Pd", 47: "Ag", 48: "Cd", 49: "In", 50: "Sn",
    51: "Sb", 52: "Te", 53: "I", 54: "Xe", 55: "Cs",
    56: "Ba", 57: "La", 58: "Ce", 59: "Pr", 60: "Nd",
    61: "Pm", 62: "Sm", 63: "Eu", 64: "Gd", 65: "Tb",
    66: "Dy", 67: "Ho", 68: "Er", 69: "Tm", 70: "Yb",
    71: "Lu", 72: "Hf", 73: "Ta", 74: "W", 75: "Re",
    76: "Os", 77: "Ir", 78: "Pt", 79: "Au", 80: "Hg",
    81: "Tl", 82: "Pb", 83: "Bi", 84: "Po", 85: "At",
    86: "Rn", 87: "Fr", 88: "Ra", 89: "Ac", 90: "Th",
    91: "Pa", 92: "U", 93: "Np", 94: "Pu", 95: "Am",
    96: "Cm", 97: "Bk", 98: "Cf", 99: "Es", 100: "Fm",
    101: "Md", 102: "No", 103: "Lr", 104: "Rf", 105: "Db",
    106: "Sg", 107: "Bh", 108: "Hs", 109: "Mt", 110: "Ds",
    111: "Rg", 112: "Cn", 113: "Nh", 114: "Fl", 115: "Mc",
    116: "Lv", 117: "Ts", 118: "Og",
}

# Symbol to atomic number
ATOMIC_NUMBERS = {v: k for k, v in ELEMENT_SYMBOLS.items()}

_NUCLEUS_RE = re.compile(r'^\s*([A-Za-z]{1,2})-?(\d{1,3})(m\d?)?\s*$')


@dataclass(frozen=True)
class Nucleus:
    """
    Target nucleus.

    Attributes
    ----------
    symbol : str
        Element symbol, e.g. 'Mo'
    z : int
        Atomic number
    mass_number : int
        Mass number A
    isomeric_state : int
        0 for ground state, 1 for 'm'/'m1', 2 for 'm2'
    """

    symbol: str
    z: int
    mass_number: int
    isomeric_state: int = 0

    @property
    def name(self) -> str:
        """Identifier in EXFOR form, e.g. 'Mo-94' or 'Hf-178m'."""
        suffix = ""
        if self.isomeric_state == 1:
            suffix = "m"
        elif self.isomeric_state > 1:
            suffix = f"m{self.isomeric_state}"
        return f"{self.symbol}-{self.mass_number}{suffix}"

    @property
    def reduced_mass_factor(self) -> float:
        """a = A/(1+A), converting lab-frame energy to centre-of-mass."""
        return self.mass_number / (1.0 + self.mass_number)

    def __str__(self) -> str:
        return self.name


def parse_nucleus(name: str) -> Nucleus:
    """
    Parse a nucleus identifier like 'Mo-94', 'mo94' or 'Hf-178m2'.

    Raises
    ------
    InvalidInputError
        If the identifier is malformed or names an unknown element.
    """
    match = _NUCLEUS_RE.match(name or "")
    if not match:
        raise InvalidInputError(f"Cannot parse nucleus identifier: {name!r}")

    symbol = match.group(1).capitalize()
    z = ATOMIC_NUMBERS.get(symbol)
    if z is None:
        raise InvalidInputError(f"Unknown element symbol '{symbol}' in {name!r}")

    mass = int(match.group(2))
    if mass < z:
        raise InvalidInputError(f"Mass number {mass} below atomic number {z} in {name!r}")

    isomeric = match.group(3) or ""
    if isomeric in ("m", "m1"):
        iso_state = 1
    elif isomeric:
        iso_state = int(isomeric[1:])
    else:
        iso_state = 0

    return Nucleus(symbol=symbol, z=z, mass_number=mass, isomeric_state=iso_state)
