"""
IAEA EXFOR/ENDF Web Service Access

Retrieves evaluated pointwise cross sections from the IAEA Nuclear Data
Section web database. Two requests are made per dataset:

1. ``e4list?Target=Mo-94&Reaction=n,g&Quantity=SIG&json`` lists the
   evaluated sections available for a target and reaction, one per library.
2. ``e4sig?SectID=...&PenSectID=...&json`` returns the pointwise data of a
   section, energies in eV and cross sections in barns.

The client owns a urllib opener and is meant to be used as a context
manager so the connection lifecycle is explicit::

    with ExforClient() as client:
        dataset = client.fetch_dataset("Mo-94", "JEFF-4.0", "n,g")

References:
    V. Zerkin, B. Pritychenko, "The experimental nuclear reaction data
    (EXFOR): Extended computer database and Web retrieval system",
    NIM A 888, 31-43 (2018).

    IAEA-NDS: https://www-nds.iaea.org/exfor/endf.htm
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode, urljoin
from urllib.request import OpenerDirector, Request, build_opener

from macsforge import __version__
from macsforge.core.config import EXFOR_BASE_URL
from macsforge.core.errors import FetchError, InvalidDataError
from macsforge.data.crosssections import CrossSectionCurve, EnergyPoint

logger = logging.getLogger(__name__)

# Quantity code for cross sections
QUANTITY_SIG = "SIG"

EV_TO_KEV = 1e-3
BARN_TO_MB = 1e3


@dataclass(frozen=True)
class Section:
    """One evaluated-library section listed by ``e4list``."""

    target: str
    library: str
    reaction: str
    mt: int
    mf: int
    sect_id: int
    pen_sect_id: int
    lib_id: int = 0
    date: str = ""
    author: str = ""

    @classmethod
    def from_json(cls, raw: Dict[str, Any]) -> "Section":
        try:
            return cls(
                target=str(raw["Targ"]),
                library=str(raw["LibName"]),
                reaction=str(raw.get("R", "")),
                mt=int(raw.get("MT", 0)),
                mf=int(raw.get("MF", 0)),
                sect_id=int(raw["SectID"]),
                pen_sect_id=int(raw["PenSectID"]),
                lib_id=int(raw.get("LibID", 0)),
                date=str(raw.get("DATE", "")),
                author=str(raw.get("AUTH", "")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError(f"Malformed section entry: {exc}") from exc


@dataclass
class CrossSectionDataset:
    """
    Pointwise cross section dataset from an evaluated library.

    Attributes
    ----------
    target : str
        Target nucleus, e.g. 'Mo-94'
    library : str
        Library name, e.g. 'JEFF-4.0'
    reaction : str
        Reaction string as reported by the service
    points : list of EnergyPoint
        Samples in keV and millibarn, in service order
    mat, mf, mt : int
        ENDF material, file and reaction numbers
    temperature_K : float
        Temperature of the evaluation
    interpolation : str
        Interpolation law advertised by the service
    metadata : dict
        Remaining header fields
    """

    target: str
    library: str
    reaction: str
    points: List[EnergyPoint]
    mat: int = 0
    mf: int = 0
    mt: int = 0
    temperature_K: float = 0.0
    interpolation: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, raw: Dict[str, Any]) -> "CrossSectionDataset":
        """Parse one entry of the ``datasets`` array of an ``e4sig`` reply."""
        try:
            pts = raw["pts"]
            points = [
                EnergyPoint(float(p["E"]) * EV_TO_KEV, float(p["Sig"]) * BARN_TO_MB)
                for p in pts
            ]
            known = {"pts", "TARGET", "LIBRARY", "REACTION", "MAT", "MF", "MT",
                     "TEMP", "defaultInterpolation"}
            return cls(
                target=str(raw.get("TARGET", "")),
                library=str(raw.get("LIBRARY", "")),
                reaction=str(raw.get("REACTION", "")),
                points=points,
                mat=int(raw.get("MAT", 0)),
                mf=int(raw.get("MF", 0)),
                mt=int(raw.get("MT", 0)),
                temperature_K=float(raw.get("TEMP", 0.0)),
                interpolation=str(raw.get("defaultInterpolation", "")),
                metadata={k: v for k, v in raw.items() if k not in known},
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError(f"Malformed dataset payload: {exc}") from exc

    def to_curve(self) -> CrossSectionCurve:
        """Build the interpolating curve, keeping the library in the label."""
        label = f"{self.library} {self.target}({self.reaction})".strip()
        return CrossSectionCurve.from_points(self.points, label=label)


class ExforClient:
    """
    Client for the IAEA EXFOR/ENDF JSON interface.

    Parameters
    ----------
    base_url : str
        Service root, ending with '/'
    timeout_s : float
        Per-request timeout
    opener : OpenerDirector, optional
        urllib opener to use; one is built (and closed on exit) if omitted
    """

    def __init__(
        self,
        base_url: str = EXFOR_BASE_URL,
        timeout_s: float = 60.0,
        opener: Optional[OpenerDirector] = None,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout_s = timeout_s
        self._owns_opener = opener is None
        self._opener = opener if opener is not None else build_opener()
        self._closed = False

    def __enter__(self) -> "ExforClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the opener's handlers."""
        if self._closed:
            return
        self._closed = True
        if self._owns_opener:
            self._opener.close()

    def _url(self, endpoint: str, params: Dict[str, Any]) -> str:
        # EXFOR expects a bare 'json' flag and literal commas in reactions
        query = urlencode(params, safe=",")
        return urljoin(self.base_url, endpoint) + "?" + query + "&json"

    def _get_json(self, url: str) -> Dict[str, Any]:
        if self._closed:
            raise FetchError("ExforClient is closed")
        logger.debug("GET %s", url)
        req = Request(url, headers={"User-Agent": f"MACSForge/{__version__}"})
        try:
            with self._opener.open(req, timeout=self.timeout_s) as response:
                payload = response.read()
        except HTTPError as exc:
            raise FetchError(f"HTTP {exc.code} from {url}: {exc.reason}") from exc
        except (URLError, TimeoutError, OSError) as exc:
            raise FetchError(f"Cannot reach {url}: {exc}") from exc

        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise FetchError(f"Invalid JSON from {url}: {exc}") from exc
        if not isinstance(data, dict):
            raise FetchError(f"Unexpected JSON payload from {url}")
        return data

    def list_sections(self, target: str, reaction: str) -> List[Section]:
        """All evaluated sections for a target and reaction."""
        url = self._url("e4list", {"Target": target, "Reaction": reaction,
                                   "Quantity": QUANTITY_SIG})
        data = self._get_json(url)
        sections = [Section.from_json(s) for s in data.get("sections") or []]
        logger.info("Found %d sections for %s(%s)", len(sections), target, reaction)
        return sections

    def list_libraries(self, target: str, reaction: str) -> List[str]:
        """Library names with data for a target and reaction, in service order."""
        seen: Dict[str, None] = {}
        for section in self.list_sections(target, reaction):
            seen.setdefault(section.library, None)
        return list(seen)

    def find_section(self, target: str, library: str, reaction: str) -> Section:
        """First section of the requested library."""
        sections = self.list_sections(target, reaction)
        for section in sections:
            if section.library == library:
                return section
        available = sorted({s.library for s in sections})
        hint = f"; available: {', '.join(available)}" if available else ""
        raise FetchError(f"No {library} data for {target}({reaction}){hint}")

    def fetch_dataset(self, target: str, library: str, reaction: str) -> CrossSectionDataset:
        """
        Retrieve the pointwise dataset for (target, library, reaction).

        Raises
        ------
        FetchError
            On network failure, malformed payload, missing library or an
            empty dataset.
        """
        section = self.find_section(target, library, reaction)
        url = self._url("e4sig", {"SectID": section.sect_id,
                                  "PenSectID": section.pen_sect_id})
        data = self._get_json(url)
        datasets = data.get("datasets") or []
        if not datasets:
            raise FetchError(f"No dataset in reply for {library} {target}({reaction})")

        dataset = CrossSectionDataset.from_json(datasets[0])
        if not dataset.points:
            raise FetchError(f"Empty dataset for {library} {target}({reaction})")
        if not dataset.library:
            dataset.library = library
        if not dataset.target:
            dataset.target = target
        if not dataset.reaction:
            dataset.reaction = reaction
        logger.info("Downloaded %d points for %s %s(%s)",
                    len(dataset.points), library, target, reaction)
        return dataset

    def fetch_points(self, target: str, library: str, reaction: str) -> List[EnergyPoint]:
        """Energy-ordered (energy_keV, cross_section_mb) samples."""
        points = self.fetch_dataset(target, library, reaction).points
        return sorted(points, key=lambda p: p.energy_keV)

    def fetch_curve(self, target: str, library: str, reaction: str) -> CrossSectionCurve:
        dataset = self.fetch_dataset(target, library, reaction)
        try:
            return dataset.to_curve()
        except InvalidDataError:
            logger.error("Unusable dataset for %s %s(%s)", library, target, reaction)
            raise
