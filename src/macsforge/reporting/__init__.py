"""
MACS report tables.

Renders the (temperature, MACS) results of a run as:
- a fixed-width text table headed by library, nucleus and reaction
- CSV
- Markdown
- JSON (with run diagnostics)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from macsforge.core.errors import InvalidInputError
from macsforge.physics.maxwellian import MACSResult

TABLE_FORMATS = ("table", "csv", "markdown", "json")


@dataclass
class MACSTable:
    """
    Printable MACS table.

    Attributes:
        library: Evaluated library name (e.g. "JEFF-4.0")
        target: Target nucleus (e.g. "Mo-94")
        reaction: Reaction string (e.g. "n,g")
        results: One MACSResult per temperature, in output order
        decimals: Decimal places for MACS values
        metadata: Extra fields written to JSON output
    """

    library: str
    target: str
    reaction: str
    results: List[MACSResult]
    decimals: int = 6
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_report(cls, report, decimals: int = 6) -> "MACSTable":
        """Build from a pipeline MACSReport."""
        metadata = dict(report.metadata)
        metadata.update(
            n_points=report.n_points,
            domain_keV=list(report.domain_keV),
            mass_number=report.mass_number,
            method=report.method,
        )
        return cls(
            library=report.library,
            target=report.target,
            reaction=report.reaction,
            results=list(report.results),
            decimals=decimals,
            metadata=metadata,
        )

    @property
    def title(self) -> str:
        return f"{self.library} {self.target}({self.reaction})"

    def to_text(self, fmt: str = "table") -> str:
        """
        Format table as text string.

        Args:
            fmt: Output format ("table", "csv", "markdown", "json")

        Returns:
            Formatted table string
        """
        if fmt == "csv":
            return self._to_csv()
        elif fmt == "markdown":
            return self._to_markdown()
        elif fmt == "json":
            return self._to_json()
        elif fmt == "table":
            return self._to_table()
        raise InvalidInputError(f"Unknown table format '{fmt}', expected one of {', '.join(TABLE_FORMATS)}")

    def _to_table(self) -> str:
        """Fixed-width text."""
        d = self.decimals
        width = max(12, d + 6)
        lines = [f"=== MACS Calculation for {self.title} ===", ""]
        lines.append(f"{'T(keV)':>6}    {'MACS(mb)':>{width}}")
        lines.append("-" * (10 + width))
        for r in self.results:
            lines.append(f"{r.temperature_keV:6.1f}    {r.macs_mb:{width}.{d}f}")
        return "\n".join(lines)

    def _to_csv(self) -> str:
        d = self.decimals
        lines = ["temperature_keV,macs_mb,weight_coverage"]
        for r in self.results:
            lines.append(f"{r.temperature_keV:g},{r.macs_mb:.{d}f},{r.weight_coverage:.6f}")
        return "\n".join(lines)

    def _to_markdown(self) -> str:
        d = self.decimals
        lines = [f"## MACS: {self.title}", ""]
        lines.append("| T (keV) | MACS (mb) |")
        lines.append("|---------|-----------|")
        for r in self.results:
            lines.append(f"| {r.temperature_keV:g} | {r.macs_mb:.{d}f} |")
        return "\n".join(lines)

    def _to_json(self) -> str:
        payload = {
            "library": self.library,
            "target": self.target,
            "reaction": self.reaction,
            "results": [
                {
                    "temperature_keV": r.temperature_keV,
                    "macs_mb": round(r.macs_mb, self.decimals),
                    "weight_coverage": r.weight_coverage,
                    "n_nodes": r.n_nodes,
                    "method": r.method,
                }
                for r in self.results
            ],
            "metadata": self.metadata,
        }
        return json.dumps(payload, indent=2, default=str)

    def to_dataframe(self):
        """
        Results as a pandas DataFrame.

        Columns: temperature_keV, macs_mb, weight_coverage, n_nodes, method
        """
        try:
            import pandas as pd
        except ImportError:
            raise ImportError("pandas required for DataFrame output")

        rows = [
            {
                "temperature_keV": r.temperature_keV,
                "macs_mb": r.macs_mb,
                "weight_coverage": r.weight_coverage,
                "n_nodes": r.n_nodes,
                "method": r.method,
            }
            for r in self.results
        ]
        return pd.DataFrame(rows, columns=["temperature_keV", "macs_mb", "weight_coverage",
                                           "n_nodes", "method"])

    def save(self, path: Union[str, Path], fmt: str = "table") -> Path:
        path = Path(path)
        path.write_text(self.to_text(fmt) + "\n")
        return path


def format_macs_table(
    library: str,
    target: str,
    reaction: str,
    results: Sequence[MACSResult],
    decimals: int = 6,
    fmt: str = "table",
) -> str:
    """Render results in one call."""
    return MACSTable(library, target, reaction, list(results), decimals=decimals).to_text(fmt)
