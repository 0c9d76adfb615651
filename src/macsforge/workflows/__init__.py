"""End-to-end MACS workflows."""

from macsforge.workflows.macs_pipeline import MACSPipeline, MACSReport, compute_macs_table

__all__ = ["MACSPipeline", "MACSReport", "compute_macs_table"]
