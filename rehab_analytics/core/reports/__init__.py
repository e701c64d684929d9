"""
Reports Module

Export envelope and CSV rendering of comparison results.
"""
from .export import (
    ExportScope,
    build_export_envelope,
    export_csv,
    export_filename,
    export_json,
)

__all__ = [
    "ExportScope",
    "build_export_envelope",
    "export_csv",
    "export_filename",
    "export_json",
]
