"""Exporter registry: pluggable order export."""

from backoffice.config import get_settings

_exporter_instance = None


def get_exporter():
    """Return the configured export adapter (singleton).

    Uses CsvExporter by default; configure via BACKOFFICE_EXPORT_ADAPTER.
    """
    global _exporter_instance
    if _exporter_instance is None:
        adapter = get_settings().export_adapter
        if adapter == "csv":
            from backoffice.export.csv_adapter import CsvExporter

            _exporter_instance = CsvExporter()
        else:
            raise ValueError(f"Unknown export adapter: {adapter}")
    return _exporter_instance


def reset_exporter():
    """Reset the exporter singleton (useful for testing)."""
    global _exporter_instance
    _exporter_instance = None
