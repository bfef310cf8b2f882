from .exporter import EXPORT_FORMATS, export_filename, report_filename, serialize, serialize_report

__all__ = ["EXPORT_FORMATS", "export_filename", "report_filename", "serialize", "serialize_report"]
