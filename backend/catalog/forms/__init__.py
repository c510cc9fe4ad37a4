from .import_form import CsvImportForm

__all__ = ["CsvImportForm"]
