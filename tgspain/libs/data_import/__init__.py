import csv
import io
from abc import ABC, abstractmethod


class InvalidWorkbookException(Exception):
    pass


class CsvWorkbook:
    """
    A wrapper for an uploaded CSV export, so that we can mock it in tests
    """

    def __init__(self, file_contents, required_headers=()):
        if isinstance(file_contents, bytes):
            try:
                file_contents = file_contents.decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise InvalidWorkbookException("El archivo no está en UTF-8") from exc
        text = (file_contents or "").lstrip("\ufeff")
        reader = csv.DictReader(io.StringIO(text))
        try:
            self._header = [name.strip() for name in (reader.fieldnames or [])]
            self._rows = [
                {(key or "").strip(): (value or "").strip()
                 for key, value in row.items() if key is not None}
                for row in reader
            ]
        except csv.Error as exc:
            raise InvalidWorkbookException(f"CSV no válido: {exc}") from exc

        lowered = {name.lower() for name in self._header}
        missing = [name for name in required_headers if name.lower() not in lowered]
        if missing:
            raise InvalidWorkbookException(
                f"Faltan columnas obligatorias: {', '.join(missing)}")

    def header(self):
        return self._header

    def rows(self):
        return self._rows


def field(row, *names):
    """First non-empty value among the given column names, case-insensitive"""
    lowered = {key.lower(): value for key, value in row.items()}
    for name in names:
        value = lowered.get(name.lower())
        if value:
            return value.strip()
    return ""


class WorkbookImporter(ABC):
    """
    Imports rows one at a time. A bad row is reported and skipped; rows
    already imported are kept.
    """

    def __init__(self, workbook):
        self.workbook = workbook
        self.errors = []
        self.processed = 0
        self.new = 0
        self.updated = 0
        self.activated = 0

    @abstractmethod
    def import_row(self, row, row_number):
        pass

    def prepare_rows(self):
        return list(enumerate(self.workbook.rows()))

    def import_data(self):
        for row_number, row in self.prepare_rows():
            self.import_row(row, row_number)
            self.processed += 1
        return self.errors

    def error(self, msg, row_number=None, email=None):
        entry = {"error": msg}
        if row_number is not None:
            # Spreadsheet numbering: header is row 1
            entry["row"] = row_number + 2
        if email:
            entry["email"] = email
        self.errors.append(entry)
