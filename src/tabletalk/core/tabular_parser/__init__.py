"""
Tabular Parser - Convierte bytes de un archivo subido en un TabularDataset.

Responsabilidad:
- Validar el formato por extension (csv, xls, xlsx)
- Decodificar como texto delimitado (tab o coma), sin leer binarios de Excel
- Primera linea no vacia = columnas; el resto = filas
- NO llamar servicios externos
- NO mutar estado: funcion pura de los bytes de entrada

Input: bytes + nombre de archivo
Output: TabularDataset (inmutable, filas de solo lectura)
"""

import csv
import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from tabletalk.exceptions import EmptyFileError, ParseError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("csv", "xls", "xlsx")


@dataclass(frozen=True)
class TabularDataset:
    """Parsed content of one uploaded file."""
    columns: tuple[str, ...]
    rows: tuple[Mapping[str, str], ...]
    row_count: int

    def __post_init__(self):
        if self.row_count != len(self.rows):
            raise ValueError(
                f"row_count={self.row_count} does not match {len(self.rows)} rows"
            )

    @property
    def duplicate_columns(self) -> list[str]:
        """Column names that appear more than once (later one wins on lookup)."""
        return [name for name, n in Counter(self.columns).items() if n > 1]


def file_extension(file_name: str) -> str | None:
    suffix = Path(file_name or "").suffix
    return suffix[1:].lower() if suffix else None


def _decode(file_bytes: bytes) -> str:
    return file_bytes.decode("utf-8-sig", errors="replace")


def _split_fields(lines: list[str], delimiter: str, file_name: str) -> list[list[str]]:
    reader = csv.reader(lines, delimiter=delimiter)
    try:
        return [[field.strip() for field in record] for record in reader]
    except csv.Error as e:
        raise ParseError(f"Could not read {file_name}: {e}", details={"file_name": file_name})


def parse(file_bytes: bytes, file_name: str) -> TabularDataset:
    """
    Parse an uploaded file into a TabularDataset.

    Args:
        file_bytes: Raw file content
        file_name: Original file name (its extension selects the format)

    Returns:
        TabularDataset with one row per non-empty line after the header

    Raises:
        UnsupportedFormatError: Extension is not csv, xls or xlsx
        EmptyFileError: File has no non-empty lines
    """
    extension = file_extension(file_name)
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(file_name, extension, list(SUPPORTED_EXTENSIONS))

    lines = [line for line in _decode(file_bytes).splitlines() if line.strip()]
    if not lines:
        raise EmptyFileError(file_name)

    delimiter = "\t" if "\t" in lines[0] else ","
    records = _split_fields(lines, delimiter, file_name)

    columns = tuple(records[0])
    rows = []
    for values in records[1:]:
        row: dict[str, str] = {}
        for idx, col in enumerate(columns):
            row[col] = values[idx] if idx < len(values) else ""
        rows.append(MappingProxyType(row))

    dataset = TabularDataset(columns=columns, rows=tuple(rows), row_count=len(rows))

    if dataset.duplicate_columns:
        logger.warning(
            f"[tabular_parser] {file_name}: duplicate column names {dataset.duplicate_columns}; "
            "later values win on lookup"
        )
    logger.info(
        f"[tabular_parser] Parsed {file_name}: {len(columns)} columns, {dataset.row_count} rows "
        f"(delimiter={'tab' if delimiter == chr(9) else 'comma'})"
    )
    return dataset


__all__ = ["SUPPORTED_EXTENSIONS", "TabularDataset", "file_extension", "parse"]
