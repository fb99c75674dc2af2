"""
Product Import Parser.

Reads a bulk product sheet (``.csv`` or ``.xlsx``) into validated
``ProductInput`` rows.  Parsing is all-or-nothing: the first invalid row
aborts the whole file with a ``ProductImportError`` naming the row, so a
half-imported catalogue never reaches the backend.

Columns (header row, any order, case-insensitive)::

    name, description, price, offer_price, category, stock_quantity,
    is_active, featured, features, ingredients, offers

``features`` holds several values separated by ``|``.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Optional, Union

from openpyxl import load_workbook
from openpyxl.workbook import Workbook
from pydantic import ValidationError

from storefront.config import AppConfig
from storefront.models.enums import ProductCategory
from storefront.models.product import ProductInput
from storefront.utils.general import safe_decimal

CellValue = Union[str, int, float, bool, None]
RawRow = dict[str, CellValue]

_TRUE_STRINGS: frozenset[str] = frozenset({"true", "yes", "y", "1"})
_FALSE_STRINGS: frozenset[str] = frozenset({"false", "no", "n", "0"})
FEATURE_SEPARATOR: str = "|"

SUPPORTED_SUFFIXES: frozenset[str] = frozenset({".csv", ".xlsx"})


class ProductImportError(ValueError):
    """Raised when an import file is unreadable or any row is invalid."""

    def __init__(self, message: str, row_number: Optional[int] = None) -> None:
        self.row_number = row_number
        prefix = f"Row {row_number}: " if row_number is not None else ""
        super().__init__(f"{prefix}{message}")


# ---------------------------------------------------------------------------
# Cell conversion helpers
# ---------------------------------------------------------------------------

def _text(value: CellValue) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_bool(value: CellValue, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"'{value}' is not a yes/no value")


def _as_int(value: CellValue) -> int:
    if value is None or value == "":
        return 0
    # Spreadsheets hand back "5.0" for whole numbers.
    return int(float(str(value).strip()))


def _as_category(value: CellValue) -> ProductCategory:
    text = _text(value)
    if text is None:
        return ProductCategory.OTHER
    normalized = text.lower().replace(" ", "_").replace("-", "_")
    try:
        return ProductCategory(normalized)
    except ValueError:
        raise ValueError(f"unknown category '{text}'") from None


def _as_features(value: CellValue) -> list[str]:
    text = _text(value)
    if text is None:
        return []
    return [part.strip() for part in text.split(FEATURE_SEPARATOR) if part.strip()]


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def _normalize_header(header: CellValue) -> str:
    return str(header or "").strip().lower().replace(" ", "_")


def _read_csv(path: Path) -> list[RawRow]:
    with path.open("r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.reader(handle)
        rows = list(reader)
    if not rows:
        return []
    headers = [_normalize_header(h) for h in rows[0]]
    return [dict(zip(headers, row)) for row in rows[1:]]


def _read_xlsx(path: Path) -> list[RawRow]:
    workbook: Optional[Workbook] = None
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
        worksheet = workbook.active
        if worksheet is None:
            return []
        rows = list(worksheet.iter_rows(values_only=True))
    finally:
        if workbook is not None:
            workbook.close()
    if not rows:
        return []
    headers = [_normalize_header(h) for h in rows[0]]
    return [dict(zip(headers, row)) for row in rows[1:]]


def _is_blank(row: RawRow) -> bool:
    return all(value is None or str(value).strip() == "" for value in row.values())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_row(raw: RawRow, row_number: int) -> ProductInput:
    """Convert one sheet row to a ``ProductInput``.

    Raises
    ------
    ProductImportError
        The row has no name, a non-positive price, or an unparseable cell.
    """
    name = _text(raw.get("name"))
    if name is None:
        raise ProductImportError("name is required", row_number)

    price = safe_decimal(raw.get("price"))
    if price is None or price <= 0:
        raise ProductImportError("price must be greater than 0", row_number)

    try:
        return ProductInput(
            name=name,
            description=_text(raw.get("description")),
            price=price,
            offer_price=safe_decimal(raw.get("offer_price")),
            category=_as_category(raw.get("category")),
            stock_quantity=_as_int(raw.get("stock_quantity")),
            is_active=_as_bool(raw.get("is_active"), default=True),
            featured=_as_bool(raw.get("featured"), default=False),
            features=_as_features(raw.get("features")),
            ingredients=_text(raw.get("ingredients")),
            offers=_text(raw.get("offers")),
        )
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise ProductImportError(f"{field}: {first.get('msg')}", row_number) from exc
    except ValueError as exc:
        raise ProductImportError(str(exc), row_number) from exc


def parse_product_file(path: Path) -> list[ProductInput]:
    """Read every product row of *path*; raise on the first bad row.

    Row numbers in errors match the spreadsheet (the header is row 1).

    Raises
    ------
    ProductImportError
        Unsupported extension, missing ``name``/``price`` columns, an
        empty sheet, or any invalid row.
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ProductImportError(
            f"Unsupported file type '{suffix}'. Use .csv or .xlsx."
        )

    raw_rows = _read_csv(path) if suffix == ".csv" else _read_xlsx(path)
    if raw_rows and not {"name", "price"} <= set(raw_rows[0]):
        raise ProductImportError("The header row must include 'name' and 'price' columns.")

    products: list[ProductInput] = []
    for index, raw in enumerate(raw_rows, start=2):
        if _is_blank(raw):
            continue
        products.append(parse_row(raw, index))

    if not products:
        raise ProductImportError("The file contains no product rows.")
    return products


def write_import_template(path: Path) -> Path:
    """Write a CSV template with the header row and one example product."""
    example = {
        "name": "Chicken Curry Cut",
        "description": "Skinless curry cut, 500 g",
        "price": "249.00",
        "offer_price": "229.00",
        "category": str(ProductCategory.CHICKEN),
        "stock_quantity": "25",
        "is_active": "true",
        "featured": "false",
        "features": FEATURE_SEPARATOR.join(["Antibiotic free", "Cleaned and cut"]),
        "ingredients": "",
        "offers": "",
    }
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(AppConfig.PRODUCT_IMPORT_COLUMNS))
        writer.writeheader()
        writer.writerow(example)
    return path
