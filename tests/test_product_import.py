import csv
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path

from openpyxl import Workbook

from storefront.config import AppConfig
from storefront.models.enums import ProductCategory
from storefront.services.product_import import (
    ProductImportError,
    parse_product_file,
    parse_row,
    write_import_template,
)


class ImportFileTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)

    def write_csv(self, rows: list[list[str]], name: str = "products.csv") -> Path:
        path = self.root / name
        with path.open("w", encoding="utf-8", newline="") as handle:
            csv.writer(handle).writerows(rows)
        return path


class TestParseRow(unittest.TestCase):
    def test_full_row(self):
        product = parse_row(
            {
                "name": " Chicken Breast ",
                "price": "320",
                "offer_price": "299.50",
                "category": "Chicken",
                "stock_quantity": "12.0",
                "is_active": "yes",
                "featured": "1",
                "features": "Boneless | Antibiotic free|",
            },
            row_number=2,
        )
        self.assertEqual(product.name, "Chicken Breast")
        self.assertEqual(product.price, Decimal("320"))
        self.assertEqual(product.offer_price, Decimal("299.50"))
        self.assertEqual(product.category, ProductCategory.CHICKEN)
        self.assertEqual(product.stock_quantity, 12)
        self.assertTrue(product.is_active)
        self.assertTrue(product.featured)
        self.assertEqual(product.features, ["Boneless", "Antibiotic free"])

    def test_defaults(self):
        product = parse_row({"name": "Salt", "price": "10"}, row_number=3)
        self.assertEqual(product.category, ProductCategory.OTHER)
        self.assertTrue(product.is_active)
        self.assertFalse(product.featured)
        self.assertEqual(product.stock_quantity, 0)

    def test_category_with_spaces(self):
        product = parse_row({"name": "Lamb", "price": "700", "category": "Red Meat"}, 2)
        self.assertEqual(product.category, ProductCategory.RED_MEAT)

    def test_errors_name_the_row(self):
        cases = [
            ({"price": "10"}, "name is required"),
            ({"name": "X", "price": "0"}, "price must be greater than 0"),
            ({"name": "X", "price": "abc"}, "price must be greater than 0"),
            ({"name": "X", "price": "5", "category": "fish"}, "unknown category"),
            ({"name": "X", "price": "5", "featured": "maybe"}, "yes/no"),
        ]
        for raw, message in cases:
            with self.subTest(raw=raw):
                with self.assertRaises(ProductImportError) as ctx:
                    parse_row(raw, row_number=7)
                self.assertEqual(ctx.exception.row_number, 7)
                self.assertTrue(str(ctx.exception).startswith("Row 7: "))
                self.assertIn(message, str(ctx.exception))


class TestParseFile(ImportFileTestCase):
    def test_csv_skips_blank_rows(self):
        path = self.write_csv([
            ["Name", "Price", "Category"],
            ["Chicken Wings", "199", "chicken"],
            ["", "", ""],
            ["Green Chilli Pickle", "149", "chilli_condiments"],
        ])
        products = parse_product_file(path)
        self.assertEqual([p.name for p in products], ["Chicken Wings", "Green Chilli Pickle"])

    def test_bad_row_aborts_whole_file(self):
        path = self.write_csv([
            ["name", "price"],
            ["Good", "10"],
            ["Bad", "-1"],
        ])
        with self.assertRaises(ProductImportError) as ctx:
            parse_product_file(path)
        self.assertEqual(ctx.exception.row_number, 3)

    def test_missing_required_columns(self):
        path = self.write_csv([["title", "cost"], ["x", "1"]])
        with self.assertRaisesRegex(ProductImportError, "must include 'name' and 'price'"):
            parse_product_file(path)

    def test_empty_file(self):
        path = self.write_csv([["name", "price"]])
        with self.assertRaisesRegex(ProductImportError, "no product rows"):
            parse_product_file(path)

    def test_unsupported_extension(self):
        path = self.root / "products.json"
        path.write_text("[]", encoding="utf-8")
        with self.assertRaisesRegex(ProductImportError, "Unsupported file type"):
            parse_product_file(path)

    def test_xlsx(self):
        workbook = Workbook()
        sheet = workbook.active
        sheet.append(["name", "price", "stock_quantity", "is_active"])
        sheet.append(["Mutton Keema", 680, 5, False])
        sheet.append([None, None, None, None])
        path = self.root / "products.xlsx"
        workbook.save(path)

        products = parse_product_file(path)
        self.assertEqual(len(products), 1)
        self.assertEqual(products[0].price, Decimal("680"))
        self.assertEqual(products[0].stock_quantity, 5)
        self.assertFalse(products[0].is_active)


class TestTemplate(ImportFileTestCase):
    def test_template_round_trips_through_parser(self):
        path = write_import_template(self.root / "template.csv")
        with path.open(encoding="utf-8", newline="") as handle:
            header = next(csv.reader(handle))
        self.assertEqual(tuple(header), AppConfig.PRODUCT_IMPORT_COLUMNS)

        products = parse_product_file(path)
        self.assertEqual(len(products), 1)
        self.assertEqual(products[0].category, ProductCategory.CHICKEN)


if __name__ == "__main__":
    unittest.main()
