import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

from storefront.config import AppConfig
from storefront.models.enums import ProductCategory, UserRole
from storefront.models.product import Product, ProductInput
from storefront.repositories.product_repository import ProductRepository
from storefront.services.product_service import ProductService, storage_object_name
from tests.fakes import FakeQuery, StaticAuth, make_backend, make_logger, make_snapshot


def product(product_id: str = "p1", is_active: bool = True) -> Product:
    return Product(id=product_id, name="Chicken Wings", price=Decimal("199"), is_active=is_active)


class ProductServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.auth = StaticAuth(make_snapshot("admin-1", role=UserRole.ADMIN))
        self.repo = MagicMock(spec=ProductRepository)
        self.backend = MagicMock()
        self.config = AppConfig(MAX_IMAGE_SIZE_MB=1, MAX_IMAGES_PER_PRODUCT=2)
        self.logger = make_logger()
        self.service = ProductService(
            repo=self.repo, backend=self.backend, auth=self.auth, config=self.config, logger=self.logger,
        )
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)

    def audit_actions(self) -> list[str]:
        return [
            c.args[1] for c in self.logger.info.call_args_list
            if c.args and c.args[0] == "AUDIT: %s"
        ]


class TestCatalogueReads(ProductServiceTestCase):
    def test_customers_never_see_inactive_products(self):
        self.auth.set_snapshot(make_snapshot("user-1"))
        self.service.list_products(include_inactive=True)
        self.repo.find_all.assert_called_once_with(active_only=True, category=None)

    def test_admin_may_list_inactive(self):
        self.service.list_products(include_inactive=True, category=ProductCategory.CHICKEN)
        self.repo.find_all.assert_called_once_with(active_only=False, category=ProductCategory.CHICKEN)

    def test_featured_strip_is_active_and_featured_only(self):
        self.repo.find_all.return_value = [product("p9")]
        featured = self.service.list_featured()
        self.repo.find_all.assert_called_once_with(active_only=True, featured_only=True)
        self.assertEqual([p.id for p in featured], ["p9"])

    def test_inactive_product_hidden_from_guest(self):
        self.auth.set_snapshot(make_snapshot(user_id=None))
        self.repo.get_by_id.return_value = product(is_active=False)
        self.assertIsNone(self.service.get_product("p1"))


class TestBackOffice(ProductServiceTestCase):
    def test_create_requires_admin(self):
        self.auth.set_snapshot(make_snapshot("user-1"))
        result = self.service.create_product(ProductInput(name="X", price=Decimal("1")))
        self.assertEqual(result.status_code, 403)
        self.repo.create.assert_not_called()

    def test_create_is_audited(self):
        self.repo.create.return_value = product()
        result = self.service.create_product(ProductInput(name="Chicken Wings", price=Decimal("199")))
        self.assertTrue(result.success)
        self.assertTrue(any("CREATE_PRODUCT" in line for line in self.audit_actions()))

    def test_toggle_flips_active_flag(self):
        self.repo.get_by_id.return_value = product(is_active=True)
        self.repo.update.return_value = product(is_active=False)
        result = self.service.toggle_product_status("p1")
        self.assertTrue(result.success)
        self.repo.update.assert_called_once_with("p1", {"is_active": False})

    def test_toggle_missing_product(self):
        self.repo.get_by_id.return_value = None
        self.assertEqual(self.service.toggle_product_status("p1").status_code, 404)

    def test_delete_missing_product(self):
        self.repo.delete.return_value = False
        self.assertEqual(self.service.delete_product("p1").status_code, 404)

    def test_import_creates_all_rows(self):
        path = self.root / "stock.csv"
        path.write_text("name,price\nWings,199\nKeema,680\n", encoding="utf-8")
        self.repo.create_many.side_effect = lambda items: [
            Product(id=str(i), name=item.name, price=item.price) for i, item in enumerate(items)
        ]
        result = self.service.import_products(path)
        self.assertTrue(result.success)
        self.assertEqual([p.name for p in result.data], ["Wings", "Keema"])

    def test_import_rejects_bad_file_without_writing(self):
        path = self.root / "stock.csv"
        path.write_text("name,price\nWings,199\n,5\n", encoding="utf-8")
        result = self.service.import_products(path)
        self.assertEqual(result.status_code, 400)
        self.assertIn("Row 3", result.error)
        self.repo.create_many.assert_not_called()

    def test_import_missing_file(self):
        result = self.service.import_products(self.root / "missing.csv")
        self.assertEqual(result.status_code, 400)


class TestImageUpload(ProductServiceTestCase):
    def image(self, name: str, size: int = 10) -> Path:
        path = self.root / name
        path.write_bytes(b"x" * size)
        return path

    def test_uploads_to_product_images_folder(self):
        self.backend.upload_file.return_value = "https://cdn/img.png"
        result = self.service.upload_product_images([self.image("a.png")])

        self.assertTrue(result.success)
        self.assertEqual(result.data.urls, ["https://cdn/img.png"])
        bucket, object_path, _ = self.backend.upload_file.call_args.args
        self.assertEqual(bucket, self.config.PRODUCT_IMAGE_BUCKET)
        self.assertTrue(object_path.startswith("product-images/"))
        self.assertTrue(object_path.endswith(".png"))

    def test_rejects_non_images_and_oversized_files(self):
        too_big = self.image("big.jpg", size=self.config.max_image_size_bytes + 1)
        result = self.service.upload_product_images([self.image("notes.txt"), too_big])

        self.assertFalse(result.success)
        self.assertEqual(set(result.data.rejected), {"notes.txt", "big.jpg"})
        self.backend.upload_file.assert_not_called()

    def test_respects_per_product_limit(self):
        self.backend.upload_file.return_value = "https://cdn/x.png"
        paths = [self.image("a.png"), self.image("b.png")]
        result = self.service.upload_product_images(paths, existing_count=1)

        self.assertTrue(result.success)
        self.assertEqual(len(result.data.urls), 1)
        self.assertIn("b.png", result.data.rejected)

    def test_storage_object_name_keeps_extension(self):
        name = storage_object_name(Path("Photo.JPG"))
        self.assertTrue(name.endswith(".jpg"))
        self.assertNotEqual(name, storage_object_name(Path("Photo.JPG")))


class TestProductRepository(unittest.TestCase):
    def test_find_all_filters(self):
        backend, client = make_backend()
        query = FakeQuery(data=[{"id": "p1", "name": "Wings", "price": "199"}])
        client.table.return_value = query
        repo = ProductRepository(backend=backend, logger=make_logger())

        products = repo.find_all(active_only=True, category=ProductCategory.CHICKEN, featured_only=True)

        client.table.assert_called_once_with("products")
        self.assertEqual(
            query.called("eq"),
            [("is_active", True), ("featured", True), ("category", "chicken")],
        )
        self.assertEqual(products[0].price, Decimal("199"))

    def test_featured_query_is_newest_first(self):
        backend, client = make_backend()
        query = FakeQuery(data=[])
        client.table.return_value = query
        ProductRepository(backend=backend, logger=make_logger()).find_all(featured_only=True)

        self.assertEqual(query.called("eq"), [("is_active", True), ("featured", True)])
        self.assertIn(("order", ("created_at",), {"desc": True}), query.calls)

    def test_find_all_returns_empty_on_backend_failure(self):
        backend, client = make_backend()
        client.table.side_effect = RuntimeError("offline")
        repo = ProductRepository(backend=backend, logger=make_logger())
        self.assertEqual(repo.find_all(), [])


if __name__ == "__main__":
    unittest.main()
