"""
Product Service.

Public catalogue reads plus the back-office product desk: create, edit,
activate/deactivate, delete, image upload and bulk import.  Every
back-office write is audit-logged.
"""

from __future__ import annotations

import mimetypes
import time
import uuid
from pathlib import Path
from typing import Optional

from storefront.access import access_denied
from storefront.backend import BackendClient
from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.auth_models import AuthSnapshot
from storefront.models.enums import ProductCategory, RouteAccess
from storefront.models.product import ImageUploadResult, Product, ProductInput
from storefront.models.service_models import ServiceResult
from storefront.repositories.product_repository import ProductRepository
from storefront.services.auth_context import AuthContext
from storefront.services.base_service import BaseService
from storefront.services.product_import import (
    ProductImportError,
    parse_product_file,
    write_import_template,
)
from storefront.utils.audit import DetailValue, log_audit_event


def storage_object_name(local_path: Path) -> str:
    """``<millis>-<random>.<ext>`` so concurrent uploads never collide."""
    ext = local_path.suffix.lstrip(".").lower() or "bin"
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:10]}.{ext}"


class ProductService(BaseService):
    """Service layer for the product catalogue.

    Parameters
    ----------
    repo:
        Data access for ``products``.
    backend:
        Shared backend client, used for image storage.
    auth:
        Source of the acting user for back-office operations.
    config:
        Image limits and the storage bucket name.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        repo: ProductRepository,
        backend: BackendClient,
        auth: AuthContext,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._repo = repo
        self._backend = backend
        self._auth = auth
        self._config = config

    # ------------------------------------------------------------------
    # Storefront reads
    # ------------------------------------------------------------------

    def list_products(
        self,
        include_inactive: bool = False,
        category: Optional[ProductCategory] = None,
    ) -> list[Product]:
        """Newest first.  Inactive products are listed for admins only."""
        if include_inactive and not self._auth.snapshot().is_admin:
            include_inactive = False
        return self._repo.find_all(active_only=not include_inactive, category=category)

    def list_featured(self) -> list[Product]:
        return self._repo.find_all(active_only=True, featured_only=True)

    def get_product(self, product_id: str) -> Optional[Product]:
        product = self._repo.get_by_id(product_id)
        if product is not None and not product.is_active and not self._auth.snapshot().is_admin:
            return None
        return product

    # ------------------------------------------------------------------
    # Back office
    # ------------------------------------------------------------------

    def create_product(self, data: ProductInput) -> ServiceResult[Product]:
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.ADMIN)
        if denied is not None:
            return denied
        try:
            product = self._repo.create(data)
        except Exception as exc:
            self._logger.error("Product create failed: %s", exc)
            return ServiceResult(success=False, error="Could not create the product.", status_code=500)

        self._audit(snapshot, "CREATE_PRODUCT", product.id, {"name": product.name})
        return ServiceResult(success=True, data=product)

    def update_product(self, product_id: str, data: ProductInput) -> ServiceResult[Product]:
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.ADMIN)
        if denied is not None:
            return denied
        try:
            product = self._repo.update(product_id, data.model_dump())
        except Exception as exc:
            self._logger.error("Product update failed for %s: %s", product_id, exc)
            return ServiceResult(success=False, error="Could not update the product.", status_code=500)
        if product is None:
            return ServiceResult(success=False, error="Product not found.", status_code=404)

        self._audit(snapshot, "UPDATE_PRODUCT", product_id, {"name": product.name})
        return ServiceResult(success=True, data=product)

    def toggle_product_status(self, product_id: str) -> ServiceResult[Product]:
        """Flip ``is_active``; deactivated products vanish from the storefront."""
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.ADMIN)
        if denied is not None:
            return denied

        current = self._repo.get_by_id(product_id)
        if current is None:
            return ServiceResult(success=False, error="Product not found.", status_code=404)
        try:
            product = self._repo.update(product_id, {"is_active": not current.is_active})
        except Exception as exc:
            self._logger.error("Product toggle failed for %s: %s", product_id, exc)
            return ServiceResult(success=False, error="Could not update the product.", status_code=500)
        if product is None:
            return ServiceResult(success=False, error="Product not found.", status_code=404)

        self._audit(snapshot, "TOGGLE_PRODUCT", product_id, {"is_active": product.is_active})
        return ServiceResult(success=True, data=product)

    def delete_product(self, product_id: str) -> ServiceResult[bool]:
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.ADMIN)
        if denied is not None:
            return denied
        try:
            deleted = self._repo.delete(product_id)
        except Exception as exc:
            self._logger.error("Product delete failed for %s: %s", product_id, exc)
            return ServiceResult(success=False, error="Could not delete the product.", status_code=500)
        if not deleted:
            return ServiceResult(success=False, error="Product not found.", status_code=404)

        self._audit(snapshot, "DELETE_PRODUCT", product_id)
        return ServiceResult(success=True, data=True)

    def upload_product_images(
        self,
        paths: list[Path],
        existing_count: int = 0,
    ) -> ServiceResult[ImageUploadResult]:
        """Upload product photos and return their public URLs.

        Files that are not images, exceed the size limit, or would take the
        product past its image limit are skipped and listed in
        ``rejected`` with the reason.
        """
        denied = access_denied(self._auth.snapshot(), RouteAccess.ADMIN)
        if denied is not None:
            return denied

        result = ImageUploadResult()
        slots = max(self._config.MAX_IMAGES_PER_PRODUCT - existing_count, 0)
        for path in paths:
            reason = self._image_rejection(path)
            if reason is None and len(result.urls) >= slots:
                reason = f"A product can have at most {self._config.MAX_IMAGES_PER_PRODUCT} images."
            if reason is not None:
                result.rejected[path.name] = reason
                continue
            try:
                url = self._backend.upload_file(
                    self._config.PRODUCT_IMAGE_BUCKET,
                    f"product-images/{storage_object_name(path)}",
                    path,
                )
            except Exception as exc:
                self._logger.error("Image upload failed for %s: %s", path.name, exc)
                result.rejected[path.name] = "Upload failed."
                continue
            result.urls.append(url)

        if not result.urls and result.rejected:
            return ServiceResult(
                success=False,
                data=result,
                error="No images were uploaded.",
                status_code=400,
            )
        return ServiceResult(success=True, data=result)

    def import_products(self, path: Path) -> ServiceResult[list[Product]]:
        """Create every product in a ``.csv``/``.xlsx`` file, or none of them."""
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.ADMIN)
        if denied is not None:
            return denied

        try:
            items = parse_product_file(path)
        except ProductImportError as exc:
            self._logger.warning("Product import rejected %s: %s", path.name, exc)
            return ServiceResult(success=False, error=str(exc), status_code=400)
        except PermissionError:
            return ServiceResult(
                success=False,
                error="The file is open in another program. Close it and try again.",
                status_code=423,
            )
        except OSError as exc:
            self._logger.error("Could not read import file %s: %s", path, exc)
            return ServiceResult(success=False, error=f"Could not read the file: {exc}", status_code=400)

        try:
            created = self._repo.create_many(items)
        except Exception as exc:
            self._logger.error("Bulk product insert failed: %s", exc)
            return ServiceResult(success=False, error="Could not import the products.", status_code=500)

        self._audit(
            snapshot, "IMPORT_PRODUCTS", path.name,
            {"file": path.name, "count": len(created)},
        )
        return ServiceResult(success=True, data=created)

    def write_import_template(self, path: Path) -> ServiceResult[Path]:
        try:
            return ServiceResult(success=True, data=write_import_template(path))
        except OSError as exc:
            self._logger.error("Could not write import template to %s: %s", path, exc)
            return ServiceResult(success=False, error=f"Could not save the template: {exc}", status_code=500)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _image_rejection(self, path: Path) -> Optional[str]:
        mime_type = mimetypes.guess_type(path.name)[0]
        if mime_type is None or not mime_type.startswith("image/"):
            return "Only image files can be uploaded."
        try:
            size = path.stat().st_size
        except OSError:
            return "File not found."
        if size > self._config.max_image_size_bytes:
            return f"Images must be {self._config.MAX_IMAGE_SIZE_MB} MB or smaller."
        return None

    def _audit(
        self,
        snapshot: AuthSnapshot,
        action: str,
        entity_id: str,
        details: Optional[dict[str, DetailValue]] = None,
    ) -> None:
        log_audit_event(
            logger=self._logger,
            action=action,
            entity_type="Product",
            entity_id=entity_id,
            user_id=snapshot.user.id if snapshot.user else None,
            details=details,
        )
