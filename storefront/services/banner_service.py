"""
Banner Service.

Hero banners on the storefront home page.  Customers see banners that
are both active and published; the back office sees and edits all of
them.
"""

from __future__ import annotations

from pathlib import Path

from storefront.access import access_denied
from storefront.backend import BackendClient
from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.content import Banner, BannerUpdate
from storefront.models.enums import RouteAccess
from storefront.models.service_models import ServiceResult
from storefront.repositories.content_repository import BannerRepository
from storefront.services.auth_context import AuthContext
from storefront.services.base_service import BaseService
from storefront.services.product_service import storage_object_name
from storefront.utils.audit import log_audit_event


class BannerService(BaseService):
    """Service layer for home-page banners."""

    def __init__(
        self,
        repo: BannerRepository,
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

    def list_published(self) -> list[Banner]:
        """Active and published banners by ``display_order``."""
        return self._repo.find_all(published_only=True)

    def list_all(self) -> ServiceResult[list[Banner]]:
        denied = access_denied(self._auth.snapshot(), RouteAccess.ADMIN)
        if denied is not None:
            return denied
        return ServiceResult(success=True, data=self._repo.find_all(published_only=False))

    def update_banner(self, banner_id: str, update: BannerUpdate) -> ServiceResult[Banner]:
        snapshot = self._auth.snapshot()
        denied = access_denied(snapshot, RouteAccess.ADMIN)
        if denied is not None:
            return denied

        values = update.model_dump(exclude_none=True)
        if not values:
            return ServiceResult(success=False, error="Nothing to update.", status_code=400)
        try:
            banner = self._repo.update(banner_id, values)
        except Exception as exc:
            self._logger.error("Banner update failed for %s: %s", banner_id, exc)
            return ServiceResult(success=False, error="Could not update the banner.", status_code=500)
        if banner is None:
            return ServiceResult(success=False, error="Banner not found.", status_code=404)

        log_audit_event(
            logger=self._logger,
            action="UPDATE_BANNER",
            entity_type="Banner",
            entity_id=banner_id,
            user_id=snapshot.user.id if snapshot.user else None,
            details={"fields": ",".join(sorted(values))},
        )
        return ServiceResult(success=True, data=banner)

    def upload_banner_image(self, banner_id: str, path: Path) -> ServiceResult[Banner]:
        """Upload *path* and point the banner's ``image_url`` at it."""
        denied = access_denied(self._auth.snapshot(), RouteAccess.ADMIN)
        if denied is not None:
            return denied

        if not path.is_file():
            return ServiceResult(success=False, error="File not found.", status_code=400)
        if path.stat().st_size > self._config.max_image_size_bytes:
            return ServiceResult(
                success=False,
                error=f"Choose an image of {self._config.MAX_IMAGE_SIZE_MB} MB or smaller.",
                status_code=400,
            )
        try:
            url = self._backend.upload_file(
                self._config.PRODUCT_IMAGE_BUCKET,
                f"banners/{storage_object_name(path)}",
                path,
            )
        except Exception as exc:
            self._logger.error("Banner image upload failed for %s: %s", banner_id, exc)
            return ServiceResult(success=False, error="Could not upload the image.", status_code=500)
        return self.update_banner(banner_id, BannerUpdate(image_url=url))
