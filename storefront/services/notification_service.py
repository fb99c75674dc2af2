"""
Notification Service.

Customer order-confirmation emails and back-office alerts.  Sending is
always best effort: a failed email or alert is logged at WARNING and
never fails the operation that triggered it.

The back-office inbox (``admin_notifications``) is readable and
markable by admins only.
"""

from __future__ import annotations

from typing import Any, Optional

from storefront.access import access_denied
from storefront.backend import BackendClient
from storefront.config import AppConfig
from storefront.logger import StructuredLogger
from storefront.models.content import AdminNotification
from storefront.models.enums import NotificationType, RouteAccess
from storefront.models.order import Order
from storefront.models.service_models import ServiceResult
from storefront.repositories.content_repository import NotificationRepository
from storefront.services.auth_context import AuthContext
from storefront.services.base_service import BaseService
from storefront.utils.general import convert_to_json_safe

ORDER_CONFIRMATION_FUNCTION = "send-order-confirmation"
ADMIN_NOTIFICATION_FUNCTION = "send-admin-notification"
ADMIN_NOTIFICATION_RPC = "create_admin_notification"


class NotificationService(BaseService):
    """Sends emails and manages the back-office notification inbox.

    Parameters
    ----------
    backend:
        Shared backend client for edge functions and RPC.
    repo:
        Data access for ``admin_notifications``.
    auth:
        Source of the acting user for admin-only operations.
    config:
        Application config; ``ADMIN_NOTIFICATION_EMAIL`` enables alert emails.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        backend: BackendClient,
        repo: NotificationRepository,
        auth: AuthContext,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._backend = backend
        self._repo = repo
        self._auth = auth
        self._config = config

    # ------------------------------------------------------------------
    # Outgoing (best effort)
    # ------------------------------------------------------------------

    def send_order_confirmation(self, email: Optional[str], order: Order) -> bool:
        """Email the order summary to *email*.  Returns ``True`` when sent."""
        if not email:
            return False
        order_data = convert_to_json_safe(order.model_dump())
        try:
            self._backend.invoke_function(
                ORDER_CONFIRMATION_FUNCTION,
                {"email": email, "orderData": order_data},
            )
        except Exception as exc:
            self._logger.warning(
                "Order confirmation email failed for %s: %s", order.id, exc,
            )
            return False
        self._logger.info(
            "Order confirmation sent", extra={"order_id": order.id},
        )
        return True

    def notify_admins(
        self,
        notification_type: NotificationType,
        title: str,
        message: str,
        user_id: Optional[str] = None,
        order_id: Optional[str] = None,
    ) -> bool:
        """Record a back-office alert and email it when an address is configured.

        Returns ``True`` when the alert row was created.
        """
        params: dict[str, Any] = {
            "notification_type": str(notification_type),
            "notification_title": title,
            "notification_message": message,
            "related_user_id": user_id,
            "related_order_id": order_id,
        }
        try:
            self._backend.call_rpc(ADMIN_NOTIFICATION_RPC, params)
        except Exception as exc:
            self._logger.warning("Admin notification failed (%s): %s", title, exc)
            return False

        admin_email = self._config.ADMIN_NOTIFICATION_EMAIL
        if admin_email:
            try:
                self._backend.invoke_function(
                    ADMIN_NOTIFICATION_FUNCTION,
                    {
                        "type": str(notification_type),
                        "title": title,
                        "message": message,
                        "adminEmail": admin_email,
                    },
                )
            except Exception as exc:
                self._logger.warning("Admin alert email failed (%s): %s", title, exc)
        return True

    # ------------------------------------------------------------------
    # Back-office inbox
    # ------------------------------------------------------------------

    def list_notifications(self) -> ServiceResult[list[AdminNotification]]:
        denied = self._require_admin()
        if denied is not None:
            return denied
        try:
            return ServiceResult(success=True, data=self._repo.list_recent())
        except Exception as exc:
            self._logger.error("Failed to fetch notifications: %s", exc)
            return ServiceResult(
                success=False, error="Could not load notifications.", status_code=500,
            )

    def mark_read(self, notification_id: str) -> ServiceResult[bool]:
        denied = self._require_admin()
        if denied is not None:
            return denied
        try:
            updated = self._repo.mark_read(notification_id)
        except Exception as exc:
            self._logger.error("mark_read failed for %s: %s", notification_id, exc)
            return ServiceResult(
                success=False, error="Could not update the notification.", status_code=500,
            )
        if not updated:
            return ServiceResult(
                success=False, error="Notification not found.", status_code=404,
            )
        return ServiceResult(success=True, data=True)

    def mark_all_read(self) -> ServiceResult[int]:
        denied = self._require_admin()
        if denied is not None:
            return denied
        try:
            count = self._repo.mark_all_read()
        except Exception as exc:
            self._logger.error("mark_all_read failed: %s", exc)
            return ServiceResult(
                success=False, error="Could not update notifications.", status_code=500,
            )
        return ServiceResult(success=True, data=count)

    @staticmethod
    def unread_count(notifications: list[AdminNotification]) -> int:
        return sum(1 for n in notifications if not n.is_read)

    def _require_admin(self) -> Optional[ServiceResult[Any]]:
        return access_denied(self._auth.snapshot(), RouteAccess.ADMIN)
