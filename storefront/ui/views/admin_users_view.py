"""Admin Users View: profiles with a role selector per row."""

from __future__ import annotations

import customtkinter as ctk

from storefront.logger import StructuredLogger
from storefront.models.enums import UserRole
from storefront.models.profile import Profile
from storefront.models.service_models import ServiceResult
from storefront.services.auth_context import AuthContext
from storefront.services.user_admin_service import UserAdminService
from storefront.ui.theme import (
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_SMALL,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from storefront.ui.view_base import BaseView


class AdminUsersView(BaseView):
    """Back-office user list; admins may promote or demote other users."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        users: UserAdminService,
        auth: AuthContext,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, title="Manage Users", logger=logger)
        self._users = users
        self._auth = auth

        self._list = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._list.pack(fill="both", expand=True, padx=PADDING_LG, pady=(PADDING_SM, PADDING_LG))

    def on_show(self) -> None:
        self.run_in_background(self._users.list_users, self._render, name="admin-users")

    def _render(self, result: ServiceResult[list[Profile]]) -> None:
        for child in self._list.winfo_children():
            child.destroy()
        if not result.success:
            self.show_error(result.error)
            return
        self.clear_status()
        snapshot = self._auth.snapshot()
        own_id = snapshot.user.id if snapshot.user else None
        for profile in result.data or []:
            self._user_row(profile, is_self=profile.id == own_id)

    def _user_row(self, profile: Profile, is_self: bool) -> None:
        row = ctk.CTkFrame(self._list, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        row.pack(fill="x", pady=3)
        ctk.CTkLabel(
            row, text=profile.full_name or "(no name)", font=FONT_BODY, text_color=TEXT_PRIMARY,
            anchor="w", width=200,
        ).pack(side="left", padx=PADDING_MD, pady=PADDING_SM)
        ctk.CTkLabel(
            row, text=profile.email or "", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(side="left", fill="x", expand=True)

        role = ctk.CTkOptionMenu(
            row,
            values=[str(r) for r in UserRole],
            width=110,
            command=lambda value: self._change_role(profile, value),
        )
        role.set(str(profile.role))
        if is_self:
            # Own role is read-only here.
            role.configure(state="disabled")
        role.pack(side="right", padx=PADDING_MD)

    def _change_role(self, profile: Profile, new_role: str) -> None:
        if new_role == profile.role:
            return
        self.show_status(f"Changing {profile.email or profile.id} to {new_role}...")
        self.run_in_background(
            lambda: self._users.update_user_role(profile.id, new_role),
            self._on_role_changed,
            name="role-change",
        )

    def _on_role_changed(self, result: ServiceResult[Profile]) -> None:
        if result.success and result.data is not None:
            self.show_success(f"{result.data.email or result.data.id} is now {result.data.role}.")
        else:
            self.show_error(result.error)
        self.run_in_background(self._users.list_users, self._render, name="admin-users")
