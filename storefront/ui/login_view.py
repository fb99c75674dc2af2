"""Login View.

Sign In / Create Account tabs plus an inline phone-verified password
reset.  Shown by the shell in place of any route the guard redirects.

**Thin UI Rule**: this module gathers inputs, delegates to
``AuthContext`` / ``AccountService`` and displays results.  A successful
sign-in does not navigate anywhere itself: the backend's ``SIGNED_IN``
event reaches the shell through the auth listener, and the shell
re-runs the route guard.
"""

from __future__ import annotations

import threading
import tkinter as tk
from typing import Callable, Optional

import customtkinter as ctk

from storefront.logger import StructuredLogger
from storefront.services.account_service import AccountService
from storefront.services.auth_context import AuthContext
from storefront.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_LABEL,
    FONT_SMALL,
    INPUT_BG,
    INPUT_BORDER,
    INPUT_HEIGHT,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_CARD_WIDTH: int = 420
_BUTTON_HEIGHT: int = 44
_SIGN_IN_TEXT: str = "Sign In  →"
_SIGN_UP_TEXT: str = "Create Account  →"


class LoginView(ctk.CTkFrame):
    """Centered login card.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    auth:
        Auth context handling sign-in and sign-up.
    account_service:
        Handles the password reset.
    logger:
        Structured logger instance.
    message:
        Optional notice shown above the form (e.g. why the user landed here).
    on_cancel:
        When given, a "Continue shopping" link calls it.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth: AuthContext,
        account_service: AccountService,
        logger: StructuredLogger,
        message: Optional[str] = None,
        on_cancel: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._auth = auth
        self._account_service = account_service
        self._logger = logger
        self._on_cancel = on_cancel
        self._active_tab: str = ""

        self._build_ui(message)
        self._switch_tab("sign_in")

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_ui(self, message: Optional[str]) -> None:
        card = ctk.CTkFrame(
            self, width=_CARD_WIDTH, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS,
        )
        card.place(relx=0.5, rely=0.45, anchor="center")

        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_LG)

        ctk.CTkLabel(
            inner, text="Welcome", font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).pack(fill="x")
        self._notice_label = ctk.CTkLabel(
            inner, text=message or "", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=_CARD_WIDTH - 40,
        )
        if message:
            self._notice_label.pack(fill="x", pady=(PADDING_SM, 0))

        # --- Tabs ---
        tabs = ctk.CTkFrame(inner, fg_color="transparent")
        tabs.pack(fill="x", pady=PADDING_MD)
        self._sign_in_tab = self._tab_button(tabs, "Sign In", lambda: self._switch_tab("sign_in"))
        self._sign_in_tab.pack(side="left", expand=True, fill="x", padx=(0, 4))
        self._sign_up_tab = self._tab_button(tabs, "Create Account", lambda: self._switch_tab("sign_up"))
        self._sign_up_tab.pack(side="left", expand=True, fill="x", padx=(4, 0))

        self._forms = ctk.CTkFrame(inner, fg_color="transparent", width=_CARD_WIDTH - 2 * PADDING_LG)
        self._forms.pack(fill="both", expand=True)

        self._sign_in_frame = ctk.CTkFrame(self._forms, fg_color="transparent")
        self._build_sign_in_tab(self._sign_in_frame)
        self._sign_up_frame = ctk.CTkFrame(self._forms, fg_color="transparent")
        self._build_sign_up_tab(self._sign_up_frame)

        if self._on_cancel is not None:
            ctk.CTkButton(
                inner, text="Continue shopping", font=FONT_SMALL, fg_color="transparent",
                text_color=TEXT_SECONDARY, hover_color=CONTENT_BG, command=self._on_cancel,
            ).pack(pady=(PADDING_SM, 0))

    def _build_sign_in_tab(self, parent: ctk.CTkFrame) -> None:
        self._email_entry = self._labeled_entry(parent, "EMAIL", "you@example.com")
        self._password_entry = self._labeled_entry(parent, "PASSWORD", "Password", secret=True)
        self._password_entry.bind("<Return>", self._on_enter_key)

        self._login_button = self._primary_button(parent, _SIGN_IN_TEXT, self._handle_login)
        self._error_label = ctk.CTkLabel(
            parent, text="", font=FONT_SMALL, text_color=ERROR_TEXT, wraplength=_CARD_WIDTH - 40,
        )

        ctk.CTkButton(
            parent, text="Forgot password?", font=FONT_SMALL, fg_color="transparent",
            text_color=ACCENT_PRIMARY, hover_color=CONTENT_CARD_BG,
            command=self._show_forgot_password,
        ).pack(anchor="e", pady=(PADDING_SM, 0))

        self._forgot_frame = ctk.CTkFrame(parent, fg_color="transparent")
        self._reset_email_entry = self._labeled_entry(self._forgot_frame, "ACCOUNT EMAIL", "you@example.com")
        self._reset_phone_entry = self._labeled_entry(self._forgot_frame, "PHONE", "Registered phone number")
        self._reset_code_entry = self._labeled_entry(self._forgot_frame, "VERIFICATION CODE", "Code")
        self._reset_password_entry = self._labeled_entry(
            self._forgot_frame, "NEW PASSWORD", "At least 6 characters", secret=True,
        )
        self._reset_button = self._primary_button(
            self._forgot_frame, "Reset Password", self._handle_reset_password,
        )
        self._reset_message_label = ctk.CTkLabel(
            self._forgot_frame, text="", font=FONT_SMALL, wraplength=_CARD_WIDTH - 40,
        )
        self._reset_message_label.pack(fill="x")

    def _build_sign_up_tab(self, parent: ctk.CTkFrame) -> None:
        self._su_name_entry = self._labeled_entry(parent, "FULL NAME", "Your name")
        self._su_email_entry = self._labeled_entry(parent, "EMAIL", "you@example.com")
        self._su_password_entry = self._labeled_entry(
            parent, "PASSWORD", "At least 6 characters", secret=True,
        )
        self._su_button = self._primary_button(parent, _SIGN_UP_TEXT, self._handle_sign_up)
        self._su_message_label = ctk.CTkLabel(
            parent, text="", font=FONT_SMALL, wraplength=_CARD_WIDTH - 40,
        )
        self._su_message_label.pack(fill="x")

    # ------------------------------------------------------------------
    # Widget factories
    # ------------------------------------------------------------------

    @staticmethod
    def _tab_button(parent: ctk.CTkFrame, text: str, command: Callable[[], None]) -> ctk.CTkButton:
        return ctk.CTkButton(
            parent, text=text, font=FONT_BODY, height=38, fg_color="transparent",
            text_color=TEXT_SECONDARY, hover_color=CONTENT_BG, border_width=1,
            border_color=INPUT_BORDER, corner_radius=CORNER_RADIUS, command=command,
        )

    @staticmethod
    def _labeled_entry(
        parent: ctk.CTkFrame, label: str, placeholder: str, secret: bool = False,
    ) -> ctk.CTkEntry:
        ctk.CTkLabel(
            parent, text=label, font=FONT_LABEL, text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", pady=(PADDING_SM, 2))
        entry = ctk.CTkEntry(
            parent, placeholder_text=placeholder, height=INPUT_HEIGHT, font=FONT_BODY,
            fg_color=INPUT_BG, border_color=INPUT_BORDER, show="•" if secret else "",
        )
        entry.pack(fill="x")
        return entry

    @staticmethod
    def _primary_button(
        parent: ctk.CTkFrame, text: str, command: Callable[[], None],
    ) -> ctk.CTkButton:
        button = ctk.CTkButton(
            parent, text=text, font=FONT_BUTTON, height=_BUTTON_HEIGHT,
            fg_color=ACCENT_PRIMARY, hover_color=ACCENT_HOVER, text_color=TEXT_LIGHT,
            corner_radius=CORNER_RADIUS, command=command,
        )
        button.pack(fill="x", pady=(PADDING_MD, PADDING_SM))
        return button

    # ------------------------------------------------------------------
    # Tab switching
    # ------------------------------------------------------------------

    def _switch_tab(self, tab: str) -> None:
        if tab == self._active_tab:
            return
        self._active_tab = tab
        active, inactive = (
            (self._sign_in_tab, self._sign_up_tab) if tab == "sign_in"
            else (self._sign_up_tab, self._sign_in_tab)
        )
        active.configure(text_color=ACCENT_PRIMARY, border_color=ACCENT_PRIMARY, border_width=2)
        inactive.configure(text_color=TEXT_SECONDARY, border_color=INPUT_BORDER, border_width=1)

        if tab == "sign_in":
            self._sign_up_frame.pack_forget()
            self._sign_in_frame.pack(fill="both", expand=True)
        else:
            self._sign_in_frame.pack_forget()
            self._sign_up_frame.pack(fill="both", expand=True)

    def show_message(self, message: str) -> None:
        self._notice_label.configure(text=message)
        if not self._notice_label.winfo_manager():
            self._notice_label.pack(fill="x", pady=(PADDING_SM, 0))

    # ------------------------------------------------------------------
    # Sign in
    # ------------------------------------------------------------------

    def _on_enter_key(self, event: tk.Event[tk.Misc]) -> None:
        self._handle_login()

    def _handle_login(self) -> None:
        email = self._email_entry.get().strip()
        password = self._password_entry.get()
        if not email or not password:
            self._show_error("Please enter email and password.")
            return

        self._login_button.configure(text="Signing in...", state="disabled")
        self._clear_error()
        threading.Thread(
            target=self._authenticate, args=(email, password), name="sign-in", daemon=True,
        ).start()

    def _authenticate(self, email: str, password: str) -> None:
        """Background thread: delegate to ``AuthContext.sign_in``."""
        try:
            result = self._auth.sign_in(email, password)
            if not result.success:
                message = result.error_message or "Sign in failed."
                self.after(0, lambda: self._show_error(message))
        except Exception as exc:
            error_msg = str(exc)
            self.after(0, lambda msg=error_msg: self._show_error(f"Sign in failed: {msg}"))
        finally:
            self.after(
                0, lambda: self._login_button.configure(text=_SIGN_IN_TEXT, state="normal"),
            )

    # ------------------------------------------------------------------
    # Sign up
    # ------------------------------------------------------------------

    def _handle_sign_up(self) -> None:
        full_name = self._su_name_entry.get().strip()
        email = self._su_email_entry.get().strip()
        password = self._su_password_entry.get()
        if not email or not password:
            self._show_su_message("Email and password are required.", ok=False)
            return

        self._su_button.configure(text="Creating account...", state="disabled")

        def do_sign_up() -> None:
            try:
                result = self._auth.sign_up(email, password, full_name or None)

                def show_result() -> None:
                    if result.success:
                        self._show_su_message(
                            "Account created! Check your email to verify it, then sign in.",
                            ok=True,
                        )
                        self._su_password_entry.delete(0, "end")
                        self.after(3000, lambda: self._switch_tab("sign_in"))
                    else:
                        self._show_su_message(result.error_message or "Sign up failed.", ok=False)

                self.after(0, show_result)
            finally:
                self.after(
                    0, lambda: self._su_button.configure(text=_SIGN_UP_TEXT, state="normal"),
                )

        threading.Thread(target=do_sign_up, name="sign-up", daemon=True).start()

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    def _show_forgot_password(self) -> None:
        if self._forgot_frame.winfo_manager():
            self._forgot_frame.pack_forget()
        else:
            self._forgot_frame.pack(fill="x", pady=(PADDING_SM, 0))
            self._reset_message_label.configure(text="")

    def _handle_reset_password(self) -> None:
        email = self._reset_email_entry.get()
        phone = self._reset_phone_entry.get()
        code = self._reset_code_entry.get()
        new_password = self._reset_password_entry.get()

        self._reset_button.configure(text="Resetting...", state="disabled")

        def do_reset() -> None:
            result = self._account_service.reset_password(email, phone, code, new_password)

            def show_reset_result() -> None:
                if result.success:
                    self._reset_message_label.configure(
                        text="Password updated. You can sign in now.", text_color=SUCCESS_TEXT,
                    )
                    self._reset_password_entry.delete(0, "end")
                else:
                    self._reset_message_label.configure(
                        text=result.error or "Reset failed.", text_color=ERROR_TEXT,
                    )
                self._reset_button.configure(text="Reset Password", state="normal")

            self.after(0, show_reset_result)

        threading.Thread(target=do_reset, name="password-reset", daemon=True).start()

    # ------------------------------------------------------------------
    # UI helpers
    # ------------------------------------------------------------------

    def _show_error(self, message: str) -> None:
        self._error_label.configure(text=message)
        self._error_label.pack(fill="x", after=self._login_button)

    def _clear_error(self) -> None:
        self._error_label.configure(text="")
        self._error_label.pack_forget()

    def _show_su_message(self, message: str, ok: bool) -> None:
        self._su_message_label.configure(
            text=message, text_color=SUCCESS_TEXT if ok else ERROR_TEXT,
        )
