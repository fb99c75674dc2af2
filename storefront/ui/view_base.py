"""Base Frame for Routed Views.

Views never call the backend on the Tk thread.  ``run_in_background``
runs the work on a short-lived daemon thread and hands the result back
to the main loop with ``after(0, ...)``; a view that has been destroyed
in the meantime simply drops the result.

``on_show`` is called by the shell every time the route becomes
visible, so views reload their data there rather than in ``__init__``.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional, TypeVar

import customtkinter as ctk

from storefront.logger import StructuredLogger
from storefront.ui.theme import (
    CONTENT_BG,
    ERROR_TEXT,
    FONT_HEADING,
    FONT_SMALL,
    PADDING_LG,
    PADDING_SM,
    SUCCESS_TEXT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

T = TypeVar("T")


class BaseView(ctk.CTkFrame):
    """Common scaffolding: a heading, a status line and background calls.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    title:
        Heading shown at the top of the view.
    logger:
        Structured logger instance.
    """

    def __init__(self, parent: ctk.CTkFrame, title: str, logger: StructuredLogger) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._logger = logger
        self._destroyed = False

        header = ctk.CTkFrame(self, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        self._title_label = ctk.CTkLabel(
            header, text=title, font=FONT_HEADING, text_color=TEXT_PRIMARY, anchor="w",
        )
        self._title_label.pack(side="left")
        self._header_actions = ctk.CTkFrame(header, fg_color="transparent")
        self._header_actions.pack(side="right")

        self._status_label = ctk.CTkLabel(
            self, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w",
        )
        self._status_label.pack(fill="x", padx=PADDING_LG)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def on_show(self) -> None:
        """Called by the shell whenever this view becomes visible."""

    def destroy(self) -> None:
        self._destroyed = True
        super().destroy()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def run_in_background(
        self,
        work: Callable[[], T],
        on_done: Callable[[T], None],
        name: str = "view-worker",
    ) -> None:
        """Run *work* off the Tk thread and pass its result to *on_done* on it."""

        def _runner() -> None:
            try:
                result = work()
            except Exception as exc:
                self._logger.error("Background task %s failed: %s", name, exc, exc_info=True)
                message = f"Something went wrong: {exc}"
                self._dispatch(lambda: self.show_error(message))
                return
            self._dispatch(lambda: on_done(result))

        threading.Thread(target=_runner, name=name, daemon=True).start()

    def _dispatch(self, callback: Callable[[], None]) -> None:
        if self._destroyed:
            return
        try:
            self.after(0, self._guarded(callback))
        except RuntimeError:
            # Main loop already gone (window closing).
            pass

    def _guarded(self, callback: Callable[[], None]) -> Callable[[], None]:
        def _call() -> None:
            if not self._destroyed:
                callback()
        return _call

    def show_status(self, message: str) -> None:
        self._status_label.configure(text=message, text_color=TEXT_SECONDARY)

    def show_error(self, message: Optional[str]) -> None:
        self._status_label.configure(text=message or "Something went wrong.", text_color=ERROR_TEXT)

    def show_success(self, message: str) -> None:
        self._status_label.configure(text=message, text_color=SUCCESS_TEXT)

    def clear_status(self) -> None:
        self._status_label.configure(text="")
