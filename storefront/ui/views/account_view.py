"""Account View.

Profile details (name, phone, saved delivery address) and the
customer's reviews, with a form to write a new one.
"""

from __future__ import annotations

import customtkinter as ctk

from storefront.logger import StructuredLogger
from storefront.models.content import Review
from storefront.models.profile import Profile, ProfileUpdate
from storefront.models.service_models import ServiceResult
from storefront.services.account_service import AccountService
from storefront.services.auth_context import AuthContext
from storefront.services.review_service import ReviewService
from storefront.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_BUTTON,
    FONT_CARD_TITLE,
    FONT_SMALL,
    INPUT_HEIGHT,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from storefront.ui.view_base import BaseView

_PROFILE_FIELDS: tuple[tuple[str, str], ...] = (
    ("full_name", "Full name"),
    ("phone", "Phone"),
    ("address_line_1", "Address line 1"),
    ("address_line_2", "Address line 2"),
    ("city", "City"),
    ("state", "State"),
    ("postal_code", "Postal code"),
)


class AccountView(BaseView):
    """Profile form plus review history."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        auth: AuthContext,
        account: AccountService,
        reviews: ReviewService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, title="My Account", logger=logger)
        self._auth = auth
        self._account = account
        self._reviews = reviews

        body = ctk.CTkFrame(self, fg_color="transparent")
        body.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_SM)
        body.grid_columnconfigure((0, 1), weight=1)
        body.grid_rowconfigure(0, weight=1)

        # --- Profile form ---
        profile_card = ctk.CTkScrollableFrame(body, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        profile_card.grid(row=0, column=0, sticky="nsew", padx=(0, PADDING_SM))
        ctk.CTkLabel(profile_card, text="Your details", font=FONT_CARD_TITLE, text_color=TEXT_PRIMARY, anchor="w").pack(
            fill="x", padx=PADDING_MD, pady=(PADDING_MD, 0),
        )
        self._email_label = ctk.CTkLabel(profile_card, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w")
        self._email_label.pack(fill="x", padx=PADDING_MD)
        self._entries: dict[str, ctk.CTkEntry] = {}
        for key, label in _PROFILE_FIELDS:
            ctk.CTkLabel(profile_card, text=label, font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w").pack(
                fill="x", padx=PADDING_MD, pady=(PADDING_SM, 2),
            )
            entry = ctk.CTkEntry(profile_card, height=INPUT_HEIGHT)
            entry.pack(fill="x", padx=PADDING_MD)
            self._entries[key] = entry
        self._save_button = ctk.CTkButton(
            profile_card, text="Save Details", font=FONT_BUTTON, fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER, command=self._save,
        )
        self._save_button.pack(fill="x", padx=PADDING_MD, pady=PADDING_MD)

        # --- Reviews ---
        review_card = ctk.CTkFrame(body, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        review_card.grid(row=0, column=1, sticky="nsew")
        ctk.CTkLabel(review_card, text="Review the store", font=FONT_CARD_TITLE, text_color=TEXT_PRIMARY, anchor="w").pack(
            fill="x", padx=PADDING_MD, pady=(PADDING_MD, 0),
        )
        self._rating = ctk.CTkSegmentedButton(review_card, values=["1", "2", "3", "4", "5"])
        self._rating.set("5")
        self._rating.pack(anchor="w", padx=PADDING_MD, pady=PADDING_SM)
        self._review_title = ctk.CTkEntry(review_card, placeholder_text="Title", height=INPUT_HEIGHT)
        self._review_title.pack(fill="x", padx=PADDING_MD)
        self._review_comment = ctk.CTkTextbox(review_card, height=80)
        self._review_comment.pack(fill="x", padx=PADDING_MD, pady=PADDING_SM)
        ctk.CTkButton(
            review_card, text="Submit Review", font=FONT_BUTTON, fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER, command=self._submit_review,
        ).pack(fill="x", padx=PADDING_MD)
        ctk.CTkLabel(review_card, text="Your reviews", font=FONT_CARD_TITLE, text_color=TEXT_PRIMARY, anchor="w").pack(
            fill="x", padx=PADDING_MD, pady=(PADDING_MD, 0),
        )
        self._review_list = ctk.CTkScrollableFrame(review_card, fg_color="transparent")
        self._review_list.pack(fill="both", expand=True, padx=PADDING_SM, pady=PADDING_SM)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def on_show(self) -> None:
        snapshot = self._auth.snapshot()
        self._email_label.configure(text=snapshot.user.email if snapshot.user and snapshot.user.email else "")
        self._fill(snapshot.profile)
        self.run_in_background(self._reviews.list_my_reviews, self._render_reviews, name="my-reviews")

    def _fill(self, profile: Profile | None) -> None:
        for key, entry in self._entries.items():
            entry.delete(0, "end")
            value = getattr(profile, key, None) if profile is not None else None
            if value:
                entry.insert(0, value)

    def _render_reviews(self, reviews: list[Review]) -> None:
        for child in self._review_list.winfo_children():
            child.destroy()
        if not reviews:
            ctk.CTkLabel(self._review_list, text="No reviews yet.", font=FONT_SMALL, text_color=TEXT_SECONDARY).pack()
            return
        for review in reviews:
            stars = "★" * review.rating + "☆" * (5 - review.rating)
            verified = "  (verified purchase)" if review.is_verified_purchase else ""
            ctk.CTkLabel(
                self._review_list, text=f"{stars}  {review.title}{verified}", font=FONT_BODY,
                text_color=TEXT_PRIMARY, anchor="w",
            ).pack(fill="x")
            ctk.CTkLabel(
                self._review_list, text=review.comment, font=FONT_SMALL, text_color=TEXT_SECONDARY,
                anchor="w", justify="left", wraplength=320,
            ).pack(fill="x", pady=(0, PADDING_SM))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _save(self) -> None:
        update = ProfileUpdate(**{key: entry.get() for key, entry in self._entries.items()})
        self._save_button.configure(state="disabled", text="Saving...")
        self.run_in_background(lambda: self._account.save_profile(update), self._on_saved, name="profile-save")

    def _on_saved(self, result: ServiceResult[Profile]) -> None:
        self._save_button.configure(state="normal", text="Save Details")
        if result.success:
            self.show_success("Your details were saved.")
        else:
            self.show_error(result.error)

    def _submit_review(self) -> None:
        rating = int(self._rating.get() or "5")
        title = self._review_title.get()
        comment = self._review_comment.get("1.0", "end")
        self.run_in_background(
            lambda: self._reviews.submit_review(rating, title, comment),
            self._on_review_submitted,
            name="review-submit",
        )

    def _on_review_submitted(self, result: ServiceResult[Review]) -> None:
        if not result.success:
            self.show_error(result.error)
            return
        self.show_success("Thanks for your review!")
        self._review_title.delete(0, "end")
        self._review_comment.delete("1.0", "end")
        self.run_in_background(self._reviews.list_my_reviews, self._render_reviews, name="my-reviews")
