from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from fastapi import Response

    from normform_html.view import View


class NormForm(Protocol):
    """Anything `run_form` can drive through the form lifecycle."""

    current_view: "View | None"

    def is_form_submission(self) -> bool: ...

    def is_valid(self) -> bool: ...

    def business(self) -> None: ...

    def show(self) -> "Response": ...
