"""
Submit button component.

Keeps the saving label and disabled state consistent across forms.
"""

from typing import Optional

from ..base import Component


class SubmitButton(Component):
    """Primary form action button."""

    def __init__(
        self,
        label: str,
        *,
        saving_label: str = "Saving...",
        is_saving: bool = False,
        variant: str = "primary",
        icon: Optional[str] = None,
    ) -> None:
        self.label = label
        self.saving_label = saving_label
        self.is_saving = is_saving
        self.variant = variant
        self.icon_name = icon

    def render(self) -> str:
        label = self.saving_label if self.is_saving else self.label
        attrs = self.attributes(
            type="submit",
            class_=f"btn btn-{self.variant}",
            disabled=self.is_saving,
            aria_busy="true" if self.is_saving else None,
        )
        icon_html = self.icon(self.icon_name) + " " if self.icon_name else ""
        return f"<button {attrs}>{icon_html}{self.escape(label)}</button>"
