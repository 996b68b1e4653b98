"""
Base Component class for the DailyLessons admin UI.

Every page fragment is a small Python object with a `render()` method that
returns an HTML string. Values are escaped here, in one place.
"""

from typing import Any, Optional
import html


class Component:
    """Base class for all UI components.

    Subclasses keep their inputs as attributes and build markup in `render()`.
    """

    def render(self) -> str:
        raise NotImplementedError("Subclasses must implement render()")

    @staticmethod
    def escape(text: Optional[Any]) -> str:
        """Escape HTML entities; None renders as an empty string."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def classes(*args: str, **conditionals: bool) -> str:
        """Join CSS classes, adding each keyword class whose value is true.

        Example:
            >>> Component.classes("badge", "badge--green", muted=True, active=False)
            "badge badge--green muted"
        """
        names = [name for name in args if name]
        names.extend(key.replace("_", "-") for key, value in conditionals.items() if value)
        return " ".join(names)

    @staticmethod
    def attributes(**attrs: Any) -> str:
        """Build an HTML attribute string.

        `class_`/`for_` lose the trailing underscore; other underscores become
        hyphens (`data_id` -> `data-id`). True renders a bare boolean attribute;
        False and None are dropped.
        """
        result = []
        for key, value in attrs.items():
            key = key[:-1] if key.endswith("_") else key.replace("_", "-")
            if value is True:
                result.append(key)
            elif value is not False and value is not None:
                result.append(f'{key}="{html.escape(str(value))}"')
        return " ".join(result)

    @staticmethod
    def icon(name: str, *extra: str) -> str:
        """Icon placeholder rendered as CSS class tokens (`fas fa-video`)."""
        classes = " ".join(["fas", name, *extra]).strip()
        return f'<i class="{html.escape(classes)}" aria-hidden="true"></i>'

    @staticmethod
    def csrf_field(token: str) -> str:
        return f'<input type="hidden" name="csrf_token" value="{html.escape(token or "")}">'
