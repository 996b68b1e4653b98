"""
Form field components.

Each field renders label, control, optional help text and an inline error in
one consistent wrapper.
"""

from typing import Iterable, Optional, Tuple

from ..base import Component


class FormField(Component):
    """Wrapper that renders label, input slot, help, and error text."""

    def __init__(
        self,
        field_id: str,
        label: str,
        *,
        required: bool = False,
        help_text: Optional[str] = None,
        error_text: Optional[str] = None,
    ) -> None:
        self.field_id = field_id
        self.label = label
        self.required = required
        self.help_text = help_text
        self.error_text = error_text

    def _aria(self) -> dict:
        return {
            "aria_describedby": f"{self.field_id}-help" if self.help_text else None,
            "aria_invalid": "true" if self.error_text else "false",
        }

    def _note(self, kind: str, text: Optional[str]) -> str:
        if not text:
            return ""
        role = ' role="alert"' if kind == "error" else ""
        return f'<p class="form-{kind}"{role} id="{self.field_id}-{kind}">{self.escape(text)}</p>'

    def render(self, input_html: str) -> str:
        marker = '<span class="form-required" aria-hidden="true">*</span>' if self.required else ""
        label = f'<label {self.attributes(for_=self.field_id, class_="form-label")}>{self.escape(self.label)}{marker}</label>'
        return (
            f'<div class="form-field">{label}{input_html}'
            f'{self._note("help", self.help_text)}{self._note("error", self.error_text)}</div>'
        )


class TextInputField(FormField):
    """Single-line input (`text`, `email`, `password`, `url`)."""

    def render(
        self,
        *,
        value: str = "",
        input_type: str = "text",
        autocomplete: Optional[str] = None,
        placeholder: Optional[str] = None,
        **attrs: str,
    ) -> str:
        input_attrs = self.attributes(
            id=self.field_id,
            name=self.field_id,
            type=input_type,
            value=value,
            autocomplete=autocomplete,
            placeholder=placeholder,
            required=self.required,
            class_="form-input",
            **self._aria(),
            **attrs,
        )
        return super().render(f"<input {input_attrs}>")


class TextAreaField(FormField):
    def render(self, value: str = "", rows: int = 4, placeholder: Optional[str] = None) -> str:
        textarea_attrs = self.attributes(
            id=self.field_id,
            name=self.field_id,
            rows=str(rows),
            placeholder=placeholder,
            class_="form-input",
            **self._aria(),
        )
        return super().render(f"<textarea {textarea_attrs}>{self.escape(value)}</textarea>")


class SelectField(FormField):
    """Select box; `options` are (value, label) pairs.

    An empty `prompt` option is rendered first when given, so "nothing chosen"
    submits an empty value that the presence check rejects.
    """

    def render(self, options: Iterable[Tuple[str, str]], *, value: str = "", prompt: Optional[str] = None) -> str:
        items = []
        if prompt is not None:
            items.append(f'<option value="">{self.escape(prompt)}</option>')
        for option_value, option_label in options:
            selected = " selected" if str(option_value) == str(value) else ""
            items.append(
                f'<option value="{self.escape(option_value)}"{selected}>{self.escape(option_label)}</option>'
            )
        select_attrs = self.attributes(
            id=self.field_id,
            name=self.field_id,
            required=self.required,
            class_="form-input",
            **self._aria(),
        )
        return super().render(f"<select {select_attrs}>{''.join(items)}</select>")
