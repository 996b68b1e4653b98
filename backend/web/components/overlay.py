"""
Overlay and confirmation components.

Overlays are addressable pages (`/<screen>/new`, `/<screen>/{id}/edit`)
rendered on top of the list; closing one is a plain link back to the list.
"""

from .base import Component
from .forms.submit import SubmitButton


class Overlay(Component):
    def __init__(self, title: str, body: str, *, close_href: str):
        self.title = title
        self.body = body
        self.close_href = close_href

    def render(self) -> str:
        return f"""
        <div class="overlay" role="dialog" aria-modal="true" aria-labelledby="overlay-title" data-testid="overlay">
            <div class="overlay__panel">
                <div class="overlay__header">
                    <h2 id="overlay-title">{self.escape(self.title)}</h2>
                    <a href="{self.escape(self.close_href)}" class="overlay__close" aria-label="Close">{self.icon("fa-times")}</a>
                </div>
                {self.body}
            </div>
        </div>"""


class ConfirmDialog(Component):
    """Destructive-action confirmation. Only the POST with confirm=yes deletes."""

    def __init__(self, message: str, *, action: str, cancel_href: str, csrf_token: str):
        self.message = message
        self.action = action
        self.cancel_href = cancel_href
        self.csrf_token = csrf_token

    def render(self) -> str:
        body = f"""
                <p class="confirm__message">{self.escape(self.message)}</p>
                <form method="post" action="{self.escape(self.action)}" class="confirm__form">
                    {self.csrf_field(self.csrf_token)}
                    <input type="hidden" name="confirm" value="yes">
                    <div class="form-actions">
                        <a href="{self.escape(self.cancel_href)}" class="btn btn-ghost">Cancel</a>
                        {SubmitButton("Delete", variant="danger", icon="fa-trash").render()}
                    </div>
                </form>"""
        return Overlay("Confirm deletion", body, close_href=self.cancel_href).render()
