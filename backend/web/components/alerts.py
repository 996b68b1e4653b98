"""
Page-level messages: error banner (optionally with hints and a retry link)
and the loading placeholder shown while a session probe is in flight.
"""

from typing import Optional, Sequence

from .base import Component


class ErrorBanner(Component):
    def __init__(self, message: str, *, hints: Sequence[str] = (), retry_href: Optional[str] = None):
        self.message = message
        self.hints = hints
        self.retry_href = retry_href

    def render(self) -> str:
        hints_html = ""
        if self.hints:
            items = "".join(f"<li>{self.escape(hint)}</li>" for hint in self.hints)
            hints_html = f'<div class="alert__hints"><p>Things to check:</p><ul>{items}</ul></div>'
        retry_html = ""
        if self.retry_href:
            retry_html = f'<a href="{self.escape(self.retry_href)}" class="btn btn-secondary" data-testid="retry-link">Retry</a>'
        return f"""
        <div class="alert alert-error" role="alert" data-testid="page-error">
            <p>{self.escape(self.message)}</p>
            {hints_html}
            {retry_html}
        </div>"""


class LoadingPlaceholder(Component):
    """Shown while the session is still being resolved; reloads itself."""

    def __init__(self, label: str = "Loading...", *, refresh_seconds: int = 1):
        self.label = label
        self.refresh_seconds = refresh_seconds

    def render(self) -> str:
        return f"""
        <meta http-equiv="refresh" content="{int(self.refresh_seconds)}">
        <div class="loading-placeholder" role="status" aria-live="polite" data-testid="loading">
            {self.icon("fa-spinner", "fa-spin")}
            <p>{self.escape(self.label)}</p>
        </div>"""
