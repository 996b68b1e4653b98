"""
Layout component for the DailyLessons admin.

Assembles the complete page: head, sidebar, header (signed-in email plus a
sign-out control) and the main content column.
"""

from typing import Optional

from .base import Component
from .navigation import Navigation


DEFAULT_ADMIN_EMAIL = "admin@dailylessons.com"


class Layout(Component):
    """Main layout component that assembles the complete page"""

    def __init__(
        self,
        title: str,
        content: str,
        *,
        email: Optional[str] = None,
        csrf_token: str = "",
        current_path: str = "/dashboard",
        show_nav: bool = True,
    ):
        """
        Args:
            title: Page title (will be escaped)
            content: Main content HTML (pre-rendered components)
            email: Signed-in principal's email; a fallback is shown when empty
            csrf_token: Token for the sign-out form
            current_path: Current URL path for active navigation highlighting
            show_nav: False for the public login and loading pages
        """
        self.title = title
        self.content = content
        self.email = email
        self.csrf_token = csrf_token
        self.current_path = current_path
        self.show_nav = show_nav

    def render(self) -> str:
        if not self.show_nav:
            body = f'<main id="main-content" class="main-content main-content--centered" role="main">{self.content}</main>'
        else:
            body = f"""
    <div class="app-shell">
        {Navigation(self.current_path).render()}
        <div class="app-column">
            {self._render_header()}
            <main id="main-content" class="main-content" role="main">
                {self.content}
            </main>
            {self._render_footer()}
        </div>
    </div>"""
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    {self._render_head()}
</head>
<body>
    <a href="#main-content" class="skip-link">Skip to main content</a>
    {body}
</body>
</html>"""

    def _render_head(self) -> str:
        return f"""
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{self.escape(self.title)} - DailyLessons Admin</title>
    <link rel="stylesheet" href="/static/css/admin.css?v=1">
    """

    def _render_header(self) -> str:
        email = self.email or DEFAULT_ADMIN_EMAIL
        return f"""
            <header class="app-header" role="banner">
                <h1 class="app-header__title">{self.escape(self.title)}</h1>
                <div class="app-header__user">
                    {self.icon("fa-user-circle")}
                    <span class="app-header__email" data-testid="header-email">{self.escape(email)}</span>
                    <form method="post" action="/logout" class="app-header__logout">
                        {self.csrf_field(self.csrf_token)}
                        <button type="submit" class="btn btn-ghost">{self.icon("fa-sign-out-alt")} Sign out</button>
                    </form>
                </div>
            </header>"""

    @staticmethod
    def _render_footer() -> str:
        return """
            <footer class="app-footer" role="contentinfo">
                <p>DailyLessons Admin</p>
            </footer>"""
