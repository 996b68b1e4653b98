"""
Sidebar navigation for the DailyLessons admin.

The menu is static and role-free: every signed-in staff member sees the same
five entries. The active entry is the best prefix match of the current path,
so `/cours/3/edit` keeps "Courses" highlighted.
"""

from typing import List, Tuple

from .base import Component


# (href, label, icon)
NAV_ITEMS: List[Tuple[str, str, str]] = [
    ("/dashboard", "Dashboard", "fa-tachometer-alt"),
    ("/users", "Users", "fa-users"),
    ("/cours", "Courses", "fa-graduation-cap"),
    ("/video", "Videos", "fa-video"),
    ("/settings", "Settings", "fa-cog"),
]


class Navigation(Component):
    def __init__(self, current_path: str = "/dashboard"):
        self.current_path = current_path or "/"

    def active_href(self) -> str:
        """Pick the single active href using best prefix match."""
        best = ""
        for href, _label, _icon in NAV_ITEMS:
            if self.current_path == href:
                return href
            if self.current_path.startswith(href + "/") and len(href) > len(best):
                best = href
        return best

    def render(self) -> str:
        active = self.active_href()
        links = "".join(self._link(href, label, icon, href == active) for href, label, icon in NAV_ITEMS)
        return f"""
    <aside class="sidebar" id="sidebar" aria-label="Sidebar">
        <div class="sidebar-header">
            {self.icon("fa-book-open")}
            <span class="sidebar-title">DailyLessons</span>
            <span class="sidebar-subtitle">Admin</span>
        </div>
        <nav class="sidebar-nav" role="navigation" aria-label="Main navigation">
            {links}
        </nav>
    </aside>"""

    def _link(self, href: str, label: str, icon: str, is_active: bool) -> str:
        attrs = self.attributes(
            href=href,
            class_=self.classes("sidebar-link", active=is_active),
            aria_current="page" if is_active else None,
        )
        return f"""
            <a {attrs}>
                {self.icon(icon)}
                <span class="nav-text">{self.escape(label)}</span>
            </a>"""
