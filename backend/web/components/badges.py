"""
Badge components for difficulty and role labels.

The label/color/icon rules live in `backoffice.labels`; these components only
turn them into markup.
"""

from typing import Optional

from backoffice import labels
from .base import Component


class Badge(Component):
    def __init__(self, label: str, color: str, icon: Optional[str] = None, *, testid: Optional[str] = None):
        self.label = label
        self.color = color
        self.icon_name = icon
        self.testid = testid

    def render(self) -> str:
        attrs = self.attributes(class_=f"badge badge--{self.color}", data_testid=self.testid)
        icon_html = self.icon(self.icon_name) + " " if self.icon_name else ""
        return f"<span {attrs}>{icon_html}{self.escape(self.label)}</span>"


class DifficultyBadge(Badge):
    def __init__(self, difficulty: object):
        super().__init__(
            labels.difficulty_label(difficulty),
            labels.difficulty_color(difficulty),
            testid="difficulty-badge",
        )


class RoleBadge(Badge):
    def __init__(self, role_name: Optional[str]):
        style = labels.role_badge(role_name)
        super().__init__(style.label, style.color, style.icon, testid="role-badge")
