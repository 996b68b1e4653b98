"""
Statistic cards shown above the tables and on the dashboard.
"""

from typing import Sequence

from .base import Component


class StatCard(Component):
    def __init__(self, label: str, value: int, *, icon: str, color: str = "blue", key: str = ""):
        self.label = label
        self.value = value
        self.icon_name = icon
        self.color = color
        self.key = key

    def render(self) -> str:
        attrs = self.attributes(class_=f"stat-card stat-card--{self.color}", data_stat=self.key or None)
        return f"""
        <div {attrs}>
            {self.icon(self.icon_name, "stat-card__icon")}
            <div>
                <p class="stat-card__label">{self.escape(self.label)}</p>
                <p class="stat-card__value">{self.escape(self.value)}</p>
            </div>
        </div>"""


class StatGrid(Component):
    def __init__(self, cards: Sequence[StatCard]):
        self.cards = cards

    def render(self) -> str:
        return f'<section class="stat-grid">{"".join(card.render() for card in self.cards)}</section>'
