# DailyLessons admin component system
# Pure Python components for escaped, server-rendered HTML

from .base import Component
from .layout import Layout
from .navigation import Navigation, NAV_ITEMS
from .alerts import ErrorBanner, LoadingPlaceholder
from .badges import Badge, DifficultyBadge, RoleBadge
from .overlay import Overlay, ConfirmDialog
from .stats import StatCard, StatGrid
from .tables import UsersTable, CoursesTable, VideosTable
from .forms import (
    FormField,
    TextAreaField,
    TextInputField,
    SelectField,
    SubmitButton,
    LoginForm,
    UserForm,
    CourseForm,
    VideoForm,
)

__all__ = [
    "Component",
    "Layout",
    "Navigation",
    "NAV_ITEMS",
    "ErrorBanner",
    "LoadingPlaceholder",
    "Badge",
    "DifficultyBadge",
    "RoleBadge",
    "Overlay",
    "ConfirmDialog",
    "StatCard",
    "StatGrid",
    "UsersTable",
    "CoursesTable",
    "VideosTable",
    "FormField",
    "TextAreaField",
    "TextInputField",
    "SelectField",
    "SubmitButton",
    "LoginForm",
    "UserForm",
    "CourseForm",
    "VideoForm",
]
