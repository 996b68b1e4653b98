"""
Form components for the DailyLessons admin.

Building blocks (fields, submit button) plus one form per editable entity.
"""

from .fields import FormField, TextAreaField, TextInputField, SelectField
from .submit import SubmitButton
from .login_form import LoginForm
from .user_form import UserForm
from .course_form import CourseForm
from .video_form import VideoForm

__all__ = [
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
