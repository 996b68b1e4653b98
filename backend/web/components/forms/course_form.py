"""
Course form component

Purpose: Create or edit a course (title, description, difficulty, creator id).
The same markup serves both modes; only the action URL and heading differ.
"""
from typing import Optional

from backoffice.labels import DIFFICULTY_LABELS
from backoffice.ports import Course
from components.base import Component
from .fields import SelectField, TextAreaField, TextInputField
from .submit import SubmitButton


class CourseForm(Component):
    def __init__(self, course: Course, *, action: str, csrf_token: str, error: Optional[str] = None) -> None:
        self.course = course
        self.action = action
        self.csrf_token = csrf_token
        self.error = error

    def render(self) -> str:
        difficulty_options = [(str(level), label) for level, label in DIFFICULTY_LABELS.items()]
        fields_html = "\n".join([
            TextInputField("title", "Title", required=True).render(value=self.course.title, placeholder="Course title"),
            TextAreaField("description", "Description").render(
                value=self.course.description, rows=3, placeholder="Course description"
            ),
            '<div class="form-row">',
            SelectField("difficulty", "Difficulty").render(difficulty_options, value=str(self.course.difficulty)),
            TextInputField("creator_id", "Creator ID").render(value=self.course.creator_id, placeholder="Creator id"),
            "</div>",
        ])
        error_html = ""
        if self.error:
            error_html = f'<div class="alert alert-error" role="alert" data-testid="overlay-error">{self.escape(self.error)}</div>'
        return f"""
        <form method="post" action="{self.escape(self.action)}" class="entity-form">
            {self.csrf_field(self.csrf_token)}
            {fields_html}
            {error_html}
            <div class="form-actions">
                <a href="/cours" class="btn btn-ghost">Cancel</a>
                {SubmitButton("Save").render()}
            </div>
        </form>
        """
