"""
Video form: title, URL and a section selector labelled "<course> - <section>".
"""
from typing import Optional, Sequence

from backoffice.ports import Section, Video
from backoffice.screens import section_option_label
from components.base import Component
from .fields import SelectField, TextInputField
from .submit import SubmitButton


class VideoForm(Component):
    def __init__(self, video: Video, sections: Sequence[Section], *, action: str, csrf_token: str, error: Optional[str] = None) -> None:
        self.video = video
        self.sections = sections
        self.action = action
        self.csrf_token = csrf_token
        self.error = error

    def render(self) -> str:
        options = [(section.id, section_option_label(section)) for section in self.sections]
        fields_html = "\n".join([
            TextInputField("title", "Title", required=True).render(value=self.video.title, placeholder="Video title"),
            TextInputField("url", "Video URL", required=True).render(
                value=self.video.url, input_type="url", placeholder="https://youtube.com/watch?v=..."
            ),
            SelectField("section_id", "Section", required=True).render(
                options, value=self.video.section_id, prompt="Select a section"
            ),
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
                <a href="/video" class="btn btn-ghost">Cancel</a>
                {SubmitButton("Save").render()}
            </div>
        </form>
        """
