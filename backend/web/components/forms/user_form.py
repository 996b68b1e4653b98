"""
User edit form: auth id, email and role selector.
"""
from typing import Optional, Sequence

from backoffice.ports import Role, User
from components.base import Component
from .fields import SelectField, TextInputField
from .submit import SubmitButton


class UserForm(Component):
    def __init__(self, user: User, roles: Sequence[Role], *, action: str, csrf_token: str, error: Optional[str] = None) -> None:
        self.user = user
        self.roles = roles
        self.action = action
        self.csrf_token = csrf_token
        self.error = error

    def render(self) -> str:
        role_options = [(role.id, role.name or "Unknown") for role in self.roles]
        fields_html = "\n".join([
            TextInputField("email", "Email", required=True).render(value=self.user.email, input_type="email"),
            TextInputField("auth_id", "Auth user id").render(value=self.user.auth_id),
            SelectField("role_id", "Role", required=True).render(
                role_options, value=self.user.role_id, prompt="Select a role"
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
                <a href="/users" class="btn btn-ghost">Cancel</a>
                {SubmitButton("Save").render()}
            </div>
        </form>
        """
