"""
Login form component.

Purpose: Email/password sign-in posted to POST /login. The password is never
echoed back; the email is kept after a failed attempt.
"""
from typing import Optional

from components.base import Component
from .fields import TextInputField
from .submit import SubmitButton


class LoginForm(Component):
    def __init__(self, csrf_token: str, *, email: str = "", error: Optional[str] = None, next_path: str = "") -> None:
        self.csrf_token = csrf_token
        self.email = email
        self.error = error
        self.next_path = next_path

    def render(self) -> str:
        email_field = TextInputField("email", "Email", required=True).render(
            value=self.email, input_type="email", autocomplete="username", placeholder="admin@dailylessons.com"
        )
        password_field = TextInputField("password", "Password", required=True).render(
            input_type="password", autocomplete="current-password"
        )
        error_html = ""
        if self.error:
            error_html = f'<div class="alert alert-error" role="alert" data-testid="login-error">{self.escape(self.error)}</div>'
        next_html = ""
        if self.next_path:
            next_html = f'<input type="hidden" name="next" value="{self.escape(self.next_path)}">'
        return f"""
        <section class="login-card" aria-labelledby="login-heading">
            <div class="login-card__brand">
                {self.icon("fa-book-open")}
                <h1 id="login-heading">DailyLessons Admin</h1>
                <p class="text-muted">Sign in to manage the platform</p>
            </div>
            {error_html}
            <form method="post" action="/login" class="login-form">
                {self.csrf_field(self.csrf_token)}
                {next_html}
                {email_field}
                {password_field}
                <div class="form-actions">
                    {SubmitButton("Sign in", icon="fa-sign-in-alt").render()}
                </div>
            </form>
        </section>
        """
