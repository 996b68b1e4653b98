"""
Cookie flags and post-login redirect targets.
"""
from __future__ import annotations

import pytest

from auth_utils import cookie_opts, safe_next_path


@pytest.mark.parametrize("env", ["dev", "prod"])
def test_cookie_flags_are_hardened_in_every_env(env):
    assert cookie_opts(env) == {"secure": True, "samesite": "lax"}


@pytest.mark.parametrize(
    "value,expected",
    [
        ("/cours", "/cours"),
        ("/video/3/edit", "/video/3/edit"),
        (None, "/dashboard"),
        ("", "/dashboard"),
        ("https://evil.example/", "/dashboard"),
        ("//evil.example/", "/dashboard"),
        ("/\\evil.example", "/dashboard"),
        ("/login", "/dashboard"),
        ("/logout?x=1", "/dashboard"),
    ],
)
def test_safe_next_path(value, expected):
    assert safe_next_path(value) == expected
