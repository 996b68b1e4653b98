"""
Route guard: a pure decision from Session Context state.

The guard has no side effects; the web middleware applies the decision
(render loading placeholder, redirect to /login, or render the page).
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from .session import Principal


class GuardDecision(str, Enum):
    ALLOW = "allow"
    LOADING = "loading"
    REDIRECT_LOGIN = "redirect_login"


def guard(principal: Optional[Principal], loading: bool) -> GuardDecision:
    if loading:
        return GuardDecision.LOADING
    if principal is None:
        return GuardDecision.REDIRECT_LOGIN
    return GuardDecision.ALLOW


__all__ = ["GuardDecision", "guard"]
