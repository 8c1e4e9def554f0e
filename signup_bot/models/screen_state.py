from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List

LoadingListener = Callable[[bool], Awaitable[None]]


@dataclass
class SignupScreenState:
    """Mutable UI state of the sign-up screen, shared with the submitter."""

    loading: bool = False
    listeners: List[LoadingListener] = field(default_factory=list)

    async def set_loading(self, loading: bool) -> None:
        self.loading = loading
        for listener in self.listeners:
            await listener(loading)
