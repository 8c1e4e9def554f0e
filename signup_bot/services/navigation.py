from __future__ import annotations

"""Narrow interfaces for screen transitions and transient notifications."""
from enum import Enum
from typing import Protocol


class Screen(str, Enum):
    SIGN_IN = "sign_in"
    SIGN_UP = "sign_up"
    MAIN = "main"


class Navigator(Protocol):
    async def start_screen(self, target: Screen, clear_history: bool) -> None:
        ...


class Notifier(Protocol):
    async def show_toast(self, message: str) -> None:
        ...
