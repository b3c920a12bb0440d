"""Theme and intro preference schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"


class Preferences(BaseModel):
    theme: Theme = Theme.DARK
    intro_seen: bool = False


class ThemeUpdate(BaseModel):
    theme: Theme
