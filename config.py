# config.py
from __future__ import annotations
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Read once when the server or client starts; never changed mid-session."""
    width: int = 15
    height: int = 10
    times: int = 10
    pretty: bool = False
    host: str = "127.0.0.1"
    port: int = 8080

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        s = cls()
        return replace(
            s,
            width=int(env.get("LABYRINTH_WIDTH", s.width)),
            height=int(env.get("LABYRINTH_HEIGHT", s.height)),
            times=int(env.get("LABYRINTH_TIMES", s.times)),
            pretty=str(env.get("LABYRINTH_PRETTY", s.pretty)).strip().lower() in _TRUE,
            host=env.get("LABYRINTH_HOST", s.host),
            port=int(env.get("LABYRINTH_PORT", env.get("PORT", s.port))),
        )

    def override(self, **kwargs: Any) -> "Settings":
        """Copy with every non-None keyword applied (CLI flags)."""
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})

    def validate(self) -> "Settings":
        if self.width < 1 or self.height < 1:
            raise ValueError(f"maze must be at least 1x1, got {self.width}x{self.height}")
        if self.width * self.height < 2:
            raise ValueError("maze needs at least two rooms to hold Icarus and the treasure")
        if self.times < 1:
            raise ValueError(f"times must be positive, got {self.times}")
        if not (0 < self.port < 65536):
            raise ValueError(f"invalid port: {self.port}")
        return self

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def ws_url(self) -> str:
        return f"ws://{self.host}:{self.port}/ws"
