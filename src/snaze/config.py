"""Game settings loaded from INI or JSON files."""

from __future__ import annotations

import configparser
import json
import logging
from dataclasses import asdict, dataclass, replace
from pathlib import Path

from snaze.pathfinder import AgentKind

logger = logging.getLogger(__name__)

# INI option names as written in snaze config files.
_INI_KEYS: dict[str, str] = {
    "game_fps": "fps",
    "snake_lives": "lives",
    "food_amount": "food_target",
    "player_type": "agent_kind",
}

_PLAYER_TYPES = ("", "player", "human")


@dataclass(frozen=True)
class Settings:
    """Snaze running options.

    Supports JSON serialization; INI files use the ``game_fps``,
    ``snake_lives``, ``food_amount`` and ``player_type`` keys.
    """

    fps: int = 10
    lives: int = 5
    food_target: int = 10
    agent_kind: str | None = None

    def __post_init__(self) -> None:
        for name in ("fps", "lives", "food_target"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}.")
        if self.agent_kind is not None:
            # Validates the tag; raises ValueError for unknown kinds.
            AgentKind(self.agent_kind)

    @property
    def agent(self) -> AgentKind | None:
        """The preset autoplay strategy, if any."""
        return AgentKind(self.agent_kind) if self.agent_kind is not None else None

    @property
    def frame_delay(self) -> float:
        """Seconds to wait between frames while the snake runs."""
        return 1.0 / self.fps

    def with_agent(self, kind: AgentKind | None) -> Settings:
        return replace(self, agent_kind=kind.value if kind is not None else None)

    def to_dict(self) -> dict:
        return asdict(self)

    def save(self, path: str | Path) -> None:
        """Write settings to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Settings saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> Settings:
        """Load settings from a ``.json`` file or an INI file."""
        p = Path(path)
        if p.suffix.lower() == ".json":
            settings = cls(**json.loads(p.read_text()))
        else:
            settings = cls.from_ini(p.read_text())
        logger.info("Settings loaded from %s: %s", p, settings)
        return settings

    @classmethod
    def from_ini(cls, text: str) -> Settings:
        """Parse INI text; options may live in any section."""
        parser = configparser.ConfigParser(
            comment_prefixes=("#", ";"),
            inline_comment_prefixes=(";",),
            interpolation=None,
        )
        try:
            # Options before the first section header are allowed.
            parser.read_string("[DEFAULT]\n" + text)
        except configparser.Error as exc:
            raise ValueError(f"Malformed settings file: {exc}") from exc

        values: dict = {}
        for section in [parser.default_section, *parser.sections()]:
            for key, raw in parser[section].items():
                if key not in _INI_KEYS:
                    raise ValueError(f"Unknown setting {key!r} in [{section}].")
                values[_INI_KEYS[key]] = raw.strip().strip('"')

        kwargs: dict = {}
        for field_name in ("fps", "lives", "food_target"):
            if field_name in values:
                try:
                    kwargs[field_name] = int(values[field_name])
                except ValueError as exc:
                    raise ValueError(
                        f"{field_name} must be an integer, got {values[field_name]!r}.",
                    ) from exc
        agent = values.get("agent_kind", "").lower()
        if agent not in _PLAYER_TYPES:
            kwargs["agent_kind"] = agent
        return cls(**kwargs)
