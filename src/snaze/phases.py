"""Game phases and the transition table between them.

Every phase change goes through :func:`transition`. Events are small
immutable records that carry only what their phase decides on, so the
table below is the single place to update when a phase is added.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from snaze.pathfinder import AgentKind


class Phase(enum.Enum):
    INIT = "init"
    MAIN_MENU = "main_menu"
    QUIT = "quit"
    MODE_SELECT = "mode_select"
    AGENT_SELECT = "agent_select"
    ROUND_START = "round_start"
    RUNNING = "running"
    DAMAGE = "damage"
    WON = "won"
    LOST = "lost"


class MenuOption(enum.Enum):
    """Main menu entries, numbered as shown on screen."""

    PLAY = 1
    QUIT = 2


class PlayMode(enum.Enum):
    """Who steers the snake."""

    PLAYER = 1
    AGENT = 2


class InvalidTransition(ValueError):
    """Raised when an event does not apply to the current phase."""


@dataclass(frozen=True)
class Booted:
    pass


@dataclass(frozen=True)
class MenuChosen:
    option: MenuOption


@dataclass(frozen=True)
class QuitAnswered:
    confirmed: bool


@dataclass(frozen=True)
class ModeChosen:
    mode: PlayMode
    # An agent kind fixed by settings skips the agent menu.
    agent_preset: AgentKind | None = None


@dataclass(frozen=True)
class LevelsExhausted:
    lives_left: int


@dataclass(frozen=True)
class AgentChosen:
    kind: AgentKind


@dataclass(frozen=True)
class RoundReady:
    pass


@dataclass(frozen=True)
class Moved:
    ate: bool = False


@dataclass(frozen=True)
class Crashed:
    pass


@dataclass(frozen=True)
class TargetReached:
    pass


@dataclass(frozen=True)
class LifeLost:
    remaining: int


@dataclass(frozen=True)
class ContinueAnswered:
    proceed: bool


Event = (
    Booted | MenuChosen | QuitAnswered | ModeChosen | LevelsExhausted
    | AgentChosen | RoundReady | Moved | Crashed | TargetReached
    | LifeLost | ContinueAnswered
)


def transition(phase: Phase, event: Event) -> Phase:
    """Return the phase that follows *phase* once *event* happened.

    Raises :class:`InvalidTransition` for any pair not in the table.
    """
    if phase is Phase.INIT:
        if isinstance(event, Booted):
            return Phase.MAIN_MENU

    elif phase is Phase.MAIN_MENU:
        if isinstance(event, MenuChosen):
            if event.option is MenuOption.PLAY:
                return Phase.MODE_SELECT
            return Phase.QUIT

    elif phase is Phase.QUIT:
        if isinstance(event, QuitAnswered):
            return Phase.QUIT if event.confirmed else Phase.MAIN_MENU

    elif phase is Phase.MODE_SELECT:
        if isinstance(event, ModeChosen):
            if event.mode is PlayMode.AGENT and event.agent_preset is None:
                return Phase.AGENT_SELECT
            return Phase.ROUND_START
        if isinstance(event, LevelsExhausted):
            return Phase.WON if event.lives_left > 0 else Phase.MAIN_MENU

    elif phase is Phase.AGENT_SELECT:
        if isinstance(event, AgentChosen):
            return Phase.ROUND_START

    elif phase is Phase.ROUND_START:
        if isinstance(event, RoundReady):
            return Phase.RUNNING

    elif phase is Phase.RUNNING:
        if isinstance(event, Moved):
            return Phase.RUNNING
        if isinstance(event, Crashed):
            return Phase.DAMAGE
        if isinstance(event, TargetReached):
            return Phase.WON

    elif phase is Phase.DAMAGE:
        if isinstance(event, LifeLost):
            return Phase.LOST if event.remaining <= 0 else Phase.ROUND_START

    elif phase in (Phase.WON, Phase.LOST):
        if isinstance(event, ContinueAnswered):
            return Phase.MODE_SELECT if event.proceed else Phase.MAIN_MENU

    raise InvalidTransition(
        f"No transition from {phase.name} on {type(event).__name__}.",
    )
