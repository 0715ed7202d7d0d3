"""Menu-driven game session composing grid, snake, and autoplay logic."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import numpy as np

from snaze.config import Settings
from snaze.grid import Grid
from snaze.pathfinder import AgentKind, PathFinder
from snaze.phases import (
    AgentChosen,
    Booted,
    ContinueAnswered,
    Crashed,
    Event,
    LevelsExhausted,
    LifeLost,
    MenuChosen,
    MenuOption,
    ModeChosen,
    Moved,
    Phase,
    PlayMode,
    QuitAnswered,
    RoundReady,
    TargetReached,
    transition,
)
from snaze.snake import Direction, Position, Snake, is_reversal

logger = logging.getLogger(__name__)

KEY_BINDINGS: dict[str, Direction] = {
    "w": Direction.UP,
    "s": Direction.DOWN,
    "a": Direction.LEFT,
    "d": Direction.RIGHT,
}

_AGENT_OPTIONS: dict[int, AgentKind] = {1: AgentKind.SMART, 2: AgentKind.DUMB}

CONTROLS = 'Controls: "w" - UP  "s" - DOWN  "d" - RIGHT  "a" - LEFT'
SELECT_PROMPT = "Select one option and press enter"
CONTINUE_PROMPT = "Do you want to continue with the snaze? [y/n]"


class InputSource(Protocol):
    """Where the session reads player decisions from."""

    def read_blocking_line(self) -> str: ...

    def poll_keystroke(self) -> str | None: ...

    def read_single_blocking_key(self) -> str: ...


class Presenter(Protocol):
    def present(self, view: View) -> None: ...


@dataclass(frozen=True)
class Status:
    """Scoreboard shown above the maze."""

    lives: int
    max_lives: int
    score: int
    eaten: int
    food_target: int


@dataclass(frozen=True)
class View:
    """Everything a presenter needs to draw one frame."""

    title: str = ""
    body: str = ""
    system_message: str | None = None
    prompt: str | None = None
    board: np.ndarray | None = field(default=None, compare=False)
    status: Status | None = None
    heading: Direction = Direction.NONE


def parse_option(text: str, options: Iterable[int]) -> int | None:
    """Return the menu number typed in *text*, or None if it is not offered."""
    try:
        choice = int(text.strip())
    except ValueError:
        return None
    return choice if choice in set(options) else None


def parse_confirmation(text: str, default: bool | None = None) -> bool | None:
    """Interpret a yes/no answer; an empty answer falls back to *default*."""
    answer = text.strip().lower()
    if not answer:
        return default
    if answer in ("y", "yes"):
        return True
    if answer in ("n", "no"):
        return False
    return None


class Session:
    """Single-player game session driven by a fixed three-step cycle.

    A driver loop calls :meth:`collect_input`, :meth:`advance` and
    :meth:`produce_view` in that order once per tick until
    :attr:`finished` is set. All randomness (level draws, food placement,
    greedy moves) comes from one seedable NumPy generator.
    """

    def __init__(
        self,
        settings: Settings,
        levels: Iterable[str],
        inputs: InputSource,
        *,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        level_loader: Callable[[str], Grid] = Grid.load,
    ) -> None:
        self.settings = settings
        self.inputs = inputs
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.pathfinder = PathFinder(self.rng)
        self.level_pool: list[str] = list(levels)
        self.load_level = level_loader

        self.phase = Phase.INIT
        self.finished = False
        self.remaining_lives = settings.lives
        self.score = 0
        self.eaten = 0
        self.grid: Grid | None = None
        self.snake: Snake | None = None
        self.level_name = ""
        self.mode = PlayMode.PLAYER
        self.agent_kind: AgentKind | None = settings.agent
        self.plan: deque[Direction] = deque()
        self.system_message: str | None = None
        self.levels_exhausted = False

        self._fresh_round = True
        self._choice: Event | Direction | bool | None = None
        self._collectors: dict[Phase, Callable[[], None]] = {
            Phase.INIT: self._collect_nothing,
            Phase.MAIN_MENU: self._collect_menu,
            Phase.QUIT: self._collect_quit,
            Phase.MODE_SELECT: self._collect_mode,
            Phase.AGENT_SELECT: self._collect_agent,
            Phase.ROUND_START: self._collect_start_direction,
            Phase.RUNNING: self._collect_steering,
            Phase.DAMAGE: self._collect_acknowledgement,
            Phase.WON: self._collect_continue,
            Phase.LOST: self._collect_continue,
        }
        self._updaters: dict[Phase, Callable[[], Event | None]] = {
            Phase.INIT: Booted,
            Phase.MAIN_MENU: self._take_choice,
            Phase.QUIT: self._update_quit,
            Phase.MODE_SELECT: self._update_mode,
            Phase.AGENT_SELECT: self._update_agent,
            Phase.ROUND_START: self._start_round,
            Phase.RUNNING: self._tick,
            Phase.DAMAGE: self._take_damage,
            Phase.WON: self._take_choice,
            Phase.LOST: self._take_choice,
        }

    # ------------------------------------------------------------------
    # Driver cycle
    # ------------------------------------------------------------------

    def collect_input(self) -> None:
        """Read whatever the current phase needs from the input source."""
        self.system_message = None
        self._choice = None
        if not self.finished:
            self._collectors[self.phase]()

    def advance(self) -> None:
        """Apply the recorded choice and move to the next phase."""
        if self.finished:
            return
        event = self._updaters[self.phase]()
        self._choice = None
        if event is not None:
            self._apply(event)

    def produce_view(self) -> View:
        """Describe the current screen without changing any state."""
        builder = {
            Phase.INIT: self._view_init,
            Phase.MAIN_MENU: self._view_main_menu,
            Phase.QUIT: self._view_quit,
            Phase.MODE_SELECT: self._view_mode,
            Phase.AGENT_SELECT: self._view_agent,
            Phase.ROUND_START: self._view_round_start,
            Phase.RUNNING: self._view_running,
            Phase.DAMAGE: self._view_damage,
            Phase.WON: self._view_won,
            Phase.LOST: self._view_lost,
        }[self.phase]
        return builder()

    @property
    def frame_delay(self) -> float:
        """Seconds the driver should pause after this tick."""
        return self.settings.frame_delay if self.phase is Phase.RUNNING else 0.0

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _apply(self, event: Event) -> None:
        previous = self.phase
        self.phase = transition(previous, event)
        if self.phase is not previous:
            logger.info("Phase %s -> %s", previous.name, self.phase.name)
            self._enter(self.phase)

    def _enter(self, phase: Phase) -> None:
        if phase is Phase.MODE_SELECT:
            self._draw_level()
        elif phase is Phase.ROUND_START:
            self.plan.clear()

    def _draw_level(self) -> None:
        self.levels_exhausted = False
        if not self.level_pool:
            self.levels_exhausted = True
            if self.remaining_lives <= 0:
                self.system_message = "No levels left to play."
            logger.info("Level pool exhausted with %d lives left", self.remaining_lives)
            self._apply(LevelsExhausted(self.remaining_lives))
            return

        index = int(self.rng.integers(len(self.level_pool)))
        level = self.level_pool.pop(index)
        self.grid = self.load_level(level)
        self.snake = Snake(self.grid.width, self.grid.height)
        self.level_name = self.grid.name or Path(level).stem
        self.score = 0
        self.eaten = 0
        self._fresh_round = True
        logger.info("Drew level %s, %d left in pool", level, len(self.level_pool))

    # ------------------------------------------------------------------
    # Input collection
    # ------------------------------------------------------------------

    def _collect_nothing(self) -> None:
        pass

    def _collect_menu(self) -> None:
        choice = parse_option(
            self.inputs.read_blocking_line(), [o.value for o in MenuOption],
        )
        if choice is None:
            self.system_message = "Invalid option, try again"
        else:
            self._choice = MenuChosen(MenuOption(choice))

    def _collect_quit(self) -> None:
        answer = parse_confirmation(self.inputs.read_blocking_line(), default=True)
        if answer is None:
            self.system_message = "Please answer y or n"
        else:
            self._choice = QuitAnswered(answer)

    def _collect_mode(self) -> None:
        choice = parse_option(
            self.inputs.read_blocking_line(), [m.value for m in PlayMode],
        )
        if choice is None:
            self.system_message = "Invalid option, try again"
        else:
            self._choice = ModeChosen(PlayMode(choice), self.settings.agent)

    def _collect_agent(self) -> None:
        choice = parse_option(self.inputs.read_blocking_line(), _AGENT_OPTIONS)
        if choice is None:
            self.system_message = "Invalid option, try again"
        else:
            self._choice = AgentChosen(_AGENT_OPTIONS[choice])

    def _collect_start_direction(self) -> None:
        if self.mode is PlayMode.AGENT:
            return
        key = self.inputs.read_single_blocking_key()
        direction = KEY_BINDINGS.get(key.lower())
        if direction is None:
            self.system_message = "Use w, a, s or d to pick a starting direction"
        else:
            self._choice = direction

    def _collect_steering(self) -> None:
        if self.mode is PlayMode.AGENT:
            return
        key = self.inputs.poll_keystroke()
        if key is None:
            return
        direction = KEY_BINDINGS.get(key.lower())
        if direction is not None and not is_reversal(self.snake.direction, direction):
            self._choice = direction

    def _collect_acknowledgement(self) -> None:
        self.inputs.read_blocking_line()
        self._choice = True

    def _collect_continue(self) -> None:
        answer = parse_confirmation(self.inputs.read_blocking_line())
        if answer is None:
            self.system_message = "Please answer y or n"
        else:
            self._choice = ContinueAnswered(answer)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def _take_choice(self) -> Event | None:
        return self._choice if not isinstance(self._choice, (Direction, bool)) else None

    def _update_quit(self) -> Event | None:
        event = self._take_choice()
        if isinstance(event, QuitAnswered) and event.confirmed:
            self.finished = True
            logger.info("Player quit the game")
        return event

    def _update_mode(self) -> Event | None:
        event = self._take_choice()
        if isinstance(event, ModeChosen):
            self.mode = event.mode
            if event.agent_preset is not None:
                self.agent_kind = event.agent_preset
        return event

    def _update_agent(self) -> Event | None:
        event = self._take_choice()
        if isinstance(event, AgentChosen):
            self.agent_kind = event.kind
        return event

    def _start_round(self) -> Event | None:
        grid, snake = self.grid, self.snake
        if self.mode is PlayMode.PLAYER and not isinstance(self._choice, Direction):
            return None

        self.eaten = 0
        if self._fresh_round:
            self.remaining_lives = self.settings.lives
            self._fresh_round = False

        if self.mode is PlayMode.PLAYER:
            direction = self._choice
            snake.reset(grid.spawn, direction)
            if not grid.is_blocked(grid.spawn, direction):
                snake.advance(direction, grow=True)
            grid.respawn_food(self.rng, avoid=snake.body)
        else:
            snake.reset(grid.spawn)
            grid.respawn_food(self.rng, avoid=snake.body)
            self.plan = self.pathfinder.plan(grid, snake, self.agent_kind)
        logger.info(
            "Round started on %s at %s, food at %s, %d lives",
            self.level_name, grid.spawn, grid.food, self.remaining_lives,
        )
        return RoundReady()

    def _tick(self) -> Event:
        grid, snake = self.grid, self.snake
        if self.mode is PlayMode.AGENT:
            if not self.plan:
                self.plan = self.pathfinder.plan(grid, snake, self.agent_kind)
            direction = self.plan.popleft()
        elif isinstance(self._choice, Direction):
            direction = self._choice
        else:
            direction = snake.direction

        new_head = grid.step(snake.head, direction)
        ate = grid.found_food(new_head)
        snake.advance(direction, grow=ate)

        if grid.get(new_head).blocks or snake.occupies(new_head):
            logger.info("Snake crashed at %s", new_head)
            return Crashed()

        if ate:
            self.eaten += 1
            self.score += 1
            if self.eaten >= self.settings.food_target:
                logger.info("Food target reached on %s", self.level_name)
                return TargetReached()
            grid.respawn_food(self.rng, avoid=snake.body)
            self.plan.clear()
        return Moved(ate=ate)

    def _take_damage(self) -> Event | None:
        if self._choice is not True:
            return None
        self.remaining_lives = max(0, self.remaining_lives - 1)
        logger.info("Snake lost a life, %d remaining", self.remaining_lives)
        return LifeLost(self.remaining_lives)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def _status(self) -> Status:
        return Status(
            lives=self.remaining_lives,
            max_lives=self.settings.lives,
            score=self.score,
            eaten=self.eaten,
            food_target=self.settings.food_target,
        )

    def _view_init(self) -> View:
        return View(title="Snaze", body="Loading...")

    def _view_main_menu(self) -> View:
        return View(
            title="Snaze Game",
            body="[1] - Play\n[2] - Quit",
            system_message=self.system_message,
            prompt=SELECT_PROMPT,
        )

    def _view_quit(self) -> View:
        if self.finished:
            return View(title="Goodbye", body="Thanks for playing snaze!")
        return View(
            title="Quitting",
            body="Do you want to quit the snaze game?",
            system_message=self.system_message,
            prompt="[Y/n]",
        )

    def _view_mode(self) -> View:
        return View(
            title="Snaze Mode",
            body=f"Next level: {self.level_name}\n\n[1] - Normal\n[2] - Bot",
            system_message=self.system_message,
            prompt=SELECT_PROMPT,
        )

    def _view_agent(self) -> View:
        return View(
            title="Select bot type",
            body="[1] - Smart bot\n[2] - Dumb bot",
            system_message=self.system_message,
            prompt=SELECT_PROMPT,
        )

    def _view_round_start(self) -> View:
        prompt = CONTROLS if self.mode is PlayMode.PLAYER else None
        return View(
            title=f"Level {self.level_name}",
            body="Pick a direction to start." if prompt else "The bot is starting.",
            system_message=self.system_message,
            prompt=prompt,
            board=self.grid.snapshot(),
            status=self._status(),
        )

    def planned_route(self) -> list[Position]:
        """Cells the bot's pending moves will walk through, in order."""
        if self.mode is not PlayMode.AGENT or self.snake is None or not len(self.snake):
            return []
        route = []
        pos = self.snake.head
        for direction in self.plan:
            pos = self.grid.step(pos, direction)
            route.append(pos)
        return route

    def _view_running(self) -> View:
        return View(
            title=f"Level {self.level_name}",
            board=self.grid.snapshot(self.snake, route=self.planned_route()),
            status=self._status(),
            heading=self.snake.direction,
        )

    def _view_damage(self) -> View:
        return View(
            title=f"Level {self.level_name}",
            body="You suffered damage!!!",
            prompt="Press <Enter> to continue",
            board=self.grid.snapshot(self.snake),
            status=self._status(),
            heading=self.snake.direction,
        )

    def _view_won(self) -> View:
        if self.levels_exhausted:
            body = "Every level has been cleared."
        else:
            body = f"Level {self.level_name} cleared with a score of {self.score}."
        return View(
            title="The snake has found its way!",
            body=body,
            system_message=self.system_message,
            prompt=CONTINUE_PROMPT,
        )

    def _view_lost(self) -> View:
        return View(
            title="The snake got wrecked",
            body=f"Unfortunately the snake has passed. Final score: {self.score}.",
            system_message=self.system_message,
            prompt=CONTINUE_PROMPT,
        )
