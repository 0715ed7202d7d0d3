"""Tests for the phase transition table."""

import pytest

from snaze.pathfinder import AgentKind
from snaze.phases import (
    AgentChosen,
    Booted,
    ContinueAnswered,
    Crashed,
    InvalidTransition,
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


class TestMenus:
    def test_init_boots_into_main_menu(self):
        assert transition(Phase.INIT, Booted()) is Phase.MAIN_MENU

    def test_main_menu_options(self):
        assert transition(Phase.MAIN_MENU, MenuChosen(MenuOption.PLAY)) is Phase.MODE_SELECT
        assert transition(Phase.MAIN_MENU, MenuChosen(MenuOption.QUIT)) is Phase.QUIT

    def test_quit_confirmation(self):
        assert transition(Phase.QUIT, QuitAnswered(True)) is Phase.QUIT
        assert transition(Phase.QUIT, QuitAnswered(False)) is Phase.MAIN_MENU

    def test_mode_select(self):
        assert transition(Phase.MODE_SELECT, ModeChosen(PlayMode.PLAYER)) is Phase.ROUND_START
        assert transition(Phase.MODE_SELECT, ModeChosen(PlayMode.AGENT)) is Phase.AGENT_SELECT

    def test_preset_agent_skips_agent_menu(self):
        event = ModeChosen(PlayMode.AGENT, agent_preset=AgentKind.DUMB)
        assert transition(Phase.MODE_SELECT, event) is Phase.ROUND_START

    def test_levels_exhausted(self):
        assert transition(Phase.MODE_SELECT, LevelsExhausted(2)) is Phase.WON
        assert transition(Phase.MODE_SELECT, LevelsExhausted(0)) is Phase.MAIN_MENU

    def test_agent_select(self):
        for kind in AgentKind:
            assert transition(Phase.AGENT_SELECT, AgentChosen(kind)) is Phase.ROUND_START


class TestPlay:
    def test_round_start(self):
        assert transition(Phase.ROUND_START, RoundReady()) is Phase.RUNNING

    def test_running_outcomes(self):
        assert transition(Phase.RUNNING, Moved()) is Phase.RUNNING
        assert transition(Phase.RUNNING, Moved(ate=True)) is Phase.RUNNING
        assert transition(Phase.RUNNING, Crashed()) is Phase.DAMAGE
        assert transition(Phase.RUNNING, TargetReached()) is Phase.WON

    def test_damage(self):
        assert transition(Phase.DAMAGE, LifeLost(1)) is Phase.ROUND_START
        assert transition(Phase.DAMAGE, LifeLost(0)) is Phase.LOST

    @pytest.mark.parametrize("phase", [Phase.WON, Phase.LOST])
    def test_end_of_round(self, phase):
        assert transition(phase, ContinueAnswered(True)) is Phase.MODE_SELECT
        assert transition(phase, ContinueAnswered(False)) is Phase.MAIN_MENU


class TestInvalidTransitions:
    @pytest.mark.parametrize(("phase", "event"), [
        (Phase.INIT, MenuChosen(MenuOption.PLAY)),
        (Phase.MAIN_MENU, Booted()),
        (Phase.RUNNING, LifeLost(2)),
        (Phase.DAMAGE, Moved()),
        (Phase.WON, Crashed()),
        (Phase.AGENT_SELECT, ModeChosen(PlayMode.PLAYER)),
    ])
    def test_rejected(self, phase, event):
        with pytest.raises(InvalidTransition, match="No transition"):
            transition(phase, event)

    def test_every_phase_has_an_exit(self):
        exits = {
            Phase.INIT: Booted(),
            Phase.MAIN_MENU: MenuChosen(MenuOption.PLAY),
            Phase.QUIT: QuitAnswered(False),
            Phase.MODE_SELECT: ModeChosen(PlayMode.PLAYER),
            Phase.AGENT_SELECT: AgentChosen(AgentKind.SMART),
            Phase.ROUND_START: RoundReady(),
            Phase.RUNNING: Crashed(),
            Phase.DAMAGE: LifeLost(0),
            Phase.WON: ContinueAnswered(False),
            Phase.LOST: ContinueAnswered(False),
        }
        assert set(exits) == set(Phase)
        for phase, event in exits.items():
            assert transition(phase, event) is not phase
