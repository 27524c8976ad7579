"""Tests for the broadcaster command dispatcher."""

from unittest.mock import MagicMock, call

import pytest

from huestream.chat.commands import COMMAND_ALIASES, CommandDispatcher, get_command_name
from huestream.chat.parser import IrcMessage
from huestream.engine import EffectEngine


@pytest.fixture
def engine() -> MagicMock:
    return MagicMock(spec=EffectEngine)


@pytest.fixture
def dispatcher(engine: MagicMock) -> CommandDispatcher:
    return CommandDispatcher(engine, "MyChannel", color_reward_id="reward-1")


def _message(text: str, display_name: str = "MyChannel", **tags: str) -> IrcMessage:
    return IrcMessage(
        command="PRIVMSG",
        params=("#mychannel", text),
        tags={"display-name": display_name, **tags},
        prefix=f"{display_name.lower()}!x@x",
    )


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("!resetlights", "resetlights"),
        ("hello !TestRaid someone", "testraid"),
        ("no command here", None),
        ("!", None),
    ],
)
def test_get_command_name(message: str, expected: str | None) -> None:
    assert get_command_name(message) == expected


def test_aliases_are_unique() -> None:
    aliases = [alias for names in COMMAND_ALIASES.values() for alias in names]

    assert len(aliases) == len(set(aliases))


@pytest.mark.parametrize("alias", COMMAND_ALIASES["reset"])
def test_reset_aliases(dispatcher: CommandDispatcher, engine: MagicMock, alias: str) -> None:
    assert dispatcher.handle_message(_message(f"!{alias}")) is True
    engine.do_reset_lights.assert_called_once_with()


def test_broadcaster_check_is_case_insensitive(
    dispatcher: CommandDispatcher, engine: MagicMock
) -> None:
    dispatcher.handle_message(_message("!lighttest", display_name="mychannel"))

    engine.do_light_test.assert_called_once_with()


def test_commands_from_viewers_are_ignored(
    dispatcher: CommandDispatcher, engine: MagicMock
) -> None:
    assert dispatcher.handle_message(_message("!resetlights", display_name="viewer")) is False
    engine.do_reset_lights.assert_not_called()


def test_own_messages_are_ignored(dispatcher: CommandDispatcher, engine: MagicMock) -> None:
    assert dispatcher.handle_message(_message("!resetlights"), is_self=True) is False
    engine.do_reset_lights.assert_not_called()


def test_unknown_command(dispatcher: CommandDispatcher, engine: MagicMock) -> None:
    assert dispatcher.handle_message(_message("!dance")) is False
    assert engine.method_calls == []


def test_parameter_defaults(dispatcher: CommandDispatcher, engine: MagicMock) -> None:
    """Test omitted parameters take their defaults."""
    dispatcher.handle_message(_message("!testcheer"))
    dispatcher.handle_message(_message("!testsub"))
    dispatcher.handle_message(_message("!testresub"))
    dispatcher.handle_message(_message("!testsubgift"))
    dispatcher.handle_message(_message("!testraid"))

    engine.on_cheer.assert_called_once_with("Username", 1)
    engine.on_subscription.assert_called_once_with("Username")
    engine.on_resub.assert_called_once_with("Username", 1)
    engine.on_subgift.assert_called_once_with("Username", "Recipient", 0)
    engine.on_raided.assert_called_once_with("Username", 666)


def test_parameters(dispatcher: CommandDispatcher, engine: MagicMock) -> None:
    """Test parameters are read in order after the command."""
    dispatcher.handle_message(_message("!bitstest   Cheerer 1500"))
    dispatcher.handle_message(_message("!resubtest Fan 24 3 great stream"))
    dispatcher.handle_message(_message("!subgifttest Giver Lucky 5"))
    dispatcher.handle_message(_message("!raidtest Raider notanumber"))

    engine.on_cheer.assert_called_once_with("Cheerer", 1500)
    engine.on_resub.assert_called_once_with("Fan", 24)
    engine.on_subgift.assert_called_once_with("Giver", "Lucky", 5)
    engine.on_raided.assert_called_once_with("Raider", 666)


def test_gift_batch_replays_each_gift(dispatcher: CommandDispatcher, engine: MagicMock) -> None:
    """Test the batch test registers the batch, then sends every gift."""
    dispatcher.handle_message(_message("!testsubgifts Giver 3"))

    assert engine.method_calls == [
        call.on_submysterygift("Giver", 3),
        call.on_subgift("Giver", "Recipient_1", 1),
        call.on_subgift("Giver", "Recipient_2", 1),
        call.on_subgift("Giver", "Recipient_3", 1),
    ]


def test_effect_commands(dispatcher: CommandDispatcher, engine: MagicMock) -> None:
    dispatcher.handle_message(_message("!gyrotest"))
    dispatcher.handle_message(_message("!lightsstate"))

    engine.do_raid_effect.assert_called_once_with()
    engine.do_log_light_state.assert_called_once_with()


def test_color_command_passes_full_text(
    dispatcher: CommandDispatcher, engine: MagicMock
) -> None:
    dispatcher.handle_message(_message("!setcolor cyberpunk"))

    engine.change_scene_color.assert_called_once_with("!setcolor cyberpunk")


def test_color_reward(dispatcher: CommandDispatcher, engine: MagicMock) -> None:
    """Test a channel points redemption from any viewer changes the colors."""
    message = _message("gold please", display_name="viewer", **{"custom-reward-id": "reward-1"})

    assert dispatcher.handle_message(message) is True
    engine.change_scene_color.assert_called_once_with("gold please")


def test_other_reward_is_ignored(dispatcher: CommandDispatcher, engine: MagicMock) -> None:
    message = _message("gold", display_name="viewer", **{"custom-reward-id": "other"})

    assert dispatcher.handle_message(message) is False
    engine.change_scene_color.assert_not_called()


def test_reward_disabled(engine: MagicMock) -> None:
    dispatcher = CommandDispatcher(engine, "#MyChannel")
    message = _message("gold", display_name="viewer", **{"custom-reward-id": "reward-1"})

    assert dispatcher.handle_message(message) is False
    assert dispatcher.channel == "mychannel"
