import asyncio
from unittest.mock import MagicMock

import pytest

from models import LightBinding, LightMode
from paulmann_remote import PaulmannRemote
from strategies import LightStrategy, WhiteLightStrategy

REMOTE_TOPIC = "zigbee2mqtt/Remote"
LIGHT = "light-control/devices/Living Room"


@pytest.fixture
def strategy() -> MagicMock:
    strategy = MagicMock(spec=LightStrategy)
    strategy.set_on_off.side_effect = lambda state, on: {"state": "ON" if on else "OFF"}
    strategy.increment_brightness.return_value = {"brightness": 10}
    strategy.decrement_brightness.return_value = {"brightness": 5}
    strategy.set_color_temp_percent.side_effect = lambda state, value: {"color_temp_percent": value}
    strategy.set_saturation.side_effect = lambda state, value: {"saturation": value}
    strategy.set_hue.side_effect = lambda state, hue: {"hue": hue}
    return strategy


@pytest.fixture
def make_remote(store, bridge, make_remote_config, strategy):
    def _make(**kwargs) -> PaulmannRemote:
        binding = LightBinding(record_name=LIGHT, strategy=strategy)
        return PaulmannRemote(store, bridge, make_remote_config("paulmann", [binding]), **kwargs)

    return _make


def action(name: str, **extra):
    return {"action": name, "action_group": 1, **extra}


class TestOnOff:
    @pytest.mark.asyncio
    async def test_on_and_off_use_strategy(self, store, bridge, make_remote, strategy):
        remote = make_remote()
        await remote.start()

        bridge.deliver(REMOTE_TOPIC, action("on"))
        assert store.get_record(f"{LIGHT}/set").get() == {"state": "ON", "from": "control"}

        bridge.deliver(REMOTE_TOPIC, action("off"))
        assert store.get_record(f"{LIGHT}/set").get() == {"state": "OFF", "from": "control"}

    @pytest.mark.asyncio
    async def test_unknown_group_is_ignored(self, store, bridge, make_remote, strategy):
        remote = make_remote()
        await remote.start()

        bridge.deliver(REMOTE_TOPIC, {"action": "on", "action_group": 2})
        bridge.deliver(REMOTE_TOPIC, {"action": "on"})

        strategy.set_on_off.assert_not_called()
        assert store.get_record(f"{LIGHT}/set").get() == {}

    def test_binding_without_strategy_is_rejected(self, store, bridge, make_remote_config):
        with pytest.raises(ValueError):
            PaulmannRemote(store, bridge, make_remote_config("paulmann", [LightBinding(record_name=LIGHT)]))


class TestBrightnessMove:
    @pytest.mark.asyncio
    async def test_repeats_until_stopped(self, bridge, make_remote, strategy):
        remote = make_remote(move_interval=0.1, move_timeout=5.0)
        await remote.start()

        bridge.deliver(REMOTE_TOPIC, action("brightness_move_up"))
        await asyncio.sleep(0.45)
        assert strategy.increment_brightness.call_count == 5

        bridge.deliver(REMOTE_TOPIC, action("brightness_stop"))
        await asyncio.sleep(0.25)

        assert strategy.increment_brightness.call_count == 5
        assert remote.brightness_move_timer is None
        assert remote.move_cancel_timer is None

    @pytest.mark.asyncio
    async def test_early_stop_leaves_single_step(self, bridge, make_remote, strategy):
        remote = make_remote(move_interval=0.1, move_timeout=5.0)
        await remote.start()

        bridge.deliver(REMOTE_TOPIC, action("brightness_move_down"))
        await asyncio.sleep(0.05)
        bridge.deliver(REMOTE_TOPIC, action("brightness_stop"))
        await asyncio.sleep(0.3)

        assert strategy.decrement_brightness.call_count == 1

    @pytest.mark.asyncio
    async def test_safety_timer_ends_move(self, bridge, make_remote, strategy):
        remote = make_remote(move_interval=0.1, move_timeout=0.35)
        await remote.start()

        bridge.deliver(REMOTE_TOPIC, action("brightness_move_up"))
        await asyncio.sleep(0.8)

        assert strategy.increment_brightness.call_count == 4
        assert remote.brightness_move_timer is None

    @pytest.mark.asyncio
    async def test_new_move_replaces_running_one(self, bridge, make_remote, strategy):
        remote = make_remote(move_interval=0.1, move_timeout=5.0)
        await remote.start()

        bridge.deliver(REMOTE_TOPIC, action("brightness_move_up"))
        await asyncio.sleep(0.05)
        bridge.deliver(REMOTE_TOPIC, action("brightness_move_down"))
        await asyncio.sleep(0.15)
        remote.cancel_move()

        assert strategy.increment_brightness.call_count == 1
        assert strategy.decrement_brightness.call_count == 2

    @pytest.mark.asyncio
    async def test_each_step_sees_latest_state(self, store, bridge, make_remote_config):
        binding = LightBinding(record_name=LIGHT, strategy=WhiteLightStrategy(brightness_step=10))
        remote = PaulmannRemote(store, bridge, make_remote_config("paulmann", [binding]), move_interval=0.1)
        await remote.start()
        store.get_record(f"{LIGHT}/is").set({"state": "ON", "brightness": 100, "from": "device"})

        bridge.deliver(REMOTE_TOPIC, action("brightness_move_up"))
        await asyncio.sleep(0.25)
        remote.cancel_move()

        assert store.get_record(f"{LIGHT}/set").get()["brightness"] == 130


class TestColorWheel:
    @pytest.mark.asyncio
    async def test_white_mode_drives_color_temperature(self, bridge, make_remote, strategy):
        remote = make_remote()
        await remote.start()

        bridge.deliver(REMOTE_TOPIC, action("color_temperature_move", action_color_temperature=153))

        strategy.set_color_temp_percent.assert_called_once_with({}, 0.0)
        strategy.set_saturation.assert_not_called()

    @pytest.mark.asyncio
    async def test_hue_switches_to_rgb_mode(self, store, bridge, make_remote, strategy):
        remote = make_remote()
        await remote.start()

        bridge.deliver(REMOTE_TOPIC, action("enhanced_move_to_hue_and_saturation", action_hue=120))
        assert remote.cursors[0].light_mode == LightMode.RGB
        assert store.get_record(f"{LIGHT}/set").get()["hue"] == 120

        bridge.deliver(REMOTE_TOPIC, action("color_temperature_move", action_color_temperature=370))

        strategy.set_saturation.assert_called_once()
        assert strategy.set_saturation.call_args.args[1] == 1.0
        strategy.set_color_temp_percent.assert_not_called()

    @pytest.mark.asyncio
    async def test_double_sentinel_forces_white(self, store, bridge, make_remote, strategy):
        remote = make_remote()
        await remote.start()
        remote.cursors[0].light_mode = LightMode.RGB
        desired = store.get_record(f"{LIGHT}/set")

        bridge.deliver(REMOTE_TOPIC, action("color_temperature_move", action_color_temperature=286))
        assert desired.get() == {}
        assert remote.mode_switch_count == 1

        bridge.deliver(REMOTE_TOPIC, action("color_temperature_move", action_color_temperature=286))

        assert remote.cursors[0].light_mode == LightMode.WHITE
        assert remote.mode_switch_count == 0
        strategy.set_color_temp_percent.assert_called_once()
        assert strategy.set_color_temp_percent.call_args.args[1] == 1.0
        strategy.set_saturation.assert_not_called()
        assert desired.get() == {"color_temp_percent": 1.0, "from": "control"}

    @pytest.mark.asyncio
    async def test_single_sentinel_is_swallowed(self, bridge, make_remote, strategy):
        remote = make_remote()
        await remote.start()

        bridge.deliver(REMOTE_TOPIC, action("color_temperature_move", action_color_temperature=286))
        bridge.deliver(REMOTE_TOPIC, action("color_temperature_move", action_color_temperature=370))

        assert remote.mode_switch_count == 0
        strategy.set_color_temp_percent.assert_called_once()
        assert strategy.set_color_temp_percent.call_args.args[1] == 1.0
