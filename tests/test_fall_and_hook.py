"""
Tests for item fall and hook sweep.
"""

import pytest

from fish_miner.catch_core.config_loader import ItemKind, load_config
from fish_miner.catch_core.hook import CatchPhase, Hook, HookSweeper
from fish_miner.catch_core.items import FallSimulator, Item


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def fall(config):
    return FallSimulator(config)


@pytest.fixture
def sweeper(config):
    return HookSweeper(config)


def make_item(uid, y, x=100.0, kind=ItemKind.FISH, points=30):
    return Item(uid=uid, kind=kind, points=points, x=x, y=y)


class TestFallSimulator:
    """Fall tick moves then prunes."""

    def test_items_move_down_one_step(self, fall):
        items = fall.advance([make_item(1, 0.0), make_item(2, 100.0)])
        assert [item.y for item in items] == [5.0, 105.0]

    def test_x_and_points_unchanged(self, fall):
        (item,) = fall.advance([make_item(1, 10.0, x=321.0, points=44)])
        assert item.x == 321.0
        assert item.points == 44

    def test_prunes_at_lower_bound(self, fall):
        items = fall.advance([make_item(1, 474.0), make_item(2, 475.0), make_item(3, 470.0)])
        # 474 -> 479 stays, 475 -> 480 is pruned
        assert [item.uid for item in items] == [1, 3]

    def test_order_preserved(self, fall):
        items = fall.advance([make_item(3, 10.0), make_item(1, 20.0), make_item(2, 30.0)])
        assert [item.uid for item in items] == [3, 1, 2]

    def test_input_list_untouched(self, fall):
        items = [make_item(1, 0.0)]
        fall.advance(items)
        assert items[0].y == 0.0

    def test_item_is_frozen(self):
        item = make_item(1, 0.0)
        with pytest.raises(Exception):
            item.points = 100

    def test_item_leaves_after_96_ticks(self, fall):
        items = [make_item(1, 0.0)]
        ticks = 0
        while items:
            items = fall.advance(items)
            ticks += 1
        assert ticks == 96


class TestHookSweeper:
    """Bouncing hook."""

    def test_new_hook(self, sweeper):
        hook = sweeper.new_hook()
        assert hook.x == 250
        assert hook.direction == 1
        assert hook.phase is CatchPhase.NONE
        assert hook.drop_x is None

    def test_moves_one_step(self, sweeper):
        hook = sweeper.new_hook()
        assert sweeper.tick(hook) is False
        assert hook.x == 253

    def test_flips_at_max(self, sweeper):
        hook = Hook(x=458.0, direction=1)
        assert sweeper.tick(hook) is True
        assert hook.x == 460
        assert hook.direction == -1

    def test_flips_exactly_on_bound(self, sweeper):
        hook = Hook(x=457.0, direction=1)
        assert sweeper.tick(hook) is True
        assert hook.x == 460
        assert hook.direction == -1

    def test_flips_at_min(self, sweeper):
        hook = Hook(x=21.0, direction=-1)
        assert sweeper.tick(hook) is True
        assert hook.x == 20
        assert hook.direction == 1

    def test_stays_in_bounds_over_many_ticks(self, sweeper):
        hook = sweeper.new_hook()
        flips = 0
        for _ in range(2000):
            flips += sweeper.tick(hook)
            assert sweeper.min_x <= hook.x <= sweeper.max_x
        assert flips > 0

    def test_sweep_ignores_catch_phase(self, sweeper):
        hook = sweeper.new_hook()
        hook.phase = CatchPhase.EXTENDING
        sweeper.tick(hook)
        assert hook.x == 253
