"""
Tests for catch window detection and catch phases.
"""

import pytest

from fish_miner.catch_core.catch import CatchResolver
from fish_miner.catch_core.config_loader import ItemKind, load_config
from fish_miner.catch_core.hook import CatchPhase, Hook
from fish_miner.catch_core.items import Item
from fish_miner.catch_core.session import Session


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def resolver(config):
    return CatchResolver(config)


@pytest.fixture
def session():
    return Session(generation=1, time_left=60, hook=Hook(x=250.0, direction=1), started_at_ms=0)


def make_item(uid, x, y, kind=ItemKind.FISH, points=30):
    return Item(uid=uid, kind=kind, points=points, x=x, y=y)


class TestCatchWindow:
    """Strict proximity window around (drop_x, depth)."""

    def test_centre_is_in_window(self, resolver):
        assert resolver.in_window(make_item(1, 250.0, 350.0), 250.0)

    def test_x_tolerance_is_strict(self, resolver):
        assert resolver.in_window(make_item(1, 289.9, 350.0), 250.0)
        assert not resolver.in_window(make_item(1, 290.0, 350.0), 250.0)
        assert not resolver.in_window(make_item(1, 210.0, 350.0), 250.0)

    def test_y_tolerance_is_strict(self, resolver):
        assert resolver.in_window(make_item(1, 250.0, 445.0), 250.0)
        assert not resolver.in_window(make_item(1, 250.0, 450.0), 250.0)
        assert not resolver.in_window(make_item(1, 250.0, 250.0), 250.0)

    def test_first_in_order_wins(self, resolver):
        items = [
            make_item(1, 100.0, 350.0),
            make_item(2, 255.0, 300.0, kind=ItemKind.GARBAGE, points=-40),
            make_item(3, 250.0, 350.0),
        ]
        assert resolver.find_catch(items, 250.0).uid == 2

    def test_nothing_in_window(self, resolver):
        assert resolver.find_catch([make_item(1, 100.0, 350.0)], 250.0) is None


class TestCatchPhases:
    """NONE -> EXTENDING -> RETRACTING -> NONE."""

    def test_begin_latches_drop_column(self, resolver, session):
        assert resolver.begin(session.hook)
        assert session.hook.phase is CatchPhase.EXTENDING
        assert session.hook.drop_x == 250.0

    def test_begin_rejected_while_in_flight(self, resolver, session):
        resolver.begin(session.hook)
        session.hook.x = 300.0
        assert not resolver.begin(session.hook)
        assert session.hook.drop_x == 250.0

    def test_resolve_hit(self, resolver, session):
        session.items = [make_item(1, 100.0, 350.0), make_item(2, 245.0, 400.0, points=50)]
        resolver.begin(session.hook)
        event = resolver.resolve(session, now_ms=500)

        assert event.uid == 2
        assert event.points == 50
        assert event.score_after == 50
        assert session.score == 50
        assert [item.uid for item in session.items] == [1]
        assert session.last_caught.kind is ItemKind.FISH
        assert session.last_caught.points == 50
        assert session.last_caught.caught_at_ms == 500
        assert session.hook.phase is CatchPhase.RETRACTING

        resolver.finish(session.hook)
        assert session.hook.phase is CatchPhase.NONE
        assert session.hook.drop_x is None

    def test_resolve_uses_drop_column_not_current(self, resolver, session):
        session.items = [make_item(1, 250.0, 350.0)]
        resolver.begin(session.hook)
        session.hook.x = 400.0
        assert resolver.resolve(session, now_ms=500) is not None

    def test_resolve_miss_returns_to_idle(self, resolver, session):
        session.items = [make_item(1, 100.0, 350.0)]
        resolver.begin(session.hook)
        assert resolver.resolve(session, now_ms=500) is None
        assert session.hook.phase is CatchPhase.NONE
        assert session.score == 0
        assert session.last_caught is None
        assert len(session.items) == 1

    def test_negative_catch_lowers_score(self, resolver, session):
        session.items = [make_item(1, 250.0, 350.0, kind=ItemKind.GARBAGE, points=-45)]
        resolver.begin(session.hook)
        resolver.resolve(session, now_ms=500)
        assert session.score == -45

    def test_resolve_without_begin_does_nothing(self, resolver, session):
        session.items = [make_item(1, 250.0, 350.0)]
        assert resolver.resolve(session, now_ms=500) is None
        assert len(session.items) == 1

    def test_abandon(self, resolver, session):
        resolver.begin(session.hook)
        resolver.abandon(session.hook)
        assert session.hook.is_idle
        assert session.hook.drop_x is None
