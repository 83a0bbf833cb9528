"""
Render Session Tests
====================

Lifecycle (uninitialized -> live), in-place updates, solver-change rebuilds,
the reorganize channel and teardown.
"""

import pytest

from creature import Creature
from creature_store import CreatureStore
from food_graph import build_graph
from layout_options import GraphOptions, LayoutMode, configure, set_mode, set_spring_length
from physics import ForceNetwork
from render_session import RenderSession, ReorganizeChannel, SessionState
from fixtures import RecordingSurface, sample_graph


class CountingNetwork(ForceNetwork):
    """ForceNetwork that counts instances and stabilizations."""
    created = 0

    def __init__(self, *args, **kwargs):
        type(self).created += 1
        self.stabilize_calls = 0
        super().__init__(*args, **kwargs)

    def stabilize(self, iterations=None):
        self.stabilize_calls += 1
        return super().stabilize(iterations=iterations)


class BrokenNetwork(ForceNetwork):
    def set_data(self, graph):
        if self.graph.nodes:
            raise RuntimeError("renderer exploded")
        super().set_data(graph)


class PickySurface(RecordingSurface):
    """Refuses to draw fills that are not #rrggbb, as the plotly surface does."""

    def draw(self, network):
        for node in network.graph.getNodes():
            fill = node.getFill()
            if len(fill) != 7 or not fill.startswith("#"):
                raise ValueError(f"Invalid color {fill!r}")
        super().draw(network)


@pytest.fixture
def counting():
    CountingNetwork.created = 0
    return CountingNetwork


def hierarchical():
    return configure(set_mode(GraphOptions(), LayoutMode.HIERARCHICAL))


class TestLifecycle:

    def test_starts_uninitialized(self):
        session = RenderSession(RecordingSurface())
        assert session.state is SessionState.UNINITIALIZED
        assert session.network is None

    def test_first_update_goes_live(self):
        surface = RecordingSurface()
        session = RenderSession(surface)
        assert session.update(sample_graph(), configure(GraphOptions()))
        assert session.state is SessionState.LIVE
        assert surface.draws == 1

    def test_data_updates_reuse_instance(self, counting):
        session = RenderSession(RecordingSurface(), network_factory=counting)
        session.update(sample_graph(), configure(GraphOptions()))
        first = session.network
        session.update(build_graph([Creature("Fox", ["Hare"], "#ff0000")]), configure(GraphOptions()))
        assert session.network is first
        assert counting.created == 1
        assert set(first.positions) == {"Fox", "Hare"}

    def test_unchanged_input_is_skipped(self, counting):
        session = RenderSession(RecordingSurface(), network_factory=counting)
        session.update(sample_graph(), configure(GraphOptions()))
        calls = session.network.stabilize_calls
        session.update(sample_graph(), configure(GraphOptions()))
        assert session.network.stabilize_calls == calls

    def test_solver_change_rebuilds_instance(self, counting):
        surface = RecordingSurface()
        session = RenderSession(surface, network_factory=counting)
        session.update(sample_graph(), configure(GraphOptions()))
        first = session.network
        session.update(sample_graph(), hierarchical())
        assert session.network is not first
        assert first.is_destroyed()
        assert surface.released == 1
        assert counting.created == 2
        assert session.state is SessionState.LIVE

    def test_mode_switch_keeps_dataset(self):
        store = CreatureStore()
        store.add("Fox", "Rabbit", "#ff0000")
        store.add("Rabbit", "Grass", "#f0f0f0")
        graph = build_graph(store.creatures)
        session = RenderSession(RecordingSurface())

        options = set_mode(GraphOptions(), LayoutMode.HIERARCHICAL)
        session.update(build_graph(store.creatures), configure(options))
        options = set_mode(options, LayoutMode.CIRCULAR)
        session.update(build_graph(store.creatures), configure(options))
        options = set_mode(options, LayoutMode.HIERARCHICAL)
        session.update(build_graph(store.creatures), configure(options))

        assert session.network.graph == graph
        assert set(session.network.positions) == set(graph.names())

    def test_failed_update_keeps_previous_state(self):
        surface = RecordingSurface()
        session = RenderSession(surface, network_factory=BrokenNetwork)
        first = sample_graph()
        assert session.update(first, configure(GraphOptions()))
        draws = surface.draws

        ok = session.update(build_graph([Creature("X", [], "#000000")]), configure(GraphOptions()))
        assert ok is False
        assert isinstance(session.last_error, RuntimeError)
        assert session.graph == first
        assert session.state is SessionState.LIVE
        assert surface.draws == draws


class TestReorganize:

    def test_reorganize_while_uninitialized_is_noop(self):
        session = RenderSession(RecordingSurface())
        assert session.reorganize() == 0

    def test_reorganize_restabilizes_same_data(self, counting):
        surface = RecordingSurface()
        session = RenderSession(surface, network_factory=counting)
        graph = sample_graph()
        session.update(graph, configure(GraphOptions()))
        before = session.network.stabilize_calls

        session.reorganize()
        assert session.network.stabilize_calls == before + 1
        assert session.network.graph == graph
        assert surface.draws == 2

    def test_channel_reaches_session(self, counting):
        channel = ReorganizeChannel()
        session = RenderSession(RecordingSurface(), channel, network_factory=counting)
        session.update(sample_graph(), configure(GraphOptions()))
        before = session.network.stabilize_calls

        channel.emit()
        assert session.network.stabilize_calls == before + 1

    def test_channel_connect_is_idempotent(self):
        channel = ReorganizeChannel()
        hits = []
        listener = lambda: hits.append(1)
        channel.connect(listener)
        channel.connect(listener)
        channel.emit()
        assert hits == [1]
        channel.disconnect(listener)
        channel.emit()
        assert hits == [1]


class TestTeardown:

    def test_close_releases_and_deregisters(self):
        surface = RecordingSurface()
        channel = ReorganizeChannel()
        session = RenderSession(surface, channel)
        session.update(sample_graph(), configure(GraphOptions()))
        assert channel.listener_count() == 1
        net = session.network

        session.close()
        assert surface.released == 1
        assert net.is_destroyed()
        assert channel.listener_count() == 0
        assert session.state is SessionState.UNINITIALIZED
        channel.emit()

    def test_close_is_idempotent(self):
        surface = RecordingSurface()
        session = RenderSession(surface)
        session.update(sample_graph(), configure(GraphOptions()))
        session.close()
        session.close()
        assert surface.released == 1

    def test_update_after_close_raises(self):
        session = RenderSession(RecordingSurface())
        session.close()
        with pytest.raises(RuntimeError):
            session.update(sample_graph(), configure(GraphOptions()))

    def test_context_manager(self):
        surface = RecordingSurface()
        with RenderSession(surface) as session:
            session.update(sample_graph(), configure(GraphOptions()))
        assert session.is_closed()
        assert surface.released == 1


class TestRecovery:

    def test_revert_after_failed_draw_reapplies(self):
        surface = PickySurface()
        session = RenderSession(surface)
        good = build_graph([Creature("Fox", ["Rabbit"], "#ff0000")])
        bad = build_graph([Creature("Fox", ["Rabbit"], "#ff0000"), Creature("Owl", [], "banana")])
        config = configure(GraphOptions())

        assert session.update(good, config)
        assert session.update(bad, config) is False

        assert session.update(good, config)
        assert session.last_error is None
        assert set(session.network.graph.names()) == {"Fox", "Rabbit"}
        assert set(surface.last_positions) == {"Fox", "Rabbit"}

        assert session.reorganize() >= 1
        assert session.last_error is None

class TestSingleStabilization:

    def test_options_and_data_change_together(self, counting):
        session = RenderSession(RecordingSurface(), network_factory=counting)
        options = set_mode(GraphOptions(), LayoutMode.CIRCULAR)
        session.update(sample_graph(), configure(options))
        net = session.network
        calls = net.stabilize_calls

        options = set_spring_length(options, 300)
        session.update(build_graph([Creature("Fox", ["Hare"], "#ff0000")]), configure(options))

        assert session.network is net
        assert net.stabilize_calls == calls + 1
        assert net.options["physics"]["repulsion"]["springLength"] == 300.0

    def test_options_only_still_stabilizes(self, counting):
        session = RenderSession(RecordingSurface(), network_factory=counting)
        options = set_mode(GraphOptions(), LayoutMode.CIRCULAR)
        session.update(sample_graph(), configure(options))
        calls = session.network.stabilize_calls

        session.update(sample_graph(), configure(set_spring_length(options, 300)))
        assert session.network.stabilize_calls == calls + 1
