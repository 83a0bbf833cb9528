"""
Renderer Tests
==============

ForceNetwork placement, stabilization and lifecycle against a recording surface.
"""

import math

import pytest

from creature import Creature
from food_graph import build_graph
from layout_options import ForceLayout, HierarchicalLayout, CircularLayout
from physics import ForceNetwork, RendererError, SolverChangeError, solver_of
from fixtures import RecordingSurface, sample_graph


def finite(p):
    return math.isfinite(p.x()) and math.isfinite(p.y())


class TestSolverSelection:

    def test_solver_of_each_mode(self):
        assert solver_of(ForceLayout().to_options()) == "barnesHut"
        assert solver_of(HierarchicalLayout().to_options()) == "hierarchical"
        assert solver_of(CircularLayout().to_options()) == "repulsion"


class TestForceLayout:

    def test_construct_draws_once(self):
        surface = RecordingSurface()
        net = ForceNetwork(surface, sample_graph(), ForceLayout().to_options())
        assert surface.draws == 1
        assert set(net.positions) == set(sample_graph().names())

    def test_stabilize_respects_cap(self):
        surface = RecordingSurface()
        net = ForceNetwork(surface, sample_graph(), ForceLayout().to_options())
        assert 1 <= net.stabilize(iterations=5) <= 5
        assert surface.draws == 2

    def test_positions_stay_finite_and_spread(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), ForceLayout().to_options())
        assert all(finite(p) for p in net.positions.values())
        assert net.spread() > 10.0

    def test_deterministic(self):
        a = ForceNetwork(RecordingSurface(), sample_graph(), ForceLayout().to_options())
        b = ForceNetwork(RecordingSurface(), sample_graph(), ForceLayout().to_options())
        for name in a.positions:
            assert a.positions[name].x() == pytest.approx(b.positions[name].x())
            assert a.positions[name].y() == pytest.approx(b.positions[name].y())

    def test_self_loop_does_not_break_physics(self):
        graph = build_graph([Creature("Wolf", ["Wolf"], "#ffffff")])
        net = ForceNetwork(RecordingSurface(), graph, ForceLayout().to_options())
        assert finite(net.positions["Wolf"])

    def test_empty_graph(self):
        net = ForceNetwork(RecordingSurface(), build_graph([]), ForceLayout().to_options())
        assert net.positions == {}
        assert net.stabilize() == 0
        assert net.get_bounding_box() == (0.0, 0.0, 0.0, 0.0)

    def test_set_data_adds_and_drops_nodes(self):
        surface = RecordingSurface()
        net = ForceNetwork(surface, sample_graph(), ForceLayout().to_options())
        smaller = build_graph([Creature("Fox", ["Rabbit", "Hare"], "#ff0000")])
        net.set_data(smaller)
        assert set(net.positions) == {"Fox", "Rabbit", "Hare"}
        assert net.graph is smaller
        assert surface.draws == 2


class TestCircularLayout:

    def test_seeds_on_circle(self):
        options = CircularLayout().to_options()
        options["physics"]["enabled"] = False
        net = ForceNetwork(RecordingSurface(), sample_graph(), options)
        radii = [math.hypot(p.x(), p.y()) for p in net.positions.values()]
        assert max(radii) - min(radii) == pytest.approx(0.0, abs=1e-6)
        assert radii[0] > 0

    def test_uses_solver_params(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), CircularLayout().to_options())
        assert net.solver == "repulsion"
        assert all(finite(p) for p in net.positions.values())


class TestHierarchicalLayout:

    def test_directed_levels_top_down(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), HierarchicalLayout("UD", "directed").to_options())
        y = {n: p.y() for n, p in net.positions.items()}
        assert y["Grass"] == y["Seeds"] == 0.0
        assert y["Rabbit"] == y["Mouse"] == 150.0
        assert y["Fox"] == y["Owl"] == 300.0

    def test_bottom_up_flips_axis(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), HierarchicalLayout("DU").to_options())
        assert net.positions["Fox"].y() == -300.0

    def test_left_right_uses_x_axis(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), HierarchicalLayout("LR").to_options())
        x = {n: p.x() for n, p in net.positions.items()}
        assert x["Grass"] == 0.0
        assert x["Fox"] == 300.0

    def test_right_left(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), HierarchicalLayout("RL").to_options())
        assert net.positions["Fox"].x() == -300.0

    def test_hubsize_levels(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), HierarchicalLayout("UD", "hubsize").to_options())
        y = {n: p.y() for n, p in net.positions.items()}
        assert y["Mouse"] == 0.0
        assert y["Fox"] == y["Owl"] == y["Grass"] == y["Seeds"] == 150.0
        assert y["Rabbit"] == 300.0

    def test_nodes_on_a_level_do_not_overlap(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), HierarchicalLayout("UD").to_options())
        xs = sorted(net.positions[n].x() for n in ("Fox", "Owl"))
        assert xs[1] - xs[0] == 100.0

    def test_cycle_does_not_hang(self):
        graph = build_graph([
            Creature("A", ["B"], "#111111"),
            Creature("B", ["A"], "#222222"),
            Creature("C", ["C"], "#333333"),
        ])
        net = ForceNetwork(RecordingSurface(), graph, HierarchicalLayout().to_options())
        assert all(finite(p) for p in net.positions.values())

    def test_edge_style_is_smooth(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), HierarchicalLayout("LR").to_options())
        assert net.edge_style()["forceDirection"] == "horizontal"
        flat = ForceNetwork(RecordingSurface(), sample_graph(), ForceLayout().to_options())
        assert flat.edge_style() is None


class TestLifecycle:

    def test_solver_change_is_refused(self):
        net = ForceNetwork(RecordingSurface(), sample_graph(), ForceLayout().to_options())
        with pytest.raises(SolverChangeError):
            net.set_options(HierarchicalLayout().to_options())
        assert net.solver == "barnesHut"

    def test_same_solver_options_apply_in_place(self):
        options = HierarchicalLayout("UD").to_options()
        net = ForceNetwork(RecordingSurface(), sample_graph(), options)
        net.set_options(HierarchicalLayout("LR").to_options())
        assert net.positions["Fox"].x() == 300.0

    def test_options_without_stabilize_defer_the_redraw(self):
        surface = RecordingSurface()
        net = ForceNetwork(surface, sample_graph(), HierarchicalLayout("UD").to_options())
        net.set_options(HierarchicalLayout("LR").to_options(), stabilize=False)
        assert surface.draws == 1
        assert net.positions["Fox"].y() == 300.0
        net.stabilize()
        assert net.positions["Fox"].x() == 300.0

    def test_destroy_releases_surface(self):
        surface = RecordingSurface()
        net = ForceNetwork(surface, sample_graph(), ForceLayout().to_options())
        net.destroy()
        net.destroy()
        assert surface.released == 1
        assert net.is_destroyed()
        with pytest.raises(RendererError):
            net.stabilize()
