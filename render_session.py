# render_session.py

import logging
from enum import Enum
from typing import Callable, List, Optional

from food_graph import FoodGraph
from layout_options import LayoutConfig
from physics import ForceNetwork, SolverChangeError

logger = logging.getLogger(__name__)


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    LIVE = "live"


class ReorganizeChannel:
    """
    Explicitly owned "reorganize the graph" channel. Carries no payload;
    listeners are plain callables taking no arguments.
    """

    def __init__(self):
        self._listeners: List[Callable[[], None]] = []

    def connect(self, listener: Callable[[], None]):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def disconnect(self, listener: Callable[[], None]):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self):
        for listener in list(self._listeners):
            listener()


class RenderSession:
    """
    Owns the single renderer bound to one display surface.

    UNINITIALIZED -> LIVE on the first update(). While live, updates replace
    data and options in place; a solver change tears the renderer down and
    builds a new one against the same surface.
    """

    def __init__(self, surface, channel: Optional[ReorganizeChannel] = None,
                 network_factory=ForceNetwork):
        self._surface = surface
        self._channel = channel
        self._factory = network_factory
        self._network = None
        self._graph: Optional[FoodGraph] = None
        self._config: Optional[LayoutConfig] = None
        self._closed = False
        # a failed update may have left unrecorded data in the renderer
        self._stale = False
        self.last_error: Optional[Exception] = None
        if channel is not None:
            channel.connect(self.reorganize)

    # --------------------------
    # State
    # --------------------------
    @property
    def state(self) -> SessionState:
        return SessionState.LIVE if self._network is not None else SessionState.UNINITIALIZED

    @property
    def network(self):
        return self._network

    @property
    def graph(self) -> Optional[FoodGraph]:
        return self._graph

    @property
    def config(self) -> Optional[LayoutConfig]:
        return self._config

    # --------------------------
    # Data / configuration flow
    # --------------------------
    def update(self, graph: FoodGraph, config: LayoutConfig) -> bool:
        if self._closed:
            raise RuntimeError("Render session is closed.")
        if (self._network is not None and not self._stale
                and graph == self._graph and config == self._config):
            return True

        options = config.to_options()
        try:
            if self._network is None:
                self._construct(graph, options)
            else:
                self._apply(graph, config, options)
        except Exception as e:
            # Keep whatever is on the surface; the app carries on
            self.last_error = e
            self._stale = True
            logger.exception("Renderer update failed; keeping previous view")
            return False

        self._graph = graph
        self._config = config
        self._stale = False
        self.last_error = None
        return True

    def _construct(self, graph: FoodGraph, options: dict):
        self._network = self._factory(self._surface, graph, options)
        logger.info("Render session live (%s, %d nodes)", self._network.solver, len(graph.nodes))

    def _apply(self, graph: FoodGraph, config: LayoutConfig, options: dict):
        data_changed = self._stale or graph != self._graph
        if self._stale or config != self._config:
            try:
                self._network.set_options(options, stabilize=not data_changed)
            except SolverChangeError:
                logger.info("Solver change; rebuilding renderer")
                self._teardown()
                self._construct(graph, options)
                return
        if data_changed:
            self._network.set_data(graph)

    # --------------------------
    # Commands
    # --------------------------
    def reorganize(self) -> int:
        """One-shot re-stabilization of the current dataset. Returns iterations run."""
        if self._network is None:
            logger.debug("Reorganize ignored: session not live")
            return 0
        try:
            return self._network.stabilize()
        except Exception as e:
            self.last_error = e
            logger.exception("Re-stabilization failed")
            return 0

    def _teardown(self):
        net, self._network = self._network, None
        if net is not None:
            net.destroy()

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self._channel is not None:
            self._channel.disconnect(self.reorganize)
        try:
            self._teardown()
        finally:
            self._graph = None
            self._config = None
            self._stale = False

    def is_closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
