# app.py
import logging
import os

import streamlit as st

from creature import DEFAULT_COLOR
from creature_store import CreatureStore, EXPORT_FILENAME
from food_graph import build_graph
from layout_options import (
    GraphOptions, LayoutMode, DIRECTIONS, DIRECTION_LABELS, SORT_METHODS, configure,
    set_mode, set_spring_length, set_spring_constant, set_central_gravity,
    set_gravitational_constant, set_hierarchical_direction, set_hierarchical_sort_method,
)
from plotly_surface import PlotlySurface
from render_session import RenderSession, ReorganizeChannel
import web_form

logging.basicConfig(
    level=os.environ.get("FOODWEB_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(page_title="Food Web Builder", layout="wide")

# Session state
if "store" not in st.session_state:
    st.session_state.store = CreatureStore()
    st.session_state.options = GraphOptions()
    st.session_state.channel = ReorganizeChannel()
    st.session_state.surface = PlotlySurface(height=650)
    st.session_state.render = RenderSession(st.session_state.surface, st.session_state.channel)
    st.session_state[web_form.NAME_KEY] = ""
    st.session_state[web_form.EATS_KEY] = ""
    st.session_state[web_form.COLOR_KEY] = DEFAULT_COLOR

store: CreatureStore = st.session_state.store
session: RenderSession = st.session_state.render

OPTION_UPDATES = {
    "opt_mode": lambda o, v: set_mode(o, LayoutMode(v)),
    "opt_spring_length": set_spring_length,
    "opt_spring_constant": set_spring_constant,
    "opt_central_gravity": set_central_gravity,
    "opt_gravitational_constant": set_gravitational_constant,
    "opt_direction": set_hierarchical_direction,
    "opt_sort_method": set_hierarchical_sort_method,
}


# --------- Callbacks (run before the script body on rerun) ----------
def _on_option(key):
    st.session_state.options = OPTION_UPDATES[key](st.session_state.options, st.session_state[key])


# UI
col_form, col_plot = st.columns([1, 3], gap="large")

with col_form:
    st.markdown("### Food Web Builder")
    st.text_input("Creature", key=web_form.NAME_KEY, placeholder="Enter creature name")
    st.text_input("What it eats", key=web_form.EATS_KEY, placeholder="Comma separated, e.g. Rabbit, Mouse")
    st.color_picker("Creature color", key=web_form.COLOR_KEY)

    if store.editing is not None:
        c1, c2 = st.columns(2)
        c1.button("Save Changes", on_click=web_form.submit, args=(st.session_state,), type="primary")
        c2.button("Cancel Edit", on_click=web_form.cancel, args=(st.session_state,))
    else:
        st.button("Add Creature", on_click=web_form.submit, args=(st.session_state,), type="primary")

    if store.duplicate_error or (store.error_message and not store.import_error):
        st.error(store.error_message)

    st.divider()
    st.markdown("### Food Web List")
    if len(store) == 0:
        st.caption("No creatures added yet.")
    for i, c in enumerate(store):
        row = st.columns([3, 1, 1])
        row[0].markdown(f"**{c.name}** eats *{c.eats_text() or 'nothing'}*")
        row[1].button("Edit", key=f"edit_{i}", on_click=web_form.edit, args=(st.session_state, i))
        row[2].button("Delete", key=f"delete_{i}", on_click=web_form.delete, args=(st.session_state, i))

    st.divider()
    st.download_button(
        "Export JSON", data=store.export_snapshot(), file_name=EXPORT_FILENAME,
        mime="application/json",
    )
    st.file_uploader("Import JSON", type=["json"], key=web_form.UPLOAD_KEY, on_change=web_form.import_upload,
                     args=(st.session_state,))
    if store.import_error:
        st.error(f"Import failed: {store.error_message}")

with col_plot:
    options: GraphOptions = st.session_state.options
    modes = [m.value for m in LayoutMode]
    lc = st.columns([2, 1])
    lc[0].radio("Layout", modes, index=modes.index(options.mode.value), horizontal=True,
                key="opt_mode", on_change=_on_option, args=("opt_mode",))
    lc[1].button("Reorganize", on_click=st.session_state.channel.emit)

    if options.mode is LayoutMode.HIERARCHICAL:
        hc = st.columns(2)
        hc[0].selectbox("Direction", DIRECTIONS, index=DIRECTIONS.index(options.layout.direction),
                        format_func=DIRECTION_LABELS.get, key="opt_direction",
                        on_change=_on_option, args=("opt_direction",))
        hc[1].selectbox("Sort method", SORT_METHODS, index=SORT_METHODS.index(options.layout.sort_method),
                        key="opt_sort_method", on_change=_on_option, args=("opt_sort_method",))
    elif options.mode is LayoutMode.CIRCULAR:
        p = options.physics
        pc = st.columns(4)
        pc[0].slider("Spring length", 10.0, 500.0, float(p.spring_length), key="opt_spring_length",
                     on_change=_on_option, args=("opt_spring_length",))
        pc[1].slider("Spring constant", 0.0, 1.0, float(p.spring_constant), step=0.01,
                     key="opt_spring_constant", on_change=_on_option, args=("opt_spring_constant",))
        pc[2].slider("Central gravity", 0.0, 5.0, float(p.central_gravity), step=0.05,
                     key="opt_central_gravity", on_change=_on_option, args=("opt_central_gravity",))
        pc[3].slider("Gravitational constant", 0.0, 20000.0, float(p.gravitational_constant), step=100.0,
                     key="opt_gravitational_constant", on_change=_on_option,
                     args=("opt_gravitational_constant",))

    graph = build_graph(store.creatures)
    session.update(graph, configure(st.session_state.options))
    if session.last_error is not None:
        st.error(f"Could not update the graph view: {session.last_error}")

    surface: PlotlySurface = st.session_state.surface
    if surface.figure is not None:
        st.plotly_chart(surface.figure, use_container_width=True)

    stats = graph.get_stats()
    st.markdown(
        f"Nodes: {stats['nodes']}  \n"
        f"Creatures: {stats['creatures']}, Leaf food: {stats['leaf_food']}  \n"
        f"Edges: {stats['edges']} (self-loops: {stats['loops']})"
    )
