# web_form.py
"""
Form callbacks for the streamlit page.

Each callback takes the session state mapping (``st.session_state`` in the
app, a plain dict in tests) holding the ``store`` and the input widget keys,
and keeps the widgets in step with ``store.form``.
"""

from creature import DEFAULT_COLOR

NAME_KEY = "name_input"
EATS_KEY = "eats_input"
COLOR_KEY = "color_input"
UPLOAD_KEY = "import_file"


def load_form(state, form):
    state[NAME_KEY] = form.name
    state[EATS_KEY] = form.eats
    state[COLOR_KEY] = form.color


def submit(state):
    store = state["store"]
    name = state.get(NAME_KEY, "")
    eats = state.get(EATS_KEY, "")
    color = state.get(COLOR_KEY, DEFAULT_COLOR)
    if store.editing is not None:
        ok = store.commitEdit(store.editing, name, eats, color)
    else:
        ok = store.add(name, eats, color)
    if ok:
        load_form(state, store.form)


def edit(state, index):
    load_form(state, state["store"].startEdit(index))


def cancel(state):
    store = state["store"]
    store.cancelEdit()
    load_form(state, store.form)


def delete(state, index):
    store = state["store"]
    was_editing = store.editing == index
    store.remove(index)
    if was_editing:
        load_form(state, store.form)


def import_upload(state):
    # A successful import resets the store's form, so the widgets follow
    uploaded = state.get(UPLOAD_KEY)
    store = state["store"]
    if uploaded is not None and store.import_snapshot(uploaded.getvalue()):
        load_form(state, store.form)
