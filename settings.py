# =============================================================================
# Settings
# Roster editing: replacing the name list, the only-new switch, clearing the
# drawn history and a full reset. Every change is normalized and saved
# straight away.
# =============================================================================

import logging

from entrants import WheelState, identity, parse_names

log = logging.getLogger(__name__)

# Used whenever the roster would otherwise end up empty.
DEFAULT_NAMES = [
    "Obszerny Obszar",
    "Inteligentny Fidek",
    "Sucha Suchecka",
]


def load_state(store):
    """Stored state, or a fresh one with the default roster."""
    state = store.load() or WheelState()
    if not state.names:
        state.names = list(DEFAULT_NAMES)
    store.save(state)
    return state


def commit_names(state, store, text):
    """Replaces the roster with the names in `text`, one per line."""
    names = parse_names(text)
    if not names:
        names = list(DEFAULT_NAMES)
    state.names = names
    store.save(state)
    log.info("Roster updated: %d names", len(state.names))
    return state


def load_names_file(state, store, path):
    """Replaces the roster from a UTF-8 text file. A missing or undecodable file leaves it unchanged."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, ValueError) as e:
        log.warning("Could not read names file '%s': %s", path, e)
        return False
    commit_names(state, store, text)
    return True


def set_only_new(state, store, only_new):
    state.only_new = bool(only_new)
    store.save(state)
    return state


def clear_drawn(state, store):
    state.drawn = []
    store.save(state)
    log.info("Drawn history cleared")
    return state


def reset_all(state, store):
    """Deletes the stored record and goes back to the default roster."""
    store.delete()
    state.names = list(DEFAULT_NAMES)
    state.drawn = []
    state.only_new = False
    store.save(state)
    log.info("Wheel reset to defaults")
    return state


def suggestions(state):
    """Default names not currently on the roster."""
    have = {identity(n) for n in state.names}
    return [n for n in DEFAULT_NAMES if identity(n) not in have]


def add_suggestion(state, store, name):
    state.names.append(str(name))
    store.save(state)
    return state
