# =============================================================================
# Persistence
# Best-effort storage of the roster, the drawn history and the only-new flag.
#
# The record lives in a small cookie-style key-value jar: each value is a
# URL-encoded string with an absolute expiry. In a browser that jar is
# document.cookie; here it is a JSON file next to the app. A broken or
# missing record is never fatal: callers just get None and start fresh.
# =============================================================================

import json
import logging
import os
import shutil
import time
from datetime import datetime
from urllib.parse import quote, unquote

from entrants import WheelState

log = logging.getLogger(__name__)

# --- CONFIGURATION ---
COOKIE_KEY  = "wheel_state_v1"
COOKIE_DAYS = 365
COOKIE_PATH = "/"
COOKIE_SAMESITE = "Lax"

# Characters encodeURIComponent leaves alone.
_URI_SAFE = "-_.!~*'()"


def encode_component(value: str) -> str:
    return quote(value, safe=_URI_SAFE)


def decode_component(value: str) -> str:
    return unquote(value)


def set_cookie_header(name, value, days=COOKIE_DAYS):
    """The Set-Cookie header a web host would send for this entry."""
    max_age = int(days * 24 * 60 * 60)
    return (f"{name}={encode_component(value)}; Max-Age={max_age}; "
            f"Path={COOKIE_PATH}; SameSite={COOKIE_SAMESITE}")


def create_backup(filename):
    """Copies a file aside with a timestamp suffix. Returns the backup path or None."""
    backup_path = f"{filename}.{datetime.now().strftime('%Y%m%d_%H%M%S')}.bak"
    try:
        shutil.copy2(filename, backup_path)
    except OSError as e:
        log.error("Backup of '%s' failed: %s", filename, e)
        return None
    log.info("Backup created: %s", backup_path)
    return backup_path


class CookieStore:
    """File-backed name -> string jar with per-entry expiry."""

    def __init__(self, path, clock=time.time):
        self.path = path
        self.clock = clock

    def _read(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                jar = json.load(f)
            if not isinstance(jar, dict):
                raise ValueError("cookie jar is not an object")
            return jar
        except ValueError as e:
            log.warning("Cookie jar '%s' is corrupted (%s); starting empty", self.path, e)
            create_backup(self.path)
            return {}
        except OSError as e:
            log.warning("Could not read cookie jar '%s': %s", self.path, e)
            return {}

    def _write(self, jar):
        tmp = f"{self.path}.tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(jar, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            log.error("Could not write cookie jar '%s': %s", self.path, e)
            try:
                if os.path.exists(tmp):
                    os.remove(tmp)
            except OSError as cleanup_error:
                log.warning("Could not remove '%s': %s", tmp, cleanup_error)
            return False

    def get(self, name):
        """Decoded value of a live entry, or None if absent or expired."""
        entry = self._read().get(name)
        if not isinstance(entry, dict) or not isinstance(entry.get("value"), str):
            return None
        expires = entry.get("expires")
        if isinstance(expires, (int, float)) and expires <= self.clock():
            return None
        return decode_component(entry["value"])

    def set(self, name, value, days=COOKIE_DAYS):
        jar = self._read()
        jar[name] = {
            "value": encode_component(value),
            "expires": self.clock() + days * 24 * 60 * 60,
            # What a browser host would send; kept so the jar can be replayed as cookies.
            "set_cookie": set_cookie_header(name, value, days),
        }
        return self._write(jar)

    def delete(self, name):
        jar = self._read()
        if name in jar:
            del jar[name]
            return self._write(jar)
        return True


class WheelStore:
    """
    Loads and saves a WheelState under a single cookie key.

    The stored value is the JSON record {"names": [...], "drawn": [...],
    "onlyNew": bool}.
    """

    def __init__(self, store, key=COOKIE_KEY):
        self.store = store
        self.key = key

    def load(self):
        """The stored state, or None if there is none or it can't be parsed."""
        raw = self.store.get(self.key)
        if not raw:
            return None
        try:
            record = json.loads(raw)
        except ValueError as e:
            log.warning("Ignoring unreadable wheel state: %s", e)
            return None
        state = WheelState.from_record(record)
        if state is None:
            log.warning("Ignoring wheel state with unexpected shape")
        return state

    def save(self, state: WheelState):
        """Normalizes `state` in place, then writes it."""
        state.normalize()
        return self.store.set(self.key, json.dumps(state.to_record(), ensure_ascii=False))

    def delete(self):
        return self.store.delete(self.key)
