# =============================================================================
# Spin Orchestrator
# Decides whether a spin may start, draws the winner, hands it to the
# animation controller and records the result once the bottle has settled.
# =============================================================================

import logging
from enum import Enum

from animation import AnimationController
from entrants import WheelState, eligible_indices
from fair_random import FairRandom

log = logging.getLogger(__name__)


class SpinOutcome(Enum):
    """What a spin request turned into."""
    STARTED = "started"
    BUSY = "busy"                  # A spin is already running; request ignored.
    NO_ENTRANTS = "no_entrants"    # The roster is empty.
    NO_ELIGIBLE = "no_eligible"    # Only-new is on and everyone has been drawn.


class SpinOrchestrator:
    """
    Owns the drawn history for the lifetime of the app.

    `store` is anything with save(state); `on_winner(name)` is called after
    the winner has been recorded and saved.
    """

    def __init__(self, state: WheelState, store, rng=None, controller=None, on_winner=None):
        self.state = state
        self.store = store
        self.rng = rng or FairRandom()
        self.controller = controller or AnimationController(rng=self.rng)
        self.controller.on_settled = self._on_settled
        self.on_winner = on_winner
        self.entrants = ()        # Roster snapshot taken for the spin in flight.
        self.last_winner = None

    @property
    def is_spinning(self) -> bool:
        return self.controller.is_spinning

    def eligible(self):
        return eligible_indices(self.state.names, self.state.drawn, self.state.only_new)

    def trigger(self) -> SpinOutcome:
        """Starts a spin if one can start. Never raises for bad roster states."""
        if self.controller.is_spinning:
            log.debug("Spin blocked: already spinning")
            return SpinOutcome.BUSY

        names = tuple(self.state.names)
        if not names:
            log.info("Spin refused: no entrants")
            return SpinOutcome.NO_ENTRANTS

        pool = eligible_indices(names, self.state.drawn, self.state.only_new)
        if not pool:
            log.info("Spin refused: all %d entrants already drawn", len(names))
            return SpinOutcome.NO_ELIGIBLE

        index = self.rng.choice(pool)
        self.entrants = names
        self.last_winner = None
        self.controller.start_spin(index, len(names))
        return SpinOutcome.STARTED

    def tick(self, now):
        return self.controller.tick(now)

    def _on_settled(self, winner_index, session):
        name = self.entrants[winner_index]
        self.entrants = ()
        self.last_winner = name

        if self.state.record_drawn(name):
            log.info("Winner: '%s' (%d drawn so far)", name, len(self.state.drawn))
        else:
            log.info("Winner: '%s' (already in history)", name)
        self.store.save(self.state)

        if self.on_winner:
            self.on_winner(name)
