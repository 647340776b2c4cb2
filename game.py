# =============================================================================
# Bottle Wheel
# A Pygame name-drawing wheel: a ring of names turns slowly while a bottle in
# the middle spins and comes to rest pointing at the winner.
#
# Key Features:
# - Fair draw: winners come from an unbiased, OS-backed random source.
# - Only-new mode skips everyone already drawn.
# - The wheel never stops; the bottle eases onto a target computed against
#   where the wheel will be when the spin ends.
# - Roster and drawn history are saved to a cookie-style JSON jar.
# - MQTT client for integration with a wireless hardware button.
#
# Controls:
# - SPACE:      Spin the bottle.
# - N:          Toggle only-new mode.
# - C:          Clear the drawn history.
# - L:          (L)oad the roster from the names file.
# - A:          (A)dd back the first suggested default name.
# - R:          Reset everything to the default roster.
# - Q / ESC:    Quit the application.
# =============================================================================

# ========= IMPORTS =========
import logging
import math
import os
import sys

import pygame
import paho.mqtt.client as mqtt # For wireless button communication

import settings
from entrants import eligible_names
from geometry import POINTER_REFERENCE_ANGLE, segment_bounds
from orchestrator import SpinOrchestrator, SpinOutcome
from persistence import CookieStore, WheelStore

log = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        return default


# =============================================================================
# --- CONFIGURATION ---
# =============================================================================

# --- FILES ---
STATE_PATH = os.getenv("WHEEL_STATE_PATH", "wheel_cookies.json")  # Cookie jar file.
NAMES_FILE = os.getenv("WHEEL_NAMES_FILE", "names.txt")           # Roster for the L key.

# --- DISPLAY ---
FULLSCREEN = _env_int("WHEEL_FULLSCREEN", 0) == 1
WINDOW_SIZE = (1200, 800)
FPS        = 120       # Target frames per second for smooth animation.
MARGIN_PX  = 40        # Minimum space between the wheel and the edge of the window.

# --- MQTT ---
MQTT_BROKER = os.getenv("MQTT_BROKER", "localhost")
MQTT_PORT   = _env_int("MQTT_PORT", 1883)
TOPIC_SPIN   = "wheel/spin"
TOPIC_STATE  = "wheel/state"
TOPIC_WINNER = "wheel/winner"

# --- FONTS ---
FONT_UI = "Arial"
FONT_SIZES = {
    "title": 56,
    "result": 64,
    "status": 26,
    "label": 20,
    "list_title": 30,
    "list": 24,
}

# --- COLORS ---
COLOR_BG        = (20, 20, 28)
COLOR_WHITE     = (255, 255, 255)
COLOR_DIM       = (150, 150, 160)
COLOR_GOLD      = (255, 215, 0)
COLOR_GLASS     = (235, 240, 245)
COLOR_CAP       = (125, 211, 252)
COLOR_POOL      = (120, 220, 120)
COLOR_DRAWN     = (255, 140, 140)

PLACEHOLDER_NAME = "No names"

# Posted by the MQTT thread so spins always start on the frame loop.
SPIN_REQUEST = pygame.USEREVENT + 1

STATUS_TEXT = {
    SpinOutcome.STARTED: "Spinning... the winner is already drawn.",
    SpinOutcome.NO_ENTRANTS: "No names on the wheel.",
    SpinOutcome.NO_ELIGIBLE: "Everyone has been drawn. Press C to start over.",
}


# ========= UI HELPERS =========

def blit_center(surface, img, center):
    """Draws an image onto a surface, with the image's center at the specified coordinate."""
    surface.blit(img, img.get_rect(center=center))

def segment_color(i, total):
    """Spreads segment hues evenly around the color wheel."""
    color = pygame.Color(0, 0, 0)
    color.hsva = ((i * 360 / total) % 360, 65, 85, 100)
    return color

def make_bottle_surface(size):
    """Draws the bottle once, neck pointing up. Rotated per frame afterwards."""
    w, h = int(size * 0.5), int(size * 1.1)
    surf = pygame.Surface((w, h), pygame.SRCALPHA)
    cx = w // 2
    body = pygame.Rect(0, 0, int(size * 0.44), int(size * 0.54))
    body.midbottom = (cx, h - int(size * 0.04))
    neck = pygame.Rect(0, 0, int(size * 0.20), int(size * 0.30))
    neck.midbottom = (cx, body.top + int(size * 0.04))
    cap = pygame.Rect(0, 0, int(size * 0.24), int(size * 0.10))
    cap.midbottom = (cx, neck.top + int(size * 0.02))
    pygame.draw.rect(surf, COLOR_GLASS, body, border_radius=int(size * 0.12))
    pygame.draw.rect(surf, COLOR_GLASS, neck, border_radius=int(size * 0.08))
    pygame.draw.rect(surf, COLOR_CAP, cap, border_radius=int(size * 0.06))
    pygame.draw.rect(surf, (0, 0, 0), body, width=2, border_radius=int(size * 0.12))
    return surf


# ========= GAME =========
class Game:
    """Owns the window, the spin orchestrator and the MQTT link."""
    def __init__(self):
        pygame.init()
        self.clock = pygame.time.Clock()

        # --- Display Setup ---
        flags = 0
        if FULLSCREEN:
            flags |= pygame.FULLSCREEN
            info = pygame.display.Info()
            self.WINDOW_SIZE = (info.current_w, info.current_h)
        else:
            self.WINDOW_SIZE = WINDOW_SIZE
        self.screen = pygame.display.set_mode(self.WINDOW_SIZE, flags)
        pygame.display.set_caption("Bottle Wheel — Space:Spin | N:Only new | C:Clear | L:Load | A:Add default | R:Reset | Q/Esc:Quit")

        # --- Geometry ---
        self.cx, self.cy = self.WINDOW_SIZE[1] // 2 + MARGIN_PX, self.WINDOW_SIZE[1] // 2
        self.wheel_radius = min(self.WINDOW_SIZE[1], self.WINDOW_SIZE[0]) // 2 - MARGIN_PX
        self.bottle_img = make_bottle_surface(self.wheel_radius * 0.45)
        self._init_fonts()

        # --- Wheel State ---
        self.store = WheelStore(CookieStore(STATE_PATH))
        self.state = settings.load_state(self.store)
        self.wheel = SpinOrchestrator(self.state, self.store, on_winner=self._on_winner)

        # --- UI State ---
        self.result_display_text = ""
        self.status_text = ""
        self.flash_timer = 0

        self._setup_mqtt()

    def _init_fonts(self):
        """Initializes all Pygame font objects using names and sizes from the configuration."""
        self.title_font      = pygame.font.SysFont(FONT_UI, FONT_SIZES["title"], bold=True)
        self.result_font     = pygame.font.SysFont(FONT_UI, FONT_SIZES["result"], bold=True)
        self.status_font     = pygame.font.SysFont(FONT_UI, FONT_SIZES["status"])
        self.label_font      = pygame.font.SysFont(FONT_UI, FONT_SIZES["label"], bold=True)
        self.list_title_font = pygame.font.SysFont(FONT_UI, FONT_SIZES["list_title"], bold=True)
        self.list_font       = pygame.font.SysFont(FONT_UI, FONT_SIZES["list"])

    def run(self):
        print("Ready. Press SPACE to spin or use the wireless button.")
        running = True
        while running:
            running = self._handle_events()              # Process user input
            self._update_state(pygame.time.get_ticks())  # Advance the animation
            self._draw()                                 # Render the current frame
            self.clock.tick(FPS)                         # Control frame rate
        # --- Shutdown ---
        if self.mqtt_client and self.mqtt_client.is_connected():
            self.mqtt_client.loop_stop()
        pygame.quit()
        sys.exit(0)

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT: return False
            if event.type == SPIN_REQUEST: self._start_spin()
            if event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q): return False
                if event.key == pygame.K_SPACE: self._start_spin()
                # Roster edits wait until the bottle has settled.
                if self.wheel.is_spinning: continue
                if event.key == pygame.K_n:
                    settings.set_only_new(self.state, self.store, not self.state.only_new)
                    self.status_text = "Only new names." if self.state.only_new else "Everyone can be drawn."
                if event.key == pygame.K_c:
                    settings.clear_drawn(self.state, self.store)
                    self.result_display_text = ""; self.status_text = "Drawn history cleared."
                if event.key == pygame.K_l:
                    if settings.load_names_file(self.state, self.store, NAMES_FILE):
                        self.status_text = f"Loaded {len(self.state.names)} names from {NAMES_FILE}."
                    else:
                        self.status_text = f"Could not read {NAMES_FILE}."
                if event.key == pygame.K_a:
                    suggested = settings.suggestions(self.state)
                    if suggested:
                        settings.add_suggestion(self.state, self.store, suggested[0])
                        self.status_text = f"Added {suggested[0]}."
                    else:
                        self.status_text = "Every default name is already on the wheel."
                if event.key == pygame.K_r:
                    settings.reset_all(self.state, self.store)
                    self.result_display_text = ""; self.status_text = "Reset to the default names."
        return True

    def _update_state(self, now):
        self.flash_timer += 1
        self.wheel.tick(now)
        if self.wheel.is_spinning:
            pct = int(self.wheel.controller.progress(now) * 100)
            self.status_text = f"{STATUS_TEXT[SpinOutcome.STARTED]} {pct}%"

    def _start_spin(self):
        """Asks the orchestrator for a spin and reports why if it refuses."""
        outcome = self.wheel.trigger()
        if outcome is SpinOutcome.BUSY:
            return
        self.status_text = STATUS_TEXT[outcome]
        self.result_display_text = ""
        if outcome is SpinOutcome.STARTED:
            self._publish(TOPIC_STATE, "spinning")

    def _on_winner(self, name):
        self.result_display_text = name
        self.status_text = "Saved to the drawn list."
        self._publish(TOPIC_WINNER, name)
        self._publish(TOPIC_STATE, "idle")

    # ========= DRAWING =========

    def _draw(self):
        """Main drawing function."""
        self.screen.fill(COLOR_BG)
        self._draw_wheel()
        self._draw_bottle()
        self._draw_lists()
        self._draw_result()
        pygame.display.flip()

    def _draw_wheel(self):
        """Draws one pie slice and label per name at the current wheel angle."""
        names = list(self.wheel.entrants or self.state.names) or [PLACEHOLDER_NAME]
        total = len(names)
        wheel_angle = self.wheel.controller.wheel_angle
        steps = max(2, 240 // total)
        for i, name in enumerate(names):
            start, end = segment_bounds(i, total, wheel_angle)
            points = [(self.cx, self.cy)]
            for s in range(steps + 1):
                a = start + (end - start) * s / steps
                points.append((self.cx + self.wheel_radius * math.cos(a), self.cy + self.wheel_radius * math.sin(a)))
            pygame.draw.polygon(self.screen, segment_color(i, total), points)
            pygame.draw.line(self.screen, COLOR_BG, (self.cx, self.cy), points[1], 2)

            # Labels read outwards along the middle of the slice.
            mid = (start + end) / 2
            label = self.label_font.render(name, True, COLOR_WHITE)
            label = pygame.transform.rotate(label, -math.degrees(mid))
            r = self.wheel_radius * 0.68
            blit_center(self.screen, label, (self.cx + r * math.cos(mid), self.cy + r * math.sin(mid)))

        pygame.draw.circle(self.screen, (0, 0, 0), (self.cx, self.cy), self.wheel_radius + 6, width=6)
        pygame.draw.circle(self.screen, (0, 0, 0, 80), (self.cx, self.cy), int(self.wheel_radius * 0.25))

    def _draw_bottle(self):
        """The bottle image points up, so turn it by its offset from the reference angle."""
        offset = self.wheel.controller.pointer_angle - POINTER_REFERENCE_ANGLE
        rotated = pygame.transform.rotozoom(self.bottle_img, -math.degrees(offset), 1.0)
        blit_center(self.screen, rotated, (self.cx, self.cy))

    def _draw_lists(self):
        """Pool and drawn lists on the right-hand side."""
        x = self.cx + self.wheel_radius + MARGIN_PX * 2
        y = 40
        mode = "only new" if self.state.only_new else "everyone"
        for title, items, color in (
            (f"Pool ({mode})", eligible_names(self.state), COLOR_POOL),
            ("Drawn", self.state.drawn, COLOR_DRAWN),
            ("Suggestions (A adds)", settings.suggestions(self.state), COLOR_GOLD),
        ):
            title_surf = self.list_title_font.render(title, True, color)
            self.screen.blit(title_surf, (x, y)); y += title_surf.get_height() + 6
            for name in (items or ["—"])[:12]:
                surf = self.list_font.render(name, True, COLOR_WHITE if items else COLOR_DIM)
                self.screen.blit(surf, (x + 10, y)); y += surf.get_height()
            if len(items) > 12:
                more = self.list_font.render(f"... and {len(items) - 12} more", True, COLOR_DIM)
                self.screen.blit(more, (x + 10, y)); y += more.get_height()
            y += 24

    def _draw_result(self):
        x, bottom = self.cx + self.wheel_radius + MARGIN_PX * 2, self.WINDOW_SIZE[1] - 30
        if self.status_text:
            status = self.status_font.render(self.status_text, True, COLOR_DIM)
            self.screen.blit(status, status.get_rect(bottomleft=(x, bottom)))
            bottom -= status.get_height() + 6
        if self.result_display_text:
            # Flash the title, keep the name steady.
            result_surf = self.result_font.render(self.result_display_text, True, COLOR_GOLD)
            result_rect = result_surf.get_rect(bottomleft=(x, bottom))
            self.screen.blit(result_surf, result_rect)
            if (self.flash_timer // 30) % 2 == 0:
                title = self.title_font.render("Winner", True, COLOR_WHITE)
                self.screen.blit(title, title.get_rect(bottomleft=result_rect.topleft))

    # ========= MQTT =========

    def _setup_mqtt(self):
        """Sets up the MQTT client, defines callbacks, and connects to the broker."""
        self.mqtt_client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
        self.mqtt_client.on_connect = self._on_mqtt_connect
        self.mqtt_client.on_message = self._on_mqtt_message
        try:
            self.mqtt_client.connect(MQTT_BROKER, MQTT_PORT, 60)
            self.mqtt_client.loop_start() # Starts a background thread for MQTT
        except OSError as e:
            log.warning("MQTT connection to %s:%s failed (%s); keyboard controls only", MQTT_BROKER, MQTT_PORT, e)

    def _on_mqtt_connect(self, client, userdata, flags, rc, properties):
        """Callback executed on successful connection to the MQTT broker."""
        if rc == 0:
            log.info("Connected to MQTT broker %s:%s", MQTT_BROKER, MQTT_PORT)
            client.subscribe(TOPIC_SPIN) # Subscribe to the button's topic
        else:
            log.warning("MQTT broker refused the connection: %s", rc)

    def _on_mqtt_message(self, client, userdata, msg):
        """Runs on the MQTT thread, so it only queues the request for the frame loop."""
        if msg.topic == TOPIC_SPIN and msg.payload == b"pressed":
            pygame.event.post(pygame.event.Event(SPIN_REQUEST))

    def _publish(self, topic, payload):
        """Publishes wheel state or the winner for the button to react to."""
        if self.mqtt_client and self.mqtt_client.is_connected():
            self.mqtt_client.publish(topic, payload=payload, qos=0, retain=False)
            log.debug("Published %s: %s", topic, payload)


# ========= ENTRY POINT =========
def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - [%(name)s] - %(message)s',
    )
    game = Game()
    game.run()


if __name__ == "__main__":
    main()
