import sys
import random
import datetime
import pygame

from .constants import FPS, SEED, SYNC_RATE_MS, TICK_RATE_MS, TIME_SCALE
from .evolution import (
    EvolutionState, advance_sync, begin_sync, is_frozen, poll_evolution, species_info,
)
from .models import EvolutionPhase, RefusalReason, Stimulus
from .simulation import TickConfig, acknowledge_refusal, interact, new_creature, tap, tick

SCREEN_WIDTH = 320
SCREEN_HEIGHT = 80
COLOR_BG = (40, 44, 52)
COLOR_SYNC = (97, 175, 239)

# Two independent periodic sources
TICK_EVENT = pygame.USEREVENT + 1
SYNC_EVENT = pygame.USEREVENT + 2

KEY_BINDINGS = {
    pygame.K_f: Stimulus.FEED,
    pygame.K_t: Stimulus.TRAIN,
    pygame.K_s: Stimulus.SCAN,
    pygame.K_x: Stimulus.SCOLD,
    pygame.K_z: Stimulus.SLEEP,
    pygame.K_w: Stimulus.WAKE,
}
# P pets the creature, A backs off after a refusal, SPACE held syncs an evolution.


class MessageLog:
    def __init__(self, limit=50):
        self.messages = []
        self.unread = 0
        self.limit = limit

    def add_message(self, text, notify=True):
        timestamp = datetime.datetime.now().strftime("%H:%M")
        self.messages.append(f"[{timestamp}] {text}")
        self.messages = self.messages[-self.limit:]
        if notify:
            self.unread += 1

    def latest(self):
        return self.messages[-1] if self.messages else ""

    def mark_read(self):
        self.unread = 0


class GameEngine:
    """Owns the current creature snapshot and feeds it through the core."""

    def __init__(self, creature=None, rng=None, tick_config=None, tunables=None, tree=None):
        pygame.init()
        self.screen = pygame.display.set_mode((SCREEN_WIDTH, SCREEN_HEIGHT))
        self.clock = pygame.time.Clock()

        self.rng = rng or random.Random(SEED)
        self.tick_config = tick_config or TickConfig()
        self.tunables = tunables
        self.tree = tree

        self.creature = creature or new_creature()
        self.evolution = EvolutionState()
        self.sustain_held = False
        self.last_refusal = None
        self.skipped_ticks = 0
        self.message_log = MessageLog()

        pygame.time.set_timer(TICK_EVENT, max(1, int(TICK_RATE_MS / TIME_SCALE)))
        pygame.time.set_timer(SYNC_EVENT, SYNC_RATE_MS)
        self.add_game_message(f"{self.creature.name} is online.", notify=False)

    def add_game_message(self, text, notify=True):
        if not text:
            return
        self.message_log.add_message(text, notify)

    # --- Timers ---
    def handle_tick(self):
        """Slow timer. Observed but skipped while an evolution is syncing or rewriting."""
        if is_frozen(self.evolution):
            self.skipped_ticks += 1
            return False

        self.creature = tick(self.creature, self.tick_config, self.rng, self.tunables)
        before = self.evolution.phase
        self.evolution = poll_evolution(self.evolution, self.creature, self.tree, self.tunables)
        if before != self.evolution.phase:
            self.add_game_message(f"Evolution signal detected: {self.evolution.target_id}! Hold SPACE to sync.")
        return True

    def handle_sync(self, elapsed_ms=SYNC_RATE_MS):
        """Fast timer. The only place evolution progress moves."""
        before = self.evolution.phase
        target = self.evolution.target_id
        self.evolution, self.creature = advance_sync(
            self.evolution, self.creature, self.sustain_held, elapsed_ms, self.tree)
        after = self.evolution.phase
        if before == after:
            return
        if after == EvolutionPhase.DATA_REWRITE:
            info = species_info(target)
            label = f" ({info.species})" if info else ""
            self.add_game_message(f"Data rewrite: {self.creature.name} became {target}{label}!")
        elif after == EvolutionPhase.SIGNAL_DETECTED:
            self.add_game_message("Sync lost. The signal is still there.", notify=False)

    # --- Commands ---
    def perform(self, action):
        """Returns the refusal reason, or None when the command was ignored mid-evolution."""
        if is_frozen(self.evolution):
            return None
        result = interact(self.creature, action, self.rng, self.tunables)
        self.creature = result.creature
        if result.refusal != RefusalReason.NONE:
            self.last_refusal = result.refusal
            self.add_game_message(f"{self.creature.name} refused: {result.refusal.name}")
        return result.refusal

    def acknowledge(self):
        if is_frozen(self.evolution):
            return
        # there is nothing to respect in a dissociated refusal
        if self.last_refusal in (None, RefusalReason.DISSOCIATED):
            return
        self.creature = acknowledge_refusal(self.creature, self.tunables)
        self.last_refusal = None

    def pet(self):
        if is_frozen(self.evolution):
            return
        self.creature = tap(self.creature, self.tunables)

    def press_sustain(self):
        self.sustain_held = True
        self.evolution = begin_sync(self.evolution)

    def release_sustain(self):
        self.sustain_held = False

    # --- Loop ---
    def status_line(self):
        evo = self.evolution
        line = f"{self.creature.name} [{self.creature.stage.name}] {self.creature.condition.mood.name}"
        if evo.phase != EvolutionPhase.IDLE:
            line += f" | {evo.phase.name} {int(evo.progress)}%"
        return line

    def step(self):
        """Process a single loop iteration (useful for headless tests). Returns False to stop."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == TICK_EVENT:
                self.handle_tick()
            elif event.type == SYNC_EVENT:
                self.handle_sync()
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                if event.key in KEY_BINDINGS:
                    self.perform(KEY_BINDINGS[event.key])
                elif event.key == pygame.K_p:
                    self.pet()
                elif event.key == pygame.K_a:
                    self.acknowledge()
                elif event.key == pygame.K_SPACE:
                    self.press_sustain()
            elif event.type == pygame.KEYUP and event.key == pygame.K_SPACE:
                self.release_sustain()

        pygame.display.set_caption(self.status_line())
        self.screen.fill(COLOR_BG)
        if self.evolution.phase == EvolutionPhase.SYNCING:
            width = int(SCREEN_WIDTH * self.evolution.progress / 100.0)
            pygame.draw.rect(self.screen, COLOR_SYNC, (0, SCREEN_HEIGHT - 8, width, 8))
        pygame.display.flip()
        self.clock.tick(FPS)
        return True

    def run(self):
        running = True
        while running:
            running = self.step()


def main():
    print("Initializing GameEngine...")
    engine = GameEngine()
    print("GameEngine initialized. Starting run loop...")
    try:
        engine.run()
    except Exception as e:
        print(f"Error during run loop: {e}")
        return 1
    finally:
        print("Exiting. Pygame quit.")
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
