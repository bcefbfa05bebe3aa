"""
Tick orchestration and the player-command pipeline.

The caller owns the current creature snapshot and threads it through these
functions; nothing here keeps a reference between calls.
"""
from dataclasses import dataclass

from .constants import (
    COMMAND_EFFECTS, DEFAULT_TUNABLES, ENERGY_DECAY, ENERGY_REGEN_SLEEP,
    HUNGER_DECAY, INITIAL_CREATURE,
)
from .kernel import apply_stimulus, passive_drift
from .models import Creature, Mood, RefusalReason, Stimulus
from .narrative import analyze_player_patterns, update_narrative_tags
from .refusal import check_refusal
from .safeguards import evaluate_safeguards, is_dissociated


@dataclass(frozen=True)
class TickConfig:
    hunger_decay: float = HUNGER_DECAY
    energy_decay: float = ENERGY_DECAY
    sleep_regen: float = ENERGY_REGEN_SLEEP


@dataclass
class InteractionResult:
    creature: Creature
    refusal: RefusalReason

    @property
    def accepted(self) -> bool:
        return self.refusal == RefusalReason.NONE


def new_creature(template=None) -> Creature:
    return (template or INITIAL_CREATURE).clone()


def derive_mood(creature, tunables=None) -> Mood:
    """Exactly one mood; the order of checks is the tie-break."""
    cfg = tunables or DEFAULT_TUNABLES
    axes = creature.kernel.axes
    energy = creature.stats.energy

    if is_dissociated(creature.meta, cfg):
        return Mood.REFUSING
    if creature.kernel.is_fragmented:
        return Mood.FRACTURED
    if axes.stress > cfg.angry_stress:
        return Mood.ANGRY
    if axes.curiosity < cfg.sad_curiosity and axes.stress > cfg.sad_stress:
        return Mood.SAD
    if axes.curiosity > cfg.hyper_curiosity and energy > cfg.hyper_energy:
        return Mood.HYPER
    if axes.trust > cfg.happy_trust and axes.stress < cfg.happy_stress:
        return Mood.HAPPY
    if energy < cfg.tired_energy:
        return Mood.TIRED
    return Mood.NEUTRAL


def tick(creature, config=None, rng=None, tunables=None) -> Creature:
    """
    One fixed-interval step: biological decay, passive kernel drift,
    narrative tags, mood. The core has no clock; the caller sets the cadence.
    """
    config = config or TickConfig()
    cfg = tunables or DEFAULT_TUNABLES
    updated = creature.clone()
    stats = updated.stats

    # 1. Biology
    if updated.condition.is_sleeping:
        stats.energy = min(stats.max_energy, stats.energy + config.sleep_regen)
        stats.hunger = max(0.0, stats.hunger - config.hunger_decay / 2)
    else:
        stats.energy = max(0.0, stats.energy - config.energy_decay)
        stats.hunger = max(0.0, stats.hunger - config.hunger_decay)
    stats.age += 1

    # 2. Kernel drift
    updated.kernel = passive_drift(updated, rng, cfg)

    # 3. Narrative emergence
    updated = update_narrative_tags(updated)

    # 4. Output layer
    updated.condition.mood = derive_mood(updated, cfg)
    return updated


def _apply_command_effects(creature, stimulus):
    stats = creature.stats
    for stat, delta in COMMAND_EFFECTS.get(stimulus.name, {}).items():
        value = getattr(stats, stat) + delta
        if stat == 'hunger':
            value = min(100.0, value)
        elif stat == 'energy':
            value = min(stats.max_energy, value)
        setattr(stats, stat, max(0, value))

    if stimulus == Stimulus.TRAIN:
        creature.history.training_sessions += 1
    elif stimulus == Stimulus.SCOLD:
        creature.history.mistakes += 1
    elif stimulus == Stimulus.SLEEP:
        creature.condition.is_sleeping = True
    elif stimulus == Stimulus.WAKE:
        creature.condition.is_sleeping = False


def interact(creature, action, rng=None, tunables=None) -> InteractionResult:
    """
    Runs a player command through the safeguard monitor, then the refusal
    policy, and only then lets it touch stats and the kernel.

    A refused command still updates the meta bookkeeping (cruelty score,
    dissociation, input entropy) but never a stat or an axis.
    """
    cfg = tunables or DEFAULT_TUNABLES
    stimulus = Stimulus.parse(action)
    if stimulus is None:
        print(f"Warning: unknown command {action!r}, ignoring.")
        return InteractionResult(creature=creature.clone(), refusal=RefusalReason.NONE)

    verdict = evaluate_safeguards(creature, stimulus, cfg)
    updated = creature.clone()
    updated.meta = verdict.meta
    updated.history.recent_actions = (updated.history.recent_actions + [stimulus])[-cfg.confusion_window:]
    updated.meta = analyze_player_patterns(updated, updated.history.recent_actions, cfg)

    reason = check_refusal(creature, stimulus, rng, cfg, verdict=verdict)
    if reason == RefusalReason.DISSOCIATED:
        updated.condition.mood = Mood.REFUSING
        return InteractionResult(creature=updated, refusal=reason)
    if reason != RefusalReason.NONE:
        return InteractionResult(creature=updated, refusal=reason)

    _apply_command_effects(updated, stimulus)
    updated.kernel = apply_stimulus(updated.kernel, stimulus, creature.stats, cfg,
                                    timestamp=creature.stats.age)
    return InteractionResult(creature=updated, refusal=reason)


def acknowledge_refusal(creature, tunables=None) -> Creature:
    """
    The player backs off after a refusal. Respecting it builds trust,
    except while dissociated: a numb creature takes nothing from it.
    """
    updated = creature.clone()
    if is_dissociated(creature.meta, tunables):
        return updated
    updated.kernel = apply_stimulus(creature.kernel, Stimulus.REFUSAL, creature.stats, tunables,
                                    timestamp=creature.stats.age)
    return updated


def tap(creature, tunables=None) -> Creature:
    """Petting. Skips the refusal pipeline but not dissociation."""
    updated = creature.clone()
    if is_dissociated(creature.meta, tunables):
        return updated
    updated.kernel = apply_stimulus(creature.kernel, Stimulus.PRAISE, creature.stats, tunables,
                                    timestamp=creature.stats.age)
    return updated
