"""
Ethical safeguard: keeps cruelty strategies from paying off.

A decaying cruelty score is kept in the creature's meta state. Once it passes
the threshold the creature dissociates: it goes numb, every command is refused
and nothing about it changes until the player stops. The game becomes boring
instead of rewarding abuse with a bigger reaction.
"""
from dataclasses import dataclass

from .constants import DEFAULT_TUNABLES
from .models import MetaState, Mood, RefusalReason, Stimulus


@dataclass
class SafeguardVerdict:
    meta: MetaState
    refusal: RefusalReason


def is_cruel(creature, action: Stimulus, tunables=None) -> bool:
    cfg = tunables or DEFAULT_TUNABLES
    energy = creature.stats.energy
    if action == Stimulus.SCOLD and creature.condition.mood == Mood.SAD:
        return True
    if action == Stimulus.TRAIN and energy < cfg.train_exhausted_energy:
        return True
    if action == Stimulus.WAKE and energy < cfg.forced_wake_energy:
        return True
    return False


def is_dissociated(meta: MetaState, tunables=None) -> bool:
    cfg = tunables or DEFAULT_TUNABLES
    return meta.safeguards.dissociation_level > cfg.dissociated_mood_level


def evaluate_safeguards(creature, action, tunables=None) -> SafeguardVerdict:
    """Scores one action and returns the updated meta state plus the override verdict."""
    cfg = tunables or DEFAULT_TUNABLES
    meta = creature.meta.clone()
    metrics = meta.metrics
    safeguards = meta.safeguards

    parsed = Stimulus.parse(action)
    if parsed is not None and is_cruel(creature, parsed, cfg):
        metrics.cruelty_score = min(1.0, metrics.cruelty_score + cfg.cruelty_trigger)
    else:
        metrics.cruelty_score = max(0.0, metrics.cruelty_score - cfg.cruelty_decay)

    if metrics.cruelty_score > cfg.dissociation_threshold:
        safeguards.dissociation_level = 100.0
        return SafeguardVerdict(meta=meta, refusal=RefusalReason.DISSOCIATED)

    safeguards.dissociation_level = max(0.0, safeguards.dissociation_level - cfg.dissociation_decay)
    return SafeguardVerdict(meta=meta, refusal=RefusalReason.NONE)
