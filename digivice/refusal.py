import random

from .constants import DEFAULT_TUNABLES
from .models import PersonalityArchetype, RefusalReason, Stimulus, TraumaType
from .safeguards import evaluate_safeguards


def _active(kernel, trauma_type):
    trauma = kernel.traumas.get(trauma_type)
    if trauma is not None and trauma.is_active:
        return trauma
    return None


def check_refusal(creature, action, rng=None, tunables=None, verdict=None) -> RefusalReason:
    """
    Decides whether the creature refuses a command. Rules run in strict
    priority order and the first match wins:

    1. safeguard override (dissociation)
    2. biological hard limits
    3-4. trauma triggers
    5-7. emotional thresholds
    8. personality (chaotic creatures rebel at random)

    `verdict` lets a caller that already ran the safeguard monitor pass its
    result in instead of scoring the action twice. Never mutates `creature`.
    """
    cfg = tunables or DEFAULT_TUNABLES
    rng = rng or random

    if verdict is None:
        verdict = evaluate_safeguards(creature, action, cfg)
    if verdict.refusal == RefusalReason.DISSOCIATED:
        return RefusalReason.DISSOCIATED

    parsed = Stimulus.parse(action)
    if parsed is None:
        print(f"Warning: unknown action {action!r}, nothing to refuse.")
        return RefusalReason.NONE

    kernel, stats = creature.kernel, creature.stats
    axes = kernel.axes

    # Biological override
    if parsed == Stimulus.TRAIN and stats.energy < cfg.train_exhausted_energy:
        return RefusalReason.OVERWHELMED
    if parsed == Stimulus.FEED and stats.hunger > cfg.feed_full_hunger:
        return RefusalReason.NOT_HUNGRY

    # Trauma triggers
    overload = _active(kernel, TraumaType.OVERLOAD)
    if overload and overload.severity > cfg.fear_overload_severity and parsed in (Stimulus.TRAIN, Stimulus.SCAN):
        return RefusalReason.FEAR

    betrayal = _active(kernel, TraumaType.BETRAYAL)
    if (betrayal and betrayal.severity > cfg.defiance_betrayal_severity
            and parsed == Stimulus.FEED and axes.trust < cfg.defiance_betrayal_trust):
        return RefusalReason.DEFIANCE

    # Emotional thresholds
    if parsed == Stimulus.TRAIN and axes.stress > cfg.defiance_train_stress and axes.trust < cfg.defiance_train_trust:
        return RefusalReason.DEFIANCE
    if parsed == Stimulus.WAKE and stats.energy < cfg.defiance_wake_energy and axes.trust < cfg.defiance_wake_trust:
        return RefusalReason.DEFIANCE
    if parsed == Stimulus.SCAN and axes.stability < cfg.scan_min_stability:
        return RefusalReason.OVERWHELMED

    # Personality
    if kernel.personality == PersonalityArchetype.CHAOTIC and rng.random() < cfg.chaotic_defiance_chance:
        return RefusalReason.DEFIANCE

    return RefusalReason.NONE
