"""
Kernel dynamics: how the creature's emotional axes react to stimuli,
how trauma accrues and heals, and the passive drift applied every tick.

All functions take a snapshot and return a new one; inputs are never mutated.
"""
import random
from dataclasses import dataclass
from typing import Dict

from .constants import DEFAULT_TUNABLES
from .models import (
    CreatureStats, EmotionalKernel, MemoryTrace, MemoryType,
    PersonalityArchetype, Stimulus, TraumaState, TraumaType,
)


@dataclass
class TraumaImpact:
    traumas: Dict[TraumaType, TraumaState]
    safe_tick_bonus: int  # +1 safe, -1 breaks the recovery streak, 0 neutral


def prune_traumas(traumas):
    """Drops healed entries (severity <= 0). Running it twice changes nothing."""
    return {t_type: t for t_type, t in traumas.items() if t.severity > 0}


def _get_or_create(traumas, trauma_type):
    trauma = traumas.get(trauma_type)
    if trauma is None:
        trauma = TraumaState(type=trauma_type)
        traumas[trauma_type] = trauma
    return trauma


def record_memory(kernel: EmotionalKernel, memory_type: MemoryType, intensity: float,
                  description: str, tags=(), timestamp: int = 0) -> MemoryTrace:
    """Appends a memory trace to the kernel's log. The log is never pruned."""
    trace = MemoryTrace(
        id=f"mem-{len(kernel.memories) + 1}",
        timestamp=timestamp,
        type=memory_type,
        intensity=intensity,
        tags=list(tags),
        description=description,
    )
    kernel.memories.append(trace)
    return trace


def apply_trauma_impact(kernel: EmotionalKernel, stimulus: Stimulus, stats: CreatureStats,
                        tunables=None) -> TraumaImpact:
    """Accrual and healing rules for a single stimulus."""
    cfg = tunables or DEFAULT_TUNABLES
    traumas = {t_type: TraumaState(**vars(t)) for t_type, t in kernel.traumas.items()}
    bonus = 0

    # OVERLOAD: working while stressed or exhausted
    if stimulus in (Stimulus.TRAIN, Stimulus.SCAN):
        if kernel.axes.stress > cfg.overload_stress or stats.energy < cfg.overload_energy:
            t = _get_or_create(traumas, TraumaType.OVERLOAD)
            t.severity = min(100.0, t.severity + cfg.overload_step)
            t.trigger_count += 1
            t.recovery = 0.0
            bonus = -1
        else:
            bonus = 1

    # ABANDONMENT heals through consistent feeding
    if stimulus == Stimulus.FEED:
        t = traumas.get(TraumaType.ABANDONMENT)
        if t is not None:
            t.recovery += cfg.feed_recovery
            if t.recovery >= cfg.recovery_target:
                t.severity = max(0.0, t.severity - cfg.healing_step)
                t.recovery = cfg.recovery_momentum
        bonus = 1

    # BETRAYAL: scolding a stressed creature, or forcing a tired one awake
    forced_wake = stimulus == Stimulus.WAKE and stats.energy < cfg.forced_wake_energy
    if stimulus == Stimulus.SCOLD or forced_wake:
        if kernel.axes.stress > cfg.betrayal_stress or stimulus == Stimulus.WAKE:
            t = _get_or_create(traumas, TraumaType.BETRAYAL)
            t.severity = min(100.0, t.severity + cfg.betrayal_step)
            t.trigger_count += 1
            t.recovery = 0.0
            bonus = -1

    # Rest and respected refusals heal every open wound a little
    if stimulus in (Stimulus.SLEEP, Stimulus.REFUSAL):
        bonus = 1
        for t in traumas.values():
            if t.severity > 0:
                t.recovery += 1

    return TraumaImpact(traumas=prune_traumas(traumas), safe_tick_bonus=bonus)


def _react(kernel, stimulus, stats):
    axes = kernel.axes
    p = kernel.personality

    if stimulus == Stimulus.FEED:
        axes.trust += 2
        axes.stress -= 5
        if p == PersonalityArchetype.CURIOUS:
            axes.curiosity -= 2
    elif stimulus == Stimulus.TRAIN:
        axes.stress += 5
        axes.aggression += 2
        if p == PersonalityArchetype.BRAVE:
            axes.stress -= 3
            axes.sync += 1
        elif p == PersonalityArchetype.TIMID:
            axes.stress += 8
    elif stimulus == Stimulus.SCAN:
        axes.curiosity -= 10
        axes.sync += 2
        axes.stability -= 1
    elif stimulus == Stimulus.PRAISE:
        axes.trust += 3
        axes.stability += 2
    elif stimulus == Stimulus.REFUSAL:
        axes.trust += 1
        axes.stress -= 2
    elif stimulus == Stimulus.SLEEP:
        axes.stress -= 10
        axes.stability += 5
    elif stimulus == Stimulus.WAKE:
        if stats.energy < 50:
            axes.stress += 10
            axes.trust -= 5
        else:
            axes.stress += 2
    # SCOLD and IGNORE only act through trauma


def _distort(kernel, stimulus, cfg):
    """Existing wounds colour how the reaction lands."""
    axes = kernel.axes
    for t in kernel.traumas.values():
        if t.severity <= cfg.distortion_threshold:
            continue
        if t.type == TraumaType.ABANDONMENT and stimulus == Stimulus.PRAISE:
            axes.trust -= 2
            axes.stress += 1
        elif t.type == TraumaType.BETRAYAL:
            axes.trust *= cfg.betrayal_trust_factor
            axes.stability -= 2


def update_fragmentation(kernel: EmotionalKernel, tunables=None) -> bool:
    """
    Two-threshold latch. Enters above the stress / below the stability bound,
    exits only once both recover past the wider bounds; anything in between
    keeps the previous state. Returns True when the kernel just fragmented.
    """
    cfg = tunables or DEFAULT_TUNABLES
    axes = kernel.axes
    was_fragmented = kernel.is_fragmented
    if axes.stress > cfg.fragment_enter_stress and axes.stability < cfg.fragment_enter_stability:
        kernel.is_fragmented = True
    elif axes.stress < cfg.fragment_exit_stress and axes.stability > cfg.fragment_exit_stability:
        kernel.is_fragmented = False
    return kernel.is_fragmented and not was_fragmented


def apply_stimulus(kernel: EmotionalKernel, stimulus, stats: CreatureStats,
                   tunables=None, timestamp: int = 0) -> EmotionalKernel:
    """
    Full reaction to one stimulus: trauma impact, safe-tick streak, base
    reaction, trauma distortion, fragmentation latch, then clamping.
    Unknown stimuli leave the kernel untouched.
    """
    cfg = tunables or DEFAULT_TUNABLES
    new_kernel = kernel.clone()

    parsed = Stimulus.parse(stimulus)
    if parsed is None:
        print(f"Warning: unknown stimulus {stimulus!r}, ignoring.")
        return new_kernel

    impact = apply_trauma_impact(kernel, parsed, stats, cfg)
    new_kernel.traumas = impact.traumas

    if impact.safe_tick_bonus > 0:
        new_kernel.consecutive_safe_ticks += 1
    elif impact.safe_tick_bonus < 0:
        new_kernel.consecutive_safe_ticks = 0

    if new_kernel.consecutive_safe_ticks > cfg.safe_streak_threshold:
        new_kernel.axes.stability += 1
        new_kernel.axes.stress -= 1

    _react(new_kernel, parsed, stats)
    _distort(new_kernel, parsed, cfg)

    if update_fragmentation(new_kernel, cfg):
        record_memory(new_kernel, MemoryType.TRAUMA, new_kernel.axes.stress,
                      "kernel fragmentation", tags=("breakdown", parsed.name.lower()),
                      timestamp=timestamp)

    new_kernel.axes.clamp_all()
    return new_kernel


def passive_drift(creature, rng=None, tunables=None) -> EmotionalKernel:
    """Once-per-tick drift. The fragmentation noise is the only random input."""
    cfg = tunables or DEFAULT_TUNABLES
    rng = rng or random
    kernel = creature.kernel.clone()
    axes = kernel.axes

    # Starvation opens (or deepens) abandonment
    if creature.stats.hunger < cfg.starvation_hunger:
        t = _get_or_create(kernel.traumas, TraumaType.ABANDONMENT)
        t.severity = min(100.0, t.severity + cfg.abandonment_step)
        t.recovery = 0.0
        kernel.consecutive_safe_ticks = 0
        axes.stress += 5
        axes.trust -= 1

    if axes.trust > cfg.trust_regen_threshold:
        axes.stability += cfg.stability_regen
    else:
        axes.stability -= cfg.stability_decay

    if kernel.is_fragmented:
        axes.stress += rng.uniform(-cfg.fragment_noise, cfg.fragment_noise)
        axes.aggression += rng.uniform(-cfg.fragment_noise, cfg.fragment_noise)

    kernel.traumas = prune_traumas(kernel.traumas)
    axes.clamp_all()
    return kernel
