"""
Resonance field: how a nearby creature's signal nudges this one.

Only the calculation lives here. Getting a RemoteSignal from another device
is left to whatever transport the caller wires up.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class RemoteSignal:
    stress: float
    trust: float


@dataclass(frozen=True)
class ResonanceEffect:
    stress_mod: float = 0.0
    sync_mod: float = 0.0


def calculate_resonance(creature, signal: RemoteSignal) -> ResonanceEffect:
    axes = creature.kernel.axes

    stress_mod = 0.0
    if axes.stress > 60 and signal.stress > 60:
        stress_mod = 0.5   # shared anxiety feeds itself
    if axes.stress > 60 and signal.stress < 20:
        stress_mod = -0.5  # a calm partner anchors

    if abs(axes.trust - signal.trust) > 50:
        sync_mod = -1.0    # dissonance
    else:
        sync_mod = 1.0

    return ResonanceEffect(stress_mod=stress_mod, sync_mod=sync_mod)


def apply_resonance(kernel, effect: ResonanceEffect):
    updated = kernel.clone()
    updated.axes.stress += effect.stress_mod
    updated.axes.sync += effect.sync_mod
    updated.axes.clamp_all()
    return updated
