"""Long-horizon observations about the player and the creature's story."""
from .constants import DEFAULT_TUNABLES
from .models import MemoryType


def input_entropy(recent_inputs, window_size=DEFAULT_TUNABLES.confusion_window) -> float:
    """
    Distinct action types over the full window size, so a short history
    reads as low entropy. 0 for an empty window.
    """
    if not recent_inputs or window_size <= 0:
        return 0.0
    return len(set(recent_inputs)) / window_size


def analyze_player_patterns(creature, recent_inputs, tunables=None):
    """
    Detects a confused player (lots of different buttons, low trust) and
    recomputes the volatility index. Returns a new meta state.
    """
    cfg = tunables or DEFAULT_TUNABLES
    meta = creature.meta.clone()
    window = list(recent_inputs)[-cfg.confusion_window:]
    trust = creature.kernel.axes.trust

    entropy = input_entropy(window, cfg.confusion_window)
    meta.metrics.input_entropy = entropy

    damping = meta.safeguards.confusion_damping
    if entropy > cfg.entropy_threshold and trust < cfg.confusion_trust:
        damping = min(100.0, damping + cfg.confusion_step)
    else:
        damping = max(0.0, damping - cfg.confusion_decay)
    meta.safeguards.confusion_damping = damping

    meta.metrics.volatility_index = (100.0 - creature.kernel.axes.stability) / 100.0
    return meta


def update_narrative_tags(creature):
    """Sets one-way narrative flags. Flags already set stay set."""
    updated = creature.clone()
    axes = updated.kernel.axes
    flags = updated.meta.narrative

    # Broke down once, stable again
    if axes.stability > 80 and any(m.type == MemoryType.TRAUMA for m in updated.kernel.memories):
        flags.has_survived_breakdown = True

    # High sync despite low stability: a leap of faith
    if axes.sync > 80 and axes.stability < 40:
        flags.has_trusted_strangers = True

    return updated
