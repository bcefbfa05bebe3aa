"""
Evolution: eligibility checks against the static tree, plus the staged
transition the player drives by holding the sync signal.

    IDLE -> SIGNAL_DETECTED -> SYNCING -> DATA_REWRITE -> COMPLETE -> IDLE

SYNCING falls back to SIGNAL_DETECTED when the signal is released long enough
for progress to drain to 0. DATA_REWRITE is the commit point.
"""
from dataclasses import dataclass, replace
from typing import Optional

from .constants import (
    COMPLETE_SETTLE_MS, DEFAULT_TUNABLES, EVOLUTION_TREE, REWRITE_SETTLE_MS,
    SPECIES_DATA, SYNC_DECAY, SYNC_GAIN,
)
from .kernel import record_memory
from .models import DigimonStage, EvolutionPhase, MemoryType

STAGE_LADDER = {
    DigimonStage.EGG: DigimonStage.BABY,
    DigimonStage.BABY: DigimonStage.ROOKIE,
    DigimonStage.ROOKIE: DigimonStage.CHAMPION,
    DigimonStage.CHAMPION: DigimonStage.ULTIMATE,
    DigimonStage.ULTIMATE: DigimonStage.ULTIMATE,
}


@dataclass(frozen=True)
class EvolutionState:
    phase: EvolutionPhase = EvolutionPhase.IDLE
    progress: float = 0.0
    target_id: Optional[str] = None
    settle_ms: float = 0.0  # time spent in DATA_REWRITE / COMPLETE


def next_stage(stage: DigimonStage) -> DigimonStage:
    return STAGE_LADDER[stage]


def species_info(species_id):
    return SPECIES_DATA.get(species_id)


def _meets(creature, requirements, cfg) -> bool:
    stats = creature.stats
    kernel = creature.kernel
    axes = kernel.axes

    min_stats = requirements.min_stats
    if min_stats is not None:
        if min_stats.strength is not None and stats.strength < min_stats.strength:
            return False
        if min_stats.defense is not None and stats.defense < min_stats.defense:
            return False

    cond = requirements.kernel_conditions
    if cond is not None:
        if cond.min_trust is not None and axes.trust < cond.min_trust:
            return False
        if cond.max_stress is not None and axes.stress > cond.max_stress:
            return False
        if cond.min_sync is not None and axes.sync < cond.min_sync:
            return False
        if cond.required_personality is not None and kernel.personality != cond.required_personality:
            return False
        if cond.requires_trauma and not any(
                t.severity > cfg.trauma_evolution_severity for t in kernel.traumas.values()):
            return False
    return True


def check_evolution(creature, tree=None, tunables=None) -> Optional[str]:
    """First candidate, in table order, whose requirements all hold. None otherwise."""
    tree = tree or EVOLUTION_TREE
    cfg = tunables or DEFAULT_TUNABLES
    node = tree.get(creature.id)
    if node is None or not node.next:
        return None

    for next_id in node.next:
        candidate = tree[next_id]
        if candidate.requirements is None:
            return next_id
        if _meets(creature, candidate.requirements, cfg):
            return next_id
    return None


def is_frozen(state: EvolutionState) -> bool:
    """While syncing or rewriting, ordinary drift ticks must not run."""
    return state.phase in (EvolutionPhase.SYNCING, EvolutionPhase.DATA_REWRITE)


def poll_evolution(state: EvolutionState, creature, tree=None, tunables=None) -> EvolutionState:
    if state.phase != EvolutionPhase.IDLE:
        return state
    target = check_evolution(creature, tree, tunables)
    if target is None:
        return state
    return replace(state, phase=EvolutionPhase.SIGNAL_DETECTED, target_id=target, progress=0.0)


def begin_sync(state: EvolutionState) -> EvolutionState:
    if state.phase != EvolutionPhase.SIGNAL_DETECTED:
        return state
    return replace(state, phase=EvolutionPhase.SYNCING)


def commit_evolution(creature, target_id, tree=None):
    """Rewrites identity and stage. The stage follows the fixed ladder, not the node."""
    tree = tree or EVOLUTION_TREE
    evolved = creature.clone()
    laddered = next_stage(creature.stage)
    declared = tree[target_id].stage
    if laddered != declared:
        print(f"Warning: {target_id} is declared {declared.name} but the stage ladder gives {laddered.name}")
    evolved.id = target_id
    evolved.stage = laddered
    record_memory(evolved.kernel, MemoryType.TRIUMPH, 100.0, f"evolved into {target_id}",
                  tags=("evolution", laddered.name.lower()), timestamp=evolved.stats.age)
    return evolved


def advance_sync(state: EvolutionState, creature, sustained: bool, elapsed_ms: float = 0.0, tree=None):
    """
    One step of the fast timer. The sustain flag is sampled here and nowhere
    else, so this is the only place progress changes direction.
    Returns (state, creature).
    """
    if state.phase == EvolutionPhase.SYNCING:
        if sustained:
            progress = min(100.0, state.progress + SYNC_GAIN)
            if progress >= 100.0:
                evolved = commit_evolution(creature, state.target_id, tree)
                return replace(state, phase=EvolutionPhase.DATA_REWRITE, progress=100.0, settle_ms=0.0), evolved
            return replace(state, progress=progress), creature

        progress = max(0.0, state.progress - SYNC_DECAY)
        if progress == 0.0:
            return replace(state, phase=EvolutionPhase.SIGNAL_DETECTED, progress=0.0), creature
        return replace(state, progress=progress), creature

    if state.phase == EvolutionPhase.DATA_REWRITE:
        settled = state.settle_ms + elapsed_ms
        if settled >= REWRITE_SETTLE_MS:
            return EvolutionState(phase=EvolutionPhase.COMPLETE), creature
        return replace(state, settle_ms=settled), creature

    if state.phase == EvolutionPhase.COMPLETE:
        settled = state.settle_ms + elapsed_ms
        if settled >= COMPLETE_SETTLE_MS:
            return EvolutionState(), creature
        return replace(state, settle_ms=settled), creature

    return state, creature
