from digivice.constants import EVOLUTION_TREE
from digivice.evolution import (
    EvolutionState, advance_sync, begin_sync, check_evolution, commit_evolution,
    is_frozen, next_stage, poll_evolution, species_info,
)
from digivice.models import (
    DigimonStage, EvolutionNode, EvolutionPhase, KernelConditions, MemoryType,
    PersonalityArchetype, Requirements, StatRequirements, TraumaState, TraumaType,
)
from digivice.simulation import new_creature

AGUMON_ONLY = {
    'botamon': EvolutionNode(id='botamon', stage=DigimonStage.BABY, next=('agumon',)),
    'agumon': EVOLUTION_TREE['agumon'],
}


def ready_botamon(strength=15, trust=30, stress=40):
    c = new_creature()
    c.stats.strength = strength
    c.kernel.axes.trust = trust
    c.kernel.axes.stress = stress
    return c


def test_requirements_are_inclusive():
    assert check_evolution(ready_botamon()) == 'agumon'
    assert check_evolution(ready_botamon(), AGUMON_ONLY) == 'agumon'


def test_one_short_of_the_threshold():
    assert check_evolution(ready_botamon(strength=14), AGUMON_ONLY) is None
    assert check_evolution(ready_botamon(stress=41), AGUMON_ONLY) is None
    assert check_evolution(ready_botamon(trust=29), AGUMON_ONLY) is None


def test_table_order_breaks_ties():
    # too weak for agumon, strong enough for betamon
    assert check_evolution(ready_botamon(strength=14)) == 'betamon'


def test_node_without_requirements_is_always_eligible():
    c = new_creature()
    c.id = 'greymon'
    c.stage = DigimonStage.CHAMPION
    assert check_evolution(c) == 'metalgreymon'


def test_terminal_or_unknown_species():
    c = new_creature()
    c.id = 'metalgreymon'
    assert check_evolution(c) is None
    c.id = 'missingno'
    assert check_evolution(c) is None


def test_dark_evolution_needs_deep_trauma():
    c = new_creature()
    c.id = 'agumon'
    c.stage = DigimonStage.ROOKIE
    c.stats.strength = 60
    c.kernel.axes.trust = 0
    assert check_evolution(c) is None

    c.kernel.traumas[TraumaType.OVERLOAD] = TraumaState(type=TraumaType.OVERLOAD, severity=75)
    assert check_evolution(c) == 'darkgreymon'


def test_personality_requirement():
    tree = {
        'botamon': EvolutionNode(id='botamon', stage=DigimonStage.BABY, next=('gabumon',)),
        'gabumon': EvolutionNode(
            id='gabumon', stage=DigimonStage.ROOKIE,
            requirements=Requirements(kernel_conditions=KernelConditions(
                required_personality=PersonalityArchetype.TIMID)),
        ),
    }
    c = new_creature()
    assert check_evolution(c, tree) is None
    c.kernel.personality = PersonalityArchetype.TIMID
    assert check_evolution(c, tree) == 'gabumon'


def test_zero_threshold_is_still_checked():
    tree = {
        'botamon': EvolutionNode(id='botamon', stage=DigimonStage.BABY, next=('numemon',)),
        'numemon': EvolutionNode(
            id='numemon', stage=DigimonStage.ROOKIE,
            requirements=Requirements(min_stats=StatRequirements(strength=0),
                                      kernel_conditions=KernelConditions(max_stress=0)),
        ),
    }
    c = new_creature()
    assert check_evolution(c, tree) is None
    c.kernel.axes.stress = 0
    assert check_evolution(c, tree) == 'numemon'


def test_stage_ladder():
    assert next_stage(DigimonStage.BABY) == DigimonStage.ROOKIE
    assert next_stage(DigimonStage.CHAMPION) == DigimonStage.ULTIMATE
    assert next_stage(DigimonStage.ULTIMATE) == DigimonStage.ULTIMATE


def test_species_info():
    assert species_info('agumon').attribute == 'Vaccine'
    assert species_info('missingno') is None


def test_poll_only_starts_from_idle():
    state = poll_evolution(EvolutionState(), ready_botamon())
    assert state.phase == EvolutionPhase.SIGNAL_DETECTED
    assert state.target_id == 'agumon'

    syncing = EvolutionState(phase=EvolutionPhase.SYNCING, progress=30, target_id='betamon')
    assert poll_evolution(syncing, ready_botamon()) == syncing
    assert poll_evolution(EvolutionState(), new_creature()) == EvolutionState()


def test_sync_only_begins_on_a_detected_signal():
    assert begin_sync(EvolutionState()).phase == EvolutionPhase.IDLE
    detected = EvolutionState(phase=EvolutionPhase.SIGNAL_DETECTED, target_id='agumon')
    assert begin_sync(detected).phase == EvolutionPhase.SYNCING


def test_holding_the_signal_completes_the_rewrite():
    c = ready_botamon()
    state = begin_sync(poll_evolution(EvolutionState(), c))
    for _ in range(49):
        state, c = advance_sync(state, c, True, 30)
    assert state.phase == EvolutionPhase.SYNCING
    assert state.progress == 98
    assert c.id == 'botamon'

    state, c = advance_sync(state, c, True, 30)
    assert state.phase == EvolutionPhase.DATA_REWRITE
    assert c.id == 'agumon'
    assert c.stage == DigimonStage.ROOKIE
    assert c.name == 'Botamon'
    assert c.kernel.memories[-1].type == MemoryType.TRIUMPH


def test_releasing_drains_progress_back_to_signal():
    c = ready_botamon()
    state = EvolutionState(phase=EvolutionPhase.SYNCING, progress=10, target_id='agumon')
    state, c = advance_sync(state, c, False, 30)
    assert (state.phase, state.progress) == (EvolutionPhase.SYNCING, 5)
    state, c = advance_sync(state, c, False, 30)
    assert (state.phase, state.progress) == (EvolutionPhase.SIGNAL_DETECTED, 0)
    assert state.target_id == 'agumon'
    assert c.id == 'botamon'


def test_rewrite_and_complete_settle_in_time():
    c = ready_botamon()
    state = EvolutionState(phase=EvolutionPhase.DATA_REWRITE, progress=100, target_id='agumon')
    state, c = advance_sync(state, c, False, 990)
    assert state.phase == EvolutionPhase.DATA_REWRITE
    state, c = advance_sync(state, c, False, 10)
    assert state.phase == EvolutionPhase.COMPLETE

    state, c = advance_sync(state, c, True, 2999)
    assert state.phase == EvolutionPhase.COMPLETE
    state, c = advance_sync(state, c, True, 1)
    assert state == EvolutionState()


def test_idle_sync_steps_do_nothing():
    c = ready_botamon()
    assert advance_sync(EvolutionState(), c, True, 30) == (EvolutionState(), c)


def test_frozen_phases():
    assert is_frozen(EvolutionState(phase=EvolutionPhase.SYNCING))
    assert is_frozen(EvolutionState(phase=EvolutionPhase.DATA_REWRITE))
    assert not is_frozen(EvolutionState(phase=EvolutionPhase.SIGNAL_DETECTED))
    assert not is_frozen(EvolutionState(phase=EvolutionPhase.COMPLETE))
    assert not is_frozen(EvolutionState())


def test_commit_warns_when_ladder_and_table_disagree(capsys):
    tree = {
        'botamon': EvolutionNode(id='botamon', stage=DigimonStage.BABY, next=('omegamon',)),
        'omegamon': EvolutionNode(id='omegamon', stage=DigimonStage.ULTIMATE),
    }
    evolved = commit_evolution(new_creature(), 'omegamon', tree)
    assert evolved.stage == DigimonStage.ROOKIE
    assert evolved.id == 'omegamon'
    assert "stage ladder" in capsys.readouterr().out


def test_commit_does_not_touch_input():
    c = ready_botamon()
    before = c.clone()
    commit_evolution(c, 'agumon')
    assert c == before
