from digivice.kernel import record_memory
from digivice.models import MemoryType, Stimulus
from digivice.narrative import analyze_player_patterns, input_entropy, update_narrative_tags
from digivice.simulation import interact, new_creature

from fakes import CALM

MASHING = [Stimulus.FEED, Stimulus.TRAIN, Stimulus.SCAN, Stimulus.PRAISE, Stimulus.SCOLD]


def test_input_entropy():
    assert input_entropy([]) == 0.0
    assert input_entropy([Stimulus.FEED] * 5) == 0.2
    assert input_entropy(MASHING) == 1.0
    assert input_entropy([Stimulus.FEED, Stimulus.FEED, Stimulus.TRAIN, Stimulus.TRAIN]) == 0.4
    assert input_entropy([Stimulus.FEED, Stimulus.TRAIN], window_size=2) == 1.0


def test_short_history_is_low_entropy():
    assert input_entropy([Stimulus.FEED]) == 0.2
    assert input_entropy([Stimulus.FEED, Stimulus.TRAIN]) == 0.4


def test_first_command_does_not_look_confused():
    c = new_creature()
    assert c.kernel.axes.trust < 30
    c = interact(c, Stimulus.FEED, CALM).creature
    assert c.meta.metrics.input_entropy == 0.2
    assert c.meta.safeguards.confusion_damping == 0.0

    c = interact(c, Stimulus.SCAN, CALM).creature
    assert c.meta.safeguards.confusion_damping == 0.0


def test_confused_player_raises_damping():
    c = new_creature()
    c.kernel.axes.trust = 20
    meta = analyze_player_patterns(c, MASHING)
    assert meta.metrics.input_entropy == 1.0
    assert meta.safeguards.confusion_damping == 5.0


def test_damping_decays_with_trust_or_focus():
    c = new_creature()
    c.meta.safeguards.confusion_damping = 10.0
    c.kernel.axes.trust = 50
    assert analyze_player_patterns(c, MASHING).safeguards.confusion_damping == 9.0

    c.kernel.axes.trust = 10
    assert analyze_player_patterns(c, [Stimulus.FEED] * 5).safeguards.confusion_damping == 9.0

    c.meta.safeguards.confusion_damping = 0.5
    assert analyze_player_patterns(c, [Stimulus.FEED]).safeguards.confusion_damping == 0.0


def test_only_the_latest_window_counts():
    c = new_creature()
    history = [Stimulus.FEED] * 10 + MASHING
    assert analyze_player_patterns(c, history).metrics.input_entropy == 1.0


def test_volatility_tracks_stability():
    c = new_creature()
    c.kernel.axes.stability = 25
    assert analyze_player_patterns(c, []).metrics.volatility_index == 0.75


def test_survived_breakdown_needs_a_trauma_memory():
    c = new_creature()
    c.kernel.axes.stability = 90
    assert update_narrative_tags(c).meta.narrative.has_survived_breakdown is False

    record_memory(c.kernel, MemoryType.TRAUMA, 95, "kernel fragmentation")
    assert update_narrative_tags(c).meta.narrative.has_survived_breakdown is True


def test_trusted_strangers():
    c = new_creature()
    c.kernel.axes.sync = 85
    c.kernel.axes.stability = 30
    assert update_narrative_tags(c).meta.narrative.has_trusted_strangers is True


def test_flags_are_never_cleared():
    c = new_creature()
    c.meta.narrative.has_trusted_strangers = True
    c.meta.narrative.has_survived_breakdown = True
    c.kernel.axes.sync = 0
    c.kernel.axes.stability = 0
    flags = update_narrative_tags(c).meta.narrative
    assert flags.has_trusted_strangers and flags.has_survived_breakdown
