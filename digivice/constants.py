import os
from dataclasses import dataclass

from .models import (
    Creature, CreatureStats, DigimonStage, EmotionalAxes, EmotionalKernel,
    EvolutionNode, KernelConditions, PersonalityArchetype, Requirements,
    SpeciesData, StatRequirements,
)


def _env_number(name, default, cast=float):
    """
    Reads a positive numeric override from the environment, keeping the
    default on bad input. Rates and scales must stay above zero.
    """
    raw = os.getenv(name, "")
    if raw == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        print(f"Warning: ignoring invalid {name}={raw!r}, using {default}")
        return default
    if not value > 0:
        print(f"Warning: ignoring non-positive {name}={raw!r}, using {default}")
        return default
    return value


# --- GLOBAL CONFIGURATION ---
TICK_RATE_MS = _env_number("DIGIVICE_TICK_MS", 3000, int)   # biological / emotional drift
SYNC_RATE_MS = _env_number("DIGIVICE_SYNC_MS", 30, int)     # evolution sync integration
TIME_SCALE = _env_number("DIGIVICE_TIME_SCALE", 1.0)        # 10 = ticks fire 10x faster
SEED = os.getenv("DIGIVICE_SEED")                           # fixed PRNG seed for replays
FPS = 30

# --- BIOLOGY (per tick) ---
HUNGER_DECAY = 2
ENERGY_DECAY = 1
ENERGY_REGEN_SLEEP = 5

# --- COMMAND EFFECTS (stat deltas once a command is accepted) ---
COMMAND_EFFECTS = {
    'FEED': {'hunger': 20, 'weight': 1},
    'TRAIN': {'strength': 2, 'energy': -5, 'exp': 5},
    'SCAN': {'exp': 1},
}

# --- EVOLUTION SYNC ---
SYNC_GAIN = 2.0          # progress per fast step while the signal is held
SYNC_DECAY = 5.0         # progress lost per fast step once released
REWRITE_SETTLE_MS = 1000
COMPLETE_SETTLE_MS = 3000


@dataclass(frozen=True)
class Tunables:
    """
    Every threshold the simulation core reads. Pass a modified copy
    (dataclasses.replace) to rebalance or to pin behaviour in tests.
    """
    # Kernel dynamics
    fragment_enter_stress: float = 90.0
    fragment_enter_stability: float = 20.0
    fragment_exit_stress: float = 50.0
    fragment_exit_stability: float = 40.0
    safe_streak_threshold: int = 10
    distortion_threshold: float = 30.0
    betrayal_trust_factor: float = 0.95
    starvation_hunger: float = 5.0
    abandonment_step: float = 5.0
    fragment_noise: float = 5.0
    trust_regen_threshold: float = 60.0
    stability_regen: float = 0.5
    stability_decay: float = 0.1

    # Trauma accrual / healing
    overload_stress: float = 70.0
    overload_energy: float = 10.0
    overload_step: float = 10.0
    betrayal_step: float = 15.0
    betrayal_stress: float = 50.0
    forced_wake_energy: float = 20.0
    feed_recovery: float = 5.0
    recovery_target: float = 100.0
    recovery_momentum: float = 50.0
    healing_step: float = 10.0

    # Refusal policy
    train_exhausted_energy: float = 5.0
    feed_full_hunger: float = 90.0
    fear_overload_severity: float = 50.0
    defiance_betrayal_severity: float = 40.0
    defiance_betrayal_trust: float = 20.0
    defiance_train_stress: float = 80.0
    defiance_train_trust: float = 40.0
    defiance_wake_energy: float = 30.0
    defiance_wake_trust: float = 50.0
    scan_min_stability: float = 10.0
    chaotic_defiance_chance: float = 0.1

    # Ethical safeguards
    cruelty_trigger: float = 0.1
    cruelty_decay: float = 0.05
    dissociation_threshold: float = 0.8
    dissociation_decay: float = 5.0
    dissociated_mood_level: float = 80.0

    # Narrative analyzer
    confusion_window: int = 5
    entropy_threshold: float = 0.9
    confusion_trust: float = 30.0
    confusion_step: float = 5.0
    confusion_decay: float = 1.0

    # Mood derivation
    angry_stress: float = 80.0
    sad_curiosity: float = 20.0
    sad_stress: float = 50.0
    hyper_curiosity: float = 80.0
    hyper_energy: float = 50.0
    happy_trust: float = 70.0
    happy_stress: float = 30.0
    tired_energy: float = 20.0

    # Evolution
    trauma_evolution_severity: float = 70.0


DEFAULT_TUNABLES = Tunables()


# --- EVOLUTION TREE (table order is the tie-break) ---
EVOLUTION_TREE = {
    'botamon': EvolutionNode(
        id='botamon',
        stage=DigimonStage.BABY,
        next=('agumon', 'betamon'),
    ),
    'agumon': EvolutionNode(
        id='agumon',
        stage=DigimonStage.ROOKIE,
        requirements=Requirements(
            min_stats=StatRequirements(strength=15),
            kernel_conditions=KernelConditions(min_trust=30, max_stress=40),
        ),
        next=('greymon', 'darkgreymon'),
    ),
    'betamon': EvolutionNode(
        id='betamon',
        stage=DigimonStage.ROOKIE,
        requirements=Requirements(
            min_stats=StatRequirements(strength=10),
            kernel_conditions=KernelConditions(min_trust=10),
        ),
        next=('seadramon',),
    ),
    'greymon': EvolutionNode(
        id='greymon',
        stage=DigimonStage.CHAMPION,
        requirements=Requirements(
            min_stats=StatRequirements(strength=50),
            kernel_conditions=KernelConditions(min_trust=60, min_sync=40),
        ),
        next=('metalgreymon',),
    ),
    'darkgreymon': EvolutionNode(
        id='darkgreymon',
        stage=DigimonStage.CHAMPION,
        requirements=Requirements(
            min_stats=StatRequirements(strength=60),
            kernel_conditions=KernelConditions(max_stress=100, requires_trauma=True),
        ),
    ),
    'seadramon': EvolutionNode(
        id='seadramon',
        stage=DigimonStage.CHAMPION,
        requirements=Requirements(
            min_stats=StatRequirements(strength=40),
            kernel_conditions=KernelConditions(max_stress=60),
        ),
    ),
    'metalgreymon': EvolutionNode(
        id='metalgreymon',
        stage=DigimonStage.ULTIMATE,
    ),
}

# --- DIGIDEX ---
SPECIES_DATA = {
    'botamon': SpeciesData("Slime Digimon", "Free",
                           "A digital lifeform newly manifested from the Kernel. Its body is unstable data slime."),
    'agumon': SpeciesData("Reptile Digimon", "Vaccine",
                          "A bipedal reptile with hardened claws. Its aggression algorithm is hard to stabilize."),
    'betamon': SpeciesData("Amphibian Digimon", "Virus",
                           "A docile four-legged creature. It prefers calm, low-latency data streams."),
    'greymon': SpeciesData("Dinosaur Digimon", "Vaccine",
                           "A giant dinosaur whose cranial skin has hardened into a shell."),
    'darkgreymon': SpeciesData("Dinosaur Digimon", "Virus",
                               "A Greymon whose source code was corrupted by stress and aggression."),
    'seadramon': SpeciesData("Sea Animal Digimon", "Data",
                             "It swims through the Net Ocean. Its serpentine body constricts enemies."),
    'metalgreymon': SpeciesData("Cyborg Digimon", "Vaccine",
                                "Has mechanized more than half of its body."),
}

# --- STARTING CREATURE ---
INITIAL_CREATURE = Creature(
    id='botamon',
    name='Botamon',
    stage=DigimonStage.BABY,
    kernel=EmotionalKernel(
        personality=PersonalityArchetype.CURIOUS,
        axes=EmotionalAxes(trust=20, stress=10, aggression=5, curiosity=80, sync=10, stability=50),
    ),
    stats=CreatureStats(hp=20, max_hp=20, energy=50, max_energy=50, hunger=50,
                        exp=0, strength=5, defense=5, speed=5, weight=2, age=0),
)
