import copy
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


class _NamedEnum(Enum):
    """
    Enum base that accepts member names as lookup values.
    Lets callers pass plain strings like 'feed' or 'NOT-HUNGRY' coming from
    key bindings or test fixtures.
    """

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().replace('-', '_').upper()
            for member in cls:
                if member.name == normalized:
                    return member
        return super()._missing_(value)


class Stimulus(_NamedEnum):
    FEED = auto()
    TRAIN = auto()
    SCAN = auto()
    IGNORE = auto()
    PRAISE = auto()
    SCOLD = auto()
    SLEEP = auto()
    REFUSAL = auto()  # player acknowledged a refusal
    WAKE = auto()

    @classmethod
    def parse(cls, value) -> Optional["Stimulus"]:
        """Returns the matching stimulus, or None when the value is unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class PersonalityArchetype(_NamedEnum):
    BRAVE = auto()
    TIMID = auto()
    STOIC = auto()
    CURIOUS = auto()
    CHAOTIC = auto()


class TraumaType(_NamedEnum):
    ABANDONMENT = auto()
    OVERLOAD = auto()
    DATA_CORRUPTION = auto()
    BETRAYAL = auto()


class RefusalReason(_NamedEnum):
    NONE = auto()
    FEAR = auto()
    DEFIANCE = auto()
    APATHY = auto()
    OVERWHELMED = auto()
    DISSOCIATED = auto()
    DISGUST = auto()
    NOT_HUNGRY = auto()


class Mood(_NamedEnum):
    HAPPY = auto()
    NEUTRAL = auto()
    SAD = auto()
    ANGRY = auto()
    TIRED = auto()
    HYPER = auto()
    FRACTURED = auto()
    REFUSING = auto()


class DigimonStage(_NamedEnum):
    EGG = auto()
    BABY = auto()
    ROOKIE = auto()
    CHAMPION = auto()
    ULTIMATE = auto()


class EvolutionPhase(_NamedEnum):
    IDLE = auto()
    SIGNAL_DETECTED = auto()
    SYNCING = auto()
    DATA_REWRITE = auto()
    COMPLETE = auto()


class MemoryType(_NamedEnum):
    TRAUMA = auto()
    TRIUMPH = auto()
    BONDING = auto()
    NEGLECT = auto()
    CONFLICT = auto()
    DREAM = auto()


AXIS_NAMES = ("trust", "stress", "aggression", "curiosity", "sync", "stability")


@dataclass
class EmotionalAxes:
    """Six affective scalars, each bounded to [0, 100]."""
    trust: float = 20.0
    stress: float = 10.0
    aggression: float = 5.0
    curiosity: float = 80.0
    sync: float = 10.0
    stability: float = 50.0

    def clamp(self, value):
        return max(0.0, min(100.0, value))

    def clamp_all(self):
        """Pulls every axis back into range. Always the last step of a mutation."""
        for name in AXIS_NAMES:
            setattr(self, name, self.clamp(getattr(self, name)))
        return self

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in AXIS_NAMES}


@dataclass
class TraumaState:
    type: TraumaType
    severity: float = 0.0
    recovery: float = 0.0  # counter, only reset points are bounded
    is_active: bool = True
    trigger_count: int = 0


@dataclass
class MemoryTrace:
    id: str
    timestamp: int
    type: MemoryType
    intensity: float
    tags: List[str] = field(default_factory=list)
    description: str = ""
    resolved: bool = False


@dataclass
class EmotionalKernel:
    personality: PersonalityArchetype
    axes: EmotionalAxes = field(default_factory=EmotionalAxes)
    traumas: Dict[TraumaType, TraumaState] = field(default_factory=dict)
    memories: List[MemoryTrace] = field(default_factory=list)
    drift_rate: float = 1.0
    consecutive_safe_ticks: int = 0
    is_fragmented: bool = False

    def trauma(self, trauma_type: TraumaType) -> Optional[TraumaState]:
        return self.traumas.get(trauma_type)

    def clone(self) -> "EmotionalKernel":
        return copy.deepcopy(self)


@dataclass
class MetaMetrics:
    volatility_index: float = 0.0
    input_entropy: float = 0.0
    cruelty_score: float = 0.0  # 0..1
    coherence: float = 1.0


@dataclass
class NarrativeFlags:
    """One-way flags. Once set they are never cleared."""
    has_trusted_strangers: bool = False
    has_survived_breakdown: bool = False
    is_codependent: bool = False
    is_lone_wolf: bool = False


@dataclass
class Safeguards:
    dissociation_level: float = 0.0  # 0..100
    confusion_damping: float = 0.0  # 0..100


@dataclass
class MetaState:
    metrics: MetaMetrics = field(default_factory=MetaMetrics)
    narrative: NarrativeFlags = field(default_factory=NarrativeFlags)
    safeguards: Safeguards = field(default_factory=Safeguards)

    def clone(self) -> "MetaState":
        return copy.deepcopy(self)


@dataclass
class CreatureStats:
    """Plain depletable / growable counters. Only hunger and energy decay on ticks."""
    hp: float = 20.0
    max_hp: float = 20.0
    energy: float = 50.0
    max_energy: float = 50.0
    hunger: float = 50.0  # 100 = full, 0 = starving
    exp: int = 0
    strength: float = 5.0
    defense: float = 5.0
    speed: float = 5.0
    weight: float = 2.0
    age: int = 0  # in ticks


@dataclass
class Condition:
    is_sleeping: bool = False
    is_sick: bool = False
    mood: Mood = Mood.NEUTRAL


@dataclass
class History:
    battles_won: int = 0
    training_sessions: int = 0
    mistakes: int = 0
    recent_actions: List[Stimulus] = field(default_factory=list)


@dataclass
class Creature:
    """Aggregate root. Core functions take a snapshot and hand back a new one."""
    id: str
    name: str
    stage: DigimonStage
    kernel: EmotionalKernel
    meta: MetaState = field(default_factory=MetaState)
    stats: CreatureStats = field(default_factory=CreatureStats)
    condition: Condition = field(default_factory=Condition)
    history: History = field(default_factory=History)

    def clone(self) -> "Creature":
        return copy.deepcopy(self)


# --- Static evolution table entries (immutable) ---

@dataclass(frozen=True)
class StatRequirements:
    strength: Optional[float] = None
    defense: Optional[float] = None


@dataclass(frozen=True)
class KernelConditions:
    min_trust: Optional[float] = None
    max_stress: Optional[float] = None
    min_sync: Optional[float] = None
    required_personality: Optional[PersonalityArchetype] = None
    requires_trauma: bool = False


@dataclass(frozen=True)
class Requirements:
    min_stats: Optional[StatRequirements] = None
    kernel_conditions: Optional[KernelConditions] = None


@dataclass(frozen=True)
class EvolutionNode:
    id: str
    stage: DigimonStage
    requirements: Optional[Requirements] = None
    next: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SpeciesData:
    species: str
    attribute: str  # Vaccine / Data / Virus / Free
    description: str
