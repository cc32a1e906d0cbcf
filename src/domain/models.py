from dataclasses import dataclass, replace
from enum import Enum
from typing import Self

from config import (
    DEFAULT_BPM,
    DEFAULT_INSTRUMENT,
    DEFAULT_OCTAVE,
    DEFAULT_VOLUME,
    MAX_BPM,
    MAX_MIDI_VALUE,
    MAX_OCTAVE,
    MAX_VOLUME,
    PITCH_CLASSES,
    TELEPHONE_INSTRUMENT,
    TEMPO_STEP,
)


class Note(Enum):
    """Notas possíveis, valoradas pela classe de altura (semitons a partir de Dó)."""

    DO = PITCH_CLASSES['C']
    RE = PITCH_CLASSES['D']
    MI = PITCH_CLASSES['E']
    FA = PITCH_CLASSES['F']
    SOL = PITCH_CLASSES['G']
    LA = PITCH_CLASSES['A']
    SI = PITCH_CLASSES['B']
    PAUSE = 13

    @classmethod
    def from_char(cls, char: str) -> Self | None:
        """Cria uma nota a partir de uma letra (A-G, sem distinção de caixa) ou espaço."""
        if char == ' ':
            return cls.PAUSE
        pitch_class = PITCH_CLASSES.get(char.upper())
        if pitch_class is None:
            return None
        return cls(pitch_class)

    @classmethod
    def pitches(cls) -> list[Self]:
        """As sete notas diatônicas, sem a pausa."""
        return [note for note in cls if note is not cls.PAUSE]

    def to_midi(self, octave: int) -> int:
        """Calcula o valor MIDI da nota na oitava dada, limitado a 0-127."""
        pitch = self.value + 12 * (1 + octave)
        return max(0, min(MAX_MIDI_VALUE, pitch))


@dataclass(frozen=True)
class CompilerConfig:
    """Limites e valores padrão usados pelo compilador de texto."""

    max_volume: int = MAX_VOLUME
    default_volume: int = DEFAULT_VOLUME
    max_octave: int = MAX_OCTAVE
    default_octave: int = DEFAULT_OCTAVE
    max_bpm: int = MAX_BPM
    default_instrument: int = DEFAULT_INSTRUMENT
    max_instrument: int = MAX_MIDI_VALUE
    tempo_step: int = TEMPO_STEP
    telephone_instrument: int = TELEPHONE_INSTRUMENT


@dataclass
class PlaybackSettings:
    """Configuração definida pelo usuário antes da compilação."""

    bpm: int = DEFAULT_BPM
    volume: int = DEFAULT_VOLUME


@dataclass(frozen=True)
class MusicState:
    """Estado musical capturado após cada passo do compilador."""

    instrument: int
    octave: int
    volume: int
    bpm: int
    note: Note | None = None

    @classmethod
    def initial(cls, settings: PlaybackSettings, config: CompilerConfig) -> Self:
        return cls(
            instrument=config.default_instrument,
            octave=config.default_octave,
            volume=max(0, min(settings.volume, config.max_volume)),
            bpm=max(1, min(settings.bpm, config.max_bpm)),
        )

    def evolve(self, **changes) -> Self:
        return replace(self, **changes)
