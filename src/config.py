from pathlib import Path
from typing import Final

# Caminho padrão para o SoundFont usado pelo sintetizador em software
DEFAULT_SOUNDFONT: Final[Path] = Path('FluidR3_GM.sf2')

# Classes de altura (semitons a partir de Dó) para cada letra de nota
PITCH_CLASSES: Final[dict[str, int]] = {
    'C': 0,
    'D': 2,
    'E': 4,
    'F': 5,
    'G': 7,
    'A': 9,
    'B': 11,
}

# Vogais que, logo após uma nota, disparam o eco de telefone
ECHO_VOWELS: Final[frozenset[str]] = frozenset('oOiIuU')

# Limites e valores padrão do estado musical
DEFAULT_BPM: Final[int] = 120
MAX_BPM: Final[int] = 255
TEMPO_STEP: Final[int] = 80
DEFAULT_VOLUME: Final[int] = 100
MAX_VOLUME: Final[int] = 16383
DEFAULT_OCTAVE: Final[int] = 4
MAX_OCTAVE: Final[int] = 12
DEFAULT_INSTRUMENT: Final[int] = 0
TELEPHONE_INSTRUMENT: Final[int] = 125  # Telephone Ring (GM 125)

# Valor máximo para dados MIDI (notas, volume, etc.)
MAX_MIDI_VALUE: Final[int] = 127

# Parâmetros da trilha gerada
TICKS_PER_QUARTER_NOTE: Final[int] = 480
DEFAULT_CHANNEL: Final[int] = 0
DEFAULT_VELOCITY: Final[int] = MAX_MIDI_VALUE // 2
DEFAULT_PORT: Final[int] = 0
DEFAULT_TRACK_NAME: Final[str] = 'txt2midi'
VOLUME_CONTROLLER: Final[int] = 7
SUSTAIN_CONTROLLER: Final[int] = 64
ALL_NOTES_OFF_CONTROLLER: Final[int] = 123
MAX_TEMPO: Final[int] = 0xFFFFFF

# Relógio de reprodução
ONE_MINUTE_IN_MICROSECONDS: Final[int] = 60_000_000
DEFAULT_MICROSECONDS_PER_QUARTER: Final[int] = 500_000
SETTLE_DELAY_SECONDS: Final[float] = 0.15
