from dataclasses import dataclass


@dataclass(frozen=True)
class PlayNote:
    """Toca uma nota por uma semínima."""

    pitch: int


@dataclass(frozen=True)
class ChangeInstrument:
    """Troca o instrumento (programa General MIDI)."""

    program: int


@dataclass(frozen=True)
class ChangeVolume:
    """Muda o volume do canal."""

    level: int


@dataclass(frozen=True)
class ChangeBpm:
    """Muda o andamento."""

    bpm: int


@dataclass(frozen=True)
class Pause:
    """Silêncio por uma semínima."""


@dataclass(frozen=True)
class EndOfSequence:
    """Fim da música."""


type Action = PlayNote | ChangeInstrument | ChangeVolume | ChangeBpm | Pause | EndOfSequence
