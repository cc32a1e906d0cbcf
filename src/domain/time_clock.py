from dataclasses import dataclass
from typing import Self

from config import (
    DEFAULT_MICROSECONDS_PER_QUARTER,
    ONE_MINUTE_IN_MICROSECONDS,
    TICKS_PER_QUARTER_NOTE,
)


def microseconds_per_quarter_from_bpm(bpm: int, denominator: int = 4) -> int:
    """Converte BPM em microssegundos por semínima.

    O BPM é relativo à unidade de tempo do compasso (`denominator`), por
    isso o valor é reescalado para a semínima.
    """
    return int((ONE_MINUTE_IN_MICROSECONDS * denominator) / (bpm * 4))


def bpm_from_microseconds(microseconds: int, denominator: int = 4) -> int:
    """Inverso de `microseconds_per_quarter_from_bpm`."""
    return int((ONE_MINUTE_IN_MICROSECONDS / microseconds) * (denominator / 4))


@dataclass(frozen=True)
class TimeSignature:
    """Fórmula de compasso."""

    numerator: int = 4
    denominator: int = 4

    @classmethod
    def from_raw(cls, numerator: int, denominator_power: int) -> Self:
        """Cria a partir dos campos do arquivo, onde o denominador é uma potência de 2."""
        return cls(numerator=numerator, denominator=2**denominator_power)


class TimeClock:
    """Estado de tempo usado para converter ticks em tempo real na reprodução."""

    def __init__(
        self,
        ticks_per_quarter_note: int = TICKS_PER_QUARTER_NOTE,
        microseconds_per_quarter: int = DEFAULT_MICROSECONDS_PER_QUARTER,
        time_signature: TimeSignature | None = None,
    ) -> None:
        if ticks_per_quarter_note <= 0:
            raise ValueError('ticks_per_quarter_note must be positive')
        self._ticks_per_quarter_note: int = ticks_per_quarter_note
        self.microseconds_per_quarter: int = microseconds_per_quarter
        self.time_signature: TimeSignature = time_signature or TimeSignature()

    @property
    def ticks_per_quarter_note(self) -> int:
        return self._ticks_per_quarter_note

    def bpm(self) -> int:
        return bpm_from_microseconds(
            self.microseconds_per_quarter, self.time_signature.denominator
        )

    def set_microseconds_per_quarter(self, microseconds: int) -> None:
        self.microseconds_per_quarter = microseconds

    def set_microseconds_from_bpm(self, bpm: int) -> None:
        self.microseconds_per_quarter = microseconds_per_quarter_from_bpm(
            bpm, self.time_signature.denominator
        )

    def set_time_signature(self, time_signature: TimeSignature) -> None:
        self.time_signature = time_signature

    def duration_per_tick(self) -> int:
        """Duração de um tick em microssegundos inteiros."""
        return self.microseconds_per_quarter // self._ticks_per_quarter_note

    def seconds_for(self, ticks: int) -> float:
        return ticks * self.duration_per_tick() / 1_000_000
