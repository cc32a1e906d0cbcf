import io
import logging
from pathlib import Path
from typing import Final

import mido

from config import (
    DEFAULT_CHANNEL,
    DEFAULT_PORT,
    DEFAULT_TRACK_NAME,
    DEFAULT_VELOCITY,
    MAX_MIDI_VALUE,
    MAX_TEMPO,
    SUSTAIN_CONTROLLER,
    TICKS_PER_QUARTER_NOTE,
    VOLUME_CONTROLLER,
)
from domain.actions import (
    Action,
    ChangeBpm,
    ChangeInstrument,
    ChangeVolume,
    EndOfSequence,
    Pause,
    PlayNote,
)
from domain.time_clock import TimeClock, TimeSignature

logger = logging.getLogger(__name__)

MIDI_SUFFIXES: Final[tuple[str, ...]] = ('.mid', '.midi')
# 4/4 como gravado no arquivo: numerador 4, denominador 2**2
HEADER_TIME_SIGNATURE: Final[TimeSignature] = TimeSignature.from_raw(4, 2)


class MIDIExporter:
    """Gera a trilha MIDI a partir das ações e a salva no disco."""

    def __init__(
        self,
        ticks_per_quarter_note: int = TICKS_PER_QUARTER_NOTE,
        channel: int = DEFAULT_CHANNEL,
        velocity: int = DEFAULT_VELOCITY,
    ) -> None:
        self.ticks_per_quarter_note: int = ticks_per_quarter_note
        self.channel: int = channel
        self.velocity: int = velocity

    def build_track(
        self,
        actions: list[Action],
        name: str = DEFAULT_TRACK_NAME,
    ) -> mido.MidiTrack:
        """Converte as ações em uma trilha com deltas em ticks."""
        clock = TimeClock(
            ticks_per_quarter_note=self.ticks_per_quarter_note,
            time_signature=HEADER_TIME_SIGNATURE,
        )
        track = mido.MidiTrack(self._header_events(name, clock.time_signature))

        for action in actions:
            track.extend(self._to_events(action, clock))

        return track

    def build_midi_file(
        self,
        actions: list[Action],
        name: str = DEFAULT_TRACK_NAME,
    ) -> mido.MidiFile:
        """Cria um arquivo MIDI formato 0 com uma única trilha."""
        midi = mido.MidiFile(type=0, ticks_per_beat=self.ticks_per_quarter_note)
        midi.tracks.append(self.build_track(actions, name))
        return midi

    def to_bytes(self, midi: mido.MidiFile) -> bytes:
        buffer = io.BytesIO()
        midi.save(file=buffer)
        return buffer.getvalue()

    def save(self, actions: list[Action], file_path: Path) -> Path:
        """Criar o arquivo MIDI e o salvar no disco. Retorna o caminho usado."""
        if file_path.suffix.lower() not in MIDI_SUFFIXES:
            file_path = file_path.with_suffix('.mid')

        midi = self.build_midi_file(actions, name=file_path.stem)
        with file_path.open('wb') as output_file:
            midi.save(file=output_file)

        logger.info('Arquivo MIDI salvo em %s (%d eventos)', file_path, len(midi.tracks[0]))
        return file_path

    def _header_events(
        self,
        name: str,
        time_signature: TimeSignature,
    ) -> list[mido.MetaMessage]:
        return [
            mido.MetaMessage('track_name', name=name, time=0),
            mido.MetaMessage(
                'time_signature',
                numerator=time_signature.numerator,
                denominator=time_signature.denominator,
                time=0,
            ),
            mido.MetaMessage('key_signature', key='C', time=0),
            mido.MetaMessage('midi_port', port=DEFAULT_PORT, time=0),
        ]

    def _to_events(
        self,
        action: Action,
        clock: TimeClock,
    ) -> list[mido.Message | mido.MetaMessage]:
        match action:
            case PlayNote(pitch=pitch):
                return [
                    mido.Message(
                        'note_on',
                        channel=self.channel,
                        note=pitch,
                        velocity=self.velocity,
                        time=0,
                    ),
                    mido.Message(
                        'note_off',
                        channel=self.channel,
                        note=pitch,
                        velocity=self.velocity,
                        time=self.ticks_per_quarter_note,
                    ),
                ]
            case ChangeInstrument(program=program):
                return [
                    mido.Message(
                        'program_change',
                        channel=self.channel,
                        program=min(program, MAX_MIDI_VALUE),
                        time=0,
                    )
                ]
            case ChangeVolume(level=level):
                # Só os 7 bits baixos cabem no controlador
                return [
                    mido.Message(
                        'control_change',
                        channel=self.channel,
                        control=VOLUME_CONTROLLER,
                        value=level & MAX_MIDI_VALUE,
                        time=0,
                    )
                ]
            case Pause():
                sustain_off = mido.Message(
                    'control_change',
                    channel=self.channel,
                    control=SUSTAIN_CONTROLLER,
                    value=0,
                    time=0,
                )
                return [sustain_off, sustain_off.copy(time=self.ticks_per_quarter_note)]
            case ChangeBpm(bpm=bpm):
                clock.set_microseconds_from_bpm(bpm)
                tempo = min(clock.microseconds_per_quarter, MAX_TEMPO)
                return [mido.MetaMessage('set_tempo', tempo=tempo, time=0)]
            case EndOfSequence():
                return [mido.MetaMessage('end_of_track', time=1)]
            case _:
                raise TypeError(f'unknown action: {action!r}')
