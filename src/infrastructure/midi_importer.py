import io
import logging
from pathlib import Path

import mido  # pyright: ignore[reportMissingTypeStubs]

from errors import MidiFormatError

logger = logging.getLogger(__name__)


class MIDIImporter:
    """Carrega arquivos MIDI existentes para reprodução."""

    def load(self, filepath: Path) -> mido.MidiFile:
        """Lê o arquivo e confirma que pode ser reproduzido."""
        try:
            mid: mido.MidiFile = mido.MidiFile(filename=filepath)
        except (OSError, EOFError, ValueError) as exc:
            raise MidiFormatError(f'could not read MIDI file {filepath}: {exc}') from exc

        self.validate_timing(mid)
        logger.info(
            'Carregado %s: %d trilha(s), %d ticks por semínima',
            filepath,
            len(mid.tracks),
            mid.ticks_per_beat,
        )
        return mid

    def load_bytes(self, data: bytes) -> mido.MidiFile:
        try:
            mid: mido.MidiFile = mido.MidiFile(file=io.BytesIO(data))
        except (OSError, EOFError, ValueError) as exc:
            raise MidiFormatError(f'could not parse MIDI data: {exc}') from exc

        self.validate_timing(mid)
        return mid

    @staticmethod
    def is_metrical(ticks_per_beat: int) -> bool:
        """A divisão é métrica quando o bit mais alto está zerado.

        O cabeçalho é lido como inteiro com sinal, então uma divisão SMPTE
        aparece como valor negativo.
        """
        return 0 < ticks_per_beat < 0x8000

    def validate_timing(self, mid: mido.MidiFile) -> None:
        if not self.is_metrical(mid.ticks_per_beat):
            raise MidiFormatError(
                'The timing of the received file is not coded with metrical.'
            )
        if not mid.tracks:
            raise MidiFormatError('MIDI file has no tracks')
