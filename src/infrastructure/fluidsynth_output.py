import logging
from pathlib import Path

import fluidsynth
import mido  # pyright: ignore[reportMissingTypeStubs]

logger = logging.getLogger(__name__)


class FluidSynthOutput:
    """Dispositivo de saída que toca as mensagens com o fluidsynth.

    Serve quando não há sintetizador MIDI externo: as mensagens são
    decodificadas e repassadas para um SoundFont carregado localmente.
    """

    def __init__(self, soundfont_path: Path) -> None:
        self.fs: fluidsynth.Synth = fluidsynth.Synth()
        self.soundfont_path: Path = soundfont_path
        self._initialize_fluidsynth()

    def _initialize_fluidsynth(self) -> None:
        self.fs.start()
        self.fs.sfload(str(self.soundfont_path))
        logger.info('SoundFont carregado: %s', self.soundfont_path)

    def send(self, data: bytes) -> None:
        msg = mido.Message.from_bytes(data)

        match msg.type:
            case 'note_on':
                self.fs.noteon(chan=msg.channel, key=msg.note, vel=msg.velocity)
            case 'note_off':
                self.fs.noteoff(chan=msg.channel, key=msg.note)
            case 'program_change':
                self.fs.program_change(chan=msg.channel, prg=msg.program)
            case 'control_change':
                self.fs.cc(chan=msg.channel, ctrl=msg.control, val=msg.value)
            case _:
                logger.debug('Mensagem ignorada pelo sintetizador: %s', msg)

    def close(self) -> None:
        self.fs.delete()
        logger.info('Sintetizador encerrado')
