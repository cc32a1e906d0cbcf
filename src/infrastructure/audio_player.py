import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable, Iterator

import mido  # pyright: ignore[reportMissingTypeStubs]

from config import ALL_NOTES_OFF_CONTROLLER, DEFAULT_CHANNEL, SETTLE_DELAY_SECONDS
from domain.time_clock import TimeClock, TimeSignature
from errors import MidiFormatError
from infrastructure.devices import OutputDevice
from infrastructure.midi_importer import MIDIImporter

logger = logging.getLogger(__name__)

type TrackMessage = mido.Message | mido.MetaMessage


class MidiPlayer:
    """Reproduz a primeira trilha de um arquivo MIDI em tempo real.

    Os eventos são consumidos em ordem: espera-se o delta convertido pelo
    relógio atual, e então a mensagem é enviada ao dispositivo (mensagens
    de canal) ou aplicada ao relógio (tempo e fórmula de compasso).
    """

    def __init__(
        self,
        open_device: Callable[[], OutputDevice],
        sleep: Callable[[float], object] | None = None,
        settle_delay: float = SETTLE_DELAY_SECONDS,
    ) -> None:
        self.open_device: Callable[[], OutputDevice] = open_device
        self.settle_delay: float = settle_delay
        self._stop_request: threading.Event = threading.Event()
        self._sleep: Callable[[float], object] = sleep or self._stop_request.wait
        self._async_stop: asyncio.Event | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self.clock: TimeClock | None = None

    def play(self, midi: mido.MidiFile) -> None:
        """Toca o arquivo, bloqueando até o fim ou até `stop()`."""
        clock = self._prepare_clock(midi)
        self._stop_request.clear()

        device = self.open_device()
        try:
            for wait in self._steps(midi.tracks[0], clock, device):
                self._sleep(wait)

            if self.stopped:
                self._silence(device)
            else:
                self._sleep(self.settle_delay)
        finally:
            device.close()

    async def play_async(self, midi: mido.MidiFile) -> None:
        """Variante de `play` para uso dentro de um loop asyncio."""
        clock = self._prepare_clock(midi)
        self._stop_request.clear()
        self._loop = asyncio.get_running_loop()
        async_stop = self._async_stop = asyncio.Event()

        device = self.open_device()
        try:
            for wait in self._steps(midi.tracks[0], clock, device):
                await self._wait_async(async_stop, wait)

            if self.stopped:
                self._silence(device)
            else:
                await self._wait_async(async_stop, self.settle_delay)
        finally:
            self._loop = None
            self._async_stop = None
            device.close()

    def stop(self) -> None:
        """Sinalizar a reprodução para parar, acordando a espera em curso."""
        self._stop_request.set()
        loop, async_stop = self._loop, self._async_stop
        if loop is not None and async_stop is not None:
            loop.call_soon_threadsafe(async_stop.set)

    @property
    def stopped(self) -> bool:
        return self._stop_request.is_set()

    def _steps(
        self,
        track: mido.MidiTrack,
        clock: TimeClock,
        device: OutputDevice,
    ) -> Iterator[float]:
        """Aplica os eventos da trilha, devolvendo cada espera a quem toca.

        Para no fim da trilha ou assim que `stop()` for pedido, antes ou
        depois de uma espera.
        """
        for wait, msg in self._drain(track, clock):
            if self.stopped:
                return
            if wait > 0:
                yield wait
                if self.stopped:
                    return
            if self._process_event(msg, clock, device):
                return

    async def _wait_async(self, async_stop: asyncio.Event, seconds: float) -> None:
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(async_stop.wait(), timeout=seconds)

    def _prepare_clock(self, midi: mido.MidiFile) -> TimeClock:
        if not MIDIImporter.is_metrical(midi.ticks_per_beat):
            raise MidiFormatError(
                'The timing of the received file is not coded with metrical.'
            )
        if not midi.tracks:
            raise MidiFormatError('MIDI file has no tracks')

        self.clock = TimeClock(ticks_per_quarter_note=midi.ticks_per_beat)
        logger.info(
            'Reproduzindo %d eventos (%d ticks por semínima)',
            len(midi.tracks[0]),
            midi.ticks_per_beat,
        )
        return self.clock

    def _drain(
        self,
        track: mido.MidiTrack,
        clock: TimeClock,
    ) -> Iterator[tuple[float, TrackMessage]]:
        # O delta é convertido só quando pedido, depois de o evento anterior
        # já ter atualizado o relógio.
        for msg in track:
            yield (clock.seconds_for(msg.time) if msg.time > 0 else 0.0), msg

    def _process_event(
        self,
        msg: TrackMessage,
        clock: TimeClock,
        device: OutputDevice,
    ) -> bool:
        """Aplica um evento. Retorna True ao chegar no fim da trilha."""
        if not msg.is_meta:
            if msg.type != 'sysex':
                device.send(bytes(msg.bytes()))
            return False

        match msg.type:
            case 'set_tempo':
                clock.set_microseconds_per_quarter(msg.tempo)
                logger.debug('Tempo: %d µs por semínima (%d BPM)', msg.tempo, clock.bpm())
            case 'time_signature':
                # O mido já expande o denominador; no arquivo ele é uma potência de 2
                power = msg.denominator.bit_length() - 1
                clock.set_time_signature(TimeSignature.from_raw(msg.numerator, power))
                logger.debug('Compasso: %d/%d', msg.numerator, msg.denominator)
            case 'end_of_track':
                return True

        return False

    def _silence(self, device: OutputDevice) -> None:
        logger.info('Reprodução interrompida')
        device.send(
            bytes(
                mido.Message(
                    'control_change',
                    channel=DEFAULT_CHANNEL,
                    control=ALL_NOTES_OFF_CONTROLLER,
                    value=0,
                ).bytes()
            )
        )
