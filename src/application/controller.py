import logging
from collections.abc import Callable
from pathlib import Path

import mido  # pyright: ignore[reportMissingTypeStubs]

from domain.actions import Action
from domain.models import CompilerConfig, MusicState, PlaybackSettings
from domain.parser import RandomSource, TextCompiler
from domain.reducer import reduce_states
from infrastructure.audio_player import MidiPlayer
from infrastructure.devices import OutputDevice, PortChooser, open_output_port
from infrastructure.midi_exporter import MIDIExporter
from infrastructure.midi_importer import MIDIImporter

logger = logging.getLogger(__name__)


class MusicController:
    """Liga compilador, redutor, codificador e reprodutor."""

    def __init__(
        self,
        config: CompilerConfig | None = None,
        rng: RandomSource | None = None,
        open_device: Callable[[], OutputDevice] | None = None,
        sleep: Callable[[float], object] | None = None,
    ) -> None:
        self.compiler: TextCompiler = TextCompiler(config=config, rng=rng)
        self.exporter: MIDIExporter = MIDIExporter()
        self.importer: MIDIImporter = MIDIImporter()
        self.open_device: Callable[[], OutputDevice] = open_device or open_output_port
        self.sleep: Callable[[float], object] | None = sleep
        self.current_player: MidiPlayer | None = None

    def compile_states(self, text: str, settings: PlaybackSettings) -> list[MusicState]:
        return self.compiler.compile(text, settings)

    def compile_actions(self, text: str, settings: PlaybackSettings) -> list[Action]:
        """Analisa o texto e o reduz à lista mínima de ações."""
        states = self.compiler.compile(text, settings)
        return reduce_states(states, initial=self.compiler.initial_state(settings))

    def build_midi(self, text: str, settings: PlaybackSettings) -> mido.MidiFile:
        return self.exporter.build_midi_file(self.compile_actions(text, settings))

    def export_midi(self, text: str, settings: PlaybackSettings, file_path: Path) -> Path:
        """Analisa o texto e exporta para arquivo MIDI."""
        return self.exporter.save(self.compile_actions(text, settings), file_path)

    def play_music(self, text: str, settings: PlaybackSettings) -> None:
        """Analisa o texto e o toca, bloqueando até o fim."""
        self.play_midi(self.build_midi(text, settings))

    def play_file(self, file_path: Path) -> None:
        """Toca um arquivo MIDI existente."""
        self.play_midi(self.importer.load(file_path))

    def play_midi(self, midi: mido.MidiFile) -> None:
        self.current_player = MidiPlayer(open_device=self.open_device, sleep=self.sleep)
        try:
            self.current_player.play(midi)
        finally:
            self.current_player = None

    def stop_music(self) -> None:
        """Para a reprodução atual se estiver ativa."""
        if self.current_player is not None:
            self.current_player.stop()

    @staticmethod
    def port_opener(
        name: str | None = None,
        choose: PortChooser | None = None,
    ) -> Callable[[], OutputDevice]:
        return lambda: open_output_port(name=name, choose=choose)

    @staticmethod
    def synth_opener(soundfont_path: Path) -> Callable[[], OutputDevice]:
        def open_synth() -> OutputDevice:
            from infrastructure.fluidsynth_output import FluidSynthOutput

            return FluidSynthOutput(soundfont_path)

        return open_synth
