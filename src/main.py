import argparse
import contextlib
import logging
import random
import signal
import sys
from collections.abc import Iterator
from pathlib import Path

from application.controller import MusicController
from config import DEFAULT_BPM, DEFAULT_SOUNDFONT, DEFAULT_VOLUME
from domain.models import PlaybackSettings
from errors import Txt2MidiError
from infrastructure.devices import list_output_ports

logger = logging.getLogger('txt2midi')


def prompt_for_port(names: list[str]) -> int:
    """Pergunta ao usuário qual porta de saída usar."""
    print('\nAvailable output ports:')
    for i, name in enumerate(names):
        print(f'{i}: {name}')
    answer = input('Please select output port: ')
    try:
        return int(answer.strip())
    except ValueError:
        return -1


@contextlib.contextmanager
def stop_on_interrupt(controller: MusicController) -> Iterator[None]:
    """Durante a reprodução, Ctrl-C para a música em vez de encerrar o programa."""
    previous_handler = signal.signal(signal.SIGINT, lambda *_: controller.stop_music())
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous_handler)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='txt2midi',
        description='Converte texto em música MIDI e a toca ou salva.',
    )
    p.add_argument('text', nargs='?', default=None, help='Texto a ser convertido')
    p.add_argument('--input', dest='infile', default=None, help='Ler o texto de um arquivo')
    p.add_argument('--file', dest='midifile', default=None, help='Tocar um arquivo .mid existente')
    p.add_argument('--out', dest='outfile', default=None, help='Salvar o resultado em .mid')
    p.add_argument('--play', action='store_true', help='Tocar o resultado')
    p.add_argument('--bpm', type=int, default=DEFAULT_BPM, help='BPM inicial')
    p.add_argument('--volume', type=int, default=DEFAULT_VOLUME, help='Volume inicial')
    p.add_argument('--seed', type=int, default=None, help='Semente para ? \\n e ;')
    p.add_argument('--port', default=None, help='Nome da porta de saída MIDI')
    p.add_argument(
        '--soundfont',
        nargs='?',
        const=str(DEFAULT_SOUNDFONT),
        default=None,
        help='Tocar com o fluidsynth usando este SoundFont',
    )
    p.add_argument('--list-ports', action='store_true', help='Listar as portas de saída')
    p.add_argument('-v', '--verbose', action='store_true', help='Log detalhado')
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.list_ports:
        for name in list_output_ports():
            print(name)
        return 0

    if args.soundfont:
        open_device = MusicController.synth_opener(Path(args.soundfont))
    else:
        open_device = MusicController.port_opener(name=args.port, choose=prompt_for_port)

    controller = MusicController(rng=random.Random(args.seed), open_device=open_device)

    try:
        if args.midifile:
            with stop_on_interrupt(controller):
                controller.play_file(Path(args.midifile))
            return 0

        if args.infile:
            text = Path(args.infile).read_text(encoding='utf-8')
        elif args.text is not None:
            text = args.text
        else:
            text = sys.stdin.read()

        settings = PlaybackSettings(bpm=args.bpm, volume=args.volume)
        # Compila uma vez só, para que arquivo e reprodução tenham os mesmos sorteios
        actions = controller.compile_actions(text, settings)

        if args.outfile:
            saved = controller.exporter.save(actions, Path(args.outfile))
            print(f'[txt2midi] MIDI -> {saved}')

        if args.play or not args.outfile:
            with stop_on_interrupt(controller):
                controller.play_midi(controller.exporter.build_midi_file(actions))
    except (Txt2MidiError, OSError) as exc:
        logger.error('%s', exc)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
