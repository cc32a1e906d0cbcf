import logging
import random
from collections.abc import Callable, Sequence
from typing import Final, Protocol

from config import ECHO_VOWELS, MAX_MIDI_VALUE
from domain.models import CompilerConfig, MusicState, Note, PlaybackSettings
from domain.tokens import Literal, OctaveDown, OctaveUp, TempoUp, Token, fold_tokens

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Fonte de aleatoriedade injetável (compatível com `random.Random`)."""

    def choice[T](self, seq: Sequence[T]) -> T: ...

    def randint(self, a: int, b: int) -> int: ...


class StateStack:
    """Pilha pequena usada para guardar e restaurar estados no eco de vogal."""

    MAX_DEPTH: Final[int] = 2

    def __init__(self) -> None:
        self._items: list[MusicState] = []

    def push(self, state: MusicState) -> None:
        if len(self._items) >= self.MAX_DEPTH:
            raise OverflowError('state stack is full')
        self._items.append(state)

    def pop(self) -> MusicState:
        return self._items.pop()

    def __len__(self) -> int:
        return len(self._items)


type CharHandler = Callable[[MusicState, str], MusicState]


class TextCompiler:
    """Converte texto em uma lista de estados musicais, um por passo.

    Cada caractere (ou comando de vários caracteres) é um passo e gera
    exatamente um estado. O instrumento, a oitava, o volume e o BPM são
    carregados de um passo para o outro; a nota vale só para o passo em
    que aparece. Uma nota seguida de vogal (`o`, `i`, `u`) forma um eco,
    que gera um estado extra com o instrumento de telefone.
    """

    def __init__(
        self,
        config: CompilerConfig | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self.config: CompilerConfig = config or CompilerConfig()
        self.rng: RandomSource = rng or random.Random()
        self.dispatch_table: dict[str, CharHandler] = self._build_dispatch_table()
        self._stack: StateStack = StateStack()

    def compile(
        self,
        text: str,
        settings: PlaybackSettings | None = None,
    ) -> list[MusicState]:
        tokens = fold_tokens(text)
        state = MusicState.initial(settings or PlaybackSettings(), self.config)
        states: list[MusicState] = []

        pos = 0
        token_count = len(tokens)

        while pos < token_count:
            token = tokens[pos]
            step_start = state.evolve(note=None)
            state = self._process_token(token, step_start)
            states.append(state)

            if self._starts_echo(tokens, pos):
                state = self._echo(step_start, state, states)
                states.append(state)
                pos += 2
                continue

            pos += 1

        logger.debug('Compilados %d estados a partir de %d tokens', len(states), token_count)
        return states

    def initial_state(self, settings: PlaybackSettings | None = None) -> MusicState:
        return MusicState.initial(settings or PlaybackSettings(), self.config)

    def _starts_echo(self, tokens: list[Token], pos: int) -> bool:
        """Verifica se o token atual é uma nota seguida de vogal de eco."""
        if pos + 1 >= len(tokens):
            return False
        current, following = tokens[pos], tokens[pos + 1]
        return (
            isinstance(current, Literal)
            and isinstance(following, Literal)
            and Note.from_char(current.char) not in (None, Note.PAUSE)
            and following.char in ECHO_VOWELS
        )

    def _echo(
        self,
        before_note: MusicState,
        current: MusicState,
        states: list[MusicState],
    ) -> MusicState:
        """Toca o telefone e volta ao estado anterior à nota do eco."""
        self._stack.push(before_note)
        self._stack.push(
            current.evolve(instrument=self.config.telephone_instrument, note=Note.DO)
        )
        states.append(self._stack.pop())
        return self._stack.pop().evolve(note=None)

    def _process_token(self, token: Token, state: MusicState) -> MusicState:
        match token:
            case Literal(char=char):
                handler = self.dispatch_table.get(char, self._handle_default)
                return handler(state, char)
            case TempoUp():
                return self._handle_tempo_up(state)
            case OctaveUp():
                return self._handle_octave_up(state)
            case OctaveDown():
                return self._handle_octave_down(state)
            case _:
                return state

    def _build_dispatch_table(self) -> dict[str, CharHandler]:
        """Construir a tabela de mapeamento Caractere -> Função."""
        table: dict[str, CharHandler] = {
            ' ': self._handle_note,
            '+': self._handle_volume_up,
            '-': self._handle_volume_reset,
            '?': self._handle_random_note,
            '\n': self._handle_random_instrument,
            ';': self._handle_random_bpm,
        }

        for char in 'ABCDEFGabcdefg':
            table[char] = self._handle_note

        for char in '0123456789':
            table[char] = self._handle_digit

        return table

    def _handle_default(self, state: MusicState, _char: str) -> MusicState:
        return state

    def _handle_note(self, state: MusicState, char: str) -> MusicState:
        return state.evolve(note=Note.from_char(char))

    def _handle_volume_up(self, state: MusicState, _char: str) -> MusicState:
        return state.evolve(volume=min(state.volume * 2, self.config.max_volume))

    def _handle_volume_reset(self, state: MusicState, _char: str) -> MusicState:
        return state.evolve(volume=self.config.default_volume)

    def _handle_digit(self, state: MusicState, char: str) -> MusicState:
        instrument = state.instrument + int(char)
        if instrument > self.config.max_instrument:
            logger.warning(
                'Instrumento %d fora do intervalo, limitado a %d',
                instrument,
                self.config.max_instrument,
            )
            instrument = self.config.max_instrument
        return state.evolve(instrument=instrument)

    def _handle_random_note(self, state: MusicState, _char: str) -> MusicState:
        return state.evolve(note=self.rng.choice(Note.pitches()))

    def _handle_random_instrument(self, state: MusicState, _char: str) -> MusicState:
        return state.evolve(instrument=self.rng.randint(0, MAX_MIDI_VALUE))

    def _handle_random_bpm(self, state: MusicState, _char: str) -> MusicState:
        return state.evolve(bpm=self.rng.randint(1, self.config.max_bpm - 1))

    def _handle_tempo_up(self, state: MusicState) -> MusicState:
        return state.evolve(bpm=min(state.bpm + self.config.tempo_step, self.config.max_bpm))

    def _handle_octave_up(self, state: MusicState) -> MusicState:
        octave = state.octave + 1
        if octave > self.config.max_octave:
            octave = self.config.default_octave
        return state.evolve(octave=octave)

    def _handle_octave_down(self, state: MusicState) -> MusicState:
        return state.evolve(octave=max(state.octave - 1, 0))
