import random

import pytest

from domain.models import CompilerConfig, MusicState, Note, PlaybackSettings
from domain.parser import StateStack, TextCompiler


@pytest.fixture
def compiler(rng: random.Random) -> TextCompiler:
    return TextCompiler(rng=rng)


def last(compiler: TextCompiler, text: str, **settings) -> MusicState:
    return compiler.compile(text, PlaybackSettings(**settings))[-1]


def test_one_state_per_character(compiler: TextCompiler) -> None:
    states = compiler.compile('CDEFGAB', PlaybackSettings())

    assert [state.note for state in states] == [
        Note.DO,
        Note.RE,
        Note.MI,
        Note.FA,
        Note.SOL,
        Note.LA,
        Note.SI,
    ]
    assert all(state.octave == 4 for state in states)
    assert all(state.bpm == 120 for state in states)


def test_note_letters_are_case_insensitive(compiler: TextCompiler) -> None:
    upper = compiler.compile('ABCDEFG', PlaybackSettings())
    lower = compiler.compile('abcdefg', PlaybackSettings())

    assert upper == lower


def test_note_only_lasts_one_step(compiler: TextCompiler) -> None:
    states = compiler.compile('C+x', PlaybackSettings())

    assert [state.note for state in states] == [Note.DO, None, None]


def test_space_is_an_explicit_pause(compiler: TextCompiler) -> None:
    assert last(compiler, ' ').note is Note.PAUSE


def test_plus_doubles_volume_until_max(compiler: TextCompiler) -> None:
    states = compiler.compile('+' * 9, PlaybackSettings())

    assert [state.volume for state in states] == [
        200, 400, 800, 1600, 3200, 6400, 12800, 16383, 16383,
    ]


@pytest.mark.parametrize('volume', [0, 1, 100, 8191, 8192, 16000, 16383])
def test_volume_doubling_never_exceeds_max(compiler: TextCompiler, volume: int) -> None:
    assert last(compiler, '+', volume=volume).volume <= 16383


def test_minus_resets_volume_to_default(compiler: TextCompiler) -> None:
    assert last(compiler, '+++-').volume == 100
    assert last(compiler, '-', volume=40).volume == 100


def test_digits_add_to_instrument(compiler: TextCompiler) -> None:
    states = compiler.compile('123', PlaybackSettings())

    assert [state.instrument for state in states] == [1, 3, 6]
    assert all(state.note is None for state in states)


def test_instrument_is_clamped_at_127(compiler: TextCompiler) -> None:
    assert last(compiler, '9' * 20).instrument == 127


def test_octave_up_wraps_to_default(compiler: TextCompiler) -> None:
    states = compiler.compile('R+' * 9, PlaybackSettings())

    assert [state.octave for state in states] == [5, 6, 7, 8, 9, 10, 11, 12, 4]


def test_octave_down_clamps_at_zero(compiler: TextCompiler) -> None:
    states = compiler.compile('R-' * 6, PlaybackSettings())

    assert [state.octave for state in states] == [3, 2, 1, 0, 0, 0]


def test_tempo_up_saturates(compiler: TextCompiler) -> None:
    states = compiler.compile('BPM+BPM+BPM+', PlaybackSettings())

    assert [state.bpm for state in states] == [200, 255, 255]


@pytest.mark.parametrize('bpm', [1, 120, 175, 176, 254, 255])
def test_tempo_up_never_exceeds_max(compiler: TextCompiler, bpm: int) -> None:
    assert last(compiler, 'BPM+', bpm=bpm).bpm <= 255


def test_markers_produce_one_state_each(compiler: TextCompiler) -> None:
    states = compiler.compile('BPM+R+R-', PlaybackSettings())

    assert len(states) == 3
    assert states[0].bpm == 200
    assert states[1].octave == 5
    assert states[2].octave == 4
    assert all(state.note is None for state in states)


def test_question_mark_draws_random_note() -> None:
    compiler = TextCompiler(rng=random.Random(7))
    expected = random.Random(7).choice(Note.pitches())

    assert last(compiler, '?').note is expected


def test_newline_draws_random_instrument() -> None:
    compiler = TextCompiler(rng=random.Random(7))
    expected = random.Random(7).randint(0, 127)

    assert last(compiler, '\n').instrument == expected


def test_semicolon_draws_random_bpm() -> None:
    compiler = TextCompiler(rng=random.Random(7))
    expected = random.Random(7).randint(1, 254)

    assert last(compiler, ';').bpm == expected


def test_same_seed_same_states() -> None:
    text = '??\n;?;\n'
    first = TextCompiler(rng=random.Random(99)).compile(text)
    second = TextCompiler(rng=random.Random(99)).compile(text)

    assert first == second


def test_dot_is_not_a_random_note(compiler: TextCompiler) -> None:
    state = last(compiler, '.')

    assert state.note is None
    assert state.octave == 4


def test_unknown_characters_are_no_ops(compiler: TextCompiler) -> None:
    states = compiler.compile('xyz@é日本🎵', PlaybackSettings())
    initial = compiler.initial_state(PlaybackSettings())

    assert len(states) == 8
    assert all(state == initial for state in states)


def test_vowel_echo_produces_three_states(compiler: TextCompiler) -> None:
    states = compiler.compile('Ao', PlaybackSettings())

    assert len(states) == 3
    played, telephone, restored = states
    assert played.note is Note.LA
    assert telephone.instrument == 125
    assert telephone.note is Note.DO
    assert restored == compiler.initial_state(PlaybackSettings())


@pytest.mark.parametrize('vowel', list('oOiIuU'))
def test_every_echo_vowel(compiler: TextCompiler, vowel: str) -> None:
    states = compiler.compile('c' + vowel, PlaybackSettings())

    assert [state.instrument for state in states] == [0, 125, 0]


def test_echo_restores_state_before_the_note(compiler: TextCompiler) -> None:
    states = compiler.compile('5+Ao', PlaybackSettings())

    before_note = states[1]
    telephone, restored = states[-2], states[-1]
    assert telephone.instrument == 125
    assert telephone.volume == 200
    assert restored == before_note
    assert restored.instrument == 5


def test_only_the_first_vowel_echoes(compiler: TextCompiler) -> None:
    states = compiler.compile('Aoo', PlaybackSettings())

    assert len(states) == 4
    assert states[-1] == states[-2]


def test_vowel_without_note_is_no_op(compiler: TextCompiler) -> None:
    states = compiler.compile(' o1u', PlaybackSettings())

    assert len(states) == 4
    assert [state.instrument for state in states] == [0, 0, 1, 1]


def test_alternate_limits() -> None:
    compiler = TextCompiler(config=CompilerConfig(max_volume=300, max_bpm=150))
    states = compiler.compile('++BPM+', PlaybackSettings())

    assert [state.volume for state in states] == [200, 300, 300]
    assert states[-1].bpm == 150


def test_state_stack_depth_is_bounded() -> None:
    stack = StateStack()
    state = MusicState(instrument=0, octave=4, volume=100, bpm=120)
    stack.push(state)
    stack.push(state)

    with pytest.raises(OverflowError):
        stack.push(state)


def test_note_to_midi() -> None:
    assert Note.DO.to_midi(4) == 60
    assert Note.LA.to_midi(4) == 69
    assert Note.SI.to_midi(12) == 127
    assert Note.from_char('h') is None
