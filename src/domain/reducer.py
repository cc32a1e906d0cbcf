from domain.actions import (
    Action,
    ChangeBpm,
    ChangeInstrument,
    ChangeVolume,
    EndOfSequence,
    Pause,
    PlayNote,
)
from domain.models import MusicState, Note


def reduce_states(
    states: list[MusicState],
    initial: MusicState | None = None,
) -> list[Action]:
    """Reduz a lista de estados à menor sequência de ações equivalente.

    O primeiro estado sempre gera BPM, instrumento e volume, para a trilha
    partir de um estado conhecido. Depois disso cada estado gera no máximo
    uma ação, pela ordem de prioridade BPM > instrumento > volume > nota.
    Uma nota só é tocada quando nenhum dos outros atributos mudou.

    `initial` é usado no lugar do primeiro estado quando a lista é vazia.
    """
    if not states and initial is None:
        return [EndOfSequence()]

    first = states[0] if states else initial
    actions: list[Action] = [
        ChangeBpm(first.bpm),
        ChangeInstrument(first.instrument),
        ChangeVolume(first.volume),
    ]

    current = first
    for state in states:
        action = _diff(current, state)
        if action is not None:
            actions.append(action)
        current = state

    actions.append(EndOfSequence())
    return actions


def _diff(current: MusicState, state: MusicState) -> Action | None:
    if state.bpm != current.bpm:
        return ChangeBpm(state.bpm)
    if state.instrument != current.instrument:
        return ChangeInstrument(state.instrument)
    if state.volume != current.volume:
        return ChangeVolume(state.volume)
    if state.note is Note.PAUSE:
        return Pause()
    if state.note is not None:
        return PlayNote(state.note.to_midi(state.octave))
    return None
