from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Literal:
    """Um caractere comum do texto de entrada."""

    char: str


@dataclass(frozen=True)
class TempoUp:
    """Marcador `BPM+`."""


@dataclass(frozen=True)
class OctaveUp:
    """Marcador `R+`."""


@dataclass(frozen=True)
class OctaveDown:
    """Marcador `R-`."""


type Token = Literal | TempoUp | OctaveUp | OctaveDown

# Ordem de busca importa: comandos mais longos primeiro
MULTI_CHAR_TOKENS: Final[tuple[tuple[str, Token], ...]] = (
    ('BPM+', TempoUp()),
    ('R+', OctaveUp()),
    ('R-', OctaveDown()),
)


def fold_tokens(text: str) -> list[Token]:
    """Substitui os comandos de vários caracteres por tokens únicos.

    A varredura é da esquerda para a direita e sem sobreposição: `BPM+` tem
    precedência, e o que sobra vira `Literal`. Textos sem comandos são
    devolvidos como uma sequência de literais idêntica ao texto original.
    """
    tokens: list[Token] = []
    pos = 0
    text_len = len(text)

    while pos < text_len:
        for literal, token in MULTI_CHAR_TOKENS:
            if text.startswith(literal, pos):
                tokens.append(token)
                pos += len(literal)
                break
        else:
            tokens.append(Literal(text[pos]))
            pos += 1

    return tokens
