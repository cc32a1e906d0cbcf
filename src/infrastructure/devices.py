import logging
from collections.abc import Callable
from typing import Protocol, override

import mido  # pyright: ignore[reportMissingTypeStubs]

from errors import DeviceSelectionError, NoOutputDeviceError

logger = logging.getLogger(__name__)


class OutputDevice(Protocol):
    """Dispositivo que recebe mensagens MIDI de canal já serializadas."""

    def send(self, data: bytes) -> None: ...

    def close(self) -> None: ...


class MidoOutputDevice:
    """Porta de saída MIDI do sistema aberta via mido."""

    def __init__(self, port: mido.ports.BaseOutput) -> None:
        self.port: mido.ports.BaseOutput = port

    def send(self, data: bytes) -> None:
        self.port.send(mido.Message.from_bytes(data))

    def close(self) -> None:
        if not self.port.closed:
            self.port.close()
            logger.info('Conexão com %s fechada', self.port.name)

    @override
    def __repr__(self) -> str:
        return f'MidoOutputDevice({self.port.name!r})'


type PortChooser = Callable[[list[str]], int]


def list_output_ports() -> list[str]:
    """Lista as portas de saída MIDI disponíveis."""
    return list(mido.get_output_names())


def select_output_port(
    names: list[str],
    name: str | None = None,
    choose: PortChooser | None = None,
) -> str:
    """Escolhe uma porta entre as disponíveis.

    Sem portas é erro. Com uma só, ela é usada. Com várias, vale o nome
    pedido ou a escolha feita por `choose`, que recebe a lista de nomes e
    devolve um índice.
    """
    if not names:
        raise NoOutputDeviceError('No output port found.')

    if name is not None:
        if name not in names:
            raise DeviceSelectionError(f'Output port not found: {name!r}')
        return name

    if len(names) == 1:
        logger.info('Usando a única porta de saída disponível: %s', names[0])
        return names[0]

    if choose is None:
        raise DeviceSelectionError(
            f'{len(names)} output ports available and no selection was given'
        )

    index = choose(names)
    if not 0 <= index < len(names):
        raise DeviceSelectionError('Invalid output port selected.')
    return names[index]


def open_output_port(
    name: str | None = None,
    choose: PortChooser | None = None,
) -> MidoOutputDevice:
    """Abre uma conexão com uma das portas MIDI disponíveis."""
    selected = select_output_port(list_output_ports(), name=name, choose=choose)
    logger.info('Abrindo conexão com %s', selected)
    return MidoOutputDevice(mido.open_output(selected))
