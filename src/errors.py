class Txt2MidiError(Exception):
    """Classe base para os erros da aplicação."""


class NoOutputDeviceError(Txt2MidiError):
    """Nenhuma porta de saída MIDI disponível no sistema."""


class DeviceSelectionError(Txt2MidiError):
    """A porta de saída escolhida não existe."""


class MidiFormatError(Txt2MidiError):
    """O arquivo MIDI não pode ser reproduzido (ex.: tempo não métrico)."""
