import random

import pytest


class RecordingDevice:
    """Dispositivo de saída falso que guarda as mensagens recebidas."""

    def __init__(self) -> None:
        self.sent: list[bytes] = []
        self.closed: bool = False

    def send(self, data: bytes) -> None:
        if self.closed:
            raise RuntimeError('device already closed')
        self.sent.append(bytes(data))

    def close(self) -> None:
        self.closed = True


class SleepRecorder:
    """Substitui a espera real, anotando as durações pedidas."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def device() -> RecordingDevice:
    return RecordingDevice()


@pytest.fixture
def no_sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
