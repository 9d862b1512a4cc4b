"""Messages exchanged between kernel tasks."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union

from .graphics import Rectangle


class MessageType(enum.IntEnum):
    """What a message is about."""

    INTERRUPT_XHCI = 0
    TIMER_TIMEOUT = 1
    KEY_PUSH = 2
    LAYER = 3
    LAYER_FINISH = 4


class LayerOperation(enum.IntEnum):
    """Operations a task can ask the layer manager to perform."""

    MOVE = 0
    MOVE_RELATIVE = 1
    DRAW = 2
    DRAW_AREA = 3


@dataclass(frozen=True)
class TimerArg:
    """Payload of a timer timeout."""

    timeout: int
    value: int


@dataclass(frozen=True)
class KeyboardArg:
    """Payload of a key press; ``ascii`` is ``"\\0"`` when the key has no character."""

    modifier: int
    keycode: int
    ascii: str


@dataclass(frozen=True)
class LayerArg:
    """Payload of a layer operation request."""

    op: LayerOperation
    layer_id: int
    x: int
    y: int
    w: int
    h: int


MessageArg = Union[TimerArg, KeyboardArg, LayerArg]


@dataclass(frozen=True)
class Message:
    """A message of some type, sent by ``src_task``, with an optional payload."""

    type: MessageType
    src_task: int = 0
    arg: Optional[MessageArg] = None


def make_layer_message(
    task_id: int, layer_id: int, op: LayerOperation, area: Rectangle
) -> Message:
    """Build a request for ``op`` on ``layer_id`` covering ``area``."""
    return Message(
        MessageType.LAYER,
        task_id,
        LayerArg(
            op=op,
            layer_id=layer_id,
            x=area.pos.x,
            y=area.pos.y,
            w=area.size.x,
            h=area.size.y,
        ),
    )