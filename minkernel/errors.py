"""Kernel error codes and the exception that carries them."""

from __future__ import annotations

import enum


class ErrorCode(enum.IntEnum):
    """Causes a kernel operation can fail with, in their fixed numeric order."""

    SUCCESS = 0
    FULL = enum.auto()
    EMPTY = enum.auto()
    NO_ENOUGH_MEMORY = enum.auto()
    INDEX_OUT_OF_RANGE = enum.auto()
    HOST_CONTROLLER_NOT_HALTED = enum.auto()
    INVALID_SLOT_ID = enum.auto()
    PORT_NOT_CONNECTED = enum.auto()
    INVALID_ENDPOINT_NUMBER = enum.auto()
    TRANSFER_RING_NOT_SET = enum.auto()
    ALREADY_ALLOCATED = enum.auto()
    NOT_IMPLEMENTED = enum.auto()
    INVALID_DESCRIPTOR = enum.auto()
    BUFFER_TOO_SMALL = enum.auto()
    UNKNOWN_DEVICE = enum.auto()
    NO_CORRESPONDING_SETUP_STAGE = enum.auto()
    TRANSFER_FAILED = enum.auto()
    INVALID_PHASE = enum.auto()
    UNKNOWN_XHCI_SPEED_ID = enum.auto()
    NO_WAITER = enum.auto()
    NO_PCI_MSI = enum.auto()
    UNKNOWN_PIXEL_FORMAT = enum.auto()
    NO_SUCH_TASK = enum.auto()

    @property
    def code_name(self) -> str:
        """The conventional display name of this code, e.g. ``kFull``."""
        return _CODE_NAMES[self]


_CODE_NAMES = {
    ErrorCode.SUCCESS: "kSuccess",
    ErrorCode.FULL: "kFull",
    ErrorCode.EMPTY: "kEmpty",
    ErrorCode.NO_ENOUGH_MEMORY: "kNoEnoughMemory",
    ErrorCode.INDEX_OUT_OF_RANGE: "kIndexOutOfRange",
    ErrorCode.HOST_CONTROLLER_NOT_HALTED: "kHostControllerNotHalted",
    ErrorCode.INVALID_SLOT_ID: "kInvalidSlotID",
    ErrorCode.PORT_NOT_CONNECTED: "kPortNotConnected",
    ErrorCode.INVALID_ENDPOINT_NUMBER: "kInvalidEndpointNumber",
    ErrorCode.TRANSFER_RING_NOT_SET: "kTransferRingNotSet",
    ErrorCode.ALREADY_ALLOCATED: "kAlreadyAllocated",
    ErrorCode.NOT_IMPLEMENTED: "kNotImplemented",
    ErrorCode.INVALID_DESCRIPTOR: "kInvalidDescriptor",
    ErrorCode.BUFFER_TOO_SMALL: "kBufferTooSmall",
    ErrorCode.UNKNOWN_DEVICE: "kUnknownDevice",
    ErrorCode.NO_CORRESPONDING_SETUP_STAGE: "kNoCorrespondingSetupStage",
    ErrorCode.TRANSFER_FAILED: "kTransferFailed",
    ErrorCode.INVALID_PHASE: "kInvalidPhase",
    ErrorCode.UNKNOWN_XHCI_SPEED_ID: "kUnknownXHCISpeedID",
    ErrorCode.NO_WAITER: "kNoWaiter",
    ErrorCode.NO_PCI_MSI: "kNoPCIMSI",
    ErrorCode.UNKNOWN_PIXEL_FORMAT: "kUnknownPixelFormat",
    ErrorCode.NO_SUCH_TASK: "kNoSuchTask",
}


class KernelError(Exception):
    """A failed kernel operation, identified by its :class:`ErrorCode`."""

    def __init__(self, code: ErrorCode) -> None:
        code = ErrorCode(code)
        if code is ErrorCode.SUCCESS:
            raise ValueError("success is not an error")
        super().__init__(code.code_name)
        self.code = code

    def name(self) -> str:
        """Return the display name of the error's code."""
        return self.code.code_name