"""PCI configuration space access, bus enumeration and MSI setup."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NamedTuple, Optional

from .errors import ErrorCode, KernelError

CONFIG_ADDRESS = 0x0CF8
CONFIG_DATA = 0x0CFC

CAPABILITY_MSI = 0x05
CAPABILITY_MSIX = 0x11

MAX_DEVICES = 32
INVALID_VENDOR_ID = 0xFFFF

_U32 = 0xFFFFFFFF


def make_address(bus: int, device: int, function: int, reg_addr: int) -> int:
    """Build the value written to CONFIG_ADDRESS to select a register."""
    return (
        (1 << 31)
        | ((bus & 0xFF) << 16)
        | ((device & 0x1F) << 11)
        | ((function & 0x07) << 8)
        | (reg_addr & 0xFC)
    ) & _U32


def is_single_function_device(header_type: int) -> bool:
    """Whether the header type marks a single-function device."""
    return (header_type & 0x80) == 0


def calc_bar_address(bar_index: int) -> int:
    """Configuration space address of base address register ``bar_index``."""
    return (0x10 + 4 * bar_index) & 0xFF


@dataclass(frozen=True)
class ClassCode:
    """Base class, subclass and programming interface of a device."""

    base: int
    sub: int
    interface: int

    def match(self, base: int, sub: Optional[int] = None, interface: Optional[int] = None) -> bool:
        """Compare the given parts (from the base class down) with this code."""
        if base != self.base:
            return False
        if sub is not None and sub != self.sub:
            return False
        if interface is not None:
            if sub is None:
                raise ValueError("an interface can only be matched together with a subclass")
            if interface != self.interface:
                return False
        return True


@dataclass(frozen=True)
class Device:
    """A function found on the PCI bus."""

    bus: int
    device: int
    function: int
    header_type: int
    class_code: ClassCode


class MSITriggerMode(enum.IntEnum):
    """Trigger mode of a message-signalled interrupt."""

    EDGE = 0
    LEVEL = 1


class MSIDeliveryMode(enum.IntEnum):
    """Delivery mode of a message-signalled interrupt."""

    FIXED = 0b000
    LOWEST_PRIORITY = 0b001
    SMI = 0b010
    NMI = 0b100
    INIT = 0b101
    EXT_INT = 0b111


class ConfigSpace(ABC):
    """The pair of I/O ports through which configuration space is reached."""

    @abstractmethod
    def write_address(self, address: int) -> None:
        """Write the CONFIG_ADDRESS port."""

    @abstractmethod
    def write_data(self, data: int) -> None:
        """Write the CONFIG_DATA port."""

    @abstractmethod
    def read_data(self) -> int:
        """Read the CONFIG_DATA port."""


class _CapabilityHeader(NamedTuple):
    data: int

    @property
    def cap_id(self) -> int:
        return self.data & 0xFF

    @property
    def next_ptr(self) -> int:
        return (self.data >> 8) & 0xFF

    @property
    def cap(self) -> int:
        return (self.data >> 16) & 0xFFFF


def _bits(value: int, shift: int, width: int) -> int:
    return (value >> shift) & ((1 << width) - 1)


def _with_bits(value: int, shift: int, width: int, field: int) -> int:
    mask = ((1 << width) - 1) << shift
    return (value & ~mask & _U32) | ((field << shift) & mask)


@dataclass
class _MSICapability:
    header: int = 0
    msg_addr: int = 0
    msg_upper_addr: int = 0
    msg_data: int = 0
    mask_bits: int = 0
    pending_bits: int = 0

    @property
    def multi_msg_capable(self) -> int:
        return _bits(self.header, 17, 3)

    @property
    def addr_64_capable(self) -> bool:
        return bool(_bits(self.header, 23, 1))

    @property
    def per_vector_mask_capable(self) -> bool:
        return bool(_bits(self.header, 24, 1))

    def set_msi_enable(self, enabled: bool) -> None:
        self.header = _with_bits(self.header, 16, 1, int(enabled))

    def set_multi_msg_enable(self, value: int) -> None:
        self.header = _with_bits(self.header, 20, 3, value)


class PciBus:
    """Enumerates and configures devices through a :class:`ConfigSpace`."""

    def __init__(self, config_space: ConfigSpace) -> None:
        self._config = config_space
        self.devices: list[Device] = []

    def _read(self, bus: int, device: int, function: int, reg_addr: int) -> int:
        self._config.write_address(make_address(bus, device, function, reg_addr))
        return self._config.read_data() & _U32

    def read_vendor_id(self, bus: int, device: int, function: int) -> int:
        """Vendor id of a function; 0xffff when nothing is there."""
        return self._read(bus, device, function, 0x00) & 0xFFFF

    def read_device_id(self, bus: int, device: int, function: int) -> int:
        """Device id of a function."""
        return self._read(bus, device, function, 0x00) >> 16

    def read_header_type(self, bus: int, device: int, function: int) -> int:
        """Header type byte of a function."""
        return (self._read(bus, device, function, 0x0C) >> 16) & 0xFF

    def read_class_code(self, bus: int, device: int, function: int) -> ClassCode:
        """Class code of a function."""
        reg = self._read(bus, device, function, 0x08)
        return ClassCode((reg >> 24) & 0xFF, (reg >> 16) & 0xFF, (reg >> 8) & 0xFF)

    def read_bus_numbers(self, bus: int, device: int, function: int) -> int:
        """The bus number register of a PCI-to-PCI bridge."""
        return self._read(bus, device, function, 0x18)

    def read_conf_reg(self, dev: Device, reg_addr: int) -> int:
        """Read a 32-bit configuration register of ``dev``."""
        return self._read(dev.bus, dev.device, dev.function, reg_addr & 0xFF)

    def write_conf_reg(self, dev: Device, reg_addr: int, value: int) -> None:
        """Write a 32-bit configuration register of ``dev``."""
        self._config.write_address(
            make_address(dev.bus, dev.device, dev.function, reg_addr & 0xFF)
        )
        self._config.write_data(value & _U32)

    def _add_device(self, device: Device) -> None:
        if len(self.devices) >= MAX_DEVICES:
            raise KernelError(ErrorCode.FULL)
        self.devices.append(device)

    def _scan_function(self, bus: int, device: int, function: int) -> None:
        class_code = self.read_class_code(bus, device, function)
        header_type = self.read_header_type(bus, device, function)
        self._add_device(Device(bus, device, function, header_type, class_code))
        if class_code.match(0x06, 0x04):
            secondary_bus = (self.read_bus_numbers(bus, device, function) >> 8) & 0xFF
            self._scan_bus(secondary_bus)

    def _scan_device(self, bus: int, device: int) -> None:
        self._scan_function(bus, device, 0)
        if is_single_function_device(self.read_header_type(bus, device, 0)):
            return
        for function in range(1, 8):
            if self.read_vendor_id(bus, device, function) == INVALID_VENDOR_ID:
                continue
            self._scan_function(bus, device, function)

    def _scan_bus(self, bus: int) -> None:
        for device in range(32):
            if self.read_vendor_id(bus, device, 0) == INVALID_VENDOR_ID:
                continue
            self._scan_device(bus, device)

    def scan_all_bus(self) -> list[Device]:
        """Enumerate every reachable function and return the devices found.

        Raises ``KernelError(FULL)`` when more devices exist than can be kept.
        """
        self.devices = []
        header_type = self.read_header_type(0, 0, 0)
        functions = 1 if is_single_function_device(header_type) else 8
        for function in range(functions):
            if self.read_vendor_id(0, 0, function) == INVALID_VENDOR_ID:
                continue
            self._scan_bus(function)
        return list(self.devices)

    def read_bar(self, device: Device, bar_index: int) -> int:
        """Read base address register ``bar_index``, joining 64-bit pairs."""
        if not 0 <= bar_index < 6:
            raise KernelError(ErrorCode.INDEX_OUT_OF_RANGE)
        addr = calc_bar_address(bar_index)
        bar = self.read_conf_reg(device, addr)
        if (bar & 4) == 0:
            return bar
        if bar_index >= 5:
            raise KernelError(ErrorCode.INDEX_OUT_OF_RANGE)
        upper = self.read_conf_reg(device, addr + 4)
        return bar | (upper << 32)

    def read_capability_header(self, dev: Device, addr: int) -> _CapabilityHeader:
        """Read the capability header at ``addr`` (cap_id, next_ptr, cap)."""
        return _CapabilityHeader(self.read_conf_reg(dev, addr))

    def _read_msi_capability(self, dev: Device, cap_addr: int) -> _MSICapability:
        cap = _MSICapability(header=self.read_conf_reg(dev, cap_addr))
        cap.msg_addr = self.read_conf_reg(dev, cap_addr + 4)
        msg_data_addr = cap_addr + 8
        if cap.addr_64_capable:
            cap.msg_upper_addr = self.read_conf_reg(dev, cap_addr + 8)
            msg_data_addr = cap_addr + 12
        cap.msg_data = self.read_conf_reg(dev, msg_data_addr)
        if cap.per_vector_mask_capable:
            cap.mask_bits = self.read_conf_reg(dev, msg_data_addr + 4)
            cap.pending_bits = self.read_conf_reg(dev, msg_data_addr + 8)
        return cap

    def _write_msi_capability(self, dev: Device, cap_addr: int, cap: _MSICapability) -> None:
        self.write_conf_reg(dev, cap_addr, cap.header)
        self.write_conf_reg(dev, cap_addr + 4, cap.msg_addr)
        msg_data_addr = cap_addr + 8
        if cap.addr_64_capable:
            self.write_conf_reg(dev, cap_addr + 8, cap.msg_upper_addr)
            msg_data_addr = cap_addr + 12
        self.write_conf_reg(dev, msg_data_addr, cap.msg_data)
        if cap.per_vector_mask_capable:
            self.write_conf_reg(dev, msg_data_addr + 4, cap.mask_bits)
            self.write_conf_reg(dev, msg_data_addr + 8, cap.pending_bits)

    def _configure_msi_register(
        self, dev: Device, cap_addr: int, msg_addr: int, msg_data: int, num_vector_exponent: int
    ) -> None:
        cap = self._read_msi_capability(dev, cap_addr)
        cap.set_multi_msg_enable(min(cap.multi_msg_capable, num_vector_exponent))
        cap.set_msi_enable(True)
        cap.msg_addr = msg_addr & _U32
        cap.msg_data = msg_data & _U32
        self._write_msi_capability(dev, cap_addr, cap)

    def configure_msi(
        self, dev: Device, msg_addr: int, msg_data: int, num_vector_exponent: int
    ) -> None:
        """Enable MSI on ``dev`` with the given message address and data.

        Raises ``KernelError`` with NO_PCI_MSI when the device has no MSI or
        MSI-X capability, and NOT_IMPLEMENTED when it only has MSI-X.
        """
        cap_addr = self.read_conf_reg(dev, 0x34) & 0xFF
        msi_cap_addr = 0
        msix_cap_addr = 0
        visited: set[int] = set()
        while cap_addr != 0:
            if cap_addr in visited:
                raise KernelError(ErrorCode.INVALID_DESCRIPTOR)
            visited.add(cap_addr)
            header = self.read_capability_header(dev, cap_addr)
            if header.cap_id == CAPABILITY_MSI:
                msi_cap_addr = cap_addr
            elif header.cap_id == CAPABILITY_MSIX:
                msix_cap_addr = cap_addr
            cap_addr = header.next_ptr

        if msi_cap_addr:
            self._configure_msi_register(dev, msi_cap_addr, msg_addr, msg_data, num_vector_exponent)
            return
        if msix_cap_addr:
            raise KernelError(ErrorCode.NOT_IMPLEMENTED)
        raise KernelError(ErrorCode.NO_PCI_MSI)

    def configure_msi_fixed_destination(
        self,
        dev: Device,
        apic_id: int,
        trigger_mode: MSITriggerMode,
        delivery_mode: MSIDeliveryMode,
        vector: int,
        num_vector_exponent: int,
    ) -> None:
        """Route the device's MSI to the local APIC ``apic_id`` at ``vector``."""
        msg_addr = 0xFEE00000 | ((apic_id & 0xFF) << 12)
        msg_data = (int(delivery_mode) << 8) | (vector & 0xFF)
        if trigger_mode == MSITriggerMode.LEVEL:
            msg_data |= 0xC000
        self.configure_msi(dev, msg_addr, msg_data, num_vector_exponent)