import pytest

from minkernel.errors import ErrorCode, KernelError
from minkernel.pci import (
    CAPABILITY_MSI,
    CAPABILITY_MSIX,
    ClassCode,
    ConfigSpace,
    Device,
    MSIDeliveryMode,
    MSITriggerMode,
    PciBus,
    calc_bar_address,
    is_single_function_device,
    make_address,
)


class FakeConfigSpace(ConfigSpace):
    def __init__(self):
        self.regs = {}
        self.address = 0

    @staticmethod
    def decode(address):
        return ((address >> 16) & 0xFF, (address >> 11) & 0x1F, (address >> 8) & 0x7, address & 0xFC)

    def write_address(self, address):
        self.address = address

    def write_data(self, data):
        self.regs[self.decode(self.address)] = data

    def read_data(self):
        return self.regs.get(self.decode(self.address), 0xFFFFFFFF)

    def add_function(self, bus, dev, func, base, sub, header_type=0, vendor=0x1234):
        self.regs[(bus, dev, func, 0x00)] = vendor
        self.regs[(bus, dev, func, 0x08)] = (base << 24) | (sub << 16)
        self.regs[(bus, dev, func, 0x0C)] = header_type << 16


def locations(devices):
    return [(d.bus, d.device, d.function) for d in devices]


def test_make_address_enable_bit():
    assert make_address(0, 0, 0, 0) == 0x80000000


def test_make_address_fields_round_trip():
    address = make_address(3, 17, 5, 0x2B)
    assert FakeConfigSpace.decode(address) == (3, 17, 5, 0x28)
    assert address >> 31 == 1


def test_single_function_flag():
    assert is_single_function_device(0x00)
    assert not is_single_function_device(0x80)


def test_bar_addresses():
    assert calc_bar_address(0) == 0x10
    assert all(calc_bar_address(i + 1) - calc_bar_address(i) == 4 for i in range(5))


def test_class_code_match():
    cc = ClassCode(0x0C, 0x03, 0x30)
    assert cc.match(0x0C)
    assert cc.match(0x0C, 0x03)
    assert cc.match(0x0C, 0x03, 0x30)
    assert not cc.match(0x0C, 0x03, 0x20)
    assert not cc.match(0x06)


def test_scan_all_bus_finds_functions_and_bridged_bus():
    cs = FakeConfigSpace()
    cs.add_function(0, 0, 0, 0x06, 0x00)
    cs.add_function(0, 1, 0, 0x02, 0x00, header_type=0x80)
    cs.add_function(0, 1, 1, 0x02, 0x00)
    cs.add_function(0, 2, 0, 0x06, 0x04, header_type=0x01)
    cs.regs[(0, 2, 0, 0x18)] = 1 << 8
    cs.add_function(1, 0, 0, 0x0C, 0x03)
    pci = PciBus(cs)
    devices = pci.scan_all_bus()
    assert locations(devices) == [(0, 0, 0), (0, 1, 0), (0, 1, 1), (0, 2, 0), (1, 0, 0)]
    assert devices[4].class_code.match(0x0C, 0x03)
    assert devices[3].header_type == 0x01


def test_scan_all_bus_full():
    cs = FakeConfigSpace()
    cs.add_function(0, 0, 0, 0x06, 0x00, header_type=0x80)
    cs.add_function(0, 0, 1, 0x06, 0x00)
    for dev in range(1, 32):
        cs.add_function(0, dev, 0, 0x02, 0x00)
    with pytest.raises(KernelError) as info:
        PciBus(cs).scan_all_bus()
    assert info.value.code is ErrorCode.FULL


def test_read_ids():
    cs = FakeConfigSpace()
    cs.regs[(0, 4, 0, 0x00)] = (0xABCD << 16) | 0x1234
    pci = PciBus(cs)
    assert pci.read_vendor_id(0, 4, 0) == 0x1234
    assert pci.read_device_id(0, 4, 0) == 0xABCD


DEV = Device(0, 3, 0, 0, ClassCode(0x0C, 0x03, 0x30))


def test_read_bar_32_bit():
    cs = FakeConfigSpace()
    cs.regs[(0, 3, 0, 0x10)] = 0xFEB00000
    assert PciBus(cs).read_bar(DEV, 0) == 0xFEB00000


def test_read_bar_64_bit():
    cs = FakeConfigSpace()
    cs.regs[(0, 3, 0, 0x10)] = 0xFEB00004
    cs.regs[(0, 3, 0, 0x14)] = 0x1
    value = PciBus(cs).read_bar(DEV, 0)
    assert value >> 32 == 1
    assert value & 0xFFFFFFFF == 0xFEB00004


def test_read_bar_index_errors():
    cs = FakeConfigSpace()
    cs.regs[(0, 3, 0, calc_bar_address(5))] = 0x4
    pci = PciBus(cs)
    with pytest.raises(KernelError) as info:
        pci.read_bar(DEV, 6)
    assert info.value.code is ErrorCode.INDEX_OUT_OF_RANGE
    with pytest.raises(KernelError) as info:
        pci.read_bar(DEV, 5)
    assert info.value.code is ErrorCode.INDEX_OUT_OF_RANGE


def msi_device(capable=2, addr64=True):
    cs = FakeConfigSpace()
    cs.regs[(0, 3, 0, 0x34)] = 0x50
    cs.regs[(0, 3, 0, 0x50)] = CAPABILITY_MSI | (capable << 17) | (int(addr64) << 23)
    cs.regs[(0, 3, 0, 0x54)] = 0
    cs.regs[(0, 3, 0, 0x58)] = 0
    cs.regs[(0, 3, 0, 0x5C)] = 0
    return cs


def test_read_capability_header():
    cs = msi_device()
    header = PciBus(cs).read_capability_header(DEV, 0x50)
    assert header.cap_id == CAPABILITY_MSI
    assert header.next_ptr == 0


def test_configure_msi_writes_capability():
    cs = msi_device(capable=2)
    PciBus(cs).configure_msi(DEV, 0xFEE00000, 0x41, 1)
    header = cs.regs[(0, 3, 0, 0x50)]
    assert (header >> 16) & 1 == 1
    assert (header >> 20) & 0x7 == 1
    assert header & 0xFF == CAPABILITY_MSI
    assert cs.regs[(0, 3, 0, 0x54)] == 0xFEE00000
    assert cs.regs[(0, 3, 0, 0x5C)] == 0x41


def test_configure_msi_limits_to_capable():
    cs = msi_device(capable=1)
    PciBus(cs).configure_msi(DEV, 0xFEE00000, 0x41, 5)
    assert (cs.regs[(0, 3, 0, 0x50)] >> 20) & 0x7 == 1


def test_configure_msi_32_bit_data_location():
    cs = msi_device(addr64=False)
    PciBus(cs).configure_msi(DEV, 0xFEE00000, 0x41, 0)
    assert cs.regs[(0, 3, 0, 0x58)] == 0x41


def test_configure_msi_without_capability():
    cs = FakeConfigSpace()
    cs.regs[(0, 3, 0, 0x34)] = 0
    with pytest.raises(KernelError) as info:
        PciBus(cs).configure_msi(DEV, 0, 0, 0)
    assert info.value.code is ErrorCode.NO_PCI_MSI


def test_configure_msix_only_not_implemented():
    cs = FakeConfigSpace()
    cs.regs[(0, 3, 0, 0x34)] = 0x70
    cs.regs[(0, 3, 0, 0x70)] = CAPABILITY_MSIX
    with pytest.raises(KernelError) as info:
        PciBus(cs).configure_msi(DEV, 0, 0, 0)
    assert info.value.code is ErrorCode.NOT_IMPLEMENTED


def test_fixed_destination_level_trigger():
    cs = msi_device()
    PciBus(cs).configure_msi_fixed_destination(
        DEV, 0, MSITriggerMode.LEVEL, MSIDeliveryMode.FIXED, 0x40, 0
    )
    assert cs.regs[(0, 3, 0, 0x54)] == 0xFEE00000
    data = cs.regs[(0, 3, 0, 0x5C)]
    assert data & 0xFF == 0x40
    assert data & 0xC000 == 0xC000


def test_fixed_destination_edge_trigger_and_apic_id():
    cs = msi_device()
    PciBus(cs).configure_msi_fixed_destination(
        DEV, 2, MSITriggerMode.EDGE, MSIDeliveryMode.NMI, 0x41, 0
    )
    data = cs.regs[(0, 3, 0, 0x5C)]
    assert data & 0xC000 == 0
    assert (data >> 8) & 0x7 == MSIDeliveryMode.NMI
    assert (cs.regs[(0, 3, 0, 0x54)] >> 12) & 0xFF == 2