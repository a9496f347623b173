import pytest

from j1939stack.can_bus import LoopbackBus
from j1939stack.enums import PGN, ControlByte, IndustryGroup, ManufacturerCode, NameFunction
from j1939stack.network import (
    read_address_delete,
    read_address_not_claimed,
    read_commanded_address,
    read_response_request_address_claimed,
    response_request_address_claimed,
    send_address_delete,
    send_address_not_claimed,
    send_commanded_address,
    send_request_address_claimed,
)
from j1939stack.structs import J1939, EcuInformation, Name

THIS = 0x80
OTHER = 0x25


def make_node(address=THIS, tmp_path=None):
    node = J1939(bus=LoopbackBus())
    node.information_this_ecu.this_ecu_address = address
    if tmp_path is not None:
        node.storage_path = str(tmp_path / "ecu.bin")
    return node


def drain(bus):
    frames = []
    while (frame := bus.read_message()) is not None:
        frames.append(frame)
    return frames


def sample_name():
    return Name(
        identity_number=1234,
        manufacturer_code=ManufacturerCode.GRAYHILL,
        function_instance=3,
        ecu_instance=1,
        function=NameFunction.AUXILIARY_VALVES_CONTROL,
        vehicle_system=5,
        arbitrary_address_capable=1,
        industry_group=IndustryGroup.AGRICULTURAL_AND_FORESTRY,
        vehicle_system_instance=2,
    )


def test_address_claim_broadcast_and_round_trip():
    sender = make_node()
    sender.information_this_ecu.this_name = sample_name()
    response_request_address_claimed(sender)
    [frame] = drain(sender.bus)
    assert frame.can_id == (0x18EEFF << 8) | THIS
    assert frame.data == sample_name().to_bytes()

    receiver = make_node(OTHER)
    read_response_request_address_claimed(receiver, frame.can_id & 0xFF, frame.data)
    assert receiver.from_other_ecu_name == Name(**{**vars(sample_name()), "from_ecu_address": THIS})
    assert receiver.number_of_other_ecu == 1
    assert receiver.other_ecu_address[0] == THIS


def test_repeated_claim_records_peer_once():
    node = make_node()
    claim = sample_name().to_bytes()
    read_response_request_address_claimed(node, OTHER, claim)
    read_response_request_address_claimed(node, OTHER, claim)
    read_response_request_address_claimed(node, 0x30, claim)
    assert node.number_of_other_ecu == 2
    assert list(node.other_ecu_address[:2]) == [OTHER, 0x30]
    assert drain(node.bus) == []


def test_conflicting_claim_sends_address_not_claimed():
    node = make_node()
    node.information_this_ecu.this_name = sample_name()
    read_response_request_address_claimed(node, THIS, sample_name().to_bytes())
    [frame] = drain(node.bus)
    assert frame.can_id == 0x18EEFFFE
    assert frame.data == sample_name().to_bytes()


def test_short_claim_is_rejected():
    node = make_node()
    with pytest.raises(ValueError):
        read_response_request_address_claimed(node, OTHER, bytes(4))


def test_request_address_claimed_clears_peers():
    node = make_node()
    read_response_request_address_claimed(node, OTHER, sample_name().to_bytes())
    node.number_of_cannot_claim_address = 3
    send_request_address_claimed(node, 0xFF)
    assert node.number_of_other_ecu == 0
    assert node.number_of_cannot_claim_address == 0
    assert set(node.other_ecu_address) == {0xFF}
    [frame] = drain(node.bus)
    assert frame.can_id == (0x18EA << 16) | (0xFF << 8) | THIS
    assert frame.data[:3] == PGN.ADDRESS_CLAIMED.to_bytes(3, "little")


def test_address_not_claimed_round_trip():
    sender = make_node()
    sender.information_this_ecu.this_name = sample_name()
    send_address_not_claimed(sender)
    [frame] = drain(sender.bus)
    receiver = make_node(OTHER)
    read_address_not_claimed(receiver, frame.can_id & 0xFF, frame.data)
    read_address_not_claimed(receiver, frame.can_id & 0xFF, frame.data)
    assert receiver.number_of_cannot_claim_address == 2
    assert receiver.from_other_ecu_name.from_ecu_address == 0xFE
    assert receiver.from_other_ecu_name.identity_number == sample_name().identity_number


def test_commanded_address_transfer_and_apply(tmp_path):
    commander = make_node()
    name = sample_name()
    send_commanded_address(commander, 0xFF, 0x42, name)
    cm, *packages = drain(commander.bus)
    assert cm.data[0] == ControlByte.TP_CM_BAM
    assert cm.data[1] == 9
    assert cm.data[5:] == PGN.COMMANDED_ADDRESS.to_bytes(3, "little")
    assert len(packages) == 2
    payload = b"".join(p.data[1:] for p in packages)[:9]
    assert payload == name.to_bytes() + bytes((0x42,))

    target = make_node(0x30, tmp_path)
    read_commanded_address(target, payload)
    information = target.information_this_ecu
    assert information.this_ecu_address == 0x42
    assert information.this_name.to_bytes() == name.to_bytes()
    saved = (tmp_path / "ecu.bin").read_bytes()
    assert EcuInformation.from_bytes(saved) == information

    delete, claim = drain(target.bus)
    assert delete.can_id == (0x0002 << 16) | (0xFF << 8) | 0x30
    assert delete.data == bytes((0x30,)) + b"\xff" * 7
    assert claim.can_id == (0x18EEFF << 8) | 0x42
    assert claim.data == name.to_bytes()


def test_short_commanded_address_is_rejected(tmp_path):
    node = make_node(tmp_path=tmp_path)
    with pytest.raises(ValueError):
        read_commanded_address(node, bytes(8))


def test_send_address_delete_forgets_peer():
    node = make_node()
    for peer in (0x10, 0x20, 0x30):
        read_response_request_address_claimed(node, peer, sample_name().to_bytes())
    send_address_delete(node, OTHER, 0x20)
    assert node.number_of_other_ecu == 2
    assert 0x20 not in node.other_ecu_address[:3]
    [frame] = drain(node.bus)
    assert frame.can_id == (0x0002 << 16) | (OTHER << 8) | THIS
    assert frame.data == bytes((0x20,)) + b"\xff" * 7


def test_read_address_delete_forgets_peer():
    node = make_node()
    read_response_request_address_claimed(node, OTHER, sample_name().to_bytes())
    read_address_delete(node, bytes((OTHER,)) + b"\xff" * 7)
    assert node.number_of_other_ecu == 0
    assert node.other_ecu_address[0] == 0xFF


def test_read_address_delete_ignores_unknown_address():
    node = make_node()
    read_response_request_address_claimed(node, OTHER, sample_name().to_bytes())
    read_address_delete(node, bytes((0x77,)) + b"\xff" * 7)
    assert node.number_of_other_ecu == 1
    assert node.other_ecu_address[0] == OTHER