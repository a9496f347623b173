# j1939stack

A pure-Python SAE J1939 protocol stack with the ISO 11783-7 valve messages,
for building and testing CAN bus ECUs. It encodes and decodes the 29-bit
extended identifiers and 8-byte payloads of the J1939 parameter groups. It
also keeps the state of the local ECU and of the ECUs it has heard from.

It has no dependencies outside the standard library.

## What it covers

- **Transport (J1939-21)**, in `j1939stack.transport`: requests
  (`send_request`), acknowledgements (`send_acknowledgement`,
  `read_acknowledgement`) and the transport protocol for messages longer than
  eight bytes. `begin_transfer` loads a payload and announces it with BAM when
  broadcast, or with RTS otherwise. `read_tp_connection_management` answers an
  RTS with CTS and a CTS with the data packages (`send_tp_data_transfer`).
  Incoming data packages are collected by `read_tp_data_transfer` in
  `j1939stack.ecu`, which hands the complete message on.
- **Network management (J1939-81)**, in `j1939stack.network`: address claimed,
  address not claimed, commanded address and address delete.
- **Application layer (J1939-71)**, in `j1939stack.identification`: software,
  ECU and component identification.
- **Diagnostics (J1939-73)**: DM1, DM2 and DM3 in `j1939stack.diagnostics`;
  DM14/DM15/DM16 memory access in `j1939stack.memory_access`.
- **ISO 11783-7 valves**: auxiliary and general purpose valve commands in
  `j1939stack.valve_commands`; estimated flow and measured position in
  `j1939stack.valve_flow`.
- **ECU lifecycle**, in `j1939stack.ecu`: `startup_ecu`, `listen_for_messages`,
  `read_request` and `closedown_ecu`.

Every `send_*` and `response_*` function returns a `SendStatus`. Functions that
take a valve number raise `ValueError` for numbers outside 0 to 15.

## The bus

Every message goes out through a `CanBus` from `j1939stack.can_bus`, attached
to the node as `J1939.bus`. A node without a bus raises `RuntimeError` when it
tries to send or read. Two buses are provided:

- `LoopbackBus` keeps a ring of 256 frames in memory. Every frame sent can be
  read back with `read_message`, which is handy for tests and for trying the
  stack without hardware.
- `CallbackBus(send, read, traffic=None)` hands frames to your own functions:
  `send(can_id, data)` gets each frame's bytes, and `read()` returns `None` or a
  `(can_id, data)` pair. Use it to connect the stack to a CAN interface, a USB
  adapter or a network link. Its `delay` sleeps for the given milliseconds
  between transport packages; the loopback bus does not wait.

`send_message` pads frames to eight bytes and rejects longer ones;
`send_request` sends exactly three bytes. Frames read back are returned as
`CanFrame(can_id, data)` tuples.

Both buses take an optional `traffic(can_id, data, is_tx)` callback that sees
every frame sent and every new frame read. `format_traffic(can_id, data, is_tx)`
renders one frame as a tab-separated line: `TX` or `RX`, the identifier as
eight hex digits, and eight data bytes in hex.

```python
from j1939stack.can_bus import LoopbackBus, format_traffic

bus = LoopbackBus(traffic=lambda can_id, data, is_tx: print(format_traffic(can_id, data, is_tx)))
bus.send_message(0x18EAFF00, b"\x00\xee\x00")
frame = bus.read_message()
assert frame.data == b"\x00\xee\x00\x00\x00\x00\x00\x00"
```

## State

`j1939stack.structs.J1939` is a dataclass holding everything the stack knows:

- the latest frame (`can_id`, `data`, `id_and_data_is_updated`)
- the addresses of other ECUs (`other_ecu_address`, `number_of_other_ecu`)
- the messages decoded from them (`from_other_ecu_*`)
- this ECU's own NAME, address, identifications, trouble codes and valve values
- the attached `bus` and the `storage_path` of the saved information
  (by default `ECUINFO.TXT`)

The persistent part is an `EcuInformation`: this ECU's `Name`, address and
identifications, which `to_bytes` and `from_bytes` turn into a fixed-size
record and back.

- `closedown_ecu` writes it to `storage_path`.
- `startup_ecu` reads it back (a missing file is created and read as zeros),
  claims the address and asks the other ECUs for theirs.

Both raise `OSError` when the file cannot be used. The lower-level
`save_bytes` and `load_bytes` are in `j1939stack.storage`.

## Example: NAME fields

A J1939 NAME packs its fields into eight bytes. `Name` converts between the
fields and that form:

```python
from j1939stack.structs import Name

name = Name(identity_number=1234, manufacturer_code=0x126, function=0x81)
packed = name.to_bytes()
assert len(packed) == 8

decoded = Name.from_bytes(packed, 0x80)
assert decoded.identity_number == 1234
assert decoded.manufacturer_code == 0x126
assert decoded.from_ecu_address == 0x80
```

## Example: the main loop

```python
from j1939stack.can_bus import LoopbackBus
from j1939stack.ecu import closedown_ecu, listen_for_messages, startup_ecu
from j1939stack.structs import J1939

j1939 = J1939(bus=LoopbackBus(), storage_path="ecu.bin")
startup_ecu(j1939)
for _ in range(10):
    listen_for_messages(j1939)
closedown_ecu(j1939)
```

`listen_for_messages` reads one frame. It keeps it as the latest frame and
routes it to the right reader when it is addressed to this ECU, broadcast, or
one of the broadcast parameter groups the stack knows. That reader answers
requests and stores what the other ECU sent. It returns `True` when the frame
was handled and `False` when nothing new arrived or the frame was not for this
ECU.

Between calls your application reads the decoded values from the `J1939`
object and sends its own messages with the `send_*` functions, for example
`send_request_dm1(j1939, da)` or
`send_auxiliary_valve_command(j1939, valve_number, standard_flow, fail_safe_mode, valve_state)`.

## Constants

`j1939stack.enums` holds the protocol constants as integer enums: parameter
group numbers (`PGN`), control bytes (`ControlByte`), send status
(`SendStatus`), acknowledgement causes (`GroupFunctionValue`), DM14/DM15 codes
(`DM14Command`, `DM15Status`, `PointerType`, `PointerExtension`,
`EdcpExtension`, `EdcParameter`, `Seed`), NAME field values
(`ManufacturerCode`, `IndustryGroup`, `NameFunction`,
`ArbitraryAddressCapable`) and ISO 11783 valve codes (`ValveState`,
`FailSafeMode`, `LimitCode`, `ExitCode`).

## What it does not do

- There is no command-line program; the stack is a library driven from your
  own loop.
- There are no drivers for particular CAN adapters. Connect one through
  `CallbackBus`.
- DM14 memory requests are served by `j1939stack.storage.access_memory`, which
  reads no real memory. It always answers with a fixed text, allows 40 bytes
  and tells the requester to proceed.