"""State records of a J1939 node and the data it keeps about other nodes."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

__all__ = [
    "INFORMATION_THIS_ECU",
    "MAX_TP_DT",
    "MAX_IDENTIFICATION",
    "MAX_DM_FIELD",
    "Acknowledgement",
    "TransportConnection",
    "TransportData",
    "Name",
    "DM1",
    "DM15",
    "DM16",
    "DM",
    "SoftwareIdentification",
    "ECUIdentification",
    "ComponentIdentification",
    "Identifications",
    "AuxiliaryValveCommand",
    "AuxiliaryValveEstimatedFlow",
    "GeneralPurposeValveCommand",
    "GeneralPurposeValveEstimatedFlow",
    "AuxiliaryValveMeasuredPosition",
    "EcuInformation",
    "J1939",
]

INFORMATION_THIS_ECU = "ECUINFO.TXT"
"""Default file name (8.3 form) holding this ECU's saved information."""

MAX_TP_DT = 1785
MAX_IDENTIFICATION = 30
MAX_DM_FIELD = 10
VALVE_COUNT = 16


def _buffer(size: int) -> bytearray:
    return bytearray(size)


def _zeros(size: int) -> list[int]:
    return [0] * size


@dataclass
class Acknowledgement:
    """Acknowledgement (PGN 0xE800) received from another ECU."""

    control_byte: int = 0
    group_function_value: int = 0
    address: int = 0
    pgn_of_requested_info: int = 0
    from_ecu_address: int = 0


@dataclass
class TransportConnection:
    """Transport protocol connection management (PGN 0xEC00)."""

    control_byte: int = 0
    total_message_size: int = 0
    number_of_packages: int = 0
    pgn_of_the_packeted_message: int = 0
    from_ecu_address: int = 0


@dataclass
class TransportData:
    """Transport protocol data transfer buffer (PGN 0xEB00)."""

    sequence_number: int = 0
    data: bytearray = field(default_factory=lambda: _buffer(MAX_TP_DT))
    from_ecu_address: int = 0


@dataclass
class Name:
    """The 64-bit J1939 NAME of an ECU (PGN 0xEE00)."""

    identity_number: int = 0
    manufacturer_code: int = 0
    function_instance: int = 0
    ecu_instance: int = 0
    function: int = 0
    vehicle_system: int = 0
    arbitrary_address_capable: int = 0
    industry_group: int = 0
    vehicle_system_instance: int = 0
    from_ecu_address: int = 0

    def to_bytes(self) -> bytes:
        """Encode the NAME as the eight data bytes of an address claim."""
        raw = (
            self.identity_number,
            self.identity_number >> 8,
            (self.identity_number >> 16) | (self.manufacturer_code << 5),
            self.manufacturer_code >> 3,
            (self.function_instance << 3) | self.ecu_instance,
            self.function,
            self.vehicle_system << 1,
            (self.arbitrary_address_capable << 7)
            | (self.industry_group << 4)
            | self.vehicle_system_instance,
        )
        return bytes(value & 0xFF for value in raw)

    @classmethod
    def from_bytes(cls, data, from_ecu_address: int = 0) -> Name:
        """Decode a NAME from the first eight bytes of ``data``."""
        if len(data) < 8:
            raise ValueError("a NAME needs 8 bytes")
        return cls(
            identity_number=((data[2] & 0x1F) << 16) | (data[1] << 8) | data[0],
            manufacturer_code=(data[3] << 3) | (data[2] >> 5),
            function_instance=data[4] >> 3,
            ecu_instance=data[4] & 0x07,
            function=data[5],
            vehicle_system=data[6] >> 1,
            arbitrary_address_capable=data[7] >> 7,
            industry_group=(data[7] >> 4) & 0x07,
            vehicle_system_instance=data[7] & 0x0F,
            from_ecu_address=from_ecu_address,
        )


@dataclass
class DM1:
    """Diagnostic trouble codes with lamp status (used for DM1 and DM2)."""

    sae_lamp_status_malfunction_indicator: int = 0
    sae_lamp_status_red_stop: int = 0
    sae_lamp_status_amber_warning: int = 0
    sae_lamp_status_protect_lamp: int = 0
    sae_flash_lamp_malfunction_indicator: int = 0
    sae_flash_lamp_red_stop: int = 0
    sae_flash_lamp_amber_warning: int = 0
    sae_flash_lamp_protect_lamp: int = 0
    spn: list[int] = field(default_factory=lambda: _zeros(MAX_DM_FIELD))
    fmi: list[int] = field(default_factory=lambda: _zeros(MAX_DM_FIELD))
    spn_conversion_method: list[int] = field(default_factory=lambda: _zeros(MAX_DM_FIELD))
    occurrence_count: list[int] = field(default_factory=lambda: _zeros(MAX_DM_FIELD))
    from_ecu_address: list[int] = field(default_factory=lambda: _zeros(MAX_DM_FIELD))

    def lamp_bytes(self) -> bytes:
        """Encode the lamp status and flash bits as two bytes."""
        status = (
            (self.sae_lamp_status_malfunction_indicator << 6)
            | (self.sae_lamp_status_red_stop << 4)
            | (self.sae_lamp_status_amber_warning << 2)
            | self.sae_lamp_status_protect_lamp
        )
        flash = (
            (self.sae_flash_lamp_malfunction_indicator << 6)
            | (self.sae_flash_lamp_red_stop << 4)
            | (self.sae_flash_lamp_amber_warning << 2)
            | self.sae_flash_lamp_protect_lamp
        )
        return bytes((status & 0xFF, flash & 0xFF))

    def set_lamps(self, data) -> None:
        """Decode lamp status and flash bits from the first two bytes of ``data``."""
        status, flash = data[0], data[1]
        self.sae_lamp_status_malfunction_indicator = status >> 6
        self.sae_lamp_status_red_stop = (status >> 4) & 0x03
        self.sae_lamp_status_amber_warning = (status >> 2) & 0x03
        self.sae_lamp_status_protect_lamp = status & 0x03
        self.sae_flash_lamp_malfunction_indicator = flash >> 6
        self.sae_flash_lamp_red_stop = (flash >> 4) & 0x03
        self.sae_flash_lamp_amber_warning = (flash >> 2) & 0x03
        self.sae_flash_lamp_protect_lamp = flash & 0x03


@dataclass
class DM15:
    """Memory access response (PGN 0xD800)."""

    number_of_allowed_bytes: int = 0
    status: int = 0
    edc_parameter: int = 0
    edcp_extension: int = 0
    seed: int = 0
    from_ecu_address: int = 0


@dataclass
class DM16:
    """Binary data transfer (PGN 0xD700)."""

    number_of_occurrences: int = 0
    raw_binary_data: bytearray = field(default_factory=lambda: _buffer(255))
    from_ecu_address: int = 0


@dataclass
class DM:
    """Diagnostic messages of one ECU."""

    errors_dm1_active: int = 0
    errors_dm2_active: int = 0
    dm1: DM1 = field(default_factory=DM1)
    dm2: DM1 = field(default_factory=DM1)
    dm15: DM15 = field(default_factory=DM15)
    dm16: DM16 = field(default_factory=DM16)


@dataclass
class SoftwareIdentification:
    """Software identification (PGN 0xFEDA)."""

    number_of_fields: int = 0
    identifications: bytearray = field(default_factory=lambda: _buffer(MAX_IDENTIFICATION))
    from_ecu_address: int = 0


@dataclass
class ECUIdentification:
    """ECU identification (PGN 0xFDC5)."""

    length_of_each_field: int = 0
    ecu_part_number: bytearray = field(default_factory=lambda: _buffer(MAX_IDENTIFICATION))
    ecu_serial_number: bytearray = field(default_factory=lambda: _buffer(MAX_IDENTIFICATION))
    ecu_location: bytearray = field(default_factory=lambda: _buffer(MAX_IDENTIFICATION))
    ecu_type: bytearray = field(default_factory=lambda: _buffer(MAX_IDENTIFICATION))
    from_ecu_address: int = 0


@dataclass
class ComponentIdentification:
    """Component identification (PGN 0xFEEB)."""

    length_of_each_field: int = 0
    component_product_date: bytearray = field(default_factory=lambda: _buffer(MAX_IDENTIFICATION))
    component_model_name: bytearray = field(default_factory=lambda: _buffer(MAX_IDENTIFICATION))
    component_serial_number: bytearray = field(default_factory=lambda: _buffer(MAX_IDENTIFICATION))
    component_unit_name: bytearray = field(default_factory=lambda: _buffer(MAX_IDENTIFICATION))
    from_ecu_address: int = 0


@dataclass
class Identifications:
    """Software, ECU and component identification of one ECU."""

    software_identification: SoftwareIdentification = field(default_factory=SoftwareIdentification)
    ecu_identification: ECUIdentification = field(default_factory=ECUIdentification)
    component_identification: ComponentIdentification = field(default_factory=ComponentIdentification)


@dataclass
class AuxiliaryValveCommand:
    """Auxiliary valve command (PGN 0xFE30 to 0xFE3F)."""

    standard_flow: int = 0
    fail_safe_mode: int = 0
    valve_state: int = 0
    from_ecu_address: int = 0


@dataclass
class AuxiliaryValveEstimatedFlow:
    """Auxiliary valve estimated flow (PGN 0xFE10 to 0xFE1F)."""

    extend_estimated_flow_standard: int = 0
    retract_estimated_flow_standard: int = 0
    valve_state: int = 0
    fail_safe_mode: int = 0
    limit: int = 0
    from_ecu_address: int = 0


@dataclass
class GeneralPurposeValveCommand:
    """General purpose valve command (PGN 0xC400)."""

    standard_flow: int = 0
    fail_safe_mode: int = 0
    valve_state: int = 0
    extended_flow: int = 0
    from_ecu_address: int = 0


@dataclass
class GeneralPurposeValveEstimatedFlow:
    """General purpose valve estimated flow (PGN 0xC600)."""

    extend_estimated_flow_standard: int = 0
    retract_estimated_flow_standard: int = 0
    valve_state: int = 0
    fail_safe_mode: int = 0
    limit: int = 0
    extend_estimated_flow_extended: int = 0
    retract_estimated_flow_extended: int = 0
    from_ecu_address: int = 0


@dataclass
class AuxiliaryValveMeasuredPosition:
    """Auxiliary valve measured position (PGN 0xFF20 to 0xFF2F)."""

    measured_position_percent: int = 0
    valve_state: int = 0
    measured_position_micrometer: int = 0
    from_ecu_address: int = 0


_ID = f"{MAX_IDENTIFICATION}s"
_ECU_INFORMATION = struct.Struct(
    "<IH8B"  # NAME
    "B"  # this ECU address
    f"B{_ID}B"  # software identification
    f"B{_ID}{_ID}{_ID}{_ID}B"  # ECU identification
    f"B{_ID}{_ID}{_ID}{_ID}B"  # component identification
)


@dataclass
class EcuInformation:
    """The persistent part of this ECU: NAME, address and identifications."""

    this_name: Name = field(default_factory=Name)
    this_ecu_address: int = 0
    this_identifications: Identifications = field(default_factory=Identifications)

    size = _ECU_INFORMATION.size

    def to_bytes(self) -> bytes:
        """Serialise to a fixed-size record."""
        name = self.this_name
        software = self.this_identifications.software_identification
        ecu = self.this_identifications.ecu_identification
        component = self.this_identifications.component_identification
        return _ECU_INFORMATION.pack(
            name.identity_number,
            name.manufacturer_code,
            name.function_instance,
            name.ecu_instance,
            name.function,
            name.vehicle_system,
            name.arbitrary_address_capable,
            name.industry_group,
            name.vehicle_system_instance,
            name.from_ecu_address,
            self.this_ecu_address,
            software.number_of_fields,
            bytes(software.identifications),
            software.from_ecu_address,
            ecu.length_of_each_field,
            bytes(ecu.ecu_part_number),
            bytes(ecu.ecu_serial_number),
            bytes(ecu.ecu_location),
            bytes(ecu.ecu_type),
            ecu.from_ecu_address,
            component.length_of_each_field,
            bytes(component.component_product_date),
            bytes(component.component_model_name),
            bytes(component.component_serial_number),
            bytes(component.component_unit_name),
            component.from_ecu_address,
        )

    @classmethod
    def from_bytes(cls, data) -> EcuInformation:
        """Deserialise a record; missing trailing bytes read as zero."""
        raw = bytes(data[: cls.size]).ljust(cls.size, b"\0")
        values = iter(_ECU_INFORMATION.unpack(raw))
        name = Name(*(next(values) for _ in range(10)))
        address = next(values)
        software = SoftwareIdentification(
            next(values), bytearray(next(values)), next(values)
        )
        ecu = ECUIdentification(
            next(values),
            bytearray(next(values)),
            bytearray(next(values)),
            bytearray(next(values)),
            bytearray(next(values)),
            next(values),
        )
        component = ComponentIdentification(
            next(values),
            bytearray(next(values)),
            bytearray(next(values)),
            bytearray(next(values)),
            bytearray(next(values)),
            next(values),
        )
        return cls(name, address, Identifications(software, ecu, component))


def _valves(factory):
    return field(default_factory=lambda: [factory() for _ in range(VALVE_COUNT)])


@dataclass
class J1939:
    """All state of one J1939 node: latest frame, peers and protocol records."""

    can_id: int = 0
    data: bytearray = field(default_factory=lambda: _buffer(8))
    id_and_data_is_updated: bool = False

    number_of_other_ecu: int = 0
    number_of_cannot_claim_address: int = 0
    other_ecu_address: bytearray = field(default_factory=lambda: _buffer(255))

    from_other_ecu_name: Name = field(default_factory=Name)
    from_other_ecu_acknowledgement: Acknowledgement = field(default_factory=Acknowledgement)
    from_other_ecu_tp_cm: TransportConnection = field(default_factory=TransportConnection)
    from_other_ecu_tp_dt: TransportData = field(default_factory=TransportData)
    from_other_ecu_dm: DM = field(default_factory=DM)
    from_other_ecu_identifications: Identifications = field(default_factory=Identifications)

    this_ecu_tp_cm: TransportConnection = field(default_factory=TransportConnection)
    this_ecu_tp_dt: TransportData = field(default_factory=TransportData)

    from_other_ecu_auxiliary_valve_estimated_flow: list[AuxiliaryValveEstimatedFlow] = _valves(
        AuxiliaryValveEstimatedFlow
    )
    from_other_ecu_auxiliary_valve_measured_position: list[AuxiliaryValveMeasuredPosition] = _valves(
        AuxiliaryValveMeasuredPosition
    )
    from_other_ecu_general_purpose_valve_estimated_flow: GeneralPurposeValveEstimatedFlow = field(
        default_factory=GeneralPurposeValveEstimatedFlow
    )
    from_other_ecu_auxiliary_valve_command: list[AuxiliaryValveCommand] = _valves(AuxiliaryValveCommand)
    from_other_ecu_general_purpose_valve_command: GeneralPurposeValveCommand = field(
        default_factory=GeneralPurposeValveCommand
    )

    information_this_ecu: EcuInformation = field(default_factory=EcuInformation)
    this_dm: DM = field(default_factory=DM)

    this_auxiliary_valve_estimated_flow: list[AuxiliaryValveEstimatedFlow] = _valves(
        AuxiliaryValveEstimatedFlow
    )
    this_auxiliary_valve_measured_position: list[AuxiliaryValveMeasuredPosition] = _valves(
        AuxiliaryValveMeasuredPosition
    )
    this_general_purpose_valve_estimated_flow: GeneralPurposeValveEstimatedFlow = field(
        default_factory=GeneralPurposeValveEstimatedFlow
    )

    bus: object | None = None
    storage_path: str = INFORMATION_THIS_ECU