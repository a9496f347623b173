"""Protocol codes used by the SAE J1939 and ISO 11783-7 layers."""

from enum import IntEnum

__all__ = [
    "ControlByte",
    "DM15Status",
    "EdcpExtension",
    "EdcParameter",
    "Seed",
    "DM14Command",
    "PointerType",
    "PointerExtension",
    "USER_KEY_NO_KEY_AVAILABLE",
    "ManufacturerCode",
    "IndustryGroup",
    "NameFunction",
    "ArbitraryAddressCapable",
    "GroupFunctionValue",
    "PGN",
    "SendStatus",
    "ValveState",
    "ExitCode",
    "FailSafeMode",
    "LimitCode",
]


class ControlByte(IntEnum):
    """Control bytes of transport protocol and acknowledgement messages."""

    TP_CM_ABORT = 0xFF
    TP_CM_BAM = 0x20
    TP_CM_END_OF_MSG_ACK = 0x13
    TP_CM_CTS = 0x11
    TP_CM_RTS = 0x10
    ACKNOWLEDGEMENT_PGN_SUPPORTED = 0x0
    ACKNOWLEDGEMENT_PGN_NOT_SUPPORTED = 0x1
    ACKNOWLEDGEMENT_PGN_ACCESS_DENIED = 0x2
    ACKNOWLEDGEMENT_PGN_BUSY = 0x3


class DM15Status(IntEnum):
    """Status field of a DM15 memory access response."""

    PROCEED = 0x0
    BUSY = 0x1
    OPERATION_COMPLETED = 0x4
    OPERATION_FAILED = 0x5


class EdcpExtension(IntEnum):
    """How the EDC parameter of a DM15 response is to be read."""

    ALL_EDC_PARAMETER_BEEN_SENT = 0x0
    CONCATENATE_FOLLOWING_DATA_HIGHER_ORDER = 0x2
    CONCATENATE_FOLLOWING_DATA_LOWER_ORDER = 0x3
    DATA_IN_EDC_PARAMETER_IS_ERROR_INDICATOR = 0x4
    DATA_IN_EDC_PARAMETER_IS_ERROR_INDICATOR_SEED_IS_TIME_TO_COMPLETE = 0x7
    NOT_USED = 0xFF


class EdcParameter(IntEnum):
    """Error/status codes carried in the EDC parameter of a DM15 response."""

    PROCESSING_ERASE_REQUEST = 0x10
    PROCESSING_READ_REQUEST = 0x11
    PROCESSING_WRITE_REQUEST = 0x12
    PROCESSING_STATUS_REQUEST = 0x13
    PROCESSING_BOOT_LOAD_REQUEST = 0x16
    NOT_VERIFY_RAM_WRITE = 0x21
    NOT_VERIFY_FLASH_WRITE = 0x22
    NOT_VERIFY_EEPROM_WRITE = 0x23
    INVALID_KEY = 0x1003


class Seed(IntEnum):
    """Seed values of a DM15 response."""

    NO_MORE_KEYS_NEED_FOR_THE_PROCESS = 0x0
    USE_LONG_KEY = 0x1
    NO_KEY_USED = 0xFFFF


class DM14Command(IntEnum):
    """Command field of a DM14 memory access request."""

    READ = 0x1
    WRITE = 0x2
    OPERATION_COMPLETED = 0x4
    OPERATION_FAILED = 0x5
    BOOT_LOAD = 0x6


class PointerType(IntEnum):
    """Pointer type bit of a DM14 request."""

    JOIN_POINTER_WITH_POINTER_EXTENSION = 0x0
    POINTER_EXTENSION_IS_A_COMMAND = 0x1


class PointerExtension(IntEnum):
    """Memory area selected by a DM14 pointer extension."""

    FLASH_ACCESS = 0x0
    EEPROM_ACCESS = 0x1
    VARIABLE_ACCESS = 0x2


USER_KEY_NO_KEY_AVAILABLE = 0xFFFF
"""Key value of a DM14 request when no user key is available."""


class ManufacturerCode(IntEnum):
    """Known manufacturer codes of the J1939 NAME."""

    SONCEBOZ = 0x147
    GRAYHILL = 0x126


class IndustryGroup(IntEnum):
    """Industry group field of the J1939 NAME."""

    GLOBAL = 0x0
    ON_HIGHWAY = 0x1
    AGRICULTURAL_AND_FORESTRY = 0x2
    CONSTRUCTION = 0x3
    MARINE = 0x4
    INDUSTRIAL_CONTROL_PROCESS = 0x5
    RESERVED_6 = 0x6
    RESERVED_7 = 0x7


class NameFunction(IntEnum):
    """Function field of the J1939 NAME."""

    AUXILIARY_VALVES_CONTROL = 0x81
    VDC_MODULE = 0x87


class ArbitraryAddressCapable(IntEnum):
    """Whether an ECU may pick a new address on its own."""

    NOT_CAPABLE = 0x0
    CAPABLE = 0x1


class GroupFunctionValue(IntEnum):
    """Cause codes carried in acknowledgements."""

    NORMAL = 0x0
    CANNOT_MAINTAIN_ANOTHER_CONNECTION = 0x1
    LACKING_NECESSARY_RESOURCES = 0x2
    ABORT_TIME_OUT = 0x3
    NO_CAUSE = 0xFF


class PGN(IntEnum):
    """Parameter group numbers known to the stack."""

    ADDRESS_DELETE = 0x000002  # not part of the J1939 standard
    REQUEST = 0x00EA00
    ACKNOWLEDGEMENT = 0x00E800
    TP_CM = 0x00EC00
    TP_DT = 0x00EB00
    ADDRESS_CLAIMED = 0x00EE00
    COMMANDED_ADDRESS = 0x00FED8
    DM1 = 0x00FECA
    DM2 = 0x00FECB
    DM3 = 0x00FECC
    DM14 = 0x00D900
    DM15 = 0x00D800
    DM16 = 0x00D700
    SOFTWARE_IDENTIFICATION = 0x00FEDA
    ECU_IDENTIFICATION = 0x00FDC5
    COMPONENT_IDENTIFICATION = 0x00FEEB
    AUXILIARY_VALVE_ESTIMATED_FLOW_0 = 0x00FE10
    AUXILIARY_VALVE_ESTIMATED_FLOW_1 = 0x00FE11
    AUXILIARY_VALVE_ESTIMATED_FLOW_2 = 0x00FE12
    AUXILIARY_VALVE_ESTIMATED_FLOW_3 = 0x00FE13
    AUXILIARY_VALVE_ESTIMATED_FLOW_4 = 0x00FE14
    AUXILIARY_VALVE_ESTIMATED_FLOW_5 = 0x00FE15
    AUXILIARY_VALVE_ESTIMATED_FLOW_6 = 0x00FE16
    AUXILIARY_VALVE_ESTIMATED_FLOW_7 = 0x00FE17
    AUXILIARY_VALVE_ESTIMATED_FLOW_8 = 0x00FE18
    AUXILIARY_VALVE_ESTIMATED_FLOW_9 = 0x00FE19
    AUXILIARY_VALVE_ESTIMATED_FLOW_10 = 0x00FE1A
    AUXILIARY_VALVE_ESTIMATED_FLOW_11 = 0x00FE1B
    AUXILIARY_VALVE_ESTIMATED_FLOW_12 = 0x00FE1C
    AUXILIARY_VALVE_ESTIMATED_FLOW_13 = 0x00FE1D
    AUXILIARY_VALVE_ESTIMATED_FLOW_14 = 0x00FE1E
    AUXILIARY_VALVE_ESTIMATED_FLOW_15 = 0x00FE1F
    AUXILIARY_VALVE_MEASURED_POSITION_0 = 0x00FF20
    AUXILIARY_VALVE_MEASURED_POSITION_1 = 0x00FF21
    AUXILIARY_VALVE_MEASURED_POSITION_2 = 0x00FF22
    AUXILIARY_VALVE_MEASURED_POSITION_3 = 0x00FF23
    AUXILIARY_VALVE_MEASURED_POSITION_4 = 0x00FF24
    AUXILIARY_VALVE_MEASURED_POSITION_5 = 0x00FF25
    AUXILIARY_VALVE_MEASURED_POSITION_6 = 0x00FF26
    AUXILIARY_VALVE_MEASURED_POSITION_7 = 0x00FF27
    AUXILIARY_VALVE_MEASURED_POSITION_8 = 0x00FF28
    AUXILIARY_VALVE_MEASURED_POSITION_9 = 0x00FF29
    AUXILIARY_VALVE_MEASURED_POSITION_10 = 0x00FF2A
    AUXILIARY_VALVE_MEASURED_POSITION_11 = 0x00FF2B
    AUXILIARY_VALVE_MEASURED_POSITION_12 = 0x00FF2C
    AUXILIARY_VALVE_MEASURED_POSITION_13 = 0x00FF2D
    AUXILIARY_VALVE_MEASURED_POSITION_14 = 0x00FF2E
    AUXILIARY_VALVE_MEASURED_POSITION_15 = 0x00FF2F
    AUXILIARY_VALVE_COMMAND_0 = 0x00FE30
    AUXILIARY_VALVE_COMMAND_1 = 0x00FE31
    AUXILIARY_VALVE_COMMAND_2 = 0x00FE32
    AUXILIARY_VALVE_COMMAND_3 = 0x00FE33
    AUXILIARY_VALVE_COMMAND_4 = 0x00FE34
    AUXILIARY_VALVE_COMMAND_5 = 0x00FE35
    AUXILIARY_VALVE_COMMAND_6 = 0x00FE36
    AUXILIARY_VALVE_COMMAND_7 = 0x00FE37
    AUXILIARY_VALVE_COMMAND_8 = 0x00FE38
    AUXILIARY_VALVE_COMMAND_9 = 0x00FE39
    AUXILIARY_VALVE_COMMAND_10 = 0x00FE3A
    AUXILIARY_VALVE_COMMAND_11 = 0x00FE3B
    AUXILIARY_VALVE_COMMAND_12 = 0x00FE3C
    AUXILIARY_VALVE_COMMAND_13 = 0x00FE3D
    AUXILIARY_VALVE_COMMAND_14 = 0x00FE3E
    AUXILIARY_VALVE_COMMAND_15 = 0x00FE3F
    GENERAL_PURPOSE_VALVE_ESTIMATED_FLOW = 0x00C600
    ENGINE_HOURS_65253 = 0x00FE3F
    ENGINE_TEMPERATURE_1_65262 = 0x00FEEE
    VEHICLE_ELECTRICAL_POWER_1_65271 = 0x00FEF7
    ELECTRONIC_ENGINE_CONTROLLER_1_61444 = 0x00F004
    COLD_START_AIDS_64966 = 0x00FDC6
    FUEL_CONSUMPTION_65257 = 0x00FEE9
    FUEL_ECONOMY_65266 = 0x00FEF2
    ENGINE_FLUIDS_LEVEL_PRESSURE_1_65263 = 0x00FEEF
    ELECTRONIC_ENGINE_CONTROLLER_2_61443 = 0x00F003
    AMBIENT_CONDITIONS_65269 = 0x00FEF5
    ENGINE_FUEL_LUBE_SYSTEMS_65130 = 0x00FE6A
    AUXILIARY_ANALOG_INFORMATION_65164 = 0x00FE8C
    AFTERTREATMENT_1_DEF_TANK_1_65110 = 0x00FE56
    SHUTDOWN_65252 = 0x00FEE4
    ELECTRONIC_ENGINE_CONTROLLER_3_65247 = 0x00FEDF
    ENGINE_FLUIDS_LEVEL_PRESSURE_12_64735 = 0x00FCDF
    INTAKE_MANIFOLD_INFO_1_65190 = 0x00FEA6
    DASH_DISPLAY_65276 = 0x00FEFC
    DIRECT_LAMP_CONTROL_COMMAND_1_64775 = 0x00FD07
    TORQUE_SPEED_CONTROL_1_0 = 0x000000
    ELECTRONIC_BRAKE_CONTROLLER_1_61441 = 0x00F001


class SendStatus(IntEnum):
    """Outcome of handing a frame to the CAN layer."""

    OK = 0x00
    ERROR = 0x01
    BUSY = 0x02
    TIMEOUT = 0x03


class ValveState(IntEnum):
    """State of an ISO 11783-7 valve."""

    NEUTRAL = 0x0
    EXTEND = 0x1
    RETRACT = 0x2
    FLOATING = 0x3
    INITIALISATION = 0xA
    ERROR = 0xE


class ExitCode(IntEnum):
    """Exit codes of valve messages."""

    NOT_USED = 0x1F


class FailSafeMode(IntEnum):
    """Fail safe mode of a valve."""

    BLOCKED = 0x0
    ACTIVATED = 0x1


class LimitCode(IntEnum):
    """Limit codes of valve flow messages."""

    NOT_USED = 0x7