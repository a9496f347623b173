"""SAE J1939 and ISO 11783-7 protocol stack for CAN bus ECUs, with loopback and callback buses."""

__version__ = "1.0.0"