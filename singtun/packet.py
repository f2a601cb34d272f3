"""Views over IPv4/IPv6 packets and their TCP, UDP and ICMP headers, edited in place."""

from __future__ import annotations

import ipaddress
import struct
from typing import Union

from .checksum import checksum_fold, pseudo_header_checksum_no_fold

Buffer = Union[bytearray, memoryview]

FLAG_MORE_FRAGMENT = 0x1
UDP_HEADER_SIZE = 8
IPV4_PACKET_MIN_LENGTH = 20
ICMP_TYPE_PING_REQUEST = 8
ICMP_TYPE_PING_RESPONSE = 0
ICMPV6_ECHO_REQUEST = 128
ICMPV6_ECHO_REPLY = 129


def _view(data: Buffer) -> memoryview:
    view = data if isinstance(data, memoryview) else memoryview(data)
    if view.readonly:
        raise TypeError("packet buffer must be writable")
    return view


def _get16(data: memoryview, at: int) -> int:
    return struct.unpack_from(">H", data, at)[0]


def _put16(data: memoryview, at: int, value: int) -> None:
    struct.pack_into(">H", data, at, value & 0xFFFF)


class IPv4Packet:
    """An IPv4 packet over a writable buffer."""

    def __init__(self, data: Buffer) -> None:
        self.data = _view(data)

    @property
    def header_len(self) -> int:
        return (self.data[0] & 0x0F) * 4

    @property
    def total_length(self) -> int:
        return _get16(self.data, 2)

    @total_length.setter
    def total_length(self, value: int) -> None:
        _put16(self.data, 2, value)

    @property
    def flags(self) -> int:
        return self.data[6] >> 5

    @property
    def fragment_offset(self) -> int:
        return _get16(self.data, 6) & 0x1FFF

    @property
    def protocol(self) -> int:
        return self.data[9]

    @property
    def source_ip(self) -> ipaddress.IPv4Address:
        return ipaddress.IPv4Address(bytes(self.data[12:16]))

    @source_ip.setter
    def source_ip(self, value) -> None:
        self.data[12:16] = ipaddress.IPv4Address(value).packed

    @property
    def destination_ip(self) -> ipaddress.IPv4Address:
        return ipaddress.IPv4Address(bytes(self.data[16:20]))

    @destination_ip.setter
    def destination_ip(self, value) -> None:
        self.data[16:20] = ipaddress.IPv4Address(value).packed

    @property
    def payload(self) -> memoryview:
        return self.data[self.header_len:self.total_length]

    def reset_checksum(self) -> None:
        """Recompute the header checksum."""
        hl = self.header_len
        _put16(self.data, 10, 0)
        _put16(self.data, 10, ~checksum_fold(self.data[:hl], 0))

    def pseudo_sum(self) -> int:
        """Return the unfolded pseudo-header sum for the transport payload."""
        return pseudo_header_checksum_no_fold(
            self.protocol, self.data[12:16], self.data[16:20], self.total_length - self.header_len
        )


class IPv6Packet:
    """An IPv6 packet without extension headers over a writable buffer."""

    HEADER_LEN = 40

    def __init__(self, data: Buffer) -> None:
        self.data = _view(data)

    @property
    def payload_length(self) -> int:
        return _get16(self.data, 4)

    @payload_length.setter
    def payload_length(self, value: int) -> None:
        _put16(self.data, 4, value)

    @property
    def protocol(self) -> int:
        return self.data[6]

    @property
    def source_ip(self) -> ipaddress.IPv6Address:
        return ipaddress.IPv6Address(bytes(self.data[8:24]))

    @source_ip.setter
    def source_ip(self, value) -> None:
        self.data[8:24] = ipaddress.IPv6Address(value).packed

    @property
    def destination_ip(self) -> ipaddress.IPv6Address:
        return ipaddress.IPv6Address(bytes(self.data[24:40]))

    @destination_ip.setter
    def destination_ip(self, value) -> None:
        self.data[24:40] = ipaddress.IPv6Address(value).packed

    @property
    def payload(self) -> memoryview:
        return self.data[self.HEADER_LEN:self.HEADER_LEN + self.payload_length]

    def reset_checksum(self) -> None:
        """IPv6 has no header checksum; nothing to do."""

    def pseudo_sum(self) -> int:
        """Return the unfolded pseudo-header sum for the transport payload."""
        return pseudo_header_checksum_no_fold(
            self.protocol, self.data[8:24], self.data[24:40], self.payload_length
        )


class _Ports:
    def __init__(self, data: Buffer) -> None:
        self.data = _view(data)

    @property
    def source_port(self) -> int:
        return _get16(self.data, 0)

    @source_port.setter
    def source_port(self, value: int) -> None:
        _put16(self.data, 0, value)

    @property
    def destination_port(self) -> int:
        return _get16(self.data, 2)

    @destination_port.setter
    def destination_port(self, value: int) -> None:
        _put16(self.data, 2, value)


class TCPHeader(_Ports):
    """A TCP segment (header and payload)."""

    CHECKSUM_AT = 16

    @property
    def checksum(self) -> int:
        return _get16(self.data, self.CHECKSUM_AT)

    def reset_checksum(self, pseudo_sum: int) -> None:
        _put16(self.data, self.CHECKSUM_AT, 0)
        _put16(self.data, self.CHECKSUM_AT, ~checksum_fold(self.data, pseudo_sum))

    def offload_checksum(self) -> None:
        """Leave the checksum for the device to fill in."""
        _put16(self.data, self.CHECKSUM_AT, 0)


class UDPHeader(_Ports):
    """A UDP datagram (header and payload)."""

    @property
    def length(self) -> int:
        return _get16(self.data, 4)

    @length.setter
    def length(self, value: int) -> None:
        _put16(self.data, 4, value)

    @property
    def checksum(self) -> int:
        return _get16(self.data, 6)

    @property
    def payload(self) -> memoryview:
        return self.data[UDP_HEADER_SIZE:self.length]

    def valid(self) -> bool:
        return len(self.data) >= UDP_HEADER_SIZE and UDP_HEADER_SIZE <= self.length <= len(self.data)

    def reset_checksum(self, pseudo_sum: int) -> None:
        _put16(self.data, 6, 0)
        value = ~checksum_fold(self.data[:self.length], pseudo_sum) & 0xFFFF
        _put16(self.data, 6, value or 0xFFFF)

    def offload_checksum(self) -> None:
        """Leave the checksum for the device to fill in."""
        _put16(self.data, 6, 0)


class _ICMPBase:
    def __init__(self, data: Buffer) -> None:
        self.data = _view(data)

    @property
    def type(self) -> int:
        return self.data[0]

    @type.setter
    def type(self, value: int) -> None:
        self.data[0] = value

    @property
    def code(self) -> int:
        return self.data[1]

    @property
    def checksum(self) -> int:
        return _get16(self.data, 2)


class ICMPHeader(_ICMPBase):
    """An ICMPv4 message."""

    def reset_checksum(self) -> None:
        _put16(self.data, 2, 0)
        _put16(self.data, 2, ~checksum_fold(self.data, 0))


class ICMPv6Header(_ICMPBase):
    """An ICMPv6 message."""

    def reset_checksum(self, pseudo_sum: int) -> None:
        _put16(self.data, 2, 0)
        _put16(self.data, 2, ~checksum_fold(self.data, pseudo_sum))