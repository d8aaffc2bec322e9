"""
PackBits row codec.

The header byte of each packet selects its kind:

- 0 to 127: copy the next ``header + 1`` literal bytes
- 129 to 255: repeat the next byte ``257 - header`` times
- 128: no-op

Encoding follows the packet decisions Photoshop itself makes, which differ
from the Apple and TIFF descriptions for short runs. A pair of equal bytes
following a literal packet closes that packet and opens a repeat packet of
length 2, and the kind of a new packet is fixed by its second byte::

    Input:  [7, 7, 7, 7, 7]
    Output: [0xFC, 7]

    Input:  [10, 20, 30]
    Output: [0x02, 10, 20, 30]

    Input:  [1, 2, 2, 3]
    Output: [0x00, 1, 0xFF, 2, 0x00, 3]
"""

from psd_codec.errors import FormatError

MAX_PACKET_LENGTH = 128


def decode(data: bytes, size: int) -> bytes:
    """decode(data, size) -> bytes

    Decodes one PackBits row of exactly ``size`` bytes.
    """

    i, j = 0, 0
    length = len(data)
    result = bytearray()

    while i < length:
        i, bit = i + 1, data[i]
        if bit > 128:
            count = 257 - bit
            if i >= length or j + count > size:
                raise FormatError("Invalid RLE compression")
            result.extend(data[i : i + 1] * count)
            j += count
            i += 1
        elif bit < 128:
            count = bit + 1
            if i + count > length or j + count > size:
                raise FormatError("Invalid RLE compression")
            result.extend(data[i : i + count])
            j += count
            i += count

    if len(result) != size:
        raise FormatError("Expected %d bytes but decoded %d bytes" % (size, j))

    return bytes(result)


def encode(data: bytes) -> bytes:
    """encode(data) -> bytes

    Encodes one row. An empty row encodes to no bytes at all.
    """

    length = len(data)
    result = bytearray()
    if length == 0:
        return bytes(result)

    def flush(start: int, count: int, is_rle: bool, value: int) -> None:
        if is_rle:
            result.append((1 - count) & 0xFF)
            result.append(value)
        else:
            result.append(count - 1)
            result.extend(data[start : start + count])

    start = 0
    packet_length = 1
    rle_packet = False
    last = data[0]

    for i in range(1, length):
        color = data[i]
        if packet_length == 1:
            # The second byte decides the kind of packet.
            rle_packet = color == last
            last = color
            packet_length = 2
        elif packet_length == MAX_PACKET_LENGTH:
            flush(start, packet_length, rle_packet, last)
            start, packet_length, rle_packet, last = i, 1, False, color
        elif rle_packet:
            if color == last:
                packet_length += 1
            else:
                flush(start, packet_length, rle_packet, last)
                start, packet_length, rle_packet, last = i, 1, False, color
        elif color == last:
            # Retract the previous byte and open a repeat packet with it.
            flush(start, packet_length - 1, False, last)
            start, packet_length, rle_packet = i - 1, 2, True
        else:
            last = color
            packet_length += 1

    flush(start, packet_length, rle_packet, last)
    return bytes(result)
