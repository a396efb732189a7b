import logging

import constants

"""Decode bencoded byte strings into Python values.

Values come back as native types: int, bytes, list and dict (with bytes
keys, in the order they appeared on the wire).
"""

logger = logging.getLogger(__name__)

_DIGITS = b'0123456789'


class FormatError(ValueError):
    """Input is not well formed bencode."""
    def __init__(self, offset, reason):
        super().__init__('{} at offset {}'.format(reason, offset))
        self.offset = offset
        self.reason = reason


def bdecode(data, strict=constants.STRICT_DECODING):
    """Decode the first bencoded value in data.

    Args:
        data: bytes-like object holding the encoded document.
        strict: reject dictionaries whose keys are not in sorted order.
    Returns:
        A (value, remaining) tuple, remaining being the unread trailing bytes.
    Raises:
        FormatError if data does not start with a well formed value.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError('bdecode expects a bytes-like object, got {}'.format(type(data).__name__))
    decoder = _Decoder(bytes(data), strict)
    value = decoder.decode_value()
    remaining = decoder.data[decoder.offset:]
    logger.debug('Decoded %d bytes, %d remaining', decoder.offset, len(remaining))
    return value, remaining


def bdecode_all(data, strict=constants.STRICT_DECODING):
    """Decode data as exactly one value, with nothing left over."""
    value, remaining = bdecode(data, strict)
    if remaining:
        raise FormatError(len(data) - len(remaining), 'Trailing data after value')
    return value


class _Decoder:
    """Recursive descent over a single buffer. Holds the read offset."""
    def __init__(self, data, strict):
        self.data = data
        self.strict = strict
        self.offset = 0
        self._depth = 0

    def decode_value(self):
        lead = self._peek('value')
        if lead == b'i':
            return self._decode_int()
        if lead in _DIGITS:
            return self._decode_bytes()
        if lead == b'l':
            return self._nested(self._decode_list)
        if lead == b'd':
            return self._nested(self._decode_dict)
        raise FormatError(self.offset, 'Unexpected byte {!r}'.format(lead))

    def _peek(self, expected):
        if self.offset >= len(self.data):
            raise FormatError(self.offset, 'Unexpected end of input, expected {}'.format(expected))
        return self.data[self.offset:self.offset + 1]

    def _nested(self, decode_container):
        if self._depth >= constants.MAX_NESTING_DEPTH:
            raise FormatError(self.offset, 'Nesting deeper than {}'.format(constants.MAX_NESTING_DEPTH))
        self._depth += 1
        try:
            return decode_container()
        finally:
            self._depth -= 1

    def _scan_to(self, terminator, what):
        """Return the text between the offset and terminator, moving past it."""
        end = self.data.find(terminator, self.offset)
        if end == -1:
            raise FormatError(len(self.data), 'Unexpected end of input, expected {!r} ending {}'.format(
                terminator.decode(), what))
        text = self.data[self.offset:end]
        start = self.offset
        self.offset = end + 1
        return start, text

    def _decode_int(self):
        self.offset += 1  # Skip 'i'
        start, text = self._scan_to(b'e', 'integer')

        digits = text[1:] if text.startswith(b'-') else text
        if not digits or digits.strip(_DIGITS):
            raise FormatError(start, 'Malformed integer {!r}'.format(text))
        if digits.startswith(b'0') and text != b'0':
            raise FormatError(start, 'Leading zero in integer {!r}'.format(text))
        # Longer runs cannot fit in 64 bits.
        if len(digits) > len(str(constants.INT_MAX)):
            raise FormatError(start, 'Integer of {} digits out of 64-bit range'.format(len(digits)))

        value = int(text)
        if not constants.INT_MIN <= value <= constants.INT_MAX:
            raise FormatError(start, 'Integer {} out of 64-bit range'.format(value))
        return value

    def _decode_bytes(self):
        start, text = self._scan_to(b':', 'byte string length')
        if not text or text.strip(_DIGITS):
            raise FormatError(start, 'Malformed byte string length {!r}'.format(text))
        if text.startswith(b'0') and text != b'0':
            raise FormatError(start, 'Leading zero in byte string length {!r}'.format(text))
        if len(text) > len(str(len(self.data))):
            raise FormatError(self.offset, 'Byte string length of {} digits exceeds the input'.format(len(text)))

        length = int(text)
        end = self.offset + length
        if end > len(self.data):
            raise FormatError(self.offset, 'Byte string needs {} bytes, {} remain'.format(
                length, len(self.data) - self.offset))
        value = self.data[self.offset:end]
        self.offset = end
        return value

    def _decode_list(self):
        self.offset += 1  # Skip 'l'
        items = []
        while self._peek('list item or end') != b'e':
            items.append(self.decode_value())
        self.offset += 1
        return items

    def _decode_dict(self):
        self.offset += 1  # Skip 'd'
        result = {}
        previous_key = None
        while True:
            lead = self._peek('dictionary key or end')
            if lead == b'e':
                break
            if lead not in _DIGITS:
                raise FormatError(self.offset, 'Dictionary key must be a byte string, got {!r}'.format(lead))

            key_offset = self.offset
            key = self._decode_bytes()
            if self.strict and previous_key is not None and key <= previous_key:
                raise FormatError(key_offset, 'Dictionary key {!r} not sorted after {!r}'.format(
                    key, previous_key))
            previous_key = key
            result[key] = self.decode_value()
        self.offset += 1
        return result
