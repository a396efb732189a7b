import logging
from dataclasses import dataclass
from hashlib import sha1

import bencodepy

import constants
from bdecode import bdecode, bdecode_all

"""Interpret a decoded metainfo dictionary as described by BEP003."""

logger = logging.getLogger(__name__)


class TorrentError(Exception):
    pass


class SchemaError(TorrentError):
    """The metainfo is valid bencode but not a valid metainfo dictionary."""
    def __init__(self, key_path, reason):
        super().__init__('{}: {}'.format(key_path, reason) if key_path else reason)
        self.key_path = key_path
        self.reason = reason


@dataclass(frozen=True)
class FileEntry:
    """One file of a multi-file torrent."""
    path: tuple
    length: int

    @property
    def joined_path(self):
        return '/'.join(self.path)


@dataclass(frozen=True)
class MetainfoSummary:
    display_name: str
    tracker_url: str
    piece_length: int
    piece_count: int
    total_size: int
    files: tuple = ()
    multi_file: bool = False


def extract(metainfo):
    """Validate a decoded metainfo value and summarize it.

    Args:
        metainfo: the value tree returned by bdecode.
    Returns:
        A MetainfoSummary.
    Raises:
        SchemaError naming the first key path that fails validation.
    """
    if not isinstance(metainfo, dict):
        raise SchemaError('', 'root is not a dictionary')

    tracker_url = _get_text(metainfo, b'announce', 'announce')
    info = _get(metainfo, b'info', 'info', dict, 'a dictionary')

    piece_length = _get(info, b'piece length', 'info.piece length', int, 'an integer')
    if piece_length <= 0:
        raise SchemaError('info.piece length', 'must be positive, got {}'.format(piece_length))

    pieces = _get(info, b'pieces', 'info.pieces', bytes, 'a byte string')
    if len(pieces) % constants.PIECE_HASH_LEN:
        raise SchemaError('info.pieces', 'corrupt piece hash blob')
    piece_count = len(pieces) // constants.PIECE_HASH_LEN

    display_name = _get_text(info, b'name', 'info.name')

    if b'files' in info:
        files = _extract_files(info[b'files'])
        total_size = sum(entry.length for entry in files)
        if total_size > constants.INT_MAX:
            raise SchemaError('info.files', 'size overflow')
        logger.debug('Multi-file torrent with %d files', len(files))
    else:
        files = ()
        total_size = _get_length(info, 'info')

    return MetainfoSummary(display_name, tracker_url, piece_length, piece_count, total_size, files,
                           multi_file=b'files' in info)


def info_hash(info):
    """SHA-1 digest of the re-encoded info dictionary.

    Keys are encoded in the order the decoder kept them, so a document without
    duplicate keys hashes to the digest of its original info bytes. A lenient
    decode keeps only the last value of a duplicated key, which changes the
    digest.
    """
    return sha1(bencodepy.encode(info)).digest()


def _extract_files(files):
    if not isinstance(files, list):
        raise SchemaError('info.files', 'expected a list')

    entries = []
    for index, entry in enumerate(files):
        entry_path = 'info.files[{}]'.format(index)
        if not isinstance(entry, dict):
            raise SchemaError(entry_path, 'expected a dictionary')

        length = _get_length(entry, entry_path)
        segments = _get(entry, b'path', entry_path + '.path', list, 'a list')
        if not segments:
            raise SchemaError(entry_path + '.path', 'must not be empty')
        path = tuple(_as_text(segment, '{}.path[{}]'.format(entry_path, i))
                     for i, segment in enumerate(segments))
        entries.append(FileEntry(path, length))
    return tuple(entries)


def _get(container, key, key_path, expected_type, type_name):
    try:
        value = container[key]
    except KeyError:
        raise SchemaError(key_path, 'missing required key') from None
    if not isinstance(value, expected_type):
        raise SchemaError(key_path, 'expected {}'.format(type_name))
    return value


def _get_length(container, parent_path):
    key_path = parent_path + '.length'
    length = _get(container, b'length', key_path, int, 'an integer')
    if length < 0:
        raise SchemaError(key_path, 'must not be negative, got {}'.format(length))
    return length


def _get_text(container, key, key_path):
    return _as_text(_get(container, key, key_path, bytes, 'a byte string'), key_path)


def _as_text(value, key_path):
    if not isinstance(value, bytes):
        raise SchemaError(key_path, 'expected a byte string')
    try:
        return value.decode('utf-8')
    except UnicodeDecodeError:
        raise SchemaError(key_path, 'not valid UTF-8 text') from None


class Torrent:
    """Hold information coming from a torrent file."""
    def __init__(self, tor_file_path, strict=constants.STRICT_DECODING):
        self.path = tor_file_path
        try:
            with open(tor_file_path, 'rb') as tor_file:
                metainfo = tor_file.read()
        except FileNotFoundError:
            raise TorrentError('No Torrent File With That Name | {}'.format(tor_file_path))
        self._handle_metainfo(metainfo, strict)

    @classmethod
    def from_bytes(cls, metainfo, strict=constants.STRICT_DECODING):
        torrent = cls.__new__(cls)
        torrent.path = None
        torrent._handle_metainfo(metainfo, strict)
        return torrent

    def _handle_metainfo(self, metainfo, strict):
        if strict:
            metadict = bdecode_all(metainfo, strict=True)
        else:
            metadict, _ = bdecode(metainfo)
        self.summary = extract(metadict)
        # extract() has already checked that info is a dictionary.
        self.info_hash = info_hash(metadict[b'info'])
        logger.debug('Loaded torrent %r with info hash %s', self.summary.display_name, self.info_hash_hex)

    @property
    def info_hash_hex(self):
        return self.info_hash.hex()
