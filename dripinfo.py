import argparse
import logging
import sys

from bdecode import FormatError
from torrent import Torrent, TorrentError

"""Print a summary of a .torrent metainfo file."""


def format_summary(summary):
    """Render a MetainfoSummary as the lines printed by the tool."""
    lines = [
        summary.display_name,
        'Tracker: {}'.format(summary.tracker_url),
        'Piece length: {}'.format(summary.piece_length),
        'Number of pieces: {}'.format(summary.piece_count),
        'File bytes: {}'.format(summary.total_size),
    ]
    if summary.multi_file:
        lines.append('Files:')
        for entry in summary.files:
            lines.append('  {}'.format(entry.joined_path))
            lines.append('    File bytes: {}'.format(entry.length))
    return lines


def parse_args(argv):
    parser = argparse.ArgumentParser(prog='dripinfo', description='Print a summary of a .torrent metainfo file.')
    parser.add_argument('torrent_file', help='path to a .torrent file')
    parser.add_argument('--strict', action='store_true',
                        help='reject unsorted dictionary keys and trailing data')
    parser.add_argument('--info-hash', action='store_true', help='also print the info hash')
    parser.add_argument('-v', '--verbose', action='store_true', help='log debug output')
    return parser.parse_args(argv)


# Write to stderr and hand back the exit status.
def error_quit(error):
    sys.stderr.write('Error: {}\n'.format(error))
    return 1


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        torrent = Torrent(args.torrent_file, strict=args.strict)
    except FormatError as e:
        return error_quit('Could not decode torrent file - {}'.format(e))
    except TorrentError as e:
        return error_quit(e)
    except OSError as e:
        return error_quit('Could not open torrent file - {}'.format(e))

    for line in format_summary(torrent.summary):
        print(line)
    if args.info_hash:
        print('Info hash: {}'.format(torrent.info_hash_hex))
    return 0


if __name__ == '__main__':
    sys.exit(main())
