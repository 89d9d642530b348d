#!/usr/bin/env python3

# This library is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 2 of the licence, or (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, see <http://www.gnu.org/licenses/>.

"""Turn a binary file into a C array plus a size constant.

The generated text goes to stdout, so a build step can redirect it
into a source file and compile the blob straight into a program.
"""

import argparse
import os
import sys

BASENAME_PREFIX = '_blob_'
LINE_LEN = 8

DEFAULT_TYPE = 'const char'
DEFAULT_SIZETYPE = 'size_t'
DEFAULT_PREFIX = '#include <stddef.h>\n'


class Blob2CError(Exception):
    """A fatal error; main() reports it and exits with `status`."""

    def __init__(self, message, status=1):
        super().__init__(message)
        self.status = status


def derive_basename(filename, marker=BASENAME_PREFIX) -> str:
    """Build the symbol stem from the path as given on the command line.

    Every '/' and '.' in the whole of marker + filename becomes '_',
    directory components included.
    """
    return (marker + filename).replace('/', '_').replace('.', '_')


def file_size(filename) -> int:
    try:
        return os.stat(filename).st_size
    except OSError:
        raise Blob2CError("error stat'ing, does the file exist?")


def read_blob(filename, size) -> bytes:
    """Read exactly `size` bytes from filename in a single read."""
    try:
        with open(filename, 'rb') as blob:
            data = blob.read(size)
    except MemoryError:
        raise Blob2CError('cannot allocate memory')
    except OSError:
        raise Blob2CError('cannot read file')

    # no retry on a short read
    if len(data) != size:
        raise Blob2CError('cannot read file')
    return data


def format_line(chunk) -> str:
    return '    ' + ''.join('0x%02X, ' % byte for byte in chunk)


def render(data, basename, type=DEFAULT_TYPE, sizetype=DEFAULT_SIZETYPE,
           prefix=DEFAULT_PREFIX) -> str:
    lines = [prefix]
    lines.append(f'{type} {basename}_data[] = {{')
    for pos in range(0, len(data), LINE_LEN):
        lines.append(format_line(data[pos:pos + LINE_LEN]))
    lines.append('};')
    lines.append('')
    lines.append(f'const {sizetype} {basename}_size = {len(data)};')
    return '\n'.join(lines) + '\n'


def convert(filename, type=DEFAULT_TYPE, sizetype=DEFAULT_SIZETYPE,
            prefix=DEFAULT_PREFIX, basename=None) -> str:
    """Return the generated source for filename.

    The file is read completely before anything is rendered, so a
    failure never leaves partial output behind.
    """
    size = file_size(filename)
    data = read_blob(filename, size)

    if basename is None:
        basename = derive_basename(filename)

    return render(data, basename, type, sizetype, prefix)


def build_parser():
    parser = argparse.ArgumentParser(
        description='Convert a binary file into a C array and size constant.')
    parser.add_argument('-t', '--type', default=DEFAULT_TYPE,
                        help='element type of the array (default: %(default)s)')
    parser.add_argument('-s', '--sizetype', default=DEFAULT_SIZETYPE,
                        help='type of the size constant (default: %(default)s)')
    parser.add_argument('-p', '--prefix', default=DEFAULT_PREFIX,
                        help='text emitted before the array declaration')
    parser.add_argument('-b', '--basename',
                        help='symbol stem, instead of one derived from filename')
    parser.add_argument('filename', nargs='?', help='the file to embed')
    return parser


def main(argv=None) -> int:
    # argparse exits with status 2 on unknown flags
    args = build_parser().parse_args(argv)

    try:
        if args.filename is None:
            raise Blob2CError('missing filename argument')
        output = convert(args.filename, args.type, args.sizetype,
                         args.prefix, args.basename)
    except Blob2CError as e:
        print(e, file=sys.stderr)
        return e.status

    sys.stdout.write(output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
