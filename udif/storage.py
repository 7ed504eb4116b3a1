'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Byte range storage for UDIF images. Anything with a 'size' attribute and
#  a create_read_stream(start, end) method returning a reader with
#  read(size) and close() can be used instead of FileSource.
#

import io
import logging
import os
from contextlib import closing

from udif.errors import IOFailure

log = logging.getLogger('MAIN.UDIF.STORAGE')

class RangeReader:
    '''Reads the inclusive byte range [start, end] of a file object'''

    def __init__(self, file_obj, start, end):
        self.file = file_obj
        self.start = start
        self.end = end
        self.position = start

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @property
    def remaining(self):
        return self.end + 1 - self.position

    def read(self, size=-1):
        '''
            Returns up to size bytes (everything left if size < 0), b'' only
            once the whole range has been read.
            Exceptions:
                IOFailure if the file ends before the range does
        '''
        if self.file is None:
            raise IOFailure('Read on a closed range reader')
        if size is None or size < 0 or size > self.remaining:
            size = self.remaining
        if size <= 0:
            return b''
        try:
            self.file.seek(self.position)
            data = self.file.read(size)
        except (OSError, ValueError) as ex:
            raise IOFailure('Failed to read {} bytes at offset {}: {}'.format(size, self.position, str(ex))) from ex
        if len(data) < size:
            raise IOFailure('File is truncated, could not read {} bytes from offset {}'.format(size, self.position))
        self.position += size
        return data

    def close(self):
        if self.file is not None:
            self.file.close()
            self.file = None

class FileSource:
    '''Storage backend over a local file, every range gets its own handle'''

    def __init__(self, path):
        self.path = path
        self._data = None
        try:
            self.size = os.path.getsize(path)
        except OSError as ex:
            raise IOFailure('Could not open {}: {}'.format(path, str(ex))) from ex

    @classmethod
    def from_bytes(cls, data):
        '''In-memory image, ranges share the immutable buffer'''
        source = cls.__new__(cls)
        source.path = None
        source._data = bytes(data)
        source.size = len(source._data)
        return source

    def create_read_stream(self, start=0, end=None):
        '''Returns a RangeReader over bytes start..end, both inclusive'''
        if end is None:
            end = self.size - 1
        if start < 0 or end < start - 1:
            raise ValueError('Invalid range {}-{}'.format(start, end))
        if end >= self.size:
            raise IOFailure('Range {}-{} is beyond end of source (size={})'.format(start, end, self.size))
        log.debug('Reading range {}-{}'.format(start, end))
        if self._data is not None:
            return RangeReader(io.BytesIO(self._data), start, end)
        try:
            f = open(self.path, 'rb')
        except OSError as ex:
            raise IOFailure('Could not open {}: {}'.format(self.path, str(ex))) from ex
        return RangeReader(f, start, end)

    def __repr__(self):
        return 'FileSource({!r}, size={})'.format(self.path, self.size)

def ReadRange(source, start, length):
    '''Returns exactly length bytes of source starting at start'''
    if length == 0:
        return b''
    data = b''
    with closing(source.create_read_stream(start, start + length - 1)) as reader:
        while len(data) < length:
            chunk = reader.read(length - len(data))
            if not chunk:
                raise IOFailure('Short read, got {} of {} bytes at offset {}'.format(len(data), length, start))
            data += chunk
    return data
