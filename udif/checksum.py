'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Data fork checksum verification. The checksum covers the raw (still
#  compressed) data fork bytes, not the decoded image.
#

import logging
import zlib

from udif.constants import ChecksumType, READ_CHUNK_SIZE
from udif.errors import IOFailure, PrereqMissing, UnsupportedChecksum

log = logging.getLogger('MAIN.UDIF.CHECKSUM')

class Crc32:
    '''Streaming CRC32 with a hashlib style interface'''

    name = 'crc32'

    def __init__(self, data=b''):
        self.value = 0
        if data:
            self.update(data)

    def update(self, data):
        self.value = zlib.crc32(data, self.value)

    def digest(self):
        return self.value.to_bytes(4, 'big')

    def hexdigest(self):
        return '{:08x}'.format(self.value)

HASHERS = {
    ChecksumType.CRC32: Crc32,
}

def verify_data(source, footer):
    '''
        Hash the data fork and compare it with the footer's data checksum.
        Returns True/False, or None if the image declares no checksum.
        Exceptions:
            PrereqMissing if footer is None
            UnsupportedChecksum for checksum types other than CRC32
            IOFailure if the data fork cannot be read completely
    '''
    if footer is None:
        raise PrereqMissing('Footer must be read before verifying data')
    checksum = footer.data_checksum
    if checksum is None or checksum.type == ChecksumType.NONE:
        return None
    hasher_class = HASHERS.get(checksum.type)
    if hasher_class is None:
        raise UnsupportedChecksum('Unknown or unsupported checksum type "{}"'.format(checksum.type))

    hasher = hasher_class()
    start = footer.data_fork_offset
    length = footer.data_fork_length
    total = 0
    if length:
        reader = source.create_read_stream(start, start + length - 1)
        try:
            for data in iter(lambda: reader.read(READ_CHUNK_SIZE), b''):
                hasher.update(data)
                total += len(data)
        finally:
            reader.close()
    if total != length:
        raise IOFailure('Data fork read stopped at {} of {} bytes'.format(total, length))

    digest = hasher.hexdigest()
    if digest != checksum.value:
        log.warning('Data fork {} mismatch, computed={} stored={}'.format(hasher.name, digest, checksum.value))
        return False
    log.debug('Data fork {} verified ({})'.format(hasher.name, digest))
    return True
