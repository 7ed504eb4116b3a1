'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

import logging
from construct import ConstructError

from udif.constants import ChecksumType, FOOTER_MAGIC, FOOTER_SIZE
from udif.errors import MalformedFooter
from udif.structs import UDIFResourceFile

log = logging.getLogger('MAIN.UDIF.FOOTER')

class Checksum:
    '''UDIF checksum record, value is lowercase hex of the first size/8 bytes'''

    def __init__(self, checksum_type, size, value):
        self.type = checksum_type
        self.size = size
        self.value = value

    @classmethod
    def from_struct(cls, cs):
        num_bytes = min(cs.size // 8, len(cs.data))
        return cls(ChecksumType.get(cs.type), cs.size, cs.data[:num_bytes].hex())

    def __repr__(self):
        return 'Checksum(type={!r}, size={}, value={})'.format(self.type, self.size, self.value)

class Footer:
    '''The koly trailer found in the last 512 bytes of a UDIF image'''

    SIZE = FOOTER_SIZE

    def __init__(self):
        self.signature = FOOTER_MAGIC
        self.version = 0
        self.header_size = 0
        self.flags = 0
        self.running_data_fork_offset = 0
        self.data_fork_offset = 0
        self.data_fork_length = 0
        self.resource_fork_offset = 0
        self.resource_fork_length = 0
        self.segment_number = 0
        self.segment_count = 0
        self.segment_id = b''
        self.data_checksum = None
        self.xml_offset = 0
        self.xml_length = 0
        self.master_checksum = None
        self.image_variant = 0
        self.sector_count = 0

    @classmethod
    def parse(cls, buffer, file_size=None):
        '''
            Parse a koly trailer from buffer (at least 512 bytes, only the
            first 512 are used). If file_size is given, the offsets are
            checked against it.
            Exceptions:
                MalformedFooter if the signature is absent, the buffer is too
                short or a declared range lies outside the file
        '''
        if len(buffer) < cls.SIZE:
            log.error('Footer buffer is only {} bytes, need {}'.format(len(buffer), cls.SIZE))
            raise MalformedFooter('Footer is truncated, got {} bytes, expected {}'.format(len(buffer), cls.SIZE))
        if buffer[0:4] != FOOTER_MAGIC:
            log.error('koly signature not found, got {!r}'.format(bytes(buffer[0:4])))
            raise MalformedFooter('Not a UDIF image, koly signature not found!')
        try:
            koly = UDIFResourceFile.parse(bytes(buffer[0:cls.SIZE]))
        except ConstructError as ex:
            log.error('Failed to parse koly trailer: {}'.format(str(ex)))
            raise MalformedFooter('Could not parse footer: ' + str(ex)) from ex

        footer = cls()
        footer.signature = koly.signature
        footer.version = koly.version
        footer.header_size = koly.headerSize
        footer.flags = koly.flags
        footer.running_data_fork_offset = koly.runningDataForkOffset
        footer.data_fork_offset = koly.dataForkOffset
        footer.data_fork_length = koly.dataForkLength
        footer.resource_fork_offset = koly.rsrcForkOffset
        footer.resource_fork_length = koly.rsrcForkLength
        footer.segment_number = koly.segmentNumber
        footer.segment_count = koly.segmentCount
        footer.segment_id = koly.segmentID
        footer.data_checksum = Checksum.from_struct(koly.dataChecksum)
        footer.xml_offset = koly.xmlOffset
        footer.xml_length = koly.xmlLength
        footer.master_checksum = Checksum.from_struct(koly.masterChecksum)
        footer.image_variant = koly.imageVariant
        footer.sector_count = koly.sectorCount

        if file_size is not None:
            footer._check_bounds(file_size)
        return footer

    def _check_bounds(self, file_size):
        ranges = (('XML plist', self.xml_offset, self.xml_length),
                  ('data fork', self.data_fork_offset, self.data_fork_length))
        for name, offset, length in ranges:
            if offset + length > file_size:
                log.error('{} range {}+{} exceeds file size {}'.format(name, offset, length, file_size))
                raise MalformedFooter('{} (offset={}, length={}) lies outside the file of size {}'.format(
                                        name, offset, length, file_size))

    def __repr__(self):
        return ('Footer(version={}, data_fork={}+{}, xml={}+{}, data_checksum={!r})'.format(
                self.version, self.data_fork_offset, self.data_fork_length,
                self.xml_offset, self.xml_length, self.data_checksum))
