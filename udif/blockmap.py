'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

import logging
from construct import ConstructError

from udif.constants import BLOCKMAP_MAGIC, BlockType, SECTOR_SIZE
from udif.errors import MalformedBlockMap
from udif.footer import Checksum
from udif.structs import BLKXChunkEntry, BLKXTable

log = logging.getLogger('MAIN.UDIF.BLOCKMAP')

BLOCKMAP_HEADER_SIZE = 204

class Block:
    '''One run of a blkx table, sector_number is relative to the owning BlockMap'''

    __slots__ = ('type', 'comment', 'sector_number', 'sector_count',
                 'compressed_offset', 'compressed_length')

    def __init__(self, block_type, sector_number, sector_count, compressed_offset=0, compressed_length=0, comment=0):
        self.type = block_type
        self.comment = comment
        self.sector_number = sector_number
        self.sector_count = sector_count
        self.compressed_offset = compressed_offset
        self.compressed_length = compressed_length

    @property
    def size(self):
        '''Decoded size in bytes'''
        return self.sector_count * SECTOR_SIZE

    def __repr__(self):
        block_type = self.type.name if isinstance(self.type, BlockType) else '0x{:08X}'.format(self.type)
        return 'Block({}, sector={}, count={}, offset={}, length={})'.format(block_type,
                self.sector_number, self.sector_count, self.compressed_offset, self.compressed_length)

class BlockMap:
    '''A parsed mish table'''

    def __init__(self):
        self.signature = BLOCKMAP_MAGIC
        self.version = 0
        self.sector_number = 0
        self.sector_count = 0
        self.data_offset = 0
        self.buffers_needed = 0
        self.block_descriptors = 0
        self.reserved = []
        self.checksum = None
        self.blocks = []

    @classmethod
    def parse(cls, data):
        '''
            Parse a mish table. Block types are not validated here, an
            unsupported type only fails when that block gets decoded.
            Exceptions:
                MalformedBlockMap if the signature is absent or data is truncated
        '''
        data = bytes(data)
        if len(data) < BLOCKMAP_HEADER_SIZE:
            log.error('mish data is only {} bytes'.format(len(data)))
            raise MalformedBlockMap('Block map is truncated, got {} bytes, header alone is {}'.format(
                                    len(data), BLOCKMAP_HEADER_SIZE))
        if data[0:4] != BLOCKMAP_MAGIC:
            log.error('mish signature not found, got {!r}'.format(data[0:4]))
            raise MalformedBlockMap('mish signature not found!')
        try:
            table = BLKXTable.parse(data)
        except ConstructError as ex:
            log.error('Failed to parse mish table: ' + str(ex))
            raise MalformedBlockMap('Could not parse block map: ' + str(ex)) from ex

        block_map = cls()
        block_map.signature = table.signature
        block_map.version = table.version
        block_map.sector_number = table.sectorNumber
        block_map.sector_count = table.sectorCount
        block_map.data_offset = table.dataOffset
        block_map.buffers_needed = table.buffersNeeded
        block_map.block_descriptors = table.blockDescriptors
        block_map.reserved = list(table.reserved)
        block_map.checksum = Checksum.from_struct(table.checksum)
        block_map.blocks = [Block(BlockType.get(chunk.entryType),
                                  chunk.sectorNumber,
                                  chunk.sectorCount,
                                  chunk.compressedOffset,
                                  chunk.compressedLength,
                                  chunk.comment) for chunk in table.chunks]

        trailing = len(data) - BLOCKMAP_HEADER_SIZE - len(block_map.blocks) * BLKXChunkEntry.sizeof()
        if trailing:
            log.debug('{} unused bytes after mish table'.format(trailing))
        return block_map

    def __repr__(self):
        return 'BlockMap(sector={}, count={}, blocks={})'.format(self.sector_number, self.sector_count, len(self.blocks))
