'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

from enum import IntEnum

SECTOR_SIZE = 512

# Size of the koly trailer at the end of every UDIF image
FOOTER_SIZE = 512

FOOTER_MAGIC = b'koly'
BLOCKMAP_MAGIC = b'mish'

# Bytes pulled from the storage backend per read() while decoding a block
READ_CHUNK_SIZE = 64 * 1024
# Size of buffers emitted for zero-fill and free blocks
ZERO_CHUNK_SIZE = 64 * 1024

class BlockType(IntEnum):
    '''Storage kind of a single run in a blkx (mish) table'''
    ZEROFILL = 0x00000000
    RAW = 0x00000001
    FREE = 0x00000002   # unallocated, reads as zeros
    ADC = 0x80000004    # UDCO
    ZLIB = 0x80000005   # UDZO
    BZ2 = 0x80000006    # UDBZ
    LZFSE = 0x80000007  # ULFO
    COMMENT = 0x7FFFFFFE
    TERMINATOR = 0xFFFFFFFF

    @classmethod
    def get(cls, value):
        '''Returns the BlockType for value, or the raw int if it is not a known type'''
        try:
            return cls(value)
        except ValueError:
            return value

# Kinds that are synthesized as zeros, never read
ZERO_BLOCK_TYPES = (BlockType.ZEROFILL, BlockType.FREE)
# Kinds that carry no data at all
NON_DATA_BLOCK_TYPES = (BlockType.COMMENT, BlockType.TERMINATOR)

class ChecksumType(IntEnum):
    NONE = 0
    CRC32 = 2
    MD5 = 4

    @classmethod
    def get(cls, value):
        try:
            return cls(value)
        except ValueError:
            return value
