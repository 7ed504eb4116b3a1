'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Sparse read stream, yields only allocated data along with the absolute
#  offset it belongs at. FREE blocks are skipped, so positions have gaps
#  where the image is unallocated.
#

from collections import namedtuple

from udif.constants import BlockType, SECTOR_SIZE
from udif.readstream import BlockCursor

SparseChunk = namedtuple('SparseChunk', ['buffer', 'position'])

class SparseReadStream(BlockCursor):

    # Ignore free as well, since this is a sparse stream
    EXCLUDE = (BlockType.COMMENT, BlockType.TERMINATOR, BlockType.FREE)

    def __iter__(self):
        return self

    def __next__(self):
        buffer = self._next_decoded()
        if buffer is None:
            raise StopIteration
        sector = self.entry.block_map.sector_number + self.block.sector_number
        return SparseChunk(buffer, sector * SECTOR_SIZE + self.chunk_offset)
