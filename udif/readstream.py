'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Dense (linear) read stream of a UDIF image.
#

import logging

from udif.constants import BlockType
from udif.decompressor import block_decompressor

log = logging.getLogger('MAIN.UDIF.READSTREAM')

class BlockCursor:
    '''
        Pulls decoded chunks block by block, in image order. Only the block
        being decoded has a range open, close() releases it and stops any
        further reads.
    '''

    # Comments and block map terminators are never read
    EXCLUDE = (BlockType.COMMENT, BlockType.TERMINATOR)

    def __init__(self, image):
        self.image = image
        self.closed = False
        self.entry = None
        self.block = None
        self.chunk_offset = 0   # offset of the last returned chunk inside self.block
        self._next_offset = 0
        self._blocks = image.blocks(self.EXCLUDE)
        self._chunks = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _next_decoded(self):
        '''Returns the next decoded chunk, or None once all blocks are done'''
        while not self.closed:
            if self._chunks is None:
                try:
                    self.entry, self.block = next(self._blocks)
                except StopIteration:
                    self._release()
                    return None
                self._chunks = block_decompressor(self.block, self.image.source, self.image.footer.data_fork_offset)
                self._next_offset = 0
            try:
                chunk = next(self._chunks)
            except StopIteration:
                self._chunks = None
                continue
            except Exception:
                log.debug('Stream failed while decoding {!r}'.format(self.block))
                self._release()
                raise
            self.chunk_offset = self._next_offset
            self._next_offset += len(chunk)
            return chunk
        return None

    def _close_block(self):
        if self._chunks is not None:
            self._chunks.close()
            self._chunks = None

    def _release(self):
        if not self.closed:
            self._close_block()
            self._blocks.close()
            self.closed = True

    def close(self):
        self._release()

class ReadStream(BlockCursor):
    '''
        Decoded image bytes in order. If end is given, the stream stops after
        the byte at offset end (inclusive), without reading further blocks.
        Iterate it for chunks, or use read() like a file.
    '''

    def __init__(self, image, end=None):
        if end is not None and end < 0:
            raise ValueError('end must be >= 0, got {}'.format(end))
        super().__init__(image)
        self.end = end
        self.remaining = None if end is None else end + 1
        self.bytes_read = 0
        self._buffer = b''

    def __iter__(self):
        return self

    def __next__(self):
        if self._buffer:
            chunk, self._buffer = self._buffer, b''
            return chunk
        chunk = self._next_chunk()
        if chunk is None:
            raise StopIteration
        return chunk

    def _next_chunk(self):
        while True:
            if self.remaining == 0:
                self._release()
                return None
            chunk = self._next_decoded()
            if chunk is None:
                return None
            if self.remaining is not None:
                if len(chunk) > self.remaining:
                    chunk = chunk[:self.remaining]
                self.remaining -= len(chunk)
                if self.remaining == 0:
                    # Budget used up, release the block now
                    self._close_block()
            if chunk:
                self.bytes_read += len(chunk)
                return chunk

    def close(self):
        super().close()
        self._buffer = b''

    def read(self, size=-1):
        '''Returns up to size bytes (all remaining if size < 0), b'' at the end'''
        if size is None or size < 0:
            data = self._buffer + b''.join(iter(self._next_chunk, None))
            self._buffer = b''
            return data
        while len(self._buffer) < size:
            chunk = self._next_chunk()
            if chunk is None:
                break
            self._buffer += chunk
        data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data
