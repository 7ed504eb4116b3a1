'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Block iteration and per block decoding. Every generator here is lazy:
#  no range is opened and no codec runs until the consumer asks for data,
#  and closing a generator closes the range it has open.
#

import bz2
import logging
import zlib

from udif.adc import adc_decompress
from udif.constants import BlockType, NON_DATA_BLOCK_TYPES, READ_CHUNK_SIZE, ZERO_BLOCK_TYPES, ZERO_CHUNK_SIZE
from udif.errors import DecodeFailure, UnknownBlockType, UnsupportedCodec

log = logging.getLogger('MAIN.UDIF.DECOMPRESSOR')

ZERO_CHUNK = bytes(ZERO_CHUNK_SIZE)

def block_generator(entries, exclude=()):
    '''Yields (entry, block) for all blocks of all entries in order, skipping excluded types'''
    exclude = frozenset(exclude)
    for entry in entries:
        for block in entry.block_map.blocks:
            if block.type in exclude:
                continue
            yield entry, block

def zero_stream(size):
    '''Yields size zero bytes in chunks of at most ZERO_CHUNK_SIZE'''
    while size > 0:
        if size >= ZERO_CHUNK_SIZE:
            yield ZERO_CHUNK
            size -= ZERO_CHUNK_SIZE
        else:
            yield ZERO_CHUNK[:size]
            size = 0

def _read_chunks(reader):
    while True:
        data = reader.read(READ_CHUNK_SIZE)
        if not data:
            break
        yield data

def _check_size(total, expected_size, codec_name):
    if total > expected_size:
        raise DecodeFailure('{} output exceeds block size of {} bytes'.format(codec_name, expected_size))
    return total

def _raw_chunks(reader, expected_size):
    total = 0
    for data in _read_chunks(reader):
        total = _check_size(total + len(data), expected_size, 'RAW')
        yield data
    if total != expected_size:
        raise DecodeFailure('RAW block has {} bytes, expected {}'.format(total, expected_size))

def _adc_chunks(reader, expected_size):
    compressed = b''.join(_read_chunks(reader))
    data = adc_decompress(compressed, expected_size)
    if len(data) != expected_size:
        raise DecodeFailure('ADC output is {} bytes, expected {}'.format(len(data), expected_size))
    for pos in range(0, expected_size, READ_CHUNK_SIZE):
        yield data[pos : pos + READ_CHUNK_SIZE]

def _stream_chunks(reader, expected_size, decompressor, codec_name, codec_errors):
    '''Feeds reader into a zlib/bz2 style decompressor object'''
    total = 0
    while not decompressor.eof:
        data = reader.read(READ_CHUNK_SIZE)
        if not data:
            break
        # One byte past the block size is enough to detect an overrun, so a
        # full limit always ends in DecodeFailure and no input is left behind
        limit = expected_size - total + 1
        try:
            out = decompressor.decompress(data, limit)
        except codec_errors as ex:
            raise DecodeFailure('{} stream is corrupt: {}'.format(codec_name, str(ex))) from ex
        if out:
            total = _check_size(total + len(out), expected_size, codec_name)
            yield out
    if not decompressor.eof:
        raise DecodeFailure('{} stream is truncated, got {} of {} bytes'.format(codec_name, total, expected_size))
    if total != expected_size:
        raise DecodeFailure('{} output is {} bytes, expected {}'.format(codec_name, total, expected_size))

def _zlib_chunks(reader, expected_size):
    return _stream_chunks(reader, expected_size, zlib.decompressobj(), 'ZLIB', zlib.error)

def _bz2_chunks(reader, expected_size):
    return _stream_chunks(reader, expected_size, bz2.BZ2Decompressor(), 'BZ2', (OSError, EOFError, ValueError))

# Block types read from the data fork and the codec that decodes each.
# ZEROFILL/FREE are synthesized, LZFSE is known but not supported.
CODECS = {
    BlockType.RAW: _raw_chunks,
    BlockType.ADC: _adc_chunks,
    BlockType.ZLIB: _zlib_chunks,
    BlockType.BZ2: _bz2_chunks,
}

def block_decompressor(block, source, data_fork_offset):
    '''
        Yields the decoded bytes of block, block.size bytes in total.
        For data fork backed blocks, one range of source is opened when
        the first chunk is requested and closed when this generator
        finishes or is closed.
        Exceptions:
            UnsupportedCodec for LZFSE, UnknownBlockType for undefined types,
            DecodeFailure on corrupt data, IOFailure from source
    '''
    block_type = block.type
    expected_size = block.size
    if block_type in ZERO_BLOCK_TYPES:
        yield from zero_stream(expected_size)
        return
    if block_type in NON_DATA_BLOCK_TYPES:
        raise ValueError('{} blocks carry no data and cannot be decoded'.format(block_type.name))
    if block_type == BlockType.LZFSE:
        raise UnsupportedCodec('LZFSE compressed blocks are not supported')
    codec = CODECS.get(block_type)
    if codec is None:
        raise UnknownBlockType('Unknown block type 0x{:08X}'.format(block_type))

    if expected_size == 0 and block.compressed_length == 0:
        return
    offset = data_fork_offset + block.compressed_offset
    log.debug('Decoding {} block, {} bytes at offset {} -> {} bytes'.format(
                block_type.name, block.compressed_length, offset, expected_size))
    reader = source.create_read_stream(offset, offset + block.compressed_length - 1)
    try:
        yield from codec(reader, expected_size)
    finally:
        reader.close()
