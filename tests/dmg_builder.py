'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Builds small UDIF images in memory for the tests. Structures are packed
#  by hand with struct so they do not depend on udif.structs.
#

import bz2
import plistlib
import random
import struct
import zlib

SECTOR = 512

ZEROFILL = 0x00000000
RAW = 0x00000001
FREE = 0x00000002
ADC = 0x80000004
ZLIB = 0x80000005
BZ2 = 0x80000006
LZFSE = 0x80000007
COMMENT = 0x7FFFFFFE
TERMINATOR = 0xFFFFFFFF

def random_bytes(size, seed=0):
    '''Half random, half repetitive so that codecs have something to do'''
    rng = random.Random(seed)
    half = size // 2
    return rng.randbytes(half) + (b'mac_apt udif ' * (size // 13 + 1))[:size - half]

def checksum_record(checksum_type=0, size=0, value=b''):
    return struct.pack('>II', checksum_type, size) + value.ljust(128, b'\0')

def pack_mish(sector_number, blocks, sector_count=None):
    '''blocks is a list of (type, sector_number, sector_count, compressed_offset, compressed_length)'''
    if sector_count is None:
        sector_count = sum(b[2] for b in blocks)
    data = struct.pack('>4sIQQQII', b'mish', 1, sector_number, sector_count, 0, 2, len(blocks))
    data += b'\0' * 24
    data += checksum_record(2, 32, b'\x12\x34\x56\x78')
    data += struct.pack('>I', len(blocks))
    assert len(data) == 204
    for block_type, block_sector, block_count, offset, length in blocks:
        data += struct.pack('>IIQQQQ', block_type, 0, block_sector, block_count, offset, length)
    return data

def pack_koly(data_fork_offset, data_fork_length, xml_offset, xml_length,
              checksum_type=0, checksum_value=b'', sector_count=0, magic=b'koly'):
    koly = struct.pack('>4sIII', magic, 4, 512, 1)
    koly += struct.pack('>QQQQQII', 0, data_fork_offset, data_fork_length, 0, 0, 1, 1)
    koly += bytes(range(16))
    koly += checksum_record(checksum_type, 32 if checksum_type else 0, checksum_value)
    koly += struct.pack('>QQ', xml_offset, xml_length)
    koly += b'\0' * 120
    koly += checksum_record()
    koly += struct.pack('>IQ', 1, sector_count)
    koly += b'\0' * 12
    assert len(koly) == 512
    return koly

def adc_encode(data):
    '''ADC using literal runs only, valid input for any ADC decoder'''
    out = bytearray()
    for pos in range(0, len(data), 128):
        run = data[pos : pos + 128]
        out.append(0x80 | (len(run) - 1))
        out += run
    return bytes(out)

def encode(kind, data):
    if kind == RAW:
        return data
    if kind == ZLIB:
        return zlib.compress(data)
    if kind == BZ2:
        return bz2.compress(data)
    if kind == ADC:
        return adc_encode(data)
    raise ValueError(kind)

class BuiltImage:
    '''The image bytes plus what reading them should produce'''

    def __init__(self, data, expected, mapped_size, data_fork):
        self.data = data
        self.expected = expected
        self.uncompressed_size = len(expected)
        self.mapped_size = mapped_size
        self.data_fork = data_fork

def build_image(partitions, checksum=True, start_sectors=None, auxiliary=True, data_fork_offset=0):
    '''
        partitions is a list of block lists, each block is (kind, payload)
        where payload is the decoded bytes for RAW/ZLIB/BZ2/ADC, a sector
        count for ZEROFILL/FREE/COMMENT, or (sector_count, raw_bytes) for
        LZFSE and unknown kinds. Partitions are laid out one after another
        unless start_sectors is given.
    '''
    data_fork = bytearray()
    expected = bytearray()
    mapped_size = 0
    blkx = []
    next_sector = 0
    for index, blocks in enumerate(partitions):
        start = start_sectors[index] if start_sectors else next_sector
        records = []
        sector = 0
        for kind, payload in blocks:
            if kind in (ZEROFILL, FREE, COMMENT):
                count = payload if kind != COMMENT else 0
                records.append((kind, sector, count, len(data_fork), 0))
                expected += bytes(count * SECTOR)
            elif kind in (RAW, ZLIB, BZ2, ADC):
                assert len(payload) % SECTOR == 0
                count = len(payload) // SECTOR
                encoded = encode(kind, payload)
                records.append((kind, sector, count, len(data_fork), len(encoded)))
                data_fork += encoded
                expected += payload
                mapped_size += len(payload)
            else:
                count, raw = payload
                records.append((kind, sector, count, len(data_fork), len(raw)))
                data_fork += raw
                expected += bytes(count * SECTOR)
                mapped_size += count * SECTOR
            sector += count
        records.append((TERMINATOR, sector, 0, len(data_fork), 0))
        next_sector = start + sector
        name = 'disk image (Apple_HFS : {})'.format(index + 1)
        blkx.append({'Attributes': '0x0050',
                     'CFName': name,
                     'Data': pack_mish(start, records),
                     'ID': str(index - 1),
                     'Name': name})

    resource_fork = {'blkx': blkx}
    if auxiliary:
        resource_fork['plst'] = [{'Attributes': '0x0050', 'Data': bytes(0x600), 'ID': '0', 'Name': ''}]
        resource_fork['cSum'] = [{'Attributes': '0x0000', 'Data': struct.pack('<HI', 1, 2) + b'\xde\xad\xbe\xef',
                                  'ID': '0', 'Name': ''}]
        resource_fork['nsiz'] = [{'Attributes': '0x0000',
                                  'Data': plistlib.dumps({'block-checksum-2': 0, 'version': 6}),
                                  'ID': '0', 'Name': ''}]
    xml = plistlib.dumps({'resource-fork': resource_fork})

    prefix = bytes(data_fork_offset)
    xml_offset = len(prefix) + len(data_fork)
    if checksum:
        koly = pack_koly(len(prefix), len(data_fork), xml_offset, len(xml),
                         2, struct.pack('>I', zlib.crc32(bytes(data_fork))), len(expected) // SECTOR)
    else:
        koly = pack_koly(len(prefix), len(data_fork), xml_offset, len(xml), sector_count=len(expected) // SECTOR)
    return BuiltImage(prefix + bytes(data_fork) + xml + koly, bytes(expected), mapped_size, bytes(data_fork))

def standard_partitions():
    '''Two partitions covering every supported block kind'''
    return [
        [(ZEROFILL, 1), (RAW, random_bytes(3 * SECTOR, 1)), (COMMENT, 0), (ZLIB, random_bytes(200 * SECTOR, 2))],
        [(BZ2, random_bytes(9 * SECTOR, 3)), (FREE, 4), (ADC, random_bytes(5 * SECTOR, 4)), (ZEROFILL, 2),
         (RAW, random_bytes(1 * SECTOR, 5))],
    ]
