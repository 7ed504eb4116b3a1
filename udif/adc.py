'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Apple Data Compression (ADC), used by UDCO images.
#  An LZ77 variant with three opcode forms:
#    1xxxxxxx                      literal run of (x + 1) bytes follows
#    01xxxxxx dddddddd dddddddd    copy (x + 4) bytes from distance (d + 1)
#    0xxxxxdd dddddddd             copy (x + 3) bytes from distance (d + 1)
#

from udif.errors import DecodeFailure

def adc_decompress(data, expected_size=None):
    '''
        Decompress an ADC stream and return the output as bytes.
        Exceptions:
            DecodeFailure on truncated input, a copy reaching before the
            start of the output, or output larger than expected_size
    '''
    out = bytearray()
    pos = 0
    data_len = len(data)
    while pos < data_len:
        op = data[pos]
        if op & 0x80:
            count = (op & 0x7F) + 1
            if pos + 1 + count > data_len:
                raise DecodeFailure('ADC literal run at offset {} is truncated'.format(pos))
            out += data[pos + 1 : pos + 1 + count]
            pos += 1 + count
        else:
            if op & 0x40:
                if pos + 3 > data_len:
                    raise DecodeFailure('ADC opcode at offset {} is truncated'.format(pos))
                count = (op & 0x3F) + 4
                distance = ((data[pos + 1] << 8) | data[pos + 2]) + 1
                pos += 3
            else:
                if pos + 2 > data_len:
                    raise DecodeFailure('ADC opcode at offset {} is truncated'.format(pos))
                count = ((op >> 2) & 0x0F) + 3
                distance = (((op & 0x03) << 8) | data[pos + 1]) + 1
                pos += 2
            if distance > len(out):
                raise DecodeFailure('ADC back reference of {} bytes with only {} bytes output'.format(distance, len(out)))
            start = len(out) - distance
            if distance >= count:
                out += out[start : start + count]
            else: # overlapping copy repeats the last 'distance' bytes
                pattern = out[start:]
                out += (pattern * (count // distance + 1))[:count]
        if expected_size is not None and len(out) > expected_size:
            raise DecodeFailure('ADC output exceeds expected size of {} bytes'.format(expected_size))
    return bytes(out)
