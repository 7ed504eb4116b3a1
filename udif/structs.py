'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  On-disk structures of the UDIF (.dmg) container.
#  All fields are big-endian.
#
#  Reference: http://newosxbook.com/DMG.html
#

from construct import *

UDIFChecksum = "UDIFChecksum" / Struct(
    "type" / Int32ub,
    "size" / Int32ub,   # in bits
    "data" / Bytes(128)
)

# koly trailer, last 512 bytes of the file
UDIFResourceFile = "UDIFResourceFile" / Struct(
    "signature" / Bytes(4),
    "version" / Int32ub,
    "headerSize" / Int32ub,
    "flags" / Int32ub,
    "runningDataForkOffset" / Int64ub,
    "dataForkOffset" / Int64ub,
    "dataForkLength" / Int64ub,
    "rsrcForkOffset" / Int64ub,
    "rsrcForkLength" / Int64ub,
    "segmentNumber" / Int32ub,
    "segmentCount" / Int32ub,
    "segmentID" / Bytes(16),
    "dataChecksum" / UDIFChecksum,
    "xmlOffset" / Int64ub,
    "xmlLength" / Int64ub,
    "reserved1" / Bytes(120),
    "masterChecksum" / UDIFChecksum,
    "imageVariant" / Int32ub,
    "sectorCount" / Int64ub,
    "reserved2" / Bytes(12)
)

BLKXChunkEntry = "BLKXChunkEntry" / Struct(
    "entryType" / Int32ub,
    "comment" / Int32ub,
    "sectorNumber" / Int64ub,       # relative to BLKXTable.sectorNumber
    "sectorCount" / Int64ub,
    "compressedOffset" / Int64ub,   # relative to the data fork
    "compressedLength" / Int64ub
)

# mish table, stored base64 encoded as 'Data' of each blkx entry
BLKXTable = "BLKXTable" / Struct(
    "signature" / Bytes(4),
    "version" / Int32ub,
    "sectorNumber" / Int64ub,
    "sectorCount" / Int64ub,
    "dataOffset" / Int64ub,
    "buffersNeeded" / Int32ub,
    "blockDescriptors" / Int32ub,
    "reserved" / Int32ub[6],
    "checksum" / UDIFChecksum,
    "numberOfBlockChunks" / Int32ub,
    "chunks" / Array(this.numberOfBlockChunks, BLKXChunkEntry)
)
