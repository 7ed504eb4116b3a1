'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

from udif.constants import BlockType, ChecksumType, SECTOR_SIZE
from udif.errors import (UdifError, MalformedFooter, MalformedBlockMap, MalformedPropertyList,
                         InvalidEntry, UnsupportedCodec, UnknownBlockType, DecodeFailure,
                         UnsupportedChecksum, PrereqMissing, IOFailure)
from udif.footer import Checksum, Footer
from udif.blockmap import Block, BlockMap
from udif.resource_fork import Entry, Resource, ResourceFork
from udif.storage import FileSource
from udif.readstream import ReadStream
from udif.sparse_readstream import SparseChunk, SparseReadStream
from udif.image import Image, open_image

__version__ = '1.0.0'
