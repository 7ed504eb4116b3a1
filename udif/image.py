'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Apple Disk Image (UDIF .dmg) reader.
#
#  Opening happens in two phases, the koly footer first, then the XML
#  property list it points to. An Image object only exists once both have
#  been parsed, so every method below can rely on footer and entries.
#

import logging
from contextlib import contextmanager

from udif.checksum import verify_data
from udif.constants import BlockType, FOOTER_SIZE, SECTOR_SIZE
from udif.decompressor import block_generator
from udif.errors import MalformedFooter, PrereqMissing
from udif.footer import Footer
from udif.readstream import ReadStream
from udif.resource_fork import ReadPropertyList, ResourceFork
from udif.sparse_readstream import SparseReadStream
from udif.storage import FileSource, ReadRange

log = logging.getLogger('MAIN.UDIF.IMAGE')

class Image:

    def __init__(self, source, footer, resource_fork):
        if footer is None:
            raise PrereqMissing('An Image needs a parsed footer, use Image.open()')
        self.source = source
        self.footer = footer
        self.resource_fork = resource_fork

    @classmethod
    def open(cls, source):
        '''
            Reads footer and resource fork from source, returns an Image.
            Exceptions:
                MalformedFooter, MalformedPropertyList, InvalidEntry,
                MalformedBlockMap, IOFailure
        '''
        footer = cls._read_footer(source)
        resource_fork = cls._read_resource_fork(source, footer)
        image = cls(source, footer, resource_fork)
        log.info('Opened UDIF image with {} partition(s), {} bytes uncompressed'.format(
                    len(image.entries), image.get_uncompressed_size()))
        return image

    @staticmethod
    def _read_footer(source):
        if source.size < FOOTER_SIZE:
            log.error('Source is only {} bytes, too small for a koly trailer'.format(source.size))
            raise MalformedFooter('File too small to be a DMG ({} bytes)'.format(source.size))
        buffer = ReadRange(source, source.size - FOOTER_SIZE, FOOTER_SIZE)
        footer = Footer.parse(buffer, source.size)
        log.debug('Read footer {!r}'.format(footer))
        return footer

    @staticmethod
    def _read_resource_fork(source, footer):
        if footer.xml_length == 0:
            log.warning('Footer has no XML property list, image has no entries')
            return ResourceFork()
        data = ReadRange(source, footer.xml_offset, footer.xml_length)
        return ResourceFork.from_plist(ReadPropertyList(data))

    @property
    def entries(self):
        '''blkx entries, in property list order'''
        return self.resource_fork.blkx

    def blocks(self, exclude=()):
        '''Yields (entry, block) for every block in image order, except excluded types'''
        return block_generator(self.entries, exclude)

    def get_uncompressed_size(self):
        '''Size of the decoded image, free and zero-filled blocks included'''
        return sum(block.sector_count for _, block in self.blocks()) * SECTOR_SIZE

    def get_mapped_size(self):
        '''Amount of mapped (non-zero and non-free) bytes'''
        exclude = (BlockType.ZEROFILL, BlockType.FREE)
        return sum(block.sector_count for _, block in self.blocks(exclude)) * SECTOR_SIZE

    def create_read_stream(self, end=None):
        '''Decoded image as a ReadStream, end is inclusive'''
        return ReadStream(self, end)

    def create_sparse_read_stream(self):
        '''Allocated image data as (buffer, position) chunks'''
        return SparseReadStream(self)

    def verify_data(self):
        '''True/False if the data fork matches its checksum, None if there is none'''
        return verify_data(self.source, self.footer)

    def __repr__(self):
        return 'Image({!r}, entries={})'.format(self.source, len(self.entries))

@contextmanager
def open_image(path):
    '''Opens the .dmg file at path, for use in a with statement'''
    yield Image.open(FileSource(path))
