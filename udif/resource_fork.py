'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Resource fork model. The XML property list of a UDIF image holds a
#  'resource-fork' dictionary with these classes:
#    blkx - one block map (mish) per partition, needed for reading
#    nsiz, cSum, plst, size - auxiliary metadata, kept but not interpreted
#    beyond what is needed to skip them safely
#

import logging
import plistlib
import struct
from xml.parsers.expat import ExpatError

from udif.blockmap import BlockMap
from udif.errors import InvalidEntry, MalformedBlockMap, MalformedPropertyList

log = logging.getLogger('MAIN.UDIF.RESOURCE_FORK')

def ParseNumber(value, field_name):
    '''Parse ID/Attributes which plists store as decimal or 0x prefixed strings'''
    if isinstance(value, bool):
        raise InvalidEntry('{} must be a number, got {!r}'.format(field_name, value))
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith(('0x', '-0x')):
                return int(text, 16)
            return int(text, 10)
        except ValueError:
            pass
    raise InvalidEntry('{} must be a number, got {!r}'.format(field_name, value))

def ReadPropertyList(data):
    '''Returns the decoded top level dictionary of an XML (or binary) plist'''
    try:
        plist = plistlib.loads(bytes(data))
    except (plistlib.InvalidFileException, ExpatError, ValueError, TypeError, OverflowError) as ex:
        log.error('Could not parse property list: ' + str(ex))
        raise MalformedPropertyList('Could not parse property list: ' + str(ex)) from ex
    if not isinstance(plist, dict):
        raise MalformedPropertyList('Property list root is a {}, expected a dictionary'.format(type(plist).__name__))
    return plist

class Resource:
    '''An auxiliary resource (nsiz, cSum, plst, size)'''

    def __init__(self, id, attributes, name, data):
        self.id = id
        self.attributes = attributes
        self.name = name
        self.data = data

    def __repr__(self):
        return '{}(id={}, attributes=0x{:X}, name={!r})'.format(type(self).__name__, self.id, self.attributes, self.name)

class Entry(Resource):
    '''A blkx resource, its data is the parsed BlockMap'''

    def __init__(self, id, attributes, name, block_map, core_foundation_name=None):
        super().__init__(id, attributes, name, block_map)
        self.core_foundation_name = core_foundation_name

    @property
    def block_map(self):
        return self.data

class ResourceFork:

    AUXILIARY_CLASSES = ('nsiz', 'cSum', 'plst', 'size')

    def __init__(self, blkx=None, nsiz=None, cSum=None, plst=None, size=None):
        self.blkx = blkx or []
        self.nsiz = nsiz or []
        self.cSum = cSum or []
        self.plst = plst or []
        self.size = size or []

    @classmethod
    def from_plist(cls, plist):
        '''
            Build the resource fork from the decoded plist dictionary.
            Exceptions:
                InvalidEntry, MalformedBlockMap if any blkx entry is bad
        '''
        resource_fork = plist.get('resource-fork')
        if resource_fork is None:
            log.warning('No resource-fork in property list, image has no entries')
            return cls()
        if not isinstance(resource_fork, dict):
            raise MalformedPropertyList('resource-fork is not a dictionary')

        fork = cls()
        fork.blkx = [cls._parse_blkx(item, index) for index, item in enumerate(resource_fork.get('blkx', []))]
        for class_name in cls.AUXILIARY_CLASSES:
            parser = getattr(cls, '_parse_' + class_name.lower())
            setattr(fork, class_name, [parser(item) for item in cls._valid_items(resource_fork.get(class_name, []), class_name)])
        log.debug('Resource fork has {} blkx, {} nsiz, {} cSum, {} plst, {} size entries'.format(
                    len(fork.blkx), len(fork.nsiz), len(fork.cSum), len(fork.plst), len(fork.size)))
        return fork

    @staticmethod
    def _get_common(item):
        if not isinstance(item, dict):
            raise InvalidEntry('Resource entry is a {}, expected a dictionary'.format(type(item).__name__))
        data = item.get('Data')
        if not isinstance(data, (bytes, bytearray)):
            raise InvalidEntry('Resource entry {!r} has no Data'.format(item.get('Name')))
        return (ParseNumber(item.get('ID'), 'ID'),
                ParseNumber(item.get('Attributes'), 'Attributes'),
                item.get('Name', ''),
                bytes(data))

    @staticmethod
    def _parse_blkx(item, index):
        id, attributes, name, data = ResourceFork._get_common(item)
        try:
            block_map = BlockMap.parse(data)
        except MalformedBlockMap:
            log.error('blkx entry {} ({}) has a bad block map'.format(index, name))
            raise
        cf_name = item.get('CFName')
        if cf_name is None:
            log.warning('blkx entry {} ({}) has no CFName'.format(index, name))
        return Entry(id, attributes, name, block_map, cf_name)

    @staticmethod
    def _valid_items(items, class_name):
        '''Auxiliary entries that cannot be read are skipped, never fatal'''
        for item in items:
            try:
                ResourceFork._get_common(item)
            except InvalidEntry as ex:
                log.warning('Skipping {} entry: {}'.format(class_name, str(ex)))
                continue
            yield item

    @staticmethod
    def _parse_nsiz(item):
        id, attributes, name, data = ResourceFork._get_common(item)
        try:
            data = ReadPropertyList(data)
        except MalformedPropertyList:
            log.warning('nsiz entry {} data is not a plist, keeping raw bytes'.format(id))
        return Resource(id, attributes, name, data)

    @staticmethod
    def _parse_csum(item):
        id, attributes, name, data = ResourceFork._get_common(item)
        if len(data) < 6:
            log.warning('cSum entry {} is only {} bytes, keeping raw bytes'.format(id, len(data)))
            return Resource(id, attributes, name, data)
        unknown, checksum_type = struct.unpack('<HI', data[0:6])
        return Resource(id, attributes, name, {'unknown': unknown, 'type': checksum_type, 'value': data[6:].hex()})

    @staticmethod
    def _parse_plst(item):
        return Resource(*ResourceFork._get_common(item))

    @staticmethod
    def _parse_size(item):
        return Resource(*ResourceFork._get_common(item))
