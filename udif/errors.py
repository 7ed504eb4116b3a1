'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Exceptions raised while opening, decoding and verifying UDIF images.
#  Parsing failures abort Image.open() entirely, streaming failures end
#  the stream they occur in.
#

class UdifError(Exception):
    '''Base class for all errors raised by this package'''
    pass

class MalformedFooter(UdifError, ValueError):
    '''koly trailer is missing, truncated or describes ranges outside the file'''
    pass

class MalformedBlockMap(UdifError, ValueError):
    '''blkx data is not a valid mish table'''
    pass

class InvalidEntry(UdifError, ValueError):
    '''A resource fork entry has a non-numeric ID/Attributes or lacks Data'''
    pass

class UnsupportedCodec(UdifError, NotImplementedError):
    '''Block uses a known compression that cannot be decoded (LZFSE)'''
    pass

class UnknownBlockType(UdifError, NotImplementedError):
    '''Block type value is not one defined by UDIF'''
    pass

class DecodeFailure(UdifError):
    '''Codec reported corruption, or output length differs from the block's size'''
    pass

class UnsupportedChecksum(UdifError, NotImplementedError):
    pass

class PrereqMissing(UdifError):
    '''An operation needing the parsed footer was called without one'''
    pass

class IOFailure(UdifError, OSError):
    '''Storage backend could not return the requested bytes'''
    pass

class MalformedPropertyList(UdifError, ValueError):
    '''XML property list could not be read, or has no usable resource-fork'''
    pass
