import struct
import zlib

import pytest

from tests.conftest import open_built
from tests.dmg_builder import build_image, standard_partitions
from udif.checksum import Crc32, verify_data
from udif.errors import PrereqMissing, UnsupportedChecksum
from udif.storage import FileSource

def test_crc32():
    hasher = Crc32()
    hasher.update(b'hello ')
    hasher.update(b'world')
    assert hasher.hexdigest() == '{:08x}'.format(zlib.crc32(b'hello world'))
    assert hasher.digest() == struct.pack('>I', zlib.crc32(b'hello world'))
    assert Crc32(b'123456789').hexdigest() == 'cbf43926'
    assert Crc32().hexdigest() == '00000000'

def test_verify_valid(standard_image):
    assert standard_image.verify_data() is True

def test_verify_no_checksum():
    image = open_built(build_image(standard_partitions(), checksum=False))
    assert image.verify_data() is None

def test_verify_detects_corruption():
    built = build_image(standard_partitions())
    data = bytearray(built.data)
    data[100] ^= 0xFF
    image = open_built(type(built)(bytes(data), built.expected, built.mapped_size, built.data_fork))
    assert image.verify_data() is False

def test_verify_covers_only_data_fork():
    built = build_image(standard_partitions(), data_fork_offset=1024)
    data = bytearray(built.data)
    data[10] ^= 0xFF    # before the data fork
    image = open_built(type(built)(bytes(data), built.expected, built.mapped_size, built.data_fork))
    assert image.verify_data() is True
    assert image.create_read_stream().read() == built.expected

def test_verify_unsupported_type(standard_image):
    standard_image.footer.data_checksum.type = 4
    with pytest.raises(UnsupportedChecksum):
        standard_image.verify_data()

def test_verify_without_footer():
    with pytest.raises(PrereqMissing):
        verify_data(FileSource.from_bytes(b''), None)
