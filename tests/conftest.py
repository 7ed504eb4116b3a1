import pytest

from tests.dmg_builder import build_image, standard_partitions
from udif.image import Image
from udif.storage import FileSource

def open_built(built):
    return Image.open(FileSource.from_bytes(built.data))

@pytest.fixture(scope='module')
def standard_built():
    return build_image(standard_partitions())

@pytest.fixture
def standard_image(standard_built):
    return open_built(standard_built)

class CountingSource:
    '''Wraps a source, recording every range opened and whether it was closed'''

    def __init__(self, source):
        self.source = source
        self.size = source.size
        self.opened = []
        self.readers = []

    def create_read_stream(self, start=0, end=None):
        reader = self.source.create_read_stream(start, end)
        self.opened.append((start, end))
        self.readers.append(reader)
        return reader

    @property
    def open_readers(self):
        return [r for r in self.readers if r.file is not None]

@pytest.fixture
def counting_image(standard_built):
    source = CountingSource(FileSource.from_bytes(standard_built.data))
    image = Image.open(source)
    source.opened.clear()
    source.readers.clear()
    return image, source
