import io

import pytest

from poltools.ppm import write_ppm


def test_write_ppm_works():
    data = bytes([255, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 255, 255, 255])
    buf = io.StringIO()
    write_ppm(3, 2, data, buf)
    assert buf.getvalue() == "P3\n3 2\n255\n255 0 0 0 0 0 0 0 0 \n0 0 0 0 0 0 255 255 255 \n"


def test_write_ppm_short_data():
    with pytest.raises(ValueError):
        write_ppm(2, 2, bytes(11), io.StringIO())
