"""
Tests for the production PDF
"""

import io

import pytest

from tonnentext.labels import LabelConfiguration, render_label_pdf
from tonnentext.labels.pdf import label_page_size
from tonnentext.units import mm_to_pt


@pytest.fixture
def config():
    return LabelConfiguration.create("müller", font_size_px=40.0, quantity=2, color="#1a1a1a")


def test_page_matches_physical_label():
    width, height = label_page_size()
    assert width == pytest.approx(mm_to_pt(280))
    assert height == pytest.approx(mm_to_pt(66))


def test_renders_pdf_to_buffer(config):
    buffer = io.BytesIO()
    render_label_pdf(config, buffer, order_number="1042")

    data = buffer.getvalue()
    assert data.startswith(b"%PDF")
    assert b"MediaBox" in data


def test_renders_pdf_to_path(config, tmp_path):
    path = tmp_path / "label.pdf"
    render_label_pdf(config, str(path))

    assert path.read_bytes().startswith(b"%PDF")


def test_invalid_colour_falls_back():
    config = LabelConfiguration.create("15a", font_size_px=30.0, color="not-a-colour")
    buffer = io.BytesIO()

    render_label_pdf(config, buffer)

    assert buffer.getvalue().startswith(b"%PDF")


def test_registered_truetype_font(config):
    from tonnentext.labels.pdf import register_label_font
    from tonnentext.sizing.measure import find_font_file

    path = find_font_file()
    if path is None:
        pytest.skip("no label font installed")
    font_name = register_label_font(path, name="LabelFace")
    buffer = io.BytesIO()

    render_label_pdf(config, buffer, font_name=font_name)

    assert buffer.getvalue().startswith(b"%PDF")
