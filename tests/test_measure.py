"""
Tests for text measurers
"""

import pytest

from tonnentext.errors import MeasurementUnavailable
from tonnentext.sizing import PillowMeasurer, ReportLabMeasurer, SizingEngine
from tonnentext.sizing.measure import find_font_file


class TestReportLabMeasurer:

    def test_width_scales_with_size(self):
        measurer = ReportLabMeasurer()
        small = measurer.measure("MÜLLER", 20)
        large = measurer.measure("MÜLLER", 40)

        assert small > 0
        assert large == pytest.approx(small * 2)

    def test_drives_engine(self):
        engine = SizingEngine(ReportLabMeasurer())
        state = engine.fit("MÜLLER", 300, 16)

        assert ReportLabMeasurer().measure("MÜLLER", state.pixel_size) <= 284


class TestPillowMeasurer:

    def test_no_font_is_unavailable(self):
        measurer = PillowMeasurer(candidates=("does-not-exist.ttf",))

        with pytest.raises(MeasurementUnavailable):
            measurer.measure("MÜLLER", 20)

    def test_unavailable_keeps_engine_state(self):
        engine = SizingEngine(PillowMeasurer(candidates=("does-not-exist.ttf",)))
        state = engine.fit("MÜLLER", 300, 16)
        assert state.is_placeholder is True

    def test_measures_with_system_font(self):
        path = find_font_file()
        if path is None:
            pytest.skip("no label font installed")
        measurer = PillowMeasurer(font_path=path)

        narrow = measurer.measure("II", 30)
        wide = measurer.measure("MÜLLER", 30)

        assert 0 < narrow < wide
        assert measurer.measure("MÜLLER", 60) > wide
