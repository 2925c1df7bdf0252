import math

import pytest

from fretfind.scale import Scale, et_scale, read_scala_file, scala_scale


class TestScale:
    def test_new_scale_has_unison(self):
        s = Scale("x")
        assert s.steps == [(1, 1)]
        assert s.tones == 0
        assert not s.has_errors

    def test_add_step(self):
        s = Scale().add_step(3, 2)
        assert s.steps[-1] == (3, 2)

    @pytest.mark.parametrize("num, denom", [(3, 0), ("a", 2), (3, math.nan), (True, 1)])
    def test_add_invalid_step(self, num, denom):
        s = Scale().add_step(num, denom)
        assert len(s.errors) == 1
        assert all(math.isnan(v) for v in s.steps[-1])

    def test_cents(self):
        s = Scale().add_step(2, 1)
        assert s.cents() == pytest.approx([0.0, 1200.0])


class TestEqualTemperament:
    def test_twelve_tone(self):
        s = et_scale(12, 2)
        assert s.tones == 1
        num, denom = s.steps[1]
        assert num / denom == pytest.approx(1.059463, abs=1e-6)
        assert s.title == "12 root of 2 Equal Temperament"
        assert not s.has_errors

    def test_float_tones_title(self):
        assert et_scale(19.0, 2).title == "19 root of 2 Equal Temperament"
        assert et_scale(13, 3).title == "13 root of 3 Equal Temperament"

    @pytest.mark.parametrize("tones", [0, "x", None])
    def test_bad_tone_count(self, tones):
        s = et_scale(tones)
        assert s.has_errors
        assert s.steps == [(1, 1)]

    @pytest.mark.parametrize(
        "tones, octave",
        [(0.0001, 2), (-12, 0), (12, "two"), (12, -2), (12, None)],
    )
    def test_octave_that_cannot_be_divided(self, tones, octave):
        s = et_scale(tones, octave)
        assert len(s.errors) == 1
        assert "cannot be divided" in s.errors[0]
        assert s.steps == [(1, 1)]
        assert s.title == ""


class TestScala:
    def test_minimal_file(self):
        s = scala_scale("octave\n1\n2/1\n")
        assert s.title == "octave"
        assert s.steps[1:] == [(2, 1)]
        assert s.errors == []

    def test_comments_and_pitch_forms(self):
        text = (
            "! meantone.scl\n"
            "!\n"
            "Test scale\n"
            " 3\n"
            "!\n"
            " 701.955 fifth\n"
            " 5/4\n"
            " 2\n"
        )
        s = scala_scale(text)
        assert s.title == "Test scale"
        assert s.tones == 3
        assert s.steps[1][0] == pytest.approx(1.5, abs=1e-5)
        assert s.steps[2] == (5, 4)
        assert s.steps[3] == (2, 1)
        assert not s.has_errors

    def test_blank_title_allowed(self):
        s = scala_scale("! file.scl\n\n1\n2/1\n")
        assert s.title == ""
        assert s.tones == 1
        assert not s.has_errors

    def test_too_few_tones(self):
        s = scala_scale("short\n2\n2/1\n")
        assert len(s.errors) == 1
        assert s.tones < 2

    def test_bad_tokens_keep_parsing(self):
        s = scala_scale("bad\n3\n3/2\nfoo\n2/1\n")
        assert len(s.errors) == 1
        assert s.tones == 3
        assert all(math.isnan(v) for v in s.steps[2])
        assert s.steps[3] == (2, 1)

    def test_zero_and_negative_ratios(self):
        s = scala_scale("bad\n2\n3/0\n-3/2\n")
        assert len(s.errors) == 2
        assert all(math.isnan(v) for v in s.steps[1])
        assert all(math.isnan(v) for v in s.steps[2])

    def test_cents_out_of_range(self):
        s = scala_scale("t\n1\n2000000.0\n")
        assert s.errors == ['Error at "2000000.0": Cents value is out of range.']
        assert all(math.isnan(v) for v in s.steps[1])

    @pytest.mark.parametrize("token", ["1/" + "9" * 400, "9" * 400])
    def test_ratio_too_large_for_a_float(self, token):
        s = scala_scale(f"t\n2\n{token}\n2/1\n")
        assert len(s.errors) == 1
        assert "too large" in s.errors[0]
        assert all(math.isnan(v) for v in s.steps[1])
        assert s.steps[2] == (2, 1)

    def test_tone_count_must_be_a_number(self):
        s = scala_scale("title\nmany\n2/1\n")
        assert s.has_errors
        assert s.steps == [(1, 1)]

    @pytest.mark.parametrize("text", ["", "only a title", None])
    def test_too_short_or_not_text(self, text):
        assert scala_scale(text).has_errors

    def test_read_scala_file(self, tmp_path):
        path = tmp_path / "fifths.scl"
        path.write_text("! fifths\nfifths\n2\n3/2\n2/1\n", encoding="utf-8")
        s = read_scala_file(path)
        assert s.title == "fifths"
        assert s.steps[1:] == [(3, 2), (2, 1)]
