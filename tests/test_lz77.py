import pytest

from deflate_tracer.errors import InvalidBackReference
from deflate_tracer.lz77 import resolve_back_reference


def test_copy_within_history():
    assert resolve_back_reference(4, 5, b"abcde") == b"abcd"


def test_copy_up_to_current_position():
    assert resolve_back_reference(3, 3, bytearray(b"xyzabc")) == b"abc"


def test_overlapping_copy_repeats_the_window():
    assert resolve_back_reference(5, 2, b"ab") == b"ababa"


def test_distance_one_run():
    assert resolve_back_reference(258, 1, b"q") == b"q" * 258


def test_result_length_always_matches():
    out = b"0123456789"
    for distance in range(1, 11):
        for length in (3, 7, 20):
            assert len(resolve_back_reference(length, distance, out)) == length


@pytest.mark.parametrize("distance", [0, -1, 4])
def test_distance_outside_output_rejected(distance):
    with pytest.raises(InvalidBackReference):
        resolve_back_reference(3, distance, b"abc")


def test_empty_output_rejected():
    with pytest.raises(InvalidBackReference):
        resolve_back_reference(3, 1, b"")
