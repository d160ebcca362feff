import pytest

from src.tracking.services.routing.polyline import decode_polyline, encode_polyline

# Reference vector from the encoded polyline format documentation.
CANONICAL = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
CANONICAL_POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


def test_decode_reference_vector():
    assert decode_polyline(CANONICAL) == CANONICAL_POINTS


def test_encode_reference_vector():
    assert encode_polyline(CANONICAL_POINTS) == CANONICAL


@pytest.mark.parametrize(
    "points",
    [
        [(6.9271, 79.8612), (6.902, 79.87)],
        [(0.0, 0.0), (-0.00001, 0.00001), (89.99999, -179.99999)],
        [(-33.86882, 151.20929), (-33.8688, 151.2093), (-33.87, 151.21), (-33.86882, 151.20929)],
        [(51.5, -0.12)],
    ],
)
def test_decode_inverts_encode(points):
    assert decode_polyline(encode_polyline(points)) == points


def test_empty_string_decodes_to_no_points():
    assert decode_polyline("") == []
    assert encode_polyline([]) == ""


def test_truncated_polyline_raises_value_error():
    # drop the last character: the final longitude is left incomplete
    with pytest.raises(ValueError):
        decode_polyline(CANONICAL[:-1])


def test_character_outside_alphabet_raises_value_error():
    with pytest.raises(ValueError):
        decode_polyline("_p~iF ps|U")
