import base64
import math

import pytest

from utils.lesions import LesionCode, Sample
from utils.predictions import (
    MalformedResponse,
    PredictionResult,
    class_name_for,
    decode_activation_map,
    format_percent,
    is_correct,
    normalized_confidence,
    predicted_code,
    sorted_class_probabilities,
)


def make_result(**overrides):
    payload = {
        "predicted_class_index": 0,
        "predicted_class_name": "Melanoma",
        "confidence": 0.87,
        "all_class_probabilities": {"Melanoma": 0.87, "Melanocytic nevi": 0.13},
    }
    payload.update(overrides)
    return PredictionResult.from_response(payload)


@pytest.mark.parametrize("value, expected", [
    (0.87, 0.87),
    (0.0, 0.0),
    (1.0, 1.0),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
    (1.5, 0.0),
    (-0.1, 0.0),
    ("0.9", 0.0),
    (None, 0.0),
    (True, 0.0),
])
def test_normalized_confidence(value, expected):
    assert normalized_confidence(make_result(confidence=value)) == expected


def test_normalized_confidence_without_result():
    assert normalized_confidence(None) == 0.0


def test_sorted_probabilities_descending_with_stable_ties():
    result = make_result(all_class_probabilities={"MEL": 0.9, "NV": 0.05, "BCC": 0.05})
    assert sorted_class_probabilities(result) == [("MEL", 0.9), ("NV", 0.05), ("BCC", 0.05)]

    result = make_result(all_class_probabilities={"BCC": 0.05, "NV": 0.05, "MEL": 0.9})
    assert [k for k, _ in sorted_class_probabilities(result)] == ["MEL", "BCC", "NV"]


def test_sorted_probabilities_drops_non_numeric_values():
    result = make_result(all_class_probabilities={
        "Melanoma": 0.7,
        "Dermatofibroma": float("nan"),
        "Vascular lesions": "high",
        "Melanocytic nevi": 0.3,
        "Actinic keratoses": None,
    })
    assert sorted_class_probabilities(result) == [("Melanoma", 0.7), ("Melanocytic nevi", 0.3)]
    assert sorted_class_probabilities(None) == []


def test_sorted_probabilities_is_recomputed_each_call():
    result = make_result()
    first = sorted_class_probabilities(result)
    first.clear()
    assert len(sorted_class_probabilities(result)) == 2


def test_is_correct():
    result = make_result(predicted_class_name="Melanoma")
    assert is_correct(result, Sample("1.jpg", LesionCode.MEL))
    assert not is_correct(result, Sample("2.jpg", LesionCode.NV))
    assert not is_correct(make_result(predicted_class_name="Unknown"), Sample("1.jpg", LesionCode.MEL))
    assert not is_correct(None, Sample("1.jpg", LesionCode.MEL))
    assert not is_correct(result, None)


def test_is_correct_accepts_short_codes():
    assert is_correct(make_result(predicted_class_name="NV"), Sample("2.jpg", LesionCode.NV))


def test_predicted_code_falls_back_to_input():
    assert predicted_code("Basal cell carcinoma") == "BCC"
    assert predicted_code("Vascular lesions") == "VASC"
    assert predicted_code("Something else") == "Something else"


def test_class_name_for_codes_and_names():
    assert class_name_for("AKIEC") == "Actinic keratoses"
    assert class_name_for("Dermatofibroma") == "Dermatofibroma"
    assert class_name_for("??") == "??"


def test_format_percent():
    assert format_percent(0.91) == "91.0%"
    assert format_percent(0.0) == "0.0%"
    assert format_percent(0.8766) == "87.7%"


def test_from_response_keeps_activation_map_shapes():
    url = make_result(activation_map="/images/activation-map.png")
    assert url.activation_map_url == "/images/activation-map.png"
    assert url.activation_map_base64 is None
    assert url.has_activation_map

    inline = make_result(activation_map_base64="aGVsbG8=")
    assert inline.activation_map_base64 == "aGVsbG8="
    assert inline.has_activation_map

    assert not make_result().has_activation_map


@pytest.mark.parametrize("payload", [
    [],
    "oops",
    {"confidence": 0.5},
    {"predicted_class_name": "Melanoma", "all_class_probabilities": [0.1, 0.9]},
])
def test_from_response_rejects_malformed_bodies(payload):
    with pytest.raises(MalformedResponse):
        PredictionResult.from_response(payload)


def test_from_response_keeps_bad_numbers_for_the_guards():
    result = make_result(confidence=float("nan"), predicted_class_index="x")
    assert math.isnan(result.confidence)
    assert result.predicted_class_index == "x"


def test_decode_activation_map():
    encoded = base64.b64encode(b"png-bytes").decode()
    assert decode_activation_map(encoded) == b"png-bytes"
    assert decode_activation_map(f"data:image/png;base64,{encoded}") == b"png-bytes"
    with pytest.raises(MalformedResponse):
        decode_activation_map("not base64!!")


@pytest.mark.parametrize("field_name, value", [
    ("activation_map_base64", 123),
    ("activation_map", {"href": "x"}),
    ("activation_map", ["/a.png"]),
])
def test_from_response_rejects_non_string_activation_maps(field_name, value):
    with pytest.raises(MalformedResponse):
        make_result(**{field_name: value})


def test_decode_activation_map_rejects_non_strings():
    with pytest.raises(MalformedResponse):
        decode_activation_map(b"aGVsbG8=")
