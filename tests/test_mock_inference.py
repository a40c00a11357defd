import base64
import io
import random

import numpy as np
import pytest
from PIL import Image

from utils.activation_map import (
    overlay_activation_map,
    render_activation_map,
    synthesize_heatmap,
)
from utils.lesions import CLASS_NAMES, SAMPLES, LesionCode
from utils.mock_inference import label_for_image, mock_predict


@pytest.mark.parametrize("sample", SAMPLES)
def test_mock_predicts_the_true_class(sample):
    payload = mock_predict(sample.image_name, rng=random.Random(0))
    assert payload["predicted_class_name"] == sample.true_label.class_name
    assert payload["predicted_class_index"] == CLASS_NAMES.index(sample.true_label.class_name)


def test_mock_probabilities_are_normalized():
    rng = random.Random(1)
    for _ in range(20):
        payload = mock_predict("4.jpg", rng=rng, activation_map="url")
        probs = payload["all_class_probabilities"]
        assert list(probs) == CLASS_NAMES
        assert sum(probs.values()) == pytest.approx(1.0)
        assert payload["confidence"] == probs["Actinic keratoses"]
        assert 0.8 < payload["confidence"] < 0.97
        assert max(probs, key=probs.get) == "Actinic keratoses"


def test_unknown_image_falls_back_to_melanoma():
    assert label_for_image("upload.png") is LesionCode.MEL
    assert mock_predict("upload.png", activation_map="url")["predicted_class_name"] == "Melanoma"


def test_activation_map_formats():
    url = mock_predict("3.jpg", activation_map="url")
    assert url["activation_map"] == "/activation-maps/3.png"
    assert "activation_map_base64" not in url

    inline = mock_predict("3.jpg")
    assert "activation_map" not in inline
    img = Image.open(io.BytesIO(base64.b64decode(inline["activation_map_base64"])))
    assert img.format == "PNG"
    assert img.size == (224, 224)


def test_heatmap_is_normalized():
    heatmap = synthesize_heatmap((64, 32), np.random.default_rng(0))
    assert heatmap.shape == (32, 64)
    assert heatmap.max() == pytest.approx(1.0)
    assert heatmap.min() >= 0.0


def test_activation_map_is_stable_per_image():
    a = np.asarray(render_activation_map("3", size=(32, 32)))
    b = np.asarray(render_activation_map("3", size=(32, 32)))
    c = np.asarray(render_activation_map("4", size=(32, 32)))
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)


def test_overlay_accepts_encoded_bytes():
    base = Image.new("RGB", (50, 40), (255, 255, 255))
    buffer = io.BytesIO()
    render_activation_map("7", size=(16, 16)).save(buffer, format="PNG")

    blended = overlay_activation_map(base, buffer.getvalue(), alpha=0.5)
    assert blended.size == (50, 40)
    assert blended.mode == "RGB"
    assert blended.getpixel((25, 20)) != (255, 255, 255)


def test_overlay_rejects_bytes_that_are_not_an_image():
    base = Image.new("RGB", (8, 8))
    with pytest.raises(OSError):
        overlay_activation_map(base, b"<html>not an image</html>")
