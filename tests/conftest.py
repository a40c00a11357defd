import pytest

from utils.lesions import LesionCode, Sample
from utils.predictions import PredictionResult


@pytest.fixture
def bcc_sample():
    return Sample("3.jpg", LesionCode.BCC)


@pytest.fixture
def bcc_result():
    return PredictionResult.from_response({
        "predicted_class_index": 2,
        "predicted_class_name": "Basal cell carcinoma",
        "confidence": 0.91,
        "all_class_probabilities": {
            "Melanoma": 0.02,
            "Melanocytic nevi": 0.02,
            "Basal cell carcinoma": 0.91,
            "Actinic keratoses": 0.01,
            "Benign keratosis-like lesions": 0.02,
            "Dermatofibroma": 0.01,
            "Vascular lesions": 0.01,
        },
        "activation_map": "/activation-maps/3.png",
    })


@pytest.fixture
def samples_dir(tmp_path, bcc_sample):
    (tmp_path / bcc_sample.image_name).write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return tmp_path
