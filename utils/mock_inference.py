# utils/mock_inference.py
"""
Mock classifier: looks up the true label of a catalog image and synthesizes a
plausible probability distribution that always favours it.
"""

import random
from pathlib import Path

from utils.activation_map import encode_png_base64, render_activation_map
from utils.lesions import CLASS_NAMES, LesionCode, find_sample


def label_for_image(image_name) -> LesionCode:
    """True label of a catalog image. Unknown images are treated as melanoma."""
    sample = find_sample(image_name)
    return sample.true_label if sample is not None else LesionCode.MEL


def synthesize_probabilities(predicted_class, rng=None):
    rng = rng or random.Random()
    probabilities = {name: 0.01 + rng.random() * 0.02 for name in CLASS_NAMES}
    probabilities[predicted_class] = 0.85 + rng.random() * 0.1

    total = sum(probabilities.values())
    return {name: p / total for name, p in probabilities.items()}


def activation_map_url(image_name):
    return f"/activation-maps/{Path(image_name).stem}.png"


def mock_predict(image_name, rng=None, activation_map="base64"):
    """
    Prediction payload for ``image_name`` in the inference service's format.

    ``activation_map`` selects whether the overlay is inlined as base64 or
    referenced by URL.
    """
    predicted_class = label_for_image(image_name).class_name
    probabilities = synthesize_probabilities(predicted_class, rng)

    payload = {
        "predicted_class_index": CLASS_NAMES.index(predicted_class),
        "predicted_class_name": predicted_class,
        "confidence": probabilities[predicted_class],
        "all_class_probabilities": probabilities,
    }
    if activation_map == "url":
        payload["activation_map"] = activation_map_url(image_name)
    else:
        payload["activation_map_base64"] = encode_png_base64(render_activation_map(Path(image_name).stem))
    return payload
