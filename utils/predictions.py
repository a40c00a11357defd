# utils/predictions.py
"""
Prediction result contract and the views derived from it.

Values are kept exactly as the inference service sent them. Out-of-range or
non-numeric fields are not rejected here; the helpers below guard against
them when the result is displayed.
"""

import base64
import binascii
import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Tuple

from utils.lesions import CLASS_NAME_TO_CODE, LesionCode, Sample


class MalformedResponse(ValueError):
    """The response body does not have the shape of a prediction."""


@dataclass
class PredictionResult:
    predicted_class_index: Any
    predicted_class_name: str
    confidence: Any
    all_class_probabilities: Dict[str, Any] = field(default_factory=dict)
    activation_map_url: Optional[str] = None
    activation_map_base64: Optional[str] = None
    raw_logits: Optional[List[float]] = None

    @classmethod
    def from_response(cls, payload):
        """Build a result from the JSON body of the inference service."""
        if not isinstance(payload, Mapping):
            raise MalformedResponse(f"expected a JSON object, got {type(payload).__name__}")
        name = payload.get("predicted_class_name")
        if not isinstance(name, str):
            raise MalformedResponse("missing predicted_class_name")
        probs = payload.get("all_class_probabilities", {})
        if not isinstance(probs, Mapping):
            raise MalformedResponse("all_class_probabilities must be an object")
        for key in ("activation_map", "activation_map_base64"):
            if payload.get(key) is not None and not isinstance(payload[key], str):
                raise MalformedResponse(f"{key} must be a string")
        return cls(
            predicted_class_index=payload.get("predicted_class_index"),
            predicted_class_name=name,
            confidence=payload.get("confidence"),
            all_class_probabilities=dict(probs),
            activation_map_url=payload.get("activation_map") or None,
            activation_map_base64=payload.get("activation_map_base64") or None,
            raw_logits=payload.get("raw_logits"),
        )

    @property
    def has_activation_map(self) -> bool:
        return bool(self.activation_map_url or self.activation_map_base64)


def _finite_number(value) -> bool:
    # bool is a Real subclass but never a probability
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def normalized_confidence(result: Optional[PredictionResult]) -> float:
    if result is None:
        return 0.0
    value = result.confidence
    if _finite_number(value) and 0.0 <= value <= 1.0:
        return float(value)
    return 0.0


def sorted_class_probabilities(result: Optional[PredictionResult]) -> List[Tuple[str, float]]:
    """Class probabilities, highest first. Ties keep the response order."""
    if result is None:
        return []
    entries = [
        (name, float(p))
        for name, p in result.all_class_probabilities.items()
        if _finite_number(p)
    ]
    return sorted(entries, key=lambda item: item[1], reverse=True)


def predicted_code(class_name: str) -> str:
    """Short code for a class name; unknown names come back unchanged."""
    code = CLASS_NAME_TO_CODE.get(class_name)
    return code.value if code is not None else class_name


def class_name_for(key: str) -> str:
    """Full class name for a probability key that may be a name or a short code."""
    if key in CLASS_NAME_TO_CODE:
        return key
    try:
        return LesionCode(key).class_name
    except ValueError:
        return key


def is_correct(result: Optional[PredictionResult], sample: Optional[Sample]) -> bool:
    if result is None or sample is None:
        return False
    return predicted_code(result.predicted_class_name) == sample.true_label.value


def format_percent(value: float) -> str:
    return f"{value * 100:.1f}%"


def decode_activation_map(value: str) -> bytes:
    """Decode a base64 activation map, with or without a ``data:`` URL prefix."""
    if not isinstance(value, str):
        raise MalformedResponse(f"activation map must be a string, got {type(value).__name__}")
    if value.startswith("data:"):
        _, _, value = value.partition(",")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedResponse(f"activation map is not valid base64: {e}") from e
