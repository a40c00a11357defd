# utils/lesions.py
"""
Lesion taxonomy, sample catalog and model catalog.

The class names are the ones emitted by the inference service; display names
are the shorter labels used on the reference cards.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class LesionCode(Enum):
    MEL = "MEL"
    NV = "NV"
    BCC = "BCC"
    AKIEC = "AKIEC"
    BKL = "BKL"
    DF = "DF"
    VASC = "VASC"

    @property
    def class_name(self) -> str:
        return CODE_TO_CLASS_NAME[self]

    @property
    def display_name(self) -> str:
        return CODE_TO_DISPLAY_NAME[self]


# Order matters: it is the class-index order of the classifier.
CODE_TO_CLASS_NAME = {
    LesionCode.MEL: "Melanoma",
    LesionCode.NV: "Melanocytic nevi",
    LesionCode.BCC: "Basal cell carcinoma",
    LesionCode.AKIEC: "Actinic keratoses",
    LesionCode.BKL: "Benign keratosis-like lesions",
    LesionCode.DF: "Dermatofibroma",
    LesionCode.VASC: "Vascular lesions",
}
CLASS_NAME_TO_CODE = {name: code for code, name in CODE_TO_CLASS_NAME.items()}

CODE_TO_DISPLAY_NAME = {
    LesionCode.MEL: "Melanoma",
    LesionCode.NV: "Melanocytic nevus",
    LesionCode.BCC: "Basal cell carcinoma",
    LesionCode.AKIEC: "Actinic keratosis",
    LesionCode.BKL: "Benign keratosis",
    LesionCode.DF: "Dermatofibroma",
    LesionCode.VASC: "Vascular lesion",
}

CLASS_NAMES = list(CODE_TO_CLASS_NAME.values())

if len(CLASS_NAME_TO_CODE) != len(CODE_TO_CLASS_NAME) or set(CODE_TO_CLASS_NAME) != set(LesionCode):
    raise RuntimeError("Lesion code table must map every code to exactly one class name")


@dataclass(frozen=True)
class Sample:
    image_name: str
    true_label: LesionCode


_LABEL_CYCLE = [
    LesionCode.MEL,
    LesionCode.NV,
    LesionCode.BCC,
    LesionCode.AKIEC,
    LesionCode.BKL,
    LesionCode.DF,
    LesionCode.VASC,
]

SAMPLES = [
    Sample(f"{i}.jpg", _LABEL_CYCLE[(i - 1) % len(_LABEL_CYCLE)])
    for i in range(1, 21)
]
_SAMPLES_BY_NAME = {s.image_name: s for s in SAMPLES}


def find_sample(image_name):
    """Return the catalog entry for ``image_name`` or None."""
    return _SAMPLES_BY_NAME.get(Path(image_name).name)


def sample_path(sample: Sample, samples_dir: Path) -> Path:
    return Path(samples_dir) / sample.image_name


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    uar: str
    accuracy: str


MODELS = [
    ModelInfo("simple_cnn", "SimpleCNN", "55%", "55%"),
    ModelInfo("finetuned_mobile_net", "Fine Tuned MobileNet V2", "62%", "66%"),
    ModelInfo("finetuned_efficientnet", "Fine Tuned EfficientNet B0", "74%", "73%"),
]
MODELS_BY_ID = {m.id: m for m in MODELS}
