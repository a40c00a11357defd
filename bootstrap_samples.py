import sys
from pathlib import Path

import numpy as np
from PIL import Image, ImageFilter

from utils import config
from utils.lesions import SAMPLES, LesionCode

# Rough lesion tints (RGB) so the placeholder gallery is not uniform
LESION_COLORS = {
    LesionCode.MEL: (60, 35, 30),
    LesionCode.NV: (120, 80, 55),
    LesionCode.BCC: (200, 140, 140),
    LesionCode.AKIEC: (180, 90, 80),
    LesionCode.BKL: (150, 110, 70),
    LesionCode.DF: (140, 95, 85),
    LesionCode.VASC: (170, 40, 60),
}
SKIN = (225, 180, 155)


def generate_sample_image(sample, size=224, seed=None):
    """Placeholder dermatoscopy-like image: an irregular blob on a skin-toned background."""
    rng = np.random.default_rng(seed)
    yy, xx = np.mgrid[0:size, 0:size].astype(np.float32) / size - 0.5
    angle = np.arctan2(yy, xx)
    radius = 0.25 + 0.04 * np.sin(angle * rng.integers(3, 7) + rng.uniform(0, np.pi))
    mask = (np.sqrt(xx ** 2 + yy ** 2) < radius)[..., None]

    noise = rng.normal(0, 8, (size, size, 3))
    img = np.where(mask, LESION_COLORS[sample.true_label], SKIN) + noise
    img = Image.fromarray(np.uint8(np.clip(img, 0, 255)))
    return img.filter(ImageFilter.GaussianBlur(2))


def bootstrap_samples(samples_dir, overwrite=False):
    samples_dir = Path(samples_dir)
    samples_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for i, sample in enumerate(SAMPLES):
        path = samples_dir / sample.image_name
        if path.exists() and not overwrite:
            continue
        generate_sample_image(sample, seed=i).save(path, format="JPEG", quality=90)
        written.append(path)
    return written


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else config.SAMPLES_DIR
    written = bootstrap_samples(target)
    print(f"✅ Wrote {len(written)} sample images to {target}")
