import base64
import hashlib
import io

import numpy as np
import matplotlib
from PIL import Image

# ------------------------------
# Synthetic activation maps
# ------------------------------
def seed_for(image_name):
    """Stable seed derived from an image name, so the same image always gets the same map."""
    digest = hashlib.md5(image_name.encode("utf-8")).hexdigest()
    return int(digest[:8], 16)


def synthesize_heatmap(size=(224, 224), rng=None, blobs=2):
    """
    Build a heatmap in [0, 1] made of a few Gaussian blobs.
    Args:
        size: (width, height) of the map
        rng: numpy Generator, a fresh one is used when omitted
        blobs: number of hot regions
    Returns:
        heatmap: float numpy array of shape (height, width)
    """
    rng = rng if rng is not None else np.random.default_rng()
    w, h = size
    yy, xx = np.mgrid[0:h, 0:w]
    heatmap = np.zeros((h, w), dtype=np.float32)
    for _ in range(blobs):
        cx, cy = rng.uniform(0.3, 0.7) * w, rng.uniform(0.3, 0.7) * h
        sigma = rng.uniform(0.1, 0.25) * min(w, h)
        heatmap += np.exp(-((xx - cx) ** 2 + (yy - cy) ** 2) / (2 * sigma ** 2))
    peak = heatmap.max()
    if peak > 0:
        heatmap /= peak
    return heatmap


def colorize_heatmap(heatmap, colormap="jet"):
    cmap = matplotlib.colormaps[colormap]
    colored = cmap(np.clip(heatmap, 0.0, 1.0))
    return Image.fromarray(np.uint8(colored[:, :, :3] * 255))


def encode_png(image):
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def encode_png_base64(image):
    return base64.b64encode(encode_png(image)).decode("utf-8")


def render_activation_map(key, size=(224, 224)):
    """Coloured activation map, deterministic per key (the image stem)."""
    rng = np.random.default_rng(seed_for(key))
    return colorize_heatmap(synthesize_heatmap(size, rng))


def overlay_activation_map(image, activation_map, alpha=0.5):
    """Blend an activation map (PIL image or encoded bytes) onto ``image``."""
    if isinstance(activation_map, (bytes, bytearray)):
        activation_map = Image.open(io.BytesIO(activation_map))
    activation_map = activation_map.convert("RGB").resize(image.size)
    return Image.blend(image.convert("RGB"), activation_map, alpha)
