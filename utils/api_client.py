# utils/api_client.py

import logging
import mimetypes
from pathlib import Path
from urllib.parse import urljoin

import requests

from utils import config
from utils.lesions import Sample, sample_path
from utils.predictions import MalformedResponse, PredictionResult, decode_activation_map

logger = logging.getLogger(__name__)


class InferenceFailed(Exception):
    """The inference backend could not produce a prediction."""


class PredictionClient:
    """POSTs sample images to the inference backend and parses its answer."""

    def __init__(self, base_url, model_id=None, samples_dir=None, timeout=None):
        self.base_url = base_url.rstrip("/")
        self.model_id = model_id or config.MODEL_ID
        self.samples_dir = Path(samples_dir or config.SAMPLES_DIR)
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT

    def endpoint(self, model_id=None):
        return f"{self.base_url}/predict/{model_id or self.model_id}"

    def read_sample(self, sample: Sample) -> bytes:
        path = sample_path(sample, self.samples_dir)
        try:
            return path.read_bytes()
        except OSError as e:
            raise InferenceFailed(f"Cannot read sample image {path}: {e}") from e

    def predict(self, sample: Sample, model_id=None) -> PredictionResult:
        return self.predict_image(sample.image_name, self.read_sample(sample), model_id=model_id)

    def predict_image(self, filename, data: bytes, model_id=None) -> PredictionResult:
        mimetype = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        files = {"file": (filename, data, mimetype)}
        url = self.endpoint(model_id)
        try:
            resp = requests.post(url, files=files, timeout=self.timeout)
            resp.raise_for_status()
            return PredictionResult.from_response(resp.json())
        except requests.RequestException as e:
            logger.warning("Prediction request to %s failed: %s", url, e)
            raise InferenceFailed(f"Prediction request failed: {e}") from e
        except ValueError as e:
            # MalformedResponse is a ValueError
            logger.warning("Malformed prediction response from %s: %s", url, e)
            raise InferenceFailed(f"Malformed prediction response: {e}") from e

    def fetch_activation_map(self, result: PredictionResult):
        """Encoded activation-map image for ``result``, or None if it has none."""
        try:
            if result.activation_map_base64:
                return decode_activation_map(result.activation_map_base64)
            if result.activation_map_url:
                url = urljoin(self.base_url + "/", result.activation_map_url)
                resp = requests.get(url, timeout=self.timeout)
                resp.raise_for_status()
                return resp.content
        except (requests.RequestException, MalformedResponse, TypeError) as e:
            # TypeError: a non-string URL reaching urljoin
            logger.warning("Could not load activation map: %s", e)
            raise InferenceFailed(f"Could not load activation map: {e}") from e
        return None
