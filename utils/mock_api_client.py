# utils/mock_api_client.py
import logging
import random

from utils.api_client import InferenceFailed
from utils.lesions import Sample
from utils.mock_inference import mock_predict
from utils.predictions import MalformedResponse, PredictionResult, decode_activation_map

logger = logging.getLogger(__name__)


# -----------------------
# In-process stand-in for PredictionClient
# -----------------------

class MockPredictionClient:
    """Answers like the inference backend without any network access."""

    def __init__(self, model_id=None, seed=None):
        self.model_id = model_id
        self._rng = random.Random(seed)

    def predict(self, sample: Sample, model_id=None) -> PredictionResult:
        return self.predict_image(sample.image_name, b"", model_id=model_id)

    def predict_image(self, filename, data=b"", model_id=None) -> PredictionResult:
        logger.info("Mock prediction for %s (model=%s)", filename, model_id or self.model_id)
        return PredictionResult.from_response(mock_predict(filename, rng=self._rng))

    def fetch_activation_map(self, result: PredictionResult):
        if not result.activation_map_base64:
            return None
        try:
            return decode_activation_map(result.activation_map_base64)
        except MalformedResponse as e:
            raise InferenceFailed(f"Could not load activation map: {e}") from e
