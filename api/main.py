# main.py
import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import FastAPI, UploadFile, File, HTTPException
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

# ----------------------------
# Path setup
# ----------------------------
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from utils import config
from utils.activation_map import encode_png, render_activation_map
from utils.lesions import MODELS, MODELS_BY_ID
from utils.mock_inference import mock_predict

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

MOCK_LATENCY = config.MOCK_LATENCY
ACTIVATION_MAP_FORMAT = config.ACTIVATION_MAP_FORMAT


class PredictionResponse(BaseModel):
    predicted_class_index: int
    predicted_class_name: str
    confidence: float
    all_class_probabilities: Dict[str, float]
    activation_map: Optional[str] = None
    activation_map_base64: Optional[str] = None


class ModelEntry(BaseModel):
    id: str
    name: str
    UAR: str
    accuracy: str


# ----------------------------
# FastAPI app
# ----------------------------
app = FastAPI(title="Skin Lesion Classifier API")

# ----------------------------
# Health check
# ----------------------------
@app.get("/")
def health():
    return {
        "status": "ok",
        "models": [m.id for m in MODELS],
    }


@app.get("/models", response_model=List[ModelEntry])
def list_models():
    return [ModelEntry(id=m.id, name=m.name, UAR=m.uar, accuracy=m.accuracy) for m in MODELS]

# ----------------------------
# Prediction endpoint
# ----------------------------
@app.post(
    "/predict/{model_id}",
    response_model=PredictionResponse,
    response_model_exclude_none=True,
)
async def predict(model_id: str, file: UploadFile = File(...)):
    if model_id not in MODELS_BY_ID:
        raise HTTPException(status_code=404, detail=f"Unknown model: {model_id}")
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded.")

    try:
        data = await file.read()
        if not data:
            raise HTTPException(status_code=400, detail="Uploaded file is empty.")

        # Simulate model processing time
        low, high = MOCK_LATENCY
        await asyncio.sleep(random.uniform(low, high))

        prediction = mock_predict(file.filename, activation_map=ACTIVATION_MAP_FORMAT)
        logger.info(
            "Predicted %s for %s with %s (confidence %.3f)",
            prediction["predicted_class_name"],
            file.filename,
            model_id,
            prediction["confidence"],
        )
        return prediction

    except HTTPException:
        raise
    except Exception:
        logger.exception("Prediction failed for %s", file.filename)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to process image"},
        )

# ----------------------------
# Activation map images (URL form of the overlay)
# ----------------------------
@app.get("/activation-maps/{image_name}")
def activation_map(image_name: str):
    image = render_activation_map(Path(image_name).stem)
    return Response(content=encode_png(image), media_type="image/png")
