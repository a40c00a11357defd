# ======================================================
# Skin Lesion Classifier — Sample Gallery & Model Demo
# ======================================================

import io
import logging
import sys
from pathlib import Path

import streamlit as st
from streamlit.errors import StreamlitAPIException
import pandas as pd
from PIL import Image, ImageOps

# ======================================================
# PATHS
# ======================================================
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from utils import config
from utils.activation_map import overlay_activation_map
from utils.api_client import InferenceFailed, PredictionClient
from utils.mock_api_client import MockPredictionClient
from utils.lesions import MODELS, MODELS_BY_ID, SAMPLES, LesionCode, sample_path
from utils.predictions import (
    class_name_for,
    format_percent,
    is_correct,
    normalized_confidence,
    predicted_code,
    sorted_class_probabilities,
)
from utils.view_state import ViewState

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


def _secret_backend_url():
    try:
        return st.secrets.get("LESION_BACKEND_URL")
    except (FileNotFoundError, StreamlitAPIException):
        return None


# URL of the inference backend (env var first, then Streamlit secrets)
BACKEND_URL = config.BACKEND_URL or _secret_backend_url()

# ======================================================
# STREAMLIT CONFIG
# ======================================================
st.set_page_config(page_title="Skin Lesion Classifier", layout="wide")

# ======================================================
# SESSION STATE
# ======================================================
if "view_state" not in st.session_state:
    st.session_state.view_state = ViewState(
        seed=config.GALLERY_SEED,
        selected_model_id=config.MODEL_ID,
    )
if "inference_ticket" not in st.session_state:
    st.session_state.inference_ticket = None

state: ViewState = st.session_state.view_state
state.initialize_gallery(SAMPLES, config.GALLERY_SIZE)

# ======================================================
# HELPERS
# ======================================================
@st.cache_resource
def get_client(backend_url):
    if backend_url:
        return PredictionClient(backend_url, samples_dir=config.SAMPLES_DIR)
    return MockPredictionClient()


def load_sample_image(sample):
    """Load a sample image with EXIF orientation applied, or None if the asset is missing."""
    path = sample_path(sample, config.SAMPLES_DIR)
    if not path.exists():
        return None
    img = Image.open(path)
    img = ImageOps.exif_transpose(img)
    return img.convert("RGB")


def start_inference():
    st.session_state.inference_ticket = state.begin_inference()


def run_inference(client):
    """Run the pending inference request for the current selection."""
    ticket = st.session_state.inference_ticket
    sample = state.selected_image
    result = None
    try:
        with st.spinner("Analyzing..."):
            result = client.predict(sample, model_id=state.selected_model_id)
    except InferenceFailed as e:
        logger.warning("Inference failed for %s: %s", sample.image_name, e)
        st.session_state.inference_error = str(e)
    finally:
        st.session_state.inference_ticket = None
        if not state.complete_inference(result, ticket) and result is not None:
            logger.info("Discarded stale prediction for %s", sample.image_name)


def discard_stale_inference():
    """Drop a pending run whose selection was closed or replaced before it started."""
    ticket = st.session_state.inference_ticket
    if ticket is not None and ticket != state.generation:
        st.session_state.inference_ticket = None
        state.complete_inference(None, ticket)


@st.cache_data(show_spinner=False)
def load_activation_map(backend_url, map_url, map_base64, _prediction):
    """Activation-map bytes, fetched once per map rather than on every rerun."""
    return client.fetch_activation_map(_prediction)


def model_label(model_id):
    m = MODELS_BY_ID[model_id]
    return f"{m.name} — UAR: {m.uar} · Accuracy: {m.accuracy}"


client = get_client(BACKEND_URL)
discard_stale_inference()

# ======================================================
# HEADER
# ======================================================
st.title("🔬 Skin Lesion Classifier")
st.caption(
    "AI-powered dermatological image analysis for lesion type classification. "
    "Select a sample image to see the model prediction."
)

if not BACKEND_URL:
    st.info("No inference backend configured — predictions come from the built-in mock model.")

# ======================================================
# GALLERY VIEW
# ======================================================
if not state.show_analysis:
    head, action = st.columns([4, 1])
    head.subheader("🖼️ Sample Images")
    action.button(
        "🔀 Shuffle",
        on_click=state.reshuffle_gallery,
        args=(SAMPLES, config.GALLERY_SIZE),
    )

    if not state.display_images:
        st.write("Loading images...")

    cols = st.columns(6)
    for i, sample in enumerate(state.display_images):
        with cols[i % len(cols)]:
            img = load_sample_image(sample)
            if img is not None:
                st.image(img, width="stretch")
            else:
                st.caption(f"({sample.image_name} not found)")
            st.button(
                f"Analyze {sample.image_name}",
                key=f"select-{sample.image_name}",
                on_click=state.select_sample,
                args=(sample,),
            )

# ======================================================
# ANALYSIS VIEW
# ======================================================
elif state.selected_image is not None:
    sample = state.selected_image
    prediction = state.prediction

    head, action = st.columns([4, 1])
    head.subheader("🔍 Analysis")
    action.button("✖ Close", on_click=state.close_analysis)

    left, right = st.columns(2)

    # ---------------- selected image ----------------
    with left:
        st.markdown("**Selected Image**")
        img = load_sample_image(sample)

        if prediction is not None:
            visible = st.toggle(
                "Activation Map",
                value=state.show_activation_map,
                key=f"activation-map-{state.generation}",
            )
            state.toggle_activation_map(visible)

        shown = img
        if state.show_activation_map and prediction is not None and prediction.has_activation_map:
            alpha = st.slider("Overlay intensity", 0.2, 0.9, 0.6, 0.05)
            try:
                activation = load_activation_map(
                    BACKEND_URL,
                    prediction.activation_map_url,
                    prediction.activation_map_base64,
                    prediction,
                )
            except InferenceFailed as e:
                st.error(f"Activation map unavailable: {e}")
                activation = None
            if activation is not None:
                try:
                    if img is not None:
                        shown = overlay_activation_map(img, activation, alpha)
                    else:
                        decoded = Image.open(io.BytesIO(activation))
                        decoded.load()
                        shown = decoded
                except OSError as e:
                    # covers PIL.UnidentifiedImageError
                    logger.warning("Unreadable activation map for %s: %s", sample.image_name, e)
                    st.error("Activation map unavailable: the image could not be decoded.")

        if shown is not None:
            st.image(shown, width="stretch")
        else:
            st.warning(f"Sample image {sample.image_name} is missing from {config.SAMPLES_DIR}.")

    # ---------------- ground truth & prediction ----------------
    with right:
        st.markdown("**Ground Truth**")
        st.markdown(f"`{sample.true_label.value}` — {sample.true_label.display_name}")

        model_ids = [m.id for m in MODELS]
        current = state.selected_model_id if state.selected_model_id in MODELS_BY_ID else model_ids[-1]
        chosen = st.selectbox(
            "Select AI Model",
            model_ids,
            index=model_ids.index(current),
            format_func=model_label,
            disabled=state.is_loading,
        )
        state.select_model(chosen)

        st.button(
            "⏳ Analyzing..." if state.is_loading else "▶️ Run Model",
            on_click=start_inference,
            disabled=state.is_loading,
            width="stretch",
        )

        if state.is_loading and st.session_state.inference_ticket is not None:
            run_inference(client)
            st.rerun()

        error = st.session_state.pop("inference_error", None)
        if error:
            st.error(f"Prediction failed: {error}")

        st.markdown("**Model Prediction**")
        if prediction is None:
            st.caption('Click "Run Model" to get prediction')
        else:
            c1, c2 = st.columns(2)
            c1.markdown(f"`{predicted_code(prediction.predicted_class_name)}`")
            c2.write(prediction.predicted_class_name)
            c1.write("Confidence")
            c2.write(f"**{format_percent(normalized_confidence(prediction))}**")
            if is_correct(prediction, sample):
                st.success("Correct")
            else:
                st.error("Incorrect")

            st.markdown("**Class Probabilities**")
            for key, probability in sorted_class_probabilities(prediction):
                name = class_name_for(key)
                st.write(f"`{predicted_code(name)}` {name} — {format_percent(probability)}")
                st.progress(min(max(probability, 0.0), 1.0))

    # ---------------- reference ----------------
    with st.expander("📚 Lesion Types Reference", expanded=False):
        st.table(pd.DataFrame(
            [{"Code": code.value, "Lesion type": code.display_name} for code in LesionCode]
        ))
