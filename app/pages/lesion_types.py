import sys
from pathlib import Path

import streamlit as st
import pandas as pd

ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(ROOT))

from utils.lesions import MODELS, SAMPLES, LesionCode

st.set_page_config(page_title="Reference · Skin Lesion Classifier", layout="centered")

st.title("📚 Lesion Types & Models")
st.caption("The seven HAM10000 lesion categories and the classifiers available in the demo")

st.divider()

st.subheader("🩺 Lesion Types")

counts = pd.Series([s.true_label.value for s in SAMPLES]).value_counts()
st.table(pd.DataFrame(
    [
        {
            "Code": code.value,
            "Lesion type": code.display_name,
            "Model class name": code.class_name,
            "Samples": int(counts.get(code.value, 0)),
        }
        for code in LesionCode
    ]
))

st.divider()

st.subheader("🧠 Models")

st.table(pd.DataFrame(
    [{"Model": m.name, "ID": m.id, "UAR": m.uar, "Accuracy": m.accuracy} for m in MODELS]
))

st.markdown(
    """
    - **UAR** (unweighted average recall) averages recall over the seven classes,
      so rare lesion types count as much as common ones
    - **Accuracy** is dominated by the majority class (melanocytic nevi)
    """
)

st.caption("Predictions in this demo are for illustration only and are not a diagnosis.")
