# utils/view_state.py
"""Per-session state of the classifier page."""

import random
from dataclasses import dataclass, field
from typing import List, Optional

from utils.lesions import Sample
from utils.predictions import PredictionResult


@dataclass
class ViewState:
    """
    Gallery, selection and prediction state for one browser session.

    All changes go through the methods below so that selection and
    prediction are always reset together. Each selection change bumps a
    generation counter; ``begin_inference`` hands the current generation out
    as a ticket and ``complete_inference`` drops results whose ticket no
    longer matches.
    """

    display_images: List[Sample] = field(default_factory=list)
    selected_image: Optional[Sample] = None
    prediction: Optional[PredictionResult] = None
    selected_model_id: Optional[str] = None
    is_loading: bool = False
    show_analysis: bool = False
    show_activation_map: bool = False
    is_initialized: bool = False
    seed: Optional[int] = None
    generation: int = 0

    def __post_init__(self):
        self._rng = random.Random(self.seed)

    # ---------------- gallery ----------------

    def _draw(self, all_samples, count):
        shuffled = list(all_samples)
        self._rng.shuffle(shuffled)
        return shuffled[:max(count, 0)]

    def initialize_gallery(self, all_samples, count):
        if not self.is_initialized:
            self.display_images = self._draw(all_samples, count)
            self.is_initialized = True
        return self.display_images

    def reshuffle_gallery(self, all_samples, count):
        self.display_images = self._draw(all_samples, count)
        return self.display_images

    # ---------------- selection ----------------

    def select_sample(self, sample: Sample):
        self.selected_image = sample
        self.prediction = None
        self.show_analysis = True
        self.show_activation_map = False
        self.generation += 1

    def close_analysis(self):
        self.selected_image = None
        self.prediction = None
        self.show_analysis = False
        self.show_activation_map = False
        self.generation += 1

    def select_model(self, model_id: str):
        self.selected_model_id = model_id

    # ---------------- inference ----------------

    def begin_inference(self) -> int:
        self.is_loading = True
        return self.generation

    def complete_inference(self, result: Optional[PredictionResult], ticket: Optional[int] = None) -> bool:
        """Store ``result`` unless it is None or stale. Always clears loading."""
        self.is_loading = False
        if result is None:
            return False
        if ticket is not None and ticket != self.generation:
            return False
        self.prediction = result
        return True

    def toggle_activation_map(self, visible: bool):
        self.show_activation_map = bool(visible)
