# FILE: services/intent_classifier.py
"""
Bag-of-words intent classifier.

Trained once at import from the static seed set and shared by every
request; nothing mutates it afterwards, so concurrent reads need no lock.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from sklearn.feature_extraction.text import CountVectorizer
from sklearn.naive_bayes import MultinomialNB
from sklearn.pipeline import Pipeline

from configurations.config import INTENT_CONFIDENCE_THRESHOLD
from configurations.logging_config import get_logger
from core.intent import IntentType
from services.normalizer import normalize
from services.training_data import TRAINING_DATA

logger = get_logger("intent_classifier")

# Alphabetic tokens only: amounts and dates must not sway the intent
TOKEN_PATTERN = r"(?u)\b[^\W\d_]{2,}\b"


@dataclass(frozen=True)
class Classification:
    intent: IntentType
    confidence: float
    reason: Optional[str] = None


def build_model() -> Pipeline:
    """
    Word and word-pair counts into a multinomial naive Bayes model.
    Pairs separate commands that share a verb ("tambah goal" vs "tambah progress").
    A small smoothing constant keeps single-keyword messages decisive;
    uniform priors keep class sizes from biasing short inputs.
    """
    return Pipeline([
        ("vectorizer", CountVectorizer(lowercase=True, token_pattern=TOKEN_PATTERN, ngram_range=(1, 2))),
        ("classifier", MultinomialNB(alpha=0.01, fit_prior=False)),
    ])


class IntentClassifier:
    def __init__(
        self,
        training_data: Iterable[Tuple[str, str]] = TRAINING_DATA,
        threshold: float = INTENT_CONFIDENCE_THRESHOLD,
    ):
        rows = list(training_data)
        phrases = [str(normalize(phrase)) for phrase, _ in rows]
        labels = [IntentType(label).value for _, label in rows]

        self.threshold = threshold
        self._model = build_model()
        self._model.fit(phrases, labels)
        self._vectorizer = self._model.named_steps["vectorizer"]
        self._labels = [IntentType(label) for label in self._model.classes_]
        logger.info(f"Intent classifier trained on {len(rows)} phrases, {len(self._labels)} intents")

    def classify_with_confidence(self, text: str) -> Classification:
        normalized = str(normalize(text))

        if self._vectorizer.transform([normalized]).nnz == 0:
            return Classification(IntentType.UNKNOWN, 0.0, reason="no_known_terms")

        probabilities = self._model.predict_proba([normalized])[0]
        ranked = sorted(zip(probabilities, self._labels), key=lambda pair: pair[0], reverse=True)
        best_p, best_intent = ranked[0]

        if len(ranked) > 1 and math.isclose(best_p, ranked[1][0], rel_tol=1e-9, abs_tol=1e-12):
            return Classification(IntentType.UNKNOWN, float(best_p), reason="tie")
        if best_p < self.threshold:
            return Classification(IntentType.UNKNOWN, float(best_p), reason="low_confidence")
        return Classification(best_intent, float(best_p))

    def classify(self, text: str) -> IntentType:
        return self.classify_with_confidence(text).intent


# Process-wide singleton, trained at startup
CLASSIFIER = IntentClassifier()


def classify(text: str) -> IntentType:
    return CLASSIFIER.classify(text)
