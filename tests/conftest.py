"""
Shared fixtures: fake embedding providers and metric builders.
No test downloads a model or calls a hosted API.
"""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

import re
import time

import numpy as np
import pytest

from soap_metrics import config_loader
from soap_metrics.models import MetricResult

VOCAB = [
    "patient", "reports", "mild", "headache", "fever", "cough", "pain",
    "knee", "stable", "follow", "up", "weeks", "ibuprofen", "denies",
]


class BagOfWordsProvider:
    """Deterministic embedding: normalized counts over a fixed vocabulary."""

    def __init__(self):
        self.calls = 0

    def embed(self, text):
        self.calls += 1
        tokens = re.findall(r"[a-z]+", text.lower())
        vector = np.array([tokens.count(w) for w in VOCAB], dtype=float)
        # Unknown words still produce a non-zero vector
        vector = np.append(vector, 0.1)
        return vector / np.linalg.norm(vector)


class FailingProvider:
    def embed(self, text):
        raise RuntimeError("model failed to load")


class MismatchedProvider:
    """Dimensionality depends on the text, so pairs never line up."""

    def embed(self, text):
        return np.ones(len(text) + 1)


class SlowProvider:
    def __init__(self, delay=1.0):
        self.delay = delay

    def embed(self, text):
        time.sleep(self.delay)
        return np.ones(4)


class FixedProvider:
    """Returns preset vectors keyed by text."""

    def __init__(self, vectors):
        self.vectors = vectors

    def embed(self, text):
        return np.asarray(self.vectors[text], dtype=float)


@pytest.fixture
def bow_provider():
    return BagOfWordsProvider()


@pytest.fixture
def make_result():
    def _make(rouge1=0.0, rougeL=0.0, bleu=0.0, semantic=0.0, length_ratio=1.0):
        return MetricResult(rouge1=rouge1, rougeL=rougeL, bleu=bleu,
                            semantic=semantic, length_ratio=length_ratio)
    return _make


@pytest.fixture
def fresh_config():
    """Clear the config cache before and after a test that loads its own file."""
    config_loader._config_cache = None
    yield
    config_loader._config_cache = None
