"""
Semantic similarity evaluation using sentence embeddings.
Scores degrade to 0 when the embedding provider fails or times out.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Optional, Tuple

import numpy as np

from .embeddings import EmbeddingProvider, cosine_similarity, get_embeddings_config


class SemanticEvaluator:
    """Evaluate semantic similarity using an injected embedding provider."""

    def __init__(self, provider: EmbeddingProvider, timeout: Optional[float] = None, max_workers: int = 4):
        """
        Args:
            provider: Embedding provider owned by the caller; never re-created here
            timeout: Seconds allowed for embedding one pair (default: from config,
                None or 0 disables the limit)
            max_workers: Threads used to run embedding calls under the timeout
        """
        self.provider = provider
        if timeout is None:
            timeout = get_embeddings_config().get('timeout_seconds')
        self.timeout = timeout or None
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="embed") if self.timeout else None

    def _embed_pair(self, generated: str, reference: str) -> Tuple[np.ndarray, np.ndarray]:
        return self.provider.embed(generated), self.provider.embed(reference)

    def calculate_similarity(self, generated: str, reference: str) -> float:
        """Calculate cosine similarity between two texts, clamped to [0, 1]."""
        try:
            # Model loading is not bounded by the per-pair timeout
            load = getattr(self.provider, 'load', None)
            if load is not None:
                load()

            if self._executor is None:
                emb1, emb2 = self._embed_pair(generated, reference)
            else:
                future = self._executor.submit(self._embed_pair, generated, reference)
                emb1, emb2 = future.result(timeout=self.timeout)

            if emb1.shape != emb2.shape:
                raise ValueError(f"Embedding dimension mismatch: {emb1.shape} vs {emb2.shape}")

            similarity = cosine_similarity(emb1, emb2)
        except FutureTimeoutError:
            print(f"⚠️  Semantic score unavailable: embedding timed out after {self.timeout}s")
            return 0.0
        except Exception as e:
            print(f"⚠️  Semantic score unavailable: {type(e).__name__}: {e}")
            return 0.0

        if not np.isfinite(similarity):
            return 0.0
        return min(1.0, max(0.0, similarity))

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
