"""
Embedding providers for semantic similarity.
Supports Gemini, OpenAI, and local SentenceTransformer.

A provider is constructed once by the host process and passed to the
semantic scorer. Its client or model is loaded on the first embed() call
and reused for the lifetime of the provider.
"""

import os
import threading
from enum import Enum
from typing import Dict, Optional, Type

import numpy as np

from .config_loader import load_config


class EmbeddingProviderKind(str, Enum):
    """Backends that can turn a note into a fixed-length vector."""
    LOCAL = "local"
    OPENAI = "openai"
    GEMINI = "gemini"

    @classmethod
    def parse(cls, value) -> "EmbeddingProviderKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown embeddings provider: {value} (expected one of: {valid})")


API_KEY_ENV_VARS = {
    EmbeddingProviderKind.OPENAI: 'OPENAI_API_KEY',
    EmbeddingProviderKind.GEMINI: 'GEMINI_API_KEY',
}


def get_embeddings_config() -> Dict:
    """Load embeddings config from config.yaml."""
    config = load_config()
    return config.get('embeddings', {})


def get_api_key(kind: EmbeddingProviderKind) -> str:
    """Get the API key for a hosted provider from env or config."""
    env_var = API_KEY_ENV_VARS[kind]
    key = os.getenv(env_var)
    if not key:
        key = load_config().get(f"{kind.value}_api_key", '')
    if not key:
        raise ValueError(
            f"{env_var} environment variable not set. "
            f"Set it via: export {env_var}='your-key' or create .env file"
        )
    return key


def cosine_similarity(v1: np.ndarray, v2: np.ndarray) -> float:
    """Compute cosine similarity between two vectors."""
    dot = np.dot(v1, v2)
    norm1 = np.linalg.norm(v1)
    norm2 = np.linalg.norm(v2)
    if norm1 == 0 or norm2 == 0:
        return 0.0
    return float(dot / (norm1 * norm2))


def l2_normalize(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return vector / norm


class EmbeddingProvider:
    """
    Base class for embedding backends.

    Subclasses implement _load() to build the client or model and
    _encode() to produce a raw vector for one text.
    """
    kind: EmbeddingProviderKind = None
    default_model: str = None

    def __init__(self, model: Optional[str] = None):
        self.model = model or self.default_model
        self._client = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._client is not None

    def _get_client(self):
        # Double-checked so concurrent first calls load the model only once
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = self._load()
        return self._client

    def load(self) -> "EmbeddingProvider":
        """Load the client or model now instead of on the first embed() call."""
        self._get_client()
        return self

    def _load(self):
        raise NotImplementedError

    def _encode(self, client, text: str):
        raise NotImplementedError

    def embed(self, text: str) -> np.ndarray:
        """Embed one text as an L2-normalized 1-D vector."""
        vector = np.asarray(self._encode(self._get_client(), text), dtype=np.float64)
        if vector.ndim != 1 or vector.size == 0:
            raise ValueError(f"{self.kind.value} returned a malformed embedding with shape {vector.shape}")
        if not np.all(np.isfinite(vector)):
            raise ValueError(f"{self.kind.value} returned a non-finite embedding")
        return l2_normalize(vector)

    def __repr__(self):
        return f"{type(self).__name__}(model={self.model!r})"


class LocalEmbeddingProvider(EmbeddingProvider):
    """Mean-pooled sentence embeddings from a local SentenceTransformer."""
    kind = EmbeddingProviderKind.LOCAL
    default_model = "all-MiniLM-L6-v2"

    def _load(self):
        from sentence_transformers import SentenceTransformer
        print(f"⏳ Loading embedding model: {self.model}...")
        return SentenceTransformer(self.model)

    def _encode(self, client, text: str):
        return client.encode(text, convert_to_numpy=True, normalize_embeddings=True)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embeddings from the OpenAI API."""
    kind = EmbeddingProviderKind.OPENAI
    default_model = "text-embedding-3-small"

    def _load(self):
        import openai
        # No client-side retries: a failed call should surface quickly
        return openai.OpenAI(api_key=get_api_key(self.kind), max_retries=0)

    def _encode(self, client, text: str):
        response = client.embeddings.create(model=self.model, input=[text])
        return response.data[0].embedding


class GeminiEmbeddingProvider(EmbeddingProvider):
    """Embeddings from the Google Gemini API."""
    kind = EmbeddingProviderKind.GEMINI
    default_model = "text-embedding-004"

    def _load(self):
        import google.generativeai as genai
        genai.configure(api_key=get_api_key(self.kind))
        return genai

    def _encode(self, client, text: str):
        result = client.embed_content(
            model=f"models/{self.model}",
            content=text,
            task_type="SEMANTIC_SIMILARITY"
        )
        return result['embedding']


PROVIDER_REGISTRY: Dict[EmbeddingProviderKind, Type[EmbeddingProvider]] = {
    EmbeddingProviderKind.LOCAL: LocalEmbeddingProvider,
    EmbeddingProviderKind.OPENAI: OpenAIEmbeddingProvider,
    EmbeddingProviderKind.GEMINI: GeminiEmbeddingProvider,
}


def create_embedding_provider(provider=None, model: str = None) -> EmbeddingProvider:
    """
    Build an embedding provider from arguments or config.yaml.

    Args:
        provider: "local", "openai", "gemini" or an EmbeddingProviderKind
            (default: from config)
        model: Model name (default: from config, else the provider's default)

    Returns:
        An unloaded provider; the model is fetched on first embed()
    """
    config = get_embeddings_config()

    if provider is None:
        provider = config.get('provider', EmbeddingProviderKind.LOCAL.value)
    kind = EmbeddingProviderKind.parse(provider)

    # The configured model only applies to the configured provider
    if model is None and str(config.get('provider', '')).lower() == kind.value:
        model = config.get('model')

    return PROVIDER_REGISTRY[kind](model=model)
