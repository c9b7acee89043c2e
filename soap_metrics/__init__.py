"""
SOAP Metrics - Source Package
Score generated clinical notes against a reference and rank models.
"""

from .models import (
    TextPair,
    MetricResult,
    EvaluationInputError
)

from .eval_metrics import (
    evaluate_all,
    evaluate_pair
)

from .embeddings import (
    EmbeddingProvider,
    EmbeddingProviderKind,
    create_embedding_provider
)

from .semantic_eval import SemanticEvaluator

from .leaderboard import (
    Leaderboard,
    LeaderboardEntry,
    rank
)

from .config_loader import (
    load_config,
    reload_config
)


__all__ = [
    # Data model
    'TextPair',
    'MetricResult',
    'EvaluationInputError',
    # Evaluation
    'evaluate_all',
    'evaluate_pair',
    'SemanticEvaluator',
    # Embeddings
    'EmbeddingProvider',
    'EmbeddingProviderKind',
    'create_embedding_provider',
    # Leaderboard
    'Leaderboard',
    'LeaderboardEntry',
    'rank',
    # Config
    'load_config',
    'reload_config',
]
