"""
Evaluation metrics for clinical notes.
Deterministic and fast lexical metrics plus the single-pair entry point.
"""

import math
from collections import Counter
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from .models import EvaluationInputError, MetricResult, TextPair
from .semantic_eval import SemanticEvaluator
from .tokenizer import tokenize, tokenize_for_bleu

BLEU_MAX_ORDER = 4


def _f1(overlap: float, gen_len: int, ref_len: int) -> float:
    if gen_len == 0 or ref_len == 0:
        return 0.0
    recall = overlap / ref_len
    precision = overlap / gen_len
    if precision + recall == 0:
        return 0.0
    # Membership overlap lets recall pass 1 when generated repeats reference tokens
    return min(1.0, 2 * precision * recall / (precision + recall))


def lcs_length(a: List[str], b: List[str]) -> int:
    """Length of the longest common subsequence of two token sequences."""
    # Rolling rows of the (len(a)+1) x (len(b)+1) DP table
    prev = [0] * (len(b) + 1)
    for i in range(1, len(a) + 1):
        curr = [0] * (len(b) + 1)
        for j in range(1, len(b) + 1):
            if a[i - 1] == b[j - 1]:
                curr[j] = prev[j - 1] + 1
            else:
                curr[j] = max(prev[j], curr[j - 1])
        prev = curr
    return prev[len(b)]


def calculate_rouge_scores(generated: str, reference: str) -> Dict[str, float]:
    """
    Calculate ROUGE-1 and ROUGE-L F1 between generated and reference text.

    ROUGE-1 overlap counts every generated token that occurs anywhere in the
    reference, so repeated tokens are not clipped against reference counts.
    """
    gen_tokens = tokenize(generated)
    ref_tokens = tokenize(reference)

    # Blank text splits into empty-string tokens only
    if not any(gen_tokens) or not any(ref_tokens):
        return {'rouge1': 0.0, 'rougeL': 0.0}

    ref_vocab = set(ref_tokens)
    overlap = sum(1 for t in gen_tokens if t in ref_vocab)
    lcs = lcs_length(gen_tokens, ref_tokens)

    return {
        'rouge1': _f1(overlap, len(gen_tokens), len(ref_tokens)),
        'rougeL': _f1(lcs, len(gen_tokens), len(ref_tokens))
    }


def count_ngrams(tokens: List[str], n: int) -> Counter:
    """Count n-grams of a token sequence, keyed by the space-joined tokens."""
    return Counter(' '.join(tokens[i:i + n]) for i in range(len(tokens) - n + 1))


def calculate_bleu_score(generated: str, reference: str) -> float:
    """
    Sentence BLEU-4 of generated against a single reference.

    Zero n-gram precisions are smoothed to 1 / (total + 1). The brevity
    penalty applies unless the candidate is strictly longer than the reference.
    """
    candidate = tokenize_for_bleu(generated)
    ref = tokenize_for_bleu(reference)

    if not candidate or not ref:
        return 0.0

    log_sum = 0.0
    for n in range(1, BLEU_MAX_ORDER + 1):
        cand_counts = count_ngrams(candidate, n)
        ref_counts = count_ngrams(ref, n)
        matches = sum(min(count, ref_counts[gram]) for gram, count in cand_counts.items())
        total = max(1, len(candidate) - n + 1)

        precision = matches / total
        if precision == 0:
            precision = 1 / (total + 1)
        log_sum += math.log(precision)

    if len(candidate) > len(ref):
        bp = 1.0
    else:
        bp = math.exp(1 - len(ref) / len(candidate))

    return bp * math.exp(log_sum / BLEU_MAX_ORDER)


def calculate_length_ratio(generated: str, reference: str) -> float:
    """Character length of generated over reference (reference floored at 1)."""
    return len(generated) / max(len(reference), 1)


def round_metric(value: float, decimals: int = 3) -> float:
    """Round half-up to a fixed number of decimals."""
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def evaluate_all(
    generated: str,
    reference: str,
    semantic_evaluator: Optional[SemanticEvaluator] = None,
    decimals: int = 3
) -> MetricResult:
    """
    Run all metrics on a single generated/reference pair.

    Args:
        generated: Machine-generated note
        reference: Human-written reference note
        semantic_evaluator: Scorer for embedding similarity (semantic is 0 without one)
        decimals: Places every metric is rounded to

    Returns:
        MetricResult with every field rounded
    """
    for name, text in (('generated', generated), ('reference', reference)):
        if not isinstance(text, str):
            raise EvaluationInputError(f"{name} note must be a string, got {type(text).__name__}")

    rouge = calculate_rouge_scores(generated, reference)
    bleu = calculate_bleu_score(generated, reference)
    semantic = semantic_evaluator.calculate_similarity(generated, reference) if semantic_evaluator else 0.0
    length_ratio = calculate_length_ratio(generated, reference)

    return MetricResult(
        rouge1=round_metric(rouge['rouge1'], decimals),
        rougeL=round_metric(rouge['rougeL'], decimals),
        bleu=round_metric(bleu, decimals),
        semantic=round_metric(semantic, decimals),
        length_ratio=round_metric(length_ratio, decimals)
    )


def evaluate_pair(
    pair: Union[TextPair, Dict[str, str]],
    semantic_evaluator: Optional[SemanticEvaluator] = None,
    decimals: int = 3
) -> MetricResult:
    """
    Validate a request and evaluate it.

    Missing or blank notes are rejected with EvaluationInputError before any
    scoring happens.
    """
    if not isinstance(pair, TextPair):
        try:
            pair = TextPair.model_validate(pair)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in e.errors()
            )
            raise EvaluationInputError(f"Generated note and reference note are required ({problems})") from e

    return evaluate_all(pair.generated, pair.reference, semantic_evaluator, decimals)
