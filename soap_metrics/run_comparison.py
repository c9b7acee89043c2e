#!/usr/bin/env python3
"""
Model comparison pipeline for SOAP Metrics.
Scores several generated notes against one reference note and ranks them.
"""

import os
import sys
import json
import argparse
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from tqdm import tqdm

from .config_loader import PROJECT_ROOT, load_config, get_evaluation_config
from .embeddings import create_embedding_provider
from .eval_metrics import evaluate_pair
from .leaderboard import Leaderboard, rank
from .models import QUALITY_METRICS, EvaluationInputError, TextPair
from .semantic_eval import SemanticEvaluator

Candidates = Union[Dict[str, str], Sequence[Tuple[str, str]]]


def get_results_file() -> Path:
    config = load_config()
    results_dir = config.get('output', {}).get('results_dir', 'results')
    return PROJECT_ROOT / results_dir / "model_comparison.json"


def load_note(path) -> str:
    """Read a note from a text file."""
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def parse_candidate(spec: str) -> Tuple[str, Path]:
    """Parse 'NAME=PATH' (or a bare PATH, named after the file stem)."""
    if '=' in spec:
        name, path = spec.split('=', 1)
        if not name.strip():
            raise EvaluationInputError(f"Candidate '{spec}' has an empty name")
        return name.strip(), Path(path)
    path = Path(spec)
    return path.stem, path


def compare_notes(
    reference: str,
    candidates: Candidates,
    semantic_evaluator: Optional[SemanticEvaluator] = None,
    max_workers: int = None,
    decimals: int = None,
    show_progress: bool = False
) -> Leaderboard:
    """
    Evaluate every candidate note against the reference and rank them.

    Args:
        reference: Human-written reference note
        candidates: Mapping or sequence of (id, generated note)
        semantic_evaluator: Shared semantic scorer (semantic is 0 without one)
        max_workers: Parallel evaluations (default: from config)
        decimals: Rounding for every metric (default: from config)
        show_progress: Display a tqdm progress bar

    Returns:
        Leaderboard in rank order
    """
    items = list(candidates.items()) if isinstance(candidates, dict) else list(candidates)

    seen = set()
    for candidate_id, _ in items:
        if candidate_id in seen:
            raise EvaluationInputError(f"Duplicate candidate id: {candidate_id}")
        seen.add(candidate_id)

    eval_config = get_evaluation_config()
    if max_workers is None:
        max_workers = eval_config.get('max_workers', 4)
    if decimals is None:
        decimals = eval_config.get('decimals', 3)

    def score(item):
        candidate_id, generated = item
        pair = {'generated': generated, 'reference': reference}
        return candidate_id, evaluate_pair(pair, semantic_evaluator, decimals)

    if max_workers > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(tqdm(executor.map(score, items), total=len(items),
                                desc="Evaluating", disable=not show_progress))
    else:
        results = [score(item) for item in tqdm(items, desc="Evaluating", disable=not show_progress)]

    return rank(results)


def build_results(leaderboard: Leaderboard, reference: str, provider_name: str = None) -> Dict:
    """JSON-ready results document for a leaderboard."""
    return {
        'summary': {
            'total_candidates': len(leaderboard),
            'winner': leaderboard.winner,
            'best': dict(leaderboard.best),
            'embeddings_provider': provider_name,
            'last_updated': datetime.now().isoformat()
        },
        'reference_length': len(reference),
        'leaderboard': leaderboard.to_records()
    }


def save_results(results: Dict, output_path) -> Path:
    """Save results atomically to JSON."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    temp_file = output_path.with_suffix('.tmp')
    with open(temp_file, 'w') as f:
        json.dump(results, f, indent=2)

    os.replace(temp_file, output_path)
    return output_path


def print_leaderboard(leaderboard: Leaderboard):
    print("\n" + "=" * 60)
    print("🏆 MODEL LEADERBOARD")
    print("=" * 60)

    if not leaderboard.entries:
        print("⚠️  No candidates evaluated.")
        return

    header = f"{'#':<3} {'Model':<24} {'R-1':>6} {'R-L':>6} {'BLEU':>6} {'Sem':>6} {'Len':>7} {'Score':>6}"
    print(header)
    print("-" * len(header))
    for position, entry in enumerate(leaderboard.entries, start=1):
        r = entry.result
        cells = []
        for metric in QUALITY_METRICS:
            mark = "*" if leaderboard.is_best_in_class(entry, metric) else " "
            cells.append(f"{getattr(r, metric):>5.3f}{mark}")
        print(f"{position:<3} {entry.id[:24]:<24} {' '.join(cells)} {r.length_ratio:>6.2f}x {entry.composite_score:>6.3f}")

    print("\n* best in class")
    print(f"🥇 Best Response: {leaderboard.winner}")


def run_comparison(
    reference_path,
    candidate_specs: List[str],
    provider: str = None,
    model: str = None,
    semantic: bool = True,
    output=None,
    csv_path=None,
    charts: bool = False
) -> Leaderboard:
    """Load notes from disk, compare them, report and save the leaderboard."""
    print("=" * 60)
    print("🚀 STARTING MODEL COMPARISON")
    print("=" * 60)

    reference = load_note(reference_path)
    candidates = []
    for spec in candidate_specs:
        name, path = parse_candidate(spec)
        candidates.append((name, load_note(path)))
    print(f"📋 Queued {len(candidates)} candidate notes against {reference_path}")

    # Fail on bad input before the embedding model is loaded
    for name, generated in candidates:
        try:
            TextPair(generated=generated, reference=reference)
        except ValueError as e:
            raise EvaluationInputError(f"Candidate '{name}': {e}") from e

    semantic_evaluator = None
    provider_name = None
    if semantic:
        embedding_provider = create_embedding_provider(provider, model)
        provider_name = f"{embedding_provider.kind.value}/{embedding_provider.model}"
        semantic_evaluator = SemanticEvaluator(embedding_provider)
        print(f"🧠 Embeddings: {provider_name}")
        try:
            embedding_provider.load()
        except Exception as e:
            print(f"⚠️  Embedding model failed to load, semantic scores will be 0: {type(e).__name__}: {e}")

    try:
        leaderboard = compare_notes(reference, candidates, semantic_evaluator, show_progress=True)
    finally:
        if semantic_evaluator is not None:
            semantic_evaluator.close()

    print_leaderboard(leaderboard)

    output = Path(output) if output else get_results_file()
    save_results(build_results(leaderboard, reference, provider_name), output)
    print(f"\nResults saved to: {output}")

    if csv_path:
        df = leaderboard.to_dataframe()
        df['best_in'] = df['best_in'].apply(lambda metrics: ';'.join(metrics))
        df.to_csv(csv_path, index=False)
        print(f"Table exported to: {csv_path}")

    if charts:
        from .viz_utils import run_dashboard
        for chart in run_dashboard(leaderboard):
            print(f"📈 Chart saved: {chart}")

    return leaderboard


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Compare generated SOAP notes against a reference note",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  soap-metrics-compare --reference ref.txt --candidate gpt4o=gpt4o.txt --candidate gemini=gemini.txt
  soap-metrics-compare --reference ref.txt --candidate notes/*.txt --no-semantic --csv table.csv
        """
    )
    parser.add_argument("--reference", required=True, help="Path to the reference note")
    parser.add_argument("--candidate", nargs='+', action='extend', required=True,
                        help="Generated note as NAME=PATH or PATH (name = file stem)")
    parser.add_argument("--provider", help="Embeddings provider: local, openai or gemini (default: config)")
    parser.add_argument("--model", help="Embeddings model name (default: config)")
    parser.add_argument("--no-semantic", action="store_true", help="Skip embedding similarity (semantic = 0)")
    parser.add_argument("--output", help="Results JSON path (default: results/model_comparison.json)")
    parser.add_argument("--csv", help="Also export the leaderboard as CSV")
    parser.add_argument("--charts", action="store_true", help="Generate benchmark charts in reports/")
    args = parser.parse_args(argv)

    try:
        run_comparison(
            args.reference,
            args.candidate,
            provider=args.provider,
            model=args.model,
            semantic=not args.no_semantic,
            output=args.output,
            csv_path=args.csv,
            charts=args.charts
        )
    except (EvaluationInputError, OSError) as e:
        print(f"❌ {e}")
        return 1
    except ValueError as e:
        # Unknown provider and similar configuration problems
        print(f"❌ Configuration error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
