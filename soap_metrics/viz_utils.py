# -----------------------------------------------------------------------------
# SOAP Metrics Benchmark Charts
# -----------------------------------------------------------------------------

from pathlib import Path

import matplotlib.pyplot as plt
import seaborn as sns

from .leaderboard import Leaderboard
from .models import QUALITY_METRICS

# Style Settings
plt.style.use('seaborn-v0_8-whitegrid')
COLORS = sns.color_palette("viridis", 8)
WINNER_COLOR = '#f1c40f'

METRIC_LABELS = {
    'rouge1': 'ROUGE-1',
    'rougeL': 'ROUGE-L',
    'bleu': 'BLEU',
    'semantic': 'Semantic Sim'
}


def get_reports_dir():
    """Reports directory next to the package (project root / reports)."""
    return Path(__file__).parent.parent / "reports"


# -----------------------------------------------------------------------------
# 1. MODEL PERFORMANCE BENCHMARK
# -----------------------------------------------------------------------------
def plot_model_benchmark(leaderboard: Leaderboard, output_path=None) -> Path:
    """Grouped bar chart of the four quality metrics per model."""
    print("Generating Model Performance Benchmark...")

    df = leaderboard.to_dataframe().set_index('id')[list(QUALITY_METRICS)]
    df = df.rename(columns=METRIC_LABELS)

    ax = df.plot(kind='bar', figsize=(12, 7), color=COLORS[1::2][:len(QUALITY_METRICS)], width=0.8)

    plt.title('Model Performance Benchmark', fontsize=16, fontweight='bold', pad=20)
    plt.ylabel('Score', fontsize=12)
    plt.xlabel('Model', fontsize=12)
    plt.ylim(0, 1.05)
    plt.xticks(rotation=30, ha='right')
    plt.legend(title='Metric', bbox_to_anchor=(1.02, 1), loc='upper left')

    for c in ax.containers:
        ax.bar_label(c, fmt='%.2f', fontsize=8)

    plt.tight_layout()
    if output_path is None:
        output_path = get_reports_dir() / "model_benchmark.png"
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150)
    plt.close()
    return output_path


# -----------------------------------------------------------------------------
# 2. COMPOSITE RANKING
# -----------------------------------------------------------------------------
def plot_composite_ranking(leaderboard: Leaderboard, output_path=None) -> Path:
    """Horizontal bars of composite score, winner highlighted."""
    print("Generating Composite Ranking...")

    ids = [e.id for e in leaderboard.entries]
    scores = [e.composite_score for e in leaderboard.entries]
    colors = [WINNER_COLOR if i == 0 else COLORS[2] for i in range(len(ids))]

    fig, ax = plt.subplots(figsize=(10, max(3, 0.6 * len(ids) + 1.5)))
    # Best model on top
    bars = ax.barh(ids[::-1], scores[::-1], color=colors[::-1])
    ax.bar_label(bars, fmt='%.3f', padding=3, fontsize=9)

    ax.set_xlim(0, 1.05)
    ax.set_xlabel('Composite Score (mean of ROUGE-1, ROUGE-L, BLEU, Semantic)', fontsize=11)
    ax.set_title('Composite Ranking', fontsize=16, fontweight='bold', pad=20)

    plt.tight_layout()
    if output_path is None:
        output_path = get_reports_dir() / "composite_ranking.png"
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path


def run_dashboard(leaderboard: Leaderboard, reports_dir=None):
    """Render every chart for a leaderboard into reports_dir."""
    reports_dir = Path(reports_dir) if reports_dir else get_reports_dir()
    if not leaderboard.entries:
        print("⚠️  Leaderboard is empty, no charts generated.")
        return []
    return [
        plot_model_benchmark(leaderboard, reports_dir / "model_benchmark.png"),
        plot_composite_ranking(leaderboard, reports_dir / "composite_ranking.png"),
    ]
