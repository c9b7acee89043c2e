"""
Data model for note evaluation: input pair, per-pair metrics, input errors.
"""

from dataclasses import dataclass, asdict
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


QUALITY_METRICS = ('rouge1', 'rougeL', 'bleu', 'semantic')


class EvaluationInputError(ValueError):
    """Raised when the generated or reference note is missing or unusable."""


class TextPair(BaseModel):
    """A generated note and the human-written reference it is scored against."""
    model_config = ConfigDict(frozen=True)

    generated: str = Field(description="Machine-generated clinical note")
    reference: str = Field(description="Human-written reference note")

    @field_validator('generated', 'reference')
    @classmethod
    def _not_blank(cls, value: str, info) -> str:
        if not value.strip():
            raise ValueError(f"{info.field_name} note is empty")
        return value


@dataclass(frozen=True)
class MetricResult:
    """Scores for one generated/reference pair."""
    rouge1: float = 0.0
    rougeL: float = 0.0
    bleu: float = 0.0
    semantic: float = 0.0
    length_ratio: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
