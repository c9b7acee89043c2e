"""
Tests for composite scoring, ranking and best-in-class detection.
"""

import pytest

from soap_metrics.leaderboard import Leaderboard, composite_score, length_flag, rank


def uniform(make_result, value, length_ratio=1.0):
    return make_result(value, value, value, value, length_ratio)


class TestCompositeScore:

    def test_mean_of_quality_metrics(self, make_result):
        result = make_result(rouge1=0.8, rougeL=0.6, bleu=0.2, semantic=1.0)
        assert composite_score(result) == pytest.approx(0.65)

    def test_length_ratio_excluded(self, make_result):
        short = make_result(0.5, 0.5, 0.5, 0.5, length_ratio=0.1)
        long = make_result(0.5, 0.5, 0.5, 0.5, length_ratio=9.0)
        assert composite_score(short) == composite_score(long)


class TestRank:

    def test_ties_keep_input_order(self, make_result):
        board = rank([
            ("gpt-4o", uniform(make_result, 0.9)),
            ("gemini-pro", uniform(make_result, 0.7)),
            ("local-t5", uniform(make_result, 0.9)),
        ])
        assert [e.id for e in board.entries] == ["gpt-4o", "local-t5", "gemini-pro"]
        assert board.winner == "gpt-4o"

    def test_sorted_descending(self, make_result):
        board = rank([(str(i), uniform(make_result, v)) for i, v in enumerate([0.1, 0.5, 0.3, 0.9])])
        scores = [e.composite_score for e in board.entries]
        assert scores == sorted(scores, reverse=True)
        assert board.winner == "3"

    def test_accepts_mappings(self, make_result):
        board = rank([{"id": "a", "result": uniform(make_result, 0.2)},
                      {"id": "b", "result": uniform(make_result, 0.4)}])
        assert board.winner == "b"
        assert len(board) == 2

    def test_best_values(self, make_result):
        board = rank([
            ("a", make_result(rouge1=0.9, rougeL=0.1, bleu=0.3, semantic=0.5)),
            ("b", make_result(rouge1=0.2, rougeL=0.8, bleu=0.3, semantic=0.4)),
        ])
        assert board.best == {"rouge1": 0.9, "rougeL": 0.8, "bleu": 0.3, "semantic": 0.5}

        a, b = sorted(board.entries, key=lambda e: e.id)
        assert board.is_best_in_class(a, "rouge1")
        assert not board.is_best_in_class(b, "rouge1")
        assert board.is_best_in_class(b, "rougeL")
        # Shared maximum: both are best
        assert board.is_best_in_class(a, "bleu") and board.is_best_in_class(b, "bleu")

    def test_zero_maximum_is_never_best(self, make_result):
        board = rank([("a", make_result()), ("b", make_result())])
        assert board.best["bleu"] == 0.0
        assert not any(board.is_best_in_class(e, "bleu") for e in board.entries)

    def test_empty(self):
        board = rank([])
        assert isinstance(board, Leaderboard)
        assert board.entries == ()
        assert board.winner is None
        assert board.best == {"rouge1": 0.0, "rougeL": 0.0, "bleu": 0.0, "semantic": 0.0}
        assert board.to_dataframe().empty

    def test_best_is_read_only(self, make_result):
        board = rank([("a", make_result(bleu=0.4))])
        with pytest.raises(TypeError):
            board.best["bleu"] = 1.0
        assert board.best["bleu"] == 0.4

    def test_best_passed_as_dict_is_copied(self, make_result):
        best = {"bleu": 0.4}
        board = Leaderboard(best=best)
        best["bleu"] = 1.0
        assert board.best["bleu"] == 0.4
        with pytest.raises(TypeError):
            board.best["bleu"] = 1.0


class TestExport:

    def test_records(self, make_result):
        board = rank([
            ("a", make_result(rouge1=0.5, rougeL=0.5, bleu=0.1, semantic=0.6, length_ratio=1.05)),
            ("b", make_result(rouge1=0.7, rougeL=0.4, bleu=0.2, semantic=0.7, length_ratio=2.5)),
        ])
        records = board.to_records()
        assert [r["id"] for r in records] == ["b", "a"]
        assert records[0]["rank"] == 1 and records[0]["is_winner"]
        assert not records[1]["is_winner"]
        assert records[0]["best_in"] == ["rouge1", "bleu", "semantic"]
        assert records[1]["best_in"] == ["rougeL"]
        assert records[0]["length_flag"] == "long"
        assert records[1]["length_flag"] == "ok"

    def test_dataframe_columns(self, make_result):
        df = rank([("a", uniform(make_result, 0.5))]).to_dataframe()
        assert list(df.columns) == ["rank", "id", "rouge1", "rougeL", "bleu", "semantic",
                                    "length_ratio", "composite_score", "length_flag",
                                    "best_in", "is_winner"]
        assert df.loc[0, "composite_score"] == pytest.approx(0.5)

    @pytest.mark.parametrize("ratio,flag", [(1.0, "ok"), (1.1, "ok"), (0.9, "ok"),
                                            (0.5, "short"), (0.0, "short"), (1.5, "long")])
    def test_length_flag(self, ratio, flag):
        assert length_flag(ratio) == flag
