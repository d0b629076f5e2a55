from __future__ import annotations

from unittest import TestCase

from .models import Participant
from .standings import build_leaderboard, evaluate_win


def _players(*entries):
    return [Participant(id=pid, nickname=nick, score=score) for pid, nick, score in entries]


class LeaderboardTests(TestCase):
    def test_projection_orders_by_score_then_join_order(self):
        players = _players(("a", "Ann", 1.0), ("b", "Bo", 2.5), ("c", "Cy", 1.0))
        board = build_leaderboard(players)
        self.assertEqual(board, {"Bo": 2.5, "Ann": 1.0, "Cy": 1.0})
        self.assertEqual(list(board), ["Bo", "Ann", "Cy"])

    def test_is_idempotent(self):
        players = _players(("a", "Ann", 1.0), ("b", "Bo", 0.0))
        self.assertEqual(build_leaderboard(players), build_leaderboard(players))
        self.assertEqual(list(build_leaderboard(players)), list(build_leaderboard(players)))

    def test_participants_without_nickname_are_omitted(self):
        players = _players(("a", "Ann", 1.0), ("b", None, 5.0), ("c", "", 2.0))
        self.assertEqual(build_leaderboard(players), {"Ann": 1.0})


class WinEvaluatorTests(TestCase):
    def test_continue_below_target_and_round_limit(self):
        outcome = evaluate_win(_players(("a", "Ann", 9.5)), 7, 10, 20)
        self.assertFalse(outcome.ended)
        self.assertEqual(outcome.status, "continue")

    def test_target_score_ends_game(self):
        outcome = evaluate_win(_players(("a", "Ann", 3.0), ("b", "Bo", 10.0)), 12, 10, 20)
        self.assertTrue(outcome.ended)
        self.assertEqual(outcome.winner_id, "b")
        self.assertEqual(outcome.winning_score, 10.0)

    def test_target_score_takes_the_highest_scorer(self):
        outcome = evaluate_win(_players(("a", "Ann", 10.0), ("b", "Bo", 10.5)), 12, 10, 20)
        self.assertEqual(outcome.winner_id, "b")

    def test_round_limit_picks_highest_score(self):
        outcome = evaluate_win(_players(("a", "Ann", 3.0), ("b", "Bo", 4.5)), 20, 10, 20)
        self.assertTrue(outcome.ended)
        self.assertEqual(outcome.winner_id, "b")
        self.assertEqual(outcome.winning_score, 4.5)

    def test_round_limit_tie_goes_to_earliest_joined(self):
        outcome = evaluate_win(_players(("b", "Bo", 4.0), ("a", "Ann", 4.0), ("c", "Cy", 1.0)), 20, 10, 20)
        self.assertEqual(outcome.winner_id, "b")

        outcome = evaluate_win(_players(("a", "Ann", 4.0), ("b", "Bo", 4.0)), 20, 10, 20)
        self.assertEqual(outcome.winner_id, "a")

    def test_round_limit_without_participants_has_no_winner(self):
        outcome = evaluate_win([], 20, 10, 20)
        self.assertTrue(outcome.ended)
        self.assertIsNone(outcome.winner_id)
        self.assertIsNone(outcome.winning_score)
