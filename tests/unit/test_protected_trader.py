"""
Tests for the commit-reveal protected trader.
"""

import unittest

from mev_simulation.actors import ProtectedTrader
from mev_simulation.amm import PoolState, calculate_min_output, quote
from mev_simulation.commitment import (
    Cancelled,
    Committed,
    NoCommitment,
    Revealed,
    SwapIntent,
    hash_intent,
)
from mev_simulation.constants import Scenario
from mev_simulation.exceptions import (
    AmountTooSmallError,
    CommitmentExistsError,
    CommitmentNotFoundError,
    HashMismatchError,
    InsufficientBalanceError,
    InvalidIntentError,
    RevealTooEarlyError,
    SlippageExceededError,
    SlippageTooHighError,
)
from mev_simulation.interfaces import SlotClock

RESERVE = 1_000_000_000_000
BALANCE = 50_000_000_000
AMOUNT = 1_000_000_000


class CountingNonceSource:
    def __init__(self):
        self.calls = 0

    def token_bytes(self, nbytes):
        self.calls += 1
        return self.calls.to_bytes(nbytes, "big")


class ProtectedTraderTestCase(unittest.TestCase):
    def setUp(self):
        self.clock = SlotClock()
        self.pool = PoolState(RESERVE, RESERVE, 30)
        self.trader = ProtectedTrader(
            "protected_0",
            BALANCE,
            BALANCE,
            clock=self.clock,
            nonce_source=CountingNonceSource(),
        )

    def commit_default(self):
        min_out = calculate_min_output(self.pool, AMOUNT, True, 100)
        return self.trader.try_commit(AMOUNT, min_out, 100, True)

    def assert_untouched(self):
        self.assertEqual(self.pool, PoolState(RESERVE, RESERVE, 30))
        self.assertEqual(self.trader.balance_a, BALANCE)
        self.assertEqual(self.trader.balance_b, BALANCE)


class TestCommit(ProtectedTraderTestCase):
    def test_commit_transitions_to_committed(self):
        digest = self.commit_default()

        state = self.trader.state
        self.assertIsInstance(state, Committed)
        self.assertEqual(state.commitment_hash, digest)
        self.assertEqual(hash_intent(state.intent), digest)
        self.assertEqual(state.created_at, 0)
        self.assertTrue(state.a_to_b)
        self.assertEqual(state.owner, "protected_0")
        self.assert_untouched()

    def test_second_commit_rejected_without_state_change(self):
        self.commit_default()
        before = self.trader.state

        with self.assertRaises(CommitmentExistsError):
            self.trader.try_commit(AMOUNT, 0, 100, False)
        self.assertIs(self.trader.state, before)
        self.assertIsNone(self.trader.commit(AMOUNT, 0, 100, False))
        self.assertIs(self.trader.state, before)

    def test_insufficient_balance(self):
        with self.assertRaises(InsufficientBalanceError):
            self.trader.try_commit(BALANCE + 1, 0, 100, True)
        self.assertIsNone(self.trader.commit(BALANCE + 1, 0, 100, True))
        self.assertIsInstance(self.trader.state, NoCommitment)

    def test_slippage_too_high(self):
        with self.assertRaises(SlippageTooHighError):
            self.trader.try_commit(AMOUNT, 0, 1_001, True)

    def test_amount_too_small(self):
        with self.assertRaises(AmountTooSmallError):
            self.trader.try_commit(999_999, 0, 100, True)

    def test_out_of_range_intent_rejected_without_state_change(self):
        for min_out, slippage in ((0, -1), (2**64, 100), (-1, 100)):
            with self.assertRaises(InvalidIntentError):
                self.trader.try_commit(AMOUNT, min_out, slippage, True)
            self.assertIsNone(self.trader.commit(AMOUNT, min_out, slippage, True))
            self.assertIsInstance(self.trader.state, NoCommitment)
        self.assert_untouched()

    def test_fresh_nonce_per_commit(self):
        first = self.commit_default()
        self.trader.cancel()
        second = self.commit_default()
        self.assertNotEqual(first, second)


class TestReveal(ProtectedTraderTestCase):
    def test_reveal_without_commitment(self):
        with self.assertRaises(CommitmentNotFoundError):
            self.trader.try_reveal(self.pool)
        self.assertIsNone(self.trader.reveal(self.pool))
        self.assert_untouched()

    def test_reveal_too_early(self):
        self.commit_default()
        committed = self.trader.state

        with self.assertRaises(RevealTooEarlyError) as ctx:
            self.trader.try_reveal(self.pool)
        self.assertEqual(ctx.exception.slots_waited, 0)
        self.assertEqual(ctx.exception.required, 1)
        self.assertIs(self.trader.state, committed)
        self.assert_untouched()

    def test_reveal_too_early_even_with_wrong_intent(self):
        self.commit_default()
        wrong = SwapIntent(AMOUNT, 0, 100, bytes(32))
        with self.assertRaises(RevealTooEarlyError):
            self.trader.try_reveal(self.pool, intent=wrong)

    def test_hash_mismatch_keeps_commitment(self):
        self.commit_default()
        committed = self.trader.state
        self.clock.advance()

        tampered = SwapIntent(
            AMOUNT + 1, committed.intent.min_out, 100, committed.intent.nonce
        )
        with self.assertRaises(HashMismatchError):
            self.trader.try_reveal(self.pool, intent=tampered)
        self.assertIs(self.trader.state, committed)
        self.assert_untouched()

        # the genuine payload still reveals
        record = self.trader.try_reveal(self.pool, intent=committed.intent)
        self.assertEqual(record.amount_in, AMOUNT)

    def test_retry_after_delay(self):
        self.commit_default()
        self.assertIsNone(self.trader.reveal(self.pool))
        self.clock.advance()
        self.assertIsNotNone(self.trader.reveal(self.pool))

    def test_successful_reveal(self):
        self.commit_default()
        self.clock.advance()
        expected = quote(self.pool, AMOUNT, True)

        record = self.trader.try_reveal(self.pool, trade_id=9)

        self.assertEqual(record.trade_id, 9)
        self.assertEqual(record.scenario, Scenario.PROTECTED)
        self.assertEqual(record.expected_out, expected.amount_out)
        self.assertEqual(record.actual_out, expected.amount_out)
        self.assertEqual(record.loss, 0)
        self.assertFalse(record.was_attacked)
        self.assertEqual(record.slot, 1)
        self.assertEqual(self.trader.balance_a, BALANCE - AMOUNT)
        self.assertEqual(self.trader.balance_b, BALANCE + expected.amount_out)
        self.assertEqual(self.pool.reserve_a, RESERVE + AMOUNT)
        self.assertIsInstance(self.trader.state, Revealed)
        self.assertFalse(self.trader.has_live_commitment)

    def test_expected_quoted_at_reveal_time(self):
        self.commit_default()
        self.clock.advance()
        # someone else trades in between; the quote reflects the new pool
        self.pool = PoolState(RESERVE + 1_000_000, RESERVE - 999_000, 30)
        expected = quote(self.pool, AMOUNT, True)
        record = self.trader.try_reveal(self.pool)
        self.assertEqual(record.expected_out, expected.amount_out)

    def test_min_out_enforced(self):
        self.trader.try_commit(AMOUNT, 10 * AMOUNT, 100, True)
        committed = self.trader.state
        self.clock.advance()

        with self.assertRaises(SlippageExceededError) as ctx:
            self.trader.try_reveal(self.pool)
        self.assertEqual(ctx.exception.expected_min, 10 * AMOUNT)
        self.assertIs(self.trader.state, committed)
        self.assert_untouched()

    def test_longer_delay(self):
        trader = ProtectedTrader(
            "slow", BALANCE, BALANCE, clock=self.clock, min_delay_slots=3
        )
        trader.try_commit(AMOUNT, 0, 100, True)
        self.clock.advance(2)
        with self.assertRaises(RevealTooEarlyError):
            trader.try_reveal(self.pool)
        self.clock.advance()
        self.assertIsNotNone(trader.reveal(self.pool))


class TestCancelAndConvenience(ProtectedTraderTestCase):
    def test_cancel_live_commitment(self):
        digest = self.commit_default()
        self.assertTrue(self.trader.cancel())
        self.assertIsInstance(self.trader.state, Cancelled)
        self.assertEqual(self.trader.state.commitment_hash, digest)
        with self.assertRaises(CommitmentNotFoundError):
            self.trader.try_reveal(self.pool)

    def test_cancel_without_commitment(self):
        self.assertFalse(self.trader.cancel())
        self.assertIsInstance(self.trader.state, NoCommitment)

    def test_execute_protected_trade(self):
        result = self.trader.execute_protected_trade(self.pool, AMOUNT, True, 100, trade_id=4)

        self.assertIsNotNone(result)
        self.assertEqual(result.slots_waited, 1)
        self.assertEqual(result.committed_at, 0)
        self.assertEqual(result.revealed_at, 1)
        self.assertEqual(len(result.commitment_hash), 64)
        self.assertEqual(result.record.trade_id, 4)
        self.assertFalse(result.record.was_attacked)

    def test_execute_protected_trade_rejected_commit(self):
        self.assertIsNone(
            self.trader.execute_protected_trade(self.pool, BALANCE + 1, True, 100)
        )
        self.assertIsInstance(self.trader.state, NoCommitment)
        self.assertEqual(self.clock.now(), 0)

    def test_reset(self):
        self.commit_default()
        self.trader.reset(1, 2)
        self.assertIsInstance(self.trader.state, NoCommitment)
        self.assertEqual((self.trader.balance_a, self.trader.balance_b), (1, 2))


if __name__ == "__main__":
    unittest.main()
