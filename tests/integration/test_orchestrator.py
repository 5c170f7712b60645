"""
End-to-end tests for the scenario orchestrator.
"""

import json
import unittest

from mev_simulation.amm import PoolState, apply_swap
from mev_simulation.config_schema import SimulationConfig
from mev_simulation.constants import Scenario, SkipReason
from mev_simulation.interfaces import DeterministicRandomProvider
from mev_simulation.metrics import SimulationMetrics
from mev_simulation.simulation import (
    Orchestrator,
    SimulationSummary,
    TransactionDraw,
    run,
)
from mev_simulation.simulation.results import SimulationResults


def small_config(**overrides):
    values = dict(total_transactions=60, seed=7)
    values.update(overrides)
    return SimulationConfig(**values)


class TestOrchestratorRun(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.config = small_config()
        cls.metrics = SimulationMetrics()
        cls.results = run(cls.config, metrics=cls.metrics)

    def test_every_transaction_accounted_for(self):
        r = self.results
        skipped_unprotected = [s for s in r.skipped if s.scenario == Scenario.UNPROTECTED]
        skipped_protected = [s for s in r.skipped if s.scenario == Scenario.PROTECTED]
        self.assertEqual(len(r.unprotected_trades) + len(skipped_unprotected), 60)
        self.assertEqual(len(r.protected_trades) + len(skipped_protected), 60)

    def test_records_in_transaction_order(self):
        ids = [t.trade_id for t in self.results.unprotected_trades]
        self.assertEqual(ids, sorted(ids))

    def test_two_snapshots_per_transaction(self):
        snaps = self.results.pool_snapshots
        self.assertEqual(len(snaps), 120)
        for i in range(60):
            self.assertEqual(snaps[2 * i].transaction_id, i)
            self.assertEqual(snaps[2 * i].scenario, Scenario.UNPROTECTED)
            self.assertEqual(snaps[2 * i + 1].transaction_id, i)
            self.assertEqual(snaps[2 * i + 1].scenario, Scenario.PROTECTED)

    def test_protected_branch_starts_from_pre_transaction_pool(self):
        snaps = self.results.pool_snapshots
        protected = {t.trade_id: t for t in self.results.protected_trades}
        previous = PoolState(
            self.config.initial_pool_a, self.config.initial_pool_b, self.config.fee_bps
        )
        for i in range(60):
            replay = previous.copy()
            record = protected.get(i)
            if record is not None:
                apply_swap(replay, record.amount_in, record.a_to_b)
            snap = snaps[2 * i + 1]
            self.assertEqual((snap.reserve_a, snap.reserve_b), (replay.reserve_a, replay.reserve_b))

            unprotected = snaps[2 * i]
            previous = PoolState(unprotected.reserve_a, unprotected.reserve_b, self.config.fee_bps)

    def test_branches_share_transaction_draw(self):
        unprotected = {t.trade_id: t for t in self.results.unprotected_trades}
        for record in self.results.protected_trades:
            twin = unprotected.get(record.trade_id)
            if twin is None:
                continue
            self.assertEqual(record.amount_in, twin.amount_in)
            self.assertEqual(record.a_to_b, twin.a_to_b)
            self.assertEqual(record.trader.split("_")[1], twin.trader.split("_")[1])
            self.assertEqual(record.expected_out, twin.expected_out)

    def test_protected_trades_never_attacked(self):
        for record in self.results.protected_trades:
            self.assertFalse(record.was_attacked)
            self.assertEqual(record.loss, 0)

    def test_attacks_happen_and_cost_victims(self):
        summary = self.results.summary
        self.assertGreater(summary.attack_attempts, 0)
        self.assertGreater(summary.successful_attacks, 0)
        self.assertGreater(summary.total_victim_losses, 0)
        for outcome in self.results.sandwiches:
            if outcome.success:
                self.assertGreater(outcome.victim_loss, 0)

    def test_victim_losses_match_attacked_records(self):
        attacked_loss = sum(
            t.loss for t in self.results.unprotected_trades if t.was_attacked
        )
        self.assertEqual(attacked_loss, self.results.summary.total_victim_losses)
        unattacked = [t for t in self.results.unprotected_trades if not t.was_attacked]
        self.assertTrue(all(t.loss == 0 for t in unattacked))

    def test_summary_is_full_aggregation(self):
        r = self.results
        self.assertEqual(
            r.summary,
            SimulationSummary.from_records(
                r.unprotected_trades, r.protected_trades, r.sandwiches, r.skipped
            ),
        )
        self.assertEqual(r.summary.total_transactions, len(r.unprotected_trades))
        self.assertEqual(r.summary.total_protected_savings, r.summary.total_victim_losses)
        self.assertEqual(
            r.summary.total_volume, sum(t.amount_in for t in r.unprotected_trades)
        )

    def test_metrics_follow_results(self):
        self.assertEqual(
            self.metrics.get_sample("mev_sim_transactions_total", {"scenario": "unprotected"}),
            len(self.results.unprotected_trades),
        )
        self.assertEqual(
            self.metrics.get_sample("mev_sim_commit_reveal_total", {"outcome": "revealed"}),
            len(self.results.protected_trades),
        )

    def test_serialization(self):
        data = json.loads(self.results.to_json())
        self.assertEqual(data["config"]["total_transactions"], 60)
        self.assertEqual(data["seed"], 7)
        self.assertEqual(len(data["unprotected_trades"]), len(self.results.unprotected_trades))
        self.assertEqual(data["pool_snapshots"][0]["scenario"], "unprotected")
        self.assertIn("success", data["sandwiches"][0])
        self.assertEqual(
            data["summary"]["attack_attempts"], self.results.summary.attack_attempts
        )


class TestOrchestratorBehaviour(unittest.TestCase):
    def test_same_seed_same_results(self):
        first = run(small_config(total_transactions=30))
        second = run(small_config(total_transactions=30))
        self.assertEqual(first.summary, second.summary)
        self.assertEqual(first.pool_snapshots, second.pool_snapshots)

    def test_no_attacks(self):
        results = run(small_config(total_transactions=30, attack_probability=0.0))
        self.assertEqual(results.sandwiches, [])
        self.assertEqual(results.summary.attack_attempts, 0)
        self.assertEqual(results.summary.total_mev_extracted, 0)
        self.assertTrue(all(not t.was_attacked for t in results.unprotected_trades))
        self.assertEqual(results.summary.unprotected_total_loss, 0)

    def test_always_attack(self):
        results = run(small_config(total_transactions=30, attack_probability=1.0))
        self.assertEqual(results.summary.attack_attempts, len(results.unprotected_trades))

    def test_traders_without_funds_are_skipped(self):
        results = run(
            small_config(total_transactions=10, trader_balance_a=0, trader_balance_b=0)
        )
        self.assertEqual(results.unprotected_trades, [])
        self.assertEqual(results.protected_trades, [])
        self.assertEqual(len(results.skipped), 20)
        self.assertTrue(
            all(s.reason == SkipReason.INSUFFICIENT_BALANCE for s in results.skipped)
        )
        self.assertEqual(results.summary.total_transactions, 0)
        self.assertEqual(results.summary.avg_trade_amount, 0.0)

    def test_amounts_below_commit_minimum_skip_protected_branch(self):
        results = run(
            small_config(total_transactions=5, min_swap_amount=1_000, max_swap_amount=10_000)
        )
        self.assertEqual(results.protected_trades, [])
        self.assertTrue(
            all(
                s.reason == SkipReason.COMMIT_REJECTED
                for s in results.skipped
                if s.scenario == Scenario.PROTECTED
            )
        )
        self.assertEqual(len(results.unprotected_trades), 5)

    def test_step_with_explicit_draw(self):
        orchestrator = Orchestrator(small_config(total_transactions=1))
        results = SimulationResults(config=orchestrator.config)
        draw = TransactionDraw(amount=10_000_000_000, a_to_b=True, trader_index=0, attack=True)

        orchestrator.step(0, draw, results)

        self.assertEqual(len(results.sandwiches), 1)
        self.assertTrue(results.sandwiches[0].success)
        self.assertTrue(results.unprotected_trades[0].was_attacked)
        self.assertFalse(results.protected_trades[0].was_attacked)
        self.assertGreater(
            results.unprotected_trades[0].loss, results.protected_trades[0].loss
        )
        # live pool carries the unprotected timeline forward
        live = orchestrator.pool.state
        unprotected_snap = orchestrator.pool.history[0]
        self.assertEqual(
            (live.reserve_a, live.reserve_b),
            (unprotected_snap.reserve_a, unprotected_snap.reserve_b),
        )

    def test_reveal_happens_after_commit_slot(self):
        orchestrator = Orchestrator(small_config(total_transactions=3, reveal_delay_slots=2))
        results = orchestrator.run()
        for record in results.protected_trades:
            twin = next(
                t for t in results.unprotected_trades if t.trade_id == record.trade_id
            )
            self.assertEqual(record.slot - twin.slot, 2)

    def test_reset_allows_rerun(self):
        orchestrator = Orchestrator(small_config(total_transactions=20))
        first = orchestrator.run()
        orchestrator.reset()
        second = orchestrator.run()
        self.assertEqual(first.summary, second.summary)

    def test_injected_random_provider(self):
        config = small_config(total_transactions=15, seed=None)
        first = run(config, random_provider=DeterministicRandomProvider(99))
        second = run(config, random_provider=DeterministicRandomProvider(99))
        self.assertEqual(first.summary, second.summary)


if __name__ == "__main__":
    unittest.main()
