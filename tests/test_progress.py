"""Tests for progress strategies."""
import pytest

from futureself.models import PluginConfig
from futureself.progress import (
    FixedStepProgress,
    LinearEstimateProgress,
    TransferProgress,
    make_preview_strategy,
    make_progress_strategy,
)


class TestLinearEstimateProgress:
    def test_default_step(self):
        strategy = LinearEstimateProgress()
        # 10s estimate / 100ms ticks = 100 updates of 1%
        assert strategy.step == 1
        assert strategy.interval == pytest.approx(0.1)

    def test_step_rounds_up(self):
        strategy = LinearEstimateProgress(estimated_ms=3000, interval_ms=100)
        assert strategy.step == 4  # ceil(100 / 30)

    def test_clamped_to_total(self):
        strategy = LinearEstimateProgress(estimated_ms=100, interval_ms=40)
        assert strategy.step == 34
        value = 0
        for _ in range(5):
            value = strategy.advance(value)
        assert value == 100

    def test_uses_timer(self):
        assert LinearEstimateProgress().uses_timer is True
        assert LinearEstimateProgress().completes_task is False


class TestFixedStepProgress:
    def test_steps_of_ten(self):
        strategy = FixedStepProgress()
        values = []
        value = 0
        for _ in range(12):
            value = strategy.advance(value)
            values.append(value)
        assert values[:10] == [10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
        assert values[-1] == 100
        assert strategy.interval == pytest.approx(0.5)
        assert strategy.completes_task is True


class TestTransferProgress:
    def test_maps_bytes_to_percent(self):
        strategy = TransferProgress()
        assert strategy.uses_timer is False
        assert strategy.on_transfer(0, 25, 100) == 25
        assert strategy.on_transfer(25, 100, 100) == 100

    def test_never_goes_backwards(self):
        strategy = TransferProgress()
        assert strategy.on_transfer(60, 10, 100) == 60

    def test_ignores_unknown_size_and_ticks(self):
        strategy = TransferProgress()
        assert strategy.on_transfer(5, 10, 0) == 5
        assert strategy.advance(5) == 5


class TestFactories:
    def test_simulated_is_default(self):
        strategy = make_progress_strategy(PluginConfig())
        assert isinstance(strategy, LinearEstimateProgress)

    def test_transfer_mode(self):
        strategy = make_progress_strategy(PluginConfig(progress_mode="transfer"))
        assert isinstance(strategy, TransferProgress)

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown progress mode"):
            make_progress_strategy(PluginConfig(progress_mode="psychic"))

    def test_preview_strategy_follows_config(self):
        strategy = make_preview_strategy(PluginConfig(preview_step=25, preview_interval_ms=10))
        assert strategy.step == 25
        assert strategy.interval_ms == 10
