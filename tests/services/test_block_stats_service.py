"""
Tests for meowcoin_api/services/block_stats_service.py

Covers:
- aggregate_block_stats: windowing, classification, spacing filter, rounding
- fetch_block_sample: getblockhash + getblock
- scan_recent_blocks: sequential scan that skips failing heights
"""

import random

import pytest

from meowcoin_api.algorithms import AlgorithmKind
from meowcoin_api.exceptions import ConfigError, ProtocolError, TransportError, ValidationError
from meowcoin_api.services.block_stats_service import (
    AlgorithmStats,
    BlockSample,
    aggregate_block_stats,
    fetch_block_sample,
    scan_recent_blocks,
)

MEOWPOW = 0x30090000
SCRYPT = 0x30090100
UNKNOWN = 0x20000000


def _samples(times, version=MEOWPOW, start_height=100):
    return [BlockSample(height=start_height + i, time=t, version=version) for i, t in enumerate(times)]


# =============================================================================
# aggregate_block_stats (pure function)
# =============================================================================


class TestAggregateBlockStats:
    """Tests for aggregate_block_stats()."""

    def test_three_meowpow_blocks(self):
        """Happy path: spacings 100 and 200 average to 150."""
        stats = aggregate_block_stats(_samples([1000, 1100, 1300]), window_minutes=60, now_unix=1300)

        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(blocks_found=3, avg_block_time_seconds=150)
        assert stats[AlgorithmKind.SCRYPT] == AlgorithmStats(blocks_found=0, avg_block_time_seconds=None)

    def test_only_mined_algorithms_returned(self):
        """Happy path: result has MeowPow and Scrypt, never Unknown."""
        stats = aggregate_block_stats([], window_minutes=60, now_unix=0)
        assert set(stats) == {AlgorithmKind.MEOWPOW, AlgorithmKind.SCRYPT}

    def test_algorithms_are_partitioned(self):
        """Happy path: each algorithm is timed against its own blocks."""
        samples = _samples([1000, 1060, 1120], MEOWPOW) + _samples([1010, 1310], SCRYPT, start_height=200)

        stats = aggregate_block_stats(samples, window_minutes=60, now_unix=1400)

        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(3, 60)
        assert stats[AlgorithmKind.SCRYPT] == AlgorithmStats(2, 300)

    def test_low_byte_flags_still_classified(self):
        """Edge case: version-bit flags in the low byte do not matter."""
        samples = _samples([1000, 1100], MEOWPOW | 0x42)
        stats = aggregate_block_stats(samples, window_minutes=60, now_unix=1100)
        assert stats[AlgorithmKind.MEOWPOW].blocks_found == 2

    def test_unknown_versions_dropped(self):
        """Edge case: untagged blocks are not counted anywhere."""
        samples = _samples([1000, 1100, 1200], UNKNOWN)
        stats = aggregate_block_stats(samples, window_minutes=60, now_unix=1200)

        assert stats[AlgorithmKind.MEOWPOW].blocks_found == 0
        assert stats[AlgorithmKind.SCRYPT].blocks_found == 0

    def test_window_excludes_old_blocks(self):
        """Happy path: blocks older than the window are ignored."""
        now = 10_000
        samples = _samples([now - 601, now - 300, now - 60])

        stats = aggregate_block_stats(samples, window_minutes=10, now_unix=now)

        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(2, 240)

    def test_window_boundary_is_inclusive(self):
        """Edge case: a block exactly window_minutes old is kept."""
        now = 10_000
        samples = _samples([now - 600, now])

        stats = aggregate_block_stats(samples, window_minutes=10, now_unix=now)

        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(2, 600)

    def test_future_timestamps_kept(self):
        """Edge case: blocks timestamped after now are inside the window."""
        samples = _samples([1000, 1090])
        stats = aggregate_block_stats(samples, window_minutes=60, now_unix=1000)
        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(2, 90)

    def test_single_block_has_no_average(self):
        """Edge case: one block counts but has no spacing."""
        stats = aggregate_block_stats(_samples([1000]), window_minutes=60, now_unix=1000)
        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(1, None)

    def test_non_positive_spacing_excluded_but_counted(self):
        """Edge case: equal timestamps are excluded from the average only."""
        stats = aggregate_block_stats(_samples([1000, 1000, 1120]), window_minutes=60, now_unix=1200)
        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(3, 120)

    def test_hour_plus_spacing_excluded(self):
        """Edge case: a gap over 3600s is excluded, 3600 exactly is kept."""
        samples = _samples([0, 3601, 7201])
        stats = aggregate_block_stats(samples, window_minutes=24 * 60, now_unix=7201)
        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(3, 3600)

    def test_all_spacings_filtered_gives_no_average(self):
        """Edge case: blocks found but every gap implausible."""
        samples = _samples([1000, 1000, 1000])
        stats = aggregate_block_stats(samples, window_minutes=60, now_unix=1000)
        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(3, None)

    def test_average_rounds_half_up(self):
        """Edge case: 60.5 rounds to 61 (not banker's rounding to 60)."""
        samples = _samples([1000, 1060, 1121])
        stats = aggregate_block_stats(samples, window_minutes=60, now_unix=1200)
        assert stats[AlgorithmKind.MEOWPOW].avg_block_time_seconds == 61

    def test_average_rounds_down_below_half(self):
        """Edge case: 100.33 rounds to 100."""
        samples = _samples([0, 100, 200, 301])
        stats = aggregate_block_stats(samples, window_minutes=60, now_unix=301)
        assert stats[AlgorithmKind.MEOWPOW].avg_block_time_seconds == 100

    def test_order_independent(self):
        """Shuffled input gives the same result as sorted input."""
        samples = (
            _samples([1000, 1070, 1130, 1500, 1560], MEOWPOW)
            + _samples([1005, 1300, 1310, 1700], SCRYPT, start_height=300)
            + _samples([1100, 1200], UNKNOWN, start_height=400)
        )
        expected = aggregate_block_stats(samples, window_minutes=30, now_unix=1800)

        shuffled = list(samples)
        random.Random(7).shuffle(shuffled)

        assert aggregate_block_stats(shuffled, window_minutes=30, now_unix=1800) == expected
        assert aggregate_block_stats(list(reversed(samples)), window_minutes=30, now_unix=1800) == expected

    def test_accepts_generator(self):
        """Edge case: any iterable works."""
        stats = aggregate_block_stats(
            (s for s in _samples([1000, 1100])), window_minutes=60, now_unix=1100
        )
        assert stats[AlgorithmKind.MEOWPOW] == AlgorithmStats(2, 100)

    @pytest.mark.parametrize("window", [0, -5])
    def test_non_positive_window_raises(self, window):
        """Failure: window must be positive."""
        with pytest.raises(ValueError):
            aggregate_block_stats([], window_minutes=window, now_unix=0)


# =============================================================================
# fetch_block_sample
# =============================================================================


class TestFetchBlockSample:
    """Tests for fetch_block_sample()."""

    @pytest.mark.asyncio
    async def test_reads_time_and_version(self, mock_rpc):
        """Happy path: hash lookup then verbose block."""
        mock_rpc.call_method.side_effect = ["abc123", {"time": 1700000000, "version": SCRYPT, "height": 5}]

        sample = await fetch_block_sample(mock_rpc, 5)

        assert sample == BlockSample(height=5, time=1700000000, version=SCRYPT)
        assert mock_rpc.call_method.await_args_list[0].args == ("getblockhash", [5])
        assert mock_rpc.call_method.await_args_list[1].args == ("getblock", ["abc123", 1])

    @pytest.mark.asyncio
    async def test_missing_version_raises_validation_error(self, mock_rpc):
        """Failure: block without version."""
        mock_rpc.call_method.side_effect = ["abc123", {"time": 1700000000}]

        with pytest.raises(ValidationError, match="getblock abc123 1"):
            await fetch_block_sample(mock_rpc, 5)

    @pytest.mark.asyncio
    async def test_non_dict_block_raises_validation_error(self, mock_rpc):
        """Failure: block is not an object."""
        mock_rpc.call_method.side_effect = ["abc123", "deadbeef"]

        with pytest.raises(ValidationError):
            await fetch_block_sample(mock_rpc, 5)


# =============================================================================
# scan_recent_blocks
# =============================================================================


def _chain(blocks):
    """call_method side effect serving {height: block_dict} from a fake node."""

    async def call_method(method, params=()):
        if method == "getblockhash":
            height = params[0]
            if isinstance(blocks.get(height), Exception):
                raise blocks[height]
            return f"hash{height}"
        if method == "getblock":
            height = int(params[0][len("hash"):])
            return blocks[height]
        raise AssertionError(f"unexpected method {method}")

    return call_method


class TestScanRecentBlocks:
    """Tests for scan_recent_blocks()."""

    @pytest.mark.asyncio
    async def test_scans_depth_blocks_ending_at_tip(self, mock_rpc):
        """Happy path: heights tip-depth+1 .. tip in ascending order."""
        blocks = {h: {"time": 1000 + h, "version": MEOWPOW} for h in range(0, 20)}
        mock_rpc.call_method.side_effect = _chain(blocks)

        samples = await scan_recent_blocks(mock_rpc, tip_height=19, depth=5)

        assert [s.height for s in samples] == [15, 16, 17, 18, 19]
        assert samples[0] == BlockSample(height=15, time=1015, version=MEOWPOW)

    @pytest.mark.asyncio
    async def test_depth_beyond_genesis_starts_at_zero(self, mock_rpc):
        """Edge case: a short chain is scanned from height 0."""
        blocks = {h: {"time": 1000 + h, "version": MEOWPOW} for h in range(0, 3)}
        mock_rpc.call_method.side_effect = _chain(blocks)

        samples = await scan_recent_blocks(mock_rpc, tip_height=2, depth=100)

        assert [s.height for s in samples] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_failed_heights_are_skipped(self, mock_rpc):
        """Partial failure: each failing height is skipped, the scan continues."""
        blocks = {h: {"time": 1000 + h, "version": MEOWPOW} for h in range(10, 15)}
        blocks[11] = TransportError("timeout", command="getblockhash 11")
        blocks[13] = ProtocolError("RPC error: Block not found", command="getblockhash 13")
        mock_rpc.call_method.side_effect = _chain(blocks)

        samples = await scan_recent_blocks(mock_rpc, tip_height=14, depth=5)

        assert [s.height for s in samples] == [10, 12, 14]

    @pytest.mark.asyncio
    async def test_malformed_block_is_skipped(self, mock_rpc):
        """Partial failure: a block missing fields is skipped."""
        blocks = {h: {"time": 1000 + h, "version": SCRYPT} for h in range(0, 3)}
        blocks[1] = {"time": 1001}
        mock_rpc.call_method.side_effect = _chain(blocks)

        samples = await scan_recent_blocks(mock_rpc, tip_height=2, depth=3)

        assert [s.height for s in samples] == [0, 2]

    @pytest.mark.asyncio
    async def test_every_height_failing_returns_empty(self, mock_rpc):
        """Edge case: total failure gives no samples, not an error."""
        mock_rpc.call_method.side_effect = ConfigError(command="getblockhash")

        samples = await scan_recent_blocks(mock_rpc, tip_height=9, depth=3)

        assert samples == []
        assert mock_rpc.call_method.await_count == 3

    @pytest.mark.asyncio
    async def test_requests_are_sequential(self, mock_rpc):
        """One height at a time: hash then block, in height order."""
        blocks = {h: {"time": 1000 + h, "version": MEOWPOW} for h in range(0, 3)}
        mock_rpc.call_method.side_effect = _chain(blocks)

        await scan_recent_blocks(mock_rpc, tip_height=2, depth=3)

        calls = [c.args for c in mock_rpc.call_method.await_args_list]
        assert calls == [
            ("getblockhash", [0]), ("getblock", ["hash0", 1]),
            ("getblockhash", [1]), ("getblock", ["hash1", 1]),
            ("getblockhash", [2]), ("getblock", ["hash2", 1]),
        ]
