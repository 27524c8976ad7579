"""Tests for SubGiftCounter."""

from huestream.scheduler import SubGiftCounter


def test_unknown_user_is_standalone() -> None:
    """Test a gift without a registered batch is standalone."""
    gifts = SubGiftCounter()

    assert gifts.consume_one_gift("alice") is False
    assert "alice" not in gifts


def test_batch_absorbs_exactly_count_gifts() -> None:
    """Test consume_one_gift returns True count times, then False."""
    gifts = SubGiftCounter()
    gifts.register_gift_batch("alice", 3)

    assert [gifts.consume_one_gift("alice") for _ in range(4)] == [True, True, True, False]
    assert "alice" not in gifts
    assert len(gifts) == 0


def test_batches_accumulate() -> None:
    """Test two batches from the same user add up."""
    gifts = SubGiftCounter()
    gifts.register_gift_batch("alice", 2)
    gifts.register_gift_batch("alice", 1)

    assert gifts.pending("alice") == 3


def test_users_are_independent() -> None:
    """Test the counts are tracked per user."""
    gifts = SubGiftCounter()
    gifts.register_gift_batch("alice", 1)

    assert gifts.consume_one_gift("bob") is False
    assert gifts.consume_one_gift("alice") is True
    assert gifts.pending("alice") == 0


def test_non_positive_batch_is_ignored() -> None:
    """Test an empty batch does not create an entry."""
    gifts = SubGiftCounter()
    gifts.register_gift_batch("alice", 0)

    assert "alice" not in gifts
    assert gifts.consume_one_gift("alice") is False
