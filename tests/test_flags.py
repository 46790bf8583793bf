"""Tests for one-shot debugging flags."""

from concurrent.futures import ThreadPoolExecutor

from branchrun.flags import OneShotFlag


def test_consume_clears() -> None:
    """A request is returned once, then cleared."""
    flag = OneShotFlag()
    flag.set()

    assert flag
    assert flag.consume() is True
    assert not flag
    assert flag.consume() is False


def test_set_can_lower() -> None:
    """A request can be withdrawn before it is consumed."""
    flag = OneShotFlag(True)
    flag.set(False)

    assert flag.consume() is False
    assert repr(flag) == 'OneShotFlag(False)'


def test_single_consumer_across_threads() -> None:
    """Only one of many concurrent readers sees a request."""
    flag = OneShotFlag(True)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: flag.consume(), range(64)))

    assert results.count(True) == 1
