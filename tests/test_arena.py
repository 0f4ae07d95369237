import pytest

from ldbkit.arena import Arena
from ldbkit.rng import Random


def test_empty():
    assert Arena().memory_usage() == 0


def test_simple():
    allocated = []
    arena = Arena()
    n = 100000
    total = 0
    rnd = Random(301)
    for i in range(n):
        if i % (n // 10) == 0:
            s = i
        elif rnd.one_in(4000):
            s = rnd.uniform(6000)
        elif rnd.one_in(10):
            s = rnd.uniform(100)
        else:
            s = rnd.uniform(20)
        if s == 0:
            s = 1
        if rnd.one_in(10):
            r = arena.allocate_aligned(s)
        else:
            r = arena.allocate(s)
        r[:] = bytes([i % 256]) * s
        total += s
        allocated.append((s, r))
        assert arena.memory_usage() >= total
        if i > n // 10:
            assert arena.memory_usage() <= total * 1.10
    assert len(allocated) == n
    expected = [bytes([i % 256]) * s for i, (s, _) in enumerate(allocated)]
    actual = [bytes(view) for _, view in allocated]
    assert actual == expected


def test_zero_allocation_rejected():
    with pytest.raises(ValueError):
        Arena().allocate(0)


def test_negative_aligned_allocation_rejected():
    with pytest.raises(ValueError):
        Arena().allocate_aligned(-1)


def test_large_allocation_gets_own_block():
    arena = Arena()
    view = arena.allocate(2000)
    assert len(view) == 2000
    assert arena.memory_usage() == 2000 + 8


def test_small_allocations_share_a_block():
    arena = Arena()
    arena.allocate(10)
    usage = arena.memory_usage()
    arena.allocate(10)
    arena.allocate_aligned(10)
    assert arena.memory_usage() == usage == 4096 + 8


def test_allocations_do_not_overlap():
    arena = Arena()
    views = [arena.allocate(7) for _ in range(50)]
    views += [arena.allocate_aligned(5) for _ in range(50)]
    for index, view in enumerate(views):
        view[:] = bytes([index]) * len(view)
    assert [bytes(view) for view in views] == [
        bytes([index]) * len(view) for index, view in enumerate(views)
    ]