import numpy as np
import pytest

from corrdim import (
    Database,
    KernelDistance,
    KNNNeighborhood,
    ManhattanDistance,
    MultiRepresentedObject,
    PrecomputedNeighborhood,
    RangeNeighborhood,
    RepresentationSelectingDistance,
)
from corrdim.exceptions import ConfigurationError


def test_range_query_includes_self_and_orders_by_distance():
    db = Database(np.array([[0.0], [3.0], [1.0], [-0.5], [10.0]]))
    nb = RangeNeighborhood(db, epsilon=1.0)
    assert nb.uses_tree
    assert nb.neighbors(0) == [0, 3, 2]
    assert nb(4) == [4]


def test_range_tree_and_scan_agree():
    rng = np.random.default_rng(0)
    db = Database(rng.normal(size=(60, 3)))
    tree = RangeNeighborhood(db, epsilon=0.8)
    scan = RangeNeighborhood(db, distance=KernelDistance("linear"), epsilon=0.8)
    assert not scan.uses_tree
    for pid in db:
        assert set(tree.neighbors(pid)) == set(scan.neighbors(pid))


def test_knn_query():
    rng = np.random.default_rng(1)
    X = rng.normal(size=(40, 2))
    db = Database(X)
    nb = KNNNeighborhood(db, k=5)
    for pid in (0, 17, 39):
        ids = nb.neighbors(pid)
        assert len(ids) == 5 and ids[0] == pid
        expected = np.argsort(np.linalg.norm(X - X[pid], axis=1), kind="stable")[:5]
        assert ids == list(expected)


def test_knn_ties_break_by_database_order():
    db = Database(np.array([[0.0], [1.0], [-1.0], [2.0]]))
    assert KNNNeighborhood(db, k=2).neighbors(0) == [0, 1]
    assert KNNNeighborhood(db, distance=ManhattanDistance(), k=2).neighbors(0) == [0, 1]


def test_knn_larger_than_database():
    db = Database(np.eye(3))
    assert len(KNNNeighborhood(db, k=10).neighbors(1)) == 3


def test_queries_over_one_representation():
    objs = [
        MultiRepresentedObject([[0.0, 0.0], [100.0]]),
        MultiRepresentedObject([[5.0, 5.0], [100.5]]),
        MultiRepresentedObject([[0.1, 0.0], [0.0]]),
    ]
    db = Database(objs, ids=["a", "b", "c"])
    dist = RepresentationSelectingDistance()
    assert KNNNeighborhood(db, dist.bind(0), k=2).neighbors("a") == ["a", "c"]
    assert KNNNeighborhood(db, dist.bind(1), k=2).neighbors("a") == ["a", "b"]
    assert RangeNeighborhood(db, dist.bind(1), epsilon=1.0).neighbors("c") == ["c"]


def test_precomputed_neighborhood():
    nb = PrecomputedNeighborhood.from_pairs([(0, 1), (1, 2)])
    assert nb.neighbors(1) == [0, 2]
    assert nb.neighbors(0) == [1]
    assert nb.neighbors(7) == []
    directed = PrecomputedNeighborhood.from_pairs([(0, 1)], symmetric=False)
    assert directed.neighbors(1) == []


def test_invalid_parameters():
    db = Database(np.eye(2))
    with pytest.raises(ConfigurationError):
        RangeNeighborhood(db, epsilon=-1.0)
    with pytest.raises(ConfigurationError):
        KNNNeighborhood(db, k=0)
    with pytest.raises(KeyError):
        KNNNeighborhood(db, k=1).neighbors(5)
