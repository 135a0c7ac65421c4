import math

import numpy as np
import pytest

from corrdim import (
    Database,
    EuclideanDistance,
    KernelDistance,
    KernelFunction,
    KNNNeighborhood,
    LocallyWeightedDistance,
    LocalPCAPreprocessor,
    ManhattanDistance,
    MultiRepresentedObject,
    PrecomputedNeighborhood,
    RepresentationSelectingDistance,
)
from corrdim.distances import DistanceFunction, get_distance, list_distances
from corrdim.exceptions import ConfigurationError, InvalidStateError


class _MockDistance(DistanceFunction):
    def __init__(self, value):
        self.value = value
        self.calls = []

    def distance(self, o1, o2):
        self.calls.append((o1, o2))
        return self.value

    def infinite_distance(self):
        return 1e9 + self.value


def test_vector_distances():
    x, y = [0.0, 3.0], [4.0, 0.0]
    assert EuclideanDistance()(x, y) == 5.0
    assert ManhattanDistance()(x, y) == 7.0
    with pytest.raises(ValueError):
        EuclideanDistance().distance([1.0], [1.0, 2.0])


def test_sentinels_and_value_of():
    d = EuclideanDistance()
    assert d.infinite_distance() == math.inf
    assert d.null_distance() == 0.0
    assert math.isnan(d.undefined_distance())
    assert d.value_of("0.25") == 0.25
    assert d.value_of("inf") == math.inf
    assert math.isnan(d.value_of("NaN"))
    with pytest.raises(ValueError):
        d.value_of("far")


def test_linear_kernel_distance_is_euclidean():
    rng = np.random.default_rng(0)
    X = rng.normal(size=(10, 4))
    kd = KernelDistance()
    for i in range(5):
        assert np.isclose(kd(X[i], X[i + 5]), np.linalg.norm(X[i] - X[i + 5]))
    assert kd(X[0], X[0]) == 0.0


def test_rbf_and_polynomial_kernel_distances():
    x, y = np.array([1.0, 0.0]), np.array([0.0, 2.0])
    rbf = KernelDistance("rbf", gamma=0.5)
    assert np.isclose(rbf(x, y), np.sqrt(2.0 - 2.0 * np.exp(-0.5 * 5.0)))

    k = KernelFunction("polynomial", degree=2, gamma=1.0, coef0=1.0)
    assert np.isclose(k.similarity(x, y), (0.0 + 1.0) ** 2)
    poly = KernelDistance(k)
    kxx, kyy = (1.0 + 1.0) ** 2, (4.0 + 1.0) ** 2
    assert np.isclose(poly(x, y), np.sqrt(kxx - 2.0 + kyy))


def test_kernel_pairwise_matrix():
    rng = np.random.default_rng(1)
    X = rng.normal(size=(6, 3))
    D = KernelDistance("rbf", gamma=0.3).pairwise(X)
    assert D.shape == (6, 6)
    assert np.allclose(D, D.T)
    assert np.allclose(np.diag(D), 0.0)
    assert np.isclose(D[1, 4], KernelDistance("rbf", gamma=0.3)(X[1], X[4]))


def test_kernel_configuration_errors():
    with pytest.raises(ConfigurationError):
        KernelFunction("banana")
    with pytest.raises(ConfigurationError):
        KernelDistance(KernelFunction("rbf"), gamma=1.0)


def test_representation_routing_uses_the_selected_function():
    first, second = _MockDistance(1.0), _MockDistance(2.0)
    dispatcher = RepresentationSelectingDistance([first, second])
    o1 = MultiRepresentedObject([[0.0], [10.0]])
    o2 = MultiRepresentedObject([[1.0], [11.0]])

    assert dispatcher.distance(o1, o2, 0) == 1.0
    assert len(first.calls) == 1 and len(second.calls) == 0
    assert first.calls[0][0][0] == 0.0

    assert dispatcher(o1, o2, representation=1) == 2.0
    assert len(first.calls) == 1 and len(second.calls) == 1
    assert second.calls[0][1][0] == 11.0

    assert dispatcher.infinite_distance(1) == 1e9 + 2.0
    assert dispatcher.null_distance(0) == 0.0


def test_representation_shared_default():
    shared = _MockDistance(3.0)
    dispatcher = RepresentationSelectingDistance(default=shared)
    o = MultiRepresentedObject([[0.0], [1.0], [2.0]])
    assert dispatcher.distance(o, o, 2) == 3.0
    # per-index list with a default for the remaining indices
    dispatcher = RepresentationSelectingDistance([EuclideanDistance()], default=shared)
    assert dispatcher.distance(o, o, 0) == 0.0
    assert dispatcher.distance(o, o, 1) == 3.0


def test_representation_errors():
    dispatcher = RepresentationSelectingDistance([EuclideanDistance()])
    o = MultiRepresentedObject([[0.0], [1.0]])
    with pytest.raises(InvalidStateError):
        dispatcher.distance(o, o)
    with pytest.raises(InvalidStateError):
        dispatcher.distance(o, o, -1)
    with pytest.raises(InvalidStateError):
        dispatcher.distance(o, o, 1)
    with pytest.raises(InvalidStateError):
        dispatcher.bind(3)
    with pytest.raises(ConfigurationError):
        RepresentationSelectingDistance([])
    # nothing configured: Euclidean on every representation
    assert RepresentationSelectingDistance().distance(
        MultiRepresentedObject([[0.0, 0.0]]), MultiRepresentedObject([[3.0, 4.0]]), 0
    ) == 5.0


def test_bound_representation_distance():
    dispatcher = RepresentationSelectingDistance([ManhattanDistance(), EuclideanDistance()])
    o1 = MultiRepresentedObject([[0.0, 0.0], [0.0, 0.0]])
    o2 = MultiRepresentedObject([[1.0, 1.0], [3.0, 4.0]])
    assert dispatcher.bind(0)(o1, o2) == 2.0
    assert dispatcher.bind(1)(o1, o2) == 5.0
    assert dispatcher.bind(1).value_of("inf") == math.inf


def test_distance_registry():
    assert {"euclidean", "manhattan", "kernel", "representation", "locally-weighted"} <= set(list_distances())
    d = get_distance("kernel")(kernel="rbf", gamma=0.5)
    assert isinstance(d, KernelDistance) and d.name == "kernel"
    with pytest.raises(ValueError):
        get_distance("nope")


def _line_with_outsider():
    # ten points on the diagonal, one point off it
    X = np.array([[i, i] for i in range(10)] + [[5.0, 6.0]], dtype=float)
    return Database(X)


def test_locally_weighted_distance():
    db = _line_with_outsider()
    lw = LocallyWeightedDistance(LocalPCAPreprocessor(KNNNeighborhood(db, k=3)))
    with pytest.raises(InvalidStateError):
        lw.distance(0, 1)
    lw.set_database(db)

    # moving along the local line costs nothing
    assert np.isclose(lw(0, 2), 0.0, atol=1e-8)
    # leaving it does
    assert lw(0, 10) > 0.5
    assert lw(0, 10) == lw(10, 0)


def test_locally_weighted_falls_back_to_euclidean_without_model():
    db = Database(np.array([[0.0, 0.0], [3.0, 4.0]]))
    lw = LocallyWeightedDistance(LocalPCAPreprocessor(PrecomputedNeighborhood({})))
    lw.set_database(db)
    assert np.isclose(lw(0, 1), 5.0)


def test_locally_weighted_distance_on_a_representation():
    objs = [MultiRepresentedObject([[float(i), float(i)], "label"]) for i in range(10)]
    objs.append(MultiRepresentedObject([[5.0, 6.0], "label"]))
    db = Database(objs)
    nb = KNNNeighborhood(db, RepresentationSelectingDistance().bind(0), k=3)
    lw = LocallyWeightedDistance(LocalPCAPreprocessor(nb))
    assert lw.representation == 0
    lw.set_database(db)
    assert np.isclose(lw(0, 2), 0.0, atol=1e-8)
    assert lw(0, 10) > 0.5
