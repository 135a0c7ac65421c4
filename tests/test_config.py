import numpy as np
import pytest

from corrdim import (
    CovarianceOutlierScorer,
    Database,
    EuclideanDistance,
    KernelDistance,
    KNNNeighborhood,
    LocalPCA,
    LocalPCAPreprocessor,
    MultiRepresentedObject,
    PrecomputedNeighborhood,
    RangeNeighborhood,
    RepresentationSelectingDistance,
)
from corrdim.config import OutlierConfig, PCAConfig, PreprocessingConfig, RepresentationConfig
from corrdim.exceptions import ConfigurationError
from corrdim.preprocessing import LOCAL_DIMENSIONALITY


def test_pca_config_builds_local_pca():
    pca = PCAConfig.from_dict({"delta": 0.2, "normalize": False}).build()
    assert isinstance(pca, LocalPCA)
    assert pca.delta == 0.2 and pca.normalize is False
    with pytest.raises(ConfigurationError):
        PCAConfig(absolute=True)
    with pytest.raises(ConfigurationError):
        PCAConfig(delta=3.0)
    with pytest.raises(ConfigurationError):
        PCAConfig.from_dict({"delta": 0.1, "alpha": 0.5})


def test_preprocessing_config_needs_exactly_one_query():
    with pytest.raises(ConfigurationError):
        PreprocessingConfig()
    with pytest.raises(ConfigurationError):
        PreprocessingConfig(epsilon=1.0, k=3)


def test_preprocessing_config_builds_and_runs():
    db = Database(np.array([[float(i), 2.0 * i] for i in range(8)]))
    cfg = PreprocessingConfig.from_dict({"k": 3, "pca": {"delta": 0.05}, "n_jobs": 2})
    assert isinstance(cfg.pca, PCAConfig)
    pre = cfg.build(db)
    assert isinstance(pre, LocalPCAPreprocessor)
    assert isinstance(pre.neighborhood, KNNNeighborhood) and pre.neighborhood.k == 3
    assert pre.pca.delta == 0.05 and pre.n_jobs == 2

    report = pre.run(db)
    assert all(report.store.get(pid, LOCAL_DIMENSIONALITY) == 1 for pid in db)


def test_preprocessing_config_with_kernel_range_query():
    db = Database(np.eye(3))
    cfg = PreprocessingConfig(epsilon=0.5, distance="kernel", distance_params={"kernel": "rbf", "gamma": 1.0})
    nb = cfg.build(db).neighborhood
    assert isinstance(nb, RangeNeighborhood) and isinstance(nb.distance, KernelDistance)
    with pytest.raises(ConfigurationError):
        PreprocessingConfig(k=2, distance="nope").build(db)


def test_outlier_config():
    cfg = OutlierConfig.from_dict({"attributes": (0, 1), "singular": "pinv"})
    scorer = cfg.build(PrecomputedNeighborhood({}))
    assert isinstance(scorer, CovarianceOutlierScorer)
    assert scorer.attributes == [0, 1] and scorer.singular == "pinv"
    with pytest.raises(ConfigurationError):
        OutlierConfig(attributes=[])
    with pytest.raises(ConfigurationError):
        OutlierConfig(attributes=[0], singular="zero")


def test_representation_config():
    dispatcher = RepresentationConfig(distances=["manhattan", "euclidean"]).build()
    assert isinstance(dispatcher, RepresentationSelectingDistance)
    o1 = MultiRepresentedObject([[0.0, 0.0], [0.0, 0.0]])
    o2 = MultiRepresentedObject([[3.0, 4.0], [3.0, 4.0]])
    assert dispatcher.distance(o1, o2, 0) == 7.0
    assert dispatcher.distance(o1, o2, 1) == 5.0

    shared = RepresentationConfig(default="manhattan").build()
    assert shared.distance(o1, o2, 1) == 7.0
    with pytest.raises(ConfigurationError):
        RepresentationConfig(distances=[])


def test_config_round_trips_through_dict():
    cfg = PreprocessingConfig(k=4, pca=PCAConfig(delta=0.3))
    again = PreprocessingConfig.from_dict(cfg.to_dict())
    assert again == cfg


def test_preprocessing_config_selects_a_representation():
    db = Database([MultiRepresentedObject([[float(i), 2.0 * i], [float(i), 1.0, -float(i)]]) for i in range(8)])
    cfg = PreprocessingConfig.from_dict({"k": 3, "representation": 1})
    pre = cfg.build(db)
    assert pre.pca.representation == 1
    assert pre.neighborhood.distance.representation == 1
    assert isinstance(pre.neighborhood.distance.parent.default, EuclideanDistance)

    report = pre.run(db)
    assert report.processed == list(db)
    assert all(report.store.get(pid, LOCAL_DIMENSIONALITY) == 1 for pid in db)

    # an explicit representation-selecting distance is bound, not wrapped
    cfg = PreprocessingConfig(epsilon=5.0, distance="representation", representation=0)
    nb = cfg.build(db).neighborhood
    assert nb.distance.representation == 0
    assert isinstance(nb.distance.parent, RepresentationSelectingDistance)
    assert not isinstance(nb.distance.parent.default, RepresentationSelectingDistance)

    with pytest.raises(ConfigurationError):
        PreprocessingConfig(k=3, representation=-1)
    assert PCAConfig(representation=2).build().representation == 2
