import numpy as np
import pytest

from corrdim import (
    Database,
    KernelDistance,
    KNNClassifier,
    MultiRepresentedObject,
    RepresentationSelectingDistance,
)
from corrdim.exceptions import ConfigurationError, InvalidStateError


def _two_blobs(seed=0):
    rng = np.random.default_rng(seed)
    X = np.vstack([rng.normal(size=(15, 2)), rng.normal(size=(15, 2)) + 8.0])
    labels = ["left"] * 15 + ["right"] * 15
    return Database(X, labels=labels)


def test_predicts_the_nearest_blob():
    clf = KNNClassifier(k=3).fit(_two_blobs())
    assert clf.classes_ == ["left", "right"]
    assert clf.predict([0.5, -0.2]) == "left"
    assert clf.predict([7.5, 8.3]) == "right"


def test_class_distribution_sums_to_one():
    clf = KNNClassifier(KernelDistance("rbf", gamma=0.1), k=5).fit(_two_blobs(1))
    dist = clf.class_distribution([4.0, 4.0])
    assert dist.shape == (2,)
    assert np.isclose(dist.sum(), 1.0)
    assert np.array_equal(clf.class_distribution([-1.0, 0.0]), [1.0, 0.0])


def test_explicit_labels_override_database():
    db = Database(np.array([[0.0], [1.0], [10.0]]))
    clf = KNNClassifier().fit(db, labels=[1, 1, 2])
    assert clf.predict([9.0]) == 2
    with pytest.raises(ConfigurationError):
        KNNClassifier().fit(db)
    with pytest.raises(ConfigurationError):
        KNNClassifier().fit(db, labels=[1])


def test_classifies_multi_represented_objects():
    objs = [
        MultiRepresentedObject([[0.0], [100.0]]),
        MultiRepresentedObject([[10.0], [0.0]]),
    ]
    db = Database(objs, labels=["a", "b"])
    query = MultiRepresentedObject([[1.0], [1.0]])
    dispatcher = RepresentationSelectingDistance()
    assert KNNClassifier(dispatcher.bind(0)).fit(db).predict(query) == "a"
    assert KNNClassifier(dispatcher.bind(1)).fit(db).predict(query) == "b"


def test_contract_errors():
    with pytest.raises(ConfigurationError):
        KNNClassifier(k=0)
    with pytest.raises(InvalidStateError):
        KNNClassifier().predict([0.0])
