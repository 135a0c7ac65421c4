#!/usr/bin/env python3
import logging

import numpy as np
import matplotlib.pyplot as plt

from corrdim import Database, PreprocessingConfig
from corrdim.preprocessing import LOCAL_DIMENSIONALITY


def main():
    logging.basicConfig(level=logging.INFO)
    rng = np.random.default_rng(0)

    # ---- A noisy line and a noisy plane in R^3
    t = rng.uniform(-3.0, 3.0, size=200)
    line = np.column_stack([t, 0.5 * t, 4.0 + 0.2 * t]) + 0.01 * rng.normal(size=(200, 3))
    plane = np.column_stack([
        rng.uniform(-3.0, 3.0, size=400),
        rng.uniform(-3.0, 3.0, size=400),
        0.01 * rng.normal(size=400),
    ])
    X = np.vstack([line, plane])
    db = Database(X)

    # ---- Local PCA on the 15 nearest neighbors of every point
    cfg = PreprocessingConfig(k=15, pca={"delta": 0.05}, n_jobs=4)
    report = cfg.build(db).run(db)
    print(report.summary())

    dims = np.array([report.store.get(pid, LOCAL_DIMENSIONALITY, -1) for pid in db])
    for d in np.unique(dims):
        print(f"correlation dimensionality {d}: {np.sum(dims == d)} points")

    # ---- Visualize
    fig = plt.figure()
    ax = fig.add_subplot(projection="3d")
    sc = ax.scatter(X[:, 0], X[:, 1], X[:, 2], s=4, c=dims, cmap="viridis")
    fig.colorbar(sc, ax=ax, label="local correlation dimensionality")
    ax.set_xlabel("x"); ax.set_ylabel("y"); ax.set_zlabel("z")
    plt.show()


if __name__ == "__main__":
    main()
