#!/usr/bin/env python3
import numpy as np
import matplotlib.pyplot as plt

from corrdim import CovarianceOutlierScorer, Database, PrecomputedNeighborhood


def main():
    rng = np.random.default_rng(0)
    n = 20

    # ---- Two smooth fields over an n x n grid, with a few planted anomalies
    rr, cc = np.meshgrid(np.arange(n), np.arange(n), indexing="ij")
    temperature = np.sin(rr / 4.0) + np.cos(cc / 5.0) + 0.05 * rng.normal(size=(n, n))
    humidity = 0.5 * rr / n + 0.05 * rng.normal(size=(n, n))
    for r, c in [(4, 15), (12, 3), (16, 16)]:
        temperature[r, c] += 2.0
        humidity[r, c] -= 0.5

    ids = [(r, c) for r in range(n) for c in range(n)]
    X = np.column_stack([temperature.ravel(), humidity.ravel()])
    db = Database(X, ids=ids)

    # ---- Spatial neighbors: 4-adjacency on the grid
    pairs = [((r, c), (r, c + 1)) for r in range(n) for c in range(n - 1)]
    pairs += [((r, c), (r + 1, c)) for r in range(n - 1) for c in range(n)]
    neighborhood = PrecomputedNeighborhood.from_pairs(pairs)

    result = CovarianceOutlierScorer(attributes=[0, 1], neighborhood=neighborhood).score(db)
    for pid, s in result.top(5):
        print(pid, round(s, 2))

    # ---- Visualize normalized scores
    scores = result.as_array(ids).reshape(n, n)
    plt.imshow(result.meta.normalize(scores), cmap="magma")
    plt.colorbar(label="normalized outlier score")
    plt.title("Covariance outlier scores")
    plt.show()


if __name__ == "__main__":
    main()
