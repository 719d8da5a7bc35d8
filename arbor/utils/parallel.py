"""
Utilities for parallel processing.
"""

import logging
import time

import numpy as np
from joblib import Parallel, delayed, effective_n_jobs

logger = logging.getLogger(__name__)


def _partition_estimators(n_estimators, n_jobs):
    """Private function used to partition estimators between jobs."""
    n_jobs = min(effective_n_jobs(n_jobs), n_estimators)

    n_estimators_per_job = np.full(n_jobs, n_estimators // n_jobs, dtype=int)
    n_estimators_per_job[: n_estimators % n_jobs] += 1

    return n_jobs, n_estimators_per_job.tolist()


def _build_tree(tree, X, y, tree_idx, n_trees):
    """Fit one tree. X and y were validated by the caller."""
    start_time = time.time()
    tree.fit(X, y, skip_checks=True)
    logger.debug(
        "Built tree %d of %d in %.4f seconds: %d nodes, depth %d",
        tree_idx + 1,
        n_trees,
        time.time() - start_time,
        tree.node_count,
        tree.max_depth_reached_,
    )
    return tree


def parallel_build_trees(trees, X, y, n_jobs=None, verbose=0):
    """Fit trees concurrently on worker threads.

    Each tree draws its own bootstrap sample, so no state is shared between
    workers. Returns once every tree is fitted.

    Parameters
    ----------
    trees : list of DecisionTree
        Unfitted trees.
    X : ndarray of shape (n_samples, n_features)
    y : ndarray of shape (n_samples,)
    n_jobs : int, default=None
        Number of jobs to run in parallel, with joblib's semantics.
    verbose : int, default=0
        Controls the verbosity when fitting.

    Returns
    -------
    trees : list of DecisionTree
        The fitted trees, in the order given.
    """
    n_trees = len(trees)
    n_jobs, trees_per_job = _partition_estimators(n_trees, n_jobs)

    if verbose > 0:
        logger.info(
            "Training %d trees using %d parallel jobs on data of shape %s",
            n_trees,
            n_jobs,
            X.shape,
        )
        logger.info("Trees per job: %s", trees_per_job)
    start_time = time.time()

    trees = Parallel(n_jobs=n_jobs, verbose=verbose, prefer="threads")(
        delayed(_build_tree)(tree, X, y, i, n_trees) for i, tree in enumerate(trees)
    )

    if verbose > 0:
        total_time = time.time() - start_time
        logger.info("Built %d trees in %.4f seconds", len(trees), total_time)
        logger.info(
            "Average time per tree: %.4f seconds", total_time / max(1, len(trees))
        )
        depths = [tree.get_depth() for tree in trees]
        nodes = [tree.node_count for tree in trees]
        logger.info(
            "Tree depth stats: min=%d, max=%d, avg=%.1f",
            min(depths),
            max(depths),
            sum(depths) / len(depths),
        )
        logger.info(
            "Tree node stats: min=%d, max=%d, avg=%.1f",
            min(nodes),
            max(nodes),
            sum(nodes) / len(nodes),
        )

    return trees


def parallel_predict_rows(predict_row, X, n_jobs=None, verbose=0):
    """Apply ``predict_row`` to every row of X concurrently.

    ``predict_row`` receives a single-row matrix of shape (1, n_features)
    and must only read shared state.

    Returns
    -------
    results : list
        One result per row, in row order.
    """
    n_samples = X.shape[0]
    if verbose > 0:
        logger.info("Predicting %d rows", n_samples)
    start_time = time.time()

    results = Parallel(n_jobs=n_jobs, verbose=verbose, prefer="threads")(
        delayed(predict_row)(X[i : i + 1]) for i in range(n_samples)
    )

    if verbose > 0:
        logger.info(
            "Prediction completed in %.4f seconds", time.time() - start_time
        )
    return results
