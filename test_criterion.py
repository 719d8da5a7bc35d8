#!/usr/bin/env python
"""
Tests for the purity functions.
"""
import numpy as np
import pytest

from arbor import entropy, gini, stdevp, variance


def test_gini():
    """Gini index of pure, mixed and empty slices."""
    assert gini([]) == 0.0
    assert gini([1, 1, 1]) == 0.0
    assert gini([0, 1]) == pytest.approx(0.5)
    assert gini([0, 0, 0, 1, 1, 0, 1, 1, 1, 0, 0, 1]) == pytest.approx(0.5)
    assert gini(["a", "b", "c"]) == pytest.approx(2.0 / 3.0)


def test_entropy():
    """Entropy is measured in bits."""
    assert entropy([]) == 0.0
    assert entropy([2, 2]) == 0.0
    assert entropy([0, 1]) == pytest.approx(1.0)
    assert entropy([0, 1, 2, 3]) == pytest.approx(2.0)


def test_variance_and_stdevp():
    """Population statistics, not sample statistics."""
    values = np.array([1.0, 2.0, 3.0, 4.0])
    assert variance(values) == pytest.approx(1.25)
    assert stdevp(values) == pytest.approx(np.sqrt(1.25))
    assert variance([]) == 0.0
    assert stdevp([7.0, 7.0]) == 0.0


if __name__ == "__main__":
    pytest.main([__file__])
