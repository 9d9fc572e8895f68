import numpy as np
import pandas as pd
import pytest

from acc.errors import ModelError
from acc.modeling.split import stratified_split


def _examples(counts):
    labels = np.concatenate([[name] * n for name, n in counts.items()])
    return pd.DataFrame({"device_id": "A", "bout_id": np.arange(len(labels)), "behavior": labels})


def test_split_preserves_class_proportions():
    counts = {"fly": 600, "rest": 300, "feed": 100}
    df = _examples(counts)
    train, test = stratified_split(df, train_size=0.667, seed=7)
    for name, n in counts.items():
        assert abs((train["behavior"] == name).sum() - 0.667 * n) <= 1
        assert (test["behavior"] == name).sum() > 0
    assert len(train) + len(test) == len(df)
    assert set(train.index).isdisjoint(test.index)
    assert set(train.index) | set(test.index) == set(df.index)


def test_split_is_reproducible():
    df = _examples({"fly": 30, "rest": 30})
    a, _ = stratified_split(df, seed=3)
    b, _ = stratified_split(df, seed=3)
    assert list(a.index) == list(b.index)


def test_singleton_class_goes_to_train():
    df = _examples({"fly": 10, "rest": 10, "drink": 1})
    train, test = stratified_split(df)
    assert (train["behavior"] == "drink").sum() == 1
    assert (test["behavior"] == "drink").sum() == 0
    assert len(train) + len(test) == 21


def test_unlabeled_examples_rejected():
    df = _examples({"fly": 5, "rest": 5})
    df.loc[0, "behavior"] = None
    with pytest.raises(ModelError):
        stratified_split(df)


def test_two_example_classes_reach_both_partitions():
    train, test = stratified_split(_examples({"a": 2, "b": 2, "c": 2}))
    assert sorted(train["behavior"]) == ["a", "b", "c"]
    assert sorted(test["behavior"]) == ["a", "b", "c"]


def test_small_classes_next_to_a_large_one():
    df = _examples({"a": 1000, "b": 2, "c": 2, "d": 2})
    train, test = stratified_split(df, seed=0)
    assert set(test["behavior"]) == {"a", "b", "c", "d"}
    assert set(train["behavior"]) == {"a", "b", "c", "d"}
    assert len(train) + len(test) == len(df)
    assert set(train.index).isdisjoint(test.index)
