import numpy as np
import pandas as pd

from acc.labels import bout_labels, propagate_labels
from acc.windowing import filter_complete_bouts, iter_bouts
from conftest import raw_frame, stack


def _bouts(sizes, labels=None):
    frames = []
    for i, n in enumerate(sizes):
        df = raw_frame("A", np.arange(3 * n, dtype=float).reshape(n, 3))
        df["bout_id"] = i + 1
        frames.append(df)
    df = stack(*frames)
    if labels is not None:
        df["behavior"] = labels
    df["acc_x"], df["acc_y"], df["acc_z"] = df["raw_acc_x"], df["raw_acc_y"], df["raw_acc_z"]
    return df


def test_labels_carried_forward_within_bout_only():
    df = _bouts([3, 3], ["fly", None, None, None, "rest", None])
    out = propagate_labels(df)
    assert list(out["behavior"].iloc[:3]) == ["fly"] * 3
    assert pd.isna(out["behavior"].iloc[3])
    assert list(out["behavior"].iloc[4:]) == ["rest", "rest"]


def test_propagation_follows_row_order():
    df = _bouts([3], [None, "fly", None]).iloc[::-1]
    out = propagate_labels(df).sort_values("row")
    assert pd.isna(out["behavior"].iloc[0])
    assert list(out["behavior"].iloc[1:]) == ["fly", "fly"]


def test_bout_labels_uniform_mixed_and_missing():
    df = _bouts([2, 2, 2], ["fly", None, "fly", "rest", None, None])
    labels = bout_labels(propagate_labels(df))
    assert labels[("A", 1)] == "fly"
    assert pd.isna(labels[("A", 2)])
    assert pd.isna(labels[("A", 3)])


def test_missing_label_column_gives_unlabeled_bouts():
    df = _bouts([2, 2])
    labels = bout_labels(propagate_labels(df))
    assert labels.isna().all()
    assert len(labels) == 2


def test_filter_drops_short_bout_and_keeps_exact():
    df = _bouts([100, 99, 101])
    out, report = filter_complete_bouts(df, 100)
    assert list(out["bout_id"].unique()) == [1]
    assert len(out) == 100
    pd.testing.assert_frame_equal(out, df[df["bout_id"] == 1].reset_index(drop=True))
    assert (report.kept, report.dropped, report.dropped_samples) == (1, 2, 200)


def test_filter_excludes_incomplete_ids():
    df = _bouts([4, 4])
    df["bout_id"] -= 1
    out, report = filter_complete_bouts(df, 4, exclude={0})
    assert list(out["bout_id"].unique()) == [1]
    assert report.dropped == 1


def test_iter_bouts_yields_typed_records_in_row_order():
    df = _bouts([3, 3]).iloc[::-1]
    labels = pd.Series(["fly", None], index=pd.MultiIndex.from_tuples([("A", 1), ("A", 2)]))
    bouts = list(iter_bouts(df, labels))
    assert [b.bout_id for b in bouts] == [1, 2]
    assert list(bouts[0].x) == [0.0, 3.0, 6.0]
    assert bouts[0].label == "fly"
    assert bouts[1].label is None
    assert len(bouts[1]) == 3
