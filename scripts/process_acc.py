#!/usr/bin/env python
"""Offline processing: raw ACC CSV(s) + calibration -> one example row per complete bout."""
import argparse
import logging
from pathlib import Path

from acc.calibration import Calibrator
from acc.config import add_config_args, config_from_args
from acc.io import join_observations, read_acc_csv, read_calibration_csv, read_observations_csv
from acc.pipeline import BoutPipeline


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    ap = argparse.ArgumentParser()
    ap.add_argument("calibration_csv", type=Path)
    ap.add_argument("output_csv", type=Path)
    ap.add_argument("acc_csv", type=Path, nargs="+")
    ap.add_argument("--observations", type=Path)
    ap.add_argument("--unlabeled", action="store_true", help="Attach bout start time instead of label")
    add_config_args(ap)
    args = ap.parse_args()

    config = config_from_args(args)
    calibrator = Calibrator.from_records(read_calibration_csv(args.calibration_csv))
    raw = read_acc_csv(args.acc_csv)
    if args.observations:
        raw = join_observations(raw, read_observations_csv(args.observations))

    out = BoutPipeline(config, calibrator).run(raw, labeled=not args.unlabeled)
    args.output_csv.parent.mkdir(parents=True, exist_ok=True)
    out.to_csv(args.output_csv, index=False)


if __name__ == "__main__":
    main()
