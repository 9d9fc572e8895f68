"""File input for calibration, raw ACC and observation tables."""
from .readers import join_observations, read_acc_csv, read_calibration_csv, read_observations_csv
