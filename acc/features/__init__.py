"""Statistical features of complete bouts."""
from .bout import FEATURE_NAMES, extract_all, extract_features, features_frame
