"""Dataset split, classifier adapter and the train/apply flows."""
from .classical import ClassifierAdapter, ModelSource, ModelSpec, TrainedModel, create_classifier
from .split import stratified_split
