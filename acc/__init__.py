"""ACC behaviour classification pipeline package.

Modules are organized by pipeline stages:
- io: calibration, raw ACC and observation readers
- calibration: raw counts to physical acceleration
- segmentation: bout identification strategies
- labels: behaviour label propagation within bouts
- windowing: bout integrity filter and bout iteration
- features: per-bout statistical features
- wide: long-to-wide reshaping and example assembly
- modeling: dataset split, classifier adapter, train/apply flows
- confidence: confidence score from class probabilities
- evaluation: metrics on held-out examples
"""
