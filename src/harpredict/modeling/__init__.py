"""
Modeling layer for partitioning, training and the classifier registry.

Provides a closed set of classifier kinds behind one train/predict interface.
"""
