from .base import Model, Estimator, Consensus, take, count_distinct

__all__ = ['Model', 'Estimator', 'Consensus', 'take', 'count_distinct']
