from .ransac import RANSAC
from .multi import MultiRANSAC
from .parallel import ParallelRANSAC
from .result import Candidate, ConsensusResult
from .stopping import StoppingCriterion, required_trials

__all__ = [
    'RANSAC',
    'MultiRANSAC',
    'ParallelRANSAC',
    'Candidate',
    'ConsensusResult',
    'StoppingCriterion',
    'required_trials',
]
