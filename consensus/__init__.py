"""
sac-consensus - robust model fitting by random sample consensus

Single-model, multi-model and multi-threaded RANSAC engines generic over
caller-supplied Estimator and Model objects.
"""

from .config import DEFAULT_CONFIG, ConsensusConfig, MultiConsensusConfig, ParallelConfig, load_config
from .errors import ConsensusError, InsufficientDataError, ConfigurationError
from .estimation import Model, Estimator, Consensus
from .sampling import UniformSampler
from .search import RANSAC, MultiRANSAC, ParallelRANSAC, ConsensusResult, required_trials

__all__ = [
    'DEFAULT_CONFIG',
    'ConsensusConfig',
    'MultiConsensusConfig',
    'ParallelConfig',
    'load_config',
    'ConsensusError',
    'InsufficientDataError',
    'ConfigurationError',
    'Model',
    'Estimator',
    'Consensus',
    'UniformSampler',
    'RANSAC',
    'MultiRANSAC',
    'ParallelRANSAC',
    'ConsensusResult',
    'required_trials',
]
__version__ = '1.0.0'
