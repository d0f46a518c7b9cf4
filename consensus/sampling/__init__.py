from .sampler import Sampler, UniformSampler, make_sampler

__all__ = ['Sampler', 'UniformSampler', 'make_sampler']
