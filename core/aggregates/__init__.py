from core.aggregates.synchronizer import AggregateSynchronizer

__all__ = ['AggregateSynchronizer']
