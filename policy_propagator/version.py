"""Policy Propagator Meta information.
   Policy Propagator keeps per-cluster encryption material for replicated policies.
"""
__title__ = 'policy_propagator'
__description__ = (
   'Per-cluster encryption key and initialization vector custody '
   'for replicated policy templates.'
)
__version__ = '0.3.0'
__license__ = 'Apache-2.0'
