from .version import __version__
from .reconciler import PolicyReconciler, TemplateEncryptionConfig

__all__ = [
    "__version__",
    "PolicyReconciler",
    "TemplateEncryptionConfig",
]
