from .heir import HeirClassification, HeirStatus, HeirInput, HeirRecord
from .estate import EstateInput, ReconciliationStatus

__all__ = [
    'HeirClassification',
    'HeirStatus',
    'HeirInput',
    'HeirRecord',
    'EstateInput',
    'ReconciliationStatus',
]
