"""
Auto-saving drafts for the editing screens.

Each draft holds the form state in memory and persists it through a
storage repository after a quiet period (see :mod:`.controller`).
Repository calls are synchronous and run through ``sync_to_async``.
"""
from lab.exceptions import DraftValidationError

from .controller import DebouncedSaveController, SaveState
from .registration import PatientRegistrationDraft
from .results import ResultEntryDraft
from .tables import CatalogDraft, ExpenseSheetDraft, TableDraft

__all__ = [
    'CatalogDraft',
    'DebouncedSaveController',
    'DraftValidationError',
    'ExpenseSheetDraft',
    'PatientRegistrationDraft',
    'ResultEntryDraft',
    'SaveState',
    'TableDraft',
]
